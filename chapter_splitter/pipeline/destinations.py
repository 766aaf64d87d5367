"""
Resolve an outline or link destination to a zero-based page index.

Explicit destinations are arrays whose first element is the page; named
destinations go through the document's name table first.
"""

from typing import Any

from chapter_splitter.documents import DocumentSource
from chapter_splitter.errors import UnresolvedDestination


def _is_empty(destination: Any) -> bool:
    if destination is None:
        return True
    if isinstance(destination, (list, tuple, str, bytes)):
        return len(destination) == 0
    return False


def resolve_destination(source: DocumentSource, destination: Any) -> int:
    """Page index for `destination`. Raises UnresolvedDestination."""
    if _is_empty(destination):
        raise UnresolvedDestination("Empty destination")

    if isinstance(destination, (list, tuple)):
        explicit = destination
    else:
        try:
            explicit = source.named_destination(destination)
        except Exception as exc:
            raise UnresolvedDestination(f"Named destination {destination!r} lookup failed: {exc}") from exc
        if not isinstance(explicit, (list, tuple)) or not explicit:
            raise UnresolvedDestination(f"Named destination {destination!r} not found")

    try:
        index = source.page_index(explicit[0])
    except Exception as exc:
        raise UnresolvedDestination(f"Page lookup failed for {explicit[0]!r}: {exc}") from exc

    if not 0 <= index < source.page_count:
        raise UnresolvedDestination(f"Page index {index} outside document")
    return index
