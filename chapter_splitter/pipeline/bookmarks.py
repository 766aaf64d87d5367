"""
Outline from the document's native bookmarks.

Only top-level bookmarks are used, all as level 1. Entries come back sorted by
target page with duplicate pages collapsed to the first occurrence.
"""

import logging

from chapter_splitter.documents import DocumentSource
from chapter_splitter.errors import UnresolvedDestination
from chapter_splitter.pipeline.destinations import resolve_destination
from chapter_splitter.state import OutlineEntry

logger = logging.getLogger(__name__)

_TOP_LEVEL = 1


def normalize_entries(entries: list[OutlineEntry]) -> list[OutlineEntry]:
    """Stable sort by target page, keep the first entry for each page."""
    ordered = sorted(entries, key=lambda e: e.target_page)
    unique: list[OutlineEntry] = []
    for entry in ordered:
        if unique and unique[-1].target_page == entry.target_page:
            logger.info("Dropping %r: page %d already starts %r",
                        entry.title, entry.target_page + 1, unique[-1].title)
            continue
        unique.append(entry)
    return unique


def extract_bookmark_outline(source: DocumentSource) -> list[OutlineEntry]:
    nodes = [n for n in source.outline() if n.level == _TOP_LEVEL]
    if not nodes:
        logger.info("No bookmarks found")
        return []

    entries: list[OutlineEntry] = []
    for ordinal, node in enumerate(nodes, start=1):
        if node.destination is None:
            logger.debug("Bookmark %r has no destination", node.title)
            continue
        try:
            page = resolve_destination(source, node.destination)
        except UnresolvedDestination as exc:
            logger.warning("Skipping bookmark %r: %s", node.title, exc)
            continue

        title = node.title.strip() or str(ordinal)
        entries.append(OutlineEntry(title=title, target_page=page, level=1))

    logger.info("Resolved %d of %d top-level bookmarks", len(entries), len(nodes))
    return normalize_entries(entries)
