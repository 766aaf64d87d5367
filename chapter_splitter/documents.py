"""
Narrow capability interfaces for the two document collaborators.

The pipeline only talks to these; pdfplumber and pypdf live behind them in
pipeline/loader.py and pipeline/author.py.
"""

from typing import Any, Protocol, Sequence

from chapter_splitter.state import LinkAnnotation, OutlineNode, TextRun


class DocumentSource(Protocol):
    @property
    def page_count(self) -> int: ...

    def page_text(self, index: int) -> str: ...

    def text_runs(self, index: int) -> list[TextRun]: ...

    def link_annotations(self, index: int) -> list[LinkAnnotation]: ...

    def outline(self) -> list[OutlineNode]: ...

    def named_destination(self, name: Any) -> Any:
        """Explicit destination for a named one, or None if the name is unknown."""
        ...

    def page_index(self, page_ref: Any) -> int:
        """Zero-based index of the page a destination points at. Raises on unknown refs."""
        ...


class DocumentAuthor(Protocol):
    def create_document(self) -> Any: ...

    def copy_pages(self, target: Any, page_indices: Sequence[int]) -> None: ...

    def serialize(self, target: Any) -> bytes: ...
