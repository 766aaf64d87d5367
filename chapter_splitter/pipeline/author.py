"""
Page copying and serialization through pypdf.
"""

from io import BytesIO
from pathlib import Path
from typing import Sequence

from pypdf import PdfReader, PdfWriter


class PypdfAuthor:
    """DocumentAuthor that copies pages out of one source PDF."""

    def __init__(self, source_path: str | Path) -> None:
        self._reader = PdfReader(str(source_path))

    def create_document(self) -> PdfWriter:
        return PdfWriter()

    def copy_pages(self, target: PdfWriter, page_indices: Sequence[int]) -> None:
        for index in page_indices:
            target.add_page(self._reader.pages[index])

    def serialize(self, target: PdfWriter) -> bytes:
        buffer = BytesIO()
        target.write(buffer)
        return buffer.getvalue()
