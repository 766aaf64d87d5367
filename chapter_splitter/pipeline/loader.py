"""
PDF access through pdfplumber, with pdfminer for outlines and destinations.

Geometry is reported in pdfplumber's top-down space: a larger `top` is lower
on the page.
"""

import logging
import math
from pathlib import Path
from typing import Any

import pdfplumber
from pdfminer.pdfdocument import PDFDestinationNotFound, PDFNoOutlines
from pdfminer.pdftypes import resolve1
from pdfminer.psparser import PSLiteral
from pdfminer.utils import decode_text

from chapter_splitter.errors import DocumentLoadFailure
from chapter_splitter.state import LinkAnnotation, OutlineNode, TextRun

logger = logging.getLogger(__name__)


def _literal_name(value: Any) -> str | None:
    value = resolve1(value)
    if isinstance(value, PSLiteral):
        value = value.name
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return value if isinstance(value, str) else None


def _normalize_destination(value: Any) -> Any:
    """Unwrap indirect refs and the << /D [...] >> dictionary form."""
    value = resolve1(value)
    if isinstance(value, dict):
        value = resolve1(value.get("D"))
    return value


def _action_destination(action: Any) -> Any:
    action = resolve1(action)
    if not isinstance(action, dict):
        return None
    if _literal_name(action.get("S")) != "GoTo":
        return None
    return action.get("D")


def _is_finite(*values: Any) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


class PlumberDocument:
    """DocumentSource over an open pdfplumber PDF."""

    def __init__(self, pdf: "pdfplumber.PDF") -> None:
        self._pdf = pdf
        self._page_ids = {page.page_obj.pageid: i for i, page in enumerate(pdf.pages)}

    def __enter__(self) -> "PlumberDocument":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._pdf.close()

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def page_text(self, index: int) -> str:
        return self._pdf.pages[index].extract_text() or ""

    def text_runs(self, index: int) -> list[TextRun]:
        words = self._pdf.pages[index].extract_words(keep_blank_chars=True)
        return [
            TextRun(text=w["text"], x=float(w["x0"]), top=float(w["top"]), bottom=float(w["bottom"]))
            for w in words
            if w.get("text") and _is_finite(w.get("x0"), w.get("top"), w.get("bottom"))
        ]

    def link_annotations(self, index: int) -> list[LinkAnnotation]:
        links: list[LinkAnnotation] = []
        for annot in self._pdf.pages[index].annots:
            data = resolve1(annot.get("data")) or {}
            if _literal_name(data.get("Subtype")) != "Link":
                continue
            if not _is_finite(annot["x0"], annot["top"], annot["x1"], annot["bottom"]):
                continue

            dest = data.get("Dest")
            if dest is None:
                dest = _action_destination(data.get("A"))

            left, right = sorted((float(annot["x0"]), float(annot["x1"])))
            top, bottom = sorted((float(annot["top"]), float(annot["bottom"])))
            links.append(LinkAnnotation(bbox=(left, top, right, bottom),
                                        destination=_normalize_destination(dest)))
        return links

    def outline(self) -> list[OutlineNode]:
        try:
            raw = list(self._pdf.doc.get_outlines())
        except PDFNoOutlines:
            return []

        nodes: list[OutlineNode] = []
        for level, title, dest, action, _se in raw:
            if dest is None:
                dest = _action_destination(action)
            if isinstance(title, bytes):
                title = decode_text(title)
            nodes.append(OutlineNode(
                title=str(title or ""),
                destination=_normalize_destination(dest),
                level=level,
            ))
        return nodes

    def named_destination(self, name: Any) -> Any:
        if isinstance(name, PSLiteral):
            name = name.name
        keys = [name]
        if isinstance(name, bytes):
            keys.append(name.decode("latin-1"))
        elif isinstance(name, str):
            keys.append(name.encode("latin-1", errors="ignore"))

        for key in keys:
            try:
                found = self._pdf.doc.get_dest(key)
            except (PDFDestinationNotFound, KeyError, TypeError):
                continue
            if found is not None:
                return _normalize_destination(found)
        return None

    def page_index(self, page_ref: Any) -> int:
        objid = getattr(page_ref, "objid", None)
        if objid not in self._page_ids:
            raise LookupError(f"No page for reference {page_ref!r}")
        return self._page_ids[objid]


def open_document(path: str | Path) -> PlumberDocument:
    """Open a PDF for reading. Raises DocumentLoadFailure."""
    path = Path(path)
    if not path.exists():
        raise DocumentLoadFailure(f"PDF not found: {path}")

    logger.info("Opening %s", path)
    try:
        pdf = pdfplumber.open(str(path))
    except Exception as exc:
        raise DocumentLoadFailure(f"Cannot parse {path}: {exc}") from exc

    try:
        return PlumberDocument(pdf)
    except Exception as exc:
        pdf.close()
        raise DocumentLoadFailure(f"Cannot read page tree of {path}: {exc}") from exc
