"""
Shared fixtures: in-memory document fakes and small on-the-fly PDFs.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import pytest
from pypdf import PdfWriter

from chapter_splitter.state import LinkAnnotation, OutlineNode, TextRun


@dataclass(frozen=True)
class PageRef:
    number: int


@dataclass
class FakePage:
    text: str = ""
    runs: list[TextRun] = field(default_factory=list)
    links: list[LinkAnnotation] = field(default_factory=list)


class FakeDocument:
    """DocumentSource backed by plain Python objects."""

    def __init__(self, pages: int | list[FakePage] = 1, outline: list[OutlineNode] | None = None,
                 named: dict[Any, Any] | None = None) -> None:
        self.pages = [FakePage() for _ in range(pages)] if isinstance(pages, int) else pages
        self._outline = outline or []
        self._named = named or {}
        self.pages_read: list[int] = []

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def page_text(self, index: int) -> str:
        self.pages_read.append(index)
        return self.pages[index].text

    def text_runs(self, index: int) -> list[TextRun]:
        return list(self.pages[index].runs)

    def link_annotations(self, index: int) -> list[LinkAnnotation]:
        return list(self.pages[index].links)

    def outline(self) -> list[OutlineNode]:
        return list(self._outline)

    def named_destination(self, name: Any) -> Any:
        return self._named.get(name)

    def page_index(self, page_ref: Any) -> int:
        if not isinstance(page_ref, PageRef):
            raise LookupError(f"not a page ref: {page_ref!r}")
        return page_ref.number


def dest(page: int) -> list:
    """Explicit destination pointing at a zero-based page."""
    return [PageRef(page), "/Fit"]


def link(top: float, page: int | None, height: float = 14.0) -> LinkAnnotation:
    return LinkAnnotation(bbox=(72.0, top, 400.0, top + height),
                          destination=dest(page) if page is not None else None)


def toc_run(text: str, top: float, x: float = 72.0) -> TextRun:
    return TextRun(text=text, x=x, top=top, bottom=top + 12.0)


class FakeAuthor:
    """DocumentAuthor that records copied ranges instead of writing PDFs."""

    def __init__(self, fail_on: Sequence[int] = ()) -> None:
        self.fail_on = set(fail_on)
        self.copies: list[list[int]] = []

    def create_document(self) -> list[int]:
        return []

    def copy_pages(self, target: list[int], page_indices: Sequence[int]) -> None:
        if self.fail_on & set(page_indices):
            raise RuntimeError("page copy exploded")
        target.extend(page_indices)

    def serialize(self, target: list[int]) -> bytes:
        self.copies.append(list(target))
        return b"%PDF-fake " + ",".join(map(str, target)).encode()


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _link_target(style: str, page_id: int, target: int) -> str:
    explicit = f"[{page_id} 0 R /Fit]"
    if style == "goto":
        return f"/A << /S /GoTo /D {explicit} >>"
    if style == "dests-dict":
        return f"/Dest /p{target}"
    if style == "name-tree":
        return f"/Dest (p{target})"
    return f"/Dest {explicit}"


def write_text_pdf(path: Path, pages: list[dict], link_style: str = "dest") -> Path:
    """Assemble a Helvetica-only PDF.

    Each page dict may hold "lines": [(x, y, text)] in PDF user space and
    "links": [((x0, y0, x1, y1), target_page_index)].

    link_style picks how links name their target: "dest" (explicit array),
    "goto" (GoTo action), "dests-dict" (name looked up in the catalog /Dests)
    or "name-tree" (string looked up in the /Names /Dests tree).
    """
    count = len(pages)
    page_ids = [4 + 2 * i for i in range(count)]

    targets = sorted({t for page in pages for _, t in page.get("links", [])})
    catalog = "<< /Type /Catalog /Pages 2 0 R"
    if link_style == "dests-dict":
        catalog += " /Dests << %s >>" % " ".join(
            f"/p{t} [{page_ids[t]} 0 R /Fit]" for t in targets)
    elif link_style == "name-tree":
        catalog += " /Names << /Dests << /Names [%s] >> >>" % " ".join(
            f"(p{t}) [{page_ids[t]} 0 R /Fit]" for t in sorted(targets, key=lambda t: f"p{t}"))
    catalog += " >>"

    objects: dict[int, bytes] = {
        1: catalog.encode(),
        2: ("<< /Type /Pages /Kids [%s] /Count %d >>"
            % (" ".join(f"{p} 0 R" for p in page_ids), count)).encode(),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    }

    for i, page in enumerate(pages):
        content = "".join(
            f"BT /F1 12 Tf {x} {y} Td ({_escape(text)}) Tj ET\n"
            for x, y, text in page.get("lines", [])
        ).encode("latin-1")
        annots = " ".join(
            f"<< /Type /Annot /Subtype /Link /Rect [{x0} {y0} {x1} {y1}] "
            f"/Border [0 0 0] {_link_target(link_style, page_ids[target], target)} >>"
            for (x0, y0, x1, y1), target in page.get("links", [])
        )
        objects[page_ids[i]] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> "
            f"/Contents {page_ids[i] + 1} 0 R /Annots [{annots}] >>"
        ).encode()
        objects[page_ids[i] + 1] = (b"<< /Length %d >>\nstream\n" % len(content)
                                    + content + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += b"%d 0 obj\n" % num + objects[num] + b"\nendobj\n"

    xref_at = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += b"%010d 00000 n \n" % offsets[num]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)

    path.write_bytes(bytes(out))
    return path


def write_bookmarked_pdf(path: Path, total_pages: int, bookmarks: list[tuple[str, int]]) -> Path:
    writer = PdfWriter()
    for _ in range(total_pages):
        writer.add_blank_page(width=612, height=792)
    for title, page in bookmarks:
        writer.add_outline_item(title, page)
    with open(path, "wb") as fh:
        writer.write(fh)
    return path


@pytest.fixture
def toc_pdf(tmp_path: Path) -> Path:
    """Ten pages; page 2 is a linked table of contents."""
    toc_page = {
        "lines": [
            (72, 700, "Contents"),
            (72, 660, "Intro ........ 3"),
            (72, 630, "Methods ........ 5"),
            (72, 600, "Results ........ 8"),
        ],
        "links": [
            ((72, 656, 400, 672), 2),
            ((72, 626, 400, 642), 4),
            ((72, 596, 400, 612), 7),
        ],
    }
    pages = [{"lines": [(72, 700, "A Report")]}, toc_page]
    pages += [{"lines": [(72, 700, f"Page {n}")]} for n in range(3, 11)]
    return write_text_pdf(tmp_path / "report.pdf", pages)


@pytest.fixture
def bookmarked_pdf(tmp_path: Path) -> Path:
    return write_bookmarked_pdf(tmp_path / "book.pdf", 15,
                                [("Intro", 0), ("Body", 5), ("Appendix", 12)])


@pytest.fixture
def plain_pdf(tmp_path: Path) -> Path:
    return write_text_pdf(tmp_path / "plain.pdf",
                          [{"lines": [(72, 700, f"Page {n}")]} for n in range(1, 46)])
