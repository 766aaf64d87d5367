"""
Write page ranges out as separate PDFs: one per outline entry, or fixed-size
chunks when there is no outline.

A range that fails to copy is logged and skipped; the others still get written.
"""

import logging
import re
from pathlib import Path
from typing import Sequence

from chapter_splitter.documents import DocumentAuthor
from chapter_splitter.errors import PageCopyFailure
from chapter_splitter.state import OutlineEntry, PageRange

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 50

_ILLEGAL_CHARS_RE = re.compile(r'[\\/:*?"<>|]')


def sanitize_title(title: str) -> str:
    return _ILLEGAL_CHARS_RE.sub("_", title)[:MAX_TITLE_LENGTH]


def plan_chapter_ranges(entries: Sequence[OutlineEntry],
                        total_pages: int) -> list[tuple[int, OutlineEntry, PageRange]]:
    """(1-based ordinal, entry, range) for every entry with a non-empty range.

    Each entry runs up to the next entry's target page, the last one to the
    end of the document.
    """
    plan: list[tuple[int, OutlineEntry, PageRange]] = []
    for i, entry in enumerate(entries):
        start = entry.target_page
        end = entries[i + 1].target_page if i + 1 < len(entries) else total_pages
        end = min(end, total_pages)

        if start >= end:
            logger.warning("Skipping %r: empty page range %d-%d", entry.title, start + 1, end)
            continue
        plan.append((i + 1, entry, PageRange(start, end)))
    return plan


def plan_fixed_ranges(total_pages: int, pages_per_file: int) -> list[PageRange]:
    if pages_per_file <= 0:
        raise ValueError(f"pages_per_file must be > 0, got {pages_per_file}")
    return [
        PageRange(start, min(start + pages_per_file, total_pages))
        for start in range(0, total_pages, pages_per_file)
    ]


def _write_range(author: DocumentAuthor, page_range: PageRange, path: Path) -> None:
    try:
        document = author.create_document()
        author.copy_pages(document, list(range(page_range.start, page_range.end)))
        path.write_bytes(author.serialize(document))
    except Exception as exc:
        raise PageCopyFailure(f"Pages {page_range.start + 1}-{page_range.end} -> {path.name}: {exc}") from exc


def split_by_outline(author: DocumentAuthor, entries: Sequence[OutlineEntry], total_pages: int,
                     output_dir: Path, base_name: str) -> list[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Splitting by %d outline entries", len(entries))

    written: list[Path] = []
    for ordinal, entry, page_range in plan_chapter_ranges(entries, total_pages):
        path = output_dir / f"{base_name}-{ordinal}-{sanitize_title(entry.title)}.pdf"
        try:
            _write_range(author, page_range, path)
        except PageCopyFailure as exc:
            logger.warning("Chapter %r not written: %s", entry.title, exc)
            continue
        logger.info("Wrote %s (pages %d-%d)", path.name, page_range.start + 1, page_range.end)
        written.append(path)
    return written


def split_by_pages(author: DocumentAuthor, total_pages: int, pages_per_file: int,
                   output_dir: Path, base_name: str) -> list[Path]:
    ranges = plan_fixed_ranges(total_pages, pages_per_file)
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Splitting %d pages into %d files of up to %d pages",
                total_pages, len(ranges), pages_per_file)

    written: list[Path] = []
    for ordinal, page_range in enumerate(ranges, start=1):
        path = output_dir / f"{base_name}-{ordinal}.pdf"
        try:
            _write_range(author, page_range, path)
        except PageCopyFailure as exc:
            logger.warning("Part %d not written: %s", ordinal, exc)
            continue
        logger.info("Wrote %s (pages %d-%d)", path.name, page_range.start + 1, page_range.end)
        written.append(path)
    return written
