"""
Outline discovery: native bookmarks first, then a table-of-contents page.

Never raises. A stage that blows up counts as a stage that found nothing.
"""

import logging
from typing import Any, Callable, TypeVar

from chapter_splitter.config import ProcessOptions
from chapter_splitter.documents import DocumentSource
from chapter_splitter.pipeline.bookmarks import extract_bookmark_outline, normalize_entries
from chapter_splitter.pipeline.locator import find_toc_page
from chapter_splitter.pipeline.toc_parser import parse_toc_page
from chapter_splitter.state import OutlineResult, OutlineSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run_stage(name: str, default: T, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception("Stage %s failed, continuing without it", name)
        return default


def extract_outline(source: DocumentSource, options: ProcessOptions | None = None) -> OutlineResult:
    options = options or ProcessOptions()

    entries = _run_stage("bookmarks", [], extract_bookmark_outline, source)
    if entries:
        logger.info("Outline from bookmarks: %d entries", len(entries))
        return OutlineResult(tuple(entries), OutlineSource.NATIVE_BOOKMARKS)

    toc_index = _run_stage(
        "toc-locate", None, find_toc_page,
        source, options.max_toc_scan_pages, options.toc_keywords,
        lenient=options.lenient_toc_detection,
    )
    if toc_index is None:
        logger.info("No outline found")
        return OutlineResult.empty()

    entries = _run_stage(
        "toc-parse", [], parse_toc_page,
        source, toc_index, text_only_fallback=options.text_only_fallback,
    )
    if not entries:
        logger.info("TOC page %d yielded no entries", toc_index + 1)
        return OutlineResult.empty()

    if options.sort_toc_entries:
        entries = normalize_entries(entries)

    logger.info("Outline from TOC page %d: %d entries", toc_index + 1, len(entries))
    return OutlineResult(tuple(entries), OutlineSource.TOC_PAGE)
