"""
Find the table-of-contents page among the first pages of a document.

A page qualifies when it mentions a TOC keyword, shows a dotted leader in
front of a page number, and carries at least one link annotation. In lenient
mode the link is optional: keyword + leader, or leader + several numbers, is
enough.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from chapter_splitter.documents import DocumentSource

logger = logging.getLogger(__name__)

# Applied to lower-cased text with all whitespace removed
_LEADER_PATTERNS = [
    re.compile(r"[.·…•]{3,}\d+"),    # Intro.......12
]
_LENIENT_PATTERNS = [
    re.compile(r"\d+[.·…]{3,}"),          # 12.......
    re.compile(r"第.+章.+\d+"),
]
# Applied line by line to the unsquashed text
_LENIENT_LINE_PATTERNS = [
    re.compile(r"^\s*\d+\.\s*.+\d+\s*$", re.MULTILINE),    # 1. Intro 12
]
_NUMBER_TOKEN_RE = re.compile(r"\b\d{1,3}\b")
_MIN_NUMBER_TOKENS = 3


@dataclass(frozen=True)
class TocSignals:
    keyword: bool
    pattern: bool
    annotations: int
    number_tokens: int = 0


@dataclass(frozen=True)
class TocDecision:
    qualifies: bool
    fired: tuple[str, ...]


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text.lower())


def judge_toc_page(signals: TocSignals, lenient: bool = False) -> TocDecision:
    """Combine page signals into a TOC verdict, reporting which ones fired."""
    fired = []
    if signals.keyword:
        fired.append("keyword")
    if signals.pattern:
        fired.append("pattern")
    if signals.annotations > 0:
        fired.append("annotations")
    many_numbers = signals.number_tokens >= _MIN_NUMBER_TOKENS
    if many_numbers:
        fired.append("numbers")

    qualifies = signals.keyword and signals.pattern and signals.annotations > 0
    if not qualifies and lenient:
        qualifies = signals.pattern and (signals.keyword or many_numbers)
    return TocDecision(qualifies=qualifies, fired=tuple(fired))


def page_signals(text: str, annotation_count: int, keywords: Iterable[str],
                 lenient: bool = False) -> TocSignals:
    squashed = _squash(text)
    keyword = any(_squash(k) in squashed for k in keywords if k.strip())

    patterns = _LEADER_PATTERNS + (_LENIENT_PATTERNS if lenient else [])
    pattern = any(p.search(squashed) for p in patterns)
    if lenient and not pattern:
        pattern = any(p.search(text) for p in _LENIENT_LINE_PATTERNS)

    return TocSignals(
        keyword=keyword,
        pattern=pattern,
        annotations=annotation_count,
        number_tokens=len(_NUMBER_TOKEN_RE.findall(text)),
    )


def find_toc_page(source: DocumentSource, max_scan_pages: int,
                  keywords: Iterable[str], lenient: bool = False) -> int | None:
    """Zero-based index of the first qualifying page, or None."""
    keywords = list(keywords)
    pages_to_scan = min(max_scan_pages, source.page_count)
    logger.info("Scanning first %d pages for a table of contents", pages_to_scan)

    for index in range(pages_to_scan):
        signals = page_signals(
            source.page_text(index),
            len(source.link_annotations(index)),
            keywords,
            lenient=lenient,
        )
        decision = judge_toc_page(signals, lenient=lenient)
        logger.debug("Page %d signals: %s", index + 1, ", ".join(decision.fired) or "none")
        if decision.qualifies:
            logger.info("Table of contents found on page %d (%s)", index + 1, ", ".join(decision.fired))
            return index

    logger.info("No table of contents page found")
    return None
