"""
Rebuild outline entries from a table-of-contents page.

Text runs are grouped into visual lines; each link annotation on the page is
paired with the next unused line it sits on, and that line's text up to the
dotted leader becomes the title. Entries keep the page's top-to-bottom order.

Pages without link annotations can fall back to reading "title ..... 12"
lines directly; those entries are sorted by page with duplicates dropped.
"""

import logging
import re
from typing import Iterable

from chapter_splitter.documents import DocumentSource
from chapter_splitter.errors import UnresolvedDestination
from chapter_splitter.pipeline.bookmarks import normalize_entries
from chapter_splitter.pipeline.destinations import resolve_destination
from chapter_splitter.state import LinkAnnotation, OutlineEntry, TextLine, TextRun

logger = logging.getLogger(__name__)

_LINE_TOLERANCE = 2     # layout units, same line if tops differ by less
_MISMATCH_FACTOR = 2    # printed page numbers above page_count * this are noise

_LEADER_RE = re.compile(r"(?:[.·…•]\s*){2,}")
_LEADER_STRIP = ".·…• \t"

_TEXT_ENTRY_PATTERNS = [
    # Intro ........ 12 / Intro      12
    re.compile(r"^(.+?)(?:(?:[.·…•]\s*){2,}|\s{3,}|\t+)(\d+)$"),
    # Chapter 3 Methods 41 / 第3章 方法 41
    re.compile(r"^((?:第\s*\d+\s*[章节篇]|chapter\s+\d+).+?)\s*(\d+)$", re.IGNORECASE),
    # 3. Methods 41
    re.compile(r"^(\d+\.\s*.+?)\s*(\d+)$"),
]


def group_lines(runs: Iterable[TextRun]) -> list[TextLine]:
    """Group runs sharing a vertical position, top to bottom, each read left to right."""
    groups: list[tuple[int, list[TextRun]]] = []
    for run in runs:
        y = round(run.top)
        for key, members in groups:
            if abs(key - y) < _LINE_TOLERANCE:
                members.append(run)
                break
        else:
            groups.append((y, [run]))

    lines: list[TextLine] = []
    for key, members in sorted(groups, key=lambda g: g[0]):
        members.sort(key=lambda r: r.x)
        text = " ".join(r.text.strip() for r in members if r.text.strip())
        lines.append(TextLine(
            y=key,
            top=min(r.top for r in members),
            bottom=max(r.bottom for r in members),
            text=text,
        ))
    return lines


def title_fragment(text: str) -> str:
    """Text before the first dotted leader; empty when the line has none."""
    m = _LEADER_RE.search(text)
    if not m:
        return ""
    return text[:m.start()].strip()


def synthetic_title(ordinal: int) -> str:
    """Title for a link no text line could be matched to."""
    return str(ordinal)


def _line_holds(line: TextLine, annotation: LinkAnnotation) -> bool:
    centre = (annotation.top + annotation.bottom) / 2
    return line.top - _LINE_TOLERANCE <= centre <= line.bottom + _LINE_TOLERANCE


def match_line(lines: list[TextLine], titles: list[str],
               annotation: LinkAnnotation, start: int) -> int | None:
    """Index of the first titled line at or after `start` that holds the annotation."""
    for i in range(start, len(lines)):
        if titles[i] and _line_holds(lines[i], annotation):
            return i
    return None


def entries_from_links(source: DocumentSource, lines: list[TextLine],
                       annotations: list[LinkAnnotation]) -> list[OutlineEntry]:
    titles = [title_fragment(line.text) for line in lines]
    ordered = sorted(annotations, key=lambda a: a.top)

    entries: list[OutlineEntry] = []
    cursor = 0
    for ordinal, annotation in enumerate(ordered, start=1):
        try:
            page = resolve_destination(source, annotation.destination)
        except UnresolvedDestination as exc:
            logger.warning("Skipping link %d on TOC page: %s", ordinal, exc)
            continue

        matched = match_line(lines, titles, annotation, cursor)
        if matched is None:
            title = synthetic_title(ordinal)
            logger.info("No text line for link %d, titling it %r", ordinal, title)
        else:
            title = titles[matched]
            cursor = matched + 1
            logger.debug("Link %d -> line %d %r (page %d)", ordinal, matched, title, page + 1)

        entries.append(OutlineEntry(title=title, target_page=page, level=1))
    return entries


def entries_from_text(lines: list[TextLine], page_count: int) -> list[OutlineEntry]:
    """Parse 'title .... N' style lines where the page carries no links, sorted by page."""
    entries: list[OutlineEntry] = []
    for line in lines:
        for pattern in _TEXT_ENTRY_PATTERNS:
            m = pattern.match(line.text)
            if m:
                break
        else:
            continue

        title = m.group(1).strip().rstrip(_LEADER_STRIP)
        printed_page = int(m.group(2))
        if not title:
            continue
        if printed_page > page_count * _MISMATCH_FACTOR:
            logger.debug("Ignoring %r: page %d beyond document", title, printed_page)
            continue

        entries.append(OutlineEntry(title=title, target_page=max(printed_page - 1, 0), level=1))
    return normalize_entries(entries)


def parse_toc_page(source: DocumentSource, page_index: int,
                   text_only_fallback: bool = True) -> list[OutlineEntry]:
    lines = group_lines(source.text_runs(page_index))
    annotations = source.link_annotations(page_index)
    logger.info("TOC page %d: %d lines, %d links", page_index + 1, len(lines), len(annotations))

    if annotations:
        entries = entries_from_links(source, lines, annotations)
    elif text_only_fallback:
        logger.info("No links on TOC page, reading entries from text")
        entries = entries_from_text(lines, source.page_count)
    else:
        entries = []

    logger.info("Parsed %d entries from TOC page", len(entries))
    return entries
