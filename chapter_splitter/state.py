"""
Shared value objects for the outline and splitting pipeline.

Frozen dataclasses rather than TypedDicts: stages hand these on and never mutate them.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class OutlineSource(Enum):
    NATIVE_BOOKMARKS = "bookmarks"
    TOC_PAGE = "toc_page"
    NONE = "none"


@dataclass(frozen=True)
class OutlineEntry:
    title: str
    target_page: int     # 0-indexed
    level: int = 1


@dataclass(frozen=True)
class OutlineResult:
    entries: tuple[OutlineEntry, ...] = ()
    source: OutlineSource = OutlineSource.NONE

    @classmethod
    def empty(cls) -> "OutlineResult":
        return cls((), OutlineSource.NONE)


@dataclass(frozen=True)
class OutlineNode:
    """A native bookmark as read from the document, destination still unresolved."""
    title: str
    destination: Any
    level: int = 1


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    top: float       # top-down layout units
    bottom: float


@dataclass(frozen=True)
class TextLine:
    y: float         # grouping key, rounded top of the first run
    top: float
    bottom: float
    text: str


@dataclass(frozen=True)
class LinkAnnotation:
    bbox: tuple[float, float, float, float]   # (left, top, right, bottom)
    destination: Any

    @property
    def top(self) -> float:
        return self.bbox[1]

    @property
    def bottom(self) -> float:
        return self.bbox[3]


@dataclass(frozen=True)
class PageRange:
    start: int
    end: int         # exclusive

    def __len__(self) -> int:
        return max(0, self.end - self.start)


@dataclass
class ProcessResult:
    document: Path
    outline: OutlineResult
    split_mode: str = "none"     # chapters, fixed, none
    outputs: list[Path] = field(default_factory=list)

    def summary(self) -> str:
        if self.split_mode == "chapters":
            return (f"{self.document.name}: outline from {self.outline.source.value} "
                    f"({len(self.outline.entries)} entries), wrote {len(self.outputs)} chapter files")
        if self.split_mode == "fixed":
            return (f"{self.document.name}: no outline found, fixed-size fallback "
                    f"wrote {len(self.outputs)} files")
        return f"{self.document.name}: no outline found and fallback disabled, left unsplit"
