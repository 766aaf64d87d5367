"""
Processing options, with defaults overridable through CHAPTER_SPLITTER_* environment variables.
"""

import os
from dataclasses import dataclass

DEFAULT_TOC_KEYWORDS = ("contents", "table of contents", "目录", "catalog")

_ENV_PREFIX = "CHAPTER_SPLITTER_"
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProcessOptions:
    fallback_mode: bool = False
    pages_per_file: int = 20
    max_toc_scan_pages: int = 10
    toc_keywords: tuple[str, ...] = DEFAULT_TOC_KEYWORDS
    lenient_toc_detection: bool = False
    text_only_fallback: bool = True
    sort_toc_entries: bool = False

    def __post_init__(self) -> None:
        if self.pages_per_file <= 0:
            raise ValueError(f"pages_per_file must be > 0, got {self.pages_per_file}")
        if self.max_toc_scan_pages <= 0:
            raise ValueError(f"max_toc_scan_pages must be > 0, got {self.max_toc_scan_pages}")
        if not self.toc_keywords:
            raise ValueError("toc_keywords must not be empty")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def options_from_env() -> ProcessOptions:
    """Build options from the environment (a loaded .env counts)."""
    keywords = os.environ.get(_ENV_PREFIX + "TOC_KEYWORDS")
    toc_keywords = DEFAULT_TOC_KEYWORDS
    if keywords:
        toc_keywords = tuple(k.strip() for k in keywords.split(",") if k.strip()) or DEFAULT_TOC_KEYWORDS

    return ProcessOptions(
        fallback_mode=_env_bool("FALLBACK_MODE", False),
        pages_per_file=_env_int("PAGES_PER_FILE", 20),
        max_toc_scan_pages=_env_int("MAX_TOC_SCAN", 10),
        toc_keywords=toc_keywords,
        lenient_toc_detection=_env_bool("LENIENT_TOC", False),
        sort_toc_entries=_env_bool("SORT_TOC_ENTRIES", False),
    )
