"""
Error taxonomy. Only DocumentLoadFailure is fatal, and only for one document.
"""


class ChapterSplitterError(Exception):
    pass


class UnresolvedDestination(ChapterSplitterError):
    """An outline or link target could not be mapped to a page index."""


class DocumentLoadFailure(ChapterSplitterError):
    """The source document could not be opened or parsed."""


class PageCopyFailure(ChapterSplitterError):
    """A single output range could not be copied or serialized."""
