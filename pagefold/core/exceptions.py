from __future__ import annotations

"""Exception classes raised while folding a page graph into one document.

Only :class:`ResourceLoadError` is recovered inside the crawler (for single
``src``/``href`` references).  Everything else affects the structural
integrity of a document and aborts the whole run.
"""

from pathlib import Path
from typing import Optional, Union

__all__ = [
    "PagefoldError",
    "ParseError",
    "MissingBodyError",
    "ResourceLoadError",
    "SerializationError",
]


class PagefoldError(Exception):
    """Base exception for all pagefold errors.

    Carries the offending file so the CLI can name it in its diagnostic.
    """

    def __init__(self, message: str, file_path: Optional[Union[str, Path]] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.file_path = Path(file_path) if file_path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        if self.file_path is not None:
            return f"[{self.file_path}] {super().__str__()}"
        return super().__str__()


class ParseError(PagefoldError):
    """Raised when a document is empty, undecodable or rejected by the parser."""
    pass


class MissingBodyError(PagefoldError):
    """Raised when a root or linked HTML document has no ``<body>`` element."""
    pass


class ResourceLoadError(PagefoldError):
    """Raised when a referenced file cannot be read.

    The crawler logs and skips these for individual references; a failure to
    read the root document itself propagates.
    """
    pass


class SerializationError(PagefoldError):
    """Raised when a rewritten tree cannot be converted back to text."""
    pass
