from __future__ import annotations

"""Filesystem access for the crawler.

The crawler never touches the disk directly; it asks a
:class:`ResourceLoader` for bytes.  :class:`FileSystemLoader` is the real
implementation, :class:`MemoryLoader` serves an in-memory file map so the
rewriting logic can be exercised without I/O.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Protocol, Union, runtime_checkable

from pagefold.core.exceptions import ResourceLoadError

logger = logging.getLogger(__name__)

__all__ = ["ResourceLoader", "FileSystemLoader", "MemoryLoader"]


@runtime_checkable
class ResourceLoader(Protocol):
    """Protocol for anything that can hand out file contents."""

    def read_bytes(self, path: Path) -> bytes:
        """Return the exact bytes stored at *path*.

        Raises:
            ResourceLoadError: if the file does not exist or cannot be read.
        """
        ...


class FileSystemLoader:
    """Read files from the local filesystem."""

    def read_bytes(self, path: Path) -> bytes:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ResourceLoadError(f"Cannot read file: {exc.strerror or exc}", path, exc) from exc
        logger.debug("I/O: read path=%s bytes=%d", path, len(data))
        return data


def _normalise(path: Union[str, Path]) -> str:
    return os.path.normpath(str(path)).replace("\\", "/")


class MemoryLoader:
    """Serve files from a ``{path: content}`` mapping.

    Paths are normalised (``a/./b/../c.html`` == ``a/c.html``).  Text values
    are stored as UTF-8.  Every requested path is recorded in
    :attr:`requests`, including failed ones.
    """

    def __init__(self, files: Mapping[Union[str, Path], Union[bytes, str]]) -> None:
        self._files: Dict[str, bytes] = {}
        for key, value in files.items():
            self.add(key, value)
        self.requests: List[str] = []

    def add(self, path: Union[str, Path], content: Union[bytes, str]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[_normalise(path)] = content

    def read_bytes(self, path: Path) -> bytes:
        key = _normalise(path)
        self.requests.append(key)
        try:
            return self._files[key]
        except KeyError:
            raise ResourceLoadError("No such file", path) from None
