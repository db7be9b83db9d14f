from __future__ import annotations

"""Shared data structures used across the pagefold core.

The objects here are free of I/O so they can be reused in any context
(unit-tests, CLI, services).
"""

from dataclasses import dataclass
import hashlib
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

__all__ = ["PageId", "PageWrapping", "RenderItem", "PageRegistry"]


@dataclass(frozen=True)
class PageId:
    """Content address of a linked page.

    Wraps the SHA-256 digest of the page's original, unmodified source bytes.
    Equality and hashing only look at the digest.
    """

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != 32:
            raise ValueError(f"PageId digest must be 32 bytes, got {len(self.digest)}")

    @classmethod
    def from_content(cls, raw: Union[bytes, str]) -> "PageId":
        """Hash *raw* exactly; text is hashed as its UTF-8 encoding."""
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        return cls(hashlib.sha256(raw).digest())

    @classmethod
    def from_hex(cls, text: str) -> "PageId":
        return cls(bytes.fromhex(text))

    @property
    def hex(self) -> str:
        return self.digest.hex()

    @property
    def anchor(self) -> str:
        """In-document reference to the page, e.g. ``#3a7b...``."""
        return f"#{self.hex}"

    def __str__(self) -> str:
        return self.hex

    def __repr__(self) -> str:
        return f"PageId({self.hex[:12]}…)"


@dataclass(frozen=True)
class PageWrapping:
    """Title and rewritten body fragment of one page."""

    title: str
    content: str


@dataclass(frozen=True)
class RenderItem:
    """Pairing of a registered page with the anchor name it is rendered under."""

    linkmarker: PageId
    page: PageWrapping


class PageRegistry:
    """Deduplicating store of processed pages keyed by :class:`PageId`.

    A page id can be *reserved* before the page is processed so that a
    re-entrant discovery of the same page (a link cycle) is recognised as
    already visited.  Iteration only yields completed entries, in the order
    they were first reserved or inserted.
    """

    def __init__(self) -> None:
        self._pages: Dict[PageId, Optional[PageWrapping]] = {}
        self._pending: Set[PageId] = set()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def reserve(self, page_id: PageId) -> bool:
        """Mark *page_id* as in progress; return False if it is already known."""
        if page_id in self._pages:
            return False
        self._pages[page_id] = None
        self._pending.add(page_id)
        return True

    def insert(self, page_id: PageId, page: PageWrapping) -> bool:
        """Store *page* under *page_id*.

        Returns False (and keeps the existing entry) when the id already
        holds a completed page.
        """
        if self._pages.get(page_id) is not None:
            return False
        self._pages[page_id] = page
        self._pending.discard(page_id)
        return True

    def release(self, page_id: PageId) -> None:
        """Drop a reservation that will never be completed."""
        if page_id in self._pending:
            self._pending.discard(page_id)
            del self._pages[page_id]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages

    def is_pending(self, page_id: PageId) -> bool:
        return page_id in self._pending

    def get(self, page_id: PageId) -> Optional[PageWrapping]:
        return self._pages.get(page_id)

    def items(self) -> Iterator[Tuple[PageId, PageWrapping]]:
        for page_id, page in self._pages.items():
            if page is not None:
                yield page_id, page

    def __iter__(self) -> Iterator[PageId]:
        return (page_id for page_id, _ in self.items())

    def __len__(self) -> int:
        return len(self._pages) - len(self._pending)

    def render_items(self) -> List[RenderItem]:
        """Return the completed pages as :class:`RenderItem` objects."""
        return [RenderItem(linkmarker=page_id, page=page) for page_id, page in self.items()]
