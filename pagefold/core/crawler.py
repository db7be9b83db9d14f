from __future__ import annotations

"""Page-graph crawler and resource inliner.

:class:`HtmlCrawler` parses one HTML page, rewrites its local references in
place and then works through the pages it links to:

* ``src`` targets are embedded as ``data:`` URLs,
* ``<link href>`` targets are embedded as type-less ``data:`` URLs,
* ``<a href>`` targets become ``#<page id>`` anchors and the linked page is
  queued (or, for SVG, registered verbatim) under its content hash.

Linked pages are processed from a work list rather than by recursion, so
the depth of the link graph is unbounded.

Values starting with the network prefix (``http``) are never dereferenced.
Unreadable references and malformed SVG leaves are logged and left as they
are; structural problems (unparseable page, missing ``<body>``,
serialization failure) abort the run.
"""

from collections import deque
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Deque, Mapping, NamedTuple, Optional, Tuple, Union

from lxml import etree as ET  # type: ignore

from pagefold.core.exceptions import MissingBodyError, PagefoldError, ParseError, ResourceLoadError
from pagefold.core.loader import FileSystemLoader, ResourceLoader
from pagefold.core.models import PageId, PageRegistry, PageWrapping
from pagefold.core.parser.html_utils import (
    DEFAULT_SVG_IGNORE_PREFIXES,
    Act,
    extract_body,
    extract_html_title,
    extract_svg_title,
    parse_html,
    parse_svg,
    serialize_children,
    walk,
)
from pagefold.core.utils import (
    DEFAULT_MEDIA_TYPES,
    create_data_url,
    has_skipped_prefix,
    is_network_reference,
    is_textual_media_type,
    media_type_for,
)

__all__ = ["CrawlerSettings", "HtmlCrawler", "process_html_page"]

PathLike = Union[str, Path]


def _as_tuple(value: Any) -> Tuple[str, ...]:
    """Accept a YAML scalar or sequence for list-valued settings."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


class _PendingPage(NamedTuple):
    """A linked page whose id is reserved but which is not processed yet."""

    path: Path
    search_context: Path
    page_id: PageId
    source: bytes


@dataclass(frozen=True)
class CrawlerSettings:
    """Tunables of the crawler, normally read from ``crawler.yml``."""

    network_prefix: str = "http"
    skip_prefixes: Tuple[str, ...] = ("#", "data:")
    missing_title: str = "Missing title"
    unknown_svg_title: str = "Unknown"
    inline_charset: str = "UTF-8"
    media_types: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MEDIA_TYPES))
    svg_caption_ignore_prefixes: Tuple[str, ...] = DEFAULT_SVG_IGNORE_PREFIXES
    document_title: str = "Bundled pages"

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None) -> "CrawlerSettings":
        """Build settings from a config section; absent keys keep their defaults."""
        config = config or {}
        defaults = cls()
        media_types = config.get("media_types")
        return cls(
            network_prefix=str(config.get("network_prefix", defaults.network_prefix)),
            skip_prefixes=_as_tuple(config.get("skip_prefixes", defaults.skip_prefixes)),
            missing_title=str(config.get("missing_title", defaults.missing_title)),
            unknown_svg_title=str(config.get("unknown_svg_title", defaults.unknown_svg_title)),
            inline_charset=str(config.get("inline_charset", defaults.inline_charset) or ""),
            media_types=(
                {str(k).lower().lstrip("."): str(v) for k, v in media_types.items()}
                if isinstance(media_types, Mapping) else dict(defaults.media_types)
            ),
            svg_caption_ignore_prefixes=_as_tuple(
                config.get("svg_caption_ignore_prefixes", defaults.svg_caption_ignore_prefixes)
            ),
            document_title=str(config.get("document_title", defaults.document_title)),
        )


def _strip_locator(value: str) -> str:
    """Drop ``?query`` and ``#fragment`` parts from a file reference."""
    return value.split("#", 1)[0].split("?", 1)[0]


class HtmlCrawler:
    """Rewrite one page and every local page reachable through ``<a href>``.

    Parameters
    ----------
    root_dir
        Directory of the root document; only used for diagnostics.
    loader
        Source of file contents (defaults to the local filesystem).
    settings
        Crawler rules; defaults mirror the packaged ``crawler.yml``.
    logger
        Logger receiving progress and warnings (defaults to this module's).
    """

    def __init__(self, root_dir: PathLike, loader: Optional[ResourceLoader] = None,
                 settings: Optional[CrawlerSettings] = None,
                 logger: Optional[logging.Logger] = None) -> None:
        self.root_dir = Path(root_dir)
        self.loader = loader if loader is not None else FileSystemLoader()
        self.settings = settings if settings is not None else CrawlerSettings()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._pending: Deque[_PendingPage] = deque()

    # ---------------------------------------------------------------------
    # PUBLIC API
    # ---------------------------------------------------------------------
    def process_page(self, current_file: PathLike, parent_search_context: PathLike,
                     registry: PageRegistry, source: Optional[bytes] = None) -> PageWrapping:
        """Parse *current_file*, rewrite its body and return the result.

        Every page reachable from it is then processed and added to
        *registry*; the page itself is not.  *source* may carry the already
        loaded bytes of *current_file* to avoid reading it twice.

        Raises:
            ResourceLoadError: if *current_file* itself cannot be read.
            ParseError: if the page cannot be parsed.
            MissingBodyError: if the page (or any page it links to) has no body.
            SerializationError: if the rewritten body cannot be serialized.
        """
        self._pending.clear()
        try:
            page = self._rewrite_page(Path(current_file), Path(parent_search_context), registry, source)
            while self._pending:
                pending = self._pending[0]
                linked = self._rewrite_page(pending.path, pending.search_context, registry,
                                            pending.source)
                self._pending.popleft()
                registry.insert(pending.page_id, linked)
        except PagefoldError:
            # Reservations of pages never processed
            while self._pending:
                registry.release(self._pending.popleft().page_id)
            raise

        return page

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    def _rewrite_page(self, current_file: Path, parent_search_context: Path,
                      registry: PageRegistry, source: Optional[bytes]) -> PageWrapping:
        """Rewrite a single page; newly linked pages are queued, not processed."""
        search_context = self._search_context_for(current_file, parent_search_context)
        self.logger.debug(
            "Processing file with context: search=\"%s\" ; %s", search_context, current_file
        )

        raw = source if source is not None else self.loader.read_bytes(current_file)
        document = parse_html(raw, current_file)

        title = extract_html_title(document)
        if title is None:
            self.logger.warning("Didn't find a title in \"%s\"", current_file)
            title = self.settings.missing_title
        else:
            self.logger.debug("Found title: \"%s\"", title)

        body = extract_body(document)
        if body is None:
            raise MissingBodyError("Couldn't find <body> in the file", current_file)

        def _visit(name: str, node: ET.Element) -> Act:
            self._rewrite_element(name, node, search_context, registry)
            return Act.NEXT

        walk(body, _visit)

        return PageWrapping(title=title, content=serialize_children(body, current_file))

    @staticmethod
    def _search_context_for(current_file: Path, parent_search_context: Path) -> Path:
        if current_file.parent.parts:
            return current_file.parent
        return parent_search_context

    def _local_reference(self, tag: str, attr: str, value: str) -> Optional[str]:
        """Return the file part of *value*, or None if it must not be loaded."""
        if is_network_reference(value, self.settings.network_prefix):
            self.logger.debug("Ignoring %s prefix'd <%s %s=\"..\">", self.settings.network_prefix, tag, attr)
            return None
        if has_skipped_prefix(value, self.settings.skip_prefixes):
            return None
        reference = _strip_locator(value).strip()
        return reference or None

    def _rewrite_element(self, tag: str, node: ET.Element, search_context: Path,
                         registry: PageRegistry) -> None:
        src = node.get("src")
        if src is not None:
            self._inline_src(tag, node, src, search_context)

        href = node.get("href")
        if href is not None:
            if tag == "link":
                self._inline_link(node, href, search_context)
            elif tag == "a":
                self._follow_anchor(node, href, search_context, registry)

    def _inline_src(self, tag: str, node: ET.Element, value: str, search_context: Path) -> None:
        reference = self._local_reference(tag, "src", value)
        if reference is None:
            return
        try:
            data = self.loader.read_bytes(search_context / reference)
        except ResourceLoadError as exc:
            self.logger.warning("Couldn't find referenced file, ignoring: %s", exc)
            return
        media_type = media_type_for(reference, self.settings.media_types)
        charset = self.settings.inline_charset if is_textual_media_type(media_type) else ""
        node.set("src", create_data_url(media_type, charset, data))
        self.logger.info(
            "Inlined <%s src=\"%s\"> as data (%d bytes) with search-ctx=\"%s\"",
            tag, value, len(data), search_context,
        )

    def _inline_link(self, node: ET.Element, value: str, search_context: Path) -> None:
        reference = self._local_reference("link", "href", value)
        if reference is None:
            return
        try:
            data = self.loader.read_bytes(search_context / reference)
        except ResourceLoadError as exc:
            self.logger.warning("Couldn't find referenced file, ignoring: %s", exc)
            return
        node.set("href", create_data_url("", self.settings.inline_charset, data))
        self.logger.info(
            "Loading <link href=\"%s\"> as data with search-ctx=\"%s\"", value, search_context
        )

    def _follow_anchor(self, node: ET.Element, value: str, search_context: Path,
                       registry: PageRegistry) -> None:
        reference = self._local_reference("a", "href", value)
        if reference is None:
            return
        linked_path = search_context / reference
        try:
            raw = self.loader.read_bytes(linked_path)
            text = raw.decode("utf-8")
        except ResourceLoadError as exc:
            self.logger.warning("Couldn't find referenced file, ignoring: %s", exc)
            return
        except UnicodeDecodeError as exc:
            self.logger.warning("Linked file \"%s\" is not UTF-8 text, ignoring: %s", linked_path, exc)
            return

        self.logger.info(
            "Found outgoing link <a href=\"%s\"> with search-ctx=\"%s\"", value, search_context
        )
        page_id = PageId.from_content(raw)
        node.set("href", page_id.anchor)

        if Path(reference).suffix.lower() == ".svg":
            self._register_svg(page_id, linked_path, raw, text, registry)
            return

        if not registry.reserve(page_id):
            self.logger.debug("Page already processed %s", linked_path)
            return

        self.logger.debug(
            "Found a new page! rootbase=\"%s\" current=\"%s\" search-ctx=\"%s\"",
            self.root_dir, linked_path, search_context,
        )
        self._pending.append(_PendingPage(linked_path, search_context, page_id, raw))

    def _register_svg(self, page_id: PageId, path: Path, raw: bytes, text: str,
                      registry: PageRegistry) -> None:
        """Register a linked SVG as an opaque leaf page; its links are not followed.

        The content is the file text as stored, byte order mark included.
        """
        if page_id in registry:
            self.logger.debug("SVG already registered %s", path)
            return
        try:
            caption = extract_svg_title(parse_svg(raw, path), self.settings.svg_caption_ignore_prefixes)
        except ParseError as exc:
            self.logger.warning("Couldn't read a caption from SVG, using placeholder: %s", exc)
            caption = None
        if caption is None:
            self.logger.debug("No caption found in SVG \"%s\"", path)
        registry.insert(page_id, PageWrapping(title=caption or self.settings.unknown_svg_title, content=text))


def process_html_page(root_dir: PathLike, current_file: PathLike, parent_search_context: PathLike,
                      registry: PageRegistry, *, loader: Optional[ResourceLoader] = None,
                      settings: Optional[CrawlerSettings] = None,
                      logger: Optional[logging.Logger] = None) -> PageWrapping:
    """Functional shortcut for ``HtmlCrawler(...).process_page(...)``."""
    crawler = HtmlCrawler(root_dir, loader=loader, settings=settings, logger=logger)
    return crawler.process_page(current_file, parent_search_context, registry)
