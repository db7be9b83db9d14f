from __future__ import annotations

"""High-level service folding a page tree into one document.

Entry-point for any front-end (CLI, tests, scripts) that needs to turn a
root HTML file into a single self-contained HTML file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from pagefold.config import ConfigManager
from pagefold.core.assembler import SinglePageAssembler
from pagefold.core.crawler import CrawlerSettings, HtmlCrawler
from pagefold.core.loader import FileSystemLoader, ResourceLoader
from pagefold.core.models import PageRegistry, PageWrapping, RenderItem
from pagefold.core.utils import save_text_atomic

logger = logging.getLogger(__name__)

__all__ = ["BundleResult", "BundleService"]


@dataclass
class BundleResult:
    """Outcome of a crawl: the root page plus every linked page found."""

    root: PageWrapping
    items: List[RenderItem]
    document: str

    @property
    def page_count(self) -> int:
        return len(self.items) + 1


class BundleService:
    """Business-logic façade with no CLI dependencies."""

    def __init__(self, loader: Optional[ResourceLoader] = None,
                 settings: Optional[CrawlerSettings] = None,
                 assembler: Optional[SinglePageAssembler] = None) -> None:
        if settings is None:
            settings = CrawlerSettings.from_config(ConfigManager().get_crawler_config())
        self.settings = settings
        self.loader = loader if loader is not None else FileSystemLoader()
        self.assembler = assembler if assembler is not None else SinglePageAssembler(
            document_title=settings.document_title
        )
        self.logger = logger

    # ---------------------------------------------------------------------
    # PUBLIC API
    # ---------------------------------------------------------------------
    def render(self, root_file: Union[str, Path]) -> BundleResult:
        """Crawl *root_file* and assemble the single-page document in memory."""
        root_file = Path(root_file)
        root_dir = root_file.parent
        registry = PageRegistry()

        crawler = HtmlCrawler(root_dir, loader=self.loader, settings=self.settings,
                              logger=logging.getLogger("pagefold.core.crawler"))
        self.logger.info("Folding pages starting at %s", root_file)
        root_page = crawler.process_page(root_file, root_dir, registry)

        items = registry.render_items()
        document = self.assembler.render(root_page, items)
        self.logger.info("Collected %d linked page(s) besides the root", len(items))
        return BundleResult(root=root_page, items=items, document=document)

    def build(self, root_file: Union[str, Path], dest: Union[str, Path]) -> BundleResult:
        """Render *root_file* and write the result to *dest*.

        Nothing is written when crawling or rendering fails; the write itself
        is atomic.
        """
        result = self.render(root_file)
        save_text_atomic(dest, result.document)
        self.logger.info("Wrote %s (%d page(s))", dest, result.page_count)
        return result
