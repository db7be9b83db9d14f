"""Top-level package for pagefold.

pagefold folds a tree of locally linked HTML/SVG pages into one
self-contained HTML document.  Front-ends (CLI, scripts) should only depend
on the public API exposed here rather than importing internal modules
directly.
"""

from .core.crawler import CrawlerSettings, HtmlCrawler, process_html_page
from .core.models import PageId, PageRegistry, PageWrapping, RenderItem
from .core.services import BundleService

__all__: list[str] = [
    "BundleService",
    "CrawlerSettings",
    "HtmlCrawler",
    "PageId",
    "PageRegistry",
    "PageWrapping",
    "RenderItem",
    "process_html_page",
]
