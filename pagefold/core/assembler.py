from __future__ import annotations

"""Render the root page and every registered page into one HTML document.

The output skeleton lives in ``templates/single_page.html``; page sections
and the navigation list are injected by placeholder substitution.  Page
content is inserted verbatim (it is already serialized markup); titles are
escaped.
"""

import html
import logging
import os
from typing import Iterable, List, Optional

from pagefold.core.models import PageWrapping, RenderItem

logger = logging.getLogger(__name__)

__all__ = ["SinglePageAssembler"]

_TITLE_PLACEHOLDER = "<!-- TITLE -->"
_NAVIGATION_PLACEHOLDER = "<!-- NAVIGATION -->"
_PAGES_PLACEHOLDER = "<!-- PAGES -->"


def _load_template() -> str:
    template_dir = os.path.join(os.path.dirname(__file__), "templates")
    template_path = os.path.join(template_dir, "single_page.html")
    with open(template_path, "r", encoding="utf-8") as f:
        return f.read()


class SinglePageAssembler:
    """Fill the single-page template.

    The root page comes first; the remaining items follow in the order
    given, which only affects display.
    """

    def __init__(self, template: Optional[str] = None, document_title: str = "Bundled pages") -> None:
        self.template = template if template is not None else _load_template()
        self.document_title = document_title

    def render(self, root: PageWrapping, items: Iterable[RenderItem]) -> str:
        items = list(items)
        title = root.title.strip() or self.document_title
        sections: List[str] = [self._render_section(root, anchor=None)]
        sections.extend(self._render_section(item.page, anchor=item.linkmarker.hex) for item in items)

        logger.debug("Assembling document title=%r pages=%d", title, len(items) + 1)
        # PAGES last: page content must not be scanned for placeholders
        return (
            self.template
            .replace(_TITLE_PLACEHOLDER, html.escape(title))
            .replace(_NAVIGATION_PLACEHOLDER, self._render_navigation(items))
            .replace(_PAGES_PLACEHOLDER, "\n".join(sections))
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _render_navigation(items: List[RenderItem]) -> str:
        if not items:
            return ""
        entries = "\n".join(
            f'  <li><a href="#{item.linkmarker.hex}">{html.escape(item.page.title)}</a></li>'
            for item in items
        )
        return f'<nav class="pages">\n<ul>\n{entries}\n</ul>\n</nav>'

    @staticmethod
    def _render_section(page: PageWrapping, anchor: Optional[str]) -> str:
        if anchor is None:
            opening = '<section class="page root">'
        else:
            opening = f'<section class="page" id="{anchor}">'
        return (
            f"{opening}\n"
            f'<h1 class="page-title">{html.escape(page.title)}</h1>\n'
            f"{page.content}\n"
            "</section>"
        )
