from __future__ import annotations

"""HTML/SVG parser helpers.

Provides lxml parsing and serialization plus the element walker and
extractors used by the crawler.
"""

from .html_utils import (  # noqa: F401
    Act,
    walk,
    parse_html,
    parse_svg,
    extract_html_title,
    extract_body,
    extract_svg_title,
    serialize_children,
)

__all__: list[str] = [
    "Act",
    "walk",
    "parse_html",
    "parse_svg",
    "extract_html_title",
    "extract_body",
    "extract_svg_title",
    "serialize_children",
]
