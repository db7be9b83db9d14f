from __future__ import annotations

"""Low-level lxml helpers shared by the crawler.

Wraps parsing and serialization of HTML pages and SVG leaves, and provides
the generic element walker together with the title/body/SVG-caption
extractors built on top of it.
"""

from enum import Enum
import codecs
import html
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from lxml import etree as ET  # type: ignore
import lxml.html  # type: ignore

from pagefold.core.exceptions import ParseError, SerializationError

logger = logging.getLogger(__name__)

__all__ = [
    "Act",
    "DEFAULT_SVG_IGNORE_PREFIXES",
    "local_name",
    "walk",
    "parse_html",
    "parse_svg",
    "extract_html_title",
    "extract_body",
    "extract_svg_title",
    "serialize_children",
]

# criterion/gnuplot chart boilerplate, never a meaningful caption
DEFAULT_SVG_IGNORE_PREFIXES = ("Point estimate", "gnuplot_")

_Source = Optional[Union[str, Path]]


class Act(Enum):
    """Decision returned by a :func:`walk` callback for the current element."""

    BREAK = "break"        # stop the whole traversal
    CONTINUE = "continue"  # skip this element's subtree
    NEXT = "next"          # descend normally


def local_name(element: ET.Element) -> str:
    """Return the tag of *element* without its namespace."""
    tag = element.tag
    if tag.startswith("{"):
        return ET.QName(tag).localname
    return tag


# ---------------------------------------------------------------------------
# Tree walker
# ---------------------------------------------------------------------------

def walk(root: ET.Element, callback: Callable[[str, ET.Element], Act]) -> None:
    """Visit every element below (and including) *root* in document order.

    Depth-first pre-order using a LIFO work list; children are pushed in
    reverse so the first child is visited first.  Comments and processing
    instructions are skipped without invoking *callback*.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node.tag, str):
            continue
        act = callback(local_name(node), node)
        if act is Act.BREAK:
            return
        if act is Act.CONTINUE:
            continue
        stack.extend(reversed(node))


# ---------------------------------------------------------------------------
# Parsing / serialization
# ---------------------------------------------------------------------------

def _html_parser() -> lxml.html.HTMLParser:
    return lxml.html.HTMLParser(
        encoding="utf-8",
        remove_blank_text=False,
        remove_comments=False,
        no_network=True,
        default_doctype=False,
    )


def _svg_parser() -> ET.XMLParser:
    return ET.XMLParser(recover=True, resolve_entities=False, no_network=True)


def _as_utf8(raw: Union[bytes, str], source: _Source) -> bytes:
    """Return *raw* as UTF-8 bytes without BOM, validating the encoding."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("Document is not valid UTF-8", source, exc) from exc
    return raw


def parse_html(raw: Union[bytes, str], source: _Source = None) -> ET.Element:
    """Parse an HTML document and return its root ``<html>`` element.

    Raises:
        ParseError: if the input is empty, not UTF-8 or rejected by libxml2.
    """
    data = _as_utf8(raw, source)
    if not data.strip():
        raise ParseError("Document is empty", source)
    try:
        root = lxml.html.document_fromstring(data, parser=_html_parser())
    except (ET.ParserError, ET.XMLSyntaxError, ValueError) as exc:
        raise ParseError(f"Could not parse HTML: {exc}", source, exc) from exc
    logger.debug("Parsed HTML source=%s bytes=%d", source, len(data))
    return root


def parse_svg(raw: Union[bytes, str], source: _Source = None) -> ET.Element:
    """Parse an SVG document with a recovering XML parser."""
    data = _as_utf8(raw, source)
    try:
        root = ET.fromstring(data, parser=_svg_parser())
    except (ET.XMLSyntaxError, ValueError) as exc:
        raise ParseError(f"Could not parse SVG: {exc}", source, exc) from exc
    if root is None:
        raise ParseError("SVG document has no root element", source)
    return root


def serialize_children(element: ET.Element, source: _Source = None) -> str:
    """Serialize the content of *element* (its text and children) as HTML."""
    try:
        parts = [html.escape(element.text, quote=False)] if element.text else []
        for child in element:
            parts.append(lxml.html.tostring(child, encoding="unicode", method="html", with_tail=True))
    except (ET.SerialisationError, ValueError, UnicodeError) as exc:
        raise SerializationError(f"Could not serialize <{local_name(element)}>: {exc}", source, exc) from exc
    return "".join(parts)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

def extract_html_title(root: ET.Element) -> Optional[str]:
    """Return the text of the first ``<title>`` that starts with text."""
    found: Dict[str, str] = {}

    def _visit(name: str, node: ET.Element) -> Act:
        if name == "title" and node.text:
            found["title"] = node.text
            return Act.BREAK
        return Act.NEXT

    walk(root, _visit)
    return found.get("title")


def extract_body(root: ET.Element) -> Optional[ET.Element]:
    """Return the first ``<body>`` element, or None."""
    found = []

    def _visit(name: str, node: ET.Element) -> Act:
        if name == "body":
            found.append(node)
            return Act.BREAK
        return Act.NEXT

    walk(root, _visit)
    return found[0] if found else None


def _first_element(node: ET.Element) -> Optional[ET.Element]:
    for child in node:
        if isinstance(child.tag, str):
            return child
    return None


def extract_svg_title(root: ET.Element,
                      ignore_prefixes: Iterable[str] = DEFAULT_SVG_IGNORE_PREFIXES) -> Optional[str]:
    """Pick a human caption out of an SVG chart.

    Charts written by benchmarking tools wrap their labels in a single inner
    element (``<text><tspan>label</tspan></text>``).  Each ``title``/``text``
    element contributes the leading text of its first child element; the
    first label that is not tool boilerplate wins.
    """
    captions: Dict[str, None] = {}

    def _visit(name: str, node: ET.Element) -> Act:
        if name in ("title", "text"):
            if node.text and node.text.strip():
                return Act.NEXT
            inner = _first_element(node)
            if inner is not None and inner.text and inner.text.strip():
                captions.setdefault(inner.text.strip(), None)
        return Act.NEXT

    walk(root, _visit)
    prefixes = tuple(p for p in ignore_prefixes if p)
    for caption in captions:
        if prefixes and caption.startswith(prefixes):
            continue
        return caption
    return None
