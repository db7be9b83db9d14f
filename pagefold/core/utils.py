from __future__ import annotations

"""Simple reusable helper functions.

Apart from :func:`save_text_atomic` these helpers are side-effect-free and
contain no disk I/O; they can be used across all layers of pagefold.
"""

from pathlib import Path
from typing import Mapping, Optional, Sequence, Union
import base64
import logging
import os
import tempfile

__all__ = [
    "DEFAULT_MEDIA_TYPES",
    "create_data_url",
    "media_type_for",
    "is_textual_media_type",
    "is_network_reference",
    "has_skipped_prefix",
    "save_text_atomic",
]

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPES: Mapping[str, str] = {
    "svg": "image/svg+xml",
    "png": "image/png",
}


# ---------------------------------------------------------------------------
# Data URLs
# ---------------------------------------------------------------------------

def create_data_url(media_type: str, charset: str, data: bytes) -> str:
    """Return a ``data:`` URL embedding *data*.

    The result has the form ``data:<media_type>[;charset=<charset>];base64,<payload>``
    where the payload uses the standard base64 alphabet without ``=``
    padding.  The charset segment is left out when *charset* is empty or
    ``US-ASCII`` (the implicit default of data URLs).  An empty
    *media_type* is accepted and yields a type-less URL.

    Examples:
        >>> create_data_url("image/png", "", b"\\x89PNG")
        'data:image/png;base64,iVBORw'
        >>> create_data_url("", "utf-8", b"a")
        'data:;charset=utf-8;base64,YQ'
    """
    charset = (charset or "").strip()
    if charset and charset.upper() != "US-ASCII":
        charset_segment = f";charset={charset}"
    else:
        charset_segment = ""
    payload = base64.b64encode(data).decode("ascii").rstrip("=")
    return f"data:{media_type or ''}{charset_segment};base64,{payload}"


def media_type_for(reference: str, table: Optional[Mapping[str, str]] = None) -> str:
    """Classify *reference* by its lower-cased file extension.

    Unknown extensions map to an empty string.
    """
    table = DEFAULT_MEDIA_TYPES if table is None else table
    suffix = Path(reference).suffix.lower().lstrip(".")
    if not suffix:
        return ""
    return table.get(suffix, "")


def is_textual_media_type(media_type: str) -> bool:
    """Return True when a charset parameter is meaningful for *media_type*."""
    if not media_type:
        return True
    media_type = media_type.lower()
    return media_type.startswith("text/") or media_type.endswith("+xml")


# ---------------------------------------------------------------------------
# Reference classification
# ---------------------------------------------------------------------------

def is_network_reference(value: str, prefix: str = "http") -> bool:
    """Return True if *value* must be treated as remote.

    This is a plain textual prefix test, not a URL parse: ``httpfoo`` counts
    as remote as well.
    """
    return value.startswith(prefix)


def has_skipped_prefix(value: str, prefixes: Sequence[str]) -> bool:
    """Return True for values that never name a local file (``#frag``, ``data:``)."""
    return any(value.startswith(p) for p in prefixes if p)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def save_text_atomic(path: Union[str, Path], text: str, *, encoding: str = "utf-8") -> None:
    """Write *text* to *path* so that readers never observe a partial file.

    The content goes to a temporary file in the destination directory which
    is then renamed over *path*.
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("I/O: wrote document path=%s chars=%d", path, len(text))
    except Exception:
        logger.error("I/O FAIL: write document path=%s", path, exc_info=True)
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
