"""Test configuration and shared fixtures for pagefold.

Provides temporary site directories, in-memory loaders and isolation of the
process-wide configuration singleton.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Union

import pytest

from pagefold.config import ConfigManager
from pagefold.core.crawler import CrawlerSettings, HtmlCrawler
from pagefold.core.loader import MemoryLoader

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"


@pytest.fixture
def temp_dir():
    """Creates a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, temp_dir):
    """Point user config and log output at an empty directory and reset the singleton."""
    config_dir = temp_dir / "user-config"
    config_dir.mkdir()
    monkeypatch.setenv("PAGEFOLD_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("PAGEFOLD_LOG_DIR", str(temp_dir / "logs"))
    monkeypatch.delenv("PAGEFOLD_DEBUG_MODULES", raising=False)
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def crawl_logger() -> logging.Logger:
    """Logger injected into crawlers so caplog sees records regardless of CLI set-up."""
    return logging.getLogger("tests.crawler")


@pytest.fixture
def make_crawler(crawl_logger):
    """Build an ``HtmlCrawler`` over an in-memory file map."""

    def _make(files: Dict[str, Union[bytes, str]], settings: CrawlerSettings = None):
        loader = MemoryLoader(files)
        crawler = HtmlCrawler(".", loader=loader, settings=settings, logger=crawl_logger)
        return crawler, loader

    return _make


@pytest.fixture
def write_site(temp_dir):
    """Write ``{relative path: content}`` below a fresh site directory."""

    def _write(files: Dict[str, Union[bytes, str]]) -> Path:
        site = temp_dir / "site"
        for rel, content in files.items():
            path = site / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                path.write_text(content, encoding="utf-8")
            else:
                path.write_bytes(content)
        return site

    return _write


def page(body: str, title: str = None) -> str:
    """Return a minimal HTML document around *body*."""
    head = f"<head><title>{title}</title></head>" if title is not None else "<head></head>"
    return f"<!DOCTYPE html><html>{head}<body>{body}</body></html>"
