from __future__ import annotations

"""High-level orchestration services."""

from .bundle_service import BundleResult, BundleService  # noqa: F401

__all__: list[str] = [
    "BundleResult",
    "BundleService",
]
