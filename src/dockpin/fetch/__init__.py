"""Verified package fetch APIs."""

from .http import DEFAULT_CACHE_DIR, PARTIAL_DIRNAME, cache_path_for, fetch_package

__all__ = ["DEFAULT_CACHE_DIR", "PARTIAL_DIRNAME", "cache_path_for", "fetch_package"]
