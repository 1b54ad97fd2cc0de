from __future__ import annotations

from .cache import CacheStore, search_cache_key
from .export import CSV_HEADER, default_export_name, export_csv

__all__ = [
    "CSV_HEADER",
    "CacheStore",
    "default_export_name",
    "export_csv",
    "search_cache_key",
]
