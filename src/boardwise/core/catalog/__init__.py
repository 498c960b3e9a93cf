"""Platform catalog model and YAML loader."""
from __future__ import annotations

from .loader import (
    bundled_catalog_path,
    clear_catalog_cache,
    load_bundled_catalog,
    load_catalog,
    load_catalog_cached,
)
from .model import Catalog, fragments_by_id

__all__ = [
    "Catalog",
    "fragments_by_id",
    "load_catalog",
    "load_catalog_cached",
    "load_bundled_catalog",
    "bundled_catalog_path",
    "clear_catalog_cache",
]
