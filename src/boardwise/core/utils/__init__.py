"""Shared utilities for boardwise."""
from __future__ import annotations

from .merge import deep_merge, merge_lists

__all__ = ["deep_merge", "merge_lists"]
