"""I/O utilities for boardwise (read-only: the core never writes files)."""
from __future__ import annotations

from .yaml import dump_yaml_string, iter_yaml_files, read_yaml

__all__ = [
    "read_yaml",
    "dump_yaml_string",
    "iter_yaml_files",
]
