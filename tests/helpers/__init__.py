"""Test helper modules for the boardwise test suite.

- catalogs: in-memory catalog builders and on-disk catalog writers
- sysfs: FakeSysfs, a scratch procfs/sysfs tree for detection and probes
- cache_utils: cache reset utilities for test isolation
"""
from __future__ import annotations

from helpers.cache_utils import reset_boardwise_caches
from helpers.catalogs import (
    layer,
    make_catalog,
    profile,
    rule,
    write_catalog_dir,
)
from helpers.sysfs import FakeSysfs, build_rpi5_tree

__all__ = [
    "reset_boardwise_caches",
    "layer",
    "make_catalog",
    "profile",
    "rule",
    "write_catalog_dir",
    "FakeSysfs",
    "build_rpi5_tree",
]
