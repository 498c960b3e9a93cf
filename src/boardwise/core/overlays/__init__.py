"""Hardware descriptions and device-tree overlay composition."""
from __future__ import annotations

from .composer import OverlayComposer, compose_overlays
from .models import (
    ComposedDescription,
    DeletionRecord,
    HardwareDescription,
    OverlayFragment,
    OverlayManifest,
    OverlayWrite,
    OverrideRecord,
    SkippedFragment,
    is_within,
    normalize_node_path,
)

__all__ = [
    "OverlayComposer",
    "compose_overlays",
    "ComposedDescription",
    "DeletionRecord",
    "HardwareDescription",
    "OverlayFragment",
    "OverlayManifest",
    "OverlayWrite",
    "OverrideRecord",
    "SkippedFragment",
    "is_within",
    "normalize_node_path",
]
