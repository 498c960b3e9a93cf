"""GPU: enabled description node and a DRM card."""
from __future__ import annotations

import re

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

DRM_DIR = "/sys/class/drm"


class GpuValidator(ComponentValidator):
    name = "gpu"
    resource_names = ("drm",)

    def check(self, context: ValidationContext):
        node = context.setting("node")
        if node:
            if not context.description.has_node(node):
                raise ComponentFailure(f"GPU node {node} missing from hardware description")
            status = context.description.get(node, "status", "okay")
            if status != "okay":
                raise ComponentFailure(f"GPU node {node} has status {status!r}")

        cards = [n for n in context.probe.list_dir(DRM_DIR) if re.fullmatch(r"card\d+", n)]
        if not cards:
            raise ComponentFailure(f"no DRM card under {DRM_DIR}", metric=Metric("cards", 0))
        return f"{len(cards)} DRM card(s): {', '.join(cards)}", Metric("cards", len(cards))
