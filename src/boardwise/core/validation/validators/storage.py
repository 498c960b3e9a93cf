"""Storage: block devices present with a non-zero size."""
from __future__ import annotations

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

BLOCK_DIR = "/sys/block"
SECTOR_BYTES = 512
_VIRTUAL_PREFIXES = ("loop", "ram", "zram")


class StorageValidator(ComponentValidator):
    name = "storage"
    resource_names = ("block",)

    def _size_bytes(self, context: ValidationContext, device: str) -> int:
        sectors = context.probe.read_int(f"{BLOCK_DIR}/{device}/size", 0) or 0
        return sectors * SECTOR_BYTES

    def check(self, context: ValidationContext):
        devices = [str(d) for d in context.setting("devices") or []]
        if not devices:
            devices = [
                d
                for d in context.probe.list_dir(BLOCK_DIR)
                if not d.startswith(_VIRTUAL_PREFIXES) and self._size_bytes(context, d) > 0
            ]
            if not devices:
                raise ComponentFailure(f"no physical block device under {BLOCK_DIR}")

        for device in devices:
            if not context.probe.exists(f"{BLOCK_DIR}/{device}"):
                raise ComponentFailure(f"block device {device} not found")
            if self._size_bytes(context, device) <= 0:
                raise ComponentFailure(f"block device {device} reports zero size")

        gib = round(self._size_bytes(context, devices[0]) / 1024**3, 2)
        return f"block device(s): {', '.join(devices)}", Metric("size", gib, "GiB")
