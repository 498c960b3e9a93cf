"""Hardware detection: build a HardwareDescriptor from the running system.

Reads the device-tree identity (``/proc/device-tree/model`` and
``compatible``), the CPU part from ``/proc/cpuinfo`` and total memory from
``/proc/meminfo`` (psutil on a live system without procfs), all relative
to a configurable root.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional, Tuple

import psutil

from boardwise.core.platform.models import HardwareDescriptor
from boardwise.core.validation.probe import Probe

logger = logging.getLogger(__name__)

MODEL_PATHS = ("/proc/device-tree/model", "/sys/firmware/devicetree/base/model")
COMPATIBLE_PATHS = ("/proc/device-tree/compatible", "/sys/firmware/devicetree/base/compatible")
CPUINFO = "/proc/cpuinfo"
MEMINFO = "/proc/meminfo"


class HardwareDetector:
    def __init__(self, root: Path | str = "/") -> None:
        self.probe = Probe(root)

    def _read_raw(self, paths: Tuple[str, ...]) -> Optional[bytes]:
        for rel in paths:
            p = self.probe.path(rel)
            try:
                return p.read_bytes()
            except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
                continue
        return None

    def read_model(self) -> str:
        raw = self._read_raw(MODEL_PATHS)
        if raw is not None:
            return raw.decode("utf-8", errors="replace").replace("\x00", "").strip()
        # No device tree: fall back to the cpuinfo "Model" line.
        cpuinfo = self.probe.read_text(CPUINFO) or ""
        m = re.search(r"^Model\s*:\s*(.+)$", cpuinfo, re.MULTILINE)
        return m.group(1) if m else ""

    def read_compatible(self) -> Tuple[str, ...]:
        """NUL-separated compatible list, most specific first."""
        raw = self._read_raw(COMPATIBLE_PATHS)
        if not raw:
            return ()
        return tuple(s for s in raw.decode("utf-8", errors="replace").split("\x00") if s.strip())

    def read_cpu_part(self) -> Optional[str]:
        cpuinfo = self.probe.read_text(CPUINFO) or ""
        m = re.search(r"^CPU part\s*:\s*(\S+)", cpuinfo, re.MULTILINE)
        return m.group(1) if m else None

    def read_memory_bytes(self) -> Optional[int]:
        meminfo = self.probe.read_text(MEMINFO) or ""
        m = re.search(r"^MemTotal:\s*(\d+)\s*kB", meminfo, re.MULTILINE)
        if m:
            return int(m.group(1)) * 1024
        if self.probe.root == Path("/"):
            # Live system without procfs (containers, non-Linux hosts).
            return int(psutil.virtual_memory().total)
        return None

    def detect(self) -> HardwareDescriptor:
        descriptor = HardwareDescriptor(
            model=self.read_model(),
            compatible=self.read_compatible(),
            cpu_part=self.read_cpu_part(),
            memory_bytes=self.read_memory_bytes(),
            source=f"detected:{self.probe.root}",
        )
        logger.debug("Detected hardware: %s", descriptor.to_dict())
        return descriptor


def detect_hardware(root: Path | str = "/") -> HardwareDescriptor:
    return HardwareDetector(root).detect()


__all__ = ["HardwareDetector", "detect_hardware"]
