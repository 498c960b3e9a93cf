"""A scratch procfs/sysfs tree for detection and validator tests.

Paths are given in their absolute on-device form (``/sys/class/drm``) and
written under the fake root, which is what ``Probe`` and ``HardwareDetector``
read from.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping


class FakeSysfs:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def write(self, rel: str, content: str | bytes) -> Path:
        path = self.root / rel.lstrip("/")
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def mkdir(self, rel: str) -> Path:
        path = self.root / rel.lstrip("/")
        path.mkdir(parents=True, exist_ok=True)
        return path

    # ------------------------------------------------------------ identity

    def device_tree(self, model: str, compatible: Iterable[str] = ()) -> None:
        self.write("/proc/device-tree/model", model.encode("utf-8") + b"\x00")
        compat = b"".join(c.encode("utf-8") + b"\x00" for c in compatible)
        if compat:
            self.write("/proc/device-tree/compatible", compat)

    def cpuinfo(self, text: str) -> None:
        self.write("/proc/cpuinfo", text)

    def meminfo(self, total_kb: int) -> None:
        self.write("/proc/meminfo", f"MemTotal:       {total_kb} kB\nMemFree:        1024 kB\n")

    # ---------------------------------------------------------- components

    def cpus(self, online: str = "0-3", max_khz: int | None = None) -> None:
        self.write("/sys/devices/system/cpu/online", online + "\n")
        if max_khz is not None:
            self.write("/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq", f"{max_khz}\n")

    def drm_cards(self, count: int = 1) -> None:
        self.mkdir("/sys/class/drm")
        for i in range(count):
            self.mkdir(f"/sys/class/drm/card{i}")
            self.mkdir(f"/sys/class/drm/card{i}-HDMI-A-1")

    def sound_cards(self, cards: Mapping[str, str]) -> None:
        lines = []
        for number, (card_id, desc) in enumerate(cards.items()):
            lines.append(f" {number} [{card_id:<15}]: {desc}")
            lines.append(f"                      {desc}")
        self.write("/proc/asound/cards", "\n".join(lines) + "\n")

    def net(self, *interfaces: str) -> None:
        for name in ("lo", *interfaces):
            self.mkdir(f"/sys/class/net/{name}")

    def block(self, device: str, sectors: int) -> None:
        self.write(f"/sys/block/{device}/size", f"{sectors}\n")

    def thermal(self, *millidegrees: int) -> None:
        for i, temp in enumerate(millidegrees):
            self.write(f"/sys/class/thermal/thermal_zone{i}/temp", f"{temp}\n")

    def bus(self, rel: str) -> None:
        self.mkdir(rel)


def build_rpi5_tree(root: Path) -> FakeSysfs:
    """A healthy Raspberry Pi 5 as seen through procfs/sysfs."""
    fs = FakeSysfs(root)
    fs.device_tree("Raspberry Pi 5 Model B Rev 1.0", ["raspberrypi,5-model-b", "brcm,bcm2712"])
    fs.cpuinfo(
        "processor\t: 0\nBogoMIPS\t: 108.00\nCPU part\t: 0xd0b\n\n"
        "Revision\t: d04170\nModel\t\t: Raspberry Pi 5 Model B Rev 1.0\n"
    )
    fs.meminfo(8_245_632)
    fs.cpus("0-3", max_khz=2_400_000)
    fs.drm_cards(1)
    fs.sound_cards({"vc4hdmi0": "vc4-hdmi - vc4-hdmi-0"})
    fs.net("eth0", "wlan0")
    fs.block("mmcblk0", 62_333_952)
    fs.block("loop0", 0)
    fs.thermal(48_300)
    fs.bus("/dev/i2c-1")
    return fs
