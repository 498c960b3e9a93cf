"""CPU: online core count and maximum frequency."""
from __future__ import annotations

import re

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

ONLINE = "/sys/devices/system/cpu/online"
CPU_DIR = "/sys/devices/system/cpu"
MAX_FREQ = "/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq"


def parse_cpu_list(text: str) -> int:
    """Count CPUs in a kernel cpu list such as ``"0-3,6"``."""
    total = 0
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        if "-" in part:
            lo, hi = part.split("-", 1)
            total += int(hi) - int(lo) + 1
        else:
            total += 1
    return total


class CpuValidator(ComponentValidator):
    name = "cpu"
    resource_names = ("cpufreq",)

    def _online_cores(self, context: ValidationContext) -> int:
        text = context.probe.read_text(ONLINE)
        if text:
            try:
                return parse_cpu_list(text)
            except ValueError as exc:
                raise ComponentFailure(f"unreadable cpu list {text!r}") from exc
        return sum(1 for n in context.probe.list_dir(CPU_DIR) if re.fullmatch(r"cpu\d+", n))

    def check(self, context: ValidationContext):
        cores = self._online_cores(context)
        min_cores = int(context.setting("min_cores", 1))
        if cores < min_cores:
            raise ComponentFailure(
                f"{cores} CPU(s) online, expected at least {min_cores}",
                metric=Metric("cores", cores),
            )

        khz = context.probe.read_int(MAX_FREQ)
        min_mhz = context.setting("min_freq_mhz")
        if khz is None:
            if min_mhz:
                raise ComponentFailure(f"cpufreq not available ({MAX_FREQ} missing)")
            return f"{cores} CPU(s) online", None

        mhz = khz / 1000
        metric = Metric("max_freq", mhz, "MHz")
        if min_mhz and mhz < float(min_mhz):
            raise ComponentFailure(
                f"max frequency {mhz:g} MHz below required {float(min_mhz):g} MHz", metric=metric
            )
        return f"{cores} CPU(s) online, max {mhz:g} MHz", metric
