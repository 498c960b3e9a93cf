"""Peripherals: configured I2C/SPI buses.

Each configured bus is a shared resource, so two invocations probing the
same bus are serialized by the pipeline.
"""
from __future__ import annotations

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

BUS_DIRS = ("/sys/bus/i2c/devices", "/sys/bus/spi/devices", "/dev")


class PeripheralsValidator(ComponentValidator):
    name = "peripherals"

    def _buses(self, context: ValidationContext) -> list[str]:
        return [str(b) for b in context.setting("buses") or []]

    def resources(self, context: ValidationContext) -> tuple[str, ...]:
        return tuple(f"bus:{b}" for b in self._buses(context))

    def check(self, context: ValidationContext):
        buses = self._buses(context)
        if not buses:
            return "no peripheral buses configured", Metric("buses", 0)
        missing = [
            b for b in buses if not any(context.probe.exists(f"{d}/{b}") for d in BUS_DIRS)
        ]
        found = len(buses) - len(missing)
        if missing:
            raise ComponentFailure(f"missing bus(es): {', '.join(missing)}", metric=Metric("buses", found))
        return f"buses: {', '.join(buses)}", Metric("buses", found)
