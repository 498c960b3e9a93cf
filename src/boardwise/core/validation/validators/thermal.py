"""Thermal: hottest zone under the configured ceiling."""
from __future__ import annotations

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

THERMAL_DIR = "/sys/class/thermal"
DEFAULT_MAX_CELSIUS = 85.0


class ThermalValidator(ComponentValidator):
    name = "thermal"
    resource_names = ("thermal",)

    def check(self, context: ValidationContext):
        readings: dict[str, float] = {}
        for zone in context.probe.glob(THERMAL_DIR, "thermal_zone*"):
            millideg = context.probe.read_int(f"{zone}/temp")
            if millideg is not None:
                readings[zone.rsplit("/", 1)[-1]] = millideg / 1000
        if not readings:
            raise ComponentFailure(f"no readable thermal zones under {THERMAL_DIR}")

        hottest = max(readings, key=lambda z: readings[z])
        celsius = readings[hottest]
        ceiling = float(context.setting("max_celsius", DEFAULT_MAX_CELSIUS))
        metric = Metric("temperature", celsius, "C")
        if celsius > ceiling:
            raise ComponentFailure(
                f"{hottest} at {celsius:g} C exceeds {ceiling:g} C", metric=metric
            )
        return f"{hottest} at {celsius:g} C (limit {ceiling:g} C)", metric
