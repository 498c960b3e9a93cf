"""Base types for component validators.

- Status / ValidationResult / Metric: the per-component outcome
- ValidationContext: everything a validator may read
- ComponentValidator: base class every validator extends
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional

from boardwise.core.exceptions import ComponentFailure

if TYPE_CHECKING:
    from boardwise.core.config.resolver import ResolvedConfiguration
    from boardwise.core.overlays.models import ComposedDescription, HardwareDescription

    from .probe import Probe


class Status(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


def parse_status(raw: Optional[str]) -> Status:
    if isinstance(raw, Status):
        return raw
    v = str(raw or "").strip().lower()
    for s in Status:
        if v == s.value:
            return s
    raise ValueError(f"Invalid status: {raw} (expected one of: pass, fail, skip)")


@dataclass(frozen=True)
class Metric:
    """A measured value attached to a result (frequency, temperature, ...)."""

    name: str
    value: float
    unit: str = ""

    def __str__(self) -> str:
        unit = f" {self.unit}" if self.unit else ""
        return f"{self.name}={self.value:g}{unit}"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class ValidationResult:
    component: str
    status: Status
    diagnostic: str = ""
    metric: Metric | None = None
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        return self.status is Status.FAIL

    def to_dict(self) -> dict[str, Any]:
        return {
            "component": self.component,
            "status": self.status.value,
            "diagnostic": self.diagnostic,
            "metric": self.metric.to_dict() if self.metric else None,
            "duration": round(self.duration, 6),
        }


def passed(component: str, diagnostic: str = "", metric: Metric | None = None) -> ValidationResult:
    return ValidationResult(component=component, status=Status.PASS, diagnostic=diagnostic, metric=metric)


def failed(component: str, diagnostic: str, metric: Metric | None = None) -> ValidationResult:
    return ValidationResult(component=component, status=Status.FAIL, diagnostic=diagnostic, metric=metric)


def skipped(component: str, reason: str) -> ValidationResult:
    return ValidationResult(component=component, status=Status.SKIP, diagnostic=reason)


@dataclass
class ValidationContext:
    """Read-only inputs for one validator invocation."""

    component: str
    composed: "ComposedDescription"
    config: "ResolvedConfiguration"
    probe: "Probe"
    timeout: float = 10.0
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def description(self) -> "HardwareDescription":
        return self.composed.description

    @property
    def settings(self) -> Mapping[str, Any]:
        """This component's section of the resolved configuration."""
        section = self.config.get(self.component)
        return section if isinstance(section, Mapping) else {}

    def setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)


class ComponentValidator:
    """Base class for component validators.

    Subclasses set ``name`` and implement :meth:`check`, which returns a
    passing diagnostic (and optional metric) or raises
    :class:`ComponentFailure`. The pipeline turns any other exception into a
    ``fail`` result, so ``check`` never needs to guard against them.
    """

    name: str = ""
    requires: Optional[str] = None
    resource_names: tuple[str, ...] = ()

    @property
    def capability(self) -> str:
        return self.requires or self.name

    def resources(self, context: ValidationContext) -> tuple[str, ...]:
        """Shared hardware resources this invocation touches."""
        return self.resource_names

    def check(self, context: ValidationContext) -> tuple[str, Metric | None]:
        raise NotImplementedError

    def validate(self, context: ValidationContext) -> ValidationResult:
        try:
            diagnostic, metric = self.check(context)
        except ComponentFailure as exc:
            return failed(self.name, str(exc), exc.metric)
        return passed(self.name, diagnostic, metric)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = [
    "Status",
    "parse_status",
    "Metric",
    "ValidationResult",
    "passed",
    "failed",
    "skipped",
    "ValidationContext",
    "ComponentValidator",
]
