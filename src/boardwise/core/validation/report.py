"""Aggregated validation report."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .base import Status, ValidationResult


class RunMode(str, Enum):
    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


def parse_run_mode(raw: Optional[str]) -> RunMode:
    if isinstance(raw, RunMode):
        return raw
    v = str(raw or "").strip().lower().replace("_", "-")
    if not v:
        return RunMode.COLLECT_ALL
    for m in RunMode:
        if v == m.value:
            return m
    raise ValueError(f"Invalid run mode: {raw} (expected one of: fail-fast, collect-all)")


@dataclass
class ValidationReport:
    """Results in caller selection order plus the overall verdict.

    The verdict is ``pass`` iff no result failed; skips never block it.
    """

    results: list[ValidationResult] = field(default_factory=list)
    mode: RunMode = RunMode.COLLECT_ALL

    @property
    def verdict(self) -> Status:
        return Status.FAIL if any(r.failed for r in self.results) else Status.PASS

    @property
    def passed(self) -> bool:
        return self.verdict is Status.PASS

    def count(self, status: Status) -> int:
        return sum(1 for r in self.results if r.status is status)

    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if r.failed]

    def result_for(self, component: str) -> ValidationResult | None:
        return next((r for r in self.results if r.component == component), None)

    @property
    def components(self) -> list[str]:
        return [r.component for r in self.results]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "verdict": self.verdict.value,
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "total": len(self.results),
                "passed": self.count(Status.PASS),
                "failed": self.count(Status.FAIL),
                "skipped": self.count(Status.SKIP),
            },
        }


__all__ = ["RunMode", "parse_run_mode", "ValidationReport"]
