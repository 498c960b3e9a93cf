"""Component validation: validators, registry, pipeline and report."""
from __future__ import annotations

from .base import (
    ComponentValidator,
    Metric,
    Status,
    ValidationContext,
    ValidationResult,
    failed,
    parse_status,
    passed,
    skipped,
)
from .pipeline import CANCELLED, NOT_ATTEMPTED, CancellationToken, ValidatorPipeline, run_validation
from .probe import Probe
from .registry import ValidatorRegistry
from .report import RunMode, ValidationReport, parse_run_mode

__all__ = [
    "ComponentValidator",
    "Metric",
    "Status",
    "ValidationContext",
    "ValidationResult",
    "failed",
    "parse_status",
    "passed",
    "skipped",
    "CancellationToken",
    "ValidatorPipeline",
    "run_validation",
    "NOT_ATTEMPTED",
    "CANCELLED",
    "Probe",
    "ValidatorRegistry",
    "RunMode",
    "ValidationReport",
    "parse_run_mode",
]
