"""Typed accessors over sections of the tool settings.

Usage:
    settings = SettingsManager(config_file=args.config)
    validation = ValidationSettings(settings)
    validation.timeout_for("gpu")
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import SettingsManager


class BaseSettingsSection(ABC):
    """Base class for one top-level settings section."""

    def __init__(self, manager: Optional[SettingsManager] = None) -> None:
        self._manager = manager or SettingsManager()

    @abstractmethod
    def _section(self) -> str:
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        return self._manager.load_config().get(self._section(), {}) or {}


class CatalogSettings(BaseSettingsSection):
    def _section(self) -> str:
        return "catalog"

    @cached_property
    def path(self) -> Optional[Path]:
        raw = self.section.get("path")
        return Path(str(raw)).expanduser() if raw else None


class DetectionSettings(BaseSettingsSection):
    def _section(self) -> str:
        return "detection"

    @cached_property
    def root(self) -> Path:
        return Path(str(self.section.get("root") or "/")).expanduser()


class OrchestratorSettings(BaseSettingsSection):
    def _section(self) -> str:
        return "orchestrator"

    @cached_property
    def allow_generic_fallback(self) -> bool:
        return bool(self.section.get("allow_generic_fallback", True))


class ValidationSettings(BaseSettingsSection):
    def _section(self) -> str:
        return "validation"

    @cached_property
    def mode(self) -> str:
        return str(self.section.get("mode") or "collect-all")

    @cached_property
    def timeout_seconds(self) -> float:
        return float(self.section.get("timeout_seconds", 10))

    @cached_property
    def timeouts(self) -> Dict[str, float]:
        return {str(k): float(v) for k, v in (self.section.get("timeouts") or {}).items()}

    def timeout_for(self, component: str) -> float:
        """Per-component override, falling back to the global timeout."""
        return self.timeouts.get(component, self.timeout_seconds)

    @cached_property
    def max_workers(self) -> int:
        return max(1, int(self.section.get("max_workers", 4)))

    @cached_property
    def parallel(self) -> bool:
        return bool(self.section.get("parallel", True))


class LoggingSettings(BaseSettingsSection):
    def _section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level") or "WARNING").upper()

    @cached_property
    def file(self) -> Optional[Path]:
        raw = self.section.get("file")
        return Path(str(raw)).expanduser() if raw else None


__all__ = [
    "BaseSettingsSection",
    "CatalogSettings",
    "DetectionSettings",
    "OrchestratorSettings",
    "ValidationSettings",
    "LoggingSettings",
]
