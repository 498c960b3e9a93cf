"""Shared CLI utility functions.

Commands turn parsed arguments plus tool settings into core objects through
these helpers, so every command resolves the catalog, descriptor and probe
root the same way.
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import yaml

from boardwise.core.catalog import Catalog, load_bundled_catalog, load_catalog
from boardwise.core.config import (
    CatalogSettings,
    DetectionSettings,
    LoggingSettings,
    OrchestratorSettings,
    SettingsManager,
    ValidationSettings,
)
from boardwise.core.detection import HardwareDetector
from boardwise.core.logging import configure_logging
from boardwise.core.orchestrator import Orchestrator
from boardwise.core.platform.models import HardwareDescriptor, descriptor_from_mapping
from boardwise.core.utils.io import read_yaml
from boardwise.core.validation import Probe, ValidatorPipeline

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_FATAL = 2


def get_settings(args: argparse.Namespace) -> SettingsManager:
    """Settings manager for this invocation (memoized on ``args``)."""
    cached = getattr(args, "_settings", None)
    if cached is None:
        config_file = getattr(args, "config", None)
        cached = SettingsManager(config_file=Path(config_file) if config_file else None)
        cached.load_config()
        args._settings = cached
    return cached


def setup_logging(args: argparse.Namespace) -> None:
    logging_settings = LoggingSettings(get_settings(args))
    configure_logging(
        level=logging_settings.level,
        log_file=logging_settings.file,
        verbose=bool(getattr(args, "verbose", False)),
        json_mode=bool(getattr(args, "json", False)),
    )


def get_probe_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "root", None)
    if raw:
        return Path(raw).expanduser()
    return DetectionSettings(get_settings(args)).root


def get_catalog(args: argparse.Namespace) -> Catalog:
    raw = getattr(args, "catalog", None)
    if raw:
        return load_catalog(Path(raw))
    configured = CatalogSettings(get_settings(args)).path
    if configured is not None:
        return load_catalog(configured)
    return load_bundled_catalog()


def split_list(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated values: ``["a,b", "c"] -> [a, b, c]``."""
    out: List[str] = []
    for value in values or []:
        out.extend(v.strip() for v in str(value).split(",") if v.strip())
    return out


def get_descriptor(args: argparse.Namespace) -> HardwareDescriptor:
    """Descriptor from ``--descriptor``, else ``--model``/``--compatible``, else detection."""
    descriptor_file = getattr(args, "descriptor", None)
    if descriptor_file:
        try:
            data = read_yaml(Path(descriptor_file), raise_on_error=True)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid descriptor file {descriptor_file}: {exc}") from exc
        return descriptor_from_mapping(data, source=str(descriptor_file))

    model = getattr(args, "model", None)
    compatible = getattr(args, "compatible", None)
    if model is not None or compatible:
        return HardwareDescriptor(
            model=model or "",
            compatible=tuple(compatible or ()),
            source="cli",
        )
    return HardwareDetector(get_probe_root(args)).detect()


def build_pipeline(args: argparse.Namespace) -> ValidatorPipeline:
    settings = ValidationSettings(get_settings(args))
    timeout = getattr(args, "timeout", None)
    jobs = getattr(args, "jobs", None)
    return ValidatorPipeline(
        timeout=float(timeout) if timeout is not None else settings.timeout_seconds,
        # An explicit --timeout applies to every component.
        timeouts={} if timeout is not None else settings.timeouts,
        max_workers=int(jobs) if jobs is not None else settings.max_workers,
        parallel=settings.parallel if jobs is None else int(jobs) > 1,
        probe=Probe(get_probe_root(args)),
    )


def build_orchestrator(args: argparse.Namespace, *, strict: bool = False) -> Orchestrator:
    allow_fallback = OrchestratorSettings(get_settings(args)).allow_generic_fallback and not strict
    return Orchestrator(
        get_catalog(args),
        pipeline=build_pipeline(args),
        allow_generic_fallback=allow_fallback,
    )


__all__ = [
    "EXIT_OK",
    "EXIT_FAIL",
    "EXIT_FATAL",
    "get_settings",
    "setup_logging",
    "get_probe_root",
    "get_catalog",
    "split_list",
    "get_descriptor",
    "build_pipeline",
    "build_orchestrator",
]
