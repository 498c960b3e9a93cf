"""Configuration: catalog config layers and their resolver, plus tool settings.

Usage:
    from boardwise.core.config import ConfigurationResolver, SettingsManager

    resolved = ConfigurationResolver(catalog).resolve(profile)
    resolved.get("gpu_mem"), resolved.source_of("gpu_mem")

    settings = SettingsManager()
    settings.get("validation.timeout_seconds")
"""
from __future__ import annotations

from .domains import (
    CatalogSettings,
    DetectionSettings,
    LoggingSettings,
    OrchestratorSettings,
    ValidationSettings,
)
from .layers import ConfigLayer, MergePolicy, parse_merge_policy
from .manager import SettingsManager, get_user_config_dir
from .resolver import ConfigurationResolver, ResolvedConfiguration, resolve_configuration

__all__ = [
    # Catalog configuration
    "ConfigLayer",
    "MergePolicy",
    "parse_merge_policy",
    "ConfigurationResolver",
    "ResolvedConfiguration",
    "resolve_configuration",
    # Tool settings
    "SettingsManager",
    "get_user_config_dir",
    "CatalogSettings",
    "DetectionSettings",
    "OrchestratorSettings",
    "ValidationSettings",
    "LoggingSettings",
]
