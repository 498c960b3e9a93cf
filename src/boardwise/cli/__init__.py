"""
boardwise CLI package.

Provides the command-line interface with auto-discovery of commands from
``commands/`` (top-level) and domain subfolders (catalog/, config/, ...).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Settings, catalog, descriptor and pipeline construction
"""
from ._args import (
    add_catalog_flag,
    add_config_flag,
    add_descriptor_flags,
    add_json_flag,
    add_platform_flag,
    add_root_flag,
    add_standard_flags,
    add_verbose_flag,
)
from ._output import OutputFormatter
from ._utils import (
    EXIT_FAIL,
    EXIT_FATAL,
    EXIT_OK,
    build_orchestrator,
    build_pipeline,
    get_catalog,
    get_descriptor,
    get_probe_root,
    get_settings,
    setup_logging,
    split_list,
)

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_verbose_flag",
    "add_config_flag",
    "add_catalog_flag",
    "add_root_flag",
    "add_descriptor_flags",
    "add_platform_flag",
    "add_standard_flags",
    # Utilities
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
