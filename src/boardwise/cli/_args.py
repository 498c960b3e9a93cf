"""Common CLI argument registration utilities.

This module provides reusable argument registration functions to reduce
duplication across CLI commands.
"""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """Add --verbose flag (debug logging to stderr)."""
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag for an explicit settings file."""
    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE",
        help="Settings file layered over bundled and user settings",
    )


def add_catalog_flag(parser: argparse.ArgumentParser) -> None:
    """Add --catalog flag for the platform catalog directory."""
    parser.add_argument(
        "--catalog",
        type=str,
        metavar="DIR",
        help="Platform catalog directory (default: settings catalog.path, else the bundled catalog)",
    )


def add_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --root flag for the detection/probe filesystem root."""
    parser.add_argument(
        "--root",
        type=str,
        metavar="DIR",
        help="Filesystem root for hardware detection and probes (default: settings detection.root)",
    )


def add_descriptor_flags(parser: argparse.ArgumentParser) -> None:
    """Add flags that supply a hardware descriptor instead of detecting one."""
    parser.add_argument(
        "--model",
        type=str,
        help="Device model string (skips detection)",
    )
    parser.add_argument(
        "--compatible",
        action="append",
        metavar="STRING",
        help="Compatible string (repeatable, most specific first)",
    )
    parser.add_argument(
        "--descriptor",
        type=str,
        metavar="FILE",
        help="YAML/JSON file with model, compatible, cpu_part, memory_bytes",
    )


def add_platform_flag(parser: argparse.ArgumentParser) -> None:
    """Add --platform flag to bypass identity matching."""
    parser.add_argument(
        "--platform",
        type=str,
        metavar="ID",
        help="Use this platform profile instead of identifying the device",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Add standard flags that most commands use.

    Adds: --json, --verbose, --config, --catalog
    """
    add_json_flag(parser)
    add_verbose_flag(parser)
    add_config_flag(parser)
    add_catalog_flag(parser)


__all__ = [
    "add_json_flag",
    "add_verbose_flag",
    "add_config_flag",
    "add_catalog_flag",
    "add_root_flag",
    "add_descriptor_flags",
    "add_platform_flag",
    "add_standard_flags",
]
