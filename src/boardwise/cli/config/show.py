"""
boardwise config show command.

SUMMARY: Show the resolved configuration of a platform

Folds the profile's configuration layers root to leaf and prints the result,
optionally with the layer that last set each key.
"""

from __future__ import annotations

import argparse

from boardwise.cli import (
    EXIT_FATAL,
    EXIT_OK,
    OutputFormatter,
    add_descriptor_flags,
    add_platform_flag,
    add_root_flag,
    add_standard_flags,
    build_orchestrator,
    get_descriptor,
)
from boardwise.core.utils.io import dump_yaml_string

SUMMARY = "Show the resolved configuration of a platform"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "key",
        nargs="?",
        help="Specific dotted key to show (e.g., 'cpu.min_cores')",
    )
    parser.add_argument(
        "--provenance",
        action="store_true",
        help="Show which layer last set each key",
    )
    add_platform_flag(parser)
    add_descriptor_flags(parser)
    add_root_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    orchestrator = build_orchestrator(args)
    if args.platform:
        profile = orchestrator.catalog.require_profile(args.platform)
    else:
        profile = orchestrator.detect(get_descriptor(args)).profile
    resolved = orchestrator.resolver.resolve(profile)

    if args.key:
        missing = object()
        value = resolved.get(args.key, missing)
        if value is missing:
            formatter.error(f"Key not found: {args.key}", error_code="not_found")
            return EXIT_FATAL
        source = resolved.source_of(args.key)
        if formatter.json_mode:
            formatter.json_output({"profile": profile.id, "key": args.key, "value": value, "source": source})
        else:
            formatter.text(dump_yaml_string({args.key: value}).rstrip())
            if args.provenance:
                formatter.text(f"# set by {source}")
        return EXIT_OK

    if formatter.json_mode:
        payload = resolved.to_dict()
        if not args.provenance:
            payload.pop("provenance")
        formatter.json_output({"profile": profile.id, **payload})
        return EXIT_OK

    formatter.text(f"# profile: {profile.id} (chain: {' -> '.join(resolved.chain)})")
    formatter.text(dump_yaml_string(resolved.values).rstrip())
    if args.provenance:
        formatter.text("")
        formatter.text("# provenance")
        for path, source in sorted(resolved.provenance.items()):
            formatter.text(f"{path}: {source}")
    return EXIT_OK
