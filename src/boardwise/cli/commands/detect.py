"""boardwise detect command.

SUMMARY: Identify the platform profile of this device

Prints the resolved profile id. With ``--strict`` a device that only matches
the generic fallback profile is a fatal error.
"""

from __future__ import annotations

import argparse

from boardwise.cli import (
    EXIT_OK,
    OutputFormatter,
    add_descriptor_flags,
    add_root_flag,
    add_standard_flags,
    build_orchestrator,
    get_descriptor,
)

SUMMARY = "Identify the platform profile of this device"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of falling back to the generic profile",
    )
    add_descriptor_flags(parser)
    add_root_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    descriptor = get_descriptor(args)
    orchestrator = build_orchestrator(args, strict=bool(args.strict))
    match = orchestrator.detect(descriptor)

    formatter.success(
        {"descriptor": descriptor.to_dict(), **match.to_dict()},
        match.profile.id,
    )
    return EXIT_OK
