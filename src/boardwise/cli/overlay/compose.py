"""
boardwise overlay compose command.

SUMMARY: Compose device-tree overlays and print the manifest

Prints the applied-overlay manifest (applied, skipped, overridden and
deleted entries) and, with ``--description``, the composed hardware
description. Conflicting overlays are a fatal error (exit 2).
"""

from __future__ import annotations

import argparse

from boardwise.cli import (
    EXIT_OK,
    OutputFormatter,
    add_descriptor_flags,
    add_platform_flag,
    add_root_flag,
    add_standard_flags,
    build_orchestrator,
    get_descriptor,
)
from boardwise.core.overlays import OverlayManifest
from boardwise.core.utils.io import dump_yaml_string

SUMMARY = "Compose device-tree overlays and print the manifest"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--description",
        action="store_true",
        help="Also print the composed hardware description",
    )
    add_platform_flag(parser)
    add_descriptor_flags(parser)
    add_root_flag(parser)
    add_standard_flags(parser)


def _format_manifest(manifest: OverlayManifest) -> str:
    lines = ["applied:"]
    lines.extend(f"  - {fid}" for fid in manifest.applied)
    if manifest.skipped:
        lines.append("skipped:")
        lines.extend(f"  - {s.id}: {s.reason}" for s in manifest.skipped)
    if manifest.overrides:
        lines.append("overrides:")
        lines.extend(
            f"  - {o.path}:{o.property} ({o.previous} -> {o.fragment})" for o in manifest.overrides
        )
    if manifest.deleted:
        lines.append("deleted:")
        lines.extend(
            f"  - {d.path} by {d.fragment}{'' if d.existed else ' (absent)'}" for d in manifest.deleted
        )
    return "\n".join(lines)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    orchestrator = build_orchestrator(args)
    descriptor = None if args.platform else get_descriptor(args)
    prepared = orchestrator.prepare(descriptor=descriptor, platform=args.platform)

    if formatter.json_mode:
        payload = {"profile": prepared.profile.id, "manifest": prepared.manifest.to_dict()}
        if args.description:
            payload["description"] = prepared.composed.description.to_dict()
        formatter.json_output(payload)
        return EXIT_OK

    formatter.text(f"# profile: {prepared.profile.id}")
    formatter.text(_format_manifest(prepared.manifest))
    if args.description:
        formatter.text("")
        formatter.text(dump_yaml_string(prepared.composed.description.to_dict()).rstrip())
    return EXIT_OK
