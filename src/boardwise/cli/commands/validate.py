"""boardwise validate command.

SUMMARY: Run hardware component validators and print the verdict

Identifies the device (or uses ``--platform``), resolves its configuration,
composes overlays and runs the selected component validators. Exit code is
0 when the verdict is pass and 1 when any component failed.
"""

from __future__ import annotations

import argparse

from boardwise.cli import (
    EXIT_FAIL,
    EXIT_OK,
    OutputFormatter,
    add_descriptor_flags,
    add_platform_flag,
    add_root_flag,
    add_standard_flags,
    build_orchestrator,
    get_descriptor,
    get_settings,
    split_list,
)
from boardwise.core.config import ValidationSettings
from boardwise.core.validation import RunMode, Status, ValidationReport, parse_run_mode

SUMMARY = "Run hardware component validators and print the verdict"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_platform_flag(parser)
    parser.add_argument(
        "--component",
        action="append",
        metavar="NAME[,NAME...]",
        help="Component(s) to validate, in report order (default: the platform's capabilities)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in RunMode],
        default=None,
        help="fail-fast stops at the first failure; collect-all runs everything (default: settings validation.mode)",
    )
    parser.add_argument("--timeout", type=float, metavar="SECONDS", help="Per-component timeout")
    parser.add_argument("--jobs", type=int, metavar="N", help="Parallel validators in collect-all mode")
    add_descriptor_flags(parser)
    add_root_flag(parser)
    add_standard_flags(parser)


def _format_report(report: ValidationReport) -> str:
    lines = []
    for result in report.results:
        metric = f" [{result.metric}]" if result.metric else ""
        lines.append(f"{result.component:<12} {result.status.value.upper():<5}{metric} {result.diagnostic}".rstrip())
    failures = report.failures()
    if failures:
        lines.append("")
        lines.append("Failures:")
        for result in failures:
            lines.append(f"  {result.component}: {result.diagnostic}")
    lines.append("")
    lines.append(f"verdict: {report.verdict.value}")
    return "\n".join(lines)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    mode = parse_run_mode(args.mode or ValidationSettings(get_settings(args)).mode)
    components = split_list(args.component) or None

    orchestrator = build_orchestrator(args)
    descriptor = None if args.platform else get_descriptor(args)
    result = orchestrator.run(
        descriptor=descriptor,
        platform=args.platform,
        components=components,
        mode=mode,
    )

    if formatter.json_mode:
        formatter.json_output(result.to_dict())
    else:
        formatter.text(f"platform: {result.prepared.profile.id}")
        if result.manifest.applied:
            formatter.text(f"overlays: {', '.join(result.manifest.applied)}")
        formatter.text(_format_report(result.report))
    return EXIT_OK if result.report.verdict is Status.PASS else EXIT_FAIL
