"""
boardwise catalog check command.

SUMMARY: Load a platform catalog and verify its integrity

Schema-validates every catalog document, then checks rule ambiguity and
ordering, ancestor references and the generic fallback. Any problem is a
fatal error (exit 2).
"""

from __future__ import annotations

import argparse

from boardwise.cli import EXIT_OK, OutputFormatter, add_standard_flags, get_catalog
from boardwise.core.platform import IdentityMatcher

SUMMARY = "Load a platform catalog and verify its integrity"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    catalog = get_catalog(args)
    # Building a matcher re-validates the rule table the way a run would.
    IdentityMatcher(catalog)

    summary = catalog.summary()
    if formatter.json_mode:
        formatter.success(summary, "")
        return EXIT_OK

    formatter.text(f"catalog: {summary['source']}")
    formatter.text_kv("profiles", ", ".join(summary["profiles"]))
    formatter.text_kv("fallback", summary["fallback"] or "(none)")
    formatter.text_kv("rules", len(summary["rules"]))
    for rule in summary["rules"]:
        formatter.text(f"    {rule}")
    formatter.text_kv("overlays", ", ".join(summary["fragments"]) or "(none)")
    formatter.text("OK")
    return EXIT_OK
