"""Unified CLI output formatting utilities.

This module provides consistent output formatting for all boardwise CLI
commands, supporting both JSON and text output modes.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from boardwise.core.exceptions import BoardwiseError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON; otherwise output text
            indent: JSON indentation level
        """
        self.json_mode = json_mode
        self.indent = indent

    def success(
        self,
        data: Dict[str, Any],
        message: str,
        *,
        status: str = "success",
    ) -> None:
        """Output success result (``message`` in text mode, ``data`` in JSON mode)."""
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(
        self,
        error: Exception | str,
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Output an error to stderr.

        Errors carrying context (every ``BoardwiseError``) print the offending
        identifiers so the failure can be reproduced locally.
        """
        msg = message or str(error)
        context: Dict[str, Any] = {}
        if isinstance(error, BoardwiseError):
            payload = error.to_json_error()
            context = payload["context"]
            if error_code == "error":
                error_code = payload["code"]
        if self.json_mode:
            output: Dict[str, Any] = {"error": error_code, "message": msg}
            if context:
                output["context"] = context
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)
            for key, value in context.items():
                if isinstance(value, (list, tuple)):
                    value = ", ".join(str(v) for v in value)
                print(f"  {key}: {value}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        """Output key-value pair in text mode."""
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
