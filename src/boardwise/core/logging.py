"""Process logging setup for the CLI.

- optional file handler (``logging.file`` setting)
- stderr handler at DEBUG under ``--verbose``
- a NullHandler in ``--json`` mode so nothing but JSON reaches the terminal
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

_FILE_HANDLER: logging.Handler | None = None
_STDERR_HANDLER: logging.Handler | None = None
_NULL_HANDLER: logging.Handler | None = None

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    *,
    level: str = "WARNING",
    log_file: Path | None = None,
    verbose: bool = False,
    json_mode: bool = False,
) -> None:
    """(Re)install boardwise's handlers on the root logger. Idempotent."""
    global _FILE_HANDLER, _STDERR_HANDLER, _NULL_HANDLER

    reset_logging()
    root = logging.getLogger()
    effective = logging.DEBUG if verbose else _level_from_name(level)
    root.setLevel(effective)

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(effective)
        fh.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(fh)
        _FILE_HANDLER = fh

    if verbose and not json_mode:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.DEBUG)
        sh.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(sh)
        _STDERR_HANDLER = sh

    if json_mode and not root.handlers:
        # Keeps the implicit lastResort handler from writing warnings to stderr.
        _NULL_HANDLER = logging.NullHandler()
        root.addHandler(_NULL_HANDLER)


def reset_logging() -> None:
    """Remove only the handlers installed by :func:`configure_logging`."""
    global _FILE_HANDLER, _STDERR_HANDLER, _NULL_HANDLER
    root = logging.getLogger()
    for handler in (_FILE_HANDLER, _STDERR_HANDLER, _NULL_HANDLER):
        if handler is not None:
            root.removeHandler(handler)
            handler.close()
    _FILE_HANDLER = _STDERR_HANDLER = _NULL_HANDLER = None


__all__ = ["configure_logging", "reset_logging"]
