"""Deep merge used for layering the tool's own settings files.

Catalog configuration layers do NOT use this module; they are folded by
``boardwise.core.config.resolver`` with explicit per-key policies. Settings
files only need the simple rules below:

- Mappings merge recursively
- Lists are replaced, unless the override list starts with ``"+"`` (append)
  or ``"="`` (explicit replace)
- Everything else is replaced by the higher-priority value
"""
from __future__ import annotations

from typing import Any, Dict, List


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` without mutating either.

    Example:
        >>> deep_merge({"validation": {"mode": "collect-all"}}, {"validation": {"parallel": False}})
        {'validation': {'mode': 'collect-all', 'parallel': False}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = merge_lists(current, value)
        else:
            result[key] = value
    return result


def merge_lists(base: List[Any], override: List[Any]) -> List[Any]:
    """Merge a settings list.

        >>> merge_lists(["cpu"], ["gpu"])
        ['gpu']
        >>> merge_lists(["cpu"], ["+", "gpu"])
        ['cpu', 'gpu']
        >>> merge_lists(["cpu"], ["=", "gpu"])
        ['gpu']
    """
    if not override:
        return list(override)
    marker = override[0]
    if marker == "+":
        return [*base, *override[1:]]
    if marker == "=":
        return list(override[1:])
    return list(override)


__all__ = ["deep_merge", "merge_lists"]
