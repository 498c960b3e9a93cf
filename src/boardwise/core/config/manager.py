"""
boardwise tool settings (YAML-only).

These are the settings of the tool itself (where the catalog lives, validation
timeouts, logging), not the per-platform configuration resolved from a
catalog.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from boardwise.core.exceptions import SettingsError
from boardwise.core.schemas.validation import SchemaValidationError, validate_payload
from boardwise.core.utils.io import iter_yaml_files, read_yaml
from boardwise.core.utils.merge import deep_merge
from boardwise.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOARDWISE_"
CONFIG_HOME_ENV = "BOARDWISE_CONFIG_HOME"


def get_user_config_dir() -> Path:
    """``$BOARDWISE_CONFIG_HOME`` or ``$XDG_CONFIG_HOME/boardwise`` (``~/.config/boardwise``)."""
    explicit = os.environ.get(CONFIG_HOME_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "boardwise"


class SettingsManager:
    """Load, merge, and validate boardwise settings.

    Sources (highest to lowest priority):
    1. Environment variables: BOARDWISE_* (``__`` separates path segments)
    2. Explicit settings file (``--config FILE``)
    3. User settings: <user-config-dir>/*.yaml (alphabetical order)
    4. Bundled defaults: boardwise.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, config_file: Optional[Path] = None, *, user_config_dir: Optional[Path] = None) -> None:
        self.core_config_dir = get_data_path("config")
        self.user_config_dir = Path(user_config_dir) if user_config_dir else get_user_config_dir()
        self.config_file = Path(config_file).expanduser() if config_file else None
        self._cache: Optional[Dict[str, Any]] = None

    # ---------------------------------------------------------------- loading

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        d = Path(directory)
        if not d.exists():
            return cfg
        for path in iter_yaml_files(d):
            cfg = deep_merge(cfg, self.load_yaml(path))
        return cfg

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            # Fail closed: settings must never silently ignore invalid YAML.
            data = read_yaml(path, default={}, raise_on_error=True) or {}
        except FileNotFoundError as exc:
            raise SettingsError(f"Settings file not found: {path}", context={"path": str(path)}) from exc
        except Exception as exc:
            raise SettingsError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise SettingsError(
                f"Settings file must contain a mapping: {path}", context={"path": str(path)}
            )
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any, str]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == CONFIG_HOME_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            segs = raw.split("__")
            if not raw or any(seg == "" for seg in segs):
                raise SettingsError(f"Malformed {ENV_PREFIX}* key: '{key}'", context={"env": key})
            yield [seg.lower() for seg in segs], self._coerce_type(os.environ[key]), key

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any, env_key: str) -> None:
        current: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            nxt = current.setdefault(part, {})
            if not isinstance(nxt, dict):
                raise SettingsError(
                    f"{env_key} traverses non-mapping setting '{part}'", context={"env": env_key}
                )
            current = nxt
        current[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value, env_key in self._iter_env_overrides():
            logger.debug("Settings override from %s", env_key)
            self._set_nested(cfg, path, typed_value, env_key)

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        try:
            validate_payload(cfg, "config")
        except SchemaValidationError as exc:
            raise SettingsError(str(exc)) from exc

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge settings from all layers.

        The merged result is memoized on this instance and should be treated
        as immutable.
        """
        if self._cache is not None:
            return self._cache

        cfg: Dict[str, Any] = {}
        # Layer 1: bundled defaults
        cfg = self._load_directory(self.core_config_dir, cfg)
        # Layer 2: user settings
        cfg = self._load_directory(self.user_config_dir, cfg)
        # Layer 3: explicit settings file
        if self.config_file is not None:
            cfg = deep_merge(cfg, self.load_yaml(self.config_file))
        # Layer 4: environment
        self.apply_env_overrides(cfg)

        if validate:
            self.validate_schema(cfg)
        self._cache = cfg
        return cfg

    # ------------------------------------------------------------- accessors

    def get(self, key: str, default: Any = None) -> Any:
        """Get a settings value by dot-notation key.

        Example:
            >>> SettingsManager().get("validation.mode")
            'collect-all'
        """
        current: Any = self.load_config()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["SettingsManager", "get_user_config_dir", "ENV_PREFIX"]
