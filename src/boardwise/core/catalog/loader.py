"""Load a platform catalog from a directory of YAML documents.

Layout::

    <catalog>/
      catalog.yaml          # fallback, rules, optional overlays order
      profiles/*.yaml       # one profile per file
      overlays/*.yaml       # one overlay fragment per file

Every document is checked against its bundled JSON schema before it is
turned into model objects, and the assembled catalog is integrity-checked
before it is returned. Any failure is a :class:`CatalogIntegrityError`.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from boardwise.core.config.layers import ConfigLayer
from boardwise.core.exceptions import CatalogIntegrityError
from boardwise.core.overlays.models import HardwareDescription, OverlayFragment, OverlayWrite
from boardwise.core.platform.models import MatchRule, PlatformProfile, parse_rule_kind
from boardwise.core.schemas.validation import SchemaValidationError, validate_payload
from boardwise.core.utils.io import iter_yaml_files, read_yaml
from boardwise.data import get_data_path

from .model import Catalog

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.yaml"
PROFILES_DIR = "profiles"
OVERLAYS_DIR = "overlays"


def _read_document(path: Path, schema: str) -> Dict[str, Any]:
    try:
        data = read_yaml(path, default={}, raise_on_error=True)
    except FileNotFoundError as exc:
        raise CatalogIntegrityError(f"Catalog file not found: {path}", context={"path": str(path)}) from exc
    except Exception as exc:
        raise CatalogIntegrityError(
            f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
        ) from exc

    try:
        validate_payload(data, schema)
    except SchemaValidationError as exc:
        raise CatalogIntegrityError(f"{path}: {exc}", context={"path": str(path)}) from exc
    return data


def _parse_rules(raw: List[Dict[str, Any]]) -> List[MatchRule]:
    rules: List[MatchRule] = []
    for index, entry in enumerate(raw):
        rules.append(
            MatchRule(
                kind=parse_rule_kind(entry.get("kind")),
                pattern=str(entry["pattern"]),
                profile=str(entry["profile"]),
                index=index,
            )
        )
    return rules


def _parse_profile(
    data: Dict[str, Any],
) -> Tuple[PlatformProfile, ConfigLayer, Optional[HardwareDescription]]:
    profile_id = str(data["id"])
    profile = PlatformProfile(
        id=profile_id,
        ancestors=tuple(str(a) for a in data.get("ancestors") or ()),
        capabilities=frozenset(str(c) for c in data.get("capabilities") or ()),
        description=str(data.get("label") or ""),
    )
    values = dict(data.get("settings") or {})
    policies = dict(data.get("policies") or {})
    if profile.capabilities:
        # Declared capabilities become `capabilities.<name>: true` flags that
        # merge down the chain; explicit flags in `settings` win.
        flags: Dict[str, Any] = {name: True for name in sorted(profile.capabilities)}
        flags.update(values.get("capabilities") or {})
        values["capabilities"] = flags
        policies.setdefault("capabilities", "merge-map")
    layer = ConfigLayer(source=profile_id, values=values, policies=policies)
    nodes = data.get("description")
    description = HardwareDescription(nodes) if nodes else None
    return profile, layer, description


def _parse_fragment(data: Dict[str, Any]) -> OverlayFragment:
    writes: List[OverlayWrite] = []
    for entry in data.get("writes") or []:
        for prop, value in (entry.get("properties") or {}).items():
            writes.append(
                OverlayWrite(
                    path=str(entry["path"]),
                    property=str(prop),
                    value=value,
                    replace=entry.get("replace"),
                )
            )
    return OverlayFragment(
        id=str(data["id"]),
        writes=tuple(writes),
        deletes=tuple(str(p) for p in data.get("delete") or ()),
        requires=str(data["requires"]) if data.get("requires") else None,
        replace=bool(data.get("replace", False)),
        description=str(data.get("label") or ""),
    )


def _ordered_fragments(
    fragments: List[OverlayFragment], order: Optional[List[str]], root: Path
) -> List[OverlayFragment]:
    if not order:
        return fragments
    by_id = {f.id: f for f in fragments}
    unknown = [fid for fid in order if fid not in by_id]
    if unknown:
        raise CatalogIntegrityError(
            f"catalog.yaml overlay order names unknown fragment(s): {', '.join(unknown)}",
            context={"path": str(root / CATALOG_FILE), "fragments": unknown},
        )
    listed = [by_id[fid] for fid in order]
    # Fragments not named in the order keep file order after the listed ones.
    rest = [f for f in fragments if f.id not in set(order)]
    return listed + rest


def load_catalog(path: Path) -> Catalog:
    """Load, schema-validate and integrity-check the catalog at ``path``.

    Raises:
        CatalogIntegrityError: on any structural or consistency problem.
    """
    root = Path(path).expanduser()
    if not root.is_dir():
        raise CatalogIntegrityError(f"Catalog directory not found: {root}", context={"path": str(root)})

    index = _read_document(root / CATALOG_FILE, "catalog")
    rules = _parse_rules(index.get("rules") or [])

    profiles: List[PlatformProfile] = []
    layers: List[ConfigLayer] = []
    descriptions: Dict[str, HardwareDescription] = {}
    for profile_path in iter_yaml_files(root / PROFILES_DIR):
        profile, layer, description = _parse_profile(_read_document(profile_path, "profile"))
        profiles.append(profile)
        layers.append(layer)
        if description is not None:
            descriptions[profile.id] = description

    fragments = [
        _parse_fragment(_read_document(p, "overlay")) for p in iter_yaml_files(root / OVERLAYS_DIR)
    ]
    fragments = _ordered_fragments(fragments, index.get("overlays"), root)

    catalog = Catalog(
        profiles,
        rules=rules,
        layers=layers,
        fragments=fragments,
        descriptions=descriptions,
        fallback=index.get("fallback"),
        source=str(root),
    )
    catalog.check_integrity()
    logger.debug(
        "Loaded catalog %s: %d profiles, %d rules, %d overlay fragments",
        root,
        len(profiles),
        len(rules),
        len(fragments),
    )
    return catalog


@lru_cache(maxsize=8)
def _load_cached(resolved: str) -> Catalog:
    return load_catalog(Path(resolved))


def load_catalog_cached(path: Path) -> Catalog:
    """Like :func:`load_catalog`, memoized per resolved path (catalogs are read-only)."""
    return _load_cached(str(Path(path).expanduser().resolve()))


def bundled_catalog_path() -> Path:
    return get_data_path("catalog")


def load_bundled_catalog() -> Catalog:
    """The reference catalog shipped with the package."""
    return load_catalog_cached(bundled_catalog_path())


def clear_catalog_cache() -> None:
    _load_cached.cache_clear()


__all__ = [
    "load_catalog",
    "load_catalog_cached",
    "load_bundled_catalog",
    "bundled_catalog_path",
    "clear_catalog_cache",
]
