"""Fold a profile's configuration layers into one resolved configuration.

The chain is ``profile.ancestors`` (root-first) followed by the profile
itself. Layers are folded least to most specific, so the leaf wins ties.
Each key collision is settled by the key's merge policy:

``override``
    the later value replaces the earlier one.
``append``
    sequences are concatenated ancestor-then-descendant, never deduplicated.
``merge-map``
    mappings are merged key by key, recursively, using the policies of the
    nested dotted paths (``override`` unless declared).

A policy declared by an ancestor keeps applying to the same key in
descendant layers until a more specific layer declares a different one.

Resolution is pure: inputs are deep-copied and the result never aliases
catalog data.
"""
from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from boardwise.core.exceptions import CatalogIntegrityError, MissingAncestorError
from boardwise.core.platform.models import PlatformProfile

from .layers import ConfigLayer, MergePolicy

if TYPE_CHECKING:
    from boardwise.core.catalog.model import Catalog

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class ResolvedConfiguration:
    """Resolved option values plus per-key provenance."""

    values: Dict[str, Any] = field(default_factory=dict)
    provenance: Dict[str, str] = field(default_factory=dict)
    chain: Tuple[str, ...] = ()

    def get(self, dotted: str, default: Any = None) -> Any:
        """Look up a value by dotted key path (``"cpu.min_cores"``)."""
        current: Any = self.values
        for part in dotted.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return default
            current = current[part]
        return current

    def source_of(self, dotted: str) -> Optional[str]:
        return self.provenance.get(dotted)

    def has_capability(self, name: str) -> bool:
        caps = self.values.get("capabilities")
        if not isinstance(caps, Mapping):
            return False
        return bool(caps.get(name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain": list(self.chain),
            "values": copy.deepcopy(self.values),
            "provenance": dict(sorted(self.provenance.items())),
        }

    def canonical_json(self) -> str:
        """Stable serialization: identical inputs give byte-identical output."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), default=str)


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else str(key)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


class ConfigurationResolver:
    """Resolve profiles against a catalog's config layers.

    Example:
        resolver = ConfigurationResolver(catalog)
        resolved = resolver.resolve(catalog.require_profile("rpi5"))
        resolved.get("gpu_mem")
    """

    def __init__(self, catalog: "Catalog") -> None:
        self.catalog = catalog

    def chain_for(self, profile: PlatformProfile) -> List[ConfigLayer]:
        seen: set[str] = set()
        layers: List[ConfigLayer] = []
        for layer_id in profile.chain:
            if layer_id in seen:
                raise CatalogIntegrityError(
                    f"Profile '{profile.id}' has '{layer_id}' twice in its chain",
                    context={"profile": profile.id, "ancestor": layer_id},
                )
            seen.add(layer_id)
            if self.catalog.get_profile(layer_id) is None:
                raise MissingAncestorError(profile.id, layer_id)
            layers.append(self.catalog.layer_for(layer_id))
        return layers

    def resolve(self, profile: PlatformProfile) -> ResolvedConfiguration:
        """Fold the profile's chain root to leaf.

        Raises:
            MissingAncestorError: an ancestor is not in the catalog.
            CatalogIntegrityError: a value does not fit its key's policy.
        """
        layers = self.chain_for(profile)
        values: Dict[str, Any] = {}
        provenance: Dict[str, str] = {}
        policies: Dict[str, MergePolicy] = {}

        for layer in layers:
            policies.update(layer.policies)
            self._fold(values, layer.values, layer, policies, provenance, prefix="")

        logger.debug("Resolved configuration for %s via %s", profile.id, " -> ".join(profile.chain))
        return ResolvedConfiguration(values=values, provenance=provenance, chain=tuple(profile.chain))

    # ------------------------------------------------------------------ folding

    def _fold(
        self,
        acc: Dict[str, Any],
        incoming: Mapping[str, Any],
        layer: ConfigLayer,
        policies: Mapping[str, MergePolicy],
        provenance: Dict[str, str],
        *,
        prefix: str,
    ) -> None:
        for key, value in incoming.items():
            path = _join(prefix, str(key))
            policy = policies.get(path, MergePolicy.OVERRIDE)
            current = acc.get(key, _MISSING)

            if policy is MergePolicy.APPEND:
                if not _is_sequence(value):
                    raise self._type_error(path, layer, "append", "a sequence", value)
                if current is _MISSING:
                    acc[key] = copy.deepcopy(list(value))
                else:
                    if not _is_sequence(current):
                        raise self._type_error(path, layer, "append", "a sequence", current)
                    acc[key] = [*current, *copy.deepcopy(list(value))]
                provenance[path] = layer.source

            elif policy is MergePolicy.MERGE_MAP:
                if not isinstance(value, Mapping):
                    raise self._type_error(path, layer, "merge-map", "a mapping", value)
                if current is _MISSING:
                    acc[key] = {}
                elif not isinstance(current, Mapping):
                    raise self._type_error(path, layer, "merge-map", "a mapping", current)
                self._fold(acc[key], value, layer, policies, provenance, prefix=path)
                provenance[path] = layer.source

            else:
                self._forget(provenance, path)
                acc[key] = copy.deepcopy(dict(value) if isinstance(value, Mapping) else value)
                self._record(provenance, path, value, layer.source)

    def _record(self, provenance: Dict[str, str], path: str, value: Any, source: str) -> None:
        provenance[path] = source
        if isinstance(value, Mapping):
            for key, nested in value.items():
                self._record(provenance, _join(path, str(key)), nested, source)

    @staticmethod
    def _forget(provenance: Dict[str, str], path: str) -> None:
        # An override replaces the whole subtree, so nested provenance goes too.
        stale = [p for p in provenance if p.startswith(path + ".")]
        for p in stale:
            del provenance[p]

    @staticmethod
    def _type_error(path: str, layer: ConfigLayer, policy: str, expected: str, got: Any) -> CatalogIntegrityError:
        return CatalogIntegrityError(
            f"Key '{path}' in layer '{layer.source}' uses policy '{policy}' but the value is not {expected} "
            f"(got {type(got).__name__})",
            context={"key": path, "layer": layer.source, "policy": policy},
        )


def resolve_configuration(profile: PlatformProfile, catalog: "Catalog") -> ResolvedConfiguration:
    return ConfigurationResolver(catalog).resolve(profile)


__all__ = ["ResolvedConfiguration", "ConfigurationResolver", "resolve_configuration"]
