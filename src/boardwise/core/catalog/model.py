"""The platform catalog: profiles, identity rules, config layers and overlays.

A catalog is an already-parsed, read-only input. Building one does not check
it; call :meth:`Catalog.check_integrity` (the loader always does) to reject
internally inconsistent data before anything is resolved against it.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from boardwise.core.config.layers import ConfigLayer
from boardwise.core.exceptions import (
    CatalogIntegrityError,
    FallbackMissingError,
    MissingAncestorError,
    NoMatchError,
)
from boardwise.core.overlays.models import HardwareDescription, OverlayFragment
from boardwise.core.platform.models import MatchRule, PlatformProfile


class Catalog:
    def __init__(
        self,
        profiles: Iterable[PlatformProfile],
        *,
        rules: Iterable[MatchRule] = (),
        layers: Iterable[ConfigLayer] = (),
        fragments: Iterable[OverlayFragment] = (),
        descriptions: Optional[Mapping[str, HardwareDescription]] = None,
        fallback: Optional[str] = None,
        source: str = "<memory>",
    ) -> None:
        self.source = source
        self.fallback = fallback or None

        profile_map: Dict[str, PlatformProfile] = {}
        for profile in profiles:
            if profile.id in profile_map:
                raise CatalogIntegrityError(
                    f"Duplicate profile id '{profile.id}'", context={"profile": profile.id}
                )
            profile_map[profile.id] = profile
        self._profiles = MappingProxyType(profile_map)

        self.rules: Tuple[MatchRule, ...] = tuple(rules)

        layer_map: Dict[str, ConfigLayer] = {}
        for layer in layers:
            if layer.source in layer_map:
                raise CatalogIntegrityError(
                    f"Duplicate config layer for '{layer.source}'", context={"layer": layer.source}
                )
            layer_map[layer.source] = layer
        self._layers = MappingProxyType(layer_map)

        self.fragments: Tuple[OverlayFragment, ...] = tuple(fragments)
        fragment_ids: set[str] = set()
        for fragment in self.fragments:
            if fragment.id in fragment_ids:
                raise CatalogIntegrityError(
                    f"Duplicate overlay fragment id '{fragment.id}'", context={"fragment": fragment.id}
                )
            fragment_ids.add(fragment.id)

        self._descriptions = MappingProxyType(dict(descriptions or {}))

    # ------------------------------------------------------------------ lookups

    @property
    def profiles(self) -> Mapping[str, PlatformProfile]:
        return self._profiles

    def get_profile(self, profile_id: str) -> Optional[PlatformProfile]:
        return self._profiles.get(profile_id)

    def require_profile(self, profile_id: str) -> PlatformProfile:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise NoMatchError(
                f"Unknown platform profile '{profile_id}'",
                context={"profile": profile_id, "known": sorted(self._profiles)},
            )
        return profile

    def layer_for(self, profile_id: str) -> ConfigLayer:
        """The profile's own config layer (empty when it declares no settings)."""
        return self._layers.get(profile_id) or ConfigLayer(source=profile_id)

    def get_fragment(self, fragment_id: str) -> Optional[OverlayFragment]:
        for fragment in self.fragments:
            if fragment.id == fragment_id:
                return fragment
        return None

    def description_for(self, profile: PlatformProfile) -> HardwareDescription:
        """Nearest base hardware description along the chain, leaf first."""
        for profile_id in reversed(profile.chain):
            found = self._descriptions.get(profile_id)
            if found is not None:
                return found.copy()
        return HardwareDescription()

    # ---------------------------------------------------------------- integrity

    def check_integrity(self) -> "Catalog":
        """Validate internal consistency; returns self for chaining.

        Raises:
            CatalogIntegrityError: or one of its subclasses.
        """
        # Local import: the matcher depends on this module.
        from boardwise.core.platform.matcher import check_rule_table

        if self.fallback and self.fallback not in self._profiles:
            raise FallbackMissingError(
                f"Generic fallback profile '{self.fallback}' is not in the catalog",
                context={"fallback": self.fallback},
            )

        for profile in self._profiles.values():
            seen: set[str] = set()
            for ancestor in profile.ancestors:
                if ancestor == profile.id:
                    raise CatalogIntegrityError(
                        f"Profile '{profile.id}' lists itself as an ancestor",
                        context={"profile": profile.id},
                    )
                if ancestor in seen:
                    raise CatalogIntegrityError(
                        f"Profile '{profile.id}' lists ancestor '{ancestor}' twice",
                        context={"profile": profile.id, "ancestor": ancestor},
                    )
                seen.add(ancestor)
                if ancestor not in self._profiles:
                    raise MissingAncestorError(profile.id, ancestor)

        for rule in self.rules:
            if rule.profile not in self._profiles:
                raise CatalogIntegrityError(
                    f"Identity rule {rule.describe()} targets unknown profile '{rule.profile}'",
                    context={"rule": rule.describe(), "profile": rule.profile},
                )
        check_rule_table(self.rules)

        for source in self._layers:
            if source not in self._profiles:
                raise CatalogIntegrityError(
                    f"Config layer '{source}' has no matching profile", context={"layer": source}
                )
        for source in self._descriptions:
            if source not in self._profiles:
                raise CatalogIntegrityError(
                    f"Hardware description '{source}' has no matching profile",
                    context={"description": source},
                )
        return self

    def summary(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "fallback": self.fallback,
            "profiles": sorted(self._profiles),
            "rules": [r.describe() for r in self.rules],
            "fragments": [f.id for f in self.fragments],
        }

    def __repr__(self) -> str:
        return f"Catalog(source={self.source!r}, profiles={len(self._profiles)}, rules={len(self.rules)})"


def fragments_by_id(catalog: Catalog, ids: Iterable[str]) -> List[OverlayFragment]:
    """Look up fragments in the given order.

    Raises:
        CatalogIntegrityError: when an id is not in the catalog.
    """
    out: List[OverlayFragment] = []
    for fragment_id in ids:
        fragment = catalog.get_fragment(str(fragment_id))
        if fragment is None:
            raise CatalogIntegrityError(
                f"Overlay fragment '{fragment_id}' is not in the catalog",
                context={"fragment": str(fragment_id)},
            )
        out.append(fragment)
    return out


__all__ = ["Catalog", "fragments_by_id"]
