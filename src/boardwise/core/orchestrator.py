"""Sequence identity matching, configuration, overlays and validation.

Every stage takes its inputs as values and returns new values; there is no
process-wide "current platform". Identity and configuration failures are
raised before any validator runs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from boardwise.core.catalog.model import Catalog, fragments_by_id
from boardwise.core.config.resolver import ConfigurationResolver, ResolvedConfiguration
from boardwise.core.exceptions import CatalogIntegrityError, NoMatchError
from boardwise.core.overlays.composer import OverlayComposer
from boardwise.core.overlays.models import ComposedDescription, OverlayFragment, OverlayManifest
from boardwise.core.platform.matcher import IdentityMatcher, MatchResult
from boardwise.core.platform.models import HardwareDescriptor, PlatformProfile
from boardwise.core.validation.pipeline import CancellationToken, ValidatorPipeline
from boardwise.core.validation.report import RunMode, ValidationReport

logger = logging.getLogger(__name__)


@dataclass
class PreparedPlatform:
    """Everything known about a platform before validation."""

    profile: PlatformProfile
    config: ResolvedConfiguration
    composed: ComposedDescription
    match: Optional[MatchResult] = None

    @property
    def manifest(self) -> OverlayManifest:
        return self.composed.manifest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.id,
            "match": self.match.to_dict() if self.match else None,
            "config": self.config.to_dict(),
            "overlays": self.composed.to_dict(),
        }


@dataclass
class RunResult:
    prepared: PreparedPlatform
    report: ValidationReport

    @property
    def manifest(self) -> OverlayManifest:
        return self.prepared.manifest

    @property
    def passed(self) -> bool:
        return self.report.passed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.prepared.profile.id,
            "match": self.prepared.match.to_dict() if self.prepared.match else None,
            "manifest": self.manifest.to_dict(),
            "report": self.report.to_dict(),
        }


class Orchestrator:
    """Identity Matcher -> Configuration Resolver -> Overlay Composer -> Validator Pipeline.

    Example:
        orchestrator = Orchestrator(load_bundled_catalog())
        result = orchestrator.run(descriptor, components=["cpu", "gpu"])
        result.report.verdict, result.manifest.applied
    """

    def __init__(
        self,
        catalog: Catalog,
        pipeline: Optional[ValidatorPipeline] = None,
        *,
        allow_generic_fallback: bool = True,
        composer: Optional[OverlayComposer] = None,
    ) -> None:
        self.catalog = catalog
        self.matcher = IdentityMatcher(catalog)
        self.resolver = ConfigurationResolver(catalog)
        self.composer = composer or OverlayComposer()
        self.pipeline = pipeline or ValidatorPipeline()
        self.allow_generic_fallback = allow_generic_fallback

    def detect(self, descriptor: HardwareDescriptor) -> MatchResult:
        """Resolve the descriptor to a profile.

        Raises:
            NoMatchError: nothing matched, or only the generic fallback matched
                while fallback is disallowed.
        """
        match = self.matcher.resolve(descriptor)
        if match.fallback and not self.allow_generic_fallback:
            raise NoMatchError(
                f"Model {descriptor.model!r} only matches the generic profile "
                f"'{match.profile.id}' and generic fallback is disabled",
                context={
                    "model": descriptor.model,
                    "compatible": list(descriptor.compatible),
                    "profile": match.profile.id,
                },
            )
        return match

    def candidate_fragments(self, config: ResolvedConfiguration) -> List[OverlayFragment]:
        """The resolved ``overlays`` list if set, else every catalog fragment in order."""
        order = config.get("overlays")
        if order is None:
            return list(self.catalog.fragments)
        if not isinstance(order, list):
            raise CatalogIntegrityError(
                f"'overlays' must be a list of fragment ids (set by '{config.source_of('overlays')}')",
                context={"key": "overlays", "layer": config.source_of("overlays")},
            )
        return fragments_by_id(self.catalog, order)

    def prepare(
        self,
        descriptor: Optional[HardwareDescriptor] = None,
        platform: Optional[str] = None,
    ) -> PreparedPlatform:
        """Identify (unless ``platform`` names the profile), resolve and compose."""
        match: Optional[MatchResult] = None
        if platform:
            profile = self.catalog.require_profile(platform)
        elif descriptor is not None:
            match = self.detect(descriptor)
            profile = match.profile
        else:
            raise ValueError("prepare() needs a descriptor or a platform id")

        config = self.resolver.resolve(profile)
        base = self.catalog.description_for(profile)
        composed = self.composer.compose(base, self.candidate_fragments(config), config)
        logger.info(
            "Prepared %s: overlays applied=%s skipped=%s",
            profile.id,
            composed.manifest.applied,
            [s.id for s in composed.manifest.skipped],
        )
        return PreparedPlatform(profile=profile, config=config, composed=composed, match=match)

    def default_components(self, config: ResolvedConfiguration) -> List[str]:
        """Enabled capabilities that have a registered validator, sorted."""
        caps = config.get("capabilities") or {}
        return sorted(
            name for name in caps if config.has_capability(name) and name in self.pipeline.registry
        )

    def run(
        self,
        descriptor: Optional[HardwareDescriptor] = None,
        platform: Optional[str] = None,
        components: Optional[Iterable[str]] = None,
        mode: RunMode | str = RunMode.COLLECT_ALL,
        cancel: Optional[CancellationToken] = None,
    ) -> RunResult:
        prepared = self.prepare(descriptor=descriptor, platform=platform)
        selected = list(components) if components is not None else self.default_components(prepared.config)
        report = self.pipeline.run(prepared.composed, prepared.config, selected, mode, cancel=cancel)
        return RunResult(prepared=prepared, report=report)


__all__ = ["Orchestrator", "PreparedPlatform", "RunResult"]
