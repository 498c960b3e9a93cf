"""Apply ordered device-tree overlay fragments onto a base hardware description."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from boardwise.core.exceptions import CatalogIntegrityError, OverlayConflict

from .models import (
    ComposedDescription,
    DeletionRecord,
    HardwareDescription,
    OverlayFragment,
    OverlayManifest,
    OverrideRecord,
    SkippedFragment,
    is_within,
)

if TYPE_CHECKING:
    from boardwise.core.config.resolver import ResolvedConfiguration

logger = logging.getLogger(__name__)


class OverlayComposer:
    """Compose overlays in caller order.

    Rules:
    - a fragment whose ``requires`` capability is absent from the resolved
      configuration is skipped (recorded, never an error);
    - the first write of a (node, property) pair applies; a repeated write
      needs the ``replace`` marker and is recorded as an override, otherwise
      it is an :class:`OverlayConflict`;
    - a fragment's deletions run after its own writes, and may not remove a
      node that a later applied fragment writes into.
    """

    def compose(
        self,
        base: HardwareDescription,
        fragments: Iterable[OverlayFragment],
        resolved: Optional["ResolvedConfiguration"] = None,
    ) -> ComposedDescription:
        manifest = OverlayManifest()
        applicable: List[OverlayFragment] = []
        for fragment in fragments:
            reason = self._skip_reason(fragment, resolved)
            if reason:
                logger.debug("Skipping overlay %s: %s", fragment.id, reason)
                manifest.skipped.append(SkippedFragment(id=fragment.id, reason=reason))
            else:
                applicable.append(fragment)

        description = base.copy()
        writers: Dict[Tuple[str, str], str] = {}

        for position, fragment in enumerate(applicable):
            self._apply_writes(fragment, description, writers, manifest)
            self._apply_deletes(fragment, applicable[position + 1:], description, writers, manifest)
            manifest.applied.append(fragment.id)

        logger.debug(
            "Composed %d overlay(s), skipped %d, %d override(s)",
            len(manifest.applied),
            len(manifest.skipped),
            len(manifest.overrides),
        )
        return ComposedDescription(description=description, manifest=manifest)

    @staticmethod
    def _skip_reason(fragment: OverlayFragment, resolved: Optional["ResolvedConfiguration"]) -> str:
        if not fragment.requires:
            return ""
        if resolved is not None and resolved.has_capability(fragment.requires):
            return ""
        return f"capability '{fragment.requires}' not present"

    @staticmethod
    def _apply_writes(
        fragment: OverlayFragment,
        description: HardwareDescription,
        writers: Dict[Tuple[str, str], str],
        manifest: OverlayManifest,
    ) -> None:
        for write in fragment.writes:
            key = (write.path, write.property)
            previous = writers.get(key)
            if previous is not None:
                if not fragment.is_replace(write):
                    raise OverlayConflict(
                        f"Overlay '{fragment.id}' writes {write.path}:{write.property} "
                        f"already written by '{previous}'",
                        fragments=(previous, fragment.id),
                        path=write.path,
                        property=write.property,
                    )
                manifest.overrides.append(
                    OverrideRecord(
                        path=write.path,
                        property=write.property,
                        previous=previous,
                        fragment=fragment.id,
                    )
                )
            description.set(write.path, write.property, write.value)
            writers[key] = fragment.id

    @staticmethod
    def _apply_deletes(
        fragment: OverlayFragment,
        later: List[OverlayFragment],
        description: HardwareDescription,
        writers: Dict[Tuple[str, str], str],
        manifest: OverlayManifest,
    ) -> None:
        for path in fragment.deletes:
            if path == "/":
                raise CatalogIntegrityError(
                    f"Overlay '{fragment.id}' deletes the root node", context={"fragment": fragment.id}
                )
            for other in later:
                touched = other.touches(path)
                if touched is not None:
                    raise OverlayConflict(
                        f"Overlay '{fragment.id}' deletes {path} but later overlay "
                        f"'{other.id}' writes into {touched}",
                        fragments=(fragment.id, other.id),
                        path=path,
                    )
            existed = description.delete_node(path)
            if not existed:
                logger.debug("Overlay %s deletes absent node %s (no-op)", fragment.id, path)
            for key in [k for k in writers if is_within(k[0], path)]:
                del writers[key]
            manifest.deleted.append(DeletionRecord(path=path, fragment=fragment.id, existed=existed))


def compose_overlays(
    base: HardwareDescription,
    fragments: Iterable[OverlayFragment],
    resolved: Optional["ResolvedConfiguration"] = None,
) -> ComposedDescription:
    return OverlayComposer().compose(base, fragments, resolved)


__all__ = ["OverlayComposer", "compose_overlays"]
