"""Platform identity types: profiles, identity rules and hardware descriptors."""
from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class RuleKind(str, Enum):
    """Identity rule kinds, listed in evaluation priority order."""

    EXACT = "exact"
    GLOB = "glob"
    COMPATIBLE = "compatible"


RULE_PRIORITY: tuple[RuleKind, ...] = (RuleKind.EXACT, RuleKind.GLOB, RuleKind.COMPATIBLE)

_GLOB_META = frozenset("*?[]")


def parse_rule_kind(raw: Optional[str]) -> RuleKind:
    if isinstance(raw, RuleKind):
        return raw
    v = str(raw or "").strip().lower()
    # "prefix" and "wildcard" are both expressed as glob patterns.
    if v in {"prefix", "wildcard"}:
        return RuleKind.GLOB
    for kind in RuleKind:
        if v == kind.value:
            return kind
    raise ValueError(f"Invalid rule kind: {raw} (expected one of: exact, glob, compatible)")


@dataclass(frozen=True)
class MatchRule:
    """One row of the declarative identity rule table."""

    kind: RuleKind
    pattern: str
    profile: str
    index: int = 0

    @property
    def specificity(self) -> int:
        """Number of literal characters in the pattern.

        Exact and compatible rules are fully literal; glob wildcards do not count.
        """
        if self.kind is not RuleKind.GLOB:
            return len(self.pattern)
        return sum(1 for ch in self.pattern if ch not in _GLOB_META)

    @property
    def literal(self) -> str:
        """The pattern with glob wildcards removed (a shortest witness input)."""
        if self.kind is not RuleKind.GLOB:
            return self.pattern
        return "".join(ch for ch in self.pattern if ch not in _GLOB_META)

    def matches(self, descriptor: "HardwareDescriptor") -> bool:
        if self.kind is RuleKind.EXACT:
            return descriptor.model == self.pattern
        if self.kind is RuleKind.GLOB:
            return fnmatch.fnmatchcase(descriptor.model, self.pattern)
        return self.pattern in descriptor.compatible

    def describe(self) -> str:
        return f"{self.kind.value}:{self.pattern!r} -> {self.profile}"


@dataclass(frozen=True)
class PlatformProfile:
    """A named hardware target.

    ``ancestors`` is ordered root-first (e.g. generic -> family); the profile
    itself is always the last, most specific link of its chain.
    """

    id: str
    ancestors: tuple[str, ...] = ()
    capabilities: frozenset[str] = frozenset()
    description: str = ""

    @property
    def chain(self) -> tuple[str, ...]:
        return (*self.ancestors, self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ancestors": list(self.ancestors),
            "capabilities": sorted(self.capabilities),
            "description": self.description,
        }


@dataclass(frozen=True)
class HardwareDescriptor:
    """Runtime-observed facts about the current device."""

    model: str
    compatible: tuple[str, ...] = ()
    cpu_part: Optional[str] = None
    memory_bytes: Optional[int] = None
    source: str = field(default="manual", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "model", _clean(self.model))
        object.__setattr__(
            self,
            "compatible",
            tuple(c for c in (_clean(x) for x in self.compatible) if c),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "compatible": list(self.compatible),
            "cpu_part": self.cpu_part,
            "memory_bytes": self.memory_bytes,
            "source": self.source,
        }


def _clean(value: Any) -> str:
    # Device-tree strings are NUL-terminated.
    return str(value or "").replace("\x00", "").strip()


def descriptor_from_mapping(data: Dict[str, Any], *, source: str = "file") -> HardwareDescriptor:
    """Build a descriptor from a parsed YAML/JSON mapping."""
    if not isinstance(data, dict):
        raise ValueError(f"Descriptor must be a mapping, got {type(data).__name__}")
    compatible = data.get("compatible") or []
    if isinstance(compatible, str):
        # Compatible strings contain commas themselves; a scalar is whitespace-separated.
        compatible = compatible.split()
    memory = data.get("memory_bytes")
    return HardwareDescriptor(
        model=str(data.get("model") or ""),
        compatible=tuple(str(c) for c in compatible),
        cpu_part=str(data["cpu_part"]) if data.get("cpu_part") else None,
        memory_bytes=int(memory) if memory is not None else None,
        source=source,
    )


__all__ = [
    "RuleKind",
    "RULE_PRIORITY",
    "parse_rule_kind",
    "MatchRule",
    "PlatformProfile",
    "HardwareDescriptor",
    "descriptor_from_mapping",
]
