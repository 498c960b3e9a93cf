"""Configuration layers contributed by platform profiles."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class MergePolicy(str, Enum):
    OVERRIDE = "override"
    APPEND = "append"
    MERGE_MAP = "merge-map"


def parse_merge_policy(raw: Optional[str]) -> MergePolicy:
    if isinstance(raw, MergePolicy):
        return raw
    v = str(raw or "").strip().lower().replace("_", "-")
    if not v:
        return MergePolicy.OVERRIDE
    for p in MergePolicy:
        if v == p.value:
            return p
    raise ValueError(f"Invalid merge policy: {raw} (expected one of: override, append, merge-map)")


@dataclass(frozen=True)
class ConfigLayer:
    """Option values from one profile plus the merge policy of each key.

    Policies are addressed by dotted key path (``"cmdline.extra"``) so that
    keys nested under a ``merge-map`` key can carry their own policy. Keys
    without an entry use ``override``.
    """

    source: str
    values: Mapping[str, Any] = field(default_factory=dict)
    policies: Mapping[str, MergePolicy] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(
            self,
            "policies",
            MappingProxyType({k: parse_merge_policy(v) for k, v in dict(self.policies).items()}),
        )

    def policy_for(self, path: str) -> MergePolicy:
        return self.policies.get(path, MergePolicy.OVERRIDE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "values": dict(self.values),
            "policies": {k: v.value for k, v in self.policies.items()},
        }


__all__ = ["MergePolicy", "parse_merge_policy", "ConfigLayer"]
