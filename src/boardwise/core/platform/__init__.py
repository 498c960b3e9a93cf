"""Platform identity: profiles, identity rules and the matcher."""
from __future__ import annotations

from .matcher import IdentityMatcher, MatchResult, check_rule_table, resolve_identity
from .models import (
    HardwareDescriptor,
    MatchRule,
    PlatformProfile,
    RuleKind,
    descriptor_from_mapping,
    parse_rule_kind,
)

__all__ = [
    "HardwareDescriptor",
    "MatchRule",
    "PlatformProfile",
    "RuleKind",
    "descriptor_from_mapping",
    "parse_rule_kind",
    "IdentityMatcher",
    "MatchResult",
    "check_rule_table",
    "resolve_identity",
]
