"""Identity matching: hardware descriptor -> platform profile.

Model rules are evaluated by kind (exact model, then glob model) and, within
a kind, in declaration order; the first matching rule wins. Compatible rules
come last and follow the descriptor's own order: the device lists its
compatible strings most specific first, so the earliest listed string that
any rule names decides, and declaration order only breaks ties.

The rule table is validated when the matcher is built:

- two overlapping rules of the same kind and equal specificity that point at
  different profiles are ambiguous;
- a rule declared after a less specific rule that overlaps it is an ordering
  error (the table must be in strictly descending specificity).

Two glob patterns overlap when some model string matches both; this is
decided exactly by walking both patterns in lockstep.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set, Tuple

from boardwise.core.exceptions import (
    AmbiguousRuleError,
    CatalogIntegrityError,
    NoMatchError,
    RuleOrderError,
)

from .models import RULE_PRIORITY, HardwareDescriptor, MatchRule, PlatformProfile, RuleKind

if TYPE_CHECKING:
    from boardwise.core.catalog.model import Catalog

logger = logging.getLogger(__name__)

# A character class: (negated, inclusive ranges). ``None`` stands for ``*``.
CharClass = Tuple[bool, Tuple[Tuple[str, str], ...]]
_ANY_CHAR: CharClass = (True, ())


@dataclass(frozen=True)
class MatchResult:
    profile: PlatformProfile
    rule: Optional[MatchRule] = None
    fallback: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "profile": self.profile.id,
            "rule": self.rule.describe() if self.rule else None,
            "fallback": self.fallback,
        }


def _parse_class(body: str) -> CharClass:
    negated = body.startswith("!")
    if negated:
        body = body[1:]
    ranges: List[Tuple[str, str]] = []
    k = 0
    while k < len(body):
        if k + 2 < len(body) and body[k + 1] == "-":
            ranges.append((body[k], body[k + 2]))
            k += 3
        else:
            ranges.append((body[k], body[k]))
            k += 1
    return negated, tuple(ranges)


def parse_glob(pattern: str) -> List[Optional[CharClass]]:
    """Split an ``fnmatch`` pattern into ``*`` markers and one-character classes.

    Bracket parsing follows ``fnmatch.translate``: a leading ``!`` negates, a
    ``]`` right after the opening bracket is literal and an unterminated
    ``[`` is a literal bracket.
    """
    tokens: List[Optional[CharClass]] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            if not tokens or tokens[-1] is not None:
                tokens.append(None)
        elif c == "?":
            tokens.append(_ANY_CHAR)
        elif c == "[":
            j = i
            if j < n and pattern[j] == "!":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                tokens.append((False, (("[", "["),)))
                continue
            tokens.append(_parse_class(pattern[i:j]))
            i = j + 1
        else:
            tokens.append((False, ((c, c),)))
    return tokens


def _covered(lo: int, hi: int, ranges: Iterable[Tuple[str, str]]) -> bool:
    """True if every code point in ``[lo, hi]`` falls inside ``ranges``."""
    cur = lo
    for rlo, rhi in sorted((ord(a), ord(b)) for a, b in ranges if a <= b):
        if rlo > cur:
            return False
        cur = max(cur, rhi + 1)
        if cur > hi:
            return True
    return cur > hi


def classes_meet(x: CharClass, y: CharClass) -> bool:
    """True if some single character belongs to both classes."""
    x_neg, x_ranges = x
    y_neg, y_ranges = y
    if x_neg and y_neg:
        # Two finite exclusions never cover the whole alphabet.
        return True
    if x_neg:
        x_neg, x_ranges, y_neg, y_ranges = y_neg, y_ranges, x_neg, x_ranges
    for lo, hi in x_ranges:
        if lo > hi:
            continue
        if y_neg:
            if not _covered(ord(lo), ord(hi), y_ranges):
                return True
        elif any(max(lo, ylo) <= min(hi, yhi) for ylo, yhi in y_ranges):
            return True
    return False


def globs_intersect(a: str, b: str) -> bool:
    """True if some string matches both ``fnmatch`` patterns.

    Searches the product of the two patterns' positions: a ``*`` may be
    skipped or may consume a character and stay put; any other token consumes
    exactly one character from its class.
    """
    ta, tb = parse_glob(a), parse_glob(b)
    end = (len(ta), len(tb))
    stack = [(0, 0)]
    seen: Set[Tuple[int, int]] = set()
    while stack:
        state = stack.pop()
        if state in seen:
            continue
        seen.add(state)
        if state == end:
            return True
        i, j = state
        x = ta[i] if i < len(ta) else False
        y = tb[j] if j < len(tb) else False
        if x is None:
            stack.append((i + 1, j))
        if y is None:
            stack.append((i, j + 1))
        if x is False or y is False:
            continue
        if classes_meet(x or _ANY_CHAR, y or _ANY_CHAR):
            nxt = (i if x is None else i + 1, j if y is None else j + 1)
            if nxt != state:
                stack.append(nxt)
    return False


def rules_overlap(a: MatchRule, b: MatchRule) -> bool:
    """True if some input can satisfy both rules (same kind assumed).

    Exact and compatible rules overlap only on an identical string; distinct
    compatible strings are ranked by the descriptor at match time.
    """
    if a.kind is RuleKind.GLOB and b.kind is RuleKind.GLOB:
        return globs_intersect(a.pattern, b.pattern)
    return a.pattern == b.pattern


def check_rule_table(rules: Iterable[MatchRule]) -> None:
    """Reject ambiguous or mis-ordered identity rules.

    Raises:
        AmbiguousRuleError: equal-specificity overlap with different targets.
        RuleOrderError: a more specific rule is shadowed by an earlier one.
    """
    by_kind: Dict[RuleKind, List[MatchRule]] = {k: [] for k in RULE_PRIORITY}
    for rule in rules:
        by_kind[rule.kind].append(rule)

    for kind, kind_rules in by_kind.items():
        for a, b in combinations(kind_rules, 2):
            if not rules_overlap(a, b):
                continue
            if a.specificity == b.specificity:
                if a.profile != b.profile:
                    raise AmbiguousRuleError(
                        f"Ambiguous {kind.value} rules: {a.describe()} and {b.describe()} "
                        "have equal specificity and can match the same device",
                        context={
                            "rules": [a.describe(), b.describe()],
                            "profiles": [a.profile, b.profile],
                        },
                    )
                logger.debug("Redundant identity rule %s (same target as rule #%d)", b.describe(), a.index)
            elif a.specificity < b.specificity:
                raise RuleOrderError(
                    f"Rule {b.describe()} (#{b.index}) is shadowed by less specific rule "
                    f"{a.describe()} (#{a.index}); declare rules in descending specificity",
                    context={
                        "rules": [a.describe(), b.describe()],
                        "profiles": [a.profile, b.profile],
                    },
                )


class IdentityMatcher:
    """Resolve a descriptor to a profile using the catalog's rule table.

    Example:
        matcher = IdentityMatcher(catalog)
        result = matcher.resolve(HardwareDescriptor(model="Raspberry Pi 5 Model B Rev 1.0"))
        print(result.profile.id)  # rpi5
    """

    def __init__(self, catalog: "Catalog") -> None:
        self.catalog = catalog
        for rule in catalog.rules:
            if catalog.get_profile(rule.profile) is None:
                raise CatalogIntegrityError(
                    f"Identity rule {rule.describe()} targets unknown profile '{rule.profile}'",
                    context={"rule": rule.describe(), "profile": rule.profile},
                )
        check_rule_table(catalog.rules)
        self._model_rules: List[MatchRule] = [
            r for kind in RULE_PRIORITY if kind is not RuleKind.COMPATIBLE for r in catalog.rules if r.kind is kind
        ]
        self._compatible_rules: Dict[str, MatchRule] = {}
        # Among rules naming the same string the first declared wins.
        for r in catalog.rules:
            if r.kind is RuleKind.COMPATIBLE:
                self._compatible_rules.setdefault(r.pattern, r)

    def match_rule(self, descriptor: HardwareDescriptor) -> Optional[MatchRule]:
        for rule in self._model_rules:
            if rule.matches(descriptor):
                return rule
        for compatible in descriptor.compatible:
            rule = self._compatible_rules.get(compatible)
            if rule is not None:
                return rule
        return None

    def resolve(self, descriptor: HardwareDescriptor) -> MatchResult:
        """Return the matching profile, falling back to the generic profile.

        Raises:
            NoMatchError: nothing matched and the catalog has no fallback.
        """
        rule = self.match_rule(descriptor)
        if rule is not None:
            profile = self.catalog.require_profile(rule.profile)
            # A bare catch-all rule is the fallback in all but name.
            catch_all = rule.kind is RuleKind.GLOB and rule.specificity == 0
            logger.debug("Descriptor %r matched %s", descriptor.model, rule.describe())
            return MatchResult(profile=profile, rule=rule, fallback=catch_all)

        if self.catalog.fallback:
            logger.info(
                "No identity rule matched model %r; using generic profile '%s'",
                descriptor.model,
                self.catalog.fallback,
            )
            return MatchResult(profile=self.catalog.require_profile(self.catalog.fallback), fallback=True)

        raise NoMatchError(
            f"No platform rule matched model {descriptor.model!r} and the catalog has no generic fallback",
            context={"model": descriptor.model, "compatible": list(descriptor.compatible)},
        )


def resolve_identity(descriptor: HardwareDescriptor, catalog: "Catalog") -> MatchResult:
    """Convenience wrapper around :class:`IdentityMatcher`."""
    return IdentityMatcher(catalog).resolve(descriptor)


__all__ = [
    "MatchResult",
    "IdentityMatcher",
    "check_rule_table",
    "globs_intersect",
    "rules_overlap",
    "resolve_identity",
]
