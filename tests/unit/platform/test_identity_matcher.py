from __future__ import annotations

import pytest

from boardwise.core.exceptions import (
    AmbiguousRuleError,
    CatalogIntegrityError,
    NoMatchError,
    RuleOrderError,
)
from boardwise.core.platform import (
    HardwareDescriptor,
    IdentityMatcher,
    RuleKind,
    check_rule_table,
    resolve_identity,
)
from boardwise.core.platform.matcher import globs_intersect, rules_overlap
from helpers.catalogs import make_catalog, profile, rule


def _pi_catalog(*, fallback: str | None = "generic"):
    return make_catalog(
        [
            profile("generic"),
            profile("rpi4", "generic"),
            profile("rpi4-r15", "generic", "rpi4"),
            profile("rpi5", "generic"),
        ],
        rules=[
            rule("exact", "Raspberry Pi 4 Model B Rev 1.5", "rpi4-r15"),
            rule("glob", "Raspberry Pi 4*", "rpi4"),
            rule("glob", "Raspberry Pi 5*", "rpi5"),
            rule("compatible", "raspberrypi,5-model-b", "rpi5"),
        ],
        fallback=fallback,
    )


def test_exact_rule_beats_glob_rule() -> None:
    result = IdentityMatcher(_pi_catalog()).resolve(HardwareDescriptor(model="Raspberry Pi 4 Model B Rev 1.5"))
    assert result.profile.id == "rpi4-r15"
    assert result.rule is not None and result.rule.kind is RuleKind.EXACT
    assert result.fallback is False


def test_glob_rule_matches_model_prefix() -> None:
    result = IdentityMatcher(_pi_catalog()).resolve(HardwareDescriptor(model="Raspberry Pi 4 Model B Rev 1.4"))
    assert result.profile.id == "rpi4"
    assert result.rule.kind is RuleKind.GLOB


def test_compatible_rule_used_when_no_model_rule_matches() -> None:
    descriptor = HardwareDescriptor(
        model="Custom carrier board", compatible=("raspberrypi,5-model-b", "brcm,bcm2712")
    )
    result = IdentityMatcher(_pi_catalog()).resolve(descriptor)
    assert result.profile.id == "rpi5"
    assert result.rule.kind is RuleKind.COMPATIBLE


def test_unknown_device_gets_generic_fallback() -> None:
    result = resolve_identity(HardwareDescriptor(model="Pine64 RockPro64"), _pi_catalog())
    assert result.profile.id == "generic"
    assert result.fallback is True
    assert result.rule is None
    assert result.to_dict() == {"profile": "generic", "rule": None, "fallback": True}


def test_no_match_without_fallback_is_error() -> None:
    matcher = IdentityMatcher(_pi_catalog(fallback=None))
    with pytest.raises(NoMatchError) as exc:
        matcher.resolve(HardwareDescriptor(model="Pine64 RockPro64", compatible=("pine64,rockpro64",)))
    assert exc.value.context["model"] == "Pine64 RockPro64"
    assert exc.value.context["compatible"] == ["pine64,rockpro64"]


def test_catch_all_glob_is_reported_as_fallback() -> None:
    catalog = make_catalog(
        [profile("generic"), profile("rpi5", "generic")],
        rules=[rule("glob", "Raspberry Pi 5*", "rpi5"), rule("glob", "*", "generic")],
    )
    result = IdentityMatcher(catalog).resolve(HardwareDescriptor(model="Anything"))
    assert result.profile.id == "generic"
    assert result.fallback is True


def test_equal_specificity_overlap_is_ambiguous() -> None:
    catalog = make_catalog(
        [profile("a"), profile("b")],
        rules=[rule("glob", "Pi*", "a"), rule("glob", "*Pi", "b")],
    )
    with pytest.raises(AmbiguousRuleError) as exc:
        IdentityMatcher(catalog)
    assert exc.value.context["profiles"] == ["a", "b"]


def test_duplicate_exact_rules_for_different_profiles_are_ambiguous() -> None:
    rules = [rule("exact", "Board X", "a", 0), rule("exact", "Board X", "b", 1)]
    with pytest.raises(AmbiguousRuleError):
        check_rule_table(rules)


def test_ambiguity_is_a_catalog_integrity_error() -> None:
    rules = [rule("compatible", "acme,x", "a", 0), rule("compatible", "acme,x", "b", 1)]
    with pytest.raises(CatalogIntegrityError):
        check_rule_table(rules)


def test_redundant_rule_for_same_profile_is_allowed() -> None:
    check_rule_table([rule("exact", "Board X", "a", 0), rule("exact", "Board X", "a", 1)])


def test_more_specific_rule_after_less_specific_is_order_error() -> None:
    catalog = make_catalog(
        [profile("rpi"), profile("rpi4")],
        rules=[rule("glob", "Raspberry*", "rpi"), rule("glob", "Raspberry Pi 4*", "rpi4")],
    )
    with pytest.raises(RuleOrderError):
        IdentityMatcher(catalog)


def test_descending_specificity_is_accepted() -> None:
    catalog = make_catalog(
        [profile("rpi"), profile("rpi4")],
        rules=[rule("glob", "Raspberry Pi 4*", "rpi4"), rule("glob", "Raspberry*", "rpi")],
    )
    matcher = IdentityMatcher(catalog)
    assert matcher.resolve(HardwareDescriptor(model="Raspberry Pi 4 Model B")).profile.id == "rpi4"
    assert matcher.resolve(HardwareDescriptor(model="Raspberry Pi 3 Model B")).profile.id == "rpi"


def test_disjoint_equal_specificity_globs_do_not_overlap() -> None:
    a = rule("glob", "Raspberry Pi 4*", "rpi4")
    b = rule("glob", "Raspberry Pi 5*", "rpi5")
    assert a.specificity == b.specificity == 14
    assert not rules_overlap(a, b)


def test_interleaved_equal_specificity_globs_are_ambiguous() -> None:
    a = rule("glob", "Pine*v2", "a")
    b = rule("glob", "*Rock64*", "b")
    assert a.specificity == b.specificity == 6
    assert rules_overlap(a, b)
    with pytest.raises(AmbiguousRuleError):
        IdentityMatcher(make_catalog([profile("a"), profile("b")], rules=[a, b]))


def test_interleaved_overlap_out_of_order_is_order_error() -> None:
    catalog = make_catalog(
        [profile("rock"), profile("pine")],
        rules=[rule("glob", "*Rock*", "rock"), rule("glob", "Pine*Rock64*", "pine")],
    )
    with pytest.raises(RuleOrderError):
        IdentityMatcher(catalog)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("Pine*v2", "*Rock64*", True),
        ("Board [0-4]*", "Board [5-9]*", False),
        ("Board [0-4]*", "Board [3-7]*", True),
        ("Board [!0-9]", "Board 7", False),
        ("Board [!0-9]", "Board [!a-z]", True),
        ("Board ?", "Board", False),
        ("*-a*", "*-b*", True),
        ("x*y", "*z", False),
    ],
)
def test_globs_intersect(a: str, b: str, expected: bool) -> None:
    assert globs_intersect(a, b) is expected
    assert globs_intersect(b, a) is expected


def test_compatible_rules_follow_descriptor_order() -> None:
    catalog = make_catalog(
        [profile("a"), profile("b")],
        rules=[rule("compatible", "brcm,bcm2712", "a"), rule("compatible", "raspberrypi,5-model-b", "b")],
    )
    check_rule_table(catalog.rules)
    matcher = IdentityMatcher(catalog)
    board = HardwareDescriptor(model="Custom", compatible=("raspberrypi,5-model-b", "brcm,bcm2712"))
    assert matcher.resolve(board).profile.id == "b"
    soc_only = HardwareDescriptor(model="Custom", compatible=("brcm,bcm2712",))
    assert matcher.resolve(soc_only).profile.id == "a"


def test_rule_targeting_unknown_profile_is_rejected() -> None:
    catalog = make_catalog([profile("generic")], rules=[rule("exact", "Board", "ghost")])
    with pytest.raises(CatalogIntegrityError) as exc:
        IdentityMatcher(catalog)
    assert exc.value.context["profile"] == "ghost"
