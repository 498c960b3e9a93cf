from __future__ import annotations

import pytest

from boardwise.core.platform import (
    HardwareDescriptor,
    MatchRule,
    PlatformProfile,
    RuleKind,
    descriptor_from_mapping,
    parse_rule_kind,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("exact", RuleKind.EXACT),
        ("GLOB", RuleKind.GLOB),
        ("prefix", RuleKind.GLOB),
        ("wildcard", RuleKind.GLOB),
        (" compatible ", RuleKind.COMPATIBLE),
        (RuleKind.EXACT, RuleKind.EXACT),
    ],
)
def test_parse_rule_kind(raw, expected) -> None:
    assert parse_rule_kind(raw) is expected


def test_parse_rule_kind_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_rule_kind("regex")


def test_glob_specificity_counts_literal_characters_only() -> None:
    r = MatchRule(kind=RuleKind.GLOB, pattern="Raspberry Pi ?*", profile="rpi")
    assert r.specificity == len("Raspberry Pi ")
    assert r.literal == "Raspberry Pi "
    assert MatchRule(kind=RuleKind.EXACT, pattern="Board", profile="b").specificity == 5


def test_compatible_rule_matches_any_listed_string() -> None:
    r = MatchRule(kind=RuleKind.COMPATIBLE, pattern="brcm,bcm2712", profile="rpi5")
    assert r.matches(HardwareDescriptor(model="x", compatible=("raspberrypi,5-model-b", "brcm,bcm2712")))
    assert not r.matches(HardwareDescriptor(model="brcm,bcm2712"))


def test_glob_rule_is_case_sensitive() -> None:
    r = MatchRule(kind=RuleKind.GLOB, pattern="Raspberry Pi 5*", profile="rpi5")
    assert r.matches(HardwareDescriptor(model="Raspberry Pi 5 Model B Rev 1.0"))
    assert not r.matches(HardwareDescriptor(model="raspberry pi 5 model b"))


def test_descriptor_strips_device_tree_terminators() -> None:
    d = HardwareDescriptor(model="Raspberry Pi 5 Model B Rev 1.0\x00", compatible=("raspberrypi,5-model-b\x00", ""))
    assert d.model == "Raspberry Pi 5 Model B Rev 1.0"
    assert d.compatible == ("raspberrypi,5-model-b",)


def test_descriptor_from_mapping_keeps_commas_in_compatible_strings() -> None:
    d = descriptor_from_mapping(
        {"model": "Board", "compatible": "raspberrypi,5-model-b brcm,bcm2712", "memory_bytes": "1024"},
        source="descriptor.yaml",
    )
    assert d.compatible == ("raspberrypi,5-model-b", "brcm,bcm2712")
    assert d.memory_bytes == 1024
    assert d.source == "descriptor.yaml"


def test_descriptor_from_mapping_rejects_non_mapping() -> None:
    with pytest.raises(ValueError):
        descriptor_from_mapping(["Raspberry Pi 5"])  # type: ignore[arg-type]


def test_profile_chain_is_root_first_with_self_last() -> None:
    p = PlatformProfile(id="rpi5", ancestors=("generic-arm64", "raspberry-pi-common"))
    assert p.chain == ("generic-arm64", "raspberry-pi-common", "rpi5")
    assert p.to_dict()["ancestors"] == ["generic-arm64", "raspberry-pi-common"]
