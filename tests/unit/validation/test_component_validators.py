from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from boardwise.core.config import ResolvedConfiguration
from boardwise.core.overlays import ComposedDescription, HardwareDescription, OverlayManifest
from boardwise.core.validation import Metric, Probe, Status, ValidationContext
from boardwise.core.validation.validators import (
    AudioValidator,
    CpuValidator,
    GpuValidator,
    NetworkValidator,
    PeripheralsValidator,
    StorageValidator,
    ThermalValidator,
)
from boardwise.core.validation.validators.audio import parse_asound_cards
from boardwise.core.validation.validators.cpu import parse_cpu_list
from helpers.sysfs import FakeSysfs


def _context(
    component: str,
    fs: FakeSysfs,
    settings: Optional[Dict[str, Any]] = None,
    description: Optional[HardwareDescription] = None,
) -> ValidationContext:
    values = {component: settings} if settings is not None else {}
    return ValidationContext(
        component=component,
        composed=ComposedDescription(description or HardwareDescription(), OverlayManifest()),
        config=ResolvedConfiguration(values=values),
        probe=Probe(fs.root),
    )


# ---------------------------------------------------------------------- cpu


@pytest.mark.parametrize("text, expected", [("0", 1), ("0-3", 4), ("0-3,6", 5), ("0-1,4-5\n", 4)])
def test_parse_cpu_list(text: str, expected: int) -> None:
    assert parse_cpu_list(text) == expected


def test_cpu_passes_with_cores_and_frequency(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.cpus("0-3", max_khz=2_400_000)
    result = CpuValidator().validate(_context("cpu", fake_sysfs, {"min_cores": 4, "min_freq_mhz": 2400}))
    assert result.status is Status.PASS
    assert result.metric == Metric("max_freq", 2400.0, "MHz")


def test_cpu_fails_on_too_few_cores(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.cpus("0-1", max_khz=1_500_000)
    result = CpuValidator().validate(_context("cpu", fake_sysfs, {"min_cores": 4}))
    assert result.status is Status.FAIL
    assert result.diagnostic == "2 CPU(s) online, expected at least 4"


def test_cpu_fails_below_required_frequency(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.cpus("0-3", max_khz=1_800_000)
    result = CpuValidator().validate(_context("cpu", fake_sysfs, {"min_freq_mhz": 2400}))
    assert result.status is Status.FAIL
    assert "1800 MHz below required 2400 MHz" in result.diagnostic


def test_cpu_requires_cpufreq_only_when_frequency_configured(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.cpus("0-3")
    assert CpuValidator().validate(_context("cpu", fake_sysfs)).status is Status.PASS
    assert CpuValidator().validate(_context("cpu", fake_sysfs, {"min_freq_mhz": 1000})).status is Status.FAIL


# ---------------------------------------------------------------------- gpu


def test_gpu_passes_with_enabled_node_and_card(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.drm_cards(1)
    desc = HardwareDescription({"/soc/gpu": {"status": "okay"}})
    result = GpuValidator().validate(_context("gpu", fake_sysfs, {"node": "/soc/gpu"}, desc))
    assert result.status is Status.PASS
    assert result.metric == Metric("cards", 1)


def test_gpu_fails_when_node_disabled(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.drm_cards(1)
    desc = HardwareDescription({"/soc/gpu": {"status": "disabled"}})
    result = GpuValidator().validate(_context("gpu", fake_sysfs, {"node": "/soc/gpu"}, desc))
    assert result.status is Status.FAIL
    assert "status 'disabled'" in result.diagnostic


def test_gpu_fails_when_node_missing(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.drm_cards(1)
    result = GpuValidator().validate(_context("gpu", fake_sysfs, {"node": "/soc/gpu"}))
    assert result.status is Status.FAIL


def test_gpu_fails_without_drm_card(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.mkdir("/sys/class/drm/renderD128")
    result = GpuValidator().validate(_context("gpu", fake_sysfs))
    assert result.status is Status.FAIL
    assert result.metric == Metric("cards", 0)


# -------------------------------------------------------------------- audio


def test_parse_asound_cards() -> None:
    text = (
        " 0 [vc4hdmi0       ]: vc4-hdmi - vc4-hdmi-0\n"
        "                      vc4-hdmi-0\n"
        " 1 [Headphones     ]: bcm2835_headpho - bcm2835 Headphones\n"
        "                      bcm2835 Headphones\n"
    )
    assert parse_asound_cards(text) == [
        ("vc4hdmi0", "vc4-hdmi - vc4-hdmi-0"),
        ("Headphones", "bcm2835_headpho - bcm2835 Headphones"),
    ]


def test_audio_passes_with_expected_card(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.sound_cards({"vc4hdmi0": "vc4-hdmi - vc4-hdmi-0"})
    result = AudioValidator().validate(_context("audio", fake_sysfs, {"cards": ["vc4hdmi0"]}))
    assert result.status is Status.PASS


def test_audio_fails_on_missing_expected_card(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.sound_cards({"vc4hdmi0": "vc4-hdmi - vc4-hdmi-0"})
    result = AudioValidator().validate(_context("audio", fake_sysfs, {"cards": ["Headphones"]}))
    assert result.status is Status.FAIL
    assert "Headphones" in result.diagnostic


def test_audio_fails_without_asound(fake_sysfs: FakeSysfs) -> None:
    assert AudioValidator().validate(_context("audio", fake_sysfs)).status is Status.FAIL


# ------------------------------------------------------------------ network


def test_network_checks_configured_interfaces(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.net("eth0")
    ok = NetworkValidator().validate(_context("network", fake_sysfs, {"interfaces": ["eth0"]}))
    assert ok.status is Status.PASS
    missing = NetworkValidator().validate(_context("network", fake_sysfs, {"interfaces": ["eth0", "wlan0"]}))
    assert missing.status is Status.FAIL
    assert missing.metric == Metric("interfaces", 1)


def test_network_without_configuration_needs_non_loopback(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.net()
    assert NetworkValidator().validate(_context("network", fake_sysfs)).status is Status.FAIL
    fake_sysfs.net("end0")
    assert NetworkValidator().validate(_context("network", fake_sysfs)).status is Status.PASS


# ------------------------------------------------------------------ storage


def test_storage_autodetects_physical_devices(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.block("loop0", 2048)
    fake_sysfs.block("mmcblk0", 62_333_952)
    result = StorageValidator().validate(_context("storage", fake_sysfs))
    assert result.status is Status.PASS
    assert result.diagnostic == "block device(s): mmcblk0"
    assert result.metric == Metric("size", 29.72, "GiB")


def test_storage_fails_on_missing_configured_device(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.block("mmcblk0", 62_333_952)
    result = StorageValidator().validate(_context("storage", fake_sysfs, {"devices": ["nvme0n1"]}))
    assert result.status is Status.FAIL
    assert result.diagnostic == "block device nvme0n1 not found"


def test_storage_fails_on_zero_size_device(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.block("mmcblk0", 0)
    result = StorageValidator().validate(_context("storage", fake_sysfs, {"devices": ["mmcblk0"]}))
    assert result.status is Status.FAIL


# -------------------------------------------------------------- peripherals


def test_peripherals_resources_follow_configured_buses(fake_sysfs: FakeSysfs) -> None:
    ctx = _context("peripherals", fake_sysfs, {"buses": ["i2c-1", "spi0.0"]})
    assert PeripheralsValidator().resources(ctx) == ("bus:i2c-1", "bus:spi0.0")


def test_peripherals_checks_buses(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.bus("/dev/i2c-1")
    fake_sysfs.bus("/sys/bus/spi/devices/spi0.0")
    ok = PeripheralsValidator().validate(_context("peripherals", fake_sysfs, {"buses": ["i2c-1", "spi0.0"]}))
    assert ok.status is Status.PASS
    missing = PeripheralsValidator().validate(_context("peripherals", fake_sysfs, {"buses": ["i2c-3"]}))
    assert missing.status is Status.FAIL


def test_peripherals_without_buses_passes(fake_sysfs: FakeSysfs) -> None:
    result = PeripheralsValidator().validate(_context("peripherals", fake_sysfs))
    assert result.status is Status.PASS
    assert result.metric == Metric("buses", 0)


# ------------------------------------------------------------------ thermal


def test_thermal_reports_hottest_zone(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.thermal(41_000, 52_500)
    result = ThermalValidator().validate(_context("thermal", fake_sysfs))
    assert result.status is Status.PASS
    assert result.metric == Metric("temperature", 52.5, "C")
    assert result.diagnostic.startswith("thermal_zone1 at 52.5 C")


def test_thermal_fails_over_ceiling(fake_sysfs: FakeSysfs) -> None:
    fake_sysfs.thermal(90_000)
    result = ThermalValidator().validate(_context("thermal", fake_sysfs, {"max_celsius": 80}))
    assert result.status is Status.FAIL
    assert result.diagnostic == "thermal_zone0 at 90 C exceeds 80 C"


def test_thermal_fails_without_zones(fake_sysfs: FakeSysfs) -> None:
    assert ThermalValidator().validate(_context("thermal", fake_sysfs)).status is Status.FAIL
