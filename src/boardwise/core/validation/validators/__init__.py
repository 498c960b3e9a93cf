"""Built-in component validators."""
from __future__ import annotations

from .audio import AudioValidator
from .cpu import CpuValidator
from .gpu import GpuValidator
from .network import NetworkValidator
from .peripherals import PeripheralsValidator
from .storage import StorageValidator
from .thermal import ThermalValidator

BUILTIN_VALIDATORS = (
    CpuValidator,
    GpuValidator,
    AudioValidator,
    NetworkValidator,
    StorageValidator,
    PeripheralsValidator,
    ThermalValidator,
)

__all__ = [
    "BUILTIN_VALIDATORS",
    "AudioValidator",
    "CpuValidator",
    "GpuValidator",
    "NetworkValidator",
    "PeripheralsValidator",
    "StorageValidator",
    "ThermalValidator",
]
