"""Temperature sources and resolvers for tempmon."""

from .cpu import CpuTemperatureResolver
from .gpu import GpuTemperatureEnumerator
from .hwinfo import HardwareInfo
from .models import GpuSource, GpuTemperatureInfo, GraphicsController, Sample, ThermalZoneSample
from .probes import CommandError, first_reading, run_command
from .thermal_zones import scan_cpu_zones
from .units import deci_kelvin_to_celsius, milli_celsius_to_celsius, plausible

__all__ = [
    "CommandError",
    "CpuTemperatureResolver",
    "GpuSource",
    "GpuTemperatureEnumerator",
    "GpuTemperatureInfo",
    "GraphicsController",
    "HardwareInfo",
    "Sample",
    "ThermalZoneSample",
    "deci_kelvin_to_celsius",
    "first_reading",
    "milli_celsius_to_celsius",
    "plausible",
    "run_command",
    "scan_cpu_zones",
]
