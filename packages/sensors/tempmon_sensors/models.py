"""Typed temperature models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


TemperatureReading = float | None
ProbeResult = float | None

UNKNOWN_GPU = "Unknown GPU"


class GpuSource(str, Enum):
    LIBRARY = "library"
    NVIDIA_SMI = "nvidia-smi"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ThermalZoneSample:
    type: str
    milli_celsius: int


@dataclass(frozen=True)
class GraphicsController:
    vendor: str | None
    model: str | None
    temperature_gpu: float | None = None
    temperature_memory: float | None = None

    @property
    def label(self) -> str:
        return self.model or self.vendor or UNKNOWN_GPU


@dataclass(frozen=True)
class GpuTemperatureInfo:
    model: str
    temperature_gpu: float | None
    temperature_memory: float | None = None
    source: GpuSource = GpuSource.UNKNOWN


@dataclass(frozen=True)
class Sample:
    cpu: TemperatureReading
    gpus: list[GpuTemperatureInfo] = field(default_factory=list)
    taken_at: datetime | None = None
