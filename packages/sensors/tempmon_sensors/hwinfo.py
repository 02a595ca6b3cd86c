"""Cross-platform hardware-info layer backed by psutil, NVML and OS device trees."""

from __future__ import annotations

import json
import logging
import platform
import re
from pathlib import Path
from typing import Any

import psutil

from .models import GraphicsController
from .probes import DEFAULT_COMMAND_TIMEOUT_S, CommandRunner, powershell, run_command
from .units import milli_celsius_to_celsius


DRM_ROOT = Path("/sys/class/drm")

_CPU_SENSOR_GROUPS = ("coretemp", "k10temp", "zenpower", "cpu_thermal", "cpu-thermal", "soc_thermal", "acpitz")
_CPU_MAIN_LABEL_RE = re.compile(r"package|tctl|tdie", re.IGNORECASE)
_CARD_RE = re.compile(r"^card\d+$")

PCI_VENDORS = {
    "0x10de": "NVIDIA",
    "0x1002": "AMD",
    "0x8086": "Intel",
    "0x1a03": "ASPEED",
    "0x15ad": "VMware",
    "0x1af4": "Red Hat",
}

VIDEO_CONTROLLER_SCRIPT = (
    "Get-CimInstance -ClassName Win32_VideoController | "
    "Select-Object Name, AdapterCompatibility | ConvertTo-Json -Compress"
)


def is_nvidia(controller: GraphicsController) -> bool:
    return "nvidia" in f"{controller.vendor or ''} {controller.model or ''}".lower()


class _NvmlReader:
    def __init__(self) -> None:
        import pynvml  # type: ignore

        self._nvml = pynvml
        pynvml.nvmlInit()

    def controllers(self) -> list[GraphicsController]:
        nvml = self._nvml
        found: list[GraphicsController] = []
        for index in range(nvml.nvmlDeviceGetCount()):
            handle = nvml.nvmlDeviceGetHandleByIndex(index)
            name = nvml.nvmlDeviceGetName(handle)
            if isinstance(name, bytes):
                name = name.decode("utf-8", errors="replace")
            try:
                temp: float | None = float(nvml.nvmlDeviceGetTemperature(handle, nvml.NVML_TEMPERATURE_GPU))
            except nvml.NVMLError:
                temp = None
            found.append(GraphicsController(vendor="NVIDIA", model=name, temperature_gpu=temp))
        return found


def _build_nvml_reader(logger: logging.Logger) -> _NvmlReader | None:
    try:
        return _NvmlReader()
    except Exception as exc:
        logger.debug("nvml unavailable", extra={"meta": {"error": repr(exc)}})
        return None


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return None


def _hwmon_temperatures(device: Path) -> tuple[float | None, float | None]:
    gpu: float | None = None
    memory: float | None = None
    for hwmon in sorted((device / "hwmon").glob("hwmon*")):
        for temp_input in sorted(hwmon.glob("temp*_input")):
            celsius = milli_celsius_to_celsius(_read_text(temp_input))
            if celsius is None:
                continue
            label = (_read_text(hwmon / temp_input.name.replace("_input", "_label")) or "").lower()
            if label == "mem":
                memory = celsius if memory is None else memory
            elif label in ("", "edge", "gpu") and gpu is None:
                gpu = celsius
    return gpu, memory


def drm_controllers(root: Path | str = DRM_ROOT) -> list[GraphicsController]:
    """Graphics controllers exposed by the Linux DRM subsystem, with hwmon temperatures."""
    base = Path(root)
    if not base.is_dir():
        return []

    found: list[GraphicsController] = []
    cards = [p for p in base.iterdir() if _CARD_RE.match(p.name)]
    for card in sorted(cards, key=lambda p: int(p.name[4:])):
        device = card / "device"
        vendor_id = _read_text(device / "vendor")
        if vendor_id is None:
            continue
        vendor = PCI_VENDORS.get(vendor_id.lower(), vendor_id)
        gpu, memory = _hwmon_temperatures(device)
        found.append(
            GraphicsController(
                vendor=vendor,
                model=_read_text(device / "product_name") or None,
                temperature_gpu=gpu,
                temperature_memory=memory,
            )
        )
    return found


def parse_video_controllers(raw: str) -> list[GraphicsController]:
    if not raw:
        return []
    data: Any = json.loads(raw)
    rows = data if isinstance(data, list) else [data]
    return [
        GraphicsController(vendor=row.get("AdapterCompatibility") or None, model=row.get("Name") or None)
        for row in rows
        if isinstance(row, dict)
    ]


class HardwareInfo:
    """Single entry point for library-reported CPU and GPU readings."""

    def __init__(
        self,
        logger: logging.Logger,
        runner: CommandRunner = run_command,
        system: str | None = None,
        drm_root: Path | str = DRM_ROOT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT_S,
        use_nvml: bool = True,
    ) -> None:
        self._logger = logger
        self._runner = runner
        self._system = system or platform.system()
        self._drm_root = Path(drm_root)
        self._timeout = command_timeout
        self._nvml = _build_nvml_reader(logger) if use_nvml else None

    @property
    def system(self) -> str:
        return self._system

    def cpu_temperature(self) -> float | None:
        """Main/package CPU temperature as reported by psutil, if it has one."""
        sensors = getattr(psutil, "sensors_temperatures", None)
        if sensors is None:
            return None
        temps = sensors()
        if not temps:
            return None

        for name in _CPU_SENSOR_GROUPS:
            entries = temps.get(name)
            if not entries:
                continue
            for entry in entries:
                if _CPU_MAIN_LABEL_RE.search(entry.label or "") and entry.current is not None:
                    return float(entry.current)
            current = entries[0].current
            return float(current) if current is not None else None
        return None

    def graphics_controllers(self) -> list[GraphicsController]:
        nvml: list[GraphicsController] = []
        if self._nvml is not None:
            try:
                nvml = self._nvml.controllers()
            except Exception as exc:
                self._logger.debug("nvml query failed", extra={"meta": {"error": repr(exc)}})

        try:
            others = self._platform_controllers()
        except Exception as exc:
            self._logger.warning("platform controller listing failed", extra={"meta": {"error": repr(exc)}})
            others = []
        if nvml:
            others = [c for c in others if not is_nvidia(c)]
        return nvml + others

    def _platform_controllers(self) -> list[GraphicsController]:
        if self._system == "Windows":
            return parse_video_controllers(self._runner(powershell(VIDEO_CONTROLLER_SCRIPT), self._timeout))
        if self._system == "Linux":
            return drm_controllers(self._drm_root)
        return []
