"""CPU temperature resolution across library, Windows and kernel sources."""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

from .hwinfo import HardwareInfo
from .models import TemperatureReading
from .probes import DEFAULT_COMMAND_TIMEOUT_S, CommandRunner, Probe, first_reading, run_command
from .thermal_zones import THERMAL_ROOT, scan_cpu_zones
from .windows import acpi_thermal_zone_temperature, lhm_json_temperature, ohm_wmi_temperature


class CpuTemperatureResolver:
    """Walks the CPU probe chain from the most specific source to the kernel fallback.

    ``resolve`` never raises: each probe failure is logged and counts as no reading.
    """

    def __init__(
        self,
        hwinfo: HardwareInfo,
        logger: logging.Logger,
        lhm_json_path: str | Path | None = None,
        runner: CommandRunner = run_command,
        thermal_root: Path | str = THERMAL_ROOT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT_S,
    ) -> None:
        self._hwinfo = hwinfo
        self._logger = logger
        self._lhm_json_path = lhm_json_path
        self._runner = runner
        self._thermal_root = thermal_root
        self._timeout = command_timeout

    def probes(self) -> list[tuple[str, Probe]]:
        chain: list[tuple[str, Probe]] = [("library", self._library)]
        if self._hwinfo.system == "Windows":
            chain += [
                ("lhm-json", partial(lhm_json_temperature, self._lhm_json_path)),
                ("ohm-wmi", partial(ohm_wmi_temperature, self._runner, self._timeout)),
                ("acpi-thermal-zone", partial(acpi_thermal_zone_temperature, self._runner, self._timeout)),
            ]
        chain.append(("thermal-zones", self._thermal_zones))
        return chain

    def resolve(self) -> TemperatureReading:
        return first_reading(self.probes(), self._logger)

    def _library(self) -> float | None:
        try:
            return self._hwinfo.cpu_temperature()
        except Exception as exc:
            self._logger.warning(
                "library cpu temperature failed, attempting fallback",
                extra={"meta": {"error": repr(exc)}},
            )
            return None

    def _thermal_zones(self) -> float | None:
        try:
            return scan_cpu_zones(self._thermal_root)
        except OSError as exc:
            self._logger.warning("cpu thermal zone fallback failed", extra={"meta": {"error": repr(exc)}})
            return None
