"""Per-controller GPU temperature resolution."""

from __future__ import annotations

import logging

from .hwinfo import HardwareInfo, is_nvidia
from .models import GpuSource, GpuTemperatureInfo, GraphicsController
from .probes import DEFAULT_COMMAND_TIMEOUT_S, CommandRunner, run_command
from .units import parse_int, plausible


NVIDIA_SMI_QUERY = ["nvidia-smi", "--query-gpu=temperature.gpu", "--format=csv,noheader,nounits"]


def parse_nvidia_smi(output: str) -> int | None:
    lines = output.strip().splitlines()
    if not lines:
        return None
    return parse_int(lines[0])


class GpuTemperatureEnumerator:
    def __init__(
        self,
        hwinfo: HardwareInfo,
        logger: logging.Logger,
        runner: CommandRunner = run_command,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT_S,
    ) -> None:
        self._hwinfo = hwinfo
        self._logger = logger
        self._runner = runner
        self._timeout = command_timeout

    def enumerate(self) -> list[GpuTemperatureInfo]:
        """One entry per detected controller in reported order; ``[]`` if enumeration fails."""
        try:
            controllers = self._hwinfo.graphics_controllers()
        except Exception as exc:
            self._logger.warning("graphics controller enumeration failed", extra={"meta": {"error": repr(exc)}})
            return []
        return [self._resolve(controller) for controller in controllers]

    def _resolve(self, controller: GraphicsController) -> GpuTemperatureInfo:
        temp = plausible(controller.temperature_gpu)
        source = GpuSource.LIBRARY
        if temp is None and is_nvidia(controller):
            cli_temp = self._nvidia_smi()
            if cli_temp is not None:
                temp = cli_temp
                source = GpuSource.NVIDIA_SMI
        return GpuTemperatureInfo(
            model=controller.label,
            temperature_gpu=temp,
            temperature_memory=plausible(controller.temperature_memory),
            source=source,
        )

    def _nvidia_smi(self) -> float | None:
        try:
            parsed = parse_nvidia_smi(self._runner(NVIDIA_SMI_QUERY, self._timeout))
        except Exception as exc:
            self._logger.debug("nvidia-smi fallback failed", extra={"meta": {"error": repr(exc)}})
            return None
        if parsed is None:
            self._logger.debug("nvidia-smi returned no temperature")
            return None
        return plausible(parsed)
