"""Fixed-interval sampling loop with per-tick failure isolation and drift correction."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from tempmon_sensors.models import GpuTemperatureInfo, Sample, TemperatureReading


class CpuResolver(Protocol):
    def resolve(self) -> TemperatureReading: ...


class GpuEnumerator(Protocol):
    def enumerate(self) -> list[GpuTemperatureInfo]: ...


def _fmt(value: float) -> str:
    return f"{value:.1f}"


class Poller:
    def __init__(
        self,
        cpu: CpuResolver,
        gpus: GpuEnumerator,
        logger: logging.Logger,
        interval_ms: int = 30_000,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cpu = cpu
        self.gpus = gpus
        self.interval_ms = interval_ms
        self._logger = logger
        self._clock = clock
        self._sleep = sleep

    def tick(self) -> Sample:
        taken_at = datetime.now(timezone.utc)
        cpu_temp = self.cpu.resolve()
        if cpu_temp is None:
            self._logger.info("CPU temperature unavailable")
        else:
            self._logger.info(f"CPU temperature: {_fmt(cpu_temp)} °C", extra={"meta": {"cpu_c": cpu_temp}})

        gpus = self.gpus.enumerate()
        if not gpus:
            self._logger.info("No GPU controllers found")
        for gpu in gpus:
            self._log_gpu(gpu)
        return Sample(cpu=cpu_temp, gpus=gpus, taken_at=taken_at)

    def _log_gpu(self, gpu: GpuTemperatureInfo) -> None:
        base = f"GPU {gpu.model}"
        meta = {"model": gpu.model, "source": gpu.source.value, "gpu_c": gpu.temperature_gpu}
        if gpu.temperature_gpu is None:
            self._logger.info(f"{base} temperature unavailable (source={gpu.source.value})", extra={"meta": meta})
        else:
            self._logger.info(
                f"{base} temperature: {_fmt(gpu.temperature_gpu)} °C (source={gpu.source.value})",
                extra={"meta": meta},
            )
        if gpu.temperature_memory is not None:
            self._logger.info(
                f"{base} memory temperature: {_fmt(gpu.temperature_memory)} °C",
                extra={"meta": {"model": gpu.model, "memory_c": gpu.temperature_memory}},
            )

    def remaining_s(self, started: float) -> float:
        elapsed = self._clock() - started
        return max(0.0, self.interval_ms / 1000.0 - elapsed)

    def run(self, max_ticks: int | None = None) -> int:
        """Tick until ``max_ticks`` is reached, or forever when it is ``None``. Returns ticks run."""
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            started = self._clock()
            try:
                self.tick()
            except Exception as exc:
                self._logger.error("Tick failed", exc_info=True, extra={"meta": {"error": repr(exc)}})
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            remaining = self.remaining_s(started)
            if remaining > 0:
                self._sleep(remaining)
        return ticks
