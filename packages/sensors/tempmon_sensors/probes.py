"""Ordered probe chains and the subprocess primitive the probes share."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Callable, Iterable, Sequence

from .models import ProbeResult
from .units import plausible


DEFAULT_COMMAND_TIMEOUT_S = 3.0

Probe = Callable[[], ProbeResult]
CommandRunner = Callable[[Sequence[str], float], str]


class CommandError(RuntimeError):
    def __init__(self, args: Sequence[str], returncode: int) -> None:
        super().__init__(f"{args[0]} exited with status {returncode}")
        self.command = list(args)
        self.returncode = returncode


def run_command(args: Sequence[str], timeout: float = DEFAULT_COMMAND_TIMEOUT_S) -> str:
    """Run ``args`` and return stripped stdout.

    Raises ``CommandError`` on non-zero exit, ``FileNotFoundError`` when the binary is
    missing and ``subprocess.TimeoutExpired`` past ``timeout``.
    """
    kwargs: dict = {}
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW  # type: ignore[attr-defined]
    result = subprocess.run(
        list(args),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        timeout=timeout,
        text=True,
        check=False,
        **kwargs,
    )
    if result.returncode != 0:
        raise CommandError(args, result.returncode)
    return result.stdout.strip()


def powershell(script: str) -> list[str]:
    return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]


def first_reading(probes: Iterable[tuple[str, Probe]], logger: logging.Logger) -> ProbeResult:
    """Return the first plausible reading from ``probes`` in order.

    A probe that raises is logged at debug and skipped, as is one returning a
    non-finite or out-of-range value.
    """
    for name, probe in probes:
        try:
            value = probe()
        except Exception as exc:
            logger.debug("probe failed", extra={"meta": {"probe": name, "error": repr(exc)}})
            continue
        if value is None:
            continue
        checked = plausible(value)
        if checked is None:
            logger.debug("probe reading discarded", extra={"meta": {"probe": name, "value": repr(value)}})
            continue
        return checked
    return None
