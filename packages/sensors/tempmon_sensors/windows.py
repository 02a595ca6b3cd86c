"""CPU temperature strategies for Windows hosts.

Windows exposes no CPU package temperature to psutil, so these probes lean on
LibreHardwareMonitor exports, OpenHardwareMonitor's WMI provider and the ACPI
thermal zone, in that order of preference.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from .probes import DEFAULT_COMMAND_TIMEOUT_S, CommandRunner, powershell, run_command
from .units import deci_kelvin_to_celsius, parse_celsius


LHM_CPU_LABEL_RE = re.compile(r"tctl|tdie|package|cpu temp|ccd|core \(tctl/tdie\)", re.IGNORECASE)

OHM_CPU_SCRIPT = (
    "Get-CimInstance -Namespace root\\OpenHardwareMonitor -ClassName Sensor | "
    "Where-Object { $_.SensorType -eq 'Temperature' -and $_.Identifier -match 'cpu' } | "
    "Sort-Object Value -Descending | Select-Object -First 1 -ExpandProperty Value"
)

ACPI_ZONE_SCRIPT = (
    "Get-CimInstance -Namespace root\\wmi -ClassName MSAcpi_ThermalZoneTemperature | "
    "Select-Object -First 1 -ExpandProperty CurrentTemperature"
)


def _field(node: dict[str, Any], name: str) -> Any:
    if name in node:
        return node[name]
    return node.get(name.lower())


def max_matching_sensor(tree: Any) -> float | None:
    """Walk a LibreHardwareMonitor node tree and return the hottest CPU-labelled value."""
    best: float | None = None
    stack = [tree]
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        text = _field(node, "Text")
        value = _field(node, "Value")
        if (
            isinstance(text, str)
            and LHM_CPU_LABEL_RE.search(text)
            and isinstance(value, (int, float))
            and not isinstance(value, bool)
        ):
            if best is None or value > best:
                best = float(value)
        children = _field(node, "Children")
        if isinstance(children, list):
            stack.extend(reversed(children))
    return best


def lhm_json_temperature(path: str | Path | None) -> float | None:
    if not path:
        return None
    json_path = Path(path)
    if not json_path.is_file():
        return None
    tree = json.loads(json_path.read_text(encoding="utf-8-sig"))
    return max_matching_sensor(tree)


def ohm_wmi_temperature(
    runner: CommandRunner = run_command, timeout: float = DEFAULT_COMMAND_TIMEOUT_S
) -> float | None:
    return parse_celsius(runner(powershell(OHM_CPU_SCRIPT), timeout) or None)


def acpi_thermal_zone_temperature(
    runner: CommandRunner = run_command, timeout: float = DEFAULT_COMMAND_TIMEOUT_S
) -> float | None:
    return deci_kelvin_to_celsius(runner(powershell(ACPI_ZONE_SCRIPT), timeout) or None)
