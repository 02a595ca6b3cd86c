"""Kernel thermal-zone scanning.

Reads ``/sys/class/thermal/thermal_zone*/{type,temp}`` where ``temp`` is in
millidegrees Celsius.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from .models import ThermalZoneSample
from .units import milli_celsius_to_celsius, parse_int, plausible


THERMAL_ROOT = Path("/sys/class/thermal")
CPU_ZONE_RE = re.compile(r"cpu|x86_pkg|soc", re.IGNORECASE)


def read_zones(root: Path | str = THERMAL_ROOT) -> Iterator[ThermalZoneSample]:
    base = Path(root)
    if not base.is_dir():
        return

    for entry in sorted(base.iterdir()):
        if not entry.name.startswith("thermal_zone"):
            continue
        type_path = entry / "type"
        temp_path = entry / "temp"
        if not type_path.is_file() or not temp_path.is_file():
            continue
        try:
            zone_type = type_path.read_text(encoding="utf-8").strip()
            raw = temp_path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        milli = parse_int(raw)
        if milli is None:
            continue
        yield ThermalZoneSample(type=zone_type, milli_celsius=milli)


def max_cpu_zone(zones: list[ThermalZoneSample] | Iterator[ThermalZoneSample]) -> float | None:
    best: float | None = None
    for zone in zones:
        if not CPU_ZONE_RE.search(zone.type):
            continue
        celsius = plausible(milli_celsius_to_celsius(zone.milli_celsius))
        if celsius is not None and (best is None or celsius > best):
            best = celsius
    return best


def scan_cpu_zones(root: Path | str = THERMAL_ROOT) -> float | None:
    """Highest plausible reading among zones typed like a CPU package or SoC."""
    return max_cpu_zone(read_zones(root))
