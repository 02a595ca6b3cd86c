"""Process settings sourced from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


LOG_LEVELS = ("debug", "info", "warn", "warning", "error", "critical")

DEFAULT_INTERVAL_MS = 30_000
DEFAULT_COMMAND_TIMEOUT_S = 3.0


@dataclass
class Settings:
    log_level: str = "info"
    log_dir: Path = Path("logs")
    lhm_json_path: Path | None = None
    interval_ms: int = DEFAULT_INTERVAL_MS
    command_timeout_s: float = DEFAULT_COMMAND_TIMEOUT_S
    keep_log_files: int = 7


def _int(raw: str | None, default: int) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _float(raw: str | None, default: float) -> float:
    try:
        return float(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _normalize(cfg: Settings) -> None:
    if cfg.log_level not in LOG_LEVELS:
        cfg.log_level = "info"
    if cfg.log_level == "warn":
        cfg.log_level = "warning"
    cfg.interval_ms = max(1_000, min(3_600_000, int(cfg.interval_ms)))
    cfg.command_timeout_s = float(max(0.5, min(30.0, cfg.command_timeout_s)))
    cfg.keep_log_files = max(2, int(cfg.keep_log_files))


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    lhm_path = (env.get("LHM_JSON_PATH") or "").strip()
    cfg = Settings(
        log_level=(env.get("LOG_LEVEL") or "info").strip().lower(),
        log_dir=Path(env.get("LOG_DIR") or "logs"),
        lhm_json_path=Path(lhm_path) if lhm_path else None,
        interval_ms=_int(env.get("TEMPMON_INTERVAL_MS"), DEFAULT_INTERVAL_MS),
        command_timeout_s=_float(env.get("TEMPMON_COMMAND_TIMEOUT_S"), DEFAULT_COMMAND_TIMEOUT_S),
        keep_log_files=_int(env.get("TEMPMON_KEEP_LOG_FILES"), 7),
    )
    _normalize(cfg)
    return cfg
