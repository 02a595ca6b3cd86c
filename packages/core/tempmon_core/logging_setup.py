"""Structured local logging and crash hook setup."""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import Settings


_LOGGER_NAME = "tempmon"
SERVICE_NAME = "temp-mon"


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseException):
        return repr(value)
    if isinstance(value, Path):
        return str(value)
    return str(value)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "msg": record.getMessage(),
        }
        meta = getattr(record, "meta", None)
        if meta:
            payload["meta"] = meta
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=_jsonable)


class ConsoleFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        meta = getattr(record, "meta", None)
        if meta:
            line = f"{line} {json.dumps(meta, ensure_ascii=True, default=_jsonable)}"
        return line


def _prepare_log_dir(path: Path) -> Path | None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print(f"failed to create log directory {path}: {exc}", file=sys.stderr)
        return None
    return path


def configure_logging(settings: Settings, console: bool = True) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level.upper())
    logger.propagate = False

    directory = _prepare_log_dir(settings.log_dir)
    if directory is not None:
        combined = logging.handlers.TimedRotatingFileHandler(
            filename=str(directory / "combined.log"),
            when="midnight",
            backupCount=settings.keep_log_files,
            encoding="utf-8",
        )
        combined.setFormatter(JsonFormatter())
        logger.addHandler(combined)

        errors = logging.FileHandler(directory / "error.log", encoding="utf-8")
        errors.setLevel(logging.ERROR)
        errors.setFormatter(JsonFormatter())
        logger.addHandler(errors)

    if console or directory is None:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(ConsoleFormatter())
        logger.addHandler(stream_handler)

    logger.debug("logging configured", extra={"meta": {"log_dir": str(settings.log_dir), "level": settings.log_level}})
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def _exceptions_handler(log_dir: Path) -> logging.Handler | None:
    if _prepare_log_dir(log_dir) is None:
        return None
    handler = logging.FileHandler(log_dir / "exceptions.log", encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    return handler


def _install_fault_handler(logger: logging.Logger, log_dir: Path) -> None:
    fault_path = log_dir / "fault.log"
    fh = fault_path.open("a", encoding="utf-8")
    faulthandler.enable(file=fh, all_threads=True)
    logger.debug("fault handler enabled", extra={"meta": {"path": str(fault_path)}})


def install_crash_hooks(settings: Settings) -> None:
    logger = get_logger()
    crash_logger = logging.getLogger(f"{_LOGGER_NAME}.crash")
    handler = _exceptions_handler(settings.log_dir)
    if handler is not None and not crash_logger.handlers:
        crash_logger.addHandler(handler)

    def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
        crash_id = str(uuid.uuid4())
        crash_logger.critical(
            f"uncaught exception crash_id={crash_id}",
            exc_info=(exc_type, exc_value, exc_tb),
            extra={"meta": {"crash_id": crash_id}},
        )

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        crash_id = str(uuid.uuid4())
        crash_logger.critical(
            f"thread exception crash_id={crash_id}",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            extra={"meta": {"crash_id": crash_id, "thread": getattr(args.thread, "name", None)}},
        )

    sys.excepthook = _log_uncaught
    threading.excepthook = _thread_hook
    if handler is not None:
        _install_fault_handler(logger, settings.log_dir)
