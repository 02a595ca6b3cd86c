"""Core services for tempmon: settings, logging and the sampling loop."""

from .config import Settings, load_settings
from .logging_setup import configure_logging, get_logger, install_crash_hooks
from .poller import Poller

__all__ = [
    "Poller",
    "Settings",
    "configure_logging",
    "get_logger",
    "install_crash_hooks",
    "load_settings",
]
