"""Logging helpers shared by the report pipeline."""
from __future__ import annotations

import logging
import sys

from devtrack_reports.config import SETTINGS

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_CONFIGURED = False


def configure_logging(level: str | int | None = None) -> None:
    """Attach a stderr handler to the package logger once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = level if level is not None else SETTINGS.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger("devtrack_reports")
    root.setLevel(resolved)
    root.addHandler(handler)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    if not name.startswith("devtrack_reports"):
        name = f"devtrack_reports.{name}"
    return logging.getLogger(name)
