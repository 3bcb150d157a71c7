# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-02-02
# Description: logging_utils.py
# -----------------------------------------------------------------------------
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

import colorlog

BASE_LOGGER_NAME = "bizsearch"

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_configure_lock = threading.Lock()
_configured = False


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "y")


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        fmt=(
            "%(log_color)s%(asctime)s [%(levelname)s] "
            "%(name)s:%(lineno)d:%(reset)s %(message_log_color)s%(message)s"
        ),
        datefmt=_DATEFMT,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        },
        secondary_log_colors={
            "message": {
                "WARNING": "yellow",
                "ERROR": "light_red",
                "CRITICAL": "red",
            }
        },
        style="%",
    ))
    return handler


def _file_handler() -> Optional[logging.Handler]:
    """Rotating file log for the queue worker and batch scripts (BIZ_LOG_TO_FILE=1)."""
    if not _truthy(os.getenv("BIZ_LOG_TO_FILE", "0")):
        return None

    path = Path(os.getenv("BIZ_LOG_FILE", "./logs/bizsearch.log"))
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.getenv("BIZ_LOG_MAX_BYTES", str(5 * 1024 * 1024))),
        backupCount=int(os.getenv("BIZ_LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
        datefmt=_DATEFMT,
    ))
    return handler


def _configure_base() -> logging.Logger:
    """
    Handlers live on the 'bizsearch' logger only; module and class loggers
    are children and propagate up to it.
    """
    global _configured
    base = logging.getLogger(BASE_LOGGER_NAME)
    if _configured:
        return base

    with _configure_lock:
        if not _configured:
            base.addHandler(_console_handler())
            file_handler = _file_handler()
            if file_handler is not None:
                base.addHandler(file_handler)
            level_name = os.getenv("BIZ_LOG_LEVEL", "INFO").upper()
            base.setLevel(getattr(logging, level_name, logging.INFO))
            base.propagate = False
            _configured = True
    return base


def set_level(level: Union[int, str]) -> None:
    """Override BIZ_LOG_LEVEL at runtime, e.g. from a --log-level flag."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _configure_base().setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Generic logger that does not include a class name.
    """
    base = _configure_base()
    return logging.getLogger(f"{BASE_LOGGER_NAME}.{name}") if name else base


def get_class_logger(cls: type) -> logging.Logger:
    """
    Returns a logger whose name includes module + class, e.g.:

      bizsearch.jobqueue.EmbeddingJobQueue.EmbeddingJobQueue
      bizsearch.location.LocationResolver.LocationResolver
    """
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    _configure_base()
    return logging.getLogger(f"{BASE_LOGGER_NAME}.{module}.{classname}")
