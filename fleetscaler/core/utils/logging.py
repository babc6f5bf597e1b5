"""Logging utilities for fleetscaler runs."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union


_HANDLER_NAME = "_fleetscaler_stream_handler"

_PROVIDER_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def configure_runtime_logging(level: Union[int, str] = logging.INFO, formatter: Optional[logging.Formatter] = None) -> None:
    """Ensure that a run emits logs to stdout with a consistent format."""
    level = _coerce_level(level)
    root_logger = logging.getLogger()
    if formatter is None:
        formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")

    existing = None
    for handler in root_logger.handlers:
        if getattr(handler, _HANDLER_NAME, False):
            existing = handler
            break

    if existing is None:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_NAME, True)
        root_logger.addHandler(stream_handler)
    else:
        existing.setFormatter(formatter)
        existing.setLevel(level)

    if root_logger.level > level or root_logger.level == logging.NOTSET:
        root_logger.setLevel(level)


def install_stdout_logger(level: int = logging.INFO, *, include_timestamp: bool = True, prefix: str = "fleetscaler") -> None:
    """Attach a stream handler for demos / scripts with optional timestamp."""
    fmt = "%(asctime)s %(levelname)s: %(message)s" if include_timestamp else "%(levelname)s: %(message)s"
    formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger = logging.getLogger(prefix)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)


def demote_provider_logging(level: int = logging.WARNING) -> None:
    for name in _PROVIDER_LOGGERS:
        logging.getLogger(name).setLevel(level)
