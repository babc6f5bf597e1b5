"""Utility helpers for fleetscaler."""

from .logging import configure_runtime_logging, demote_provider_logging, install_stdout_logger  # noqa: F401
from .render import describe_tick  # noqa: F401

__all__ = [
    "configure_runtime_logging",
    "demote_provider_logging",
    "describe_tick",
    "install_stdout_logger",
]
