"""
fleetscaler package skeleton.

This module exposes high-level entry points while keeping provider
dependencies (boto3, requests) lazy-imported so packaging tools do not need
them during metadata builds.
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "FleetRegistry",
    "FleetScaler",
    "TickReport",
    "UpdateAction",
    "__version__",
]


try:
    __version__ = version("fleetscaler")
except PackageNotFoundError:
    __version__ = "0.0.0"


_LAZY_TARGETS = {
    "FleetRegistry": ("fleetscaler.core.registry", "FleetRegistry"),
    "FleetScaler": ("fleetscaler.core.controllers", "FleetScaler"),
    "TickReport": ("fleetscaler.core.entities", "TickReport"),
    "UpdateAction": ("fleetscaler.core.entities", "UpdateAction"),
}


def __getattr__(name: str):
    """Dynamically load public symbols to avoid importing optional deps early."""
    target = _LAZY_TARGETS.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    module_name, attribute = target
    module = import_module(module_name)
    value = getattr(module, attribute)
    globals()[name] = value  # cache for subsequent lookups
    return value
