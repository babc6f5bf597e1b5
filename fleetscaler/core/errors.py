"""
Exception taxonomy for a scaling tick.

Global failures abort the tick before any mutation; the controller is the
only place that downgrades per-fleet failures to warnings.
"""

from __future__ import annotations

from typing import Optional


class FleetScalerError(Exception):
    """Base class for all fleetscaler errors."""


class ConfigurationError(FleetScalerError, ValueError):
    """A required setting is missing or a fleet's tags are invalid."""

    def __init__(self, message: str, *, fleet_id: Optional[str] = None):
        super().__init__(message)
        self.fleet_id = fleet_id


class DiscoveryFailure(FleetScalerError, RuntimeError):
    """Fleets (or one fleet's tags) could not be listed from the provider."""

    def __init__(self, message: str, *, fleet_id: Optional[str] = None):
        super().__init__(message)
        self.fleet_id = fleet_id


class UpstreamAPIError(FleetScalerError, RuntimeError):
    """The CI API returned a non-success response or could not be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MutationFailure(FleetScalerError, RuntimeError):
    """Applying one fleet's capacity update failed."""

    def __init__(self, message: str, *, fleet_id: str):
        super().__init__(message)
        self.fleet_id = fleet_id


__all__ = [
    "FleetScalerError",
    "ConfigurationError",
    "DiscoveryFailure",
    "UpstreamAPIError",
    "MutationFailure",
]
