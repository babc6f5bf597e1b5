"""
Public facing controller facades for fleetscaler.
"""

from .scaler import FleetScaler  # noqa: F401

__all__ = ["FleetScaler"]
