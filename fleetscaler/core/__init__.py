"""
Core package for the fleetscaler decision engine.

Re-exports the primary façade class so callers can simply do::

    from fleetscaler.core import FleetScaler
"""

from __future__ import annotations

from fleetscaler.core.controllers.scaler import FleetScaler

__all__ = ["FleetScaler"]
