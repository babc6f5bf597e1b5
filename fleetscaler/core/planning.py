"""
Capacity planning: turn a fleet's matched-job count into a clamped target.
"""

from __future__ import annotations

import logging
from typing import Dict

from fleetscaler.core.entities.fleet import Fleet
from fleetscaler.core.errors import ConfigurationError
from fleetscaler.core.registry import FleetRegistry

logger = logging.getLogger(__name__)


def validate_fleet(fleet: Fleet) -> None:
    """Reject fleet settings that have no defined plan."""
    if fleet.spawn_rate < 1:
        raise ConfigurationError(
            f"Fleet {fleet.id} spawn rate must be at least 1, got {fleet.spawn_rate}", fleet_id=fleet.id
        )
    if fleet.min_capacity < 0 or fleet.max_capacity < 0:
        raise ConfigurationError(f"Fleet {fleet.id} capacity bounds must be non-negative", fleet_id=fleet.id)
    if fleet.min_capacity > fleet.max_capacity:
        raise ConfigurationError(
            f"Fleet {fleet.id} min capacity {fleet.min_capacity} exceeds max capacity {fleet.max_capacity}",
            fleet_id=fleet.id,
        )


def plan(fleet: Fleet) -> int:
    """
    Compute the target capacity for ``fleet``.

    1. ``ceil(matched_job_count / spawn_rate)``
    2. with termination on scale-down and at least one matched job, never
       below the current capacity (the provider picks which instance dies)
    3. clamp into ``[min_capacity, max_capacity]``
    """
    validate_fleet(fleet)

    raw = -(-fleet.matched_job_count // fleet.spawn_rate)
    if fleet.terminate_on_scale_down and fleet.matched_job_count > 0:
        raw = max(raw, fleet.current_capacity)
    return min(max(raw, fleet.min_capacity), fleet.max_capacity)


def plan_registry(registry: FleetRegistry) -> Dict[str, int]:
    """Plan every registered fleet, storing ``target_capacity`` on each."""
    targets: Dict[str, int] = {}
    for fleet in registry:
        try:
            fleet.target_capacity = plan(fleet)
        except ConfigurationError as exc:
            logger.warning("Skipping fleet %s: %s", fleet.id, exc)
            fleet.target_capacity = None
            registry.skip(fleet.id, str(exc))
            continue
        targets[fleet.id] = fleet.target_capacity
        logger.info(
            "Fleet %s: matched=%d spawn=%d current=%d bounds=[%d, %d] -> target=%d",
            fleet.id,
            fleet.matched_job_count,
            fleet.spawn_rate,
            fleet.current_capacity,
            fleet.min_capacity,
            fleet.max_capacity,
            fleet.target_capacity,
        )
    return targets
