"""
Diff planned targets against current capacity and emit update actions.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fleetscaler.config.policy import TerminationPolicy
from fleetscaler.core.entities.fleet import Fleet
from fleetscaler.core.entities.types import UpdateAction
from fleetscaler.core.registry import FleetRegistry

logger = logging.getLogger(__name__)


def reconcile(fleet: Fleet) -> Optional[UpdateAction]:
    """Return the action needed to move ``fleet`` to its target, or None."""
    if fleet.target_capacity is None:
        raise ValueError(f"Fleet '{fleet.id}' has not been planned")
    if fleet.target_capacity == fleet.current_capacity:
        return None
    return UpdateAction(
        fleet_id=fleet.id,
        new_capacity=fleet.target_capacity,
        termination_policy=TerminationPolicy.for_fleet(fleet.terminate_on_scale_down),
    )


def reconcile_registry(registry: FleetRegistry) -> List[UpdateAction]:
    """Collect actions for every planned fleet, in registration order."""
    actions: List[UpdateAction] = []
    for fleet in registry:
        if fleet.id in registry.skipped:
            continue
        action = reconcile(fleet)
        if action is None:
            logger.debug("Fleet %s already at target %d", fleet.id, fleet.current_capacity)
            continue
        actions.append(action)
    return actions
