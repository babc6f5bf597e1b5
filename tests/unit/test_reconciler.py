"""
Reconciler tests.
"""

from __future__ import annotations

import pytest

from fleetscaler.config.policy import TerminationPolicy
from fleetscaler.core.entities import UpdateAction
from fleetscaler.core.planning import plan_registry
from fleetscaler.core.reconciler import reconcile, reconcile_registry
from fleetscaler.core.registry import FleetRegistry


def test_no_action_when_at_target(make_fleet):
    assert reconcile(make_fleet(current_capacity=3, target_capacity=3)) is None


def test_protective_action(make_fleet):
    action = reconcile(make_fleet("sfr-a", current_capacity=2, target_capacity=3))
    assert action == UpdateAction("sfr-a", 3, TerminationPolicy.PROTECTIVE)


def test_aggressive_action(make_fleet):
    action = reconcile(make_fleet("sfr-a", current_capacity=5, target_capacity=0, terminate_on_scale_down=True))
    assert action.termination_policy is TerminationPolicy.AGGRESSIVE
    assert action.to_dict() == {"fleet_id": "sfr-a", "new_capacity": 0, "termination_policy": "aggressive"}


def test_unplanned_fleet_raises(make_fleet):
    with pytest.raises(ValueError, match="not been planned"):
        reconcile(make_fleet())


def test_reconcile_registry_preserves_order_and_skips(make_fleet):
    registry = FleetRegistry(
        [
            make_fleet("sfr-1", current_capacity=0, matched_job_count=2),
            make_fleet("sfr-2", current_capacity=1, matched_job_count=1),
            make_fleet("sfr-3", spawn_rate=0),
            make_fleet("sfr-4", current_capacity=4, matched_job_count=0),
        ]
    )
    plan_registry(registry)

    actions = reconcile_registry(registry)

    assert [action.fleet_id for action in actions] == ["sfr-1", "sfr-4"]
    assert [action.new_capacity for action in actions] == [2, 0]


def test_second_pass_is_idempotent(make_fleet):
    fleet = make_fleet(current_capacity=2, matched_job_count=3, max_capacity=4)
    registry = FleetRegistry([fleet])

    plan_registry(registry)
    first = reconcile_registry(registry)
    assert [action.new_capacity for action in first] == [3]

    # Provider applied the change; the next snapshot reports the new size.
    fleet.current_capacity = first[0].new_capacity
    plan_registry(registry)
    assert fleet.target_capacity == 3
    assert reconcile_registry(registry) == []
