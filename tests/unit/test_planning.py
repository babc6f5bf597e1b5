"""
Capacity planner tests.
"""

from __future__ import annotations

import itertools

import pytest

from fleetscaler.core.errors import ConfigurationError
from fleetscaler.core.planning import plan, plan_registry
from fleetscaler.core.registry import FleetRegistry


def test_ceiling_division(make_fleet):
    assert plan(make_fleet(matched_job_count=5, spawn_rate=2)) == 3
    assert plan(make_fleet(matched_job_count=4, spawn_rate=2)) == 2
    assert plan(make_fleet(matched_job_count=1, spawn_rate=4)) == 1
    assert plan(make_fleet(matched_job_count=0, spawn_rate=4)) == 0


def test_termination_safety_never_shrinks_while_jobs_are_matched(make_fleet):
    fleet = make_fleet(
        terminate_on_scale_down=True,
        matched_job_count=3,
        current_capacity=5,
        spawn_rate=1,
        min_capacity=0,
        max_capacity=10,
    )
    assert plan(fleet) == 5


def test_termination_safety_allows_growth(make_fleet):
    fleet = make_fleet(terminate_on_scale_down=True, matched_job_count=7, current_capacity=5)
    assert plan(fleet) == 7


def test_safe_full_scale_down_with_no_jobs(make_fleet):
    fleet = make_fleet(
        terminate_on_scale_down=True,
        matched_job_count=0,
        current_capacity=5,
        spawn_rate=1,
        min_capacity=0,
        max_capacity=10,
    )
    assert plan(fleet) == 0


def test_protective_fleet_shrinks_to_demand(make_fleet):
    fleet = make_fleet(terminate_on_scale_down=False, matched_job_count=3, current_capacity=5)
    assert plan(fleet) == 3


def test_clamped_to_bounds(make_fleet):
    assert plan(make_fleet(matched_job_count=0, min_capacity=2, max_capacity=6)) == 2
    assert plan(make_fleet(matched_job_count=20, min_capacity=2, max_capacity=6)) == 6
    # The safety floor is itself capped by max_capacity.
    assert plan(make_fleet(matched_job_count=1, current_capacity=9, max_capacity=6, terminate_on_scale_down=True)) == 6


def test_clamp_invariant_holds_across_inputs(make_fleet):
    for matched, spawn, current, low, high, terminate in itertools.product(
        (0, 1, 3, 7, 40), (1, 2, 5), (0, 2, 9), (0, 1, 4), (4, 6, 12), (False, True)
    ):
        fleet = make_fleet(
            matched_job_count=matched,
            spawn_rate=spawn,
            current_capacity=current,
            min_capacity=low,
            max_capacity=high,
            terminate_on_scale_down=terminate,
        )
        target = plan(fleet)
        assert low <= target <= high


@pytest.mark.parametrize(
    "overrides",
    [
        {"spawn_rate": 0},
        {"min_capacity": 5, "max_capacity": 2},
    ],
)
def test_invalid_fleet_is_rejected(make_fleet, overrides):
    with pytest.raises(ConfigurationError):
        plan(make_fleet(**overrides))


def test_plan_registry_stores_targets_and_skips_invalid(make_fleet):
    registry = FleetRegistry(
        [
            make_fleet("sfr-ok", matched_job_count=3, spawn_rate=2),
            make_fleet("sfr-bad", spawn_rate=0),
        ]
    )

    targets = plan_registry(registry)

    assert targets == {"sfr-ok": 2}
    assert registry.get("sfr-ok").target_capacity == 2
    assert registry.get("sfr-bad").target_capacity is None
    assert "sfr-bad" in registry.skipped


def test_plan_is_pure(make_fleet):
    fleet = make_fleet(matched_job_count=3, current_capacity=1)
    before = fleet.to_dict()
    assert plan(fleet) == plan(fleet) == 3
    assert fleet.to_dict() == before
