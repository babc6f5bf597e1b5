"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging

import pytest

from fleetscaler.core.config import reset_scaler_config
from fleetscaler.core.entities import Fleet, FleetDescriptor, Job
from fleetscaler.core.registry import DEFAULT_TAG_PREFIX

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s", force=True)
logging.getLogger("fleetscaler").setLevel(logging.DEBUG)


@pytest.fixture
def make_fleet():
    """Factory for planned-or-unplanned Fleet records with sensible defaults."""

    def _make(fleet_id: str = "sfr-a", **overrides) -> Fleet:
        values = {
            "id": fleet_id,
            "current_capacity": 0,
            "min_capacity": 0,
            "max_capacity": 10,
            "capability_tags": frozenset({"queue=default"}),
            "spawn_rate": 1,
            "terminate_on_scale_down": False,
        }
        values.update(overrides)
        return Fleet(**values)

    return _make


@pytest.fixture
def fleet_tags():
    """Build a prefixed scaler tag mapping from keyword arguments (underscores become dashes)."""

    def _tags(prefix: str = DEFAULT_TAG_PREFIX, **values) -> dict:
        payload = {"enabled": "true", "max_capacity": "10"}
        payload.update(values)
        return {f"{prefix}{key.replace('_', '-')}": str(value) for key, value in payload.items() if value is not None}

    return _tags


@pytest.fixture
def make_descriptor(fleet_tags):
    def _make(fleet_id: str = "sfr-a", *, state: str = "active", current: int = 0, **tags) -> FleetDescriptor:
        return FleetDescriptor(id=fleet_id, state=state, current_capacity=current, tags=fleet_tags(**tags))

    return _make


@pytest.fixture
def make_jobs():
    def _make(count: int, *rules: str, state: str = "scheduled") -> list[Job]:
        return [Job.create(f"job-{index}", state, rules) for index in range(count)]

    return _make


@pytest.fixture
def clean_config(monkeypatch, tmp_path):
    """Isolate tests from any ambient config file or environment."""
    monkeypatch.delenv("FLEETSCALER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    reset_scaler_config()
    yield
    reset_scaler_config()
