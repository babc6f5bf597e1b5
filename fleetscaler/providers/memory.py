"""
In-memory providers for tests, demos and offline dry runs.
"""

from __future__ import annotations

import copy
from typing import Dict, Iterable, List, Optional

from fleetscaler.core.entities.fleet import FleetDescriptor
from fleetscaler.core.entities.job import Job
from fleetscaler.core.entities.types import UpdateAction
from fleetscaler.core.errors import DiscoveryFailure, MutationFailure, UpstreamAPIError

from .base import FleetDiscovery, FleetMutator, JobSource


class StaticFleetDiscovery(FleetDiscovery):
    """Serve a fixed list of descriptors; tags come from each descriptor."""

    def __init__(
        self,
        descriptors: Iterable[FleetDescriptor],
        *,
        failing_tag_fetches: Iterable[str] = (),
        fail_listing: bool = False,
    ):
        self._descriptors = list(descriptors)
        self._failing = set(failing_tag_fetches)
        self._fail_listing = fail_listing

    def list_fleets(self) -> List[FleetDescriptor]:
        if self._fail_listing:
            raise DiscoveryFailure("fleet listing unavailable")
        # Tags are only exposed through fetch_tags, like the real provider.
        return [
            FleetDescriptor(id=item.id, state=item.state, current_capacity=item.current_capacity)
            for item in self._descriptors
        ]

    def fetch_tags(self, fleet_id: str) -> Dict[str, str]:
        if fleet_id in self._failing:
            raise DiscoveryFailure(f"tags unavailable for {fleet_id}", fleet_id=fleet_id)
        for item in self._descriptors:
            if item.id == fleet_id:
                return copy.deepcopy(item.tags)
        raise DiscoveryFailure(f"unknown fleet {fleet_id}", fleet_id=fleet_id)


class StaticJobSource(JobSource):
    def __init__(self, jobs: Iterable[Job], *, error: Optional[str] = None):
        self._jobs = list(jobs)
        self._error = error

    def fetch_jobs(self) -> List[Job]:
        if self._error is not None:
            raise UpstreamAPIError(self._error)
        return list(self._jobs)


class RecordingMutator(FleetMutator):
    """Record applied actions; fleets listed in ``failing`` raise MutationFailure."""

    def __init__(self, *, failing: Iterable[str] = ()):
        self.applied: List[UpdateAction] = []
        self._failing = set(failing)

    def apply(self, action: UpdateAction) -> None:
        if action.fleet_id in self._failing:
            raise MutationFailure("simulated provider rejection", fleet_id=action.fleet_id)
        self.applied.append(action)
