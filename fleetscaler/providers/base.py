"""
Collaborator interfaces used by the scaling controller.

Implementations own all I/O; the decision engine never talks to a provider
directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List

from fleetscaler.core.entities.fleet import FleetDescriptor
from fleetscaler.core.entities.job import Job
from fleetscaler.core.entities.types import UpdateAction


class FleetDiscovery(ABC):
    """Lists fleets and their tags from the cloud provider."""

    @abstractmethod
    def list_fleets(self) -> List[FleetDescriptor]:
        """Return every fleet; raises DiscoveryFailure if listing fails."""

    @abstractmethod
    def fetch_tags(self, fleet_id: str) -> Dict[str, str]:
        """Return one fleet's tags; raises DiscoveryFailure for that fleet."""


class JobSource(ABC):
    """Polls the CI system for scheduled and running jobs."""

    @abstractmethod
    def fetch_jobs(self) -> List[Job]:
        """Return relevant jobs; raises UpstreamAPIError on any failure."""


class FleetMutator(ABC):
    """Applies capacity changes back to the cloud provider."""

    @abstractmethod
    def apply(self, action: UpdateAction) -> None:
        """Apply ``action``; raises MutationFailure when the provider rejects it."""
