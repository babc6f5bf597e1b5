"""
Fleet entity definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional


ACTIVE_STATE = "active"


@dataclass
class FleetDescriptor:
    """Raw fleet record as returned by discovery, before tag parsing."""

    id: str
    state: str
    current_capacity: int
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.state == ACTIVE_STATE


@dataclass
class Fleet:
    """
    A scalable fleet for the duration of one tick.

    Only ``matched_job_count`` and ``target_capacity`` change after
    construction: the former is owned by the matcher, the latter by the
    planner stage.
    """

    id: str
    current_capacity: int
    min_capacity: int
    max_capacity: int
    capability_tags: FrozenSet[str] = frozenset()
    spawn_rate: int = 1
    terminate_on_scale_down: bool = False
    matched_job_count: int = 0
    target_capacity: Optional[int] = None

    def can_run(self, requirement_tags: FrozenSet[str]) -> bool:
        """Return True when this fleet's agents satisfy every requirement tag."""
        return bool(requirement_tags) and requirement_tags <= self.capability_tags

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "current_capacity": self.current_capacity,
            "min_capacity": self.min_capacity,
            "max_capacity": self.max_capacity,
            "capability_tags": sorted(self.capability_tags),
            "spawn_rate": self.spawn_rate,
            "terminate_on_scale_down": self.terminate_on_scale_down,
            "matched_job_count": self.matched_job_count,
            "target_capacity": self.target_capacity,
        }
