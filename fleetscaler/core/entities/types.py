"""
Common type definitions shared across the decision stages and providers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from fleetscaler.config.policy import TerminationPolicy


@dataclass(frozen=True)
class UpdateAction:
    """A capacity change to hand to the fleet mutator."""

    fleet_id: str
    new_capacity: int
    termination_policy: TerminationPolicy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fleet_id": self.fleet_id,
            "new_capacity": self.new_capacity,
            "termination_policy": self.termination_policy.value,
        }


@dataclass
class TickReport:
    """Outcome of a single reconciliation pass."""

    fleets: List[Dict[str, Any]] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    actions: List[UpdateAction] = field(default_factory=list)
    applied: List[UpdateAction] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    job_count: int = 0
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """True when every emitted action was applied (or nothing needed applying)."""
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fleets": list(self.fleets),
            "skipped": dict(self.skipped),
            "actions": [action.to_dict() for action in self.actions],
            "applied": [action.to_dict() for action in self.applied],
            "failed": dict(self.failed),
            "job_count": self.job_count,
            "dry_run": self.dry_run,
            "success": self.success,
        }
