"""
CI job entity definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable


SCRIPT_JOB_TYPE = "script"


class JobState(str, Enum):
    """Job states the scaler distinguishes; everything else folds into OTHER."""

    SCHEDULED = "scheduled"
    RUNNING = "running"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> "JobState":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Job:
    """A pending or running CI work item and the agent tags it asks for."""

    id: str
    state: JobState
    requirement_tags: FrozenSet[str] = frozenset()
    type: str = SCRIPT_JOB_TYPE

    @classmethod
    def create(
        cls,
        job_id: str,
        state: object,
        requirement_tags: Iterable[str] = (),
        *,
        job_type: str = SCRIPT_JOB_TYPE,
    ) -> "Job":
        tags = frozenset(tag.strip() for tag in requirement_tags if tag and tag.strip())
        return cls(id=job_id, state=JobState.parse(state), requirement_tags=tags, type=job_type)

    @property
    def is_relevant(self) -> bool:
        """Only runnable script jobs that are scheduled or running count toward capacity."""
        return self.type == SCRIPT_JOB_TYPE and self.state in (JobState.SCHEDULED, JobState.RUNNING)
