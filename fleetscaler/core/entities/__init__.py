"""
Domain entities used throughout a scaling tick.
"""

from .fleet import Fleet, FleetDescriptor  # noqa: F401
from .job import Job, JobState  # noqa: F401
from .types import TickReport, UpdateAction  # noqa: F401

__all__ = [
    "Fleet",
    "FleetDescriptor",
    "Job",
    "JobState",
    "TickReport",
    "UpdateAction",
]
