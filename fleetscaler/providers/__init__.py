"""
Provider collaborators: fleet discovery, CI job polling and fleet mutation.

The AWS and Buildkite implementations are imported from their own modules
so that boto3 and requests are only loaded when used.
"""

from .base import FleetDiscovery, FleetMutator, JobSource  # noqa: F401
from .memory import RecordingMutator, StaticFleetDiscovery, StaticJobSource  # noqa: F401

__all__ = [
    "FleetDiscovery",
    "FleetMutator",
    "JobSource",
    "RecordingMutator",
    "StaticFleetDiscovery",
    "StaticJobSource",
]
