"""
Bundled configuration resources and policy constants.
"""

from .policy import (  # noqa: F401
    BOOLEAN_ALIASES,
    SPOT_FLEET_TERMINATION_POLICIES,
    TerminationPolicy,
    parse_bool,
    resolve_setting,
)

__all__ = [
    "BOOLEAN_ALIASES",
    "SPOT_FLEET_TERMINATION_POLICIES",
    "TerminationPolicy",
    "parse_bool",
    "resolve_setting",
]
