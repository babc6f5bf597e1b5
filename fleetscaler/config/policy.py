"""
Termination policy definitions and setting-resolution helpers.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Dict, Optional, Tuple


class TerminationPolicy(str, Enum):
    """
    What the provider may do with excess instances when a fleet shrinks.

    Using ``str`` as a mixin keeps the values JSON-serialisable and lets
    callers compare against plain string literals.
    """

    AGGRESSIVE = "aggressive"
    PROTECTIVE = "protective"

    @classmethod
    def for_fleet(cls, terminate_on_scale_down: bool) -> "TerminationPolicy":
        return cls.AGGRESSIVE if terminate_on_scale_down else cls.PROTECTIVE


# Translation to the EC2 Spot Fleet ``ExcessCapacityTerminationPolicy`` values.
SPOT_FLEET_TERMINATION_POLICIES: Dict[TerminationPolicy, str] = {
    TerminationPolicy.AGGRESSIVE: "default",
    TerminationPolicy.PROTECTIVE: "noTermination",
}


BOOLEAN_ALIASES: Dict[str, bool] = {
    "true": True,
    "yes": True,
    "on": True,
    "1": True,
    "false": False,
    "no": False,
    "off": False,
    "0": False,
}


def parse_bool(raw: str) -> Optional[bool]:
    """
    Parse a tag/config boolean.

    Returns ``None`` when the value is not one of the recognised aliases so
    the caller can report it instead of treating it as falsy.
    """
    return BOOLEAN_ALIASES.get(raw.strip().lower())


def resolve_setting(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Resolve a string setting, following ``env:VAR`` indirection.

    Supports the following forms:
        - Plain strings (returned stripped)
        - Environment indirection: ``"env:BUILDKITE_TOKEN"``

    Returns:
        A tuple of ``(value, hint)`` where ``hint`` describes the resolution
        source. If resolution fails, returns ``(None, error_hint)``.
    """
    if value is None:
        return None, None

    raw = str(value).strip()
    if not raw:
        return None, None

    if not raw.lower().startswith("env:"):
        return raw, "literal"

    env_key = raw[4:].strip()
    if not env_key:
        return None, "empty environment variable name"
    env_val = os.getenv(env_key)
    if env_val is None:
        return None, f"environment variable {env_key} is not set"
    resolved = env_val.strip()
    if not resolved:
        return None, f"environment variable {env_key} is empty"
    return resolved, f"env:{env_key}"
