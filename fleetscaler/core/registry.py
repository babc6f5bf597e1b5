"""
Per-tick fleet registry.

Fleets keep the order discovery supplied them in; matching relies on it.
Tag values are parsed here once, so later stages only see typed fields.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from fleetscaler.config.policy import parse_bool
from fleetscaler.core.entities.fleet import Fleet, FleetDescriptor
from fleetscaler.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TAG_PREFIX = "buildkite-scaler:"

TAG_ENABLED = "enabled"
TAG_QUERY_RULES = "agent-query-rules"
TAG_SPAWN = "spawn"
TAG_MIN_CAPACITY = "min-capacity"
TAG_MAX_CAPACITY = "max-capacity"
TAG_TERMINATE = "terminate-on-scale-down"


def parse_capability_tags(raw: Optional[str]) -> frozenset:
    """Split a comma-separated tag value into a set of tokens."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _tag_int(tags: Mapping[str, str], key: str, fleet_id: str, default: Optional[int] = None) -> int:
    raw = tags.get(key)
    if raw is None or not str(raw).strip():
        if default is None:
            raise ConfigurationError(f"Fleet {fleet_id} is missing required tag '{key}'", fleet_id=fleet_id)
        return default
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigurationError(
            f"Fleet {fleet_id} tag '{key}' must be an integer, got {raw!r}", fleet_id=fleet_id
        ) from exc
    if value < 0:
        raise ConfigurationError(f"Fleet {fleet_id} tag '{key}' must be non-negative, got {value}", fleet_id=fleet_id)
    return value


def _tag_bool(tags: Mapping[str, str], key: str, fleet_id: str, default: bool = False) -> bool:
    raw = tags.get(key)
    if raw is None or not str(raw).strip():
        return default
    value = parse_bool(str(raw))
    if value is None:
        raise ConfigurationError(
            f"Fleet {fleet_id} tag '{key}' must be a boolean, got {raw!r}", fleet_id=fleet_id
        )
    return value


def is_scaler_enabled(descriptor: FleetDescriptor, tag_prefix: str = DEFAULT_TAG_PREFIX) -> bool:
    """Return the scaler gate; a malformed gate value raises ConfigurationError."""
    return _tag_bool(descriptor.tags, tag_prefix + TAG_ENABLED, descriptor.id)


def parse_fleet(descriptor: FleetDescriptor, tag_prefix: str = DEFAULT_TAG_PREFIX) -> Fleet:
    """
    Build a typed :class:`Fleet` from a discovery descriptor.

    Raises:
        ConfigurationError: if any scaler tag is malformed, ``spawn`` is zero
            or ``min-capacity`` exceeds ``max-capacity``.
    """
    tags = descriptor.tags
    fleet_id = descriptor.id

    spawn_rate = _tag_int(tags, tag_prefix + TAG_SPAWN, fleet_id, default=1)
    if spawn_rate < 1:
        raise ConfigurationError(f"Fleet {fleet_id} spawn rate must be at least 1, got {spawn_rate}", fleet_id=fleet_id)

    min_capacity = _tag_int(tags, tag_prefix + TAG_MIN_CAPACITY, fleet_id, default=0)
    max_capacity = _tag_int(tags, tag_prefix + TAG_MAX_CAPACITY, fleet_id)
    if min_capacity > max_capacity:
        raise ConfigurationError(
            f"Fleet {fleet_id} min capacity {min_capacity} exceeds max capacity {max_capacity}",
            fleet_id=fleet_id,
        )

    if descriptor.current_capacity < 0:
        raise ConfigurationError(
            f"Fleet {fleet_id} reports negative capacity {descriptor.current_capacity}", fleet_id=fleet_id
        )

    return Fleet(
        id=fleet_id,
        current_capacity=int(descriptor.current_capacity),
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        capability_tags=parse_capability_tags(tags.get(tag_prefix + TAG_QUERY_RULES)),
        spawn_rate=spawn_rate,
        terminate_on_scale_down=_tag_bool(tags, tag_prefix + TAG_TERMINATE, fleet_id),
    )


class FleetRegistry:
    """Ordered, in-memory collection of the fleets scaled in this tick."""

    def __init__(self, fleets: Optional[Iterable[Fleet]] = None):
        self._fleets: List[Fleet] = []
        self._index: Dict[str, Fleet] = {}
        self.skipped: Dict[str, str] = {}
        for fleet in fleets or ():
            self.register(fleet)

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[FleetDescriptor],
        *,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
    ) -> "FleetRegistry":
        """
        从发现结果构建注册表：非 active 或未启用的 fleet 被忽略，
        标签格式错误的 fleet 记录到 ``skipped`` 并跳过。
        重复出现的 fleet id 只保留第一次。
        """
        registry = cls()
        seen = set()
        for descriptor in descriptors:
            if not descriptor.is_active:
                logger.debug("Ignoring fleet %s in state %s", descriptor.id, descriptor.state)
                continue
            if descriptor.id in seen:
                logger.warning("Ignoring duplicate fleet %s reported by discovery", descriptor.id)
                continue
            seen.add(descriptor.id)
            try:
                if not is_scaler_enabled(descriptor, tag_prefix):
                    logger.debug("Ignoring fleet %s: scaler not enabled", descriptor.id)
                    continue
                fleet = parse_fleet(descriptor, tag_prefix)
            except ConfigurationError as exc:
                logger.warning("Skipping fleet %s: %s", descriptor.id, exc)
                registry.skip(descriptor.id, str(exc))
                continue
            registry.register(fleet)
        return registry

    def register(self, fleet: Fleet) -> None:
        if fleet.id in self._index:
            raise ValueError(f"Fleet '{fleet.id}' already registered.")
        self._fleets.append(fleet)
        self._index[fleet.id] = fleet

    def skip(self, fleet_id: str, reason: str) -> None:
        """Record a fleet that is excluded from this tick."""
        self.skipped[fleet_id] = reason

    def get(self, fleet_id: str) -> Optional[Fleet]:
        return self._index.get(fleet_id)

    def list_fleets(self) -> List[Fleet]:
        return list(self._fleets)

    def reset_matches(self) -> None:
        """Zero every fleet's matched-job count before matching runs."""
        for fleet in self._fleets:
            fleet.matched_job_count = 0

    def __iter__(self) -> Iterator[Fleet]:
        return iter(self._fleets)

    def __len__(self) -> int:
        return len(self._fleets)

    def __bool__(self) -> bool:
        return bool(self._fleets)
