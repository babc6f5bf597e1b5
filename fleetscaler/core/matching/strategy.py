"""
Job-to-fleet matching strategy implementations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from importlib.metadata import entry_points
from typing import Any, Callable, Sequence, Type, Union

from fleetscaler.core.entities.fleet import Fleet
from fleetscaler.core.entities.job import Job

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "fleetscaler.matching"

StrategyFactory = Callable[[], "MatchingStrategy"]
StrategyLike = Union[
    str,
    "MatchingStrategy",
    Type["MatchingStrategy"],
    StrategyFactory,
]


class MatchingStrategy(ABC):
    """Base class for all matching strategies."""

    @abstractmethod
    def match(self, jobs: Sequence[Job], fleets: Sequence[Fleet]) -> None:
        """Credit jobs to fleets by incrementing ``matched_job_count``."""

    @staticmethod
    def _eligible_jobs(jobs: Sequence[Job]) -> list[Job]:
        return [job for job in jobs if job.is_relevant and job.requirement_tags]


class FirstFitStrategy(MatchingStrategy):
    """
    Credit each job to the first fleet, in registration order, that can run it.

    This is greedy rather than optimal: when several fleets qualify, only the
    earliest-registered one ever receives credit, so later fleets may be
    under-scaled.
    """

    def match(self, jobs: Sequence[Job], fleets: Sequence[Fleet]) -> None:
        unmatched = 0
        for job in self._eligible_jobs(jobs):
            for fleet in fleets:
                if fleet.can_run(job.requirement_tags):
                    fleet.matched_job_count += 1
                    break
            else:
                unmatched += 1
        if unmatched:
            logger.debug("%d job(s) matched no fleet", unmatched)


def _coerce_strategy_instance(candidate: MatchingStrategy | Any) -> MatchingStrategy:
    if isinstance(candidate, MatchingStrategy):
        return candidate
    raise TypeError("Factory did not return a MatchingStrategy instance.")


_STRATEGY_REGISTRY: dict[str, StrategyFactory] = {}


def register_strategy(
    name: str,
    factory: StrategyFactory,
    *,
    replace: bool = False,
) -> None:
    """
    Register a matching strategy under a name.

    Args:
        name: Strategy name, normalised to lower case.
        factory: Zero-argument callable returning a strategy instance.
        replace: Allow overwriting an existing registration.
    """
    key = name.strip().lower()
    if not key:
        raise ValueError("Strategy name must be a non-empty string.")
    if key in _STRATEGY_REGISTRY and not replace:
        raise ValueError(f"Strategy '{key}' already registered.")
    _STRATEGY_REGISTRY[key] = factory


def unregister_strategy(name: str) -> None:
    """Remove a strategy by name; unknown names are ignored."""
    key = name.strip().lower()
    _STRATEGY_REGISTRY.pop(key, None)


def available_strategies() -> tuple[str, ...]:
    """Return registered strategy names in alphabetical order."""
    return tuple(sorted(_STRATEGY_REGISTRY))


def load_entry_point_strategies() -> list[str]:
    """
    Register strategies advertised by installed distributions under the
    ``fleetscaler.matching`` entry-point group. Existing names are kept.
    """
    loaded: list[str] = []
    for entry in entry_points(group=ENTRY_POINT_GROUP):
        if entry.name.strip().lower() in _STRATEGY_REGISTRY:
            continue
        register_strategy(entry.name, strategy_factory(entry.load()))
        loaded.append(entry.name)
    if loaded:
        logger.debug("Loaded matching strategies from entry points: %s", ", ".join(loaded))
    return loaded


def _build_from_target(target: Any) -> MatchingStrategy:
    if isinstance(target, type) and issubclass(target, MatchingStrategy):
        return target()
    if callable(target):
        return _coerce_strategy_instance(target())
    return _coerce_strategy_instance(target)


def strategy_factory(target: Any) -> StrategyFactory:
    """
    Wrap a strategy class, zero-argument factory or instance as a registry
    factory. Used for entry points and for ``module:attr`` config imports.

    Raises:
        TypeError: if ``target`` is neither callable nor a strategy instance.
    """
    if isinstance(target, MatchingStrategy):
        return lambda: target
    if callable(target):
        return lambda: _build_from_target(target)
    raise TypeError(f"Unsupported strategy target: {target!r}")


def _resolve_registered_strategy(name: str) -> MatchingStrategy:
    key = name.strip().lower()
    try:
        factory = _STRATEGY_REGISTRY[key]
    except KeyError as exc:
        raise ValueError(
            f"Unknown matching strategy '{name}'. "
            f"Available strategies: {', '.join(sorted(_STRATEGY_REGISTRY)) or '<none>'}"
        ) from exc
    return _coerce_strategy_instance(factory())


def create_strategy(strategy: StrategyLike) -> MatchingStrategy:
    """
    Build or validate a matching strategy.

    Args:
        strategy: One of
          * a registered name (``"first_fit"``)
          * a MatchingStrategy subclass
          * a zero-argument factory returning a MatchingStrategy
          * an existing MatchingStrategy instance (returned as-is)
    """

    if isinstance(strategy, MatchingStrategy):
        return strategy

    if isinstance(strategy, str):
        return _resolve_registered_strategy(strategy)

    if isinstance(strategy, type) and issubclass(strategy, MatchingStrategy):
        return strategy()

    if callable(strategy):
        return _coerce_strategy_instance(strategy())

    raise TypeError(
        "Strategy must be provided as a name, MatchingStrategy subclass, "
        "callable factory, or MatchingStrategy instance."
    )


def match(jobs: Sequence[Job], fleets: Sequence[Fleet], strategy: StrategyLike = "first_fit") -> None:
    """Run ``strategy`` over the given jobs and fleets."""
    create_strategy(strategy).match(jobs, fleets)


register_strategy("first_fit", FirstFitStrategy)


__all__ = [
    "ENTRY_POINT_GROUP",
    "MatchingStrategy",
    "FirstFitStrategy",
    "available_strategies",
    "register_strategy",
    "unregister_strategy",
    "load_entry_point_strategies",
    "create_strategy",
    "match",
]
