"""
Job matching strategies for fleetscaler.
"""

from __future__ import annotations

from .strategy import (
    ENTRY_POINT_GROUP,
    MatchingStrategy,
    FirstFitStrategy,
    available_strategies,
    register_strategy,
    unregister_strategy,
    load_entry_point_strategies,
    create_strategy,
    strategy_factory,
    match,
)

__all__ = [
    "ENTRY_POINT_GROUP",
    "MatchingStrategy",
    "FirstFitStrategy",
    "available_strategies",
    "register_strategy",
    "unregister_strategy",
    "load_entry_point_strategies",
    "create_strategy",
    "strategy_factory",
    "match",
]
