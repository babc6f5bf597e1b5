"""Rendering helpers for friendly CLI/demo output."""

from __future__ import annotations

import sys
from typing import Any, Dict, TextIO


def describe_tick(report: Dict[str, Any], title: str = "Scaling tick", *, stream: TextIO = sys.stdout) -> None:
    mode = " (dry run)" if report.get("dry_run") else ""
    print(f"{title}{mode}", file=stream)
    print(f"  - jobs considered: {report.get('job_count', 0)}", file=stream)

    fleets = report.get("fleets") or []
    if fleets:
        print("  - fleets:", file=stream)
        for fleet in fleets:
            terminate = "terminate" if fleet.get("terminate_on_scale_down") else "protect"
            target = fleet.get("target_capacity")
            print(
                f"    • {fleet.get('id')} matched={fleet.get('matched_job_count')}"
                f" spawn={fleet.get('spawn_rate')} current={fleet.get('current_capacity')}"
                f" target={'-' if target is None else target}"
                f" bounds=[{fleet.get('min_capacity')}, {fleet.get('max_capacity')}] {terminate}",
                file=stream,
            )
    else:
        print("  - fleets: none", file=stream)

    skipped = report.get("skipped") or {}
    for fleet_id, reason in skipped.items():
        print(f"    ! skipped {fleet_id}: {reason}", file=stream)

    actions = report.get("actions") or []
    if actions:
        print("  - actions:", file=stream)
        for action in actions:
            print(
                f"    • {action.get('fleet_id')} -> {action.get('new_capacity')}"
                f" ({action.get('termination_policy')})",
                file=stream,
            )
    else:
        print("  - actions: none", file=stream)

    failed = report.get("failed") or {}
    for fleet_id, reason in failed.items():
        print(f"    ! failed {fleet_id}: {reason}", file=stream)
    print(file=stream)
