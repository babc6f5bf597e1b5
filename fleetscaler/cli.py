"""
Command-line entry point: run one scaling tick and exit.

Exit status is 0 when the tick completed (per-fleet warnings included) and 1
when configuration, fleet discovery or the CI API failed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from fleetscaler import __version__
from fleetscaler.core.config import load_scaler_config
from fleetscaler.core.controllers.scaler import FleetScaler
from fleetscaler.core.errors import ConfigurationError, DiscoveryFailure, UpstreamAPIError
from fleetscaler.core.utils import configure_runtime_logging, demote_provider_logging, describe_tick

logger = logging.getLogger("fleetscaler.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetscaler",
        description="Scale Spot Fleet requests to match pending Buildkite jobs (single pass).",
    )
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--org", help="Buildkite organization slug (overrides config)")
    parser.add_argument("--region", help="AWS region (overrides config)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and print actions without modifying any fleet",
    )
    parser.add_argument("--log-level", help="Log level (default from config, INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None, *, scaler: Optional[FleetScaler] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_scaler_config(args.config)
    except ConfigurationError as exc:
        configure_runtime_logging(logging.INFO)
        logger.error("Configuration error: %s", exc)
        return 1

    try:
        configure_runtime_logging(args.log_level or config.log_level)
    except ValueError as exc:
        configure_runtime_logging(logging.INFO)
        logger.error("Configuration error: %s", exc)
        return 1
    demote_provider_logging()

    try:
        if scaler is None:
            scaler = FleetScaler.from_config(
                config,
                dry_run=args.dry_run,
                organization=args.org,
                region=args.region,
            )
        report = scaler.run_tick()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    except DiscoveryFailure as exc:
        logger.error("Fleet discovery failed: %s", exc)
        return 1
    except UpstreamAPIError as exc:
        logger.error("CI API error: %s", exc)
        return 1

    if scaler.dry_run:
        describe_tick(report.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
