"""
Single-tick scaling controller.

One call to :meth:`FleetScaler.run_tick` performs a full reconciliation pass:

* discover fleets and parse their tags into a :class:`FleetRegistry`;
* poll the CI system for scheduled and running jobs;
* match jobs to fleets, plan target capacities and diff them into actions;
* hand the actions to the mutator (unless running dry).

Nothing is kept between ticks. Global failures (cannot list fleets, CI API
error, bad configuration) propagate before any mutation; per-fleet failures
are logged and recorded in the returned :class:`TickReport`.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from fleetscaler.core.config import ScalerConfig
from fleetscaler.core.entities.fleet import FleetDescriptor
from fleetscaler.core.entities.types import TickReport
from fleetscaler.core.errors import DiscoveryFailure, MutationFailure
from fleetscaler.core.matching.strategy import MatchingStrategy, StrategyLike, create_strategy
from fleetscaler.core.planning import plan_registry
from fleetscaler.core.reconciler import reconcile_registry
from fleetscaler.core.registry import DEFAULT_TAG_PREFIX, FleetRegistry
from fleetscaler.providers.base import FleetDiscovery, FleetMutator, JobSource

logger = logging.getLogger(__name__)


class FleetScaler:
    """Client-facing controller that wires collaborators to the decision engine."""

    def __init__(
        self,
        discovery: FleetDiscovery,
        job_source: JobSource,
        mutator: FleetMutator,
        *,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        strategy: StrategyLike = "first_fit",
        dry_run: bool = False,
    ):
        self.discovery = discovery
        self.job_source = job_source
        self.mutator = mutator
        self.tag_prefix = tag_prefix
        self.strategy: MatchingStrategy = create_strategy(strategy)
        self.dry_run = dry_run

    @classmethod
    def from_config(
        cls,
        config: ScalerConfig,
        *,
        dry_run: bool = False,
        organization: Optional[str] = None,
        region: Optional[str] = None,
    ) -> "FleetScaler":
        """
        Build a scaler backed by EC2 Spot Fleet and the Buildkite API.

        Raises:
            ConfigurationError: if the Buildkite organization or token cannot
                be resolved, or no EC2 client can be built for the region.
        """
        from fleetscaler.providers.aws import SpotFleetDiscovery, SpotFleetMutator, create_ec2_client
        from fleetscaler.providers.buildkite import BuildkiteJobSource

        settings = config.buildkite
        if organization:
            settings = replace(settings, organization=organization)
        org, token = settings.resolve_credentials()

        client = create_ec2_client(region or config.aws.region)
        return cls(
            SpotFleetDiscovery(client),
            BuildkiteJobSource(
                org,
                token,
                api_url=settings.api_url,
                timeout=settings.timeout,
                per_page=settings.per_page,
            ),
            SpotFleetMutator(client),
            tag_prefix=config.tag_prefix,
            strategy=config.matching.default_strategy,
            dry_run=dry_run,
        )

    # ------------------------------------------------------------------
    # Stages

    def build_registry(self) -> FleetRegistry:
        """Discover fleets, fetch tags for active ones and parse them."""
        descriptors = self.discovery.list_fleets()

        tagged: List[FleetDescriptor] = []
        tag_failures: Dict[str, str] = {}
        for descriptor in descriptors:
            if not descriptor.is_active:
                logger.debug("Ignoring fleet %s in state %s", descriptor.id, descriptor.state)
                continue
            try:
                tags = self.discovery.fetch_tags(descriptor.id)
            except DiscoveryFailure as exc:
                logger.warning("Excluding fleet %s from this tick: %s", descriptor.id, exc)
                tag_failures[descriptor.id] = str(exc)
                continue
            tagged.append(
                FleetDescriptor(
                    id=descriptor.id,
                    state=descriptor.state,
                    current_capacity=descriptor.current_capacity,
                    tags=tags,
                )
            )

        registry = FleetRegistry.from_descriptors(tagged, tag_prefix=self.tag_prefix)
        for fleet_id, reason in tag_failures.items():
            registry.skip(fleet_id, reason)
        return registry

    def _apply(self, report: TickReport) -> None:
        for action in report.actions:
            if self.dry_run:
                logger.info(
                    "[dry-run] would set fleet %s to %d (%s)",
                    action.fleet_id,
                    action.new_capacity,
                    action.termination_policy.value,
                )
                continue
            try:
                self.mutator.apply(action)
            except MutationFailure as exc:
                logger.warning("Failed to update fleet %s: %s", action.fleet_id, exc)
                report.failed[action.fleet_id] = str(exc)
                continue
            report.applied.append(action)

    # ------------------------------------------------------------------
    # Entry point

    def run_tick(self) -> TickReport:
        report = TickReport(dry_run=self.dry_run)

        registry = self.build_registry()
        if not registry:
            report.skipped = dict(registry.skipped)
            logger.info("No scalable fleets found; nothing to do")
            return report

        jobs = self.job_source.fetch_jobs()
        report.job_count = len(jobs)

        registry.reset_matches()
        self.strategy.match(jobs, registry.list_fleets())
        plan_registry(registry)
        report.actions = reconcile_registry(registry)
        report.fleets = [fleet.to_dict() for fleet in registry]
        report.skipped = dict(registry.skipped)

        self._apply(report)

        logger.info(
            "Tick complete: fleets=%d jobs=%d actions=%d applied=%d failed=%d skipped=%d%s",
            len(registry),
            report.job_count,
            len(report.actions),
            len(report.applied),
            len(report.failed),
            len(report.skipped),
            " (dry run)" if self.dry_run else "",
        )
        return report
