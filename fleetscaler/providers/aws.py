"""
EC2 Spot Fleet discovery and mutation backed by boto3.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fleetscaler.config.policy import SPOT_FLEET_TERMINATION_POLICIES
from fleetscaler.core.entities.fleet import FleetDescriptor
from fleetscaler.core.entities.types import UpdateAction
from fleetscaler.core.errors import ConfigurationError, DiscoveryFailure, MutationFailure

from .base import FleetDiscovery, FleetMutator

logger = logging.getLogger(__name__)


def create_ec2_client(region: Optional[str] = None) -> Any:
    """Build an EC2 client; ``None`` defers to the standard AWS region chain."""
    try:
        return boto3.client("ec2", region_name=region)
    except BotoCoreError as exc:
        raise ConfigurationError(f"Cannot create EC2 client: {exc}") from exc


def _descriptor_from_config(record: Dict[str, Any]) -> FleetDescriptor:
    request_config = record.get("SpotFleetRequestConfig") or {}
    return FleetDescriptor(
        id=str(record["SpotFleetRequestId"]),
        state=str(record.get("SpotFleetRequestState", "")),
        current_capacity=int(request_config.get("TargetCapacity", 0) or 0),
    )


class SpotFleetDiscovery(FleetDiscovery):
    """Lists Spot Fleet requests and reads their tags."""

    def __init__(self, client: Any = None, *, region: Optional[str] = None):
        self._client = client if client is not None else create_ec2_client(region)

    def list_fleets(self) -> List[FleetDescriptor]:
        descriptors: List[FleetDescriptor] = []
        try:
            paginator = self._client.get_paginator("describe_spot_fleet_requests")
            for page in paginator.paginate():
                for record in page.get("SpotFleetRequestConfigs", []):
                    descriptors.append(_descriptor_from_config(record))
        except (BotoCoreError, ClientError) as exc:
            raise DiscoveryFailure(f"Unable to list spot fleet requests: {exc}") from exc
        logger.debug("Discovered %d spot fleet request(s)", len(descriptors))
        return descriptors

    def fetch_tags(self, fleet_id: str) -> Dict[str, str]:
        tags: Dict[str, str] = {}
        try:
            paginator = self._client.get_paginator("describe_tags")
            for page in paginator.paginate(Filters=[{"Name": "resource-id", "Values": [fleet_id]}]):
                for tag in page.get("Tags", []):
                    tags[str(tag["Key"])] = str(tag.get("Value", ""))
        except (BotoCoreError, ClientError) as exc:
            raise DiscoveryFailure(f"Unable to fetch tags for {fleet_id}: {exc}", fleet_id=fleet_id) from exc
        return tags


class SpotFleetMutator(FleetMutator):
    """Writes target capacity and excess-capacity policy to a Spot Fleet request."""

    def __init__(self, client: Any = None, *, region: Optional[str] = None):
        self._client = client if client is not None else create_ec2_client(region)

    def apply(self, action: UpdateAction) -> None:
        policy = SPOT_FLEET_TERMINATION_POLICIES[action.termination_policy]
        try:
            response = self._client.modify_spot_fleet_request(
                SpotFleetRequestId=action.fleet_id,
                TargetCapacity=action.new_capacity,
                ExcessCapacityTerminationPolicy=policy,
            )
        except (BotoCoreError, ClientError) as exc:
            raise MutationFailure(f"modify_spot_fleet_request failed: {exc}", fleet_id=action.fleet_id) from exc

        if not response.get("Return", True):
            raise MutationFailure("modify_spot_fleet_request was not accepted", fleet_id=action.fleet_id)
        logger.info(
            "Fleet %s target capacity set to %d (ExcessCapacityTerminationPolicy=%s)",
            action.fleet_id,
            action.new_capacity,
            policy,
        )
