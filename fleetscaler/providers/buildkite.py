"""
Buildkite REST client that lists scheduled and running script jobs.

Usage:
    from fleetscaler.providers.buildkite import BuildkiteJobSource

    source = BuildkiteJobSource("my-org", token)
    jobs = source.fetch_jobs()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from fleetscaler.core.entities.job import Job, JobState, SCRIPT_JOB_TYPE
from fleetscaler.core.errors import UpstreamAPIError

from .base import JobSource

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.buildkite.com/v2"
PENDING_BUILD_STATES = ("scheduled", "running")


def jobs_from_builds(builds: Iterable[Dict[str, Any]]) -> List[Job]:
    """Flatten build payloads into relevant :class:`Job` records."""
    jobs: List[Job] = []
    for build in builds:
        for raw in build.get("jobs") or []:
            if raw.get("type") != SCRIPT_JOB_TYPE:
                continue
            job = Job.create(
                str(raw.get("id", "")),
                raw.get("state"),
                raw.get("agent_query_rules") or (),
                job_type=SCRIPT_JOB_TYPE,
            )
            if job.state is JobState.OTHER:
                continue
            jobs.append(job)
    return jobs


class BuildkiteJobSource(JobSource):
    """
    HTTP client for the Buildkite builds API.

    Any non-2xx response, transport error or undecodable body aborts the
    whole fetch: partial job data would under-count demand.
    """

    def __init__(
        self,
        organization: str,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        per_page: int = 100,
        session: Optional[requests.Session] = None,
    ):
        self.organization = organization
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.per_page = per_page

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )

    def _builds_url(self) -> str:
        return f"{self.api_url}/organizations/{self.organization}/builds"

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamAPIError(f"Buildkite request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise UpstreamAPIError(
                f"Buildkite returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def fetch_builds(self) -> List[Dict[str, Any]]:
        """Return every scheduled or running build, following pagination."""
        builds: List[Dict[str, Any]] = []
        url: Optional[str] = self._builds_url()
        params: Optional[Dict[str, Any]] = {
            "state[]": list(PENDING_BUILD_STATES),
            "per_page": self.per_page,
        }
        while url:
            response = self._get(url, params=params)
            try:
                page = response.json()
            except ValueError as exc:
                raise UpstreamAPIError("Buildkite returned a non-JSON body", status_code=response.status_code) from exc
            if not isinstance(page, list):
                raise UpstreamAPIError("Buildkite builds response must be a list", status_code=response.status_code)
            builds.extend(page)

            # The next-page URL already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None
        return builds

    def fetch_jobs(self) -> List[Job]:
        builds = self.fetch_builds()
        jobs = jobs_from_builds(builds)
        logger.info("Fetched %d relevant job(s) from %d build(s)", len(jobs), len(builds))
        return jobs
