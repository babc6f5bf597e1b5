"""
Buildkite job source tests (HTTP session mocked).
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from fleetscaler.core.entities import JobState
from fleetscaler.core.errors import UpstreamAPIError
from fleetscaler.providers.buildkite import BuildkiteJobSource, jobs_from_builds


def _response(status_code=200, payload=None, *, next_url=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload if payload is not None else []
    response.links = {"next": {"url": next_url}} if next_url else {}
    return response


def _source(session):
    return BuildkiteJobSource("acme", "secret", api_url="https://bk.test/v2/", timeout=5, per_page=2, session=session)


BUILD_ONE = {
    "jobs": [
        {"id": "j1", "type": "script", "state": "scheduled", "agent_query_rules": ["queue=default"]},
        {"id": "j2", "type": "waiter", "state": "scheduled"},
        {"id": "j3", "type": "script", "state": "passed", "agent_query_rules": ["queue=default"]},
    ]
}
BUILD_TWO = {
    "jobs": [
        {"id": "j4", "type": "script", "state": "running", "agent_query_rules": ["queue=gpu", "os=linux"]},
        {"id": "j5", "type": "script", "state": "scheduled", "agent_query_rules": []},
    ]
}


def test_jobs_from_builds_keeps_relevant_script_jobs():
    jobs = jobs_from_builds([BUILD_ONE, BUILD_TWO, {"jobs": None}])

    assert [job.id for job in jobs] == ["j1", "j4", "j5"]
    assert jobs[0].state is JobState.SCHEDULED
    assert jobs[1].requirement_tags == frozenset({"queue=gpu", "os=linux"})
    assert jobs[2].requirement_tags == frozenset()


def test_session_is_authenticated():
    session = MagicMock()
    session.headers = {}
    _source(session)
    assert session.headers["Authorization"] == "Bearer secret"


def test_fetch_jobs_follows_pagination():
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = [
        _response(payload=[BUILD_ONE], next_url="https://bk.test/v2/organizations/acme/builds?page=2"),
        _response(payload=[BUILD_TWO]),
    ]

    jobs = _source(session).fetch_jobs()

    assert [job.id for job in jobs] == ["j1", "j4", "j5"]
    first_call, second_call = session.get.call_args_list
    assert first_call.args[0] == "https://bk.test/v2/organizations/acme/builds"
    assert first_call.kwargs["params"] == {"state[]": ["scheduled", "running"], "per_page": 2}
    assert first_call.kwargs["timeout"] == 5
    assert second_call.args[0] == "https://bk.test/v2/organizations/acme/builds?page=2"
    assert second_call.kwargs["params"] is None


@pytest.mark.parametrize("status_code", [401, 404, 500])
def test_non_success_status_raises(status_code):
    session = MagicMock()
    session.headers = {}
    session.get.return_value = _response(status_code, text="nope")

    with pytest.raises(UpstreamAPIError) as excinfo:
        _source(session).fetch_jobs()
    assert excinfo.value.status_code == status_code


def test_transport_error_raises():
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(UpstreamAPIError, match="connection refused"):
        _source(session).fetch_jobs()


def test_undecodable_or_unexpected_body_raises():
    session = MagicMock()
    session.headers = {}
    bad_json = _response()
    bad_json.json.side_effect = ValueError("not json")
    session.get.return_value = bad_json
    with pytest.raises(UpstreamAPIError, match="non-JSON"):
        _source(session).fetch_jobs()

    session.get.return_value = _response(payload={"message": "odd"})
    with pytest.raises(UpstreamAPIError, match="must be a list"):
        _source(session).fetch_jobs()
