"""Unit tests for the contribution listing, detail and cache reset resources.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_contribution_resources.py

"""

from __future__ import annotations

from unittest import mock

import falcon
import falcon.testing
import pytest

from clawarden.api.app import AppDependencies, create_app
from clawarden.classification import ClassificationCache, ContributionRecord, Verdict
from clawarden.contributions import SearchOptions
from clawarden.github import GitHubAPIError
from tests.helpers.github_payloads import pull_request_payload


def _record(number: int = 7) -> ContributionRecord:
    record = ContributionRecord.from_payload(pull_request_payload(number))
    record.verdict = Verdict.EXTERNAL
    return record


@pytest.fixture
def service() -> mock.MagicMock:
    """Return a contribution service double with canned results."""
    double = mock.MagicMock()
    double.list_external_pull_requests = mock.AsyncMock(return_value=[_record(3)])
    double.list_open_external_pull_requests = mock.AsyncMock(
        return_value=[_record(1), _record(2)]
    )
    double.get_pull_request_detail = mock.AsyncMock(return_value=_record(7))
    return double


@pytest.fixture
def cache() -> ClassificationCache:
    """Return an in-memory cache with two entries."""
    cache = ClassificationCache()
    cache.set(True, "octocat", "acme", None)
    cache.set(False, "alice", "acme", None)
    return cache


@pytest.fixture
def client(
    service: mock.MagicMock, cache: ClassificationCache
) -> falcon.testing.TestClient:
    """Build a test client with the contribution routes registered."""
    return falcon.testing.TestClient(
        create_app(AppDependencies(contribution_service=service, cache=cache))
    )


class TestContributionList:
    """GET /contributions."""

    def test_defaults_to_open_listing(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Without a status the open listing is used."""
        result = client.simulate_get("/contributions", params={"org": "acme"})

        assert result.status == falcon.HTTP_200
        assert result.json["count"] == 2
        assert [pr["number"] for pr in result.json["pull_requests"]] == [1, 2]
        assert result.json["pull_requests"][0]["verdict"] == "external"
        service.list_open_external_pull_requests.assert_awaited_once_with(
            "acme", None, SearchOptions(status="open")
        )

    def test_filters_are_forwarded(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """Status, dates, merged and page reach the service."""
        result = client.simulate_get(
            "/contributions",
            params={
                "org": "acme",
                "repo": "widgets",
                "status": "closed",
                "after": "2024-01-01",
                "before": "2024-02-01",
                "merged": "true",
                "page": "2",
            },
        )

        assert result.json["page"] == 2
        service.list_external_pull_requests.assert_awaited_once_with(
            "acme",
            "widgets",
            SearchOptions(
                status="closed",
                after="2024-01-01",
                before="2024-02-01",
                merged=True,
                page=2,
            ),
        )

    def test_all_status_adds_no_qualifier(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """status=all lists pull requests in any state."""
        client.simulate_get("/contributions", params={"org": "acme", "status": "all"})

        service.list_external_pull_requests.assert_awaited_once_with(
            "acme", None, SearchOptions()
        )

    @pytest.mark.parametrize(
        ("params", "field"),
        [
            ({}, "org"),
            ({"org": "acme", "after": "last week"}, "after"),
            ({"org": "acme", "merged": "maybe"}, "merged"),
            ({"org": "acme", "page": "two"}, "page"),
            ({"org": "acme", "page": "0"}, "page"),
        ],
    )
    def test_invalid_parameters(
        self,
        client: falcon.testing.TestClient,
        params: dict[str, str],
        field: str,
    ) -> None:
        """Invalid parameters are rejected with the offending field."""
        result = client.simulate_get("/contributions", params=params)

        assert result.status == falcon.HTTP_400
        assert result.json["field"] == field

    def test_github_rate_limit(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """A rate-limited search maps to 503."""
        service.list_open_external_pull_requests.side_effect = GitHubAPIError(
            "API rate limit exceeded", status_code=403
        )

        result = client.simulate_get("/contributions", params={"org": "acme"})

        assert result.status == falcon.HTTP_503


class TestContributionDetail:
    """GET /contributions/pr."""

    def test_returns_record(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """The pull request is returned with its verdict."""
        result = client.simulate_get(
            "/contributions/pr",
            params={"org": "acme", "repo": "widgets", "number": "7"},
        )

        assert result.status == falcon.HTTP_200
        assert result.json["number"] == 7
        assert result.json["repository"] == "acme/widgets"
        service.get_pull_request_detail.assert_awaited_once_with("acme", "widgets", 7)

    @pytest.mark.parametrize(
        ("params", "field"),
        [
            ({"org": "acme", "number": "7"}, "repo"),
            ({"org": "acme", "repo": "widgets"}, "number"),
            ({"org": "acme", "repo": "widgets", "number": "-1"}, "number"),
        ],
    )
    def test_invalid_parameters(
        self,
        client: falcon.testing.TestClient,
        params: dict[str, str],
        field: str,
    ) -> None:
        """Missing or invalid identifiers are rejected."""
        result = client.simulate_get("/contributions/pr", params=params)

        assert result.status == falcon.HTTP_400
        assert result.json["field"] == field

    def test_unknown_pull_request(
        self, client: falcon.testing.TestClient, service: mock.MagicMock
    ) -> None:
        """A GitHub 404 is passed through as 404."""
        service.get_pull_request_detail.side_effect = GitHubAPIError(
            "missing", status_code=404
        )

        result = client.simulate_get(
            "/contributions/pr",
            params={"org": "acme", "repo": "widgets", "number": "999"},
        )

        assert result.status == falcon.HTTP_404


def test_cache_reset(
    client: falcon.testing.TestClient, cache: ClassificationCache
) -> None:
    """POST /contributions/reset empties the cache and reports the count."""
    result = client.simulate_post("/contributions/reset")

    assert result.json == {"status": "cleared", "entries_cleared": 2}
    assert len(cache) == 0
