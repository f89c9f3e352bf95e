"""Unit tests for external contribution listings."""

from __future__ import annotations

import pytest

from clawarden.classification import (
    ClassificationCache,
    ContributionClassifier,
    PermissionResolver,
    Verdict,
)
from clawarden.contributions import ContributionService, SearchOptions
from clawarden.github import GitHubAPIError
from clawarden.github.models import CollaboratorPermission
from tests.helpers.github_payloads import (
    FakeGitHubClient,
    pull_request_payload,
    search_item,
)


def _service(
    client: FakeGitHubClient, *, excluded: tuple[str, ...] = ()
) -> ContributionService:
    cache = ClassificationCache()
    classifier = ContributionClassifier(
        cache, resolver=PermissionResolver(client, cache)
    )
    return ContributionService(client, classifier, excluded_authors=excluded)


class TestListings:
    """Searching and filtering pull requests."""

    @pytest.mark.asyncio
    async def test_internal_pull_requests_are_dropped(self) -> None:
        """Members and writers are removed; read-only authors stay."""
        client = FakeGitHubClient(
            search_items=[
                search_item(1, author="alice", association="MEMBER"),
                search_item(2, author="bob"),
                search_item(3, author="octocat"),
            ],
            permissions={"bob": CollaboratorPermission(permission="write")},
        )

        records = await _service(client).list_external_pull_requests("acme")

        assert [record.number for record in records] == [3]
        assert records[0].verdict is Verdict.EXTERNAL
        assert [call[3] for call in client.calls_named("permission")] == [
            "bob",
            "octocat",
        ]

    @pytest.mark.asyncio
    async def test_bots_are_skipped_without_lookups(self) -> None:
        """Bot-authored pull requests never reach the resolver."""
        client = FakeGitHubClient(
            search_items=[search_item(1, author="renovate[bot]", user_type="Bot")]
        )

        assert await _service(client).list_external_pull_requests("acme") == []
        assert client.calls_named("permission") == []

    @pytest.mark.asyncio
    async def test_unresolvable_author_is_kept_as_unknown(self) -> None:
        """A failed permission lookup keeps the pull request, marked unknown."""
        client = FakeGitHubClient(
            search_items=[search_item(5)],
            permission_error=GitHubAPIError("nope", status_code=403),
        )

        records = await _service(client).list_external_pull_requests("acme")

        assert [record.verdict for record in records] == [Verdict.UNKNOWN]

    @pytest.mark.asyncio
    async def test_query_and_paging(self) -> None:
        """Options, exclusions and the page reach the search call."""
        client = FakeGitHubClient()
        options = SearchOptions(status="closed", page=2)

        await _service(client, excluded=("renovate",)).list_external_pull_requests(
            "acme", "widgets", options
        )

        assert client.calls_named("search") == [
            (
                "search",
                "is:pr repo:acme/widgets is:closed -author:renovate",
                2,
                "created",
                "desc",
            )
        ]

    @pytest.mark.asyncio
    async def test_open_listing_forces_open_qualifier(self) -> None:
        """The open listing searches open pull requests whatever the status."""
        client = FakeGitHubClient()

        await _service(client).list_open_external_pull_requests(
            "acme", options=SearchOptions(status="closed")
        )

        assert client.calls_named("search")[0][1] == "is:pr org:acme is:open"


class TestDetail:
    """Single pull request inspection."""

    @pytest.mark.asyncio
    async def test_detail_uses_heuristics_only(self) -> None:
        """A fork pull request is external without a permission lookup."""
        client = FakeGitHubClient(pull_requests={7: pull_request_payload(7)})

        record = await _service(client).get_pull_request_detail("acme", "widgets", 7)

        assert record.verdict is Verdict.EXTERNAL
        assert client.calls_named("permission") == []

    @pytest.mark.asyncio
    async def test_detail_may_be_unknown(self) -> None:
        """Without repository evidence the detail verdict stays unknown."""
        client = FakeGitHubClient(
            pull_requests={
                7: pull_request_payload(7, head_repo=None, base_repo=None)
            }
        )

        record = await _service(client).get_pull_request_detail("acme", "widgets", 7)

        assert record.verdict is Verdict.UNKNOWN
        assert client.calls_named("permission") == []
