"""Unit tests for permission-based classification."""

from __future__ import annotations

import typing as typ

import httpx
import pytest

from clawarden.classification import (
    ClassificationCache,
    ContributionClassifier,
    ContributionRecord,
    IncompleteContributionError,
    PermissionResolutionError,
    PermissionResolver,
    Verdict,
    cache_key,
    has_write_access,
)
from clawarden.github import GitHubRestClient, GitHubRestConfig
from clawarden.github.models import CollaboratorPermission
from tests.helpers.github_payloads import FakeGitHubClient

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PERMISSION_PATH = "/repos/acme/widgets/collaborators/octocat/permission"


def _github_client(
    handler: cabc.Callable[[httpx.Request], httpx.Response],
) -> tuple[GitHubRestClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://api.github.test"
    )
    client = GitHubRestClient(
        GitHubRestConfig(token="token", api_url="https://api.github.test"),
        http_client=http_client,
    )
    return client, http_client


@pytest.mark.parametrize(
    ("permission", "role_name", "expected"),
    [
        ("admin", None, True),
        ("write", "write", True),
        ("read", "maintain", True),
        ("read", "triage", False),
        ("none", None, False),
        (None, None, False),
    ],
)
def test_has_write_access(
    permission: str | None, role_name: str | None, expected: bool
) -> None:
    """Admin or write permission, or a writing role, grants write access."""
    value = CollaboratorPermission(permission=permission, role_name=role_name)

    assert has_write_access(value) is expected


class TestPermissionResolver:
    """GitHub-backed resolution with caching."""

    @pytest.mark.asyncio
    async def test_write_permission_is_internal_and_cached(self) -> None:
        """A writer is not external and the answer is cached."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            payload = {"permission": "write", "role_name": "write"}
            return httpx.Response(200, json=payload)

        client, http_client = _github_client(handler)
        cache = ClassificationCache()
        resolver = PermissionResolver(client, cache)

        try:
            first = await resolver.resolve_by_permission(
                "octocat", "acme", "widgets", org_wide_scope=True
            )
            second = await resolver.resolve_by_permission(
                "octocat", "acme", "gadgets", org_wide_scope=True
            )
        finally:
            await http_client.aclose()

        assert first is False
        assert second is False
        assert [request.url.path for request in requests] == [PERMISSION_PATH]
        key = cache_key("octocat", "acme", None, org_wide_scope=True)
        assert cache.get(*key) is False

    @pytest.mark.asyncio
    async def test_read_permission_is_external(self) -> None:
        """Read-only access means the author is external."""
        client = FakeGitHubClient()
        resolver = PermissionResolver(client)

        assert await resolver.resolve_by_permission(
            "octocat", "acme", "widgets", org_wide_scope=False
        )

    @pytest.mark.asyncio
    async def test_forbidden_raises_resolution_error(self) -> None:
        """An uninstalled app surfaces as PermissionResolutionError."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "Resource not accessible"})

        client, http_client = _github_client(handler)
        cache = ClassificationCache()
        resolver = PermissionResolver(client, cache)

        try:
            with pytest.raises(PermissionResolutionError) as excinfo:
                await resolver.resolve_by_permission(
                    "octocat", "acme", "widgets", org_wide_scope=True
                )
        finally:
            await http_client.aclose()

        assert excinfo.value.identity == "octocat"
        assert "Resource not accessible" in excinfo.value.reason
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_transport_error_raises_resolution_error(self) -> None:
        """Network failures are wrapped rather than guessed around."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client, http_client = _github_client(handler)
        resolver = PermissionResolver(client)

        try:
            with pytest.raises(PermissionResolutionError):
                await resolver.resolve_by_permission(
                    "octocat", "acme", "widgets", org_wide_scope=True
                )
        finally:
            await http_client.aclose()


class TestDetermine:
    """The classifier falls back to the resolver for unknown verdicts."""

    @pytest.mark.asyncio
    async def test_unknown_record_is_resolved(self) -> None:
        """An unknown verdict is replaced by the resolver's answer."""
        client = FakeGitHubClient(
            permissions={"octocat": CollaboratorPermission(permission="admin")}
        )
        cache = ClassificationCache()
        classifier = ContributionClassifier(
            cache, resolver=PermissionResolver(client, cache)
        )
        record = ContributionRecord(author="octocat", owner="acme", repo="widgets")

        verdict = await classifier.determine(record)

        assert verdict is Verdict.INTERNAL
        assert record.verdict is Verdict.INTERNAL
        assert client.calls_named("permission") == [
            ("permission", "acme", "widgets", "octocat")
        ]

    @pytest.mark.asyncio
    async def test_definitive_record_skips_resolver(self) -> None:
        """A heuristic verdict never costs an API call."""
        client = FakeGitHubClient()
        classifier = ContributionClassifier(
            ClassificationCache(), resolver=PermissionResolver(client)
        )
        record = ContributionRecord(
            author="octocat",
            owner="acme",
            repo="widgets",
            source_repo="octocat/widgets",
            target_repo="acme/widgets",
        )

        assert await classifier.determine(record) is Verdict.EXTERNAL
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_incomplete_record_raises(self) -> None:
        """An unknown record without a repository cannot be resolved."""
        client = FakeGitHubClient()
        classifier = ContributionClassifier(
            ClassificationCache(), resolver=PermissionResolver(client)
        )
        record = ContributionRecord(author="octocat", owner="acme")

        with pytest.raises(IncompleteContributionError) as excinfo:
            await classifier.determine(record)

        assert excinfo.value.missing == "repo"
        assert client.calls == []
