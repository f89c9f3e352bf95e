"""GitHub REST client used by classification, queries and reconciliation."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
import urllib.parse

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import (
    CollaboratorPermission,
    GitHubPullRequest,
    SearchPage,
    error_message,
)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_MAX_PER_PAGE = 100

SearchSort = typ.Literal["created", "updated", "comments"]
SearchOrder = typ.Literal["asc", "desc"]


class ContributionSearchClient(typ.Protocol):
    """GitHub operations needed to find contributions and clear their labels."""

    async def search_issues(
        self,
        query: str,
        *,
        page: int = 1,
        per_page: int = _MAX_PER_PAGE,
        sort: SearchSort | None = None,
        order: SearchOrder = "desc",
    ) -> SearchPage:
        """Return one page of issue/pull request search results."""
        ...

    async def remove_label(self, owner: str, repo: str, number: int, name: str) -> None:
        """Remove a label from an issue or pull request."""
        ...


class PullRequestQueryClient(typ.Protocol):
    """GitHub operations used to list and inspect pull requests."""

    async def search_issues(
        self,
        query: str,
        *,
        page: int = 1,
        per_page: int = _MAX_PER_PAGE,
        sort: SearchSort | None = None,
        order: SearchOrder = "desc",
    ) -> SearchPage:
        """Return one page of issue/pull request search results."""
        ...

    async def get_pull_request(
        self, owner: str, repo: str, number: int
    ) -> GitHubPullRequest:
        """Fetch a single pull request."""
        ...


class CollaboratorPermissionClient(typ.Protocol):
    """GitHub operation needed to resolve a user's write access."""

    async def get_collaborator_permission(
        self, owner: str, repo: str, username: str
    ) -> CollaboratorPermission:
        """Return the permission level of ``username`` on ``owner/repo``."""
        ...


class IssueWriteClient(typ.Protocol):
    """GitHub operations used by the pull request event handlers."""

    async def add_labels(
        self, owner: str, repo: str, number: int, labels: typ.Sequence[str]
    ) -> None:
        """Add labels to an issue or pull request."""
        ...

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        """Post a comment on an issue or pull request."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "clawarden/0.1"

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration from ``CLAWARDEN_GITHUB_*`` variables.

        ``CLAWARDEN_GITHUB_TOKEN`` is required. When
        ``CLAWARDEN_GITHUB_ENTERPRISE_HOSTNAME`` is set the client targets
        that GitHub Enterprise Server's ``/api/v3`` endpoint.
        """
        token = os.environ.get("CLAWARDEN_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        hostname = os.environ.get("CLAWARDEN_GITHUB_ENTERPRISE_HOSTNAME", "").strip()
        if hostname:
            return cls(token=token, api_url=f"https://{hostname}/api/v3")
        return cls(token=token)


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


def _decode[T](content: bytes, kind: type[T], *, what: str) -> T:
    try:
        return msgspec.json.decode(content, type=kind)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise GitHubResponseShapeError.invalid(what, exc) from exc


class GitHubRestClient:
    """httpx-backed implementation of the GitHub client protocols."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def search_issues(
        self,
        query: str,
        *,
        page: int = 1,
        per_page: int = _MAX_PER_PAGE,
        sort: SearchSort | None = None,
        order: SearchOrder = "desc",
    ) -> SearchPage:
        """Return one page of ``GET /search/issues`` results.

        Pagination is explicit: callers pass ``page`` and stop when a page
        comes back short.
        """
        params: dict[str, str | int] = {
            "q": query,
            "page": max(page, 1),
            "per_page": min(max(per_page, 1), _MAX_PER_PAGE),
            "order": order,
        }
        if sort is not None:
            params["sort"] = sort
        response = await self._request("GET", "/search/issues", params=params)
        return _decode(response.content, SearchPage, what="search")

    async def get_pull_request(
        self, owner: str, repo: str, number: int
    ) -> GitHubPullRequest:
        """Fetch a single pull request."""
        response = await self._request(
            "GET", f"/repos/{_quote(owner)}/{_quote(repo)}/pulls/{number}"
        )
        return _decode(response.content, GitHubPullRequest, what="pull request")

    async def get_collaborator_permission(
        self, owner: str, repo: str, username: str
    ) -> CollaboratorPermission:
        """Return the permission level of ``username`` on ``owner/repo``.

        Needs only the repository ``metadata`` permission, which every
        installed GitHub App holds; a 403 means the app is not installed on
        the repository.
        """
        response = await self._request(
            "GET",
            f"/repos/{_quote(owner)}/{_quote(repo)}"
            f"/collaborators/{_quote(username)}/permission",
        )
        return _decode(response.content, CollaboratorPermission, what="permission")

    async def add_labels(
        self, owner: str, repo: str, number: int, labels: typ.Sequence[str]
    ) -> None:
        """Add labels to an issue or pull request."""
        await self._request(
            "POST",
            f"/repos/{_quote(owner)}/{_quote(repo)}/issues/{number}/labels",
            json={"labels": list(labels)},
        )

    async def remove_label(self, owner: str, repo: str, number: int, name: str) -> None:
        """Remove a label from an issue or pull request."""
        await self._request(
            "DELETE",
            f"/repos/{_quote(owner)}/{_quote(repo)}/issues/{number}"
            f"/labels/{_quote(name)}",
        )

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        """Post a comment on an issue or pull request."""
        await self._request(
            "POST",
            f"/repos/{_quote(owner)}/{_quote(repo)}/issues/{number}/comments",
            json={"body": body},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
        json: dict[str, typ.Any] | None = None,
    ) -> httpx.Response:
        """Send a request and raise :class:`GitHubAPIError` on non-2xx status."""
        response = await self._client.request(method, path, params=params, json=json)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(
                response.status_code,
                method=method,
                path=path,
                api_message=error_message(response.content),
            )
        return response
