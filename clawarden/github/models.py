"""Typed views over the GitHub REST payloads Clawarden consumes.

Only the fields the CLA workflow reads are declared; msgspec ignores the
rest of each payload. The same structs decode webhook ``pull_request``
objects, so every field is optional.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime

import msgspec


class GitHubUser(msgspec.Struct, kw_only=True):
    """Account reference embedded in issues and pull requests."""

    login: str | None = None
    type: str | None = None


class GitHubLabel(msgspec.Struct, kw_only=True):
    """Label attached to an issue or pull request."""

    name: str | None = None


class GitHubRepositoryRef(msgspec.Struct, kw_only=True):
    """Repository reference found on pull request heads and bases."""

    full_name: str | None = None
    html_url: str | None = None
    name: str | None = None
    owner: GitHubUser | None = None


class GitHubBranchRef(msgspec.Struct, kw_only=True):
    """Head or base of a pull request."""

    ref: str | None = None
    sha: str | None = None
    repo: GitHubRepositoryRef | None = None


class GitHubIssue(msgspec.Struct, kw_only=True):
    """Issue or pull request summary as returned by the search API."""

    number: int
    title: str | None = None
    state: str | None = None
    html_url: str | None = None
    repository_url: str | None = None
    user: GitHubUser | None = None
    labels: list[GitHubLabel] = msgspec.field(default_factory=list)
    author_association: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    closed_at: dt.datetime | None = None


class GitHubPullRequest(GitHubIssue, kw_only=True):
    """Full pull request object from the pulls API or a webhook payload."""

    head: GitHubBranchRef | None = None
    base: GitHubBranchRef | None = None
    merged: bool | None = None
    merged_at: dt.datetime | None = None


class SearchPage(msgspec.Struct, kw_only=True):
    """One page of ``GET /search/issues`` results."""

    total_count: int = 0
    incomplete_results: bool = False
    items: list[GitHubPullRequest] = msgspec.field(default_factory=list)


class CollaboratorPermission(msgspec.Struct, kw_only=True):
    """Response of ``GET /repos/{owner}/{repo}/collaborators/{user}/permission``."""

    permission: str | None = None
    role_name: str | None = None


class _ErrorBody(msgspec.Struct, kw_only=True):
    message: str | None = None


def error_message(content: bytes) -> str | None:
    """Extract GitHub's ``message`` field from an error body, if any."""
    try:
        return msgspec.json.decode(content, type=_ErrorBody).message
    except (msgspec.DecodeError, msgspec.ValidationError):
        return None
