"""Typed views over the webhook payloads the CLA handlers consume."""

from __future__ import annotations

import msgspec

from clawarden.github.models import (
    GitHubIssue,
    GitHubLabel,
    GitHubPullRequest,
    GitHubUser,
)


class RepositoryPayload(msgspec.Struct, kw_only=True):
    """``repository`` object of a webhook delivery."""

    name: str
    owner: GitHubUser
    full_name: str | None = None


class PullRequestEvent(msgspec.Struct, kw_only=True):
    """``pull_request`` webhook delivery."""

    action: str
    pull_request: GitHubPullRequest
    repository: RepositoryPayload
    label: GitHubLabel | None = None
    sender: GitHubUser | None = None

    @property
    def owner(self) -> str:
        """Return the login of the repository owner."""
        return self.repository.owner.login or ""


class IssueEvent(msgspec.Struct, kw_only=True):
    """``issues`` webhook delivery."""

    action: str
    issue: GitHubIssue
    repository: RepositoryPayload

    @property
    def owner(self) -> str:
        """Return the login of the repository owner."""
        return self.repository.owner.login or ""
