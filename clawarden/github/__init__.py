"""GitHub REST client and payload models."""

from __future__ import annotations

from .client import (
    CollaboratorPermissionClient,
    ContributionSearchClient,
    GitHubRestClient,
    GitHubRestConfig,
    IssueWriteClient,
    PullRequestQueryClient,
)
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import (
    CollaboratorPermission,
    GitHubIssue,
    GitHubLabel,
    GitHubPullRequest,
    GitHubUser,
    SearchPage,
)

__all__ = [
    "CollaboratorPermission",
    "CollaboratorPermissionClient",
    "ContributionSearchClient",
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubIssue",
    "GitHubLabel",
    "GitHubPullRequest",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "GitHubUser",
    "IssueWriteClient",
    "PullRequestQueryClient",
    "SearchPage",
]
