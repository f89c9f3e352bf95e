"""Errors raised while classifying contributions."""

from __future__ import annotations


class ClassificationError(Exception):
    """Base class for classification errors."""


class PermissionResolutionError(ClassificationError):
    """Raised when a user's repository permission cannot be determined.

    Usually the GitHub App is not installed on the repository or lacks the
    ``metadata`` permission. Callers must decide on a fallback; the
    resolver never guesses.
    """

    def __init__(self, identity: str, owner: str, repo: str, reason: str) -> None:
        """Record which lookup failed and why."""
        self.identity = identity
        self.owner = owner
        self.repo = repo
        self.reason = reason
        super().__init__(
            f"Failed to check whether {identity} can write to {owner}/{repo}: {reason}"
        )


class IncompleteContributionError(ClassificationError):
    """Raised when a record lacks the author or repository needed to resolve it."""

    def __init__(self, missing: str) -> None:
        """Name the missing field."""
        self.missing = missing
        super().__init__(f"Contribution record has no {missing}; cannot resolve")
