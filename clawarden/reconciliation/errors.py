"""Errors raised while clearing pending-CLA markers."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import ReconciliationOutcome


class ReconciliationError(Exception):
    """Raised when a reconciliation run could not finish cleanly.

    Either the search for the signer's pull requests failed outright
    (``search_failed``), possibly because of a rate limit
    (``rate_limited``), or at least one label removal failed
    (``failures`` > 0). In the latter case every candidate was still
    attempted and ``outcome`` holds the run's counters.
    """

    def __init__(
        self,
        message: str,
        *,
        failures: int = 0,
        search_failed: bool = False,
        rate_limited: bool = False,
        outcome: ReconciliationOutcome | None = None,
    ) -> None:
        """Record the failure counts alongside the message."""
        self.failures = failures
        self.search_failed = search_failed
        self.rate_limited = rate_limited
        self.outcome = outcome
        super().__init__(message)

    @classmethod
    def search_error(
        cls, org: str, identity: str, *, rate_limited: bool
    ) -> ReconciliationError:
        """Return an error for a failed pull request search."""
        reason = "rate limited" if rate_limited else "failed"
        return cls(
            f"Search for open pull requests by {identity} in {org} {reason}",
            search_failed=True,
            rate_limited=rate_limited,
        )

    @classmethod
    def removal_failures(cls, outcome: ReconciliationOutcome) -> ReconciliationError:
        """Return an error summarising label removals that failed."""
        return cls(
            f"Failed to remove the pending CLA label from {outcome.failures} of "
            f"{outcome.attempted} pull request(s) by {outcome.identity}",
            failures=outcome.failures,
            outcome=outcome,
        )
