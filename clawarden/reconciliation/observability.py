"""Emit structured observability events for reconciliation runs.

``Reconciler`` reports each run's start, outcome and per-pull-request
removal problems through :class:`ReconciliationEventLogger`.

Usage
-----
>>> event_logger = ReconciliationEventLogger()
>>> event_logger.log_started(org="acme", identity="octocat")

"""

from __future__ import annotations

import enum
import typing as typ

from clawarden.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from .models import ReconciliationOutcome

logger = get_logger(__name__)


class ReconciliationEventType(enum.StrEnum):
    """Structured log event types for reconciliation runs."""

    RUN_SKIPPED = "reconciliation.run.skipped"
    RUN_STARTED = "reconciliation.run.started"
    RUN_COMPLETED = "reconciliation.run.completed"
    SEARCH_FAILED = "reconciliation.search.failed"
    LABEL_REMOVED = "reconciliation.label.removed"
    LABEL_ALREADY_REMOVED = "reconciliation.label.already_removed"
    LABEL_PERMISSION_DENIED = "reconciliation.label.permission_denied"
    LABEL_REMOVAL_FAILED = "reconciliation.label.removal_failed"


class ReconciliationEventLogger:
    """Emit structured reconciliation events via femtologging."""

    def log_skipped(self, *, org: str | None, identity: str | None) -> None:
        """Log a run that lacked the organisation or the signer's identity."""
        log_info(
            logger,
            "[%s] org=%s identity=%s",
            ReconciliationEventType.RUN_SKIPPED,
            org,
            identity,
        )

    def log_started(self, *, org: str, identity: str) -> None:
        """Log the start of a run for one signer in one organisation."""
        log_info(
            logger,
            "[%s] org=%s identity=%s",
            ReconciliationEventType.RUN_STARTED,
            org,
            identity,
        )

    def log_completed(self, outcome: ReconciliationOutcome) -> None:
        """Log the counters of a finished run.

        Runs with failures are logged at warning level.
        """
        log = log_warning if outcome.failures else log_info
        log(
            logger,
            "[%s] org=%s identity=%s attempted=%d removed=%d skipped=%d failures=%d",
            ReconciliationEventType.RUN_COMPLETED,
            outcome.org,
            outcome.identity,
            outcome.attempted,
            outcome.removed,
            outcome.skipped,
            outcome.failures,
        )

    def log_search_failed(
        self,
        *,
        org: str,
        identity: str,
        error: BaseException,
        rate_limited: bool,
    ) -> None:
        """Log a failed pull request search."""
        log_error(
            logger,
            "[%s] org=%s identity=%s rate_limited=%s error_type=%s error_message=%s",
            ReconciliationEventType.SEARCH_FAILED,
            org,
            identity,
            rate_limited,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_label_removed(self, *, repo_slug: str, number: int, label: str) -> None:
        """Log a successful label removal."""
        log_info(
            logger,
            "[%s] repo_slug=%s number=%d label=%s",
            ReconciliationEventType.LABEL_REMOVED,
            repo_slug,
            number,
            label,
        )

    def log_label_already_removed(
        self, *, repo_slug: str, number: int, label: str
    ) -> None:
        """Log a removal that found the label gone (HTTP 404)."""
        log_info(
            logger,
            "[%s] repo_slug=%s number=%d label=%s",
            ReconciliationEventType.LABEL_ALREADY_REMOVED,
            repo_slug,
            number,
            label,
        )

    def log_permission_denied(
        self, *, repo_slug: str, number: int, error: BaseException
    ) -> None:
        """Log a removal refused with HTTP 403.

        This usually means the app installation lacks write access to
        issues on that repository.
        """
        log_error(
            logger,
            "[%s] repo_slug=%s number=%d error_message=%s",
            ReconciliationEventType.LABEL_PERMISSION_DENIED,
            repo_slug,
            number,
            str(error),
        )

    def log_removal_failed(
        self, *, repo_slug: str, number: int, error: BaseException
    ) -> None:
        """Log any other removal failure."""
        log_error(
            logger,
            "[%s] repo_slug=%s number=%d error_type=%s error_message=%s",
            ReconciliationEventType.LABEL_REMOVAL_FAILED,
            repo_slug,
            number,
            type(error).__name__,
            str(error),
            exc_info=error,
        )
