"""Clear pending-CLA labels once a contributor has signed."""

from __future__ import annotations

import typing as typ

import httpx

from clawarden.common.slug import parse_repo_url, repo_slug
from clawarden.github.errors import GitHubAPIError, GitHubResponseShapeError
from clawarden.logging import get_logger, log_debug, log_warning

from .errors import ReconciliationError
from .models import ReconciliationOutcome, SignatureContext
from .observability import ReconciliationEventLogger

if typ.TYPE_CHECKING:
    from clawarden.github.client import ContributionSearchClient
    from clawarden.github.models import GitHubIssue, SearchPage

logger = get_logger(__name__)

DEFAULT_PENDING_LABEL: typ.Final = "Pending CLA"
SEARCH_PAGE_SIZE: typ.Final = 100
# GitHub search serves at most this many results for one query.
MAX_SEARCH_RESULTS: typ.Final = 1000

_REQUEST_ERRORS = (GitHubAPIError, GitHubResponseShapeError, httpx.HTTPError)


def build_author_query(org: str, identity: str) -> str:
    """Return the search query for a signer's open pull requests in ``org``."""
    return f"org:{org} is:pr is:open author:{identity}"


def _has_label(item: GitHubIssue, label: str) -> bool:
    wanted = label.lower()
    return any((entry.name or "").lower() == wanted for entry in item.labels)


class Reconciler:
    """Remove the pending-CLA label from a signer's open pull requests.

    Each run searches the signer's open pull requests in the organisation
    named by the signing link, then removes the label from every one that
    still carries it. Removals are independent: a failure on one pull
    request is counted and the loop moves on. Failures are reported only
    after every candidate has been attempted.

    Parameters
    ----------
    client
        GitHub client able to search issues and remove labels.
    pending_label
        Label marking pull requests that wait on a CLA signature.
    event_logger
        Structured event sink; a default instance is created when omitted.

    """

    def __init__(
        self,
        client: ContributionSearchClient,
        *,
        pending_label: str = DEFAULT_PENDING_LABEL,
        event_logger: ReconciliationEventLogger | None = None,
    ) -> None:
        """Store the client, label name and event logger."""
        self._client = client
        self._pending_label = pending_label
        self._events = event_logger or ReconciliationEventLogger()

    @property
    def pending_label(self) -> str:
        """Return the label this reconciler removes."""
        return self._pending_label

    async def reconcile_after_signature(
        self, signature: SignatureContext
    ) -> ReconciliationOutcome:
        """Clear pending labels for the contributor who just signed.

        Returns
        -------
        ReconciliationOutcome
            Counters for the run. When the organisation or identity cannot
            be determined nothing is called and the outcome is empty.

        Raises
        ------
        ReconciliationError
            If the search fails (``rate_limited`` set when GitHub reported a
            rate limit), or if any label removal failed.

        """
        org = signature.org
        identity = signature.identity
        outcome = ReconciliationOutcome(org=org, identity=identity)
        if org is None or identity is None:
            self._events.log_skipped(org=org, identity=identity)
            return outcome

        self._events.log_started(org=org, identity=identity)
        candidates = await self._search(org, identity)
        for item in candidates:
            await self._reconcile_item(item, outcome)

        self._events.log_completed(outcome)
        if outcome.failures:
            raise ReconciliationError.removal_failures(outcome)
        return outcome

    async def _search(self, org: str, identity: str) -> list[GitHubIssue]:
        query = build_author_query(org, identity)
        items: list[GitHubIssue] = []
        page_number = 1
        while True:
            page = await self._search_page(org, identity, query, page_number)
            items.extend(page.items)
            if len(page.items) < SEARCH_PAGE_SIZE or len(items) >= page.total_count:
                break
            if len(items) >= MAX_SEARCH_RESULTS:
                log_warning(
                    logger,
                    "Search for %s in %s reports %d results; only the first %d "
                    "are reachable",
                    identity,
                    org,
                    page.total_count,
                    len(items),
                )
                break
            page_number += 1

        # Search matches authors loosely; only the signer's own PRs qualify.
        matches = [
            item
            for item in items
            if item.user is not None and item.user.login == identity
        ]
        log_debug(
            logger,
            "Found %d open pull request(s) by %s in %s: %s",
            len(matches),
            identity,
            org,
            ", ".join(str(item.number) for item in matches),
        )
        return matches

    async def _search_page(
        self, org: str, identity: str, query: str, page_number: int
    ) -> SearchPage:
        try:
            return await self._client.search_issues(
                query,
                page=page_number,
                per_page=SEARCH_PAGE_SIZE,
                sort="updated",
                order="desc",
            )
        except _REQUEST_ERRORS as exc:
            rate_limited = isinstance(exc, GitHubAPIError) and exc.is_rate_limited
            self._events.log_search_failed(
                org=org, identity=identity, error=exc, rate_limited=rate_limited
            )
            raise ReconciliationError.search_error(
                org, identity, rate_limited=rate_limited
            ) from exc

    async def _reconcile_item(
        self, item: GitHubIssue, outcome: ReconciliationOutcome
    ) -> None:
        if not _has_label(item, self._pending_label):
            outcome.skipped += 1
            return
        outcome.attempted += 1
        parsed = parse_repo_url(item.repository_url)
        if parsed is None:
            outcome.failures += 1
            self._events.log_removal_failed(
                repo_slug=str(item.repository_url),
                number=item.number,
                error=ValueError("pull request has no repository_url"),
            )
            return

        owner, repo = parsed
        slug = repo_slug(owner, repo)
        try:
            await self._client.remove_label(
                owner, repo, item.number, self._pending_label
            )
        except GitHubAPIError as exc:
            if exc.is_not_found:
                outcome.skipped += 1
                self._events.log_label_already_removed(
                    repo_slug=slug, number=item.number, label=self._pending_label
                )
                return
            outcome.failures += 1
            if exc.is_forbidden:
                self._events.log_permission_denied(
                    repo_slug=slug, number=item.number, error=exc
                )
            else:
                self._events.log_removal_failed(
                    repo_slug=slug, number=item.number, error=exc
                )
            return
        except (GitHubResponseShapeError, httpx.HTTPError) as exc:
            outcome.failures += 1
            self._events.log_removal_failed(
                repo_slug=slug, number=item.number, error=exc
            )
            return

        outcome.removed += 1
        self._events.log_label_removed(
            repo_slug=slug, number=item.number, label=self._pending_label
        )
