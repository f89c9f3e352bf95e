"""List and inspect external pull requests with their classification."""

from __future__ import annotations

import typing as typ

from clawarden.classification import (
    ContributionRecord,
    IncompleteContributionError,
    PermissionResolutionError,
    Verdict,
)
from clawarden.logging import get_logger, log_info, log_warning

from .queries import SearchOptions, build_search_query

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from clawarden.classification import ContributionClassifier
    from clawarden.github.client import PullRequestQueryClient

logger = get_logger(__name__)


class ContributionService:
    """Search pull requests and keep the ones from external contributors.

    Listings return one page (at most 100 results) of human-authored pull
    requests. Each is classified with the heuristic rules and, when they
    are inconclusive, the permission resolver. Internal pull requests are
    dropped. A pull request whose author cannot be resolved is kept with
    an ``unknown`` verdict so it still gets a human look.

    Parameters
    ----------
    client
        GitHub client for search and pull request lookups.
    classifier
        Classifier bound to the process cache and resolver.
    excluded_authors
        Logins (bots, known organisation members) excluded in the search
        query itself.

    """

    def __init__(
        self,
        client: PullRequestQueryClient,
        classifier: ContributionClassifier,
        *,
        excluded_authors: cabc.Iterable[str] = (),
    ) -> None:
        """Store collaborators."""
        self._client = client
        self._classifier = classifier
        self._excluded_authors = tuple(excluded_authors)

    async def list_external_pull_requests(
        self,
        owner: str,
        repo: str | None = None,
        options: SearchOptions | None = None,
    ) -> list[ContributionRecord]:
        """Return external pull requests matching ``options``."""
        return await self._list(owner, repo, options, open_only=False)

    async def list_open_external_pull_requests(
        self,
        owner: str,
        repo: str | None = None,
        options: SearchOptions | None = None,
    ) -> list[ContributionRecord]:
        """Return open external pull requests; ``options.status`` is ignored."""
        return await self._list(owner, repo, options, open_only=True)

    async def get_pull_request_detail(
        self, owner: str, repo: str, number: int
    ) -> ContributionRecord:
        """Fetch one pull request and classify it with the heuristic rules only.

        The verdict may be ``unknown``; no permission lookup is made.
        """
        pull_request = await self._client.get_pull_request(owner, repo, number)
        record = ContributionRecord.from_pull_request(pull_request)
        if not record.is_bot:
            self._classifier.classify(record)
        return record

    async def _list(
        self,
        owner: str,
        repo: str | None,
        options: SearchOptions | None,
        *,
        open_only: bool,
    ) -> list[ContributionRecord]:
        opts = options or SearchOptions()
        query = build_search_query(
            owner,
            repo,
            opts,
            open_only=open_only,
            excluded_authors=self._excluded_authors,
        )
        page = await self._client.search_issues(
            query, page=opts.page, sort="created", order="desc"
        )
        log_info(logger, "%d results found for search: %s", page.total_count, query)

        external: list[ContributionRecord] = []
        for item in page.items:
            record = ContributionRecord.from_pull_request(item)
            if record.author is None or record.is_bot:
                continue
            verdict = await self._determine(record)
            if verdict is not Verdict.INTERNAL:
                external.append(record)
        return external

    async def _determine(self, record: ContributionRecord) -> Verdict:
        try:
            return await self._classifier.determine(record)
        except (PermissionResolutionError, IncompleteContributionError) as exc:
            log_warning(
                logger,
                "Keeping %s#%s with unknown verdict: %s",
                record.repo,
                record.number,
                exc,
            )
            record.verdict = Verdict.UNKNOWN
            return Verdict.UNKNOWN
