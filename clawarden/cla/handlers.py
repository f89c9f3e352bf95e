"""Handlers for the GitHub events that drive the CLA workflow.

The transport that receives and verifies webhook deliveries lives
elsewhere; it hands each delivery to :meth:`ClaEventHandlers.dispatch`.
Handlers log failures and never raise, so one bad delivery cannot take
the transport down.
"""

from __future__ import annotations

import typing as typ

import httpx
import msgspec
from sqlalchemy.exc import SQLAlchemyError

from clawarden.classification import ContributionRecord
from clawarden.github.errors import GitHubAPIError, GitHubResponseShapeError
from clawarden.logging import get_logger, log_debug, log_exception, log_info

from .events import IssueEvent, PullRequestEvent
from .messages import MessageContext, MessageTemplate, render_message
from .policy import is_cla_required, is_message_after_merge_required

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from clawarden.classification import ContributionClassifier
    from clawarden.github.client import IssueWriteClient
    from clawarden.ledger import SignatureLedger

    from .config import ClaConfig

logger = get_logger(__name__)

_HANDLER_ERRORS = (
    GitHubAPIError,
    GitHubResponseShapeError,
    httpx.HTTPError,
    msgspec.ValidationError,
    SQLAlchemyError,
)

Handler = typ.Callable[[typ.Any], typ.Awaitable[None]]


class ClaEventHandlers:
    """React to pull request and issue events.

    Parameters
    ----------
    client
        GitHub client used to label and comment.
    ledger
        Signature ledger consulted before asking for a CLA.
    classifier
        Classifier deciding whether an author is internal.
    config
        Label name and signing site address.

    """

    def __init__(
        self,
        client: IssueWriteClient,
        *,
        ledger: SignatureLedger,
        classifier: ContributionClassifier,
        config: ClaConfig,
    ) -> None:
        """Store collaborators and build the dispatch table."""
        self._client = client
        self._ledger = ledger
        self._classifier = classifier
        self._config = config
        self._routes: dict[str, tuple[type[msgspec.Struct], Handler]] = {
            "pull_request.opened": (PullRequestEvent, self.on_pull_request_opened),
            "pull_request.labeled": (PullRequestEvent, self.on_pull_request_labeled),
            "pull_request.closed": (PullRequestEvent, self.on_pull_request_closed),
            "issues.opened": (IssueEvent, self.on_issue_opened),
        }

    @property
    def supported_events(self) -> tuple[str, ...]:
        """Return the ``event.action`` names this handler set reacts to."""
        return tuple(self._routes)

    async def dispatch(self, event: str, payload: cabc.Mapping[str, typ.Any]) -> bool:
        """Route a delivery to its handler.

        Parameters
        ----------
        event
            Value of the ``X-GitHub-Event`` header, e.g. ``pull_request``.
        payload
            Decoded delivery body.

        Returns
        -------
        bool
            True when a handler ran to completion; False for unsupported
            events and for failures, which are logged.

        """
        name = f"{event}.{payload.get('action')}"
        route = self._routes.get(name)
        if route is None:
            log_debug(logger, "Ignoring unsupported event %s", name)
            return False
        kind, handler = route
        try:
            await handler(msgspec.convert(payload, kind))
        except _HANDLER_ERRORS as exc:
            log_exception(logger, f"Failed to handle {name}: {exc}", exc)
            return False
        return True

    async def on_pull_request_opened(self, event: PullRequestEvent) -> None:
        """Add the pending label when the author still owes a CLA."""
        record = self._record(event)
        log_info(
            logger,
            "Received pull request %s/%s#%d by %s",
            event.owner,
            event.repository.name,
            event.pull_request.number,
            record.author,
        )
        if not await is_cla_required(
            record, ledger=self._ledger, classifier=self._classifier
        ):
            return
        await self._client.add_labels(
            event.owner,
            event.repository.name,
            event.pull_request.number,
            [self._config.pending_label],
        )

    async def on_pull_request_labeled(self, event: PullRequestEvent) -> None:
        """Ask the author to sign once the pending label is applied."""
        if event.label is None or event.label.name != self._config.pending_label:
            return
        author = event.pull_request.user.login if event.pull_request.user else None
        if not author:
            return
        comment = render_message(
            MessageTemplate.ASK_TO_SIGN_CLA,
            MessageContext(
                username=author,
                org=event.owner,
                repo=event.repository.name,
                pr_number=event.pull_request.number,
            ),
            website_address=self._config.website_address,
        )
        await self._client.create_comment(
            event.owner, event.repository.name, event.pull_request.number, comment
        )

    async def on_pull_request_closed(self, event: PullRequestEvent) -> None:
        """Thank external authors whose pull request was merged."""
        if not event.pull_request.merged:
            return
        record = self._record(event)
        if not record.author or not await is_message_after_merge_required(
            record, classifier=self._classifier
        ):
            return
        comment = render_message(
            MessageTemplate.MESSAGE_AFTER_MERGE,
            MessageContext(
                username=record.author,
                org=event.owner,
                repo=event.repository.name,
                pr_number=event.pull_request.number,
            ),
        )
        await self._client.create_comment(
            event.owner, event.repository.name, event.pull_request.number, comment
        )

    async def on_issue_opened(self, event: IssueEvent) -> None:
        """Greet the author of a new issue."""
        author = event.issue.user.login if event.issue.user else ""
        comment = render_message(
            MessageTemplate.ISSUE_GREETING,
            MessageContext(
                username=author or "",
                org=event.owner,
                repo=event.repository.name,
                pr_number=event.issue.number,
            ),
        )
        await self._client.create_comment(
            event.owner, event.repository.name, event.issue.number, comment
        )

    @staticmethod
    def _record(event: PullRequestEvent) -> ContributionRecord:
        record = ContributionRecord.from_pull_request(event.pull_request)
        # The delivery's repository is authoritative for the owning account.
        record.owner = event.owner or record.owner
        record.repo = event.repository.name or record.repo
        return record
