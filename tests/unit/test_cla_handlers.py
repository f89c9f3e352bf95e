"""Unit tests for the CLA webhook event handlers."""

from __future__ import annotations

import typing as typ

import pytest

from clawarden.cla import ClaConfig, ClaEventHandlers
from clawarden.classification import (
    ClassificationCache,
    ContributionClassifier,
    PermissionResolver,
)
from clawarden.ledger import SignatureEntry
from tests.helpers.github_payloads import FakeGitHubClient, pull_request_payload

if typ.TYPE_CHECKING:
    from clawarden.ledger import SignatureLedger

CONFIG = ClaConfig(website_address="https://cla.test")
REPOSITORY = {
    "name": "widgets",
    "full_name": "acme/widgets",
    "owner": {"login": "acme", "type": "Organization"},
}


def _handlers(
    client: FakeGitHubClient, ledger: SignatureLedger
) -> ClaEventHandlers:
    cache = ClassificationCache()
    classifier = ContributionClassifier(
        cache, resolver=PermissionResolver(client, cache)
    )
    return ClaEventHandlers(client, ledger=ledger, classifier=classifier, config=CONFIG)


def _pull_request_event(action: str, **kwargs: typ.Any) -> dict[str, typ.Any]:  # noqa: ANN401
    label = kwargs.pop("label", None)
    event: dict[str, typ.Any] = {
        "action": action,
        "pull_request": pull_request_payload(7, **kwargs),
        "repository": REPOSITORY,
    }
    if label is not None:
        event["label"] = {"name": label}
    return event


class TestPullRequestOpened:
    """pull_request.opened adds the pending label."""

    @pytest.mark.asyncio
    async def test_external_author_is_labelled(self, ledger: SignatureLedger) -> None:
        """An unsigned fork contributor gets the pending label."""
        client = FakeGitHubClient()

        handled = await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("opened")
        )

        assert handled
        assert client.calls_named("add_labels") == [
            ("add_labels", "acme", "widgets", 7, ("Pending CLA",))
        ]

    @pytest.mark.asyncio
    async def test_signed_author_is_not_labelled(self, ledger: SignatureLedger) -> None:
        """Authors who signed earlier are left alone."""
        await ledger.append(SignatureEntry(terms="on", username="octocat"))
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("opened")
        )

        assert client.calls_named("add_labels") == []

    @pytest.mark.asyncio
    async def test_member_is_not_labelled(self, ledger: SignatureLedger) -> None:
        """Members are internal and never labelled."""
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("opened", association="OWNER")
        )

        assert client.calls == []


class TestPullRequestLabeled:
    """pull_request.labeled posts the signing request."""

    @pytest.mark.asyncio
    async def test_pending_label_triggers_comment(
        self, ledger: SignatureLedger
    ) -> None:
        """Applying the pending label posts the CLA link."""
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("labeled", label="Pending CLA")
        )

        ((_, owner, repo, number, body),) = client.calls_named("comment")
        assert (owner, repo, number) == ("acme", "widgets", 7)
        assert "@octocat" in body
        assert (
            "https://cla.test/cla?org=acme&repo=widgets&prNumber=7&username=octocat"
            in body
        )

    @pytest.mark.asyncio
    async def test_other_label_is_ignored(self, ledger: SignatureLedger) -> None:
        """Unrelated labels do nothing."""
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("labeled", label="bug")
        )

        assert client.calls == []


class TestPullRequestClosed:
    """pull_request.closed thanks merged external contributors."""

    @pytest.mark.asyncio
    async def test_merged_external_pull_request(self, ledger: SignatureLedger) -> None:
        """A merged fork pull request gets the thank-you comment."""
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("closed", state="closed", merged=True)
        )

        assert [call[4] for call in client.calls_named("comment")] == [
            "Thank you @octocat for contributing this PR."
        ]

    @pytest.mark.asyncio
    async def test_unmerged_close_is_silent(self, ledger: SignatureLedger) -> None:
        """Closing without merging posts nothing."""
        client = FakeGitHubClient()

        await _handlers(client, ledger).dispatch(
            "pull_request", _pull_request_event("closed", state="closed")
        )

        assert client.calls == []


class TestDispatch:
    """Routing, unsupported events and failure containment."""

    @pytest.mark.asyncio
    async def test_issue_greeting(self, ledger: SignatureLedger) -> None:
        """New issues receive the greeting."""
        client = FakeGitHubClient()
        payload = {
            "action": "opened",
            "issue": {"number": 12, "user": {"login": "octocat"}},
            "repository": REPOSITORY,
        }

        assert await _handlers(client, ledger).dispatch("issues", payload)
        first = client.calls_named("comment")[0]
        assert first[:4] == ("comment", "acme", "widgets", 12)

    @pytest.mark.asyncio
    async def test_unsupported_event(self, ledger: SignatureLedger) -> None:
        """Unknown event and action pairs are ignored."""
        client = FakeGitHubClient()
        handlers = _handlers(client, ledger)

        assert not await handlers.dispatch("pull_request", {"action": "edited"})
        assert not await handlers.dispatch("push", {})
        assert "pull_request.opened" in handlers.supported_events

    @pytest.mark.asyncio
    async def test_malformed_payload_is_contained(
        self, ledger: SignatureLedger
    ) -> None:
        """A payload that fails validation is logged and reported as unhandled."""
        client = FakeGitHubClient()

        handled = await _handlers(client, ledger).dispatch(
            "pull_request", {"action": "opened", "pull_request": {}}
        )

        assert not handled
        assert client.calls == []
