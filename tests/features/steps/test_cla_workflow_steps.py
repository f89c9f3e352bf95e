"""Behavioural coverage for the end-to-end CLA workflow."""

from __future__ import annotations

import asyncio
import typing as typ

from pytest_bdd import given, parsers, scenario, then, when
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from clawarden.cla import ClaConfig, ClaEventHandlers
from clawarden.classification import (
    ClassificationCache,
    ContributionClassifier,
    PermissionResolver,
)
from clawarden.ledger import SignatureEntry, SignatureLedger, init_ledger_storage
from clawarden.reconciliation import Reconciler, SignatureContext
from tests.helpers.github_payloads import (
    FakeGitHubClient,
    pull_request_payload,
    search_item,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

CONFIG = ClaConfig(website_address="https://cla.test")


class WorkflowContext(typ.TypedDict, total=False):
    """Mutable context shared between BDD steps."""

    client: FakeGitHubClient
    ledger: SignatureLedger
    handlers: ClaEventHandlers
    comments: list[str]


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


@scenario(
    "../cla_workflow.feature",
    "An external contributor is asked to sign, then cleared",
)
def test_external_contributor_flow() -> None:
    """Wrapper for the full signing scenario."""


@scenario(
    "../cla_workflow.feature",
    "A contributor who signed before is not asked again",
)
def test_signed_contributor_flow() -> None:
    """Wrapper for the already-signed scenario."""


@given("an empty signature ledger", target_fixture="workflow_context")
def given_empty_ledger(tmp_path: Path) -> WorkflowContext:
    """Create a ledger, a GitHub fake and the event handlers."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'workflow.db'}", poolclass=NullPool
    )
    run_async(init_ledger_storage(engine))
    ledger = SignatureLedger(async_sessionmaker(engine, expire_on_commit=False))
    client = FakeGitHubClient()
    cache = ClassificationCache()
    classifier = ContributionClassifier(
        cache, resolver=PermissionResolver(client, cache)
    )
    handlers = ClaEventHandlers(
        client, ledger=ledger, classifier=classifier, config=CONFIG
    )
    return {"client": client, "ledger": ledger, "handlers": handlers, "comments": []}


@given(parsers.parse("{author} has already signed the CLA"))
def given_already_signed(workflow_context: WorkflowContext, author: str) -> None:
    """Store an earlier signature."""
    run_async(
        workflow_context["ledger"].append(SignatureEntry(terms="on", username=author))
    )


def _delivery(
    action: str, number: int, author: str, repository: str, **extra: typ.Any  # noqa: ANN401
) -> dict[str, typ.Any]:
    owner, name = repository.split("/")
    return {
        "action": action,
        "pull_request": pull_request_payload(
            number, author=author, head_repo=f"{author}/{name}", base_repo=repository
        ),
        "repository": {
            "name": name,
            "full_name": repository,
            "owner": {"login": owner, "type": "Organization"},
        },
        **extra,
    }


@when(
    parsers.parse(
        "{author} opens pull request {number:d} from a fork of {repository}"
    )
)
def when_opens_pull_request(
    workflow_context: WorkflowContext, author: str, number: int, repository: str
) -> None:
    """Deliver a pull_request.opened event."""
    handled = run_async(
        workflow_context["handlers"].dispatch(
            "pull_request", _delivery("opened", number, author, repository)
        )
    )
    assert handled, "Expected the opened event to be handled"


@when(parsers.parse('the "{label}" label is applied to pull request {number:d}'))
def when_label_applied(
    workflow_context: WorkflowContext, label: str, number: int
) -> None:
    """Deliver a pull_request.labeled event for the labelled pull request."""
    (_, _, repo, _, _) = workflow_context["client"].calls_named("add_labels")[-1]
    delivery = _delivery(
        "labeled", number, "octocat", f"acme/{repo}", label={"name": label}
    )
    run_async(workflow_context["handlers"].dispatch("pull_request", delivery))


@when(
    parsers.parse("{author} signs the CLA through the link on pull request {number:d}")
)
def when_signs(workflow_context: WorkflowContext, author: str, number: int) -> None:
    """Sign using the link from the comment, then reconcile."""
    client = workflow_context["client"]
    (_, _, _, _, body) = client.calls_named("comment")[-1]
    link = body.split("](", 1)[1].split(")", 1)[0]
    entry = SignatureEntry(terms="on", username=author, referrer=link)
    client.search_items = [search_item(number, author=author, labels=["Pending CLA"])]

    async def _sign() -> None:
        await workflow_context["ledger"].append(entry)
        await Reconciler(client).reconcile_after_signature(
            SignatureContext.from_entry(entry)
        )

    run_async(_sign())


@then(parsers.parse('pull request {number:d} is labelled "{label}"'))
def then_labelled(workflow_context: WorkflowContext, number: int, label: str) -> None:
    """Assert the pending label was added."""
    assert ("add_labels", "acme", "widgets", number, (label,)) in workflow_context[
        "client"
    ].calls


@then(parsers.parse("pull request {number:d} is not labelled"))
def then_not_labelled(workflow_context: WorkflowContext, number: int) -> None:
    """Assert no label was added."""
    assert workflow_context["client"].calls_named("add_labels") == []


@then(parsers.parse("{author} is asked to sign the CLA on pull request {number:d}"))
def then_asked_to_sign(
    workflow_context: WorkflowContext, author: str, number: int
) -> None:
    """Assert the signing request mentions the author and links back."""
    (_, owner, repo, commented_on, body) = workflow_context["client"].calls_named(
        "comment"
    )[-1]
    assert (owner, repo, commented_on) == ("acme", "widgets", number)
    assert f"@{author}" in body
    assert f"prNumber={number}" in body


@then(parsers.parse('the "{label}" label is removed from pull request {number:d}'))
def then_label_removed(
    workflow_context: WorkflowContext, label: str, number: int
) -> None:
    """Assert reconciliation removed the label."""
    assert ("remove_label", "acme", "widgets", number, label) in workflow_context[
        "client"
    ].calls
