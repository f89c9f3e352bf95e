"""Comment templates posted on pull requests and issues."""

from __future__ import annotations

import dataclasses as dc
import enum
import urllib.parse


class MessageTemplate(enum.StrEnum):
    """Named comment templates."""

    ASK_TO_SIGN_CLA = "ask-to-sign-cla"
    MESSAGE_AFTER_MERGE = "message-after-merge"
    ISSUE_GREETING = "issue-greeting"


@dc.dataclass(frozen=True, slots=True)
class MessageContext:
    """Values interpolated into templates."""

    username: str
    org: str
    repo: str
    pr_number: int | None = None


def cla_link(website_address: str, context: MessageContext) -> str:
    """Return the signing link carrying the pull request context.

    >>> cla_link("https://cla.test", MessageContext("octo", "acme", "widgets", 7))
    'https://cla.test/cla?org=acme&repo=widgets&prNumber=7&username=octo'

    """
    query = urllib.parse.urlencode(
        {
            "org": context.org,
            "repo": context.repo,
            "prNumber": "" if context.pr_number is None else context.pr_number,
            "username": context.username,
        }
    )
    return f"{website_address.rstrip('/')}/cla?{query}"


def render_message(
    template: MessageTemplate | str,
    context: MessageContext,
    *,
    website_address: str = "",
) -> str:
    """Render ``template`` for ``context``.

    Raises
    ------
    ValueError
        If ``template`` does not name a known template.

    """
    match MessageTemplate(template):
        case MessageTemplate.ASK_TO_SIGN_CLA:
            link = cla_link(website_address, context)
            return (
                f"Thank you @{context.username} for contributing this PR.\n"
                f"Please [sign the Contributor License Agreement (CLA)]({link}) "
                "before merging."
            )
        case MessageTemplate.MESSAGE_AFTER_MERGE:
            return f"Thank you @{context.username} for contributing this PR."
        case MessageTemplate.ISSUE_GREETING:
            return (
                "Thanks for opening this issue! We'll get back to you shortly. "
                "If it is a bug, please make sure to add steps to reproduce the issue."
            )
