"""CLA workflow: policy, message templates, input sanitising and event handlers."""

from __future__ import annotations

from .config import ClaConfig
from .events import IssueEvent, PullRequestEvent, RepositoryPayload
from .handlers import ClaEventHandlers
from .messages import MessageContext, MessageTemplate, cla_link, render_message
from .policy import is_cla_required, is_message_after_merge_required
from .sanitize import MAX_INPUT_LENGTH, sanitize_input

__all__ = [
    "MAX_INPUT_LENGTH",
    "ClaConfig",
    "ClaEventHandlers",
    "IssueEvent",
    "MessageContext",
    "MessageTemplate",
    "PullRequestEvent",
    "RepositoryPayload",
    "cla_link",
    "is_cla_required",
    "is_message_after_merge_required",
    "render_message",
    "sanitize_input",
]
