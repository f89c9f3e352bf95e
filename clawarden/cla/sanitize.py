"""Sanitise free-text fields submitted through the signing form."""

from __future__ import annotations

import re
import typing as typ

MAX_INPUT_LENGTH: typ.Final = 30

_TAG_PATTERN: typ.Final = re.compile(r"</?[^>]+(>|$)")


def sanitize_input(
    value: str | None, *, max_length: int = MAX_INPUT_LENGTH
) -> str | None:
    """Truncate ``value`` to ``max_length`` characters, then strip HTML tags.

    A tag cut short by truncation is removed up to the end of the string.
    ``None`` passes through.

    >>> sanitize_input("<b>octocat</b>")
    'octocat'
    >>> sanitize_input("x" * 40) == "x" * 30
    True

    """
    if value is None:
        return None
    return _TAG_PATTERN.sub("", value[:max_length])
