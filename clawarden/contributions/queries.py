"""Build GitHub search queries for contribution listings."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_DATE_PATTERN: typ.Final = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_STATUS_PATTERN: typ.Final = re.compile(r"^[a-z-]+$")


class InvalidSearchOptionError(ValueError):
    """Raised when a listing filter cannot be expressed as a search qualifier."""

    def __init__(self, option: str, value: object, expected: str) -> None:
        """Describe the rejected option and the accepted format."""
        self.option = option
        self.value = value
        super().__init__(f"{option}={value!r} is invalid; expected {expected}")


@dc.dataclass(frozen=True, slots=True)
class SearchOptions:
    """Filters for listing pull requests.

    Attributes
    ----------
    status
        Extra ``is:`` qualifier such as ``open``, ``closed`` or ``merged``.
    after
        Earliest creation date (inclusive), ``YYYY-MM-DD``.
    before
        Latest creation date (inclusive), ``YYYY-MM-DD``.
    merged
        ``True`` for merged only, ``False`` for unmerged only, ``None`` for
        either.
    page
        1-based results page.

    """

    status: str | None = None
    after: str | None = None
    before: str | None = None
    merged: bool | None = None
    page: int = 1

    def __post_init__(self) -> None:
        """Reject values that would corrupt the search query."""
        for option in ("after", "before"):
            value = getattr(self, option)
            if value is not None and not _DATE_PATTERN.match(value):
                raise InvalidSearchOptionError(option, value, "YYYY-MM-DD")
        if self.status is not None and not _STATUS_PATTERN.match(self.status):
            raise InvalidSearchOptionError("status", self.status, "a lowercase word")
        if self.page < 1:
            raise InvalidSearchOptionError("page", self.page, "a positive integer")


def build_search_query(
    owner: str,
    repo: str | None = None,
    options: SearchOptions | None = None,
    *,
    open_only: bool = False,
    excluded_authors: cabc.Iterable[str] = (),
) -> str:
    """Return the ``q`` parameter for a pull request search.

    Examples
    --------
    >>> build_search_query("acme", "widgets", SearchOptions(merged=False))
    'is:pr repo:acme/widgets -is:merged'
    >>> build_search_query("acme", open_only=True, excluded_authors=["ci-bot"])
    'is:pr org:acme is:open -author:ci-bot'

    """
    opts = options or SearchOptions()
    terms = ["is:pr", f"repo:{owner}/{repo}" if repo else f"org:{owner}"]
    if open_only:
        terms.append("is:open")
    elif opts.status:
        terms.append(f"is:{opts.status}")
    if opts.after:
        terms.append(f"created:>={opts.after}")
    if opts.before:
        terms.append(f"created:<={opts.before}")
    if opts.merged is True:
        terms.append("is:merged")
    elif opts.merged is False:
        terms.append("-is:merged")
    terms.extend(f"-author:{author}" for author in excluded_authors if author)
    return " ".join(terms)
