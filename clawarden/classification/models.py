"""Domain types for contribution classification."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import msgspec

from clawarden.common.slug import parse_repo_slug, parse_repo_url
from clawarden.github.models import GitHubPullRequest

if typ.TYPE_CHECKING:
    import datetime as dt


class Verdict(enum.StrEnum):
    """Outcome of classifying a contribution.

    ``UNKNOWN`` is a real answer ("no opinion yet"), not a negative one;
    callers treat it conservatively and may resolve it later.
    """

    INTERNAL = "internal"
    EXTERNAL = "external"
    UNKNOWN = "unknown"

    @classmethod
    def from_is_external(cls, is_external: bool) -> Verdict:  # noqa: FBT001
        """Map the cached ``is external`` boolean back onto a verdict."""
        return cls.EXTERNAL if is_external else cls.INTERNAL

    @property
    def is_definitive(self) -> bool:
        """Return True for ``INTERNAL`` and ``EXTERNAL``."""
        return self is not Verdict.UNKNOWN

    def to_is_external(self) -> bool:
        """Return the boolean stored in the classification cache.

        Raises
        ------
        ValueError
            For ``UNKNOWN``, which is never cached.

        """
        if self is Verdict.UNKNOWN:
            msg = "an unknown verdict has no cached representation"
            raise ValueError(msg)
        return self is Verdict.EXTERNAL


class AuthorKind(enum.StrEnum):
    """Whether an author is a person or an automation account."""

    HUMAN = "human"
    BOT = "bot"


class AuthorAssociation(enum.StrEnum):
    """GitHub's ``author_association`` values.

    Only ``OWNER``, ``MEMBER`` and ``COLLABORATOR`` imply write standing;
    ``CONTRIBUTOR`` just means an earlier commit landed.
    """

    OWNER = "OWNER"
    MEMBER = "MEMBER"
    COLLABORATOR = "COLLABORATOR"
    CONTRIBUTOR = "CONTRIBUTOR"
    FIRST_TIMER = "FIRST_TIMER"
    FIRST_TIME_CONTRIBUTOR = "FIRST_TIME_CONTRIBUTOR"
    MANNEQUIN = "MANNEQUIN"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: str | None) -> AuthorAssociation | None:
        """Parse a raw association case-insensitively; unknown values map to None."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


INTERNAL_ASSOCIATIONS: typ.Final[frozenset[AuthorAssociation]] = frozenset(
    {
        AuthorAssociation.OWNER,
        AuthorAssociation.MEMBER,
        AuthorAssociation.COLLABORATOR,
    }
)


@dataclasses.dataclass(slots=True)
class ContributionRecord:
    """A pull request reduced to the signals classification relies on.

    Records are built per event or query and discarded afterwards. The
    classifier writes its answer into ``verdict``.

    Attributes
    ----------
    author
        Login of the pull request author.
    author_kind
        Human or bot.
    source_repo
        Full name of the head repository (the fork for fork-based PRs).
    target_repo
        Full name of the base repository.
    association
        Author's reported association with the target repository.
    owner
        Account owning the target repository; part of cache keys.
    repo
        Name of the target repository; part of per-repository cache keys.

    """

    author: str | None
    author_kind: AuthorKind = AuthorKind.HUMAN
    source_repo: str | None = None
    target_repo: str | None = None
    association: AuthorAssociation | None = None
    owner: str | None = None
    repo: str | None = None
    number: int | None = None
    title: str | None = None
    status: str | None = None
    html_url: str | None = None
    labels: tuple[str, ...] = ()
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    verdict: Verdict | None = None

    @classmethod
    def from_pull_request(cls, pull_request: GitHubPullRequest) -> ContributionRecord:
        """Build a record from a pulls API object, webhook payload or search hit."""
        user = pull_request.user
        head_repo = pull_request.head.repo if pull_request.head else None
        base_repo = pull_request.base.repo if pull_request.base else None
        owner, repo = _owning_repository(pull_request)
        return cls(
            author=user.login if user else None,
            author_kind=(
                AuthorKind.BOT if user is not None and user.type == "Bot"
                else AuthorKind.HUMAN
            ),
            source_repo=head_repo.full_name if head_repo else None,
            target_repo=base_repo.full_name if base_repo else None,
            association=AuthorAssociation.parse(pull_request.author_association),
            owner=owner,
            repo=repo,
            number=pull_request.number,
            title=pull_request.title,
            status=_status(pull_request),
            html_url=pull_request.html_url,
            labels=tuple(label.name for label in pull_request.labels if label.name),
            created_at=pull_request.created_at,
            updated_at=pull_request.updated_at,
        )

    @classmethod
    def from_payload(cls, payload: dict[str, typ.Any]) -> ContributionRecord:
        """Build a record from a raw ``pull_request`` mapping."""
        return cls.from_pull_request(msgspec.convert(payload, GitHubPullRequest))

    @property
    def is_bot(self) -> bool:
        """Return True when the author is an automation account."""
        return self.author_kind is AuthorKind.BOT

    def has_label(self, name: str) -> bool:
        """Return True when a label matches ``name`` case-insensitively."""
        wanted = name.strip().lower()
        return any(label.strip().lower() == wanted for label in self.labels)

    def to_dict(self) -> dict[str, typ.Any]:
        """Serialise the record for API responses."""
        return {
            "number": self.number,
            "title": self.title,
            "author": self.author,
            "author_kind": self.author_kind.value,
            "association": self.association.value if self.association else None,
            "repository": (
                f"{self.owner}/{self.repo}" if self.owner and self.repo else None
            ),
            "source_repo": self.source_repo,
            "target_repo": self.target_repo,
            "status": self.status,
            "html_url": self.html_url,
            "labels": list(self.labels),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "verdict": self.verdict.value if self.verdict else None,
        }


def _owning_repository(
    pull_request: GitHubPullRequest,
) -> tuple[str | None, str | None]:
    base_repo = pull_request.base.repo if pull_request.base else None
    parsed = parse_repo_url(pull_request.repository_url) or parse_repo_url(
        base_repo.html_url if base_repo else None
    )
    if parsed is not None:
        return parsed
    if base_repo is not None and base_repo.full_name:
        try:
            return parse_repo_slug(base_repo.full_name)
        except ValueError:
            return (None, None)
    return (None, None)


def _status(pull_request: GitHubPullRequest) -> str | None:
    if pull_request.merged or pull_request.merged_at is not None:
        return "merged"
    return pull_request.state.lower() if pull_request.state else None
