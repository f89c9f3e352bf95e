"""Ordered heuristic rules deciding whether a contribution is external.

Each rule is a pure predicate over a :class:`ContributionRecord` that either
returns a verdict or ``None`` to let the next rule decide. The order is
fixed policy:

1. an internal ``author_association`` (owner, member, collaborator) wins;
   any other association is not proof of anything and falls through;
2. a head repository that differs from the base repository means a fork,
   hence external;
3. identical, present head and base repositories mean a branch pushed
   directly to the target, hence internal;
4. with neither repository known, a previously cached verdict is reused;
5. otherwise the answer is unknown.

Bot authors are filtered out by callers before classification.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from .models import INTERNAL_ASSOCIATIONS, Verdict

if typ.TYPE_CHECKING:
    from .cache import KeyPart
    from .models import ContributionRecord

CONTRIBUTION_TAG: typ.Final = "contribution"
EXTERNAL_TAG: typ.Final = "external"

CachedVerdict = typ.Callable[[], Verdict | None]


def cache_key(
    identity: str | None,
    owner: str | None,
    repo: str | None,
    *,
    org_wide_scope: bool,
) -> tuple[KeyPart, ...]:
    """Return the cache key for an author's standing in a repository.

    With ``org_wide_scope`` the repository component is left empty, which
    is a different key from any per-repository one.
    """
    return (
        identity,
        CONTRIBUTION_TAG,
        EXTERNAL_TAG,
        owner,
        None if org_wide_scope else repo,
    )


@dataclasses.dataclass(frozen=True, slots=True)
class ClassificationRule:
    """One step of the decision procedure.

    Attributes
    ----------
    name
        Identifier used in logs and tests.
    decide
        Predicate returning a verdict or ``None`` to fall through. The
        second argument reads the cached verdict for the record's key.
    cache_result
        Whether a verdict from this rule is written to the cache.

    """

    name: str
    decide: typ.Callable[[ContributionRecord, CachedVerdict], Verdict | None]
    cache_result: bool = True


def by_internal_association(
    record: ContributionRecord, _cached: CachedVerdict
) -> Verdict | None:
    """Owners, members and collaborators are internal."""
    if record.association in INTERNAL_ASSOCIATIONS:
        return Verdict.INTERNAL
    return None


def by_fork(record: ContributionRecord, _cached: CachedVerdict) -> Verdict | None:
    """A head repository other than the base repository is a fork."""
    if record.source_repo != record.target_repo:
        return Verdict.EXTERNAL
    return None


def by_same_repository(
    record: ContributionRecord, _cached: CachedVerdict
) -> Verdict | None:
    """A branch in the target repository itself is internal."""
    if record.source_repo and record.target_repo:
        return Verdict.INTERNAL
    return None


def by_cached_verdict(
    record: ContributionRecord, cached: CachedVerdict
) -> Verdict | None:
    """Reuse an earlier verdict when the repositories cannot be compared."""
    if record.source_repo or record.target_repo:
        return None
    return cached()


DEFAULT_RULES: typ.Final[tuple[ClassificationRule, ...]] = (
    ClassificationRule("internal-association", by_internal_association),
    ClassificationRule("fork", by_fork),
    ClassificationRule("same-repository", by_same_repository),
    ClassificationRule("cached-verdict", by_cached_verdict, cache_result=False),
)
