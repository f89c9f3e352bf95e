"""Run the heuristic rules and, when asked, the permission resolver."""

from __future__ import annotations

import typing as typ

from clawarden.logging import get_logger, log_debug

from .errors import IncompleteContributionError
from .models import Verdict
from .rules import DEFAULT_RULES, ClassificationRule, cache_key

if typ.TYPE_CHECKING:
    from .cache import ClassificationCache
    from .models import ContributionRecord
    from .resolver import PermissionResolver

logger = get_logger(__name__)


def classify(
    record: ContributionRecord,
    *,
    org_wide_scope: bool,
    cache: ClassificationCache | None = None,
    rules: typ.Sequence[ClassificationRule] = DEFAULT_RULES,
) -> Verdict:
    """Classify ``record`` with the first rule that reaches a verdict.

    Definitive verdicts from caching rules are written to ``cache`` (when
    the record names its author); a verdict read back from the cache is
    not rewritten. The verdict is also stored on ``record.verdict``.

    Parameters
    ----------
    record
        Contribution to classify. Bot authors should be filtered out first.
    org_wide_scope
        Whether cache keys cover the whole organisation rather than the
        record's repository.
    cache
        Verdict cache; ``None`` disables both reads and writes.
    rules
        Decision procedure, evaluated in order.

    Returns
    -------
    Verdict
        ``INTERNAL``, ``EXTERNAL`` or ``UNKNOWN``.

    """
    key = cache_key(
        record.author, record.owner, record.repo, org_wide_scope=org_wide_scope
    )

    def cached() -> Verdict | None:
        if cache is None:
            return None
        value = cache.get(*key)
        return None if value is None else Verdict.from_is_external(value)

    for rule in rules:
        verdict = rule.decide(record, cached)
        if verdict is None:
            continue
        if rule.cache_result and cache is not None and record.author:
            cache.set(verdict.to_is_external(), *key)
        log_debug(
            logger,
            "Rule %s classified %s#%s by %s as %s",
            rule.name,
            record.target_repo or record.repo,
            record.number,
            record.author,
            verdict,
        )
        record.verdict = verdict
        return verdict

    record.verdict = Verdict.UNKNOWN
    return Verdict.UNKNOWN


class ContributionClassifier:
    """Classification entry point bound to a cache and a scope policy.

    Parameters
    ----------
    cache
        Process-wide verdict cache, created at startup.
    one_cla_per_org
        Default scope policy when callers do not pass ``org_wide_scope``.
    resolver
        Optional permission resolver used by :meth:`determine`.

    """

    def __init__(
        self,
        cache: ClassificationCache | None,
        *,
        one_cla_per_org: bool = True,
        resolver: PermissionResolver | None = None,
    ) -> None:
        """Store collaborators; nothing is fetched eagerly."""
        self._cache = cache
        self._one_cla_per_org = one_cla_per_org
        self._resolver = resolver

    @property
    def one_cla_per_org(self) -> bool:
        """Return the default scope policy."""
        return self._one_cla_per_org

    def classify(
        self,
        record: ContributionRecord,
        *,
        org_wide_scope: bool | None = None,
    ) -> Verdict:
        """Classify with the heuristic rules only; never calls GitHub."""
        return classify(
            record,
            org_wide_scope=self._scope(org_wide_scope),
            cache=self._cache,
        )

    async def determine(
        self,
        record: ContributionRecord,
        *,
        org_wide_scope: bool | None = None,
    ) -> Verdict:
        """Classify, falling back to the permission resolver on ``UNKNOWN``.

        Without a resolver the heuristic verdict is returned as is.

        Raises
        ------
        PermissionResolutionError
            If the resolver cannot query GitHub.
        IncompleteContributionError
            If an unknown record lacks the author, owner or repository the
            resolver needs.

        """
        scope = self._scope(org_wide_scope)
        verdict = self.classify(record, org_wide_scope=scope)
        if verdict.is_definitive or self._resolver is None:
            return verdict

        for field in ("author", "owner", "repo"):
            if not getattr(record, field):
                raise IncompleteContributionError(field)
        is_external = await self._resolver.resolve_by_permission(
            typ.cast("str", record.author),
            typ.cast("str", record.owner),
            typ.cast("str", record.repo),
            org_wide_scope=scope,
        )
        record.verdict = Verdict.from_is_external(is_external)
        return record.verdict

    def _scope(self, org_wide_scope: bool | None) -> bool:  # noqa: FBT001
        return self._one_cla_per_org if org_wide_scope is None else org_wide_scope
