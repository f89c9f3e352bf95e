"""Inputs and results of a reconciliation run."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from clawarden.common.slug import parse_url_query_params

if typ.TYPE_CHECKING:
    from clawarden.ledger import SignatureEntry


@dc.dataclass(frozen=True, slots=True)
class SignatureContext:
    """Who signed and where the signing flow started.

    The signing link carries ``org``, ``repo``, ``prNumber`` and
    ``username`` query parameters, so the referrer alone is usually enough
    to know which organisation to reconcile.
    """

    username: str | None = None
    referrer: str | None = None

    @classmethod
    def from_entry(cls, entry: SignatureEntry) -> SignatureContext:
        """Build a context from a ledger entry."""
        return cls(username=entry.username, referrer=entry.referrer)

    @property
    def referrer_params(self) -> dict[str, str]:
        """Return the referrer's query parameters."""
        return parse_url_query_params(self.referrer)

    @property
    def identity(self) -> str | None:
        """Return the explicit username, else the referrer's ``username``."""
        return self.username or self.referrer_params.get("username") or None

    @property
    def org(self) -> str | None:
        """Return the organisation named by the referrer's ``org`` parameter."""
        return self.referrer_params.get("org") or None


@dc.dataclass(slots=True)
class ReconciliationOutcome:
    """Counters for one reconciliation run.

    Attributes
    ----------
    attempted
        Candidates carrying the pending label for which removal was tried.
    removed
        Labels removed successfully.
    skipped
        Candidates without the label, or whose label was already gone.
    failures
        Removals that failed for any other reason.

    """

    org: str | None = None
    identity: str | None = None
    attempted: int = 0
    removed: int = 0
    skipped: int = 0
    failures: int = 0

    @property
    def performed(self) -> bool:
        """Return True when the run had enough context to search."""
        return self.org is not None and self.identity is not None
