"""Errors raised by the signature ledger."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class LedgerError(Exception):
    """Base class for signature ledger errors."""


class LedgerQueryError(LedgerError, ValueError):
    """Raised when a ledger query names columns the ledger does not have."""

    def __init__(self, unknown: cabc.Iterable[str]) -> None:
        """Record the unsupported filter names in sorted order."""
        self.unknown = tuple(sorted(unknown))
        super().__init__(f"unknown ledger filter(s): {', '.join(self.unknown)}")


class TimezoneAwareRequiredError(LedgerError, ValueError):
    """Raised when a naive datetime would be written to the ledger."""

    def __init__(self, column: str) -> None:
        """Name the column that received the naive value."""
        self.column = column
        super().__init__(f"{column} must be timezone aware")

    @classmethod
    def for_signed_at(cls) -> TimezoneAwareRequiredError:
        """Return an error for a naive signature timestamp."""
        return cls("signed_at")
