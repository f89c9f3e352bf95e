"""Clock helpers used for ledger timestamps and snapshot gating."""

from __future__ import annotations

import datetime as dt
import time


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp suitable for DB defaults."""
    return dt.datetime.now(dt.UTC)


def isoformat_utc(value: dt.datetime) -> str:
    """Render an aware timestamp in UTC using ``Z`` notation.

    >>> isoformat_utc(dt.datetime(2024, 7, 1, 12, 0, tzinfo=dt.UTC))
    '2024-07-01T12:00:00Z'

    """
    if value.tzinfo is None:
        msg = "timestamp must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC).isoformat().replace("+00:00", "Z")


def monotonic() -> float:
    """Return a monotonic clock reading in seconds."""
    return time.monotonic()
