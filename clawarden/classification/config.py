"""Configuration for contribution classification.

Usage
-----
>>> import os
>>> os.environ["CLAWARDEN_ONE_CLA_PER_ORG"] = "false"
>>> ClassificationConfig.from_env().one_cla_per_org
False

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
from pathlib import Path

from .cache import DEFAULT_SNAPSHOT_INTERVAL

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _parse_bool(env_var: str, *, default: bool) -> bool:
    raw = os.environ.get(env_var, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    msg = f"{env_var} must be a boolean (true/false), got: {raw!r}"
    raise ValueError(msg)


def parse_csv_env(env_var: str) -> tuple[str, ...]:
    """Read a comma-separated env var into a tuple of trimmed, non-empty items."""
    raw = os.environ.get(env_var, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dc.dataclass(frozen=True, slots=True)
class ClassificationConfig:
    """Settings shared by the classifier, resolver and cache.

    Attributes
    ----------
    one_cla_per_org
        When True one verdict (and one signature) covers every repository
        of an organisation, so cache keys omit the repository. Flipping this
        leaves keys written under the other scheme unreachable.
    cache_path
        Snapshot file for the classification cache; ``None`` keeps the
        cache in memory only.
    snapshot_interval
        Minimum time between two cache snapshots.

    """

    one_cla_per_org: bool = True
    cache_path: Path | None = None
    snapshot_interval: dt.timedelta = DEFAULT_SNAPSHOT_INTERVAL

    @classmethod
    def from_env(cls) -> ClassificationConfig:
        """Create configuration from environment variables.

        Reads ``CLAWARDEN_ONE_CLA_PER_ORG``, ``CLAWARDEN_CACHE_PATH`` and
        ``CLAWARDEN_CACHE_SNAPSHOT_INTERVAL_S``.

        Raises
        ------
        ValueError
            If a boolean or numeric variable cannot be parsed.

        """
        one_cla_per_org = _parse_bool("CLAWARDEN_ONE_CLA_PER_ORG", default=True)

        cache_path: Path | None = None
        raw_path = os.environ.get("CLAWARDEN_CACHE_PATH", "").strip()
        if raw_path:
            cache_path = Path(raw_path)

        snapshot_interval = DEFAULT_SNAPSHOT_INTERVAL
        raw_interval = os.environ.get("CLAWARDEN_CACHE_SNAPSHOT_INTERVAL_S", "").strip()
        if raw_interval:
            try:
                seconds = float(raw_interval)
            except ValueError as exc:
                msg = (
                    "CLAWARDEN_CACHE_SNAPSHOT_INTERVAL_S must be a number, "
                    f"got: {raw_interval!r}"
                )
                raise ValueError(msg) from exc
            if seconds < 0:
                msg = (
                    "CLAWARDEN_CACHE_SNAPSHOT_INTERVAL_S must be >= 0, "
                    f"got: {seconds}"
                )
                raise ValueError(msg)
            snapshot_interval = dt.timedelta(seconds=seconds)

        return cls(
            one_cla_per_org=one_cla_per_org,
            cache_path=cache_path,
            snapshot_interval=snapshot_interval,
        )
