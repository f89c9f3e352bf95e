"""Configuration for CLA requests, messages and contribution listings.

Usage
-----
>>> import os
>>> os.environ["CLAWARDEN_BOT_USERS"] = "dependabot[bot], renovate[bot]"
>>> ClaConfig.from_env().bot_users
('dependabot[bot]', 'renovate[bot]')

"""

from __future__ import annotations

import dataclasses as dc
import os

from clawarden.classification.config import parse_csv_env
from clawarden.reconciliation import DEFAULT_PENDING_LABEL


@dc.dataclass(frozen=True, slots=True)
class ClaConfig:
    """Settings for the CLA workflow.

    Attributes
    ----------
    website_address
        Public base URL of the signing site; CLA links point at
        ``{website_address}/cla``.
    pending_label
        Label marking pull requests that wait on a signature.
    bot_users
        Logins excluded from contribution listings as automation.
    org_members
        Logins excluded from contribution listings as known insiders.

    """

    website_address: str = ""
    pending_label: str = DEFAULT_PENDING_LABEL
    bot_users: tuple[str, ...] = ()
    org_members: tuple[str, ...] = ()

    @property
    def excluded_authors(self) -> tuple[str, ...]:
        """Return bot users followed by organisation members."""
        return self.bot_users + self.org_members

    @classmethod
    def from_env(cls) -> ClaConfig:
        """Create configuration from environment variables.

        Reads ``CLAWARDEN_WEBSITE_ADDRESS``, ``CLAWARDEN_PENDING_LABEL``,
        ``CLAWARDEN_BOT_USERS`` and ``CLAWARDEN_ORG_MEMBERS`` (the last two
        comma-separated).

        Raises
        ------
        ValueError
            If the pending label is set but blank.

        """
        website = os.environ.get("CLAWARDEN_WEBSITE_ADDRESS", "").strip()
        label = os.environ.get("CLAWARDEN_PENDING_LABEL")
        if label is not None and not label.strip():
            msg = "CLAWARDEN_PENDING_LABEL must not be blank"
            raise ValueError(msg)
        return cls(
            website_address=website.rstrip("/"),
            pending_label=label.strip() if label else DEFAULT_PENDING_LABEL,
            bot_users=parse_csv_env("CLAWARDEN_BOT_USERS"),
            org_members=parse_csv_env("CLAWARDEN_ORG_MEMBERS"),
        )
