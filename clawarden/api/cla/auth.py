"""Credential check guarding the ledger download.

Usage
-----
>>> guard = LoginGuard(DownloadCredentials("admin", "s3cret"))
>>> guard.check("admin", "wrong")
False
>>> guard.check("admin", "s3cret")
True

"""

from __future__ import annotations

import dataclasses as dc
import hmac
import os
import threading
import typing as typ

from clawarden.logging import get_logger, log_error

logger = get_logger(__name__)

MAX_FAILED_ATTEMPTS: typ.Final = 3


@dc.dataclass(frozen=True, slots=True)
class DownloadCredentials:
    """Operator credentials for the ledger download."""

    username: str
    password: str = dc.field(repr=False)

    @classmethod
    def from_env(cls) -> DownloadCredentials | None:
        """Read ``CLAWARDEN_DOWNLOAD_USER`` and ``CLAWARDEN_DOWNLOAD_PASSWORD``.

        Returns ``None`` (download disabled) unless both are set.
        """
        username = os.environ.get("CLAWARDEN_DOWNLOAD_USER", "").strip()
        password = os.environ.get("CLAWARDEN_DOWNLOAD_PASSWORD", "")
        if not username or not password:
            return None
        return cls(username=username, password=password)


class LoginGuard:
    """Check download credentials, locking a username after repeated failures.

    A successful login resets the username's failure count. Once a username
    reaches ``max_attempts`` failures every later attempt is refused until
    the process restarts.
    """

    def __init__(
        self,
        credentials: DownloadCredentials,
        *,
        max_attempts: int = MAX_FAILED_ATTEMPTS,
    ) -> None:
        """Store the expected credentials and the lockout threshold."""
        self._credentials = credentials
        self._max_attempts = max_attempts
        self._failures: dict[str, int] = {}
        self._lock = threading.Lock()

    def is_locked(self, username: str) -> bool:
        """Return True when ``username`` has used up its attempts."""
        with self._lock:
            return self._failures.get(username, 0) >= self._max_attempts

    def check(self, username: str, password: str) -> bool:
        """Return True when the credentials match and the user is not locked."""
        with self._lock:
            if self._failures.get(username, 0) >= self._max_attempts:
                log_error(
                    logger, "Download locked for %s after failed attempts", username
                )
                return False
            valid = hmac.compare_digest(
                username.encode(), self._credentials.username.encode()
            ) & hmac.compare_digest(
                password.encode(), self._credentials.password.encode()
            )
            if valid:
                self._failures[username] = 0
                return True
            self._failures[username] = self._failures.get(username, 0) + 1
            return False
