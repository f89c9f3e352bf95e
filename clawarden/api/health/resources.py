"""Health probe resources for liveness and readiness checks.

The liveness probe is stateless. The readiness probe reports whether the
signature ledger is wired in, so a process started without a database
shows up as degraded rather than silently rejecting submissions.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Parameters
    ----------
    ledger_configured
        Whether signature submission is available. Without it the probe
        still answers 200 but reports ``"mode": "health-only"``.

    """

    def __init__(self, *, ledger_configured: bool = False) -> None:
        """Record which endpoints the application serves."""
        self._ledger_configured = ledger_configured

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {
            "status": "ready",
            "mode": "full" if self._ledger_configured else "health-only",
        }
        resp.status = HTTPStatus.OK
