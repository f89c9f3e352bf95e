"""Lifespan middleware for the Falcon ASGI application.

Creates the ledger table on startup and releases the process-wide
resources on shutdown: the GitHub HTTP client, pending cache snapshot
writes and the database engine.

Usage
-----
Register the middleware when creating the Falcon app::

    lifecycle = ServiceLifecycle(engine, github_client=client, cache=cache)
    app = falcon.asgi.App(middleware=[lifecycle])

"""

from __future__ import annotations

import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from clawarden.ledger import init_ledger_storage
from clawarden.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from clawarden.classification import ClassificationCache
    from clawarden.github import GitHubRestClient

__all__ = ["ServiceLifecycle"]

logger = get_logger(__name__)


class ServiceLifecycle:
    """Falcon middleware handling ASGI lifespan events.

    Parameters
    ----------
    engine
        Database engine backing the signature ledger.
    github_client
        GitHub client to close on shutdown.
    cache
        Classification cache whose snapshot writes are awaited on shutdown.

    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        github_client: GitHubRestClient | None = None,
        cache: ClassificationCache | None = None,
    ) -> None:
        """Store the resources managed across the process lifetime."""
        self._engine = engine
        self._github_client = github_client
        self._cache = cache

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Create the ledger table if it does not exist yet."""
        try:
            await init_ledger_storage(self._engine)
        except SQLAlchemyError:
            log_error(logger, "Ledger storage initialisation failed", exc_info=True)
            raise
        log_info(logger, "Ledger storage ready")

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Close the GitHub client, flush the cache and dispose the engine."""
        if self._github_client is not None:
            await self._github_client.aclose()
        if self._cache is not None:
            await self._cache.aflush()
        await self._engine.dispose()
        log_info(logger, "Runtime resources released")
