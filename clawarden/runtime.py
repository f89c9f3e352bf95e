"""Clawarden runtime entrypoint.

``create_app`` is the Granian factory target. When
``CLAWARDEN_DATABASE_URL`` is set the runtime builds the full dependency
graph (ledger, GitHub client, classification cache) so the app serves the
CLA and contribution endpoints; otherwise it starts in health-only mode.

Configuration is driven by environment variables:

- ``CLAWARDEN_HOST``: Bind address (default ``0.0.0.0``)
- ``CLAWARDEN_PORT``: Listen port (default ``8080``)
- ``CLAWARDEN_LOG_LEVEL``: Log level (default ``INFO``)
- ``CLAWARDEN_DATABASE_URL``: SQLAlchemy async database URL (optional)

Run the service directly with ``python -m clawarden.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from clawarden.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid CLAWARDEN_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from the environment.

    Returns
    -------
    falcon.asgi.App
        Full application when ``CLAWARDEN_DATABASE_URL`` is set, otherwise
        a health-only application.

    """
    from clawarden.api.app import create_app as _create_api_app

    database_url = os.environ.get("CLAWARDEN_DATABASE_URL")
    if database_url is None:
        log_warning(logger, "CLAWARDEN_DATABASE_URL not set; serving health only")
        return _create_api_app()

    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from clawarden.api.factory import build_app_dependencies

    engine = create_async_engine(database_url)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return _create_api_app(build_app_dependencies(engine, session_factory))


def main() -> None:
    """Start the Clawarden server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("CLAWARDEN_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("CLAWARDEN_PORT", "8080"))
    log_level_str = os.environ.get("CLAWARDEN_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid CLAWARDEN_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Clawarden on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "clawarden.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
