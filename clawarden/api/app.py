"""Application factory for the Clawarden Falcon ASGI application.

``create_app()`` always registers the health probes. Signature submission
is registered when a ledger and reconciler are supplied, the contribution
endpoints when a contribution service and cache are supplied, and the
ledger download when a login guard is configured as well.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app::

    from clawarden.api.factory import build_app_dependencies

    app = create_app(build_app_dependencies(engine, session_factory))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from clawarden.api.errors import (
    InvalidInputError,
    handle_github_error,
    handle_invalid_input,
)
from clawarden.api.health.resources import HealthResource, ReadyResource
from clawarden.github.errors import GitHubAPIError

if typ.TYPE_CHECKING:
    from clawarden.api.cla.auth import LoginGuard
    from clawarden.classification import ClassificationCache
    from clawarden.contributions import ContributionService
    from clawarden.ledger import SignatureLedger
    from clawarden.reconciliation import Reconciler

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    ledger
        Signature ledger for ``POST /cla`` and ``POST /download``.
    reconciler
        Reconciler run after each signature.
    contribution_service
        Service behind ``GET /contributions`` and ``GET /contributions/pr``.
    cache
        Classification cache cleared by ``POST /contributions/reset``.
    login_guard
        Credential check for the ledger download; ``None`` disables it.
    github_web_url
        Base URL for links back to pull requests.
    middleware
        Extra Falcon middleware, such as the lifespan handler.

    """

    ledger: SignatureLedger | None = None
    reconciler: Reconciler | None = None
    contribution_service: ContributionService | None = None
    cache: ClassificationCache | None = None
    login_guard: LoginGuard | None = None
    github_web_url: str = "https://github.com"
    middleware: tuple[object, ...] = ()


def _register_signature_routes(app: falcon.asgi.App, deps: AppDependencies) -> None:
    if deps.ledger is None or deps.reconciler is None:
        return
    from clawarden.api.cla.resources import (
        DownloadResource,
        SignatureResource,
        SignatureResourceDependencies,
    )

    app.add_route(
        "/cla",
        SignatureResource(
            SignatureResourceDependencies(
                ledger=deps.ledger,
                reconciler=deps.reconciler,
                github_web_url=deps.github_web_url,
            )
        ),
    )
    if deps.login_guard is not None:
        app.add_route("/download", DownloadResource(deps.ledger, deps.login_guard))


def _register_contribution_routes(
    app: falcon.asgi.App, deps: AppDependencies
) -> None:
    from clawarden.api.contributions.resources import (
        CacheResetResource,
        ContributionDetailResource,
        ContributionListResource,
    )

    if deps.contribution_service is not None:
        app.add_route(
            "/contributions", ContributionListResource(deps.contribution_service)
        )
        app.add_route(
            "/contributions/pr", ContributionDetailResource(deps.contribution_service)
        )
    if deps.cache is not None:
        app.add_route("/contributions/reset", CacheResetResource(deps.cache))


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only ``/health``
        and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    app = falcon.asgi.App(middleware=list(deps.middleware))  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(ledger_configured=deps.ledger is not None))

    _register_signature_routes(app, deps)
    _register_contribution_routes(app, deps)

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(GitHubAPIError, handle_github_error)

    return app
