"""Assemble application dependencies from environment configuration.

Usage
-----
Build dependencies for the API layer::

    from clawarden.api.factory import build_app_dependencies

    deps = build_app_dependencies(engine, session_factory)

"""

from __future__ import annotations

import os
import typing as typ

from clawarden.api.app import AppDependencies
from clawarden.api.cla.auth import DownloadCredentials, LoginGuard
from clawarden.api.middleware import ServiceLifecycle
from clawarden.cla import ClaConfig
from clawarden.classification import (
    ClassificationCache,
    ClassificationConfig,
    ContributionClassifier,
    PermissionResolver,
)
from clawarden.contributions import ContributionService
from clawarden.github import GitHubRestClient, GitHubRestConfig
from clawarden.ledger import SignatureLedger
from clawarden.reconciliation import ReconciliationEventLogger, Reconciler

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

__all__ = ["build_app_dependencies", "github_web_url"]


def github_web_url() -> str:
    """Return the web base URL matching the configured GitHub host."""
    hostname = os.environ.get("CLAWARDEN_GITHUB_ENTERPRISE_HOSTNAME", "").strip()
    return f"https://{hostname}" if hostname else "https://github.com"


def build_app_dependencies(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
) -> AppDependencies:
    """Build every collaborator the full application needs.

    Reads the ``CLAWARDEN_*`` configuration, creates the process-wide
    classification cache (loading its snapshot), the GitHub client and the
    services built on them.

    Raises
    ------
    GitHubConfigError
        If no GitHub token is configured.
    ValueError
        If a configuration variable cannot be parsed.

    """
    classification_config = ClassificationConfig.from_env()
    cla_config = ClaConfig.from_env()
    github_client = GitHubRestClient(GitHubRestConfig.from_env())

    cache = ClassificationCache(
        classification_config.cache_path,
        snapshot_interval=classification_config.snapshot_interval,
    )
    classifier = ContributionClassifier(
        cache,
        one_cla_per_org=classification_config.one_cla_per_org,
        resolver=PermissionResolver(github_client, cache),
    )

    credentials = DownloadCredentials.from_env()
    return AppDependencies(
        ledger=SignatureLedger(session_factory),
        reconciler=Reconciler(
            github_client,
            pending_label=cla_config.pending_label,
            event_logger=ReconciliationEventLogger(),
        ),
        contribution_service=ContributionService(
            github_client,
            classifier,
            excluded_authors=cla_config.excluded_authors,
        ),
        cache=cache,
        login_guard=LoginGuard(credentials) if credentials is not None else None,
        github_web_url=github_web_url(),
        middleware=(
            ServiceLifecycle(engine, github_client=github_client, cache=cache),
        ),
    )
