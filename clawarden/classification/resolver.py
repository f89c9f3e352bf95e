"""Deterministic classification from GitHub collaborator permissions."""

from __future__ import annotations

import typing as typ

import httpx

from clawarden.github.errors import GitHubAPIError, GitHubResponseShapeError
from clawarden.logging import get_logger, log_info, log_warning

from .errors import PermissionResolutionError
from .rules import cache_key

if typ.TYPE_CHECKING:
    from clawarden.github.client import CollaboratorPermissionClient
    from clawarden.github.models import CollaboratorPermission

    from .cache import ClassificationCache

logger = get_logger(__name__)

WRITE_PERMISSIONS: typ.Final = frozenset({"admin", "write"})
WRITE_ROLES: typ.Final = frozenset({"admin", "maintain", "write"})


def has_write_access(permission: CollaboratorPermission) -> bool:
    """Return True when the permission or role grants write access."""
    level = (permission.permission or "").lower()
    role = (permission.role_name or "").lower()
    return level in WRITE_PERMISSIONS or role in WRITE_ROLES


class PermissionResolver:
    """Resolve an author's standing by asking GitHub for their permission.

    Only used when the heuristic rules answer ``unknown``: each call costs
    one API request. Successful answers are cached under the same key the
    classifier uses, so later lookups skip both the rules and the request.
    """

    def __init__(
        self,
        client: CollaboratorPermissionClient,
        cache: ClassificationCache | None = None,
    ) -> None:
        """Bind the resolver to a GitHub client and an optional cache."""
        self._client = client
        self._cache = cache

    async def resolve_by_permission(
        self,
        identity: str,
        owner: str,
        repo: str,
        *,
        org_wide_scope: bool,
    ) -> bool:
        """Return True when ``identity`` is external to ``owner/repo``.

        Raises
        ------
        PermissionResolutionError
            If GitHub cannot answer. The error always propagates; a guessed
            answer would misreport CLA obligations.

        """
        key = cache_key(identity, owner, repo, org_wide_scope=org_wide_scope)
        if self._cache is not None:
            cached = self._cache.get(*key)
            if cached is not None:
                return cached

        try:
            permission = await self._client.get_collaborator_permission(
                owner, repo, identity
            )
        except (GitHubAPIError, GitHubResponseShapeError, httpx.HTTPError) as exc:
            log_warning(
                logger,
                "Failed to check if %s is allowed to write to %s/%s: %s",
                identity,
                owner,
                repo,
                exc,
            )
            raise PermissionResolutionError(identity, owner, repo, str(exc)) from exc

        is_external = not has_write_access(permission)
        log_info(
            logger,
            "Resolved %s on %s/%s via permission=%s role=%s: external=%s",
            identity,
            owner,
            repo,
            permission.permission,
            permission.role_name,
            is_external,
        )
        if self._cache is not None:
            self._cache.set(is_external, *key)
        return is_external
