"""Resources exposing external contributions and the classification cache.

Usage
-----
Register the resources on the Falcon app::

    app.add_route("/contributions", ContributionListResource(service))
    app.add_route("/contributions/pr", ContributionDetailResource(service))
    app.add_route("/contributions/reset", CacheResetResource(cache))

"""

from __future__ import annotations

import typing as typ

import falcon

from clawarden.api.errors import InvalidInputError
from clawarden.contributions import InvalidSearchOptionError, SearchOptions
from clawarden.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from clawarden.classification import ClassificationCache
    from clawarden.contributions import ContributionService

__all__ = [
    "CacheResetResource",
    "ContributionDetailResource",
    "ContributionListResource",
]

logger = get_logger(__name__)

# ``status`` values that do not add an ``is:`` qualifier.
_ANY_STATUS: typ.Final = frozenset({"all", "any"})


def _required(req: Request, name: str) -> str:
    value = req.get_param(name)
    if not value:
        raise InvalidInputError.missing(name)
    return value


def _merged_param(req: Request) -> bool | None:
    raw = req.get_param("merged")
    if raw is None or raw == "":
        return None
    lowered = raw.lower()
    if lowered in {"true", "1", "yes"}:
        return True
    if lowered in {"false", "0", "no"}:
        return False
    msg = "must be true or false"
    raise InvalidInputError(msg, field="merged")


def _int_param(req: Request, name: str, *, default: int | None = None) -> int:
    raw = req.get_param(name)
    if raw is None or raw == "":
        if default is None:
            raise InvalidInputError.missing(name)
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = "must be an integer"
        raise InvalidInputError(msg, field=name) from exc


class ContributionListResource:
    """``GET /contributions``: one page of external pull requests.

    Query parameters: ``org`` (required), ``repo``, ``status`` (``open`` by
    default; ``all`` for any state), ``after`` and ``before``
    (``YYYY-MM-DD``), ``merged`` (``true``/``false``) and ``page``.
    """

    def __init__(self, service: ContributionService) -> None:
        """Store the contribution service."""
        self._service = service

    async def on_get(self, req: Request, resp: Response) -> None:
        """List external pull requests with their verdicts."""
        org = _required(req, "org")
        repo = req.get_param("repo") or None
        status = (req.get_param("status") or "open").lower()
        try:
            options = SearchOptions(
                status=None if status in _ANY_STATUS else status,
                after=req.get_param("after") or None,
                before=req.get_param("before") or None,
                merged=_merged_param(req),
                page=_int_param(req, "page", default=1),
            )
        except InvalidSearchOptionError as exc:
            raise InvalidInputError(str(exc), field=exc.option) from exc

        if options.status == "open":
            records = await self._service.list_open_external_pull_requests(
                org, repo, options
            )
        else:
            records = await self._service.list_external_pull_requests(
                org, repo, options
            )

        resp.media = {
            "org": org,
            "repo": repo,
            "page": options.page,
            "count": len(records),
            "pull_requests": [record.to_dict() for record in records],
        }
        resp.status = falcon.HTTP_200


class ContributionDetailResource:
    """``GET /contributions/pr``: one pull request with a heuristic verdict."""

    def __init__(self, service: ContributionService) -> None:
        """Store the contribution service."""
        self._service = service

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return the pull request named by ``org``, ``repo`` and ``number``."""
        org = _required(req, "org")
        repo = _required(req, "repo")
        number = _int_param(req, "number")
        if number < 1:
            msg = "must be a positive integer"
            raise InvalidInputError(msg, field="number")
        record = await self._service.get_pull_request_detail(org, repo, number)
        resp.media = record.to_dict()
        resp.status = falcon.HTTP_200


class CacheResetResource:
    """``POST /contributions/reset``: forget every cached verdict."""

    def __init__(self, cache: ClassificationCache) -> None:
        """Store the process-wide cache."""
        self._cache = cache

    async def on_post(self, _req: Request, resp: Response) -> None:
        """Clear the in-memory cache and report how many entries went."""
        cleared = len(self._cache)
        self._cache.clear()
        log_info(logger, "Classification cache reset via API (%d entries)", cleared)
        resp.media = {"status": "cleared", "entries_cleared": cleared}
        resp.status = falcon.HTTP_200
