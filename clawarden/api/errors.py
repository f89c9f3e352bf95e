"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    from clawarden.api.errors import (
        InvalidInputError,
        handle_github_error,
        handle_invalid_input,
    )

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(GitHubAPIError, handle_github_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from clawarden.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from clawarden.github.errors import GitHubAPIError

__all__ = [
    "InvalidInputError",
    "handle_github_error",
    "handle_invalid_input",
]

logger = get_logger(__name__)


class InvalidInputError(Exception):
    """Raised for client validation errors that should map to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the validation failure.
    field
        Optional name of the input field that failed validation.

    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialize with a validation reason and optional field name."""
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field is not None else reason
        super().__init__(message)

    @classmethod
    def missing(cls, field: str) -> InvalidInputError:
        """Return an error for a required parameter that was not supplied."""
        return cls(f"the {field} parameter is required", field=field)


async def handle_invalid_input(
    _req: Request,
    resp: Response,
    ex: InvalidInputError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidInputError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {
        "title": "Invalid input",
        "description": ex.reason,
    }
    if ex.field is not None:
        media["field"] = ex.field
    resp.media = media


async def handle_github_error(
    req: Request,
    resp: Response,
    ex: GitHubAPIError,
    _params: dict[str, typ.Any],
) -> None:
    """Map GitHub failures to 404 (not found) or 502 (anything else).

    Rate limits are reported as 503 so callers know to retry later.
    """
    log_warning(logger, "GitHub request for %s failed: %s", req.path, ex)
    if ex.is_not_found:
        resp.status = falcon.HTTP_404
        title = "Not found on GitHub"
    elif ex.is_rate_limited:
        resp.status = falcon.HTTP_503
        title = "GitHub rate limit exceeded"
    else:
        resp.status = falcon.HTTP_502
        title = "GitHub request failed"
    resp.media = {"title": title, "description": ex.api_message or str(ex)}
