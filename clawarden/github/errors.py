"""GitHub REST client errors."""

from __future__ import annotations

from http import HTTPStatus


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        api_message: str | None = None,
    ) -> None:
        """Initialise with a message, HTTP status code and GitHub's own message."""
        self.status_code = status_code
        self.api_message = api_message
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, *, method: str, path: str, api_message: str | None
    ) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        detail = f": {api_message}" if api_message else ""
        return cls(
            f"GitHub {method} {path} returned HTTP {status_code}{detail}",
            status_code=status_code,
            api_message=api_message,
        )

    @property
    def is_not_found(self) -> bool:
        """Return True for HTTP 404 responses."""
        return self.status_code == HTTPStatus.NOT_FOUND

    @property
    def is_forbidden(self) -> bool:
        """Return True for HTTP 403 responses."""
        return self.status_code == HTTPStatus.FORBIDDEN

    @property
    def is_rate_limited(self) -> bool:
        """Return True when GitHub reports an exhausted rate limit.

        GitHub signals primary and secondary rate limits with 403 or 429 and
        a message mentioning the rate limit, so both are inspected.
        """
        if self.status_code not in {HTTPStatus.FORBIDDEN, HTTPStatus.TOO_MANY_REQUESTS}:
            return False
        text = f"{self.api_message or ''} {self}".lower()
        return "rate limit" in text


class GitHubResponseShapeError(RuntimeError):
    """Raised when GitHub responses are missing expected fields."""

    @classmethod
    def invalid(cls, what: str, detail: object) -> GitHubResponseShapeError:
        """Return an error for a response that failed to decode."""
        return cls(f"GitHub {what} response has an unexpected shape: {detail}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("CLAWARDEN_GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
