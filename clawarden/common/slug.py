"""Repository slug and URL helpers.

Repository slugs are GitHub identifiers in ``owner/name`` format. GitHub
payloads also identify repositories by URL (``repository_url`` on search
results, ``html_url`` on webhook repositories) and CLA links carry their
context as query parameters, so the parsers for those live here too.
"""

from __future__ import annotations

import urllib.parse


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("acme", "widgets")
    'acme/widgets'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Parse a repository slug into owner and name.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("acme/widgets")
    ('acme', 'widgets')

    """
    if slug.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = slug.split("/")
    if not owner or not name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def parse_repo_url(url: str | None) -> tuple[str, str] | None:
    """Extract ``(owner, name)`` from a repository URL.

    The last two path segments are used, so HTML URLs, API URLs and URLs
    with a ``.git`` suffix all resolve. Returns ``None`` for values that are
    not absolute URLs or carry fewer than two path segments.

    Examples
    --------
    >>> parse_repo_url("https://api.github.com/repos/acme/widgets")
    ('acme', 'widgets')
    >>> parse_repo_url("https://github.com/acme/widgets.git")
    ('acme', 'widgets')
    >>> parse_repo_url("git@github.com:acme/widgets.git") is None
    True

    """
    if not url:
        return None
    parsed = urllib.parse.urlsplit(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    path = parsed.path.removesuffix(".git")
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:  # noqa: PLR2004 - owner and name
        return None
    return segments[-2], segments[-1]


def parse_url_query_params(url: str | None) -> dict[str, str]:
    """Return the query parameters of ``url`` as a flat mapping.

    Repeated parameters keep their last value. Unparseable or empty input
    yields an empty mapping.

    Examples
    --------
    >>> parse_url_query_params("https://cla.test/cla?org=acme&username=octo")
    {'org': 'acme', 'username': 'octo'}

    """
    if not url:
        return {}
    try:
        parsed = urllib.parse.urlsplit(url)
    except ValueError:
        return {}
    if not parsed.scheme or not parsed.netloc:
        return {}
    return dict(urllib.parse.parse_qsl(parsed.query, keep_blank_values=True))


def parse_form_body(body: str | None) -> dict[str, str]:
    """Decode an ``application/x-www-form-urlencoded`` body.

    Keys without a value map to an empty string.

    >>> parse_form_body("terms=on&username=octo&empty")
    {'terms': 'on', 'username': 'octo', 'empty': ''}

    """
    if not body:
        return {}
    return dict(urllib.parse.parse_qsl(body, keep_blank_values=True))
