"""Resources for signing the CLA and downloading the signature ledger.

``POST /cla`` records a signature and then clears the pending label from
the signer's open pull requests. The signature is the source of truth:
once it is stored the request succeeds, even when the label cleanup
fails and reviewers have to step in by hand.

Usage
-----
Register the resources on the Falcon app::

    app.add_route("/cla", SignatureResource(dependencies))
    app.add_route("/download", DownloadResource(ledger, guard))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
import urllib.parse

import falcon

from clawarden.api.errors import InvalidInputError
from clawarden.cla.sanitize import sanitize_input
from clawarden.common.slug import parse_form_body, parse_url_query_params
from clawarden.ledger import TERMS_ACCEPTED, SignatureEntry
from clawarden.logging import get_logger, log_warning
from clawarden.reconciliation import ReconciliationError, SignatureContext

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from clawarden.api.cla.auth import LoginGuard
    from clawarden.ledger import SignatureLedger
    from clawarden.reconciliation import Reconciler

__all__ = [
    "DownloadResource",
    "SignatureResource",
    "SignatureResourceDependencies",
]

logger = get_logger(__name__)

DEFAULT_GITHUB_WEB_URL: typ.Final = "https://github.com"

_SUBMISSION_FIELDS: typ.Final = ("terms", "username", "name", "email", "referrer")

MANUAL_FOLLOW_UP: typ.Final = (
    "CLA signed, but the pending CLA label could not be removed from your "
    "pull requests automatically. Please check that your GitHub username "
    "is correct and ask the pull request reviewers to verify your CLA "
    "submission manually."
)
SIGNED: typ.Final = (
    "CLA signed. Only one CLA submission is required, irrespective of the "
    "number of pull requests you raised."
)


@dc.dataclass(frozen=True, slots=True)
class SignatureResourceDependencies:
    """Collaborators for ``SignatureResource``.

    Attributes
    ----------
    ledger
        Ledger receiving each accepted submission.
    reconciler
        Reconciler clearing pending labels after a signature.
    github_web_url
        Base URL used to build the link back to the originating pull request.

    """

    ledger: SignatureLedger
    reconciler: Reconciler
    github_web_url: str = DEFAULT_GITHUB_WEB_URL


async def _read_submission(req: Request) -> dict[str, str]:
    """Return the submitted fields from a form or JSON body."""
    if req.content_type and req.content_type.startswith(falcon.MEDIA_JSON):
        media = await req.get_media(default_when_empty={})
        if not isinstance(media, dict):
            msg = "expected a JSON object"
            raise InvalidInputError(msg)
        fields: dict[str, str] = {}
        for key in _SUBMISSION_FIELDS:
            value = media.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                msg = "must be a string"
                raise InvalidInputError(msg, field=key)
            fields[key] = value
        return fields

    raw = await req.stream.read()
    try:
        body = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = "form body must be UTF-8"
        raise InvalidInputError(msg) from exc
    return parse_form_body(body)


def _client_ip(req: Request) -> str | None:
    forwarded = req.get_header("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return req.remote_addr


def _pull_request_link(base_url: str, referrer: str | None) -> str | None:
    """Return the pull request the signing flow started from, if known."""
    params = parse_url_query_params(referrer)
    org, repo, number = params.get("org"), params.get("repo"), params.get("prNumber")
    if not (org and repo and number):
        return None
    path = "/".join(urllib.parse.quote(part, safe="") for part in (org, repo))
    return f"{base_url.rstrip('/')}/{path}/pull/{urllib.parse.quote(number, safe='')}"


class SignatureResource:
    """``POST /cla``: accept a CLA signature."""

    def __init__(self, dependencies: SignatureResourceDependencies) -> None:
        """Configure the resource with its collaborators."""
        self._ledger = dependencies.ledger
        self._reconciler = dependencies.reconciler
        self._github_web_url = dependencies.github_web_url

    async def on_post(self, req: Request, resp: Response) -> None:
        """Record the signature, then reconcile the signer's pull requests.

        Responds 201 once the signature is stored. ``reconciled`` reports
        whether every pending label was cleared.
        """
        fields = await _read_submission(req)
        referrer = fields.get("referrer") or req.get_header("Referer") or None
        username = sanitize_input(fields.get("username", "").strip())
        terms = fields.get("terms")
        if terms != TERMS_ACCEPTED:
            msg = "the CLA terms must be accepted"
            raise InvalidInputError(msg, field="terms")
        if not username:
            raise InvalidInputError.missing("username")

        entry = SignatureEntry(
            terms=terms,
            username=username,
            name=sanitize_input(fields.get("name")),
            email=sanitize_input(fields.get("email")),
            ip=_client_ip(req),
            referrer=referrer,
        )
        record = await self._ledger.append(entry)

        reconciled = True
        try:
            await self._reconciler.reconcile_after_signature(
                SignatureContext.from_entry(entry)
            )
        except ReconciliationError as exc:
            log_warning(
                logger, "Signature by %s stored but not reconciled: %s", username, exc
            )
            reconciled = False

        resp.status = falcon.HTTP_201
        resp.media = {
            "username": record.username,
            "email": record.email,
            "signed_at": record.signed_at.isoformat(),
            "reconciled": reconciled,
            "pull_request_url": _pull_request_link(self._github_web_url, referrer),
            "message": SIGNED if reconciled else MANUAL_FOLLOW_UP,
        }


class DownloadResource:
    """``POST /download``: export the ledger for operators.

    The form carries ``username``, ``password`` and an optional ``format``
    (``json``; CSV otherwise). Bad or locked credentials get a 404 so the
    endpoint does not reveal itself.
    """

    def __init__(self, ledger: SignatureLedger, guard: LoginGuard) -> None:
        """Store the ledger and the credential guard."""
        self._ledger = ledger
        self._guard = guard

    async def on_post(self, req: Request, resp: Response) -> None:
        """Return the ledger as a CSV or JSON attachment."""
        raw = await req.stream.read()
        form = parse_form_body(raw.decode("utf-8", errors="replace"))
        username = form.get("username", "")
        password = form.get("password", "")
        if not username or not password or not self._guard.check(username, password):
            raise falcon.HTTPNotFound(title="Not Authorized")

        if form.get("format") == "json":
            resp.content_type = falcon.MEDIA_JSON
            resp.downloadable_as = "data.json"
            resp.data = await self._ledger.export_json()
        else:
            resp.content_type = "text/csv"
            resp.downloadable_as = "data.csv"
            resp.text = await self._ledger.export_csv()
        resp.status = falcon.HTTP_200
