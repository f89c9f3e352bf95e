"""Append-only access to the signature ledger."""

from __future__ import annotations

import csv
import dataclasses as dc
import datetime as dt
import io
import typing as typ

import msgspec
from sqlalchemy import select

from clawarden.common.time import utcnow
from clawarden.ledger.errors import LedgerQueryError, TimezoneAwareRequiredError
from clawarden.ledger.storage import LEDGER_COLUMNS, SignatureRecord
from clawarden.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)

TERMS_ACCEPTED: typ.Final = "on"

_FILTERABLE: typ.Final = frozenset(LEDGER_COLUMNS)


@dc.dataclass(frozen=True, slots=True)
class SignatureEntry:
    """A CLA submission as accepted from the signing form."""

    terms: str
    username: str
    name: str | None = None
    email: str | None = None
    ip: str | None = None
    referrer: str | None = None
    signed_at: dt.datetime | None = None

    @property
    def terms_accepted(self) -> bool:
        """Return True when the terms checkbox was ticked."""
        return self.terms == TERMS_ACCEPTED


class SignatureLedger:
    """Record and look up signed agreements.

    The ledger only ever inserts. Lookups filter by exact equality on
    ledger columns, mirroring how the CLA policy asks "has this user
    accepted the terms".
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Store the session factory used for every ledger operation."""
        self._session_factory = session_factory

    async def append(self, entry: SignatureEntry) -> SignatureRecord:
        """Persist ``entry`` and return the stored row.

        ``signed_at`` defaults to the server's current time; an explicit
        value must be timezone aware.
        """
        signed_at = entry.signed_at or utcnow()
        if signed_at.tzinfo is None:
            raise TimezoneAwareRequiredError.for_signed_at()

        async with self._session_factory() as session:
            record = SignatureRecord(
                terms=entry.terms,
                username=entry.username,
                name=entry.name,
                email=entry.email,
                ip=entry.ip,
                referrer=entry.referrer,
                signed_at=signed_at,
            )
            session.add(record)
            await session.commit()
            await session.refresh(record)

        log_info(logger, "Recorded CLA signature for %s", entry.username)
        return record

    async def query(self, **filters: str | None) -> list[SignatureRecord]:
        """Return rows whose columns equal every given filter, oldest first.

        Raises
        ------
        LedgerQueryError
            If a filter names a column the ledger does not have.

        """
        unknown = set(filters) - _FILTERABLE
        if unknown:
            raise LedgerQueryError(unknown)

        stmt = select(SignatureRecord).order_by(SignatureRecord.id)
        for column, value in filters.items():
            stmt = stmt.where(getattr(SignatureRecord, column) == value)

        async with self._session_factory() as session:
            return list((await session.scalars(stmt)).all())

    async def has_signed(self, username: str) -> bool:
        """Return True when ``username`` has accepted the terms at least once."""
        rows = await self.query(username=username, terms=TERMS_ACCEPTED)
        return bool(rows)

    async def export_json(self) -> bytes:
        """Return every row as an indented JSON array."""
        rows = [record.to_dict() for record in await self.query()]
        return msgspec.json.format(msgspec.json.encode(rows), indent=2)

    async def export_csv(self) -> str:
        """Return every row as CSV, or an empty string when there are none.

        The header row is bare; every value is quoted with embedded quotes
        doubled. Missing values render as empty fields.
        """
        records = await self.query()
        if not records:
            return ""
        buffer = io.StringIO()
        buffer.write(",".join(LEDGER_COLUMNS) + "\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for record in records:
            row = record.to_dict()
            writer.writerow(
                [
                    "" if row[column] is None else row[column]
                    for column in LEDGER_COLUMNS
                ]
            )
        return buffer.getvalue().removesuffix("\n")
