"""Persistence model for signed agreements."""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.ext.asyncio import AsyncEngine

from clawarden.common.time import utcnow
from clawarden.ledger.errors import TimezoneAwareRequiredError

# Exported columns in download order.
LEDGER_COLUMNS: typ.Final[tuple[str, ...]] = (
    "terms",
    "username",
    "name",
    "email",
    "ip",
    "referrer",
    "signed_at",
)


class Base(DeclarativeBase):
    """Base declarative class for ledger models."""


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime wrapper that round-trips UTC tzinfo even on SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Reject naive values and normalise the rest to UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            raise TimezoneAwareRequiredError.for_signed_at()
        return value.astimezone(dt.UTC)

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Return aware UTC datetimes whatever the backend stored."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class SignatureRecord(Base):
    """One CLA submission. Rows are inserted once and never updated."""

    __tablename__ = "cla_signatures"
    __table_args__ = (Index("ix_cla_signatures_username_terms", "username", "terms"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    terms: Mapped[str] = mapped_column(String(16))
    username: Mapped[str] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255), default=None)
    email: Mapped[str | None] = mapped_column(String(320), default=None)
    ip: Mapped[str | None] = mapped_column(String(255), default=None)
    referrer: Mapped[str | None] = mapped_column(Text(), default=None)
    signed_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def to_dict(self) -> dict[str, str | None]:
        """Return the exported columns with the timestamp in ISO format."""
        return {
            "terms": self.terms,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "ip": self.ip,
            "referrer": self.referrer,
            "signed_at": self.signed_at.isoformat() if self.signed_at else None,
        }


async def init_ledger_storage(engine: AsyncEngine) -> None:
    """Create the ledger table if it is absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
