"""Signature ledger: durable record of accepted contributor agreements."""

from __future__ import annotations

from .errors import LedgerError, LedgerQueryError, TimezoneAwareRequiredError
from .service import TERMS_ACCEPTED, SignatureEntry, SignatureLedger
from .storage import SignatureRecord, init_ledger_storage

__all__ = [
    "TERMS_ACCEPTED",
    "LedgerError",
    "LedgerQueryError",
    "SignatureEntry",
    "SignatureLedger",
    "SignatureRecord",
    "TimezoneAwareRequiredError",
    "init_ledger_storage",
]
