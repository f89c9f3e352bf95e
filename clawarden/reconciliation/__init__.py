"""Reconciliation: clear pending-CLA labels after a contributor signs."""

from __future__ import annotations

from .errors import ReconciliationError
from .models import ReconciliationOutcome, SignatureContext
from .observability import ReconciliationEventLogger, ReconciliationEventType
from .service import DEFAULT_PENDING_LABEL, Reconciler, build_author_query

__all__ = [
    "DEFAULT_PENDING_LABEL",
    "ReconciliationError",
    "ReconciliationEventLogger",
    "ReconciliationEventType",
    "ReconciliationOutcome",
    "Reconciler",
    "SignatureContext",
    "build_author_query",
]
