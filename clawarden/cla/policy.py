"""Decide whether a pull request needs a CLA or a post-merge thank-you."""

from __future__ import annotations

import typing as typ

from clawarden.classification import (
    IncompleteContributionError,
    PermissionResolutionError,
    Verdict,
)
from clawarden.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from clawarden.classification import ContributionClassifier, ContributionRecord
    from clawarden.ledger import SignatureLedger

logger = get_logger(__name__)


async def _verdict(
    record: ContributionRecord, classifier: ContributionClassifier
) -> Verdict:
    try:
        return await classifier.determine(record)
    except (PermissionResolutionError, IncompleteContributionError) as exc:
        log_warning(
            logger, "Treating %s#%s as unknown: %s", record.repo, record.number, exc
        )
        record.verdict = Verdict.UNKNOWN
        return Verdict.UNKNOWN


async def is_cla_required(
    record: ContributionRecord,
    *,
    ledger: SignatureLedger,
    classifier: ContributionClassifier,
) -> bool:
    """Return True when the pull request author must sign the CLA.

    Bots and internal authors never need one, nor does anyone already in
    the ledger. External and unknown authors do.
    """
    if record.is_bot:
        log_info(
            logger,
            "PR %s#%s is from a bot; no CLA required",
            record.repo,
            record.number,
        )
        return False
    if await _verdict(record, classifier) is Verdict.INTERNAL:
        log_info(
            logger,
            "PR %s#%s is an internal contribution; no CLA required",
            record.repo,
            record.number,
        )
        return False
    if record.author and await ledger.has_signed(record.author):
        log_info(logger, "%s signed the CLA already; no CLA required", record.author)
        return False
    return True


async def is_message_after_merge_required(
    record: ContributionRecord, *, classifier: ContributionClassifier
) -> bool:
    """Return True when a merged pull request earns a thank-you comment."""
    if record.is_bot:
        return False
    return await _verdict(record, classifier) is not Verdict.INTERNAL
