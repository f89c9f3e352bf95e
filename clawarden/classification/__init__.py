"""Contribution classification: cache, heuristic rules and permission resolver."""

from __future__ import annotations

from .cache import ClassificationCache, encode_key
from .classifier import ContributionClassifier, classify
from .config import ClassificationConfig
from .errors import (
    ClassificationError,
    IncompleteContributionError,
    PermissionResolutionError,
)
from .models import (
    AuthorAssociation,
    AuthorKind,
    ContributionRecord,
    Verdict,
)
from .resolver import PermissionResolver, has_write_access
from .rules import DEFAULT_RULES, ClassificationRule, cache_key

__all__ = [
    "DEFAULT_RULES",
    "AuthorAssociation",
    "AuthorKind",
    "ClassificationCache",
    "ClassificationConfig",
    "ClassificationError",
    "ClassificationRule",
    "ContributionClassifier",
    "ContributionRecord",
    "IncompleteContributionError",
    "PermissionResolutionError",
    "PermissionResolver",
    "Verdict",
    "cache_key",
    "classify",
    "encode_key",
    "has_write_access",
]
