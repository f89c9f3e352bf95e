"""Listing and detail queries over external pull requests."""

from __future__ import annotations

from .queries import InvalidSearchOptionError, SearchOptions, build_search_query
from .service import ContributionService

__all__ = [
    "ContributionService",
    "InvalidSearchOptionError",
    "SearchOptions",
    "build_search_query",
]
