"""Service layer for QueryKit.

Provides the static query analyzer and a dispatcher that picks the analyzer
matching a built query.
"""

from __future__ import annotations

from typing import Union

from QueryKit.core.models import RelationalQuery, SearchQuery
from QueryKit.services.analyzer import (
    DEFAULT_THRESHOLDS,
    AnalysisReport,
    AnalysisThresholds,
    Rating,
    analyze_relational,
    analyze_search,
)

BuiltQuery = Union[RelationalQuery, SearchQuery]


def analyze(query: BuiltQuery, thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS) -> AnalysisReport:
    """Analyze a built relational or search query.

    Args:
        query: Output of a builder's ``build()``.
        thresholds: Analyzer limits.

    Returns:
        Rating and notes for the query.

    Raises:
        TypeError: If ``query`` is neither a relational nor a search query.
    """
    if isinstance(query, RelationalQuery):
        return analyze_relational(query, thresholds)
    if isinstance(query, SearchQuery):
        return analyze_search(query, thresholds)
    raise TypeError(f"Unsupported query type: {type(query).__name__}")


__all__ = [
    "AnalysisReport",
    "AnalysisThresholds",
    "BuiltQuery",
    "DEFAULT_THRESHOLDS",
    "Rating",
    "analyze",
    "analyze_relational",
    "analyze_search",
]
