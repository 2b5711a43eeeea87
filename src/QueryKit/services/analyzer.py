"""Static advisory analysis of built queries.

Each rule runs independently and may add a note and a rating; the worst
rating wins. The rules are heuristics over the built query only. No schema,
index or statistics information is consulted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from QueryKit.core.models import RelationalQuery, SearchQuery, StatementKind
from QueryKit.core.predicates import MatchAll

NOTE_SELECT_ALL = "Avoid selecting all columns (SELECT *); list the needed columns"
NOTE_HIGH_COST = "High estimated cost; consider adding indexes"
NOTE_UNBOUNDED = "Add LIMIT to bound the result size"
NOTE_ALL_ROWS = "Statement affects every row; add a WHERE condition"
NOTE_PAGINATION = "Large result set; consider pagination"
NOTE_SORTING = "Add sorting for deterministic results"
NOTE_FILTERS = "Add filters to improve performance"


class Rating(str, Enum):
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def worst(self, other: Rating) -> Rating:
        return self if self.severity >= other.severity else other


_SEVERITY = {Rating.GOOD: 0, Rating.FAIR: 1, Rating.POOR: 2}


@dataclass(frozen=True, slots=True)
class AnalysisThresholds:
    """Limits used by the analyzer rules.

    Attributes:
        max_cost: Relational estimated cost above which a query is poor.
        large_result_size: Search ``size`` above which pagination is advised.
        sort_required_size: Search ``size`` above which sorting is advised.
    """

    max_cost: float = 5.0
    large_result_size: int = 1000
    sort_required_size: int = 100


DEFAULT_THRESHOLDS = AnalysisThresholds()


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    rating: Rating
    notes: tuple[str, ...] = ()


def analyze_relational(
    query: RelationalQuery,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> AnalysisReport:
    """Rate a relational query and collect warnings.

    Rules:
    - projecting ``*``: poor
    - estimated cost above ``max_cost``: poor
    - a SELECT with neither LIMIT nor WHERE: at least fair
    - an UPDATE/DELETE without WHERE: poor
    """
    rating = Rating.GOOD
    notes: list[str] = []

    if query.kind is StatementKind.SELECT and "*" in query.projection:
        notes.append(NOTE_SELECT_ALL)
        rating = rating.worst(Rating.POOR)

    if query.estimated_cost > thresholds.max_cost:
        notes.append(NOTE_HIGH_COST)
        rating = rating.worst(Rating.POOR)

    if query.kind is StatementKind.SELECT and query.limit is None and query.where_count == 0:
        notes.append(NOTE_UNBOUNDED)
        rating = rating.worst(Rating.FAIR)

    if query.kind in (StatementKind.UPDATE, StatementKind.DELETE) and query.where_count == 0:
        notes.append(NOTE_ALL_ROWS)
        rating = rating.worst(Rating.POOR)

    return AnalysisReport(rating=rating, notes=tuple(notes))


def analyze_search(
    query: SearchQuery,
    thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS,
) -> AnalysisReport:
    """Rate a search query and collect suggestions.

    Only a large ``size`` lowers the rating; the sorting and filter hints are
    notes that leave it unchanged.
    """
    rating = Rating.GOOD
    notes: list[str] = []
    size = query.size or 0

    if size > thresholds.large_result_size:
        notes.append(NOTE_PAGINATION)
        rating = rating.worst(Rating.FAIR)

    if not query.sort and size > thresholds.sort_required_size:
        notes.append(NOTE_SORTING)

    if isinstance(query.predicate, MatchAll) and not query.filters:
        notes.append(NOTE_FILTERS)

    return AnalysisReport(rating=rating, notes=tuple(notes))
