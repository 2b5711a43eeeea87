from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from QueryKit.core.clauses import QueryValue
from QueryKit.core.predicates import AggregationSpec, HighlightSpec, MatchAll, QueryPredicate


class StatementKind(str, Enum):
    """Verb of a relational statement."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class SortOrder(str, Enum):
    """Search sort order. Lowercase to match the search DSL."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class RelationalQuery:
    """Materialized relational statement.

    Produced only by `RelationalQueryBuilder.build()`.

    Attributes:
        text: SQL text with ``?`` positional placeholders.
        parameters: One value per placeholder, in placeholder order.
        kind: Statement verb.
        estimated_cost: Advisory cost heuristic, rounded to one decimal.
        table: Target table as written in the statement.
        projection: Selected columns (SELECT only).
        where_count: Number of WHERE conditions.
        limit: LIMIT value if one was set.
    """

    text: str
    parameters: tuple[QueryValue, ...]
    kind: StatementKind
    estimated_cost: float
    table: str = ""
    projection: tuple[str, ...] = ()
    where_count: int = 0
    limit: Optional[int] = None

    @property
    def placeholder_count(self) -> int:
        return self.text.count("?")


@dataclass(frozen=True, slots=True)
class SortField:
    field: str
    order: SortOrder = SortOrder.ASC


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Materialized search document in typed form.

    Produced only by `SearchQueryBuilder.build()`. Serialize with
    `QueryKit.renderers.document.to_document`.

    Attributes:
        predicate: Final query predicate. When filters exist this is a
            ``Bool(must=(primary,), filter=filters)`` wrapper.
        filters: Filter predicates appended with ``filter``/``filter_range``.
        sort: Sort fields in call order.
        size: Page size if set.
        from_: Page offset if set.
        aggregations: Named aggregations if any were added.
        highlight: Highlight options if set.
        source_fields: ``_source`` allow-list if set.
        index: Target index name. Builder metadata, never serialized.
    """

    predicate: QueryPredicate = MatchAll()
    filters: tuple[QueryPredicate, ...] = ()
    sort: tuple[SortField, ...] = ()
    size: Optional[int] = None
    from_: Optional[int] = None
    aggregations: Optional[Mapping[str, AggregationSpec]] = None
    highlight: Optional[HighlightSpec] = None
    source_fields: Optional[Sequence[str]] = None
    index: Optional[str] = None

    def __post_init__(self) -> None:
        # Read-only view so a built query cannot be changed through its mapping.
        if self.aggregations is not None:
            object.__setattr__(self, "aggregations", MappingProxyType(dict(self.aggregations)))
        if self.source_fields is not None:
            object.__setattr__(self, "source_fields", tuple(self.source_fields))
