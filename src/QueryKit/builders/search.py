"""Fluent builder for Elasticsearch-style search queries.

`SearchQueryBuilder` keeps exactly one primary predicate slot: ``match``,
``term``, ``range`` and friends each replace it, so only the last one before
``build()`` counts. Filters are different: ``filter``/``filter_range`` append,
and at build time a non-empty filter list wraps the primary predicate into
``Bool(must=(primary,), filter=filters)``.

Like the relational builder, every call returns a new builder. The boolean
sub-builder returned by ``bool_query()`` hands control back through
``done()``, which returns a *new* parent with the composed predicate
installed::

    query = (
        search()
        .index("articles")
        .bool_query()
        .must(Match("title", "design patterns"))
        .should(Match("tags", "python"))
        .done()
        .size(10)
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import AbstractSet, Any, Mapping, Sequence

from QueryKit.core.errors import ValidationError
from QueryKit.core.models import SearchQuery, SortField, SortOrder
from QueryKit.core.predicates import (
    AGGREGATION_TYPES,
    AggregationSpec,
    Avg,
    Bool,
    DateHistogram,
    HighlightSpec,
    Match,
    MatchAll,
    MatchPhrase,
    MultiMatch,
    QueryPredicate,
    Range,
    RangeBounds,
    Sum,
    Term,
    Terms,
    TermsAggregation,
    ensure_predicate,
)
from QueryKit.utils.log import get_logger

log = get_logger("builders")


@dataclass(frozen=True, slots=True)
class SearchQueryBuilder:
    """Immutable accumulator for a `SearchQuery`."""

    index_name: str | None = None
    predicate: QueryPredicate = MatchAll()
    filters: tuple[QueryPredicate, ...] = ()
    sort_fields: tuple[SortField, ...] = ()
    size_value: int | None = None
    from_value: int | None = None
    aggregation_items: tuple[tuple[str, AggregationSpec], ...] = ()
    highlight_spec: HighlightSpec | None = None
    source_fields: tuple[str, ...] | None = None

    def index(self, name: str) -> SearchQueryBuilder:
        """Record the target index. Not part of the built document."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Index name cannot be empty")
        return replace(self, index_name=name.strip())

    # Primary predicate slot.

    def query(self, predicate: QueryPredicate) -> SearchQueryBuilder:
        """Install any typed predicate as the primary predicate."""
        return replace(self, predicate=ensure_predicate(predicate))

    def match_all(self) -> SearchQueryBuilder:
        return self.query(MatchAll())

    def match(self, field: str, value: Any) -> SearchQueryBuilder:
        return self.query(Match(_require_field(field), value))

    def match_phrase(self, field: str, phrase: str) -> SearchQueryBuilder:
        return self.query(MatchPhrase(_require_field(field), phrase))

    def multi_match(self, value: Any, fields: Sequence[str]) -> SearchQueryBuilder:
        return self.query(MultiMatch(value, fields))

    def term(self, field: str, value: Any) -> SearchQueryBuilder:
        return self.query(Term(_require_field(field), value))

    def terms(self, field: str, values: Sequence[Any]) -> SearchQueryBuilder:
        return self.query(Terms(_require_field(field), values))

    def range(self, field: str, bounds: RangeBounds | Mapping[str, Any]) -> SearchQueryBuilder:
        return self.query(Range(_require_field(field), RangeBounds.coerce(bounds)))

    def bool_query(self) -> BoolQueryBuilder:
        """Start composing a boolean predicate; finish with ``done()``."""
        return BoolQueryBuilder(parent=self)

    # Filters.

    def filter(self, field: str, value: Any) -> SearchQueryBuilder:
        """Append a filter: a list, tuple or set becomes ``terms``, anything else ``term``."""
        field = _require_field(field)
        if isinstance(value, (Sequence, AbstractSet)) and not isinstance(value, (str, bytes)):
            entry: QueryPredicate = Terms(field, value)
        else:
            entry = Term(field, value)
        return replace(self, filters=self.filters + (entry,))

    def filter_range(self, field: str, bounds: RangeBounds | Mapping[str, Any]) -> SearchQueryBuilder:
        entry = Range(_require_field(field), RangeBounds.coerce(bounds))
        return replace(self, filters=self.filters + (entry,))

    # Result shaping.

    def sort(self, field: str, direction: SortOrder | str = SortOrder.ASC) -> SearchQueryBuilder:
        entry = SortField(_require_field(field), _parse_order(direction))
        return replace(self, sort_fields=self.sort_fields + (entry,))

    def size(self, count: int) -> SearchQueryBuilder:
        return replace(self, size_value=_require_count(count, "Size"))

    def from_(self, offset: int) -> SearchQueryBuilder:
        return replace(self, from_value=_require_count(offset, "From offset"))

    def source(self, fields: Sequence[str]) -> SearchQueryBuilder:
        if isinstance(fields, str):
            fields = (fields,)
        return replace(self, source_fields=tuple(_require_field(f) for f in fields))

    def highlight(self, spec: HighlightSpec | Mapping[str, Any] | Sequence[str]) -> SearchQueryBuilder:
        """Set highlighting from a `HighlightSpec`, field names, or a
        ``{"fields": {...}, "pre_tags": [...]}`` mapping."""
        return replace(self, highlight_spec=HighlightSpec.coerce(spec))

    # Aggregations.

    def aggregate(self, name: str, spec: AggregationSpec) -> SearchQueryBuilder:
        """Add a named aggregation; a repeated name replaces the earlier spec."""
        name = _require_field(name, "Aggregation name cannot be empty")
        if not isinstance(spec, AGGREGATION_TYPES):
            raise ValidationError(f"Expected an aggregation spec, got {type(spec).__name__}")
        items = dict(self.aggregation_items)
        items[name] = spec
        return replace(self, aggregation_items=tuple(items.items()))

    def avg_aggregation(self, name: str, field: str) -> SearchQueryBuilder:
        return self.aggregate(name, Avg(_require_field(field)))

    def sum_aggregation(self, name: str, field: str) -> SearchQueryBuilder:
        return self.aggregate(name, Sum(_require_field(field)))

    def terms_aggregation(self, name: str, field: str, size: int = 10) -> SearchQueryBuilder:
        return self.aggregate(name, TermsAggregation(_require_field(field), _require_count(size, "Terms size")))

    def date_histogram(self, name: str, field: str, interval: str) -> SearchQueryBuilder:
        interval = _require_field(interval, "Histogram interval cannot be empty")
        return self.aggregate(name, DateHistogram(_require_field(field), interval))

    def build(self) -> SearchQuery:
        """Materialize the search query.

        Returns:
            Immutable `SearchQuery`. Optional parts stay ``None`` (or empty)
            unless they were set.
        """
        predicate = self.predicate
        if self.filters:
            predicate = Bool(must=(self.predicate,), filter=self.filters)

        query = SearchQuery(
            predicate=predicate,
            filters=self.filters,
            sort=self.sort_fields,
            size=self.size_value,
            from_=self.from_value,
            aggregations=dict(self.aggregation_items) if self.aggregation_items else None,
            highlight=self.highlight_spec,
            source_fields=self.source_fields,
            index=self.index_name,
        )
        log.debug(
            "Built search query index=%s predicate=%s filters=%d",
            query.index,
            type(query.predicate).__name__,
            len(query.filters),
        )
        return query


@dataclass(frozen=True, slots=True)
class BoolQueryBuilder:
    """Boolean sub-builder bound to a parent `SearchQueryBuilder`."""

    parent: SearchQueryBuilder
    must_clauses: tuple[QueryPredicate, ...] = ()
    must_not_clauses: tuple[QueryPredicate, ...] = ()
    should_clauses: tuple[QueryPredicate, ...] = ()
    filter_clauses: tuple[QueryPredicate, ...] = ()

    def must(self, predicate: QueryPredicate) -> BoolQueryBuilder:
        return replace(self, must_clauses=self.must_clauses + (ensure_predicate(predicate),))

    def must_not(self, predicate: QueryPredicate) -> BoolQueryBuilder:
        return replace(self, must_not_clauses=self.must_not_clauses + (ensure_predicate(predicate),))

    def should(self, predicate: QueryPredicate) -> BoolQueryBuilder:
        return replace(self, should_clauses=self.should_clauses + (ensure_predicate(predicate),))

    def filter(self, predicate: QueryPredicate) -> BoolQueryBuilder:
        return replace(self, filter_clauses=self.filter_clauses + (ensure_predicate(predicate),))

    def to_predicate(self) -> Bool:
        return Bool(
            must=self.must_clauses,
            must_not=self.must_not_clauses,
            should=self.should_clauses,
            filter=self.filter_clauses,
        )

    def done(self) -> SearchQueryBuilder:
        """Return a new parent builder whose primary predicate is this bool."""
        return self.parent.query(self.to_predicate())


def search() -> SearchQueryBuilder:
    """Start a search query (matches everything until a predicate is set)."""
    return SearchQueryBuilder()


def match_all() -> SearchQueryBuilder:
    return SearchQueryBuilder()


def _parse_order(direction: SortOrder | str) -> SortOrder:
    if isinstance(direction, SortOrder):
        return direction
    if isinstance(direction, str) and direction.strip().lower() in ("asc", "desc"):
        return SortOrder(direction.strip().lower())
    raise ValidationError(f"Unsupported sort order: {direction!r}")


def _require_field(value: Any, message: str = "Field name cannot be empty") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _require_count(count: Any, what: str) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"{what} must be an integer")
    if count < 0:
        raise ValidationError(f"{what} cannot be negative")
    return count
