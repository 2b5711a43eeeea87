"""Search DSL serialization.

Converts the typed `SearchQuery` into the Elasticsearch Query DSL mapping and
parses DSL predicate/aggregation mappings back into typed values.

Document layout::

    {
      "query": {...},
      "sort": [{"price": {"order": "asc"}}],
      "size": 20,
      "from": 0,
      "aggs": {"brands": {"terms": {"field": "brand", "size": 10}}},
      "highlight": {"fields": {"name": {}}},
      "_source": ["name", "price"]
    }

Only ``query`` is always present.
"""

from __future__ import annotations

from typing import Any, Mapping

from QueryKit.core.errors import ValidationError
from QueryKit.core.models import SearchQuery
from QueryKit.core.predicates import (
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
)

_BOOL_KEYS = ("must", "must_not", "should", "filter")


def to_document(query: SearchQuery) -> dict[str, Any]:
    """Serialize a built search query into a DSL mapping.

    Args:
        query: Built search query.

    Returns:
        JSON-serializable dict. The index name is not included.
    """
    doc: dict[str, Any] = {"query": predicate_to_dict(query.predicate)}
    if query.sort:
        doc["sort"] = [{s.field: {"order": s.order.value}} for s in query.sort]
    if query.size is not None:
        doc["size"] = query.size
    if query.from_ is not None:
        doc["from"] = query.from_
    if query.aggregations:
        doc["aggs"] = {name: aggregation_to_dict(spec) for name, spec in query.aggregations.items()}
    if query.highlight is not None:
        doc["highlight"] = highlight_to_dict(query.highlight)
    if query.source_fields is not None:
        doc["_source"] = list(query.source_fields)
    return doc


def predicate_to_dict(predicate: QueryPredicate) -> dict[str, Any]:
    if isinstance(predicate, MatchAll):
        return {"match_all": {}}
    if isinstance(predicate, Match):
        return {"match": {predicate.field: _literal(predicate.value)}}
    if isinstance(predicate, MatchPhrase):
        return {"match_phrase": {predicate.field: predicate.phrase}}
    if isinstance(predicate, MultiMatch):
        return {"multi_match": {"query": _literal(predicate.value), "fields": list(predicate.fields)}}
    if isinstance(predicate, Term):
        return {"term": {predicate.field: _literal(predicate.value)}}
    if isinstance(predicate, Terms):
        return {"terms": {predicate.field: [_literal(v) for v in predicate.values]}}
    if isinstance(predicate, Range):
        return {"range": {predicate.field: {k: _literal(v) for k, v in predicate.bounds.items()}}}
    if isinstance(predicate, Bool):
        body: dict[str, Any] = {}
        for key in _BOOL_KEYS:
            clauses = getattr(predicate, key)
            if clauses:
                body[key] = [predicate_to_dict(c) for c in clauses]
        return {"bool": body}
    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def aggregation_to_dict(spec: AggregationSpec) -> dict[str, Any]:
    if isinstance(spec, Avg):
        return {"avg": {"field": spec.field}}
    if isinstance(spec, Sum):
        return {"sum": {"field": spec.field}}
    if isinstance(spec, TermsAggregation):
        return {"terms": {"field": spec.field, "size": spec.size}}
    if isinstance(spec, DateHistogram):
        return {"date_histogram": {"field": spec.field, "calendar_interval": spec.interval}}
    raise TypeError(f"Unsupported aggregation: {type(spec).__name__}")


def highlight_to_dict(spec: HighlightSpec) -> dict[str, Any]:
    out: dict[str, Any] = {"fields": {name: {} for name in spec.fields}}
    if spec.pre_tags:
        out["pre_tags"] = list(spec.pre_tags)
    if spec.post_tags:
        out["post_tags"] = list(spec.post_tags)
    if spec.fragment_size is not None:
        out["fragment_size"] = spec.fragment_size
    return out


def predicate_from_dict(value: Any) -> QueryPredicate:
    """Parse a single-key DSL predicate mapping into a typed predicate.

    Accepts the shapes produced by `predicate_to_dict`, e.g.
    ``{"match": {"title": "python"}}`` or ``{"range": {"price": {"gte": 10}}}``.

    Raises:
        ValidationError: If the mapping is not one supported predicate.
    """
    kind, body = _single_entry(value, "predicate")

    if kind == "match_all":
        return MatchAll()
    if kind == "bool":
        if not isinstance(body, Mapping):
            raise ValidationError("bool body must be a mapping")
        unknown = set(body) - set(_BOOL_KEYS)
        if unknown:
            raise ValidationError(f"Unknown bool clause(s): {sorted(unknown)}")
        parts = {key: tuple(predicate_from_dict(item) for item in _as_list(body.get(key))) for key in _BOOL_KEYS}
        return Bool(**parts)
    if kind == "multi_match":
        if not isinstance(body, Mapping) or "query" not in body:
            raise ValidationError("multi_match requires 'query'")
        return MultiMatch(body["query"], tuple(_as_list(body.get("fields"))))

    field, arg = _single_entry(body, kind)
    if kind == "match":
        return Match(field, arg)
    if kind == "match_phrase":
        return MatchPhrase(field, arg)
    if kind == "term":
        return Term(field, arg)
    if kind == "terms":
        if not isinstance(arg, (list, tuple)):
            raise ValidationError("terms requires a list of values")
        return Terms(field, tuple(arg))
    if kind == "range":
        return Range(field, RangeBounds.coerce(arg))
    raise ValidationError(f"Unsupported predicate type: {kind}")


def aggregation_from_dict(value: Any) -> AggregationSpec:
    """Parse ``{"avg": {"field": ...}}`` style mappings into aggregation specs."""
    kind, body = _single_entry(value, "aggregation")
    if not isinstance(body, Mapping) or not body.get("field"):
        raise ValidationError(f"{kind} aggregation requires 'field'")
    field = body["field"]
    if kind == "avg":
        return Avg(field)
    if kind == "sum":
        return Sum(field)
    if kind == "terms":
        return TermsAggregation(field, body.get("size", 10))
    if kind == "date_histogram":
        interval = body.get("calendar_interval", body.get("interval"))
        if not interval:
            raise ValidationError("date_histogram requires 'calendar_interval'")
        return DateHistogram(field, interval)
    raise ValidationError(f"Unsupported aggregation type: {kind}")


def _single_entry(value: Any, what: str) -> tuple[str, Any]:
    if not isinstance(value, Mapping) or len(value) != 1:
        raise ValidationError(f"{what} must be a mapping with exactly one key")
    key, body = next(iter(value.items()))
    if not isinstance(key, str):
        raise ValidationError(f"{what} key must be a string")
    return key, body


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _literal(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_literal(v) for v in value]
    return value
