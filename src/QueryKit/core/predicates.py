"""Typed building blocks of a search query.

Predicates, aggregations and highlighting are closed sets of frozen
dataclasses. They are turned into the Elasticsearch-style mapping only at the
boundary, see `QueryKit.renderers.document`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, Iterable, Mapping, Sequence, Union

from QueryKit.core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class MatchAll:
    """Matches every document. Default predicate of a search builder."""


@dataclass(frozen=True, slots=True)
class Match:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class MatchPhrase:
    field: str
    phrase: str


@dataclass(frozen=True, slots=True)
class MultiMatch:
    value: Any
    fields: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _str_tuple(self.fields, "multi_match fields"))


@dataclass(frozen=True, slots=True)
class Term:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Terms:
    field: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _value_tuple(self.values, "terms"))


@dataclass(frozen=True, slots=True)
class RangeBounds:
    """Bounds of a range predicate. At least one bound must be set."""

    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    def __post_init__(self) -> None:
        if all(bound is None for bound in (self.gte, self.gt, self.lte, self.lt)):
            raise ValidationError("Range requires at least one bound")

    @classmethod
    def coerce(cls, bounds: RangeBounds | Mapping[str, Any]) -> RangeBounds:
        """Accept either bounds or a ``{"gte": ..., "lt": ...}`` mapping."""
        if isinstance(bounds, RangeBounds):
            return bounds
        if not isinstance(bounds, Mapping):
            raise ValidationError("Range bounds must be a mapping of gte/gt/lte/lt")
        unknown = set(bounds) - {"gte", "gt", "lte", "lt"}
        if unknown:
            raise ValidationError(f"Unknown range bound(s): {sorted(unknown)}")
        return cls(**bounds)

    def items(self) -> list[tuple[str, Any]]:
        """Set bounds in gte/gt/lte/lt order."""
        pairs = (("gte", self.gte), ("gt", self.gt), ("lte", self.lte), ("lt", self.lt))
        return [(name, value) for name, value in pairs if value is not None]


@dataclass(frozen=True, slots=True)
class Range:
    field: str
    bounds: RangeBounds


@dataclass(frozen=True, slots=True)
class Bool:
    """Composite predicate. Empty lists are omitted when serialized."""

    must: tuple[QueryPredicate, ...] = ()
    must_not: tuple[QueryPredicate, ...] = ()
    should: tuple[QueryPredicate, ...] = ()
    filter: tuple[QueryPredicate, ...] = ()


QueryPredicate = Union[MatchAll, Match, MatchPhrase, MultiMatch, Term, Terms, Range, Bool]
PREDICATE_TYPES = (MatchAll, Match, MatchPhrase, MultiMatch, Term, Terms, Range, Bool)


def ensure_predicate(value: Any) -> QueryPredicate:
    """Return ``value`` if it is a typed predicate.

    Raises:
        ValidationError: For anything else, including raw DSL mappings. Use
            `QueryKit.renderers.document.predicate_from_dict` to parse those.
    """
    if not isinstance(value, PREDICATE_TYPES):
        raise ValidationError(f"Expected a query predicate, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Avg:
    field: str


@dataclass(frozen=True, slots=True)
class Sum:
    field: str


@dataclass(frozen=True, slots=True)
class TermsAggregation:
    field: str
    size: int = 10

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValidationError("Terms aggregation size cannot be negative")


@dataclass(frozen=True, slots=True)
class DateHistogram:
    field: str
    interval: str


AggregationSpec = Union[Avg, Sum, TermsAggregation, DateHistogram]
AGGREGATION_TYPES = (Avg, Sum, TermsAggregation, DateHistogram)


@dataclass(frozen=True, slots=True)
class HighlightSpec:
    """Highlighting options.

    Attributes:
        fields: Field names to highlight.
        pre_tags: Optional opening tags.
        post_tags: Optional closing tags.
        fragment_size: Optional fragment size in characters.
    """

    fields: tuple[str, ...]
    pre_tags: tuple[str, ...] = ()
    post_tags: tuple[str, ...] = ()
    fragment_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _str_tuple(self.fields, "highlight fields"))
        object.__setattr__(self, "pre_tags", tuple(self.pre_tags))
        object.__setattr__(self, "post_tags", tuple(self.post_tags))
        if not self.fields:
            raise ValidationError("Highlight requires at least one field")

    @classmethod
    def coerce(cls, spec: HighlightSpec | Mapping[str, Any] | Sequence[str] | str) -> HighlightSpec:
        """Accept a spec, field name(s), or a DSL-style highlight mapping.

        The mapping form is ``{"fields": {"title": {}}, "pre_tags": [...],
        "post_tags": [...], "fragment_size": 80}``; ``fields`` may also be a
        list of names.

        Raises:
            ValidationError: On unknown keys or malformed values.
        """
        if isinstance(spec, HighlightSpec):
            return spec
        if not isinstance(spec, Mapping):
            return cls(fields=spec)
        unknown = set(spec) - {"fields", "pre_tags", "post_tags", "fragment_size"}
        if unknown:
            raise ValidationError(f"Unknown highlight option(s): {sorted(unknown)}")
        fields = spec.get("fields", ())
        if isinstance(fields, Mapping):
            fields = tuple(fields.keys())
        fragment_size = spec.get("fragment_size")
        if fragment_size is not None and (isinstance(fragment_size, bool) or not isinstance(fragment_size, int)):
            raise ValidationError("Highlight fragment_size must be an integer")
        return cls(
            fields=fields,
            pre_tags=_str_tuple(spec.get("pre_tags", ()), "highlight pre_tags"),
            post_tags=_str_tuple(spec.get("post_tags", ()), "highlight post_tags"),
            fragment_size=fragment_size,
        )


def _str_tuple(values: Sequence[str] | str, what: str) -> tuple[str, ...]:
    if isinstance(values, str):
        values = (values,)
    if not isinstance(values, (Sequence, AbstractSet)):
        raise ValidationError(f"{what} must be a list of strings")
    out: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{what} must be non-empty strings")
        out.append(value.strip())
    return tuple(out)


def _value_tuple(values: Iterable[Any], what: str) -> tuple[Any, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, (Sequence, AbstractSet)):
        raise ValidationError(f"{what} requires a list of values")
    return tuple(values)
