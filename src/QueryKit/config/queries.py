"""Query definition parsing.

Turns the ``queries`` list of the YAML config into builder values. Each entry
is either a relational or a search definition::

    queries:
      - name: active_users
        type: relational
        select: [u.name, u.email]
        from: users u
        join:
          - {table: profiles p, condition: u.id = p.user_id, kind: LEFT}
        where:
          - {field: u.status, value: active}
          - {field: u.role, op: IN, value: [admin, owner], or: true}
        order_by:
          - {field: u.created_at, direction: DESC}
        limit: 50

      - name: laptops
        type: search
        index: products
        query: {match: {name: laptop}}
        filter: {category: [electronics, computers]}
        filter_range: {price: {gte: 500, lte: 2000}}
        sort: [{price: asc}]
        size: 20
        aggs:
          brands: {terms: {field: brand.keyword, size: 10}}

Definitions are replayed through the public builder methods, so the builders
enforce the same validation as in code. Builder errors are re-raised with the
definition key in front.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from QueryKit.builders.relational import RelationalQueryBuilder
from QueryKit.builders.search import SearchQueryBuilder
from QueryKit.config.common import (
    expect_bool,
    expect_int,
    expect_list,
    expect_mapping,
    expect_str,
    expect_str_list,
    get_required_value,
    reject_unknown_keys,
)
from QueryKit.core.clauses import Operator
from QueryKit.core.errors import ValidationError
from QueryKit.core.predicates import HighlightSpec
from QueryKit.renderers.document import aggregation_from_dict, predicate_from_dict
from QueryKit.utils.log import get_logger

log = get_logger("config")

QueryBuilder = Union[RelationalQueryBuilder, SearchQueryBuilder]

_ALLOWED_TYPES = {"relational", "search"}
_RELATIONAL_KEYS = {
    "name",
    "type",
    "select",
    "from",
    "join",
    "where",
    "group_by",
    "having",
    "order_by",
    "limit",
    "offset",
    "insert",
    "update",
    "delete",
}
_SEARCH_KEYS = {
    "name",
    "type",
    "index",
    "query",
    "bool",
    "filter",
    "filter_range",
    "sort",
    "size",
    "from",
    "source",
    "aggs",
    "highlight",
}


@dataclass(frozen=True, slots=True)
class QueryDefinition:
    """A named, not yet built query.

    Attributes:
        name: Unique definition name.
        kind: ``relational`` or ``search``.
        builder: Builder holding every clause of the definition.
    """

    name: str
    kind: str
    builder: QueryBuilder


def load_queries(raw: Mapping[str, Any]) -> tuple[QueryDefinition, ...]:
    """Parse the ``queries`` list.

    Raises:
        TypeError: If the list or an entry has the wrong type.
        ValueError: If an entry is missing keys or holds invalid values.
    """
    queries_obj = raw.get("queries")
    if queries_obj is None:
        raise ValueError("Missing required config: queries")
    items = expect_list(queries_obj, "queries")
    return tuple(parse_query_definition(item, f"queries[{idx}]") for idx, item in enumerate(items))


def check_queries(queries: tuple[QueryDefinition, ...]) -> None:
    """Validate cross-entry constraints.

    Raises:
        ValueError: If there are no queries or names repeat.
    """
    if not queries:
        raise ValueError("queries must include at least one query")
    seen: set[str] = set()
    for idx, query in enumerate(queries):
        if query.name in seen:
            raise ValueError(f"queries[{idx}].name duplicates an earlier query: {query.name}")
        seen.add(query.name)


def parse_query_definition(value: Any, config_key: str) -> QueryDefinition:
    """Parse one query mapping into a `QueryDefinition`.

    Args:
        value: Query mapping.
        config_key: Full key path used in error messages.
    """
    section = expect_mapping(value, config_key)
    name = expect_str(get_required_value(section, "name", f"{config_key}.name"), f"{config_key}.name").strip()
    if not name:
        raise ValueError(f"{config_key}.name must not be empty")
    kind = expect_str(get_required_value(section, "type", f"{config_key}.type"), f"{config_key}.type")
    kind = kind.strip().lower()
    if kind not in _ALLOWED_TYPES:
        raise ValueError(f"{config_key}.type must be one of {sorted(_ALLOWED_TYPES)}")

    try:
        if kind == "relational":
            reject_unknown_keys(section, _RELATIONAL_KEYS, config_key)
            builder: QueryBuilder = _parse_relational(section, config_key)
        else:
            reject_unknown_keys(section, _SEARCH_KEYS, config_key)
            builder = _parse_search(section, config_key)
    except ValidationError as exc:
        raise ValidationError(f"{config_key}: {exc}") from exc
    log.debug("Parsed %s query definition %s", kind, name)
    return QueryDefinition(name=name, kind=kind, builder=builder)


def _parse_relational(section: Mapping[str, Any], key: str) -> RelationalQueryBuilder:
    builder = RelationalQueryBuilder()

    if "select" in section:
        builder = builder.select(expect_str_list(section["select"], f"{key}.select"))
    if "from" in section:
        builder = builder.from_(expect_str(section["from"], f"{key}.from"))

    for idx, item in enumerate(expect_list(section.get("join", []), f"{key}.join")):
        entry_key = f"{key}.join[{idx}]"
        entry = expect_mapping(item, entry_key)
        reject_unknown_keys(entry, {"table", "condition", "kind"}, entry_key)
        builder = builder.join(
            expect_str(get_required_value(entry, "table", f"{entry_key}.table"), f"{entry_key}.table"),
            expect_str(get_required_value(entry, "condition", f"{entry_key}.condition"), f"{entry_key}.condition"),
            expect_str(entry.get("kind", "INNER"), f"{entry_key}.kind"),
        )

    for idx, item in enumerate(expect_list(section.get("where", []), f"{key}.where")):
        builder = _apply_condition(builder, item, f"{key}.where[{idx}]", having=False)

    if "group_by" in section:
        builder = builder.group_by(expect_str_list(section["group_by"], f"{key}.group_by"))

    for idx, item in enumerate(expect_list(section.get("having", []), f"{key}.having")):
        builder = _apply_condition(builder, item, f"{key}.having[{idx}]", having=True)

    for idx, item in enumerate(expect_list(section.get("order_by", []), f"{key}.order_by")):
        entry_key = f"{key}.order_by[{idx}]"
        if isinstance(item, str):
            builder = builder.order_by(item)
            continue
        entry = expect_mapping(item, entry_key)
        reject_unknown_keys(entry, {"field", "direction"}, entry_key)
        builder = builder.order_by(
            expect_str(get_required_value(entry, "field", f"{entry_key}.field"), f"{entry_key}.field"),
            expect_str(entry.get("direction", "ASC"), f"{entry_key}.direction"),
        )

    if "limit" in section:
        builder = builder.limit(expect_int(section["limit"], f"{key}.limit"))
    if "offset" in section:
        builder = builder.offset(expect_int(section["offset"], f"{key}.offset"))

    verbs = [verb for verb in ("insert", "update", "delete") if verb in section]
    if len(verbs) > 1:
        raise ValueError(f"{key} may use only one of insert/update/delete, got {verbs}")
    for verb in ("insert", "update"):
        if verb in section:
            entry_key = f"{key}.{verb}"
            entry = expect_mapping(section[verb], entry_key)
            reject_unknown_keys(entry, {"table", "values"}, entry_key)
            table = expect_str(get_required_value(entry, "table", f"{entry_key}.table"), f"{entry_key}.table")
            values = expect_mapping(get_required_value(entry, "values", f"{entry_key}.values"), f"{entry_key}.values")
            builder = getattr(builder, verb)(table, dict(values))
    if "delete" in section:
        builder = builder.delete(expect_str(section["delete"], f"{key}.delete"))

    return builder


def _apply_condition(
    builder: RelationalQueryBuilder,
    item: Any,
    entry_key: str,
    *,
    having: bool,
) -> RelationalQueryBuilder:
    entry = expect_mapping(item, entry_key)
    allowed = {"field", "op", "value"} if having else {"field", "op", "value", "or"}
    reject_unknown_keys(entry, allowed, entry_key)
    field = expect_str(get_required_value(entry, "field", f"{entry_key}.field"), f"{entry_key}.field")

    if "op" in entry:
        op = Operator.parse(expect_str(entry["op"], f"{entry_key}.op"))
        if not op.is_null_check and "value" not in entry:
            raise ValueError(f"Missing required config: {entry_key}.value")
        value = entry.get("value")
    else:
        op = Operator.EQ
        value = get_required_value(entry, "value", f"{entry_key}.value")

    if having:
        return builder.having(field, op, value)
    if expect_bool(entry.get("or", False), f"{entry_key}.or"):
        return builder.or_where(field, op, value)
    return builder.where(field, op, value)


def _parse_search(section: Mapping[str, Any], key: str) -> SearchQueryBuilder:
    builder = SearchQueryBuilder()

    if "index" in section:
        builder = builder.index(expect_str(section["index"], f"{key}.index"))

    if "query" in section and "bool" in section:
        raise ValueError(f"{key} may set either query or bool, not both")
    if "query" in section:
        builder = builder.query(predicate_from_dict(expect_mapping(section["query"], f"{key}.query")))
    if "bool" in section:
        entry = expect_mapping(section["bool"], f"{key}.bool")
        reject_unknown_keys(entry, {"must", "must_not", "should", "filter"}, f"{key}.bool")
        sub = builder.bool_query()
        for clause in ("must", "must_not", "should", "filter"):
            for idx, item in enumerate(expect_list(entry.get(clause, []), f"{key}.bool.{clause}")):
                predicate = predicate_from_dict(expect_mapping(item, f"{key}.bool.{clause}[{idx}]"))
                sub = getattr(sub, clause)(predicate)
        builder = sub.done()

    for field, value in expect_mapping(section.get("filter", {}), f"{key}.filter").items():
        builder = builder.filter(field, value)
    for field, bounds in expect_mapping(section.get("filter_range", {}), f"{key}.filter_range").items():
        builder = builder.filter_range(field, expect_mapping(bounds, f"{key}.filter_range.{field}"))

    for idx, item in enumerate(expect_list(section.get("sort", []), f"{key}.sort")):
        entry_key = f"{key}.sort[{idx}]"
        if isinstance(item, str):
            builder = builder.sort(item)
            continue
        entry = expect_mapping(item, entry_key)
        if len(entry) != 1:
            raise ValueError(f"{entry_key} must map one field to asc/desc")
        field, order = next(iter(entry.items()))
        builder = builder.sort(field, expect_str(order, f"{entry_key}.{field}"))

    if "size" in section:
        builder = builder.size(expect_int(section["size"], f"{key}.size"))
    if "from" in section:
        builder = builder.from_(expect_int(section["from"], f"{key}.from"))
    if "source" in section:
        builder = builder.source(expect_str_list(section["source"], f"{key}.source"))

    for name, spec in expect_mapping(section.get("aggs", {}), f"{key}.aggs").items():
        builder = builder.aggregate(name, aggregation_from_dict(expect_mapping(spec, f"{key}.aggs.{name}")))

    if "highlight" in section:
        builder = builder.highlight(_parse_highlight(section["highlight"], f"{key}.highlight"))

    return builder


def _parse_highlight(value: Any, key: str) -> HighlightSpec:
    if isinstance(value, (str, list)):
        return HighlightSpec(fields=tuple(expect_str_list(value, key)))
    entry = expect_mapping(value, key)
    reject_unknown_keys(entry, {"fields", "pre_tags", "post_tags", "fragment_size"}, key)
    fields = get_required_value(entry, "fields", f"{key}.fields")
    if isinstance(fields, Mapping):
        fields = list(fields.keys())
    fragment_size = entry.get("fragment_size")
    return HighlightSpec(
        fields=tuple(expect_str_list(fields, f"{key}.fields")),
        pre_tags=tuple(expect_str_list(entry.get("pre_tags", []), f"{key}.pre_tags")),
        post_tags=tuple(expect_str_list(entry.get("post_tags", []), f"{key}.post_tags")),
        fragment_size=expect_int(fragment_size, f"{key}.fragment_size") if fragment_size is not None else None,
    )
