"""Fluent builder for parameterized relational statements.

`RelationalQueryBuilder` is an immutable value: every chained call returns a
new builder and leaves the receiver untouched, so a partially built query can
be shared and branched safely::

    base = select(["id", "email"]).from_("users")
    active = base.where("status", "active").limit(50).build()
    admins = base.where("role", "=", "admin").build()

`build()` renders SQL text with ``?`` placeholders and the matching flat
parameter list. The clause order is fixed:

    SELECT/FROM -> JOIN -> WHERE -> GROUP BY -> HAVING -> ORDER BY -> LIMIT -> OFFSET

Conditions are joined left to right with no grouping: ``or_where`` joins the
new condition to the previous one with OR, nothing more.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from QueryKit.core.clauses import (
    Connector,
    Direction,
    JoinCondition,
    JoinKind,
    Operator,
    OrderByClause,
    QueryValue,
    WhereCondition,
)
from QueryKit.core.errors import ValidationError
from QueryKit.core.models import RelationalQuery, StatementKind
from QueryKit.utils.log import get_logger

log = get_logger("builders")

_UNSET: Any = object()

_CLAUSES_BY_KIND: dict[StatementKind, frozenset[str]] = {
    StatementKind.SELECT: frozenset(
        {"SELECT", "JOIN", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT", "OFFSET"}
    ),
    StatementKind.INSERT: frozenset({"VALUES"}),
    StatementKind.UPDATE: frozenset({"SET", "WHERE", "ORDER BY", "LIMIT"}),
    StatementKind.DELETE: frozenset({"WHERE", "ORDER BY", "LIMIT"}),
}


@dataclass(frozen=True, slots=True)
class RelationalQueryBuilder:
    """Immutable accumulator for a SELECT/INSERT/UPDATE/DELETE statement."""

    kind: StatementKind = StatementKind.SELECT
    projection: tuple[str, ...] = ()
    table: str = ""
    joins: tuple[JoinCondition, ...] = ()
    where_conditions: tuple[WhereCondition, ...] = ()
    group_by_fields: tuple[str, ...] = ()
    having_conditions: tuple[WhereCondition, ...] = ()
    order_by_fields: tuple[OrderByClause, ...] = ()
    limit_count: int | None = None
    offset_count: int | None = None
    assignments: tuple[tuple[str, QueryValue], ...] = ()

    def select(self, fields: str | Sequence[str]) -> RelationalQueryBuilder:
        """Add columns to the projection.

        A lone ``*`` (``"*"`` or ``["*"]``) replaces the whole projection.
        """
        names = _as_names(fields, "SELECT field")
        if names == ("*",):
            return replace(self, kind=StatementKind.SELECT, projection=names)
        return replace(self, kind=StatementKind.SELECT, projection=self.projection + names)

    def from_(self, table: str) -> RelationalQueryBuilder:
        return replace(self, table=_require_text(table, "Table name cannot be empty"))

    def join(
        self,
        table: str,
        condition: str,
        kind: JoinKind | str = JoinKind.INNER,
    ) -> RelationalQueryBuilder:
        if not _is_text(table) or not _is_text(condition):
            raise ValidationError("Table and condition are required for join")
        entry = JoinCondition(table=table.strip(), condition=condition.strip(), kind=JoinKind.parse(kind))
        return replace(self, joins=self.joins + (entry,))

    def inner_join(self, table: str, condition: str) -> RelationalQueryBuilder:
        return self.join(table, condition, JoinKind.INNER)

    def left_join(self, table: str, condition: str) -> RelationalQueryBuilder:
        return self.join(table, condition, JoinKind.LEFT)

    def right_join(self, table: str, condition: str) -> RelationalQueryBuilder:
        return self.join(table, condition, JoinKind.RIGHT)

    def full_outer_join(self, table: str, condition: str) -> RelationalQueryBuilder:
        return self.join(table, condition, JoinKind.FULL_OUTER)

    def where(
        self,
        field: str,
        operator_or_value: Any,
        value: Any = _UNSET,
    ) -> RelationalQueryBuilder:
        """Add an AND-joined condition.

        Called as ``where(field, operator, value)`` or ``where(field, value)``;
        the two-argument form compares with ``=`` unless the second argument is
        ``IS NULL``/``IS NOT NULL``.

        Raises:
            ValidationError: On an unknown operator or a value that does not
                fit the operator.
        """
        condition = _make_condition(field, operator_or_value, value, Connector.AND)
        return replace(self, where_conditions=self.where_conditions + (condition,))

    def or_where(
        self,
        field: str,
        operator_or_value: Any,
        value: Any = _UNSET,
    ) -> RelationalQueryBuilder:
        """Add a condition joined to the previous one with OR.

        Conditions stay flat: ``where(a).where(b).or_where(c)`` renders as
        ``a AND b OR c`` and there is no way to parenthesize ``b OR c``.
        """
        condition = _make_condition(field, operator_or_value, value, Connector.OR)
        return replace(self, where_conditions=self.where_conditions + (condition,))

    def where_in(self, field: str, values: Sequence[QueryValue]) -> RelationalQueryBuilder:
        return self.where(field, Operator.IN, values)

    def where_not_in(self, field: str, values: Sequence[QueryValue]) -> RelationalQueryBuilder:
        return self.where(field, Operator.NOT_IN, values)

    def where_between(self, field: str, low: QueryValue, high: QueryValue) -> RelationalQueryBuilder:
        return self.where(field, Operator.BETWEEN, (low, high))

    def where_null(self, field: str) -> RelationalQueryBuilder:
        return self.where(field, Operator.IS_NULL, None)

    def where_not_null(self, field: str) -> RelationalQueryBuilder:
        return self.where(field, Operator.IS_NOT_NULL, None)

    def order_by(self, field: str, direction: Direction | str = Direction.ASC) -> RelationalQueryBuilder:
        entry = OrderByClause(
            field=_require_text(field, "ORDER BY field cannot be empty"),
            direction=Direction.parse(direction),
        )
        return replace(self, order_by_fields=self.order_by_fields + (entry,))

    def group_by(self, fields: str | Sequence[str]) -> RelationalQueryBuilder:
        return replace(self, group_by_fields=self.group_by_fields + _as_names(fields, "GROUP BY field"))

    def having(self, field: str, operator: Operator | str, value: Any = None) -> RelationalQueryBuilder:
        condition = _make_condition(field, operator, value, Connector.AND)
        return replace(self, having_conditions=self.having_conditions + (condition,))

    def limit(self, count: int) -> RelationalQueryBuilder:
        return replace(self, limit_count=_require_count(count, "Limit count"))

    def offset(self, count: int) -> RelationalQueryBuilder:
        return replace(self, offset_count=_require_count(count, "Offset count"))

    def insert(self, table: str, values: Mapping[str, QueryValue]) -> RelationalQueryBuilder:
        """Turn the statement into ``INSERT INTO table (...) VALUES (...)``."""
        return replace(
            self,
            kind=StatementKind.INSERT,
            table=_require_text(table, "Table name cannot be empty"),
            assignments=_as_assignments(values, "INSERT"),
        )

    def update(self, table: str, values: Mapping[str, QueryValue]) -> RelationalQueryBuilder:
        """Turn the statement into ``UPDATE table SET ...``; WHERE still applies."""
        return replace(
            self,
            kind=StatementKind.UPDATE,
            table=_require_text(table, "Table name cannot be empty"),
            assignments=_as_assignments(values, "UPDATE"),
        )

    def delete(self, table: str) -> RelationalQueryBuilder:
        """Turn the statement into ``DELETE FROM table``; WHERE still applies."""
        return replace(
            self,
            kind=StatementKind.DELETE,
            table=_require_text(table, "Table name cannot be empty"),
        )

    def build(self) -> RelationalQuery:
        """Render the statement.

        Returns:
            Immutable `RelationalQuery` whose parameters line up one-to-one
            with the ``?`` placeholders of its text.

        Raises:
            ValidationError: If the table or projection is missing, or the
                statement carries a clause its verb does not support.
        """
        if not self.table:
            raise ValidationError("FROM table is required")
        if self.kind is StatementKind.SELECT and not self.projection:
            raise ValidationError("SELECT fields are required")
        unsupported = sorted(self._used_clauses() - _CLAUSES_BY_KIND[self.kind])
        if unsupported:
            raise ValidationError(f"{self.kind.value} does not support: {', '.join(unsupported)}")

        parts: list[str] = []
        parameters: list[QueryValue] = []

        if self.kind is StatementKind.SELECT:
            parts.append(f"SELECT {', '.join(self.projection)}")
            parts.append(f"FROM {self.table}")
            for join in self.joins:
                parts.append(f"{join.kind.value} JOIN {join.table} ON {join.condition}")
        elif self.kind is StatementKind.INSERT:
            columns = ", ".join(name for name, _ in self.assignments)
            placeholders = ", ".join("?" for _ in self.assignments)
            parts.append(f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})")
            parameters.extend(value for _, value in self.assignments)
        elif self.kind is StatementKind.UPDATE:
            parts.append(f"UPDATE {self.table}")
            parts.append("SET " + ", ".join(f"{name} = ?" for name, _ in self.assignments))
            parameters.extend(value for _, value in self.assignments)
        else:
            parts.append(f"DELETE FROM {self.table}")

        if self.where_conditions:
            clause, values = _render_conditions(self.where_conditions)
            parts.append(f"WHERE {clause}")
            parameters.extend(values)

        if self.group_by_fields:
            parts.append(f"GROUP BY {', '.join(self.group_by_fields)}")

        if self.having_conditions:
            clause, values = _render_conditions(self.having_conditions)
            parts.append(f"HAVING {clause}")
            parameters.extend(values)

        if self.order_by_fields:
            order = ", ".join(f"{o.field} {o.direction.value}" for o in self.order_by_fields)
            parts.append(f"ORDER BY {order}")

        if self.limit_count is not None:
            parts.append(f"LIMIT {self.limit_count}")

        if self.offset_count is not None:
            parts.append(f"OFFSET {self.offset_count}")

        query = RelationalQuery(
            text=" ".join(parts),
            parameters=tuple(parameters),
            kind=self.kind,
            estimated_cost=self.estimate_cost(),
            table=self.table,
            projection=self.projection,
            where_count=len(self.where_conditions),
            limit=self.limit_count,
        )
        log.debug(
            "Built %s query on %s: %d parameter(s), cost=%.1f",
            query.kind.value,
            query.table,
            len(query.parameters),
            query.estimated_cost,
        )
        return query

    def estimate_cost(self) -> float:
        """Advisory cost heuristic; not a query planner."""
        cost = 1.0
        cost += len(self.joins) * 2.0
        cost += len(self.where_conditions) * 0.5
        cost += len(self.order_by_fields) * 1.5
        if self.group_by_fields:
            cost += 2.0
        if self.limit_count is not None and self.limit_count < 100:
            cost *= 0.5
        return round(cost, 1)

    def _used_clauses(self) -> set[str]:
        present = {
            "SELECT": bool(self.projection),
            "JOIN": bool(self.joins),
            "WHERE": bool(self.where_conditions),
            "GROUP BY": bool(self.group_by_fields),
            "HAVING": bool(self.having_conditions),
            "ORDER BY": bool(self.order_by_fields),
            "LIMIT": self.limit_count is not None,
            "OFFSET": self.offset_count is not None,
            "VALUES": self.kind is StatementKind.INSERT,
            "SET": self.kind is StatementKind.UPDATE,
        }
        return {name for name, used in present.items() if used}


def select(fields: str | Sequence[str]) -> RelationalQueryBuilder:
    """Start a SELECT statement with the given projection."""
    return RelationalQueryBuilder().select(fields)


def select_all() -> RelationalQueryBuilder:
    """Start a ``SELECT *`` statement."""
    return RelationalQueryBuilder().select("*")


def _render_conditions(conditions: Sequence[WhereCondition]) -> tuple[str, list[QueryValue]]:
    """Render a WHERE/HAVING body and collect its parameters in placeholder order."""
    fragments: list[str] = []
    parameters: list[QueryValue] = []
    for idx, condition in enumerate(conditions):
        op = condition.operator
        if op in (Operator.IN, Operator.NOT_IN):
            placeholders = ", ".join("?" for _ in condition.value)
            fragment = f"{condition.field} {op.value} ({placeholders})"
        elif op is Operator.BETWEEN:
            fragment = f"{condition.field} BETWEEN ? AND ?"
        elif op.is_null_check:
            fragment = f"{condition.field} {op.value}"
        else:
            fragment = f"{condition.field} {op.value} ?"

        if idx > 0:
            fragment = f"{condition.connector.value} {fragment}"
        fragments.append(fragment)
        parameters.extend(condition.parameters)
    return " ".join(fragments), parameters


def _make_condition(field: str, operator_or_value: Any, value: Any, connector: Connector) -> WhereCondition:
    if value is _UNSET:
        if isinstance(operator_or_value, Operator) or _names_null_check(operator_or_value):
            return WhereCondition(field, Operator.parse(operator_or_value), None, connector)
        return WhereCondition(field, Operator.EQ, _normalize_value(operator_or_value), connector)
    return WhereCondition(field, Operator.parse(operator_or_value), _normalize_value(value), connector)


def _names_null_check(value: Any) -> bool:
    return isinstance(value, str) and " ".join(value.split()).upper() in ("IS NULL", "IS NOT NULL")


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def _as_names(fields: str | Sequence[str], what: str) -> tuple[str, ...]:
    if isinstance(fields, str):
        fields = (fields,)
    names: list[str] = []
    for item in fields:
        names.append(_require_text(item, f"{what} cannot be empty"))
    return tuple(names)


def _as_assignments(values: Mapping[str, QueryValue], verb: str) -> tuple[tuple[str, QueryValue], ...]:
    if not isinstance(values, Mapping) or not values:
        raise ValidationError(f"{verb} requires at least one column value")
    return tuple(
        (_require_text(name, f"{verb} column name cannot be empty"), value) for name, value in values.items()
    )


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _require_text(value: Any, message: str) -> str:
    if not _is_text(value):
        raise ValidationError(message)
    return value.strip()


def _require_count(count: Any, what: str) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"{what} must be an integer")
    if count < 0:
        raise ValidationError(f"{what} cannot be negative")
    return count
