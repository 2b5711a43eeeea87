"""Clause model for relational queries.

Plain value types consumed by `RelationalQueryBuilder`:

- `WhereCondition`: one WHERE/HAVING condition and the connector joining it to
  the condition before it.
- `JoinCondition`: one JOIN entry.
- `OrderByClause`: one ORDER BY entry.

The enums are `str` based so their values can be written straight into SQL
text and config files.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

from QueryKit.core.errors import ValidationError

QueryValue = Union[str, int, float, bool, None, list["QueryValue"]]
"""Closed set of literal values accepted as query parameters."""


class Operator(str, Enum):
    """Comparison operators supported in WHERE/HAVING conditions."""

    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    LIKE = "LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"

    @classmethod
    def parse(cls, value: Operator | str) -> Operator:
        """Return the operator for an enum member or its SQL spelling.

        Matching ignores case and collapses inner whitespace, so ``"not  in"``
        resolves to `NOT_IN`.

        Raises:
            ValidationError: If the value names no supported operator.
        """
        if isinstance(value, Operator):
            return value
        if isinstance(value, str):
            normalized = " ".join(value.split()).upper()
            for member in cls:
                if member.value == normalized:
                    return member
        raise ValidationError(f"Unsupported operator: {value!r}")

    @property
    def is_null_check(self) -> bool:
        return self in (Operator.IS_NULL, Operator.IS_NOT_NULL)

    @property
    def is_multi_value(self) -> bool:
        return self in (Operator.IN, Operator.NOT_IN, Operator.BETWEEN)


class Connector(str, Enum):
    """Boolean connector between a condition and the one before it."""

    AND = "AND"
    OR = "OR"


class JoinKind(str, Enum):
    """SQL join flavours."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL_OUTER = "FULL OUTER"

    @classmethod
    def parse(cls, value: JoinKind | str) -> JoinKind:
        """Return the join kind for an enum member, name or SQL spelling."""
        if isinstance(value, JoinKind):
            return value
        if isinstance(value, str):
            normalized = " ".join(value.replace("_", " ").split()).upper()
            for member in cls:
                if member.value == normalized:
                    return member
        raise ValidationError(f"Unsupported join kind: {value!r}")


class Direction(str, Enum):
    """ORDER BY direction."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Direction | str) -> Direction:
        if isinstance(value, Direction):
            return value
        if isinstance(value, str) and value.strip().upper() in ("ASC", "DESC"):
            return cls(value.strip().upper())
        raise ValidationError(f"Unsupported sort direction: {value!r}")


@dataclass(frozen=True, slots=True)
class WhereCondition:
    """One condition of a WHERE or HAVING clause.

    Attributes:
        field: Column or expression on the left-hand side (trimmed, non-empty).
        operator: Comparison operator.
        value: Right-hand side. ``IN``/``NOT IN`` hold a non-empty tuple,
            ``BETWEEN`` holds a ``(low, high)`` tuple, null checks hold nothing.
        connector: How this condition joins the *previous* one. Ignored for
            the first condition of a clause.
    """

    field: str
    operator: Operator
    value: Any = None
    connector: Connector = Connector.AND

    def __post_init__(self) -> None:
        field = self.field.strip() if isinstance(self.field, str) else ""
        if not field:
            raise ValidationError("Condition field cannot be empty")
        object.__setattr__(self, "field", field)

        op = self.operator
        if op.is_null_check:
            if self.value is not None:
                raise ValidationError(f"{op.value} does not take a value")
        elif op in (Operator.IN, Operator.NOT_IN):
            values = _as_value_tuple(self.value, op)
            if not values:
                raise ValidationError(f"{op.value} requires at least one value")
            object.__setattr__(self, "value", values)
        elif op is Operator.BETWEEN:
            values = _as_value_tuple(self.value, op)
            if len(values) != 2:
                raise ValidationError("BETWEEN requires exactly two values")
            object.__setattr__(self, "value", values)

    @property
    def parameters(self) -> tuple[QueryValue, ...]:
        """Positional parameters contributed by this condition, in placeholder order."""
        if self.operator.is_null_check:
            return ()
        if self.operator.is_multi_value:
            return tuple(self.value)
        return (self.value,)


@dataclass(frozen=True, slots=True)
class JoinCondition:
    """One JOIN entry: ``<kind> JOIN <table> ON <condition>``."""

    table: str
    condition: str
    kind: JoinKind = JoinKind.INNER


@dataclass(frozen=True, slots=True)
class OrderByClause:
    """One ORDER BY entry."""

    field: str
    direction: Direction = Direction.ASC


def _as_value_tuple(value: Any, op: Operator) -> tuple[QueryValue, ...]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValidationError(f"{op.value} requires a list of values")
    return tuple(value)
