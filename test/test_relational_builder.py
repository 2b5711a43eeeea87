"""Tests for the relational query builder."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryKit.builders import RelationalQueryBuilder, select, select_all
from QueryKit.core.clauses import Connector, JoinKind, Operator
from QueryKit.core.errors import ValidationError
from QueryKit.core.models import StatementKind


class TestRelationalRendering(unittest.TestCase):
    def test_select_where_order_limit_offset(self) -> None:
        query = (
            select(["id", "name"])
            .from_("users")
            .where("status", "active")
            .where("age", ">", 18)
            .order_by("created_at", "DESC")
            .limit(10)
            .offset(20)
            .build()
        )

        self.assertEqual(
            query.text,
            "SELECT id, name FROM users WHERE status = ? AND age > ? "
            "ORDER BY created_at DESC LIMIT 10 OFFSET 20",
        )
        self.assertEqual(query.parameters, ("active", 18))
        self.assertIs(query.kind, StatementKind.SELECT)

    def test_clause_order_is_fixed_regardless_of_call_order(self) -> None:
        query = (
            select(["u.id", "COUNT(o.id) AS orders"])
            .limit(5)
            .order_by("orders", "desc")
            .having("COUNT(o.id)", ">", 3)
            .group_by("u.id")
            .where("u.active", True)
            .left_join("orders o", "o.user_id = u.id")
            .from_("users u")
            .build()
        )

        self.assertEqual(
            query.text,
            "SELECT u.id, COUNT(o.id) AS orders FROM users u "
            "LEFT JOIN orders o ON o.user_id = u.id "
            "WHERE u.active = ? GROUP BY u.id HAVING COUNT(o.id) > ? "
            "ORDER BY orders DESC LIMIT 5",
        )
        self.assertEqual(query.parameters, (True, 3))

    def test_multi_value_operators_flatten_parameters(self) -> None:
        query = (
            select_all()
            .from_("products")
            .where_in("category", ["a", "b", "c"])
            .where_between("price", 10, 20)
            .where_null("deleted_at")
            .build()
        )

        self.assertEqual(
            query.text,
            "SELECT * FROM products WHERE category IN (?, ?, ?) "
            "AND price BETWEEN ? AND ? AND deleted_at IS NULL",
        )
        self.assertEqual(query.parameters, ("a", "b", "c", 10, 20))
        self.assertEqual(query.placeholder_count, len(query.parameters))

    def test_not_in_and_not_null(self) -> None:
        query = (
            select("id")
            .from_("t")
            .where_not_in("state", ("x", "y"))
            .where_not_null("owner")
            .build()
        )

        self.assertEqual(query.text, "SELECT id FROM t WHERE state NOT IN (?, ?) AND owner IS NOT NULL")
        self.assertEqual(query.parameters, ("x", "y"))

    def test_or_where_joins_with_or(self) -> None:
        query = select("id").from_("t").where("a", 1).or_where("b", "<=", 2).build()

        self.assertEqual(query.text, "SELECT id FROM t WHERE a = ? OR b <= ?")
        self.assertEqual(query.parameters, (1, 2))

    def test_or_where_stays_flat(self) -> None:
        builder = select("id").from_("t").where("a", 1).where("b", 2).or_where("c", 3)

        self.assertEqual(
            [c.connector for c in builder.where_conditions],
            [Connector.AND, Connector.AND, Connector.OR],
        )
        self.assertEqual(builder.build().text, "SELECT id FROM t WHERE a = ? AND b = ? OR c = ?")

    def test_two_argument_null_check(self) -> None:
        query = select("id").from_("t").where("deleted_at", "is  null").build()

        self.assertEqual(query.text, "SELECT id FROM t WHERE deleted_at IS NULL")
        self.assertEqual(query.parameters, ())

    def test_operator_enum_and_spelling_are_equivalent(self) -> None:
        a = select("id").from_("t").where("x", Operator.LIKE, "%a%").build()
        b = select("id").from_("t").where("x", "like", "%a%").build()

        self.assertEqual(a, b)

    def test_having_parameters_follow_where_parameters(self) -> None:
        query = (
            select(["dept", "COUNT(*)"])
            .from_("staff")
            .group_by("dept")
            .having("COUNT(*)", ">", 1)
            .where("active", 2)
            .build()
        )

        self.assertEqual(query.parameters, (2, 1))

    def test_join_kinds(self) -> None:
        query = (
            select("a.id")
            .from_("a")
            .inner_join("b", "b.a_id = a.id")
            .right_join("c", "c.a_id = a.id")
            .full_outer_join("d", "d.a_id = a.id")
            .join("e", "e.a_id = a.id", "full_outer")
            .build()
        )

        self.assertEqual(
            query.text,
            "SELECT a.id FROM a INNER JOIN b ON b.a_id = a.id "
            "RIGHT JOIN c ON c.a_id = a.id "
            "FULL OUTER JOIN d ON d.a_id = a.id "
            "FULL OUTER JOIN e ON e.a_id = a.id",
        )
        self.assertIs(JoinKind.parse("left"), JoinKind.LEFT)

    def test_star_replaces_projection(self) -> None:
        self.assertEqual(select(["a", "b"]).select("*").projection, ("*",))
        self.assertEqual(select("a").select(["b", "c"]).projection, ("a", "b", "c"))


class TestRelationalImmutability(unittest.TestCase):
    def test_branches_do_not_affect_each_other(self) -> None:
        base = select("id").from_("users")
        filtered = base.where("active", True)
        limited = base.limit(5)

        self.assertEqual(base.build().text, "SELECT id FROM users")
        self.assertEqual(filtered.build().text, "SELECT id FROM users WHERE active = ?")
        self.assertEqual(limited.build().text, "SELECT id FROM users LIMIT 5")

    def test_build_is_repeatable(self) -> None:
        builder = select("id").from_("users").where_in("id", [1, 2])

        self.assertEqual(builder.build(), builder.build())

    def test_list_values_are_copied(self) -> None:
        values = [1, 2]
        builder = select("id").from_("users").where_in("id", values)
        values.append(3)

        self.assertEqual(builder.build().parameters, (1, 2))


class TestRelationalWriteStatements(unittest.TestCase):
    def test_insert(self) -> None:
        query = RelationalQueryBuilder().insert("users", {"name": "Ann", "age": 30}).build()

        self.assertEqual(query.text, "INSERT INTO users (name, age) VALUES (?, ?)")
        self.assertEqual(query.parameters, ("Ann", 30))
        self.assertIs(query.kind, StatementKind.INSERT)

    def test_update_set_parameters_come_before_where(self) -> None:
        query = (
            RelationalQueryBuilder()
            .update("users", {"status": "inactive"})
            .where("last_login", "<", "2020-01-01")
            .build()
        )

        self.assertEqual(query.text, "UPDATE users SET status = ? WHERE last_login < ?")
        self.assertEqual(query.parameters, ("inactive", "2020-01-01"))
        self.assertIs(query.kind, StatementKind.UPDATE)

    def test_delete(self) -> None:
        query = RelationalQueryBuilder().delete("sessions").where("expired", True).limit(100).build()

        self.assertEqual(query.text, "DELETE FROM sessions WHERE expired = ? LIMIT 100")
        self.assertEqual(query.parameters, (True,))
        self.assertIs(query.kind, StatementKind.DELETE)

    def test_insert_rejects_where(self) -> None:
        builder = RelationalQueryBuilder().insert("users", {"name": "Ann"}).where("id", 1)

        with self.assertRaises(ValidationError) as ctx:
            builder.build()
        self.assertIn("INSERT does not support: WHERE", str(ctx.exception))

    def test_update_rejects_projection(self) -> None:
        builder = select("id").update("users", {"a": 1})

        with self.assertRaises(ValidationError) as ctx:
            builder.build()
        self.assertIn("SELECT", str(ctx.exception))

    def test_insert_requires_values(self) -> None:
        with self.assertRaises(ValidationError):
            RelationalQueryBuilder().insert("users", {})


class TestRelationalValidation(unittest.TestCase):
    def test_missing_table(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            select("id").build()
        self.assertEqual(str(ctx.exception), "FROM table is required")

    def test_missing_projection(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            RelationalQueryBuilder().from_("users").build()
        self.assertEqual(str(ctx.exception), "SELECT fields are required")

    def test_invalid_arguments(self) -> None:
        base = select("id").from_("t")
        cases = [
            lambda: base.where("a", "~~", 1),
            lambda: base.where("", 1),
            lambda: base.where_in("a", []),
            lambda: base.where("a", "IN", "abc"),
            lambda: base.where("a", "BETWEEN", [1, 2, 3]),
            lambda: base.where("a", "IS NULL", 1),
            lambda: base.limit(-1),
            lambda: base.limit(True),
            lambda: base.offset(1.5),
            lambda: base.join("", "x = y"),
            lambda: base.join("b", "b.id = t.id", "CROSS"),
            lambda: base.order_by("a", "up"),
            lambda: base.from_("   "),
            lambda: base.group_by(["a", ""]),
        ]
        for case in cases:
            with self.subTest(case=case):
                with self.assertRaises(ValidationError):
                    case()

    def test_validation_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(ValidationError, ValueError))


class TestCostHeuristic(unittest.TestCase):
    def test_base_cost(self) -> None:
        self.assertEqual(select("id").from_("t").build().estimated_cost, 1.0)

    def test_components(self) -> None:
        base = select("id").from_("t")

        self.assertEqual(base.join("a", "a.x = t.x").join("b", "b.x = t.x").build().estimated_cost, 5.0)
        self.assertEqual(base.where("a", 1).where("b", 2).build().estimated_cost, 2.0)
        self.assertEqual(base.order_by("a").order_by("b").build().estimated_cost, 4.0)
        self.assertEqual(base.group_by(["a", "b"]).build().estimated_cost, 3.0)

    def test_small_limit_halves_cost(self) -> None:
        base = select("id").from_("t").join("a", "a.x = t.x")

        self.assertEqual(base.limit(50).build().estimated_cost, 1.5)
        self.assertEqual(base.limit(100).build().estimated_cost, 3.0)
        self.assertEqual(base.limit(0).build().estimated_cost, 1.5)

    def test_cost_grows_with_joins(self) -> None:
        base = select("id").from_("t").where("a", 1)
        joined = base.join("a", "a.x = t.x").join("b", "b.x = t.x")

        self.assertGreater(joined.estimate_cost(), base.estimate_cost())


if __name__ == "__main__":
    unittest.main()
