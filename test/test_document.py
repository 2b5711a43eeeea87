"""Tests for search DSL serialization and parsing."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryKit.builders import search
from QueryKit.core.errors import ValidationError
from QueryKit.core.predicates import (
    Avg,
    Bool,
    DateHistogram,
    Match,
    MatchAll,
    MatchPhrase,
    MultiMatch,
    Range,
    RangeBounds,
    Sum,
    Term,
    Terms,
    TermsAggregation,
)
from QueryKit.renderers.document import (
    aggregation_from_dict,
    predicate_from_dict,
    predicate_to_dict,
    to_document,
)


class TestPredicateFromDict(unittest.TestCase):
    def test_leaf_predicates(self) -> None:
        cases = [
            ({"match_all": {}}, MatchAll()),
            ({"match": {"title": "python"}}, Match("title", "python")),
            ({"match_phrase": {"title": "design patterns"}}, MatchPhrase("title", "design patterns")),
            ({"term": {"status": "active"}}, Term("status", "active")),
            ({"terms": {"tag": ["a", "b"]}}, Terms("tag", ("a", "b"))),
            ({"range": {"price": {"gte": 10, "lt": 20}}}, Range("price", RangeBounds(gte=10, lt=20))),
            (
                {"multi_match": {"query": "laptop", "fields": ["name", "description"]}},
                MultiMatch("laptop", ("name", "description")),
            ),
        ]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                self.assertEqual(predicate_from_dict(raw), expected)

    def test_bool_accepts_single_clause_or_list(self) -> None:
        parsed = predicate_from_dict(
            {
                "bool": {
                    "must": {"match": {"title": "x"}},
                    "should": [{"term": {"a": 1}}, {"term": {"b": 2}}],
                }
            }
        )

        self.assertEqual(
            parsed,
            Bool(must=(Match("title", "x"),), should=(Term("a", 1), Term("b", 2))),
        )

    def test_invalid_predicates(self) -> None:
        cases = [
            {"geo_distance": {"loc": "1,2"}},
            {"match": {"a": 1, "b": 2}},
            {"match": {"a": 1}, "term": {"b": 2}},
            {"terms": {"tag": "a"}},
            {"bool": {"maybe": []}},
            {"multi_match": {"fields": ["a"]}},
            {"range": {"price": {}}},
            "match_all",
        ]
        for raw in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    predicate_from_dict(raw)

    def test_parsed_document_query_matches_builder(self) -> None:
        query = (
            search()
            .bool_query()
            .must(MultiMatch("laptop", ("name",)))
            .must_not(Range("price", RangeBounds(gt=3000)))
            .done()
            .build()
        )

        self.assertEqual(predicate_from_dict(to_document(query)["query"]), query.predicate)


class TestAggregationFromDict(unittest.TestCase):
    def test_supported_aggregations(self) -> None:
        self.assertEqual(aggregation_from_dict({"avg": {"field": "price"}}), Avg("price"))
        self.assertEqual(aggregation_from_dict({"sum": {"field": "total"}}), Sum("total"))
        self.assertEqual(aggregation_from_dict({"terms": {"field": "brand"}}), TermsAggregation("brand", 10))
        self.assertEqual(
            aggregation_from_dict({"date_histogram": {"field": "ts", "interval": "week"}}),
            DateHistogram("ts", "week"),
        )

    def test_invalid_aggregations(self) -> None:
        for raw in ({"max": {"field": "a"}}, {"avg": {}}, {"date_histogram": {"field": "ts"}}):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    aggregation_from_dict(raw)


class TestToDocument(unittest.TestCase):
    def test_index_is_not_serialized(self) -> None:
        doc = to_document(search().index("products").match("name", "x").build())

        self.assertEqual(doc, {"query": {"match": {"name": "x"}}})

    def test_bool_omits_empty_clauses(self) -> None:
        self.assertEqual(
            predicate_to_dict(Bool(must_not=(Term("a", 1),))),
            {"bool": {"must_not": [{"term": {"a": 1}}]}},
        )

    def test_empty_source_list_is_kept(self) -> None:
        self.assertEqual(to_document(search().source([]).build())["_source"], [])


if __name__ == "__main__":
    unittest.main()
