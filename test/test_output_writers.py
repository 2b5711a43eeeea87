"""Tests for console and JSON output writers."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryKit.builders import search, select
from QueryKit.renderers import JsonFileWriter, MultiOutputWriter, OutputWriter, render_json, render_text
from QueryKit.services import analyze


class _RecordingWriter(OutputWriter):
    def __init__(self) -> None:
        self.names: list[str] = []
        self.finalized: list[str] = []

    def write_query_result(self, name, query, report) -> None:
        self.names.append(name)

    def finalize(self, action: str) -> None:
        self.finalized.append(action)


class TestRenderers(unittest.TestCase):
    def test_render_json_relational(self) -> None:
        query = select("id").from_("users").where_in("id", [1, 2]).build()

        payload = render_json("ids", query, analyze(query))

        self.assertEqual(payload["type"], "relational")
        self.assertEqual(payload["kind"], "SELECT")
        self.assertEqual(payload["sql"], "SELECT id FROM users WHERE id IN (?, ?)")
        self.assertEqual(payload["parameters"], [1, 2])
        self.assertEqual(payload["estimated_cost"], 1.5)
        self.assertEqual(payload["analysis"], {"rating": "Good", "notes": []})

    def test_render_json_search(self) -> None:
        query = search().index("docs").term("lang", "en").build()

        payload = render_json("docs", query, analyze(query))

        self.assertEqual(payload["type"], "search")
        self.assertEqual(payload["index"], "docs")
        self.assertEqual(payload["document"], {"query": {"term": {"lang": "en"}}})

    def test_render_text_contains_sql_and_rating(self) -> None:
        query = select("id").from_("users").build()

        text = render_text("all_ids", query, analyze(query))

        self.assertIn("[all_ids] SELECT on users", text)
        self.assertIn("SQL: SELECT id FROM users", text)
        self.assertIn("Rating: Fair", text)


class TestWriters(unittest.TestCase):
    def test_json_writer_writes_all_results_on_finalize(self) -> None:
        first = select("id").from_("users").limit(1).build()
        second = search().match("title", "python").build()

        with tempfile.TemporaryDirectory() as tmp:
            writer = JsonFileWriter(tmp)
            writer.write_query_result("first", first, analyze(first))
            writer.write_query_result("second", second, analyze(second))
            writer.finalize("build")

            self.assertIsNotNone(writer.output_path)
            self.assertEqual(writer.output_path.parent, Path(tmp) / "json")
            self.assertTrue(writer.output_path.name.startswith("build_"))
            data = json.loads(writer.output_path.read_text(encoding="utf-8"))

        self.assertEqual([item["name"] for item in data], ["first", "second"])
        self.assertEqual(data[0]["sql"], "SELECT id FROM users LIMIT 1")

    def test_multi_writer_fans_out(self) -> None:
        a, b = _RecordingWriter(), _RecordingWriter()
        query = search().build()
        writer = MultiOutputWriter([a, b])

        writer.write_query_result("q", query, analyze(query))
        writer.finalize("build")

        self.assertEqual(a.names, ["q"])
        self.assertEqual(b.finalized, ["build"])


if __name__ == "__main__":
    unittest.main()
