"""JSON output renderers.

Renders built queries and their analysis into JSON-serializable objects.
Provides JsonFileWriter implementation for command output.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from QueryKit.core.models import RelationalQuery
from QueryKit.renderers.base import OutputWriter
from QueryKit.renderers.document import to_document
from QueryKit.services import AnalysisReport, BuiltQuery
from QueryKit.utils.log import log


def render_json(name: str, query: BuiltQuery, report: AnalysisReport) -> dict:
    """Render one query into a JSON-serializable dict.

    Relational queries carry ``sql``/``parameters``/``estimated_cost``;
    search queries carry the DSL ``document`` and the ``index`` name.
    """
    analysis = {"rating": report.rating.value, "notes": list(report.notes)}
    if isinstance(query, RelationalQuery):
        return {
            "name": name,
            "type": "relational",
            "kind": query.kind.value,
            "sql": query.text,
            "parameters": [_jsonable(p) for p in query.parameters],
            "estimated_cost": query.estimated_cost,
            "analysis": analysis,
        }
    return {
        "name": name,
        "type": "search",
        "index": query.index,
        "document": to_document(query),
        "analysis": analysis,
    }


class JsonFileWriter(OutputWriter):
    """Accumulate results and write to JSON file on finalize."""

    def __init__(self, base_dir: str) -> None:
        """Initialize JSON writer.

        Args:
            base_dir: Base output directory.
        """
        self.output_dir = Path(base_dir) / "json"
        self.all_results: list[dict] = []
        self.output_path: Path | None = None

    def write_query_result(
        self,
        name: str,
        query: BuiltQuery,
        report: AnalysisReport,
    ) -> None:
        """Accumulate one query for later writing."""
        self.all_results.append(render_json(name, query, report))

    def finalize(self, action: str) -> None:
        """Write accumulated results to JSON file.

        Args:
            action: The CLI command name (used in filename).
        """
        payload = json.dumps(self.all_results, ensure_ascii=False, indent=2, default=str)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.output_path = self.output_dir / f"{action}_{timestamp}.json"
        self.output_path.write_text(payload, encoding="utf-8")
        log.info("JSON saved to %s", self.output_path)


def _jsonable(value):
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    return value
