"""Console text output renderers.

Renders a built query plus its analysis into human-friendly text.
Provides ConsoleOutputWriter implementation for command output.
"""

from __future__ import annotations

import json

from QueryKit.core.models import RelationalQuery
from QueryKit.renderers.base import OutputWriter
from QueryKit.renderers.document import to_document
from QueryKit.services import AnalysisReport, BuiltQuery
from QueryKit.utils.log import log


def render_text(name: str, query: BuiltQuery, report: AnalysisReport) -> str:
    """Render one query into a human-readable text block.

    Args:
        name: Query definition name.
        query: Built relational or search query.
        report: Analyzer result.

    Returns:
        A formatted string ready to be printed.
    """
    lines: list[str] = []
    if isinstance(query, RelationalQuery):
        lines.append(f"[{name}] {query.kind.value} on {query.table}")
        lines.append(f"   SQL: {query.text}")
        params = ", ".join(json.dumps(p, ensure_ascii=False, default=str) for p in query.parameters)
        lines.append(f"   Parameters: [{params}]")
        lines.append(f"   Estimated cost: {query.estimated_cost}")
    else:
        lines.append(f"[{name}] search on {query.index or '-'}")
        payload = json.dumps(to_document(query), ensure_ascii=False, indent=2, default=str)
        for line in payload.splitlines():
            lines.append(f"   {line}")

    lines.append(f"   Rating: {report.rating.value}")
    for note in report.notes:
        lines.append(f"   - {note}")
    return "\n".join(lines) + "\n"


class ConsoleOutputWriter(OutputWriter):
    """Write results to console via logging."""

    def write_query_result(
        self,
        name: str,
        query: BuiltQuery,
        report: AnalysisReport,
    ) -> None:
        """Write one query to console.

        Args:
            name: Query definition name.
            query: Built query.
            report: Analyzer result.
        """
        for line in render_text(name, query, report).splitlines():
            log.info(line)

    def finalize(self, action: str) -> None:
        """No-op for console output."""
