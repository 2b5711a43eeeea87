"""Command implementations for QueryKit CLI.

Holds the build logic, separated from CLI parameter handling and output
formatting.
"""

from __future__ import annotations

from dataclasses import dataclass

from QueryKit.config import AppConfig
from QueryKit.renderers import OutputWriter
from QueryKit.services import analyze
from QueryKit.utils.log import log


@dataclass(slots=True)
class BuildCommand:
    """Build and analyze every configured query.

    Each definition is built, analyzed with the configured thresholds and
    handed to the OutputWriter.
    """

    config: AppConfig
    output_writer: OutputWriter

    def execute(self) -> None:
        """Execute the build for all configured queries.

        Raises:
            ValidationError: If a definition cannot be built.
        """
        total = len(self.config.queries)
        for idx, definition in enumerate(self.config.queries, start=1):
            log.debug("Building query %d/%d name=%s type=%s", idx, total, definition.name, definition.kind)
            if total > 1:
                log.info("=== Query %d/%d ===", idx, total)

            query = definition.builder.build()
            report = analyze(query, self.config.analysis)
            log.info("name=%s rating=%s notes=%d", definition.name, report.rating.value, len(report.notes))

            self.output_writer.write_query_result(definition.name, query, report)
