"""Base classes for output writers.

Provides abstraction for writing built queries and their analysis to console
or files. Separates control flow from output logic for better testability.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from QueryKit.services import AnalysisReport, BuiltQuery


class OutputWriter(ABC):
    """Abstract base class for command output writers."""

    @abstractmethod
    def write_query_result(
        self,
        name: str,
        query: BuiltQuery,
        report: AnalysisReport,
    ) -> None:
        """Write one built query.

        Args:
            name: Query definition name.
            query: Built relational or search query.
            report: Analyzer result for the query.
        """

    @abstractmethod
    def finalize(self, action: str) -> None:
        """Finalize output (e.g., write accumulated results to file).

        Args:
            action: The CLI command name (e.g., 'build').
        """


@dataclass(slots=True)
class MultiOutputWriter(OutputWriter):
    """Delegate output to multiple writers."""

    writers: Sequence[OutputWriter]

    def write_query_result(
        self,
        name: str,
        query: BuiltQuery,
        report: AnalysisReport,
    ) -> None:
        """Send the query to all writers."""
        for writer in self.writers:
            writer.write_query_result(name, query, report)

    def finalize(self, action: str) -> None:
        """Finalize all writers."""
        for writer in self.writers:
            writer.finalize(action)
