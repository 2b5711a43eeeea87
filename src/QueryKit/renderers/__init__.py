"""Output renderers for command results.

Provides abstraction and implementations for writing built queries to
various output formats (console, JSON), plus the search DSL serializer.

The module exports the OutputWriter base for creating new output formats,
and a factory function to instantiate writers based on configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from QueryKit.renderers.base import MultiOutputWriter, OutputWriter
from QueryKit.renderers.console import ConsoleOutputWriter, render_text
from QueryKit.renderers.document import predicate_from_dict, predicate_to_dict, to_document
from QueryKit.renderers.json import JsonFileWriter, render_json

if TYPE_CHECKING:
    from QueryKit.config import AppConfig


def create_output_writer(config: AppConfig) -> OutputWriter:
    """Create output writer based on config.

    Args:
        config: Application configuration.

    Returns:
        Writer fanning out to every configured format.

    Raises:
        ValueError: If no output format is configured.
    """
    writers: list[OutputWriter] = []
    if "console" in config.output.formats:
        writers.append(ConsoleOutputWriter())
    if "json" in config.output.formats:
        writers.append(JsonFileWriter(config.output.base_dir))

    if not writers:
        raise ValueError("No output writers configured")
    return MultiOutputWriter(writers)


__all__ = [
    "OutputWriter",
    "ConsoleOutputWriter",
    "JsonFileWriter",
    "MultiOutputWriter",
    "render_json",
    "render_text",
    "to_document",
    "predicate_to_dict",
    "predicate_from_dict",
    "create_output_writer",
]
