from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from QueryKit.config.analysis import check_analysis, load_analysis
from QueryKit.config.output import OutputConfig, check_output, load_output
from QueryKit.config.queries import QueryDefinition, check_queries, load_queries
from QueryKit.config.runtime import RuntimeConfig, check_runtime, load_runtime
from QueryKit.services.analyzer import AnalysisThresholds


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    output: OutputConfig
    analysis: AnalysisThresholds
    queries: tuple[QueryDefinition, ...]


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    output = load_output(raw)
    analysis = load_analysis(raw)
    queries = load_queries(raw)

    check_runtime(runtime)
    check_output(output)
    check_analysis(analysis)
    check_queries(queries)

    return AppConfig(
        runtime=runtime,
        output=output,
        analysis=analysis,
        queries=queries,
    )


def load_config(path: Path) -> AppConfig:
    """Load YAML config file without default merge."""
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(
    config_path: Path, default_path: Path = Path("config/default.yml")
) -> AppConfig:
    """Load config by merging defaults and optional override.

    Mappings are merged recursively; lists (including ``queries``) in the
    override replace the default list.
    """
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    merged = merge_config_dicts(base, override)
    return parse_config_dict(merged)


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
