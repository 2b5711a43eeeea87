from __future__ import annotations

"""Public configuration API for QueryKit."""

from QueryKit.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from QueryKit.config.output import OutputConfig
from QueryKit.config.queries import QueryDefinition, parse_query_definition
from QueryKit.config.runtime import RuntimeConfig

__all__ = [
    "RuntimeConfig",
    "OutputConfig",
    "QueryDefinition",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
    "parse_query_definition",
]
