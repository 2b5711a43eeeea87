"""Analyzer threshold configuration."""

from __future__ import annotations

from typing import Any, Mapping

from QueryKit.config.common import (
    expect_float,
    expect_int,
    get_optional_value,
    get_section,
    reject_unknown_keys,
)
from QueryKit.services.analyzer import DEFAULT_THRESHOLDS, AnalysisThresholds


def load_analysis(raw: Mapping[str, Any]) -> AnalysisThresholds:
    """Load analyzer thresholds from the optional ``analysis`` section.

    Args:
        raw: Root configuration mapping.

    Returns:
        Thresholds; unset keys keep the analyzer defaults.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If unknown keys are present.
    """
    section = get_section(raw, "analysis", required=False)
    reject_unknown_keys(section, {"max_cost", "large_result_size", "sort_required_size"}, "analysis")
    return AnalysisThresholds(
        max_cost=expect_float(
            get_optional_value(section, "max_cost", DEFAULT_THRESHOLDS.max_cost),
            "analysis.max_cost",
        ),
        large_result_size=expect_int(
            get_optional_value(section, "large_result_size", DEFAULT_THRESHOLDS.large_result_size),
            "analysis.large_result_size",
        ),
        sort_required_size=expect_int(
            get_optional_value(section, "sort_required_size", DEFAULT_THRESHOLDS.sort_required_size),
            "analysis.sort_required_size",
        ),
    )


def check_analysis(config: AnalysisThresholds) -> None:
    """Validate analyzer thresholds.

    Raises:
        ValueError: If a threshold is negative.
    """
    if config.max_cost < 0:
        raise ValueError("analysis.max_cost must not be negative")
    if config.large_result_size < 0:
        raise ValueError("analysis.large_result_size must not be negative")
    if config.sort_required_size < 0:
        raise ValueError("analysis.sort_required_size must not be negative")
