from __future__ import annotations

"""Shared helpers for configuration loading and validation.

Every helper takes the dotted config key (e.g. ``queries[0].where[1].op``) so
error messages point at the offending entry.
"""

from typing import Any, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from root config.

    Args:
        raw: Root configuration mapping.
        key: Section name.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value from a section.

    Raises:
        ValueError: If field is missing.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def get_optional_value(section: Mapping[str, Any], field: str, default: Any) -> Any:
    """Return optional field value with default."""
    return section.get(field, default)


def expect_str(value: Any, config_key: str) -> str:
    """Validate and return string value."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_bool(value: Any, config_key: str) -> bool:
    """Validate and return boolean value."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_float(value: Any, config_key: str) -> float:
    """Validate and return float value from numeric input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return float(value)


def expect_mapping(value: Any, config_key: str) -> Mapping[str, Any]:
    """Validate a mapping value."""
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    return value


def expect_list(value: Any, config_key: str) -> list[Any]:
    """Validate a list value."""
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    return value


def expect_str_list(value: Any, config_key: str) -> list[str]:
    """Validate a list of strings; a single string is accepted as one item."""
    if isinstance(value, str):
        return [value]
    items = expect_list(value, config_key)
    for idx, item in enumerate(items):
        if not isinstance(item, str):
            raise TypeError(f"{config_key}[{idx}] must be a string")
    return items


def reject_unknown_keys(section: Mapping[str, Any], allowed: set[str], config_key: str) -> None:
    """Raise if a mapping has keys outside ``allowed``.

    Raises:
        ValueError: Naming the unknown keys.
    """
    unknown = {str(k) for k in section.keys()} - allowed
    if unknown:
        raise ValueError(f"{config_key} has unknown key(s): {sorted(unknown)}")
