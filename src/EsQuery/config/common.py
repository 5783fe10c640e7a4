from __future__ import annotations

"""Shared helpers for configuration loading and validation."""

import re
from typing import Any, Mapping

_DURATION_RE = re.compile(r"^\d+(?:nanos|micros|ms|s|m|h|d)$")


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
    """Return a required field value, raising ValueError naming ``config_key``."""
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_str(value: Any, config_key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_bool(value: Any, config_key: str) -> bool:
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


def expect_hosts(value: Any, config_key: str) -> tuple[str, ...]:
    """Accept hosts as a comma-separated string or a list of strings."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = []
        for idx, item in enumerate(value):
            if not isinstance(item, str):
                raise TypeError(f"{config_key}[{idx}] must be a string")
            items.append(item)
    else:
        raise TypeError(f"{config_key} must be a string or a list of strings")
    return tuple(item.strip() for item in items if item.strip())


def is_duration(value: str) -> bool:
    """Return whether ``value`` is an engine time unit such as ``5m`` or ``30s``."""
    return bool(_DURATION_RE.match(value.strip()))
