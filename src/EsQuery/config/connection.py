"""Connection domain configuration for the search engine cluster."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from EsQuery.config.common import (
    expect_bool,
    expect_float,
    expect_hosts,
    expect_str,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    """Store validated cluster connection settings.

    The password itself never lives in the YAML file: ``password_env`` names
    the environment variable it is read from.
    """

    hosts: tuple[str, ...]
    timeout: float
    gzip: bool
    verify_certs: bool
    healthcheck: bool
    username: str
    password_env: str
    password: str


def load_connection(raw: Mapping[str, Any]) -> ConnectionConfig:
    """Load connection domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed connection configuration.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "connection", required=True)
    password_env = expect_str(section.get("password_env", "ES_PASSWORD"), "connection.password_env")
    return ConnectionConfig(
        hosts=expect_hosts(get_required_value(section, "hosts", "connection.hosts"), "connection.hosts"),
        timeout=expect_float(section.get("timeout", 30), "connection.timeout"),
        gzip=expect_bool(section.get("gzip", True), "connection.gzip"),
        verify_certs=expect_bool(section.get("verify_certs", True), "connection.verify_certs"),
        healthcheck=expect_bool(section.get("healthcheck", True), "connection.healthcheck"),
        username=expect_str(section.get("username", ""), "connection.username"),
        password_env=password_env,
        password=_load_password_from_env(password_env),
    )


def check_connection(config: ConnectionConfig) -> None:
    """Validate connection domain constraints.

    Raises:
        ValueError: If values violate connection constraints.
    """
    if not config.hosts:
        raise ValueError("connection.hosts must include at least one host")
    for host in config.hosts:
        if not host.startswith(("http://", "https://")):
            raise ValueError(f"connection.hosts entries must start with http:// or https://: {host}")
    if config.timeout <= 0:
        raise ValueError("connection.timeout must be positive")
    if config.username and not config.password:
        raise ValueError(
            f"connection.username is set but {config.password_env} environment variable is not. "
            "Set it in your .env file or shell environment."
        )


def _load_password_from_env(password_env: str) -> str:
    if not password_env.strip():
        return ""
    return os.getenv(password_env, "")
