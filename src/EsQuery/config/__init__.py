from __future__ import annotations

"""Public configuration API for EsQuery."""

from EsQuery.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from EsQuery.config.connection import ConnectionConfig
from EsQuery.config.query import QueryConfig
from EsQuery.config.runtime import RuntimeConfig

__all__ = [
    "RuntimeConfig",
    "ConnectionConfig",
    "QueryConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
]
