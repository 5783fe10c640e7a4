"""Query domain configuration: document type and page/scroll defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from EsQuery.config.common import expect_int, expect_str, get_section, is_duration


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Defaults applied to every index handle and query."""

    doc_type: str = "_doc"
    page_size: int = 100
    scroll_alive: str = "5m"
    scroll_size: int = 1000


def load_query(raw: Mapping[str, Any]) -> QueryConfig:
    """Load the optional ``query`` section; missing keys keep their defaults."""
    section = get_section(raw, "query", required=False)
    defaults = QueryConfig()
    return QueryConfig(
        doc_type=expect_str(section.get("doc_type", defaults.doc_type), "query.doc_type"),
        page_size=expect_int(section.get("page_size", defaults.page_size), "query.page_size"),
        scroll_alive=expect_str(section.get("scroll_alive", defaults.scroll_alive), "query.scroll_alive"),
        scroll_size=expect_int(section.get("scroll_size", defaults.scroll_size), "query.scroll_size"),
    )


def check_query(config: QueryConfig) -> None:
    """Validate query domain constraints.

    Raises:
        ValueError: If values violate query constraints.
    """
    if not config.doc_type.strip():
        raise ValueError("query.doc_type must not be empty")
    if config.page_size < 0:
        raise ValueError("query.page_size must be >= 0")
    if config.scroll_size <= 0:
        raise ValueError("query.scroll_size must be positive")
    if not is_duration(config.scroll_alive):
        raise ValueError("query.scroll_alive must be a time unit such as 30s, 5m or 1h")
