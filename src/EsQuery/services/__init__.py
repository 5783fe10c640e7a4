"""Service layer for EsQuery.

Provides the search client, index handles and the factory building them
from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from EsQuery.core.errors import TransportError
from EsQuery.core.query import QueryDefaults
from EsQuery.services.client import SearchClient
from EsQuery.services.index import Index
from EsQuery.transport.client import EsApiClient
from EsQuery.utils.log import log

if TYPE_CHECKING:
    from EsQuery.config import AppConfig


def create_search_client(config: AppConfig) -> SearchClient:
    """Create a search client from configuration.

    Args:
        config: Application configuration.

    Returns:
        Connected SearchClient instance.

    Raises:
        TransportError: If health checking is enabled and no host answers.
    """
    conn = config.connection
    api = EsApiClient(
        conn.hosts,
        timeout=conn.timeout,
        compress=conn.gzip,
        username=conn.username or None,
        password=conn.password or None,
        verify_certs=conn.verify_certs,
    )
    if conn.healthcheck and not api.ping():
        api.close()
        raise TransportError(f"no search engine node available at {', '.join(conn.hosts)}")
    log.info("Search client ready: hosts=%s", ", ".join(conn.hosts))

    return SearchClient(
        api,
        doc_type=config.query.doc_type,
        query_defaults=QueryDefaults(
            page_size=config.query.page_size,
            scroll_alive=config.query.scroll_alive,
            scroll_size=config.query.scroll_size,
        ),
    )


__all__ = [
    "Index",
    "SearchClient",
    "create_search_client",
]
