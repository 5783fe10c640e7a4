"""HTTP transport to the search engine."""

from __future__ import annotations

from EsQuery.transport.base import SearchTransport
from EsQuery.transport.client import EsApiClient

__all__ = ["EsApiClient", "SearchTransport"]
