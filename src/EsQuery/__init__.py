"""EsQuery: typed boolean queries and scroll streaming over Elasticsearch."""

from __future__ import annotations

from EsQuery.core.clauses import exists, gt, gte, lt, lte, match, match_phrase, range_, term, terms
from EsQuery.core.errors import (
    DecodeError,
    EmptyResultError,
    EsQueryError,
    NotFoundError,
    ScrollExhaustedError,
    TransportError,
)
from EsQuery.core.query import Query, QueryDefaults
from EsQuery.core.results import SearchResult
from EsQuery.core.schema import SchemaDescriptor, describe, es_field, raw_schema
from EsQuery.core.scroll import CursorState, ScrollCursor
from EsQuery.services import Index, SearchClient, create_search_client
from EsQuery.transport import EsApiClient

__all__ = [
    "CursorState",
    "DecodeError",
    "EmptyResultError",
    "EsApiClient",
    "EsQueryError",
    "Index",
    "NotFoundError",
    "Query",
    "QueryDefaults",
    "SchemaDescriptor",
    "ScrollCursor",
    "ScrollExhaustedError",
    "SearchClient",
    "SearchResult",
    "TransportError",
    "create_search_client",
    "describe",
    "es_field",
    "exists",
    "gt",
    "gte",
    "lt",
    "lte",
    "match",
    "match_phrase",
    "range_",
    "raw_schema",
    "term",
    "terms",
]
