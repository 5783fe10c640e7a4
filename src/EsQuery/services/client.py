"""Search client: connection bootstrap, index administration, index handles."""

from __future__ import annotations

import json
from typing import Any, Mapping

from EsQuery.core.query import QueryDefaults
from EsQuery.core.schema import SchemaDescriptor, describe, raw_schema
from EsQuery.services.index import Index
from EsQuery.transport.client import DEFAULT_DOC_TYPE, EsApiClient


class SearchClient:
    """Application entry point wrapping an ``EsApiClient``."""

    def __init__(
        self,
        api: EsApiClient,
        *,
        doc_type: str = DEFAULT_DOC_TYPE,
        query_defaults: QueryDefaults | None = None,
    ) -> None:
        self._api = api
        self._doc_type = doc_type
        self._query_defaults = query_defaults or QueryDefaults()

    @property
    def api(self) -> EsApiClient:
        """Underlying low-level client."""
        return self._api

    def close(self) -> None:
        self._api.close()

    def __enter__(self) -> SearchClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def index(self, name: str, document_type: type | SchemaDescriptor | None = None) -> Index:
        """Return a handle on one or more comma-separated indices.

        Args:
            name: Index name, or several joined by commas.
            document_type: Dataclass or prepared schema; None yields plain dicts.

        Returns:
            Index handle bound to the schema.
        """
        if document_type is None:
            schema = raw_schema()
        elif isinstance(document_type, SchemaDescriptor):
            schema = document_type
        else:
            schema = describe(document_type)
        return Index(
            name,
            schema,
            self._api,
            doc_type=self._doc_type,
            query_defaults=self._query_defaults,
        )

    def create_index(self, name: str, mapping: str | Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Create an index, optionally with settings/mappings.

        Args:
            name: Index name.
            mapping: Index body as JSON text or mapping.

        Raises:
            ValueError: If ``mapping`` is not valid JSON.
            TransportError: If the engine rejects the request.
        """
        body: Mapping[str, Any] | None
        if isinstance(mapping, str):
            try:
                body = json.loads(mapping)
            except json.JSONDecodeError as error:
                raise ValueError(f"index mapping is not valid JSON: {error}") from error
        else:
            body = mapping
        return self._api.create_index(name, body)

    def delete_index(self, name: str) -> dict[str, Any]:
        """Delete one or more comma-separated indices."""
        return self._api.delete_index(name)

    def index_exists(self, name: str) -> bool:
        return self._api.index_exists(name)

    def ping(self) -> bool:
        return self._api.ping()

    def health(self) -> dict[str, Any]:
        """Return the cluster health document."""
        return self._api.cluster_health()
