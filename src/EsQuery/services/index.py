"""Index handle: single-document operations and query factory."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from EsQuery.core.errors import NotFoundError
from EsQuery.core.query import Query, QueryDefaults
from EsQuery.core.schema import HitEnvelope, SchemaDescriptor, projection, to_body, to_document
from EsQuery.transport.base import SearchTransport
from EsQuery.transport.client import DEFAULT_DOC_TYPE, split_names


class Index:
    """One index (or a comma-joined group of indices) bound to a schema.

    Instances are created by ``SearchClient.index``. Searches run against
    every name; single-document operations target the first one.
    """

    def __init__(
        self,
        names: str | Sequence[str],
        schema: SchemaDescriptor,
        transport: SearchTransport,
        *,
        doc_type: str = DEFAULT_DOC_TYPE,
        query_defaults: QueryDefaults | None = None,
    ) -> None:
        self._names = tuple(split_names(names))
        if not self._names:
            raise ValueError("index name must not be empty")
        self._schema = schema
        self._transport = transport
        self._doc_type = doc_type
        self._query_defaults = query_defaults or QueryDefaults()

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    @property
    def schema(self) -> SchemaDescriptor:
        return self._schema

    @property
    def transport(self) -> SearchTransport:
        return self._transport

    @property
    def doc_type(self) -> str:
        return self._doc_type

    def set_doc_type(self, doc_type: str) -> None:
        """Override the document type (``_doc`` by default).

        Custom types only exist on old engine versions; keep the default for
        forward compatibility.
        """
        self._doc_type = doc_type

    def query(self) -> Query:
        """Return a new empty query bound to this index."""
        return Query(self, self._query_defaults)

    def save(self, doc_id: str, document: Any) -> dict[str, Any]:
        """Create or replace a document.

        Args:
            doc_id: Document id.
            document: Dataclass instance or mapping; metadata-only fields are not stored.

        Returns:
            Raw engine response.
        """
        body = to_body(self._schema, document)
        return self._transport.index_document(self._names[0], self._doc_type, doc_id, body)

    def find(self, doc_id: str) -> Any | None:
        """Fetch one document by id.

        Returns:
            Document instance, or None when no document has this id.

        Raises:
            TransportError: On any failure other than a missing document.
            DecodeError: If the stored body does not fit the schema.
        """
        try:
            payload = self._transport.get_document(
                self._names[0],
                self._doc_type,
                doc_id,
                source=projection(self._schema),
            )
        except NotFoundError:
            return None
        if payload.get("found") is False:
            return None
        envelope = HitEnvelope.from_hit(payload)
        if not envelope.index:
            envelope = HitEnvelope(
                id=envelope.id or doc_id,
                index=self._names[0],
                type=envelope.type,
                version=envelope.version,
            )
        return to_document(self._schema, payload.get("_source"), envelope)

    def update(self, doc_id: str, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Apply a partial update to a document."""
        return self._transport.update_document(self._names[0], self._doc_type, doc_id, updates)

    def delete(self, doc_id: str) -> dict[str, Any]:
        return self._transport.delete_document(self._names[0], self._doc_type, doc_id)
