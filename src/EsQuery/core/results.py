"""Translation of raw search responses into documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from EsQuery.core.errors import EmptyResultError
from EsQuery.core.schema import HitEnvelope, SchemaDescriptor, to_document


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One page of translated documents.

    Attributes:
        documents: Documents in engine hit order.
        total: Number of matches reported by the engine; may exceed the page size.
    """

    documents: Sequence[Any]
    total: int

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self):
        return iter(self.documents)


def extract_hits(response: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Return the hit list of a search response.

    Raises:
        EmptyResultError: If the response carries no hit container.
    """
    container = response.get("hits") if isinstance(response, Mapping) else None
    hits = container.get("hits") if isinstance(container, Mapping) else None
    if not isinstance(hits, list):
        raise EmptyResultError("Hits result not found")
    return hits


def total_hits(response: Mapping[str, Any]) -> int:
    """Return the total match count in either the ES 6 or the ES 7+ shape."""
    total = response.get("hits", {}).get("total", 0)
    if isinstance(total, Mapping):
        total = total.get("value", 0)
    return int(total or 0)


def translate_hits(schema: SchemaDescriptor, response: Mapping[str, Any]) -> tuple[list[Any], int]:
    """Convert every hit of a response into a document.

    Args:
        schema: Schema of the target document type.
        response: Raw search or scroll response.

    Returns:
        Tuple of (documents in hit order, total hit count).

    Raises:
        EmptyResultError: If the hit container is missing.
        DecodeError: If a hit body does not fit the schema.
    """
    hits = extract_hits(response)
    documents = [to_document(schema, hit.get("_source"), HitEnvelope.from_hit(hit)) for hit in hits]
    return documents, total_hits(response)
