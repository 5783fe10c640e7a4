"""Transport protocol consumed by the query core."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class SearchTransport(Protocol):
    """Request/response boundary to the search engine.

    Implementations raise ``TransportError`` for network and engine failures,
    ``ScrollExhaustedError`` from ``scroll_next`` once a cursor has no more
    hits, and ``NotFoundError`` from ``get_document`` for a missing document.
    """

    def search(
        self,
        indices: Sequence[str],
        body: Mapping[str, Any],
        *,
        scroll: str | None = None,
    ) -> dict[str, Any]:
        """Run a search, optionally opening a scroll cursor."""
        raise NotImplementedError

    def scroll_next(self, scroll_id: str, *, scroll: str) -> dict[str, Any]:
        """Advance a scroll cursor and renew its lifetime."""
        raise NotImplementedError

    def clear_scroll(self, scroll_id: str) -> None:
        """Release a scroll cursor; failures are ignored."""
        raise NotImplementedError

    def get_document(
        self,
        index: str,
        doc_type: str,
        doc_id: str,
        *,
        source: bool | Mapping[str, Any] = True,
    ) -> dict[str, Any]:
        raise NotImplementedError

    def index_document(self, index: str, doc_type: str, doc_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def update_document(
        self, index: str, doc_type: str, doc_id: str, partial: Mapping[str, Any]
    ) -> dict[str, Any]:
        raise NotImplementedError

    def delete_document(self, index: str, doc_type: str, doc_id: str) -> dict[str, Any]:
        raise NotImplementedError
