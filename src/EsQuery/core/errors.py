"""Error taxonomy shared by the query core and the transport."""

from __future__ import annotations


class EsQueryError(Exception):
    """Base class for all EsQuery errors."""


class TransportError(EsQueryError):
    """Network or engine-side failure for a single request.

    Attributes:
        status: HTTP status code when the engine answered, otherwise None.
        error_type: Engine error type (e.g. ``index_not_found_exception``).
    """

    def __init__(self, message: str, *, status: int | None = None, error_type: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.error_type = error_type


class NotFoundError(TransportError):
    """Requested document does not exist."""


class ScrollExhaustedError(TransportError):
    """Scroll cursor has no more batches to return."""


class EmptyResultError(EsQueryError):
    """Search response is missing its hit container."""


class DecodeError(EsQueryError):
    """Document body cannot be decoded against its schema."""
