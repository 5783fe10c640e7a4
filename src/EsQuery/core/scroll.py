"""Scroll cursor streaming documents from a background prefetch thread.

One daemon thread per cursor advances the server-side scroll and hands
documents to the consumer through a single-slot queue. The producer only
requests the next batch after the current one has been handed off, so at
most one batch is held in memory.

    with query.get_scroll() as cursor:
        for doc in cursor:
            ...
"""

from __future__ import annotations

import contextlib
import queue
import threading
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from EsQuery.core.errors import ScrollExhaustedError
from EsQuery.transport.base import SearchTransport

# Producer wakes up this often while blocked on hand-off to check for close().
HANDOFF_POLL_SECONDS = 0.1

_END = object()

BatchTranslator = Callable[[Mapping[str, Any]], "tuple[list[Any], int]"]


class CursorState(Enum):
    OPEN = "open"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass(slots=True)
class _ScrollShared:
    """State written by the producer thread and read by the consumer."""

    scroll_id: str
    total: int
    state: CursorState = CursorState.OPEN
    error: Exception | None = None


class ScrollCursor:
    """Single-consumer iterator over a server-side scroll.

    The consumer either drains the cursor or calls ``close``; a cursor that is
    garbage collected is closed as well. Once every document has been
    delivered, iteration stops, or raises the error that ended the scroll.
    """

    def __init__(
        self,
        transport: SearchTransport,
        *,
        scroll_id: str,
        first_batch: Sequence[Any],
        total: int,
        keep_alive: str,
        translate: BatchTranslator,
    ) -> None:
        """Start the prefetch thread.

        Args:
            transport: Transport used to advance and release the cursor.
            scroll_id: Cursor id returned by the opening search.
            first_batch: Documents of the opening search, already translated.
            total: Total hit count reported by the opening search.
            keep_alive: Cursor lifetime renewed by every advance (e.g. ``"5m"``).
            translate: Converts a raw scroll response into (documents, total).
        """
        self._handoff: queue.Queue[Any] = queue.Queue(maxsize=1)
        self._cancel = threading.Event()
        self._shared = _ScrollShared(scroll_id=scroll_id, total=total)
        self._finished = False
        self._thread = threading.Thread(
            target=_scan_scroll,
            args=(transport, self._shared, list(first_batch), keep_alive, translate, self._handoff, self._cancel),
            name="esquery-scroll",
            daemon=True,
        )
        weakref.finalize(self, self._cancel.set)
        self._thread.start()

    @property
    def scroll_id(self) -> str:
        return self._shared.scroll_id

    @property
    def total(self) -> int:
        """Total hits as reported by the latest batch."""
        return self._shared.total

    @property
    def state(self) -> CursorState:
        return self._shared.state

    @property
    def error(self) -> Exception | None:
        return self._shared.error

    def __iter__(self) -> ScrollCursor:
        return self

    def __next__(self) -> Any:
        if self._finished:
            raise StopIteration
        item = self._handoff.get()
        if item is _END:
            self._finished = True
            if self._shared.error is not None:
                raise self._shared.error
            raise StopIteration
        return item

    def next(self) -> Any | None:
        """Return the next document, or None at the end of the scroll.

        Raises:
            Exception: The error that terminated the scroll, after all
                documents fetched before it have been returned.
        """
        try:
            return next(self)
        except StopIteration:
            return None

    def close(self, timeout: float | None = None) -> None:
        """Stop the producer and release the server-side cursor.

        Args:
            timeout: Maximum seconds to wait for the producer thread.
        """
        self._finished = True
        self._cancel.set()
        self._thread.join(timeout)

    def __enter__(self) -> ScrollCursor:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _scan_scroll(
    transport: SearchTransport,
    shared: _ScrollShared,
    batch: list[Any],
    keep_alive: str,
    translate: BatchTranslator,
    handoff: queue.Queue[Any],
    cancel: threading.Event,
) -> None:
    """Producer loop: deliver the batch in hand, then fetch the next one."""
    try:
        while batch:
            for document in batch:
                if not _put(handoff, document, cancel):
                    return
            try:
                response = transport.scroll_next(shared.scroll_id, scroll=keep_alive)
            except ScrollExhaustedError:
                break
            shared.scroll_id = response.get("_scroll_id") or shared.scroll_id
            batch, shared.total = translate(response)
    except Exception as error:  # noqa: BLE001 - handed to the consumer
        shared.error = error
    finally:
        shared.state = CursorState.DRAINING
        with contextlib.suppress(Exception):
            transport.clear_scroll(shared.scroll_id)
        if not cancel.is_set():
            _put(handoff, _END, cancel)
        shared.state = CursorState.CLOSED


def _put(handoff: queue.Queue[Any], item: Any, cancel: threading.Event) -> bool:
    """Block until the consumer takes ``item``; False once the cursor is closed."""
    while not cancel.is_set():
        try:
            handoff.put(item, timeout=HANDOFF_POLL_SECONDS)
            return True
        except queue.Full:
            continue
    return False
