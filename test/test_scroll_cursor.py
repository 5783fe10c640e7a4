"""Tests for scroll streaming with background prefetch."""

from __future__ import annotations

import sys
import time
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from _fakes import FakeTransport, make_hit, make_response

from EsQuery.core.errors import EmptyResultError, TransportError
from EsQuery.core.query import QueryDefaults
from EsQuery.core.schema import raw_schema
from EsQuery.core.scroll import CursorState
from EsQuery.services.index import Index


def _batch(start: int, count: int, scroll_id: str, total: int) -> dict:
    hits = [make_hit(str(i), {"n": i}) for i in range(start, start + count)]
    return make_response(hits, total=total, scroll_id=scroll_id)


def _index(transport: FakeTransport) -> Index:
    return Index("idx", raw_schema(), transport, query_defaults=QueryDefaults(scroll_size=1000))


class TestScrollCursor(unittest.TestCase):
    def test_streams_every_batch_in_order(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 1000, "s1", 2500),
            scroll_batches=[_batch(1000, 1000, "s2", 2500), _batch(2000, 500, "s3", 2500)],
        )
        with _index(transport).query().get_scroll() as cursor:
            self.assertEqual(cursor.total, 2500)
            numbers = [doc["n"] for doc in cursor]

        self.assertEqual(numbers, list(range(2500)))
        self.assertEqual([call[0] for call in transport.scroll_calls], ["s1", "s2", "s3"])
        self.assertEqual(transport.cleared, ["s3"])
        self.assertEqual(cursor.state, CursorState.CLOSED)
        self.assertIsNone(cursor.error)

    def test_opening_request_uses_scroll_settings(self) -> None:
        transport = FakeTransport(search_response=_batch(0, 1, "s1", 1))
        query = _index(transport).query().scroll_alive("2m").scroll_size(50).term("n", 0)
        with query.get_scroll() as cursor:
            list(cursor)

        _, body, scroll = transport.searches[0]
        self.assertEqual(scroll, "2m")
        self.assertEqual(body["size"], 50)
        self.assertNotIn("from", body)
        self.assertEqual(transport.scroll_calls, [("s1", "2m")])

    def test_error_is_raised_after_delivered_documents(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 2, "s1", 5),
            scroll_batches=[TransportError("HTTP 500: boom", status=500)],
        )
        cursor = _index(transport).query().get_scroll()
        self.assertEqual(cursor.next()["n"], 0)
        self.assertEqual(cursor.next()["n"], 1)
        with self.assertRaisesRegex(TransportError, "boom"):
            cursor.next()
        self.assertIsNone(cursor.next())
        self.assertIsInstance(cursor.error, TransportError)
        self.assertEqual(transport.cleared, ["s1"])

    def test_advance_failure_delivers_whole_first_batch(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 1000, "s1", 2500),
            scroll_batches=[TransportError("HTTP 503: unavailable", status=503)],
        )
        cursor = _index(transport).query().get_scroll()
        received = []
        while True:
            try:
                doc = cursor.next()
            except TransportError as error:
                self.assertEqual(error.status, 503)
                break
            self.assertIsNotNone(doc)
            received.append(doc["n"])
        self.assertEqual(received, list(range(1000)))
        self.assertIsNone(cursor.next())
        cursor.close()

    def test_second_advance_failure_after_first_batch(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 1000, "s1", 3000),
            scroll_batches=[_batch(1000, 1000, "s2", 3000), TransportError("HTTP 500: shard failure", status=500)],
        )
        received = []
        with _index(transport).query().get_scroll() as cursor:
            with self.assertRaisesRegex(TransportError, "shard failure"):
                for doc in cursor:
                    received.append(doc["n"])
            self.assertIsNone(cursor.next())

        self.assertEqual(received, list(range(2000)))
        self.assertEqual([call[0] for call in transport.scroll_calls], ["s1", "s2"])
        self.assertEqual(transport.cleared, ["s2"])

    def test_bad_batch_surfaces_translation_error(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 1, "s1", 2),
            scroll_batches=[{"_scroll_id": "s2"}],
        )
        with _index(transport).query().get_scroll() as cursor:
            self.assertEqual(next(cursor)["n"], 0)
            with self.assertRaises(EmptyResultError):
                next(cursor)

    def test_empty_first_batch_ends_immediately(self) -> None:
        transport = FakeTransport(search_response=make_response([], scroll_id="s1"))
        with _index(transport).query().get_scroll() as cursor:
            self.assertEqual(list(cursor), [])
        self.assertEqual(transport.scroll_calls, [])
        self.assertEqual(transport.cleared, ["s1"])

    def test_next_returns_none_at_end(self) -> None:
        transport = FakeTransport(search_response=_batch(0, 1, "s1", 1))
        cursor = _index(transport).query().get_scroll()
        self.assertEqual(cursor.next()["n"], 0)
        self.assertIsNone(cursor.next())
        self.assertIsNone(cursor.next())
        cursor.close()

    def test_early_close_releases_cursor(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 1000, "s1", 5000),
            scroll_batches=[_batch(1000, 1000, "s2", 5000)],
        )
        cursor = _index(transport).query().get_scroll()
        self.assertEqual(next(cursor)["n"], 0)
        cursor.close(timeout=5)

        self.assertEqual(cursor.state, CursorState.CLOSED)
        self.assertEqual(transport.cleared, ["s1"])
        self.assertEqual(transport.scroll_calls, [])
        with self.assertRaises(StopIteration):
            next(cursor)

    def test_producer_waits_for_consumer(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 3, "s1", 6),
            scroll_batches=[_batch(3, 3, "s2", 6)],
        )
        cursor = _index(transport).query().get_scroll()
        next(cursor)
        time.sleep(0.3)
        self.assertEqual(transport.scroll_calls, [])
        cursor.close(timeout=5)

    def test_clear_failure_is_swallowed(self) -> None:
        transport = FakeTransport(
            search_response=_batch(0, 2, "s1", 2),
            clear_error=TransportError("HTTP 404: missing", status=404),
        )
        with _index(transport).query().get_scroll() as cursor:
            self.assertEqual(len(list(cursor)), 2)
        self.assertIsNone(cursor.error)

    def test_first_batch_failure_clears_scroll(self) -> None:
        transport = FakeTransport(search_response={"_scroll_id": "s1"})
        with self.assertRaises(EmptyResultError):
            _index(transport).query().get_scroll()
        self.assertEqual(transport.cleared, ["s1"])


if __name__ == "__main__":
    unittest.main()
