"""Tests for single-document operations on an index handle."""

from __future__ import annotations

import sys
import unittest
from dataclasses import dataclass
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from _fakes import FakeTransport

from EsQuery.core.errors import TransportError
from EsQuery.core.schema import describe, es_field, raw_schema
from EsQuery.services.index import Index


@dataclass
class User:
    name: str = ""
    age: int = 0
    doc_id: str = es_field(es="_id", default="")
    index: str = es_field(es="_index", default="")


class TestIndexCrud(unittest.TestCase):
    def test_find_existing_document(self) -> None:
        transport = FakeTransport(documents={"7": {"_source": {"name": "ann", "age": 30}}})
        user = Index("users", describe(User), transport).find("7")
        self.assertEqual(user, User(name="ann", age=30, doc_id="7", index="users"))
        self.assertEqual(transport.gets, [("users", "_doc", "7", {"includes": ["name", "age"]})])

    def test_find_missing_returns_none(self) -> None:
        self.assertIsNone(Index("users", describe(User), FakeTransport()).find("nope"))

    def test_find_found_false_returns_none(self) -> None:
        transport = FakeTransport(documents={"1": {"found": False}})
        self.assertIsNone(Index("users", describe(User), transport).find("1"))

    def test_find_propagates_other_failures(self) -> None:
        transport = FakeTransport(get_error=TransportError("HTTP 503: unavailable", status=503))
        with self.assertRaisesRegex(TransportError, "503"):
            Index("users", describe(User), transport).find("1")

    def test_save_writes_body_without_metadata(self) -> None:
        transport = FakeTransport()
        Index("users,archive", describe(User), transport).save("9", User(name="bo", age=4, doc_id="9"))
        self.assertEqual(transport.indexed, [("users", "_doc", "9", {"name": "bo", "age": 4})])

    def test_update_and_delete_use_doc_type(self) -> None:
        transport = FakeTransport()
        index = Index("users", raw_schema(), transport)
        index.set_doc_type("user")
        index.update("3", {"age": 5})
        index.delete("3")
        self.assertEqual(transport.updated, [("users", "user", "3", {"age": 5})])
        self.assertEqual(transport.deleted, [("users", "user", "3")])

    def test_names_split_on_commas(self) -> None:
        index = Index(" a , b,,c ", raw_schema(), FakeTransport())
        self.assertEqual(index.names, ("a", "b", "c"))

    def test_empty_name_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Index(" , ", raw_schema(), FakeTransport())


if __name__ == "__main__":
    unittest.main()
