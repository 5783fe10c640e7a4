"""Tests for the search client factory and index administration."""

from __future__ import annotations

import sys
import unittest
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock, patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from EsQuery.config import parse_config_dict
from EsQuery.core.errors import TransportError
from EsQuery.core.schema import describe
from EsQuery.services import SearchClient, create_search_client


@dataclass
class Tag:
    label: str = ""


def _config(healthcheck: bool):
    return parse_config_dict(
        {
            "connection": {
                "hosts": "http://es1:9200,http://es2:9200",
                "healthcheck": healthcheck,
                "gzip": False,
                "password_env": "",
            },
            "query": {"doc_type": "legacy", "page_size": 15, "scroll_alive": "2m", "scroll_size": 300},
        }
    )


class TestCreateSearchClient(unittest.TestCase):
    def test_builds_client_from_config(self) -> None:
        with patch("EsQuery.services.EsApiClient") as api_cls:
            client = create_search_client(_config(healthcheck=False))
        api_cls.assert_called_once_with(
            ("http://es1:9200", "http://es2:9200"),
            timeout=30.0,
            compress=False,
            username=None,
            password=None,
            verify_certs=True,
        )
        index = client.index("tags")
        self.assertEqual(index.doc_type, "legacy")

    def test_query_section_becomes_query_defaults(self) -> None:
        with patch("EsQuery.services.EsApiClient"):
            client = create_search_client(_config(healthcheck=False))
        query = client.index("tags").query()
        self.assertEqual(query.size, 15)
        self.assertEqual(query.offset, 0)
        self.assertEqual(query.scroll_settings, ("2m", 300))

    def test_failed_healthcheck_closes_and_raises(self) -> None:
        with patch("EsQuery.services.EsApiClient") as api_cls:
            api_cls.return_value.ping.return_value = False
            with self.assertRaisesRegex(TransportError, "es1"):
                create_search_client(_config(healthcheck=True))
        api_cls.return_value.close.assert_called_once()


class TestSearchClient(unittest.TestCase):
    def test_index_accepts_type_or_schema(self) -> None:
        client = SearchClient(MagicMock())
        self.assertIs(client.index("t", Tag).schema, describe(Tag))
        self.assertIs(client.index("t", describe(Tag)).schema, describe(Tag))
        self.assertIs(client.index("t").schema.document_type, dict)

    def test_create_index_parses_json_mapping(self) -> None:
        api = MagicMock()
        SearchClient(api).create_index("t", '{"mappings": {"properties": {}}}')
        api.create_index.assert_called_once_with("t", {"mappings": {"properties": {}}})

    def test_create_index_rejects_bad_json(self) -> None:
        api = MagicMock()
        with self.assertRaisesRegex(ValueError, "JSON"):
            SearchClient(api).create_index("t", "{not json")
        api.create_index.assert_not_called()

    def test_context_manager_closes_api(self) -> None:
        api = MagicMock()
        with SearchClient(api):
            pass
        api.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
