"""Tests for layered config parsing and validation."""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from EsQuery.config import parse_config_dict


def _base_raw_config() -> dict:
    return {
        "log": {"level": "info", "to_file": False, "dir": "log"},
        "connection": {
            "hosts": "http://es1:9200, http://es2:9200",
            "timeout": 10,
            "gzip": True,
            "verify_certs": True,
            "healthcheck": False,
            "username": "",
            "password_env": "ES_PASSWORD",
        },
        "query": {"doc_type": "_doc", "page_size": 20, "scroll_alive": "1m", "scroll_size": 500},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.connection.hosts, ("http://es1:9200", "http://es2:9200"))
        self.assertEqual(cfg.connection.timeout, 10.0)
        self.assertEqual(cfg.query.page_size, 20)
        self.assertEqual(cfg.query.scroll_alive, "1m")

    def test_optional_sections_use_defaults(self) -> None:
        cfg = parse_config_dict({"connection": {"hosts": ["http://localhost:9200"]}})
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.query.doc_type, "_doc")
        self.assertEqual(cfg.query.scroll_size, 1000)
        self.assertTrue(cfg.connection.healthcheck)

    def test_missing_connection_section(self) -> None:
        with self.assertRaisesRegex(ValueError, "connection"):
            parse_config_dict({})

    def test_missing_hosts(self) -> None:
        raw = _base_raw_config()
        del raw["connection"]["hosts"]
        with self.assertRaisesRegex(ValueError, "connection\\.hosts"):
            parse_config_dict(raw)

    def test_host_scheme_required(self) -> None:
        raw = _base_raw_config()
        raw["connection"]["hosts"] = "es1:9200"
        with self.assertRaisesRegex(ValueError, "connection\\.hosts"):
            parse_config_dict(raw)

    def test_timeout_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["connection"]["timeout"] = "30"
        with self.assertRaisesRegex(TypeError, "connection\\.timeout"):
            parse_config_dict(raw)

    def test_username_requires_password_env(self) -> None:
        raw = _base_raw_config()
        raw["connection"]["username"] = "elastic"
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaisesRegex(ValueError, "ES_PASSWORD"):
                parse_config_dict(raw)
        with patch.dict(os.environ, {"ES_PASSWORD": "secret"}, clear=False):
            cfg = parse_config_dict(raw)
        self.assertEqual(cfg.connection.password, "secret")

    def test_scroll_alive_must_be_time_unit(self) -> None:
        raw = _base_raw_config()
        raw["query"]["scroll_alive"] = "five minutes"
        with self.assertRaisesRegex(ValueError, "query\\.scroll_alive"):
            parse_config_dict(raw)

    def test_scroll_size_positive(self) -> None:
        raw = _base_raw_config()
        raw["query"]["scroll_size"] = 0
        with self.assertRaisesRegex(ValueError, "query\\.scroll_size"):
            parse_config_dict(raw)

    def test_page_size_rejects_bool(self) -> None:
        raw = _base_raw_config()
        raw["query"]["page_size"] = True
        with self.assertRaisesRegex(TypeError, "query\\.page_size"):
            parse_config_dict(raw)

    def test_log_level_validated(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "chatty"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)


if __name__ == "__main__":
    unittest.main()
