"""Tests for config override behavior with defaults."""

import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from EsQuery.config import load_config, load_config_with_defaults


_BASE_YAML = """
log:
  level: INFO
  to_file: false
  dir: log

connection:
  hosts: http://localhost:9200
  timeout: 30
  gzip: true
  healthcheck: true

query:
  doc_type: _doc
  page_size: 100
  scroll_alive: 5m
  scroll_size: 1000
"""


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_nested_sections(self) -> None:
        override = """
connection:
  hosts: [http://es1:9200, http://es2:9200]
  healthcheck: false
query:
  scroll_size: 200
"""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "custom.yml"
            path.write_text(override, encoding="utf-8")
            cfg = load_config_with_defaults(path, defaults_text=_BASE_YAML)

        self.assertEqual(cfg.connection.hosts, ("http://es1:9200", "http://es2:9200"))
        self.assertFalse(cfg.connection.healthcheck)
        self.assertTrue(cfg.connection.gzip)
        self.assertEqual(cfg.query.scroll_size, 200)
        self.assertEqual(cfg.query.page_size, 100)

    def test_defaults_file_merge(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            defaults = Path(tmp) / "default.yml"
            defaults.write_text(_BASE_YAML, encoding="utf-8")
            override = Path(tmp) / "custom.yml"
            override.write_text("log:\n  level: debug\n", encoding="utf-8")
            cfg = load_config_with_defaults(override, defaults)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.connection.hosts, ("http://localhost:9200",))

    def test_repository_default_config_loads(self) -> None:
        cfg = load_config(REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.query.scroll_alive, "5m")
        self.assertEqual(cfg.connection.hosts, ("http://localhost:9200",))

    def test_root_must_be_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yml"
            path.write_text("- a\n- b\n", encoding="utf-8")
            with self.assertRaisesRegex(ValueError, "mapping"):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
