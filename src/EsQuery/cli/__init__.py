"""CLI package for EsQuery command orchestration."""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from EsQuery.cli.runner import CommandRunner
from EsQuery.cli.ui import cli


def main() -> None:
    """Run EsQuery CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
