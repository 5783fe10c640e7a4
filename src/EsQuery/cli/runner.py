"""Command runner for coordinating CLI execution.

Manages logging configuration, client lifecycle and error handling for
command execution.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from EsQuery.config import AppConfig
from EsQuery.services import SearchClient, create_search_client
from EsQuery.utils.log import configure_logging, log


class CommandRunner:
    """Runs one CLI action against a freshly created search client."""

    def __init__(
        self,
        config: AppConfig,
        client_factory: Callable[[AppConfig], SearchClient] | None = None,
    ) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            client_factory: Builds the search client; defaults to
                ``create_search_client``.
        """
        self.config = config
        self._client_factory = client_factory or create_search_client

    def run(self, action: str, command: Callable[[SearchClient], Any]) -> Any:
        """Execute ``command`` with logging configured and the client closed afterwards.

        Args:
            action: The CLI command name (e.g. 'search').
            command: Callable receiving the search client.

        Returns:
            Whatever ``command`` returns.

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            with self._client_factory(self.config) as client:
                return command(client)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
