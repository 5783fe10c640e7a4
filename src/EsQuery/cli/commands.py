"""Command implementations for the EsQuery CLI.

Commands receive a ready ``SearchClient`` and print documents as JSON lines;
CLI parameter handling lives in ``ui`` and lifecycle in ``runner``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import click

from EsQuery.core.query import Query
from EsQuery.core.results import SearchResult
from EsQuery.services.client import SearchClient
from EsQuery.utils.log import log


def parse_assignment(text: str) -> tuple[str, Any]:
    """Split ``FIELD=VALUE``; VALUE is read as JSON when possible.

    Raises:
        click.BadParameter: If there is no ``=`` or the field is empty.
    """
    field, sep, raw = text.partition("=")
    if not sep or not field.strip():
        raise click.BadParameter(f"expected FIELD=VALUE, got {text!r}")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return field.strip(), value


def render_document(document: Any) -> str:
    return json.dumps(document, ensure_ascii=False, default=str, sort_keys=True)


@dataclass(frozen=True, slots=True)
class ClauseOptions:
    """Clauses collected from command-line options."""

    terms: tuple[str, ...] = ()
    matches: tuple[str, ...] = ()
    shoulds: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    exists: tuple[str, ...] = ()
    min_should: int | None = None
    sort: tuple[str, ...] = ()

    def apply(self, query: Query) -> Query:
        """Add every collected clause and sort key to ``query``."""
        for item in self.terms:
            query.term(*parse_assignment(item))
        for item in self.matches:
            query.must_match(*parse_assignment(item))
        for item in self.shoulds:
            query.should_match(*parse_assignment(item))
        for item in self.excludes:
            query.must_not_term(*parse_assignment(item))
        for field in self.exists:
            query.exists(field)
        if self.min_should is not None:
            query.minimum_should_match(self.min_should)
        for item in self.sort:
            field, _, order = item.partition(":")
            query.order_by(field, order or "asc")
        return query


@dataclass(slots=True)
class SearchCommand:
    """Print one page of matching documents."""

    client: SearchClient
    index: str
    clauses: ClauseOptions
    page: int | None = None
    size: int | None = None
    echo: Callable[[str], None] = click.echo

    def execute(self) -> SearchResult:
        query = self.clauses.apply(self.client.index(self.index).query())
        if self.page is not None or self.size is not None:
            query.page(1 if self.page is None else self.page, query.size if self.size is None else self.size)
        log.info("Search %s: %s", self.index, query)
        result = query.get_list()
        for document in result:
            self.echo(render_document(document))
        log.info("Returned %d of %d documents", len(result), result.total)
        return result


@dataclass(slots=True)
class ScrollCommand:
    """Stream every matching document through a scroll cursor."""

    client: SearchClient
    index: str
    clauses: ClauseOptions
    batch_size: int | None = None
    alive: str | None = None
    echo: Callable[[str], None] = click.echo

    def execute(self) -> int:
        query = self.clauses.apply(self.client.index(self.index).query())
        if self.batch_size is not None:
            query.scroll_size(self.batch_size)
        if self.alive is not None:
            query.scroll_alive(self.alive)
        log.info("Scroll %s: %s", self.index, query)

        count = 0
        with query.get_scroll() as cursor:
            for document in cursor:
                self.echo(render_document(document))
                count += 1
            log.info("Streamed %d documents (total %d)", count, cursor.total)
        return count


@dataclass(slots=True)
class GetCommand:
    """Print a single document by id."""

    client: SearchClient
    index: str
    doc_id: str
    echo: Callable[[str], None] = click.echo

    def execute(self) -> Any | None:
        document = self.client.index(self.index).find(self.doc_id)
        if document is None:
            log.warning("Document not found: index=%s id=%s", self.index, self.doc_id)
            return None
        self.echo(render_document(document))
        return document
