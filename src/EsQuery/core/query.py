"""Boolean query builder and search executor.

A ``Query`` is obtained from ``Index.query()`` and accumulates clauses into
four buckets (filter, must, must_not, should). It compiles them into one
``bool`` query on demand and runs it either as a single page
(``get_list``) or as a scroll (``get_scroll``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

from EsQuery.core import clauses
from EsQuery.core.clauses import Clause, RangeOption
from EsQuery.core.results import SearchResult, translate_hits
from EsQuery.core.schema import META_VERSION, projection
from EsQuery.core.scroll import ScrollCursor

if TYPE_CHECKING:
    from EsQuery.services.index import Index

_DESCENDING = {"desc", "descending", "-1"}


@dataclass(frozen=True, slots=True)
class QueryDefaults:
    """Initial page and scroll settings of new queries."""

    page_size: int = 100
    scroll_alive: str = "5m"
    scroll_size: int = 1000


class Query:
    """Mutable boolean query bound to one index and schema.

    Not safe for concurrent mutation. Every mutator returns the query itself
    so calls can be chained::

        index.query().term("status", "active").must_match("title", "python").page(2, 20)
    """

    def __init__(self, index: Index, defaults: QueryDefaults | None = None) -> None:
        defaults = defaults or QueryDefaults()
        self._index = index
        self._filter: list[Clause] = []
        self._must: list[Clause] = []
        self._must_not: list[Clause] = []
        self._should: list[Clause] = []
        self._min_should_match = 1
        self._sorters: list[dict[str, Any]] = []
        self._size = defaults.page_size
        self._from = 0
        self._scroll_alive = defaults.scroll_alive
        self._scroll_size = defaults.scroll_size

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        return self._from

    @property
    def sorters(self) -> tuple[dict[str, Any], ...]:
        return tuple(self._sorters)

    @property
    def scroll_settings(self) -> tuple[str, int]:
        """Return (cursor lifetime, batch size)."""
        return self._scroll_alive, self._scroll_size

    # ----------------------------------------------------------------- buckets

    def add_filter(self, clause: Clause) -> Query:
        self._filter.append(clause)
        return self

    def add_must(self, clause: Clause) -> Query:
        self._must.append(clause)
        return self

    def add_must_not(self, clause: Clause) -> Query:
        self._must_not.append(clause)
        return self

    def add_should(self, clause: Clause) -> Query:
        self._should.append(clause)
        return self

    def minimum_should_match(self, count: int) -> Query:
        """Set how many should clauses must match (default 1)."""
        self._min_should_match = count
        return self

    # ------------------------------------------------------------------ filter

    def term(self, field: str, value: Any) -> Query:
        return self.add_filter(clauses.term(field, value))

    def terms(self, field: str, *values: Any) -> Query:
        return self.add_filter(clauses.terms(field, *values))

    def match(self, field: str, value: Any) -> Query:
        return self.add_filter(clauses.match(field, value))

    def match_phrase(self, field: str, value: Any) -> Query:
        return self.add_filter(clauses.match_phrase(field, value))

    def range(self, field: str, *options: RangeOption) -> Query:
        return self.add_filter(clauses.range_(field, *options))

    def exists(self, field: str) -> Query:
        return self.add_filter(clauses.exists(field))

    # ------------------------------------------------------------------ should

    def should_term(self, field: str, value: Any) -> Query:
        return self.add_should(clauses.term(field, value))

    def should_terms(self, field: str, *values: Any) -> Query:
        return self.add_should(clauses.terms(field, *values))

    def should_match(self, field: str, value: Any) -> Query:
        return self.add_should(clauses.match(field, value))

    def should_match_phrase(self, field: str, value: Any) -> Query:
        return self.add_should(clauses.match_phrase(field, value))

    def should_range(self, field: str, *options: RangeOption) -> Query:
        return self.add_should(clauses.range_(field, *options))

    def should_exists(self, field: str) -> Query:
        return self.add_should(clauses.exists(field))

    # -------------------------------------------------------------------- must

    def must_term(self, field: str, value: Any) -> Query:
        return self.add_must(clauses.term(field, value))

    def must_terms(self, field: str, *values: Any) -> Query:
        return self.add_must(clauses.terms(field, *values))

    def must_match(self, field: str, value: Any) -> Query:
        return self.add_must(clauses.match(field, value))

    def must_match_phrase(self, field: str, value: Any) -> Query:
        return self.add_must(clauses.match_phrase(field, value))

    def must_range(self, field: str, *options: RangeOption) -> Query:
        return self.add_must(clauses.range_(field, *options))

    def must_exists(self, field: str) -> Query:
        return self.add_must(clauses.exists(field))

    # ---------------------------------------------------------------- must_not

    def must_not_term(self, field: str, value: Any) -> Query:
        return self.add_must_not(clauses.term(field, value))

    def must_not_terms(self, field: str, *values: Any) -> Query:
        return self.add_must_not(clauses.terms(field, *values))

    def must_not_match(self, field: str, value: Any) -> Query:
        return self.add_must_not(clauses.match(field, value))

    def must_not_match_phrase(self, field: str, value: Any) -> Query:
        return self.add_must_not(clauses.match_phrase(field, value))

    def must_not_range(self, field: str, *options: RangeOption) -> Query:
        return self.add_must_not(clauses.range_(field, *options))

    def must_not_exists(self, field: str) -> Query:
        return self.add_must_not(clauses.exists(field))

    # ------------------------------------------------------- sort and windows

    def order_by(self, field: str, order: str | int = "asc") -> Query:
        """Append a sort key; keys apply in the order they were added.

        Args:
            field: Field to sort on.
            order: ``"desc"``/``"descending"``/``-1`` for descending, anything
                else sorts ascending.
        """
        direction = "desc" if str(order).strip().lower() in _DESCENDING else "asc"
        self._sorters.append({field: {"order": direction}})
        return self

    def page(self, page_num: int, page_size: int) -> Query:
        """Select a 1-based page; page 0 behaves like page 1.

        Negative arguments are clamped to 0.
        """
        page_num = max(page_num, 0)
        page_size = max(page_size, 0)
        self._size = page_size
        self._from = max(page_num - 1, 0) * page_size
        return self

    def scroll_alive(self, alive: str) -> Query:
        """Set the cursor lifetime, e.g. ``"5m"``."""
        self._scroll_alive = alive
        return self

    def scroll_size(self, size: int) -> Query:
        """Set the number of hits fetched per scroll batch."""
        self._scroll_size = size
        return self

    # ------------------------------------------------------------- compile

    def build_bool_query(self) -> dict[str, Any]:
        """Compile the buckets into a ``bool`` query; empty buckets are left out."""
        body: dict[str, Any] = {}
        if self._filter:
            body["filter"] = [clause.to_dict() for clause in self._filter]
        if self._must:
            body["must"] = [clause.to_dict() for clause in self._must]
        if self._must_not:
            body["must_not"] = [clause.to_dict() for clause in self._must_not]
        if self._should:
            body["should"] = [clause.to_dict() for clause in self._should]
            body["minimum_should_match"] = self._min_should_match
        return {"bool": body}

    def __str__(self) -> str:
        return json.dumps(self.build_bool_query(), sort_keys=True, separators=(",", ":"), default=str)

    def _request_body(self) -> dict[str, Any]:
        schema = self._index.schema
        body: dict[str, Any] = {
            "query": self.build_bool_query(),
            "_source": projection(schema),
        }
        if META_VERSION in schema.slots:
            body["version"] = True
        if self._sorters:
            body["sort"] = [dict(sorter) for sorter in self._sorters]
        return body

    # ------------------------------------------------------------- execute

    def search(self, size: int, offset: int) -> dict[str, Any]:
        """Run one page request and return the raw engine response.

        Raises:
            TransportError: On network or engine failure.
        """
        body = self._request_body()
        body["size"] = size
        body["from"] = offset
        return self._index.transport.search(self._index.names, body)

    def get_list(self) -> SearchResult:
        """Return the documents of the selected page plus the total hit count.

        Raises:
            TransportError: On network or engine failure.
            EmptyResultError: If the response has no hit container.
            DecodeError: If a hit does not fit the schema.
        """
        response = self.search(self._size, self._from)
        documents, total = translate_hits(self._index.schema, response)
        return SearchResult(documents=documents, total=total)

    def get_scroll(self) -> ScrollCursor:
        """Open a scroll and stream every matching document.

        Raises:
            TransportError: If the opening request fails.
            EmptyResultError: If the opening response has no hit container.
            DecodeError: If a hit of the first batch does not fit the schema.
        """
        transport = self._index.transport
        body = self._request_body()
        body["size"] = self._scroll_size
        response = transport.search(self._index.names, body, scroll=self._scroll_alive)
        scroll_id = str(response.get("_scroll_id", ""))
        translate = partial(translate_hits, self._index.schema)
        try:
            documents, total = translate(response)
        except Exception:
            if scroll_id:
                transport.clear_scroll(scroll_id)
            raise
        return ScrollCursor(
            transport,
            scroll_id=scroll_id,
            first_batch=documents,
            total=total,
            keep_alive=self._scroll_alive,
            translate=translate,
        )
