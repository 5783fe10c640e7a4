"""Primitive query clauses.

Clauses are plain immutable values rendered to the engine query DSL with
``to_dict``. They hold no reference to any query and perform no validation:
unknown fields or mismatched value types surface as engine errors.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Protocol


class Clause(Protocol):
    """A single search predicate."""

    field: str

    def to_dict(self) -> dict[str, Any]:
        """Render to the query DSL."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Term:
    field: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"term": {self.field: self.value}}


@dataclass(frozen=True, slots=True)
class Terms:
    field: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError(f"terms clause on {self.field!r} needs at least one value")

    def to_dict(self) -> dict[str, Any]:
        return {"terms": {self.field: list(self.values)}}


@dataclass(frozen=True, slots=True)
class Match:
    field: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"match": {self.field: {"query": self.value}}}


@dataclass(frozen=True, slots=True)
class MatchPhrase:
    field: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"match_phrase": {self.field: {"query": self.value}}}


@dataclass(frozen=True, slots=True)
class Range:
    """Range clause; only the bounds that were set are rendered."""

    field: str
    bounds: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "bounds", MappingProxyType(dict(self.bounds)))

    def to_dict(self) -> dict[str, Any]:
        return {"range": {self.field: dict(self.bounds)}}


@dataclass(frozen=True, slots=True)
class Exists:
    field: str

    def to_dict(self) -> dict[str, Any]:
        return {"exists": {"field": self.field}}


RangeOption = Callable[[dict[str, Any]], None]


def gt(value: Any) -> RangeOption:
    """Exclusive lower bound."""
    return _bound("gt", value)


def gte(value: Any) -> RangeOption:
    """Inclusive lower bound."""
    return _bound("gte", value)


def lt(value: Any) -> RangeOption:
    """Exclusive upper bound."""
    return _bound("lt", value)


def lte(value: Any) -> RangeOption:
    """Inclusive upper bound."""
    return _bound("lte", value)


def _bound(name: str, value: Any) -> RangeOption:
    def apply(bounds: dict[str, Any]) -> None:
        bounds[name] = value

    return apply


def term(field: str, value: Any) -> Term:
    return Term(field, value)


def terms(field: str, *values: Any) -> Terms:
    return Terms(field, tuple(values))


def match(field: str, value: Any) -> Match:
    return Match(field, value)


def match_phrase(field: str, value: Any) -> MatchPhrase:
    return MatchPhrase(field, value)


def range_(field: str, *options: RangeOption) -> Range:
    """Build a range clause from bound options.

    Options are applied in order, so a later ``gt`` replaces an earlier one.

    Args:
        field: Field name.
        *options: Bound setters created by ``gt``/``gte``/``lt``/``lte``.

    Returns:
        Range clause.
    """
    bounds: dict[str, Any] = {}
    for option in options:
        option(bounds)
    return Range(field, bounds)


def exists(field: str) -> Exists:
    return Exists(field)
