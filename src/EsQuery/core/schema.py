"""Document schema descriptors and hit envelope conversion.

A schema is described once per document class and then reused for every
request: it lists the body fields projected from ``_source`` and the class
attributes that absorb engine metadata (``_id``, ``_index``, ``_type``,
``_version``, ``_score``).

Document classes are plain dataclasses. Field options are declared with
``es_field``::

    @dataclass
    class Book:
        title: str = ""
        doc_id: str = es_field(es="_id", default="")
        score: float = es_field(es="_score", default=0.0)
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping, Union

from dateutil import parser as dt_parser

from EsQuery.core.errors import DecodeError

META_ID = "_id"
META_INDEX = "_index"
META_TYPE = "_type"
META_VERSION = "_version"
META_SCORE = "_score"

_SLOT_TYPES: dict[str, type] = {
    META_ID: str,
    META_INDEX: str,
    META_TYPE: str,
    META_VERSION: int,
    META_SCORE: float,
}

_JSON_KEY = "json"
_ES_KEY = "es"
_SKIP = "-"


def es_field(*, json: str | None = None, es: str | None = None, **kwargs: Any) -> Any:
    """Declare a dataclass field with EsQuery mapping options.

    Args:
        json: Body key in ``_source``; ``"-"`` excludes the field from the body.
        es: Metadata slot bound to this field (``_id``, ``_index``, ``_type``,
            ``_version`` or ``_score``).
        **kwargs: Forwarded to ``dataclasses.field``.

    Returns:
        Dataclass field specification.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if json is not None:
        metadata[_JSON_KEY] = json
    if es is not None:
        metadata[_ES_KEY] = es
    return field(metadata=metadata, **kwargs)


@dataclass(frozen=True, slots=True)
class HitEnvelope:
    """Engine-assigned metadata of one hit."""

    id: str = ""
    index: str = ""
    type: str = ""
    version: int | None = None
    score: float | None = None

    @classmethod
    def from_hit(cls, hit: Mapping[str, Any]) -> HitEnvelope:
        return cls(
            id=str(hit.get("_id", "")),
            index=str(hit.get("_index", "")),
            type=str(hit.get("_type", "")),
            version=hit.get("_version"),
            score=hit.get("_score"),
        )

    def slot_value(self, slot: str) -> Any:
        return {
            META_ID: self.id,
            META_INDEX: self.index,
            META_TYPE: self.type,
            META_VERSION: self.version,
            META_SCORE: self.score,
        }[slot]


@dataclass(frozen=True, slots=True)
class SchemaDescriptor:
    """Immutable mapping between a document class and engine records.

    Attributes:
        document_type: Class instantiated for every hit (a dataclass or ``dict``).
        fields: ``(json name, attribute name)`` pairs projected from ``_source``.
        fetch_source: Whether ``_source`` is requested at all.
        slots: Metadata slot (``_id``...) to attribute name.
        field_types: Attribute name to resolved annotation.
        required: Attributes without a default; filled with zero values when absent.
    """

    document_type: type
    fields: tuple[tuple[str, str], ...] = ()
    fetch_source: bool = True
    slots: Mapping[str, str] = field(default_factory=dict)
    field_types: Mapping[str, Any] = field(default_factory=dict)
    required: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "slots", MappingProxyType(dict(self.slots)))
        object.__setattr__(self, "field_types", MappingProxyType(dict(self.field_types)))

    @property
    def is_mapping(self) -> bool:
        return issubclass(self.document_type, Mapping)


@lru_cache(maxsize=None)
def describe(document_type: type) -> SchemaDescriptor:
    """Build the schema of a dataclass document type.

    Metadata bindings whose attribute type does not match the slot type are
    ignored rather than rejected, so partially annotated classes still work.

    Args:
        document_type: Dataclass describing the document body.

    Returns:
        Schema descriptor for the class.

    Raises:
        TypeError: If ``document_type`` is not a dataclass type.
    """
    if not isinstance(document_type, type) or not dataclasses.is_dataclass(document_type):
        raise TypeError("document type must be a dataclass")

    hints = typing.get_type_hints(document_type)
    body_fields: list[tuple[str, str]] = []
    slots: dict[str, str] = {}
    field_types: dict[str, Any] = {}
    required: list[str] = []

    for f in dataclasses.fields(document_type):
        if not f.init:
            continue
        annotation = hints.get(f.name, Any)
        field_types[f.name] = annotation
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.append(f.name)

        slot = f.metadata.get(_ES_KEY)
        if slot in _SLOT_TYPES and _unwrap_optional(annotation) is _SLOT_TYPES[slot]:
            slots[slot] = f.name

        json_name = f.metadata.get(_JSON_KEY)
        if json_name == _SKIP or (json_name is None and slot is not None):
            continue
        body_fields.append(((json_name or f.name).strip(), f.name))

    return SchemaDescriptor(
        document_type=document_type,
        fields=tuple(body_fields),
        fetch_source=bool(body_fields),
        slots=slots,
        field_types=field_types,
        required=tuple(required),
    )


def raw_schema() -> SchemaDescriptor:
    """Schema for plain ``dict`` documents carrying the full ``_source``.

    Metadata is stored under the slot names themselves (``doc["_id"]``...).
    """
    return SchemaDescriptor(document_type=dict, slots={slot: slot for slot in _SLOT_TYPES})


def projection_fields(schema: SchemaDescriptor) -> tuple[str, ...]:
    """Return body field names requested from the engine, in order."""
    return tuple(json_name for json_name, _ in schema.fields)


def projection(schema: SchemaDescriptor) -> bool | dict[str, list[str]]:
    """Return the ``_source`` value of a search or get request."""
    if not schema.fetch_source:
        return False
    names = projection_fields(schema)
    if not names:
        return True
    return {"includes": list(names)}


def to_document(schema: SchemaDescriptor, source: Any, envelope: HitEnvelope) -> Any:
    """Convert one engine record into a document instance.

    Args:
        schema: Schema of the target document type.
        source: Decoded ``_source`` object, or None when the engine sent none.
        envelope: Hit metadata overlaid onto the bound slots.

    Returns:
        Document instance.

    Raises:
        DecodeError: If the body does not fit the schema.
    """
    if source is not None and not isinstance(source, Mapping):
        raise DecodeError(f"document body must be an object, got {type(source).__name__}")

    if schema.is_mapping:
        doc = dict(source or {})
        for slot, key in schema.slots.items():
            value = envelope.slot_value(slot)
            if value is not None:
                doc[key] = value
        return schema.document_type(doc)

    values: dict[str, Any] = {}
    if source:
        for json_name, attr in schema.fields:
            if json_name in source:
                values[attr] = _decode_value(source[json_name], schema.field_types.get(attr, Any), json_name)

    for slot, attr in schema.slots.items():
        value = envelope.slot_value(slot)
        if value is None:
            continue
        values[attr] = float(value) if slot == META_SCORE else value

    for attr in schema.required:
        if attr not in values:
            values[attr] = _zero_value(schema.field_types.get(attr, Any))

    try:
        return schema.document_type(**values)
    except (TypeError, ValueError) as error:
        raise DecodeError(f"cannot build {schema.document_type.__name__}: {error}") from error


def to_body(schema: SchemaDescriptor, document: Any) -> dict[str, Any]:
    """Serialize a document into the JSON body stored by the engine.

    Metadata-only attributes are left out; mappings are passed through.
    """
    if isinstance(document, Mapping):
        return {key: _encode_value(value) for key, value in document.items()}
    if not dataclasses.is_dataclass(document) or isinstance(document, type):
        raise TypeError(f"cannot serialize {type(document).__name__} as a document")
    if not isinstance(document, schema.document_type):
        schema = describe(type(document))
    return {json_name: _encode_value(getattr(document, attr)) for json_name, attr in schema.fields}


def _decode_value(value: Any, annotation: Any, key: str) -> Any:
    if value is None:
        return None
    target = _unwrap_optional(annotation)
    if target is Any:
        return value

    origin = typing.get_origin(target)
    if origin is not None:
        container = {list: list, tuple: list, set: list, dict: Mapping}.get(origin)
        if container is None:
            return value
        if not isinstance(value, container):
            raise DecodeError(f"field {key!r} expects {origin.__name__}, got {type(value).__name__}")
        return _decode_container(value, origin, typing.get_args(target), key)

    if target is bool:
        if not isinstance(value, bool):
            raise DecodeError(f"field {key!r} expects bool, got {type(value).__name__}")
        return value
    if target is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"field {key!r} expects int, got {type(value).__name__}")
        return value
    if target is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DecodeError(f"field {key!r} expects float, got {type(value).__name__}")
        return float(value)
    if target is str:
        if not isinstance(value, str):
            raise DecodeError(f"field {key!r} expects str, got {type(value).__name__}")
        return value
    if target is datetime:
        if not isinstance(value, str):
            raise DecodeError(f"field {key!r} expects a datetime string, got {type(value).__name__}")
        try:
            return dt_parser.isoparse(value)
        except ValueError as error:
            raise DecodeError(f"field {key!r} is not an ISO-8601 datetime: {value!r}") from error
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        if not isinstance(value, Mapping):
            raise DecodeError(f"field {key!r} expects an object, got {type(value).__name__}")
        return to_document(describe(target), value, HitEnvelope())
    return value


def _decode_container(value: Any, origin: type, args: tuple[Any, ...], key: str) -> Any:
    """Decode every item of a JSON array or object against its annotation."""
    if origin is dict:
        value_type = args[1] if len(args) == 2 else Any
        return {name: _decode_value(item, value_type, f"{key}.{name}") for name, item in value.items()}

    if origin is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
        if len(args) != len(value):
            raise DecodeError(f"field {key!r} expects {len(args)} items, got {len(value)}")
        return tuple(_decode_value(item, arg, f"{key}[{i}]") for i, (item, arg) in enumerate(zip(value, args)))

    item_type = args[0] if args else Any
    items = [_decode_value(item, item_type, f"{key}[{i}]") for i, item in enumerate(value)]
    if origin is list:
        return items
    try:
        return origin(items)
    except TypeError as error:
        raise DecodeError(f"field {key!r} items cannot form a {origin.__name__}: {error}") from error


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_body(describe(type(value)), value)
    if isinstance(value, (list, tuple, set)):
        return [_encode_value(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _encode_value(item) for key, item in value.items()}
    return value


def _unwrap_optional(annotation: Any) -> Any:
    """Return ``X`` for ``X | None``; other annotations are returned unchanged."""
    if typing.get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _zero_value(annotation: Any) -> Any:
    if _unwrap_optional(annotation) is not annotation:
        return None
    origin = typing.get_origin(annotation) or annotation
    zeros: dict[Any, Any] = {str: "", int: 0, float: 0.0, bool: False, list: [], dict: {}, tuple: (), set: set()}
    if origin in zeros:
        return zeros[origin]
    return None
