"""Document — the recursive value type used for tool input and output.

A :data:`Document` is one of object, array, string, number, boolean or null.
Numbers keep the integer/floating distinction: ``NumberDocument(value=5)``
and ``NumberDocument(value=5.0)`` serialize differently and come back as the
variant they started as.

The codec converts between documents and plain JSON values (the ``dict`` /
``list`` / ``str`` / ``int`` / ``float`` / ``bool`` / ``None`` values produced
by :func:`json.loads`)::

    doc = from_generic({"path": "a.txt", "limit": 5})
    assert to_generic(doc) == {"path": "a.txt", "limit": 5}
"""

from __future__ import annotations

import json
import math
from functools import singledispatch
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from turnbridge.core.errors import EncodingError

JsonValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]


class ObjectDocument(BaseModel):
    """Mapping of string keys to documents. Key order is not significant."""

    kind: Literal["object"] = "object"
    fields: dict[str, Document] = {}


class ArrayDocument(BaseModel):
    """Ordered sequence of documents."""

    kind: Literal["array"] = "array"
    items: list[Document] = []


class StringDocument(BaseModel):
    kind: Literal["string"] = "string"
    value: StrictStr


class NumberDocument(BaseModel):
    """An integer or floating-point number."""

    kind: Literal["number"] = "number"
    value: StrictInt | StrictFloat

    @property
    def is_integer(self) -> bool:
        return isinstance(self.value, int)


class BooleanDocument(BaseModel):
    kind: Literal["boolean"] = "boolean"
    value: StrictBool


class NullDocument(BaseModel):
    kind: Literal["null"] = "null"


Document = Annotated[
    Union[
        ObjectDocument,
        ArrayDocument,
        StringDocument,
        NumberDocument,
        BooleanDocument,
        NullDocument,
    ],
    Field(discriminator="kind"),
]

ObjectDocument.model_rebuild()
ArrayDocument.model_rebuild()


# ---------------------------------------------------------------------------
# Document -> JSON value
# ---------------------------------------------------------------------------


@singledispatch
def to_generic(document: Any) -> JsonValue:
    """Convert a :data:`Document` into a plain JSON value.

    Raises:
        EncodingError: If the document holds a non-finite number or is not
            a document at all.
    """
    raise EncodingError(f"unsupported document type {type(document).__name__}")


@to_generic.register
def _(document: ObjectDocument) -> JsonValue:
    return {key: to_generic(value) for key, value in document.fields.items()}


@to_generic.register
def _(document: ArrayDocument) -> JsonValue:
    return [to_generic(item) for item in document.items]


@to_generic.register
def _(document: StringDocument) -> JsonValue:
    return document.value


@to_generic.register
def _(document: NumberDocument) -> JsonValue:
    value = document.value
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodingError(f"non-finite number {value!r}")
    return value


@to_generic.register
def _(document: BooleanDocument) -> JsonValue:
    return document.value


@to_generic.register
def _(document: NullDocument) -> JsonValue:
    return None


# ---------------------------------------------------------------------------
# JSON value -> Document
# ---------------------------------------------------------------------------


def from_generic(value: Any) -> Document:
    """Convert a plain JSON value into a :data:`Document`.

    ``bool`` is checked before ``int`` since it is a subclass of it; tuples
    are accepted as arrays.

    Raises:
        EncodingError: On non-finite floats, non-string object keys or
            values with no JSON representation.
    """
    if value is None:
        return NullDocument()
    if isinstance(value, bool):
        return BooleanDocument(value=value)
    if isinstance(value, int):
        return NumberDocument(value=int(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodingError(f"non-finite number {value!r}")
        return NumberDocument(value=value)
    if isinstance(value, str):
        return StringDocument(value=value)
    if isinstance(value, dict):
        fields: dict[str, Document] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodingError(f"object key {key!r} is not a string")
            fields[key] = from_generic(item)
        return ObjectDocument(fields=fields)
    if isinstance(value, (list, tuple)):
        return ArrayDocument(items=[from_generic(item) for item in value])
    raise EncodingError(f"unsupported value type {type(value).__name__}")


def to_json(document: Document) -> str:
    """Serialize a document to compact JSON text."""
    return json.dumps(to_generic(document), separators=(",", ":"), allow_nan=False)


def from_json(text: str) -> Document:
    """Parse JSON text into a document.

    Raises:
        EncodingError: If the text is not valid JSON or holds ``NaN``/``Infinity``.
    """
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise EncodingError(f"invalid JSON: {exc.msg}") from exc
    return from_generic(value)


def _reject_constant(name: str) -> Any:
    raise EncodingError(f"non-finite number {name}")
