"""Value classification, JSON payloads and chunk splitting."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from propdb.exceptions import DecodeError, UnsupportedValueError
from propdb.models.value import TaggedValue, ValueKind
from propdb.models.vector import Vector, is_vector

_JSON_SEPARATORS = (",", ":")


def _json_default(value: Any) -> Any:
    if isinstance(value, Vector):
        return value.as_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_payload(value: Any) -> str:
    """Serialize *value* to the canonical compact JSON text."""
    try:
        return json.dumps(value, ensure_ascii=False, separators=_JSON_SEPARATORS, default=_json_default)
    except (TypeError, ValueError) as exc:
        raise UnsupportedValueError(f"Cannot encode value of type {type(value).__name__}: {exc}") from exc


def decode_payload(text: str) -> Any:
    """Parse a stored text payload.

    Raises :class:`DecodeError` when *text* is not JSON.
    """
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeError(f"Stored text is not JSON: {exc}", raw=text) from exc


def classify_value(value: Any) -> TaggedValue:
    """Classify *value* into its :class:`ValueKind` and compute what gets stored.

    Text is stored as its JSON string literal so it reads back as text even
    when it happens to look like a number or an object. The two quotes count
    toward the entry size: a string of ``max_entry_size - 1`` units or more is
    chunked, and so is any string whose escapes push it over the limit.
    """
    if value is None:
        raise UnsupportedValueError("None marks an absent value and cannot be stored")
    if isinstance(value, bool):
        return TaggedValue(ValueKind.FLAG, value, value)
    if isinstance(value, (int, float)):
        return TaggedValue(ValueKind.SCALAR, value, value)
    if isinstance(value, str):
        return TaggedValue(ValueKind.TEXT, value, encode_payload(value))
    if is_vector(value):
        return TaggedValue(ValueKind.VECTOR, value, Vector.coerce(value))
    if isinstance(value, (Mapping, list, tuple, set, frozenset, BaseModel)):
        return TaggedValue(ValueKind.STRUCTURED, value, encode_payload(value))
    raise UnsupportedValueError(f"Unsupported value type: {type(value).__name__}")


def text_units(text: str) -> int:
    """Length of *text* in UTF-16 code units, the unit entry limits are counted in.

    Characters outside the Basic Multilingual Plane count twice.
    """
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2


def split_into_chunks(text: str, size: int) -> list[str]:
    """Split *text* into consecutive pieces of at most *size* UTF-16 units.

    The pieces cover *text* exactly; only the last may be shorter. Surrogate
    pairs are never split.
    """
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    if text_units(text) == len(text):
        return [text[start : start + size] for start in range(0, len(text), size)]

    chunks: list[str] = []
    start = 0
    units = 0
    for index, char in enumerate(text):
        width = 2 if ord(char) > 0xFFFF else 1
        if width > size:
            raise ValueError(f"chunk size {size} cannot hold the character at index {index}")
        if units + width > size:
            chunks.append(text[start:index])
            start = index
            units = 0
        units += width
    if start < len(text):
        chunks.append(text[start:])
    return chunks
