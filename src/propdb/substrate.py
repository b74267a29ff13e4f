"""Flat property stores that a :class:`~propdb.store.ChunkedKeyValueStore` sits on.

The host supplies the real substrate. The two implementations here are a
dict-backed store and a JSON-file store that survives process restarts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, TypeAlias, runtime_checkable

from propdb._codec import text_units
from propdb._constants import MAX_ENTRY_SIZE
from propdb.exceptions import DecodeError, EntryTooLargeError, UnsupportedValueError
from propdb.models.vector import Vector, is_vector

_logger = logging.getLogger(__name__)

PropertyValue: TypeAlias = int | float | bool | str | Vector


@runtime_checkable
class PropertyStore(Protocol):
    """Host facility storing small scalar values under string ids."""

    def set_property(self, property_id: str, value: PropertyValue | None = None) -> None:
        """Store *value* under *property_id*; ``None`` removes the entry."""
        ...

    def get_property(self, property_id: str) -> PropertyValue | None:
        """Return the value under *property_id* or ``None``."""
        ...

    def list_property_ids(self) -> set[str]:
        """Return every id currently set, across all namespaces."""
        ...


def _check_value(property_id: str, value: PropertyValue, max_entry_size: int) -> PropertyValue:
    if isinstance(value, str):
        size = text_units(value)
        if size > max_entry_size:
            raise EntryTooLargeError(
                f"Value for {property_id!r} is {size} UTF-16 units, limit is {max_entry_size}",
                entry_id=property_id,
                size=size,
            )
        return value
    if isinstance(value, (bool, int, float, Vector)):
        return value
    raise UnsupportedValueError(f"Property values must be scalars or vectors, got {type(value).__name__}")


class InMemoryPropertyStore:
    """Dict-backed :class:`PropertyStore`."""

    def __init__(self, *, max_entry_size: int = MAX_ENTRY_SIZE) -> None:
        self._max_entry_size = max_entry_size
        self._entries: dict[str, PropertyValue] = {}

    def set_property(self, property_id: str, value: PropertyValue | None = None) -> None:
        if value is None:
            self._entries.pop(property_id, None)
            return
        self._entries[property_id] = _check_value(property_id, value, self._max_entry_size)

    def get_property(self, property_id: str) -> PropertyValue | None:
        return self._entries.get(property_id)

    def list_property_ids(self) -> set[str]:
        return set(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class JsonFilePropertyStore(InMemoryPropertyStore):
    """:class:`PropertyStore` persisted to a JSON object file.

    The whole file is rewritten after every mutation. Vectors are written as
    ``{"x": .., "y": .., "z": ..}`` objects and restored as :class:`Vector`.
    """

    def __init__(self, path: str | Path, *, max_entry_size: int = MAX_ENTRY_SIZE) -> None:
        super().__init__(max_entry_size=max_entry_size)
        self._path = Path(path)
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return
        try:
            raw = json.loads(text)
        except ValueError as exc:
            raise DecodeError(f"Property file {self._path} is not valid JSON: {exc}", raw=text) from exc
        if not isinstance(raw, dict):
            raise DecodeError(f"Property file {self._path} must hold a JSON object", raw=text)

        for property_id, value in raw.items():
            if is_vector(value):
                value = Vector.coerce(value)
            self._entries[property_id] = _check_value(property_id, value, self._max_entry_size)
        _logger.debug("Loaded %d properties from %s", len(self._entries), self._path)

    def _save(self) -> None:
        serializable = {
            property_id: value.as_dict() if isinstance(value, Vector) else value
            for property_id, value in self._entries.items()
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps(serializable, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self._path)

    def set_property(self, property_id: str, value: PropertyValue | None = None) -> None:
        super().set_property(property_id, value)
        self._save()
