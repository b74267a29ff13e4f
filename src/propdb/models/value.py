"""Entry tags and tagged values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from propdb.models.vector import Vector


class EntryTag(StrEnum):
    """How one substrate entry of a logical key is encoded."""

    NATIVE = "N_"
    STRING = "S_"
    META_CHUNK = "M_"
    DATA_CHUNK = "D_"


#: Tags whose presence alone proves a key exists.
PRIMARY_TAGS: tuple[EntryTag, ...] = (EntryTag.NATIVE, EntryTag.STRING, EntryTag.META_CHUNK)


class ValueKind(StrEnum):
    SCALAR = "scalar"
    FLAG = "flag"
    TEXT = "text"
    VECTOR = "vector"
    STRUCTURED = "structured"


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """A value classified once, at write time.

    ``original`` is what the caller passed to ``set`` (and what the cache
    holds). ``stored`` is what reaches the substrate: the native value for
    scalars, flags and vectors, or the JSON text payload otherwise.
    """

    kind: ValueKind
    original: Any
    stored: int | float | bool | str | Vector

    @property
    def is_native(self) -> bool:
        return self.kind in (ValueKind.SCALAR, ValueKind.FLAG, ValueKind.VECTOR)

    @property
    def text(self) -> str:
        if not isinstance(self.stored, str):
            raise TypeError(f"{self.kind} values have no text payload")
        return self.stored
