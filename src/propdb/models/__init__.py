"""Value models for propdb."""

from propdb.models.value import PRIMARY_TAGS, EntryTag, TaggedValue, ValueKind
from propdb.models.vector import Vector, is_vector

__all__ = [
    "PRIMARY_TAGS",
    "EntryTag",
    "TaggedValue",
    "ValueKind",
    "Vector",
    "is_vector",
]
