"""Three-component numeric record stored natively by the substrate."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt

_VECTOR_FIELDS = frozenset({"x", "y", "z"})


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_vector(value: Any) -> bool:
    """Return ``True`` when *value* has exactly numeric ``x``, ``y`` and ``z``.

    Accepts :class:`Vector` instances and plain mappings. A mapping with any
    additional field is a structure, not a vector.
    """
    if isinstance(value, Vector):
        return True
    if not isinstance(value, Mapping):
        return False
    if set(value.keys()) != _VECTOR_FIELDS:
        return False
    return all(_is_number(value[name]) for name in _VECTOR_FIELDS)


class Vector(BaseModel):
    """Native vector value.

    Vectors set at the top level of a key are written as a single native
    entry and read back as this model. Vectors nested inside a larger
    structure are ordinary JSON objects.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: StrictInt | StrictFloat
    y: StrictInt | StrictFloat
    z: StrictInt | StrictFloat

    @classmethod
    def coerce(cls, value: Vector | Mapping[str, Any]) -> Vector:
        """Return *value* as a :class:`Vector`."""
        if isinstance(value, Vector):
            return value
        return cls.model_validate(dict(value))

    def as_dict(self) -> dict[str, int | float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def __eq__(self, other: object) -> bool:
        # A vector read back from the substrate equals the mapping it was set from.
        if isinstance(other, Mapping):
            return is_vector(other) and self.as_dict() == dict(other)
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.z))
