from __future__ import annotations

import json

import pytest

from propdb._codec import classify_value, decode_payload, encode_payload, split_into_chunks, text_units
from propdb.exceptions import DecodeError, UnsupportedValueError
from propdb.models.value import ValueKind
from propdb.models.vector import Vector, is_vector


def test_split_into_chunks_covers_input_exactly() -> None:
    text = "abcdefghij"
    chunks = split_into_chunks(text, 3)
    assert chunks == ["abc", "def", "ghi", "j"]
    assert "".join(chunks) == text


def test_split_into_chunks_exact_multiple_has_no_empty_tail() -> None:
    assert split_into_chunks("abcdef", 3) == ["abc", "def"]
    assert split_into_chunks("", 3) == []


def test_split_into_chunks_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        split_into_chunks("abc", 0)


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (True, ValueKind.FLAG),
        (0, ValueKind.SCALAR),
        (2.5, ValueKind.SCALAR),
        ("text", ValueKind.TEXT),
        ({"x": 1, "y": 2, "z": 3}, ValueKind.VECTOR),
        (Vector(x=1.0, y=2.0, z=3.0), ValueKind.VECTOR),
        ({"x": 1, "y": 2}, ValueKind.STRUCTURED),
        ({"x": True, "y": 2, "z": 3}, ValueKind.STRUCTURED),
        ({"x": "1", "y": 2, "z": 3}, ValueKind.STRUCTURED),
        ([1, 2, 3], ValueKind.STRUCTURED),
    ],
)
def test_classify_value(value: object, kind: ValueKind) -> None:
    assert classify_value(value).kind is kind


def test_classified_text_is_a_json_literal() -> None:
    tagged = classify_value('say "hi"')
    assert tagged.text == '"say \\"hi\\""'
    assert json.loads(tagged.text) == 'say "hi"'
    assert not tagged.is_native


def test_classified_vector_is_stored_as_model() -> None:
    tagged = classify_value({"x": 1, "y": 2, "z": 3})
    assert tagged.is_native
    assert tagged.stored == Vector(x=1, y=2, z=3)
    assert tagged.original == {"x": 1, "y": 2, "z": 3}
    with pytest.raises(TypeError):
        _ = tagged.text


def test_structured_payload_is_compact() -> None:
    assert encode_payload({"a": [1, 2], "b": "é"}) == '{"a":[1,2],"b":"é"}'


@pytest.mark.parametrize("value", [None, object(), {"bad": object()}, b"bytes"])
def test_unsupported_values(value: object) -> None:
    with pytest.raises(UnsupportedValueError):
        classify_value(value)


def test_decode_payload_error_keeps_raw_text() -> None:
    with pytest.raises(DecodeError) as exc_info:
        decode_payload("not json")
    assert exc_info.value.raw == "not json"


def test_is_vector_rejects_bools_and_extra_fields() -> None:
    assert is_vector({"x": 0, "y": 0.5, "z": -1})
    assert not is_vector({"x": 0, "y": 0, "z": False})
    assert not is_vector({"x": 0, "y": 0, "z": 0, "w": 0})
    assert not is_vector([0, 0, 0])
    assert not is_vector(None)


def test_text_units_count_astral_characters_twice() -> None:
    assert text_units("abc") == 3
    assert text_units("a😀") == 3


def test_split_into_chunks_never_splits_surrogate_pairs() -> None:
    assert split_into_chunks("a😀b😀", 2) == ["a", "😀", "b", "😀"]
    assert split_into_chunks("😀😀😀", 4) == ["😀😀", "😀"]
    with pytest.raises(ValueError):
        split_into_chunks("😀", 1)


def test_vector_equals_matching_mapping() -> None:
    vector = Vector(x=1, y=2.5, z=-3)
    assert vector == {"x": 1, "y": 2.5, "z": -3}
    assert {"x": 1, "y": 2.5, "z": -3} == vector
    assert vector != {"x": 1, "y": 2.5, "z": 0}
    assert vector != {"x": 1, "y": 2.5, "z": -3, "w": 0}
    assert vector == Vector(x=1, y=2.5, z=-3)
    assert len({vector, Vector(x=1, y=2.5, z=-3)}) == 1
