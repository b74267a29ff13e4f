from __future__ import annotations

from propdb._preview import preview_for_log
from propdb.models.vector import Vector


def test_preview_truncates_long_strings() -> None:
    shown = preview_for_log("x" * 600, max_string=10)
    assert shown.startswith("x" * 10)
    assert shown.endswith("<600 chars>")


def test_preview_limits_container_items() -> None:
    shown = preview_for_log({f"k{i}": i for i in range(20)})
    assert len(shown) == 9
    assert shown["…"] == "<12 more>"

    items = preview_for_log(list(range(20)))
    assert items[-1] == "<12 more>"


def test_preview_keeps_scalars_and_dumps_models() -> None:
    assert preview_for_log(5) == 5
    assert preview_for_log(None) is None
    assert preview_for_log(Vector(x=1, y=2, z=3)) == {"x": 1, "y": 2, "z": 3}
    assert preview_for_log(object()) == "<object>"
