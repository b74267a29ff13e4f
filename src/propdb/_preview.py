"""Helpers for compact debug logging.

Stored values can be tens of kilobytes of JSON spread over many chunks.
This module shortens values before they reach a DEBUG log line.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

_MAX_ITEMS = 8


def preview_for_log(value: Any, *, max_string: int = 64, _depth: int = 0) -> Any:
    """Return a shortened copy of *value* suitable for debug logs."""
    if _depth > 4:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<{len(value)} chars>"
        return value

    if isinstance(value, BaseModel):
        return preview_for_log(value.model_dump(), max_string=max_string, _depth=_depth)

    if isinstance(value, Mapping):
        shown: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= _MAX_ITEMS:
                shown["…"] = f"<{len(value) - _MAX_ITEMS} more>"
                break
            shown[str(k)] = preview_for_log(v, max_string=max_string, _depth=_depth + 1)
        return shown

    if isinstance(value, Sequence):
        items = [preview_for_log(v, max_string=max_string, _depth=_depth + 1) for v in list(value)[:_MAX_ITEMS]]
        if len(value) > _MAX_ITEMS:
            items.append(f"<{len(value) - _MAX_ITEMS} more>")
        return items

    return f"<{type(value).__name__}>"
