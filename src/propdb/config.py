"""Store configuration for propdb."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from propdb._constants import ENV_PREFIX, MAX_ENTRY_SIZE
from propdb.exceptions import PropDbConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise PropDbConfigError(f"Expected a boolean, got {value!r}")


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise PropDbConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store configuration.

    Parameters
    ----------
    auto_cache : bool
        Populate the value cache on reads and writes. Turn off for stores
        with very large values or very many keys.
    max_entry_size : int
        Largest text payload written to a single entry, in UTF-16 code
        units (astral characters count twice). Longer payloads are
        chunked. Must not exceed what the substrate accepts.
    log_preview_chars : int
        Characters of a value shown in DEBUG log lines.
    """

    auto_cache: bool = True
    max_entry_size: int = MAX_ENTRY_SIZE
    log_preview_chars: int = 64

    def __post_init__(self) -> None:
        if self.max_entry_size < 1:
            raise PropDbConfigError(f"max_entry_size must be positive, got {self.max_entry_size}")
        if self.log_preview_chars < 0:
            raise PropDbConfigError(f"log_preview_chars must not be negative, got {self.log_preview_chars}")

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``PROPDB_AUTO_CACHE``, ``PROPDB_MAX_ENTRY_SIZE`` and
        ``PROPDB_LOG_PREVIEW_CHARS``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        auto_cache_env = env.get(f"{ENV_PREFIX}AUTO_CACHE")
        if auto_cache_env is not None and "auto_cache" not in overrides:
            config_kwargs["auto_cache"] = _env_bool(auto_cache_env, True)

        for field_name in ("max_entry_size", "log_preview_chars"):
            env_key = f"{ENV_PREFIX}{field_name.upper()}"
            raw = env.get(env_key)
            if raw is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, raw)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
