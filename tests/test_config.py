from __future__ import annotations

import pytest

from propdb._constants import MAX_ENTRY_SIZE
from propdb.config import StoreConfig
from propdb.exceptions import PropDbConfigError


def test_defaults() -> None:
    config = StoreConfig()
    assert config.auto_cache is True
    assert config.max_entry_size == MAX_ENTRY_SIZE


def test_from_env_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPDB_AUTO_CACHE", "off")
    monkeypatch.setenv("PROPDB_MAX_ENTRY_SIZE", "1024")
    monkeypatch.setenv("PROPDB_LOG_PREVIEW_CHARS", "8")

    config = StoreConfig.from_env()
    assert config.auto_cache is False
    assert config.max_entry_size == 1024
    assert config.log_preview_chars == 8


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPDB_AUTO_CACHE", "0")
    monkeypatch.setenv("PROPDB_MAX_ENTRY_SIZE", "not-a-number")

    config = StoreConfig.from_env(auto_cache=True, max_entry_size=64)
    assert config.auto_cache is True
    assert config.max_entry_size == 64


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("PROPDB_AUTO_CACHE", "maybe"),
        ("PROPDB_MAX_ENTRY_SIZE", "big"),
        ("PROPDB_MAX_ENTRY_SIZE", "0"),
    ],
)
def test_from_env_rejects_bad_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(PropDbConfigError):
        StoreConfig.from_env()


def test_invalid_direct_values() -> None:
    with pytest.raises(PropDbConfigError):
        StoreConfig(max_entry_size=-1)
    with pytest.raises(PropDbConfigError):
        StoreConfig(log_preview_chars=-1)
