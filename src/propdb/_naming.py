"""Entry id construction and parsing.

Every entry a store owns is named::

    <INTERNAL_DB_PREFIX><database_id>_<tag><key>[_<chunk index>]

Only data chunks carry the trailing index.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

from propdb._constants import ID_DELIMITER, INTERNAL_DB_PREFIX
from propdb.exceptions import InvalidDatabaseIdError, InvalidKeyError
from propdb.models.value import EntryTag


class ParsedEntryId(NamedTuple):
    tag: EntryTag
    key: str
    index: int | None


def validate_database_id(database_id: Any) -> str:
    """Return *database_id* or raise :class:`InvalidDatabaseIdError`.

    The delimiter is rejected so that no store prefix is a prefix of another
    store's entries.
    """
    if not isinstance(database_id, str) or not database_id.strip():
        raise InvalidDatabaseIdError("Database id must be a non-empty string", identifier=database_id)
    if INTERNAL_DB_PREFIX in database_id:
        raise InvalidDatabaseIdError(
            f"Database id must not contain the reserved marker {INTERNAL_DB_PREFIX!r}",
            identifier=database_id,
        )
    if ID_DELIMITER in database_id:
        raise InvalidDatabaseIdError(
            f"Database id must not contain the delimiter {ID_DELIMITER!r}",
            identifier=database_id,
        )
    return database_id


def validate_key(key: Any) -> str:
    """Return *key* or raise :class:`InvalidKeyError`."""
    if not isinstance(key, str) or not key.strip():
        raise InvalidKeyError("Key must be a non-empty string", identifier=key)
    if INTERNAL_DB_PREFIX in key:
        raise InvalidKeyError(
            f"Key must not contain the reserved marker {INTERNAL_DB_PREFIX!r}",
            identifier=key,
        )
    return key


def store_prefix(database_id: str) -> str:
    return f"{INTERNAL_DB_PREFIX}{database_id}{ID_DELIMITER}"


def build_entry_id(prefix: str, key: str, tag: EntryTag, index: int | None = None) -> str:
    """Build the substrate id for one entry of *key*.

    Data chunks require *index*; every other tag forbids it.
    """
    if tag is EntryTag.DATA_CHUNK:
        if index is None or index < 0:
            raise ValueError("data chunk ids require a non-negative index")
        return f"{prefix}{tag}{key}{ID_DELIMITER}{index}"
    if index is not None:
        raise ValueError(f"{tag.name} ids take no chunk index")
    return f"{prefix}{tag}{key}"


def compile_entry_pattern(prefix: str) -> re.Pattern[str]:
    primary = "|".join(re.escape(tag) for tag in (EntryTag.NATIVE, EntryTag.STRING, EntryTag.META_CHUNK))
    return re.compile(
        rf"{re.escape(prefix)}"
        rf"(?:(?P<tag>{primary})(?P<key>.+)"
        rf"|{re.escape(EntryTag.DATA_CHUNK)}(?P<chunk_key>.+?){re.escape(ID_DELIMITER)}(?P<index>\d+))",
        re.DOTALL,
    )


def parse_entry_id(pattern: re.Pattern[str], entry_id: str) -> ParsedEntryId | None:
    """Split an entry id into tag, logical key and chunk index.

    Returns ``None`` for ids that do not belong to the pattern's store.
    """
    match = pattern.fullmatch(entry_id)
    if match is None:
        return None
    if match.group("tag") is not None:
        return ParsedEntryId(EntryTag(match.group("tag")), match.group("key"), None)
    return ParsedEntryId(EntryTag.DATA_CHUNK, match.group("chunk_key"), int(match.group("index")))
