"""Custom exception hierarchy for propdb."""

from __future__ import annotations


class PropDbError(Exception):
    """Base exception for all propdb errors."""


class PropDbConfigError(PropDbError):
    """Invalid or missing configuration."""


class InvalidIdentifierError(PropDbError, ValueError):
    """A database id or logical key was rejected at the call boundary."""

    def __init__(self, message: str, *, identifier: object = None) -> None:
        self.identifier = identifier
        super().__init__(message)


class InvalidDatabaseIdError(InvalidIdentifierError):
    """Database id is empty, not a string, or contains a reserved sequence."""


class InvalidKeyError(InvalidIdentifierError):
    """Logical key is empty, not a string, or contains a reserved sequence."""


class UnsupportedValueError(PropDbError, TypeError):
    """Value cannot be encoded into property entries."""


class EntryTooLargeError(PropDbError):
    """A substrate refused a value above its per-entry size limit."""

    def __init__(self, message: str, *, entry_id: str = "", size: int = 0) -> None:
        self.entry_id = entry_id
        self.size = size
        super().__init__(message)


class DecodeError(PropDbError):
    """Stored text is not valid JSON.

    Raised by the codec and recovered by the store, which falls back to the
    raw string so plain-text values written by other tools stay readable.
    """

    def __init__(self, message: str, *, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message)


class MissingChunkError(PropDbError):
    """A data chunk referenced by a chunk count is absent.

    Recovered by the store: the read reports the value as absent.
    """

    def __init__(self, message: str, *, key: str = "", index: int = -1) -> None:
        self.key = key
        self.index = index
        super().__init__(message)
