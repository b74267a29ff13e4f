"""propdb - Chunked key-value store on top of flat property stores."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("propdb")
except PackageNotFoundError:
    __version__ = "0+local"
from propdb._constants import INTERNAL_DB_PREFIX, MAX_ENTRY_SIZE
from propdb.config import StoreConfig
from propdb.exceptions import (
    DecodeError,
    EntryTooLargeError,
    InvalidDatabaseIdError,
    InvalidIdentifierError,
    InvalidKeyError,
    MissingChunkError,
    PropDbConfigError,
    PropDbError,
    UnsupportedValueError,
)
from propdb.models import EntryTag, TaggedValue, ValueKind, Vector, is_vector
from propdb.registry import StoreRegistry
from propdb.scheduler import LoopTickScheduler, TaskQueue, TickScheduler
from propdb.store import ChunkedKeyValueStore
from propdb.substrate import InMemoryPropertyStore, JsonFilePropertyStore, PropertyStore

__all__ = [
    "__version__",
    "INTERNAL_DB_PREFIX",
    "MAX_ENTRY_SIZE",
    "ChunkedKeyValueStore",
    "DecodeError",
    "EntryTag",
    "EntryTooLargeError",
    "InMemoryPropertyStore",
    "InvalidDatabaseIdError",
    "InvalidIdentifierError",
    "InvalidKeyError",
    "JsonFilePropertyStore",
    "LoopTickScheduler",
    "MissingChunkError",
    "PropDbConfigError",
    "PropDbError",
    "PropertyStore",
    "StoreConfig",
    "StoreRegistry",
    "TaggedValue",
    "TaskQueue",
    "TickScheduler",
    "UnsupportedValueError",
    "ValueKind",
    "Vector",
    "is_vector",
]
