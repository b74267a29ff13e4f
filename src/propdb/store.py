"""Chunked key-value store on top of a flat property store.

Each logical key is written with exactly one encoding:

* a native entry (numbers, booleans, vectors),
* a string entry (JSON text that fits one entry), or
* a chunk count entry plus that many data chunk entries.

The key index and the value cache live in memory only. The index is rebuilt
from the substrate when a store is constructed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from propdb._codec import classify_value, decode_payload, split_into_chunks, text_units
from propdb._naming import (
    build_entry_id,
    compile_entry_pattern,
    parse_entry_id,
    store_prefix,
    validate_database_id,
    validate_key,
)
from propdb._preview import preview_for_log
from propdb.config import StoreConfig
from propdb.exceptions import DecodeError, InvalidKeyError, MissingChunkError
from propdb.models.value import PRIMARY_TAGS, EntryTag, TaggedValue
from propdb.scheduler import LoopTickScheduler, TickScheduler
from propdb.substrate import PropertyStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _chunk_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


class ChunkedKeyValueStore:
    """Key-value store for one database id on one property store.

    Usage::

        store = ChunkedKeyValueStore("profiles", substrate)
        store.set("score", 42).set("pos", {"x": 1, "y": 2, "z": 3})
        store.get("score")

    Prefer :meth:`propdb.registry.StoreRegistry.open`, which hands out one
    shared instance per ``(source, database_id)`` pair. Two independent
    instances over the same pair keep divergent caches.
    """

    def __init__(
        self,
        database_id: str,
        source: PropertyStore,
        *,
        config: StoreConfig | None = None,
        scheduler: TickScheduler | None = None,
    ) -> None:
        self._database_id = validate_database_id(database_id)
        self._source = source
        self._config = config or StoreConfig()
        self._scheduler: TickScheduler = scheduler or LoopTickScheduler()
        self._prefix = store_prefix(database_id)
        self._entry_pattern = compile_entry_pattern(self._prefix)
        self._auto_cache = self._config.auto_cache
        self._max_entry_size = self._config.max_entry_size
        self._cache: dict[str, Any] = {}
        self._known_keys: set[str] = set()
        self._initialize_from_properties()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def database_id(self) -> str:
        return self._database_id

    @property
    def source(self) -> PropertyStore:
        return self._source

    @property
    def prefix(self) -> str:
        """Prefix shared by every substrate id this store owns."""
        return self._prefix

    @property
    def size(self) -> int:
        """Number of indexed keys."""
        return len(self._known_keys)

    @property
    def auto_cache(self) -> bool:
        return self._auto_cache

    def __len__(self) -> int:
        return len(self._known_keys)

    def __contains__(self, key: object) -> bool:
        try:
            return self.has(key)  # type: ignore[arg-type]
        except InvalidKeyError:
            return False

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return self.entries()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(database_id={self._database_id!r}, size={len(self._known_keys)})"

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> ChunkedKeyValueStore:
        """Store *value* under *key*, replacing any previous encoding.

        ``None`` deletes the key. Returns the store so calls can be chained.
        """
        validate_key(key)
        tagged = classify_value(value) if value is not None else None

        self._erase_entries(key)
        self._cache.pop(key, None)

        if tagged is None:
            self._known_keys.discard(key)
            _logger.debug("Cleared key=%s db=%s", key, self._database_id)
            return self

        self._write(key, tagged)
        self._known_keys.add(key)
        if self._auto_cache:
            self._cache[key] = value
        return self

    def get(self, key: str) -> Any:
        """Return the value stored under *key*, or ``None`` when absent."""
        validate_key(key)
        if key in self._cache:
            return self._cache[key]
        if key not in self._known_keys and not self._check_key_exists(key):
            return None

        value = self._read(key)
        if value is not None and self._auto_cache:
            self._cache[key] = value
        return value

    def has(self, key: str) -> bool:
        """Whether *key* is cached, indexed, or present in the substrate."""
        validate_key(key)
        return key in self._cache or key in self._known_keys or self._check_key_exists(key)

    def delete(self, key: str) -> bool:
        """Delete *key*; return whether it existed."""
        validate_key(key)
        existed = self.has(key)
        self._erase_entries(key)
        self._cache.pop(key, None)
        self._known_keys.discard(key)
        return existed

    delete_key = delete

    def delete_value(self, key: str) -> None:
        """Same as ``set(key, None)``."""
        self.set(key, None)

    def clear(self) -> None:
        """Remove every entry this store owns from the substrate.

        Cost follows the number of entries, not keys: each chunk is removed
        on its own.
        """
        owned = [entry_id for entry_id in self._source.list_property_ids() if entry_id.startswith(self._prefix)]
        for entry_id in owned:
            self._source.set_property(entry_id, None)
        self._cache.clear()
        self._known_keys.clear()
        _logger.debug("Cleared db=%s entries=%d", self._database_id, len(owned))

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def keys(self) -> Iterator[str]:
        """Iterate over a snapshot of the indexed keys."""
        yield from tuple(self._known_keys)

    def values(self) -> Iterator[Any]:
        for key in self.keys():
            yield self.get(key)

    def entries(self) -> Iterator[tuple[str, Any]]:
        for key in self.keys():
            yield key, self.get(key)

    items = entries

    # ------------------------------------------------------------------
    # Cache control
    # ------------------------------------------------------------------

    def load(self, key: str) -> None:
        """Read *key* into the cache, whether or not auto caching is on."""
        validate_key(key)
        if key in self._cache:
            return
        value = self.get(key)
        if value is not None:
            self._cache[key] = value

    def unload(self, key: str) -> None:
        """Evict *key* from the cache. Persisted data is untouched."""
        self._cache.pop(key, None)

    def enable_cache(self) -> None:
        self._auto_cache = True

    def disable_cache(self) -> None:
        """Stop populating the cache. Already cached values are kept."""
        self._auto_cache = False

    # ------------------------------------------------------------------
    # Async wrappers
    # ------------------------------------------------------------------

    async def get_async(self, key: str) -> Any:
        """Run :meth:`get` at the next scheduler tick."""
        validate_key(key)
        return await self._submit(self.get, key)

    async def set_async(self, key: str, value: Any) -> None:
        """Run :meth:`set` at the next scheduler tick."""
        validate_key(key)
        await self._submit(self.set, key, value)

    async def _submit(self, operation: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()

        def _run() -> None:
            # Runs even if the awaiting task was cancelled.
            try:
                result = operation(*args)
            except Exception as exc:  # noqa: BLE001
                if future.done():
                    _logger.debug("Deferred %s failed after cancellation", operation.__name__, exc_info=True)
                else:
                    future.set_exception(exc)
                return
            if not future.done():
                future.set_result(result)

        self._scheduler.run_next(_run)
        return await future

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_key(self, key: str, tag: EntryTag, index: int | None = None) -> str:
        return build_entry_id(self._prefix, key, tag, index)

    def _write(self, key: str, tagged: TaggedValue) -> None:
        if tagged.is_native:
            self._source.set_property(self._build_key(key, EntryTag.NATIVE), tagged.stored)
            _logger.debug(
                "Set key=%s db=%s kind=%s value=%s",
                key,
                self._database_id,
                tagged.kind,
                preview_for_log(tagged.original, max_string=self._config.log_preview_chars),
            )
            return

        payload = tagged.text
        if text_units(payload) <= self._max_entry_size:
            self._source.set_property(self._build_key(key, EntryTag.STRING), payload)
            _logger.debug(
                "Set key=%s db=%s kind=%s value=%s",
                key,
                self._database_id,
                tagged.kind,
                preview_for_log(payload, max_string=self._config.log_preview_chars),
            )
            return

        chunks = split_into_chunks(payload, self._max_entry_size)
        self._source.set_property(self._build_key(key, EntryTag.META_CHUNK), len(chunks))
        for index, chunk in enumerate(chunks):
            self._source.set_property(self._build_key(key, EntryTag.DATA_CHUNK, index), chunk)
        _logger.debug(
            "Set key=%s db=%s kind=%s chars=%d chunks=%d",
            key,
            self._database_id,
            tagged.kind,
            len(payload),
            len(chunks),
        )

    def _read(self, key: str) -> Any:
        native = self._source.get_property(self._build_key(key, EntryTag.NATIVE))
        if native is not None:
            return native

        text = self._source.get_property(self._build_key(key, EntryTag.STRING))
        if text is None:
            count = _chunk_count(self._source.get_property(self._build_key(key, EntryTag.META_CHUNK)))
            if count is None:
                return None
            try:
                text = self._read_chunks(key, count)
            except MissingChunkError as exc:
                _logger.warning("Dropping value for key=%s db=%s: %s", key, self._database_id, exc)
                return None

        if not isinstance(text, str):
            return text
        if not text:
            return None
        try:
            return decode_payload(text)
        except DecodeError:
            _logger.debug("Key=%s db=%s holds plain text; returning it raw", key, self._database_id)
            return text

    def _read_chunks(self, key: str, count: int) -> str:
        parts: list[str] = []
        for index in range(count):
            chunk = self._source.get_property(self._build_key(key, EntryTag.DATA_CHUNK, index))
            if not isinstance(chunk, str):
                raise MissingChunkError(f"chunk {index} of {count} is missing", key=key, index=index)
            parts.append(chunk)
        return "".join(parts)

    def _erase_entries(self, key: str) -> None:
        # The count has to be read before its entry is removed.
        count = _chunk_count(self._source.get_property(self._build_key(key, EntryTag.META_CHUNK)))
        for tag in PRIMARY_TAGS:
            self._source.set_property(self._build_key(key, tag), None)
        for index in range(count or 0):
            self._source.set_property(self._build_key(key, EntryTag.DATA_CHUNK, index), None)

    def _check_key_exists(self, key: str) -> bool:
        return any(self._source.get_property(self._build_key(key, tag)) is not None for tag in PRIMARY_TAGS)

    def _initialize_from_properties(self) -> None:
        for entry_id in self._source.list_property_ids():
            if not entry_id.startswith(self._prefix):
                continue
            parsed = parse_entry_id(self._entry_pattern, entry_id)
            # Data chunks without a count entry are orphans, not keys.
            if parsed is not None and parsed.tag is not EntryTag.DATA_CHUNK:
                self._known_keys.add(parsed.key)
        _logger.debug("Indexed db=%s keys=%d", self._database_id, len(self._known_keys))
