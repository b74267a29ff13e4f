"""Application-owned registry of canonical store instances."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from propdb._naming import validate_database_id
from propdb.config import StoreConfig
from propdb.scheduler import TickScheduler
from propdb.store import ChunkedKeyValueStore
from propdb.substrate import PropertyStore

_logger = logging.getLogger(__name__)


@dataclass
class _SourceEntry:
    """Stores opened on a single property store."""

    source: PropertyStore
    stores: dict[str, ChunkedKeyValueStore] = field(default_factory=dict)


class StoreRegistry:
    """Hand out one shared store per ``(source, database_id)`` pair.

    Sources are matched by identity and kept alive by the registry, so a
    registry should live exactly as long as the application context that
    owns the sources.

    Usage::

        registry = StoreRegistry()
        scores = registry.open("scores", world_properties)
        assert registry.open("scores", world_properties) is scores
    """

    def __init__(
        self,
        *,
        config: StoreConfig | None = None,
        scheduler: TickScheduler | None = None,
    ) -> None:
        self._config = config
        self._scheduler = scheduler
        self._sources: dict[int, _SourceEntry] = {}

    def _entry(self, source: PropertyStore) -> _SourceEntry:
        entry = self._sources.get(id(source))
        if entry is None:
            entry = _SourceEntry(source=source)
            self._sources[id(source)] = entry
        return entry

    def open(self, database_id: str, source: PropertyStore) -> ChunkedKeyValueStore:
        """Return the store for *database_id* on *source*, creating it once."""
        validate_database_id(database_id)
        entry = self._entry(source)
        store = entry.stores.get(database_id)
        if store is None:
            store = ChunkedKeyValueStore(
                database_id,
                source,
                config=self._config,
                scheduler=self._scheduler,
            )
            entry.stores[database_id] = store
            _logger.debug("Opened store db=%s size=%d", database_id, store.size)
        return store

    def get(self, database_id: str, source: PropertyStore) -> ChunkedKeyValueStore | None:
        """Return an already opened store, or ``None``."""
        entry = self._sources.get(id(source))
        if entry is None:
            return None
        return entry.stores.get(database_id)

    def stores(self, source: PropertyStore | None = None) -> list[ChunkedKeyValueStore]:
        """Every opened store, optionally limited to one source."""
        if source is not None:
            entry = self._sources.get(id(source))
            return list(entry.stores.values()) if entry is not None else []
        return [store for entry in self._sources.values() for store in entry.stores.values()]

    def __len__(self) -> int:
        return sum(len(entry.stores) for entry in self._sources.values())
