"""Refresh coordination for the cached device and sensor collections."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
import time
from typing import Any

from .backend.base import TransportProto
from .codecs.telldus_codec import (
    decode_collection_payload,
    encode_collection_payload,
)
from .const import (
    COLLECTION_DEVICES,
    COLLECTION_LIST_PATHS,
    COLLECTION_SENSORS,
    DEVICE_CACHE_TTL,
    DEVICE_LIST_EXTRAS,
    SENSOR_CACHE_TTL,
    SENSOR_INCLUDE_SCALE,
    SENSOR_INCLUDE_VALUES,
)
from .domain.commands import SUPPORTED_METHODS
from .domain.ids import ids_match
from .domain.state import CollectionCache
from .exceptions import TelldusTransportError
from .snapshot import SnapshotStore

_LOGGER = logging.getLogger(__name__)

Item = dict[str, Any]

COLLECTION_QUERIES: dict[str, dict[str, Any]] = {
    COLLECTION_DEVICES: {
        "supportedMethods": SUPPORTED_METHODS,
        "extras": DEVICE_LIST_EXTRAS,
    },
    COLLECTION_SENSORS: {
        "includeValues": SENSOR_INCLUDE_VALUES,
        "includeScale": SENSOR_INCLUDE_SCALE,
    },
}


def _select(items: list[Item], item_id: Any | None) -> Item | list[Item] | None:
    """Return the list, or the first item whose id matches ``item_id``."""

    if item_id is None:
        return items
    for item in items:
        if ids_match(item.get("id"), item_id):
            return item
    return None


def _from_cache(
    cache: CollectionCache, item_id: Any | None
) -> Item | list[Item] | None:
    """Return copies of the cached list, or of the item matching ``item_id``."""

    if item_id is None:
        return cache.get_all()
    return cache.get_by_id(item_id)


class CollectionCoordinator:
    """Serve collections fresh when possible and last-known-good otherwise.

    A stale or cold collection is fetched through the transport; success
    replaces the memory cache and writes the snapshot, failure falls back to
    the snapshot on disk (no TTL applies) and then to an empty result.
    """

    def __init__(
        self,
        transport: TransportProto,
        store: SnapshotStore,
        *,
        device_ttl: float = DEVICE_CACHE_TTL,
        sensor_ttl: float = SENSOR_CACHE_TTL,
        monotonic: Callable[[], float] | None = None,
    ) -> None:
        """Create cold caches for both collections."""

        self._transport = transport
        self._store = store
        self._monotonic = monotonic or time.monotonic
        self._caches: dict[str, CollectionCache] = {
            COLLECTION_DEVICES: CollectionCache(COLLECTION_DEVICES, device_ttl),
            COLLECTION_SENSORS: CollectionCache(COLLECTION_SENSORS, sensor_ttl),
        }

    @property
    def transport(self) -> TransportProto:
        """Return the transport used for refreshes."""

        return self._transport

    @property
    def store(self) -> SnapshotStore:
        """Return the snapshot store."""

        return self._store

    @property
    def devices(self) -> CollectionCache:
        """Return the device cache."""

        return self._caches[COLLECTION_DEVICES]

    @property
    def sensors(self) -> CollectionCache:
        """Return the sensor cache."""

        return self._caches[COLLECTION_SENSORS]

    def cache(self, collection: str) -> CollectionCache:
        """Return the cache of ``collection``."""

        try:
            return self._caches[collection]
        except KeyError as err:
            raise ValueError(f"Unknown collection: {collection!r}") from err

    async def async_get_collection(
        self, collection: str, item_id: Any | None = None
    ) -> Item | list[Item] | None:
        """Return one item (when ``item_id`` is given) or the whole collection."""

        cache = self.cache(collection)
        if not cache.needs_refresh(self._monotonic()):
            _LOGGER.debug("%s served from memory cache", collection)
            return _from_cache(cache, item_id)

        try:
            items = await self._async_fetch(collection)
        except TelldusTransportError as err:
            _LOGGER.warning(
                "Refreshing %s failed, using last snapshot: %s", collection, err
            )
            return await self._async_from_snapshot(collection, item_id)

        cache.replace(items, self._monotonic())
        await self._async_write_snapshot(collection, items)
        return _from_cache(cache, item_id)

    async def _async_fetch(self, collection: str) -> list[Item]:
        """Fetch and decode ``collection``; malformed bodies are transport errors."""

        raw = await self._transport.request(
            "GET",
            COLLECTION_LIST_PATHS[collection],
            COLLECTION_QUERIES[collection],
        )
        try:
            return decode_collection_payload(collection, raw)
        except ValueError as err:
            raise TelldusTransportError(str(err)) from err

    async def _async_write_snapshot(self, collection: str, items: list[Item]) -> None:
        """Write ``items`` through to disk; failures are logged only."""

        payload = encode_collection_payload(collection, items)
        try:
            await asyncio.to_thread(self._store.write, collection, payload)
        except (OSError, TypeError, ValueError) as err:
            _LOGGER.warning("Unable to write %s snapshot: %s", collection, err)

    async def _async_from_snapshot(
        self, collection: str, item_id: Any | None
    ) -> Item | list[Item] | None:
        """Answer from the snapshot on disk, or empty when there is none."""

        data = await asyncio.to_thread(self._store.read, collection)
        if data is None:
            _LOGGER.debug("No %s snapshot available", collection)
            return _select([], item_id)
        try:
            items = decode_collection_payload(collection, data)
        except ValueError as err:
            _LOGGER.debug("Ignoring unusable %s snapshot: %s", collection, err)
            items = []
        return _select(items, item_id)

    def invalidate(self, collection: str | None = None) -> None:
        """Force the next read of one or both collections to refresh."""

        names = [self.cache(collection).name] if collection else list(self._caches)
        for name in names:
            self._caches[name].clear()

    async def async_purge_snapshots(self, collection: str | None = None) -> None:
        """Delete the snapshot files of one or both collections."""

        names = [self.cache(collection).name] if collection else list(self._caches)
        for name in names:
            await asyncio.to_thread(self._store.remove, name)
