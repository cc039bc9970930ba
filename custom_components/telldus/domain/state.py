"""In-memory collection caches."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
import logging
import threading
from typing import Any

from .commands import Command, coerce_state
from .ids import normalize_item_id

_LOGGER = logging.getLogger(__name__)

STATE_KEY = "state"
STATE_VALUE_KEY = "stateValue"


def _copy_item(item: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of a cached item."""

    return copy.deepcopy(dict(item))


class CollectionCache:
    """Time-limited in-memory snapshot of one collection.

    The snapshot is either absent (cold) or a full replacement of the previous
    one. The only in-place change is an optimistic ``state``/``stateValue``
    patch, which leaves the refresh timestamp alone. Every method holds the
    collection lock only for the in-memory work.
    """

    def __init__(self, name: str, ttl: float) -> None:
        """Initialise an empty cache for collection ``name``."""

        self._name = name
        self._ttl = float(ttl)
        self._lock = threading.Lock()
        self._items: list[dict[str, Any]] | None = None
        self._index: dict[str, int] = {}
        self._last_refresh: float | None = None

    @property
    def name(self) -> str:
        """Return the collection name."""

        return self._name

    @property
    def ttl(self) -> float:
        """Return the cache lifetime in seconds."""

        return self._ttl

    @property
    def last_refresh(self) -> float | None:
        """Return the monotonic time of the last replace, if any."""

        with self._lock:
            return self._last_refresh

    @property
    def is_cold(self) -> bool:
        """Return ``True`` when no snapshot has been stored yet."""

        with self._lock:
            return self._items is None

    def needs_refresh(self, now: float) -> bool:
        """Return ``True`` when the snapshot is missing or older than the TTL."""

        with self._lock:
            if self._items is None or self._last_refresh is None:
                return True
            return now - self._last_refresh >= self._ttl

    def get_all(self) -> list[dict[str, Any]]:
        """Return the cached items in order, or an empty list when cold."""

        with self._lock:
            if self._items is None:
                return []
            return [_copy_item(item) for item in self._items]

    def get_by_id(self, item_id: Any) -> dict[str, Any] | None:
        """Return the cached item whose id equals ``item_id``."""

        key = normalize_item_id(item_id)
        with self._lock:
            item = self._lookup(key)
            return None if item is None else _copy_item(item)

    def replace(self, items: Iterable[Mapping[str, Any]], now: float) -> None:
        """Swap in a new snapshot refreshed at ``now``."""

        snapshot = [_copy_item(item) for item in items if isinstance(item, Mapping)]
        index: dict[str, int] = {}
        for position, item in enumerate(snapshot):
            key = normalize_item_id(item.get("id"))
            if key and key not in index:
                index[key] = position
        with self._lock:
            self._items = snapshot
            self._index = index
            self._last_refresh = now
        _LOGGER.debug("%s cache replaced with %d item(s)", self._name, len(snapshot))

    def clear(self) -> None:
        """Drop the snapshot so the next read refreshes."""

        with self._lock:
            self._items = None
            self._index = {}
            self._last_refresh = None

    def patch_state(self, item_id: Any, new_state: Command | int) -> bool:
        """Record ``new_state`` as the item's last command.

        A dimmed device stays ``DIM`` when it is switched on. Returns ``False``
        when the item is not cached.
        """

        key = normalize_item_id(item_id)
        target = int(new_state)
        with self._lock:
            item = self._lookup(key)
            if item is None:
                before = after = None
            else:
                before = item.get(STATE_KEY)
                if target == Command.ON and coerce_state(before) == Command.DIM:
                    after = int(Command.DIM)
                else:
                    after = target
                item[STATE_KEY] = after
        if item is None:
            _LOGGER.debug(
                "%s cache has no item %s; state patch skipped",
                self._name,
                key,
            )
            return False
        _LOGGER.debug(
            "%s cache state for %s: %s -> %s (requested %s)",
            self._name,
            key,
            before,
            after,
            target,
        )
        return True

    def patch_state_value(self, item_id: Any, value: Any) -> bool:
        """Overwrite the item's ``stateValue``; ``False`` when not cached."""

        key = normalize_item_id(item_id)
        with self._lock:
            item = self._lookup(key)
            if item is not None:
                before = item.get(STATE_VALUE_KEY)
                item[STATE_VALUE_KEY] = value
        if item is None:
            _LOGGER.debug(
                "%s cache has no item %s; stateValue patch skipped",
                self._name,
                key,
            )
            return False
        _LOGGER.debug(
            "%s cache stateValue for %s: %s -> %s",
            self._name,
            key,
            before,
            value,
        )
        return True

    def _lookup(self, key: str) -> dict[str, Any] | None:
        """Return the live cached item for canonical ``key``; lock must be held."""

        if not key or self._items is None:
            return None
        position = self._index.get(key)
        if position is None:
            return None
        return self._items[position]
