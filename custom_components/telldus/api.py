from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any

import aiohttp

from .backend.base import QueryParams, TransportProto
from .backend.factory import create_transport
from .config import CacheConfig, TransportConfig
from .const import (
    CLIENTS_LIST_PATH,
    COLLECTION_DEVICES,
    COLLECTION_SENSORS,
    EVENTS_LIST_PATH,
    PROFILE_PATH,
    SENSOR_SET_IGNORE_PATH,
    SENSOR_SET_NAME_PATH,
    device_path,
)
from .coordinator import CollectionCoordinator
from .domain.commands import Command, command_names, lookup_command
from .exceptions import (
    CacheFileError,
    InvalidCommandError,
    TelldusError,
    TelldusTransportError,
    TokenRefreshError,
)
from .snapshot import SnapshotStore

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "CacheFileError",
    "InvalidCommandError",
    "TelldusClient",
    "TelldusError",
    "TelldusTransportError",
    "TokenRefreshError",
]


class TelldusClient:
    """Device and sensor operations over a cached Telldus transport.

    Reads go through the collection caches. Writes are sent to the remote API
    and their parsed reply is returned unchanged. Commands that change a
    device's state patch the device cache *before* the request; the patch is
    not rolled back if the request fails, so the cache shows the intended
    state until the next successful refresh.
    """

    def __init__(
        self,
        transport: TransportProto,
        store: SnapshotStore,
        *,
        cache_config: CacheConfig | None = None,
        monotonic: Callable[[], float] | None = None,
    ) -> None:
        """Initialise the client around ``transport`` and ``store``."""

        settings = cache_config or CacheConfig(cache_dir=store.cache_dir)
        self._transport = transport
        self._coordinator = CollectionCoordinator(
            transport,
            store,
            device_ttl=settings.device_ttl,
            sensor_ttl=settings.sensor_ttl,
            monotonic=monotonic,
        )

    @classmethod
    def from_config(
        cls,
        session: aiohttp.ClientSession,
        transport_config: TransportConfig | Mapping[str, Any],
        cache_config: CacheConfig | Mapping[str, Any] | None = None,
    ) -> TelldusClient:
        """Build a client, its transport and its snapshot store from settings."""

        if cache_config is None:
            settings = CacheConfig()
        elif isinstance(cache_config, CacheConfig):
            settings = cache_config
        else:
            settings = CacheConfig.model_validate(cache_config)
        transport = create_transport(session, transport_config)
        return cls(transport, SnapshotStore(settings.cache_dir), cache_config=settings)

    @property
    def transport(self) -> TransportProto:
        """Return the transport in use."""

        return self._transport

    @property
    def coordinator(self) -> CollectionCoordinator:
        """Return the collection coordinator."""

        return self._coordinator

    async def _request(
        self, path: str, query: QueryParams | None = None, *, method: str = "GET"
    ) -> Any:
        """Send one request through the transport."""

        return await self._transport.request(method, path, query)

    # ----------------- Account -----------------

    async def get_profile(self) -> Any:
        """Return the user profile."""

        return await self._request(PROFILE_PATH)

    async def list_clients(self) -> Any:
        """Return the gateways (clients) attached to the account."""

        return await self._request(CLIENTS_LIST_PATH)

    async def list_events(self) -> Any:
        """Return the configured events."""

        return await self._request(EVENTS_LIST_PATH)

    # ----------------- Sensors -----------------

    async def list_sensors(self) -> list[dict[str, Any]]:
        """Return all sensors with their values and scales."""

        return await self._coordinator.async_get_collection(COLLECTION_SENSORS)

    async def get_sensor_info(self, sensor_id: Any) -> dict[str, Any] | None:
        """Return one sensor from the (possibly cached) sensor list."""

        return await self._coordinator.async_get_collection(
            COLLECTION_SENSORS, sensor_id
        )

    async def set_sensor_name(self, sensor_id: Any, name: str) -> Any:
        """Rename a sensor."""

        return await self._request(
            SENSOR_SET_NAME_PATH, {"id": sensor_id, "name": name}
        )

    async def set_sensor_ignore(self, sensor_id: Any, ignore: bool) -> Any:
        """Hide or show a sensor."""

        return await self._request(
            SENSOR_SET_IGNORE_PATH, {"id": sensor_id, "ignore": ignore}
        )

    # ----------------- Devices -----------------

    async def list_devices(self) -> list[dict[str, Any]]:
        """Return all devices with their last known state."""

        return await self._coordinator.async_get_collection(COLLECTION_DEVICES)

    async def get_device_info(self, device_id: Any) -> dict[str, Any] | None:
        """Return one device from the (possibly cached) device list."""

        return await self._coordinator.async_get_collection(
            COLLECTION_DEVICES, device_id
        )

    async def add_device(self, **device: Any) -> Any:
        """Register a device described by ``device`` (``id``, ``name``, ...)."""

        return await self._request(device_path("setName"), device)

    async def device_learn(self, device_id: Any) -> Any:
        """Send a learn (pairing) signal."""

        return await self._request(device_path("learn"), {"id": device_id})

    async def set_device_model(self, device_id: Any, model: str) -> Any:
        """Change a device's model."""

        return await self._request(
            device_path("setModel"), {"id": device_id, "model": model}
        )

    async def set_device_name(self, device_id: Any, name: str) -> Any:
        """Rename a device."""

        return await self._request(
            device_path("setName"), {"id": device_id, "name": name}
        )

    async def set_device_parameter(
        self, device_id: Any, parameter: str, value: Any
    ) -> Any:
        """Set one protocol parameter (``house``, ``unit``, ...)."""

        return await self._request(
            device_path("setParameter"),
            {"id": device_id, "parameter": parameter, "value": value},
        )

    async def set_device_protocol(self, device_id: Any, protocol: str) -> Any:
        """Change a device's protocol."""

        return await self._request(
            device_path("setProtocol"), {"id": device_id, "protocol": protocol}
        )

    async def remove_device(self, device_id: Any) -> Any:
        """Delete a device."""

        return await self._request(device_path("remove"), {"id": device_id})

    async def bell_device(self, device_id: Any) -> Any:
        """Ring a bell device."""

        return await self._request(device_path("bell"), {"id": device_id})

    async def dim_device(self, device_id: Any, level: int) -> Any:
        """Dim a device to ``level`` (0-255)."""

        _LOGGER.debug("Dim device %s to %s", device_id, level)
        self._coordinator.devices.patch_state_value(device_id, level)
        return await self._request(
            device_path("dim"), {"id": device_id, "level": level}
        )

    async def on_off_device(self, device_id: Any, on: bool) -> Any:
        """Turn a device on or off."""

        _LOGGER.debug("Turn device %s %s", device_id, "on" if on else "off")
        self._coordinator.devices.patch_state(
            device_id, Command.ON if on else Command.OFF
        )
        return await self._request(
            device_path("turnOn" if on else "turnOff"), {"id": device_id}
        )

    async def up_down_device(self, device_id: Any, up: bool) -> Any:
        """Move a blind or shutter up or down."""

        self._coordinator.devices.patch_state(
            device_id, Command.UP if up else Command.DOWN
        )
        return await self._request(
            device_path("up" if up else "down"), {"id": device_id}
        )

    async def stop_device(self, device_id: Any) -> Any:
        """Stop a moving blind or shutter."""

        self._coordinator.devices.patch_state(device_id, Command.STOP)
        return await self._request(device_path("stop"), {"id": device_id})

    async def command_device(
        self, device_id: Any, command: str, value: Any | None = None
    ) -> Any:
        """Send a command by name (``on``, ``dim``, ``bell``, ...).

        Names are matched case-insensitively (``"ON"`` works) and sent as the
        numeric ``Command`` bit.
        """

        resolved = lookup_command(command)
        if resolved is None:
            raise InvalidCommandError(
                f"Invalid command supplied: {command!r}; "
                f"expected one of {', '.join(command_names())}"
            )
        return await self._request(
            device_path("command"),
            {"id": device_id, "method": int(resolved), "value": value},
        )

    async def device_history(self, device_id: Any, start: int, end: int) -> Any:
        """Return device history between two epoch timestamps (seconds)."""

        return await self._request(
            device_path("history"), {"id": device_id, "from": start, "to": end}
        )

    # ----------------- Cache -----------------

    async def invalidate(
        self, collection: str | None = None, *, purge_snapshots: bool = False
    ) -> None:
        """Force the next read of one or both collections to refresh."""

        self._coordinator.invalidate(collection)
        if purge_snapshots:
            await self._coordinator.async_purge_snapshots(collection)
