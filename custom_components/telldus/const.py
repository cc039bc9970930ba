"""Constants for the Telldus client."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

# Domain
DOMAIN: Final = "telldus"

# HTTP base & paths
LIVE_API_BASE: Final = "https://pa-api.telldus.com/json"
LOCAL_API_BASE_FMT: Final = "http://{host}/api"
LOCAL_REFRESH_TOKEN_PATH: Final = "/refreshToken"

PROFILE_PATH: Final = "/user/profile"
CLIENTS_LIST_PATH: Final = "/clients/list"
EVENTS_LIST_PATH: Final = "/events/list"

SENSORS_LIST_PATH: Final = "/sensors/list"
SENSOR_SET_NAME_PATH: Final = "/sensor/setName"
SENSOR_SET_IGNORE_PATH: Final = "/sensor/setIgnore"

DEVICES_LIST_PATH: Final = "/devices/list"
DEVICE_PATH_FMT: Final = "/device/{action}"

# Collections
COLLECTION_DEVICES: Final = "devices"
COLLECTION_SENSORS: Final = "sensors"

# Envelope key wrapping each collection in list responses and snapshot files
COLLECTION_ENVELOPE_KEYS: Final[Mapping[str, str]] = {
    COLLECTION_DEVICES: "device",
    COLLECTION_SENSORS: "sensor",
}

COLLECTION_LIST_PATHS: Final[Mapping[str, str]] = {
    COLLECTION_DEVICES: DEVICES_LIST_PATH,
    COLLECTION_SENSORS: SENSORS_LIST_PATH,
}

SNAPSHOT_FILE_NAMES: Final[Mapping[str, str]] = {
    COLLECTION_DEVICES: "devices.json",
    COLLECTION_SENSORS: "sensors.json",
}

# Cache lifetimes (seconds)
DEVICE_CACHE_TTL: Final = 5.0
SENSOR_CACHE_TTL: Final = 60.0

# Query parameters for the list endpoints
DEVICE_LIST_EXTRAS: Final = "devicetype"
SENSOR_INCLUDE_VALUES: Final = 1
SENSOR_INCLUDE_SCALE: Final = 1

# Local API bearer tokens are refreshed once an hour by default
DEFAULT_TOKEN_REFRESH_INTERVAL: Final = 60 * 60

REQUEST_TIMEOUT: Final = 25

USER_AGENT: Final = "python-telldus/0.1.0"


def device_path(action: str) -> str:
    """Return the device endpoint path for ``action``."""

    return DEVICE_PATH_FMT.format(action=action)


def local_api_base(host: str) -> str:
    """Return the base URL of the local API on ``host``."""

    return LOCAL_API_BASE_FMT.format(host=str(host).strip().rstrip("/"))
