"""Cached client for the Telldus local and Live APIs."""

from __future__ import annotations

from .api import TelldusClient
from .backend import TransportProto, create_transport
from .config import CacheConfig, LiveConfig, LocalConfig, parse_transport_config
from .domain import Command
from .exceptions import (
    CacheFileError,
    InvalidCommandError,
    TelldusError,
    TelldusTransportError,
    TokenRefreshError,
)
from .snapshot import SnapshotStore

__all__ = [
    "CacheConfig",
    "CacheFileError",
    "Command",
    "InvalidCommandError",
    "LiveConfig",
    "LocalConfig",
    "SnapshotStore",
    "TelldusClient",
    "TelldusError",
    "TelldusTransportError",
    "TokenRefreshError",
    "TransportProto",
    "create_transport",
    "parse_transport_config",
]
