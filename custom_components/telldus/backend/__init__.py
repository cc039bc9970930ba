"""Backend package exports."""
from __future__ import annotations

from typing import Any

from .base import TransportProto
from .factory import create_transport

__all__ = [
    "LiveTransport",
    "LocalTransport",
    "TransportProto",
    "create_transport",
]


def __getattr__(name: str) -> Any:
    """Lazily import transport implementations."""

    if name == "LocalTransport":
        from .local import LocalTransport

        globals()[name] = LocalTransport
        return LocalTransport
    if name == "LiveTransport":
        from .live import LiveTransport

        globals()[name] = LiveTransport
        return LiveTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
