"""Transport factory."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import aiohttp

from ..config import LiveConfig, LocalConfig, TransportConfig, parse_transport_config
from .base import TransportProto


def create_transport(
    session: aiohttp.ClientSession,
    config: TransportConfig | Mapping[str, Any],
) -> TransportProto:
    """Create the transport described by ``config``."""

    settings = parse_transport_config(config)
    if isinstance(settings, LocalConfig):
        from .local import LocalTransport

        return LocalTransport(
            session,
            settings.host,
            settings.access_token,
            token_refresh_interval=settings.token_refresh_interval,
        )
    from .live import LiveTransport

    assert isinstance(settings, LiveConfig)
    return LiveTransport(
        session,
        key=settings.key,
        secret=settings.secret,
        token_key=settings.token_key,
        token_secret=settings.token_secret,
        api_base=settings.api_base,
    )
