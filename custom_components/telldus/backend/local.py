"""Transport for the local-network API of a TellStick gateway."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from time import monotonic as time_mod
from typing import Any

import aiohttp

from ..codecs.telldus_codec import decode_token_refresh
from ..const import (
    DEFAULT_TOKEN_REFRESH_INTERVAL,
    LOCAL_REFRESH_TOKEN_PATH,
    local_api_base,
)
from ..exceptions import TelldusTransportError, TokenRefreshError
from .base import QueryParams, build_url, request_json
from .sanitize import mask_host, redact_text

_LOGGER = logging.getLogger(__name__)


class LocalTransport:
    """Bearer-token client for ``http://<host>/api``.

    The token is refreshed before a request once ``token_refresh_interval``
    seconds have passed since the previous attempt.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        access_token: str,
        *,
        token_refresh_interval: float = DEFAULT_TOKEN_REFRESH_INTERVAL,
        monotonic: Callable[[], float] | None = None,
    ) -> None:
        """Initialise the client; no request is made until first use."""

        self._session = session
        self._host = str(host).strip()
        self._api_base = local_api_base(self._host)
        self._access_token = access_token
        self._token_refresh_interval = float(token_refresh_interval)
        self._monotonic = monotonic or time_mod
        self._last_refresh: float | None = None
        self._token_expires: float | None = None
        self._lock = asyncio.Lock()

    @property
    def api_base(self) -> str:
        """Return the base URL of the local API."""

        return self._api_base

    @property
    def access_token(self) -> str:
        """Return the bearer token currently in use."""

        return self._access_token

    @property
    def token_expires(self) -> float | None:
        """Return the epoch expiry reported by the last refresh."""

        return self._token_expires

    def _refresh_due(self) -> bool:
        """Return ``True`` when the refresh interval has elapsed."""

        if self._last_refresh is None:
            return True
        return self._monotonic() - self._last_refresh >= self._token_refresh_interval

    def _auth_headers(self) -> dict[str, str]:
        """Return headers carrying the bearer token."""

        return {"Authorization": f"Bearer {self._access_token}"}

    async def _ensure_token(self) -> None:
        """Refresh the bearer token when due; concurrent callers share one refresh."""

        if not self._refresh_due():
            return

        async with self._lock:
            if not self._refresh_due():
                return
            try:
                await self._async_refresh_token()
            finally:
                # A failed attempt is retried only at the next interval boundary.
                self._last_refresh = self._monotonic()

    async def _async_refresh_token(self) -> None:
        """Call ``/refreshToken`` and adopt the returned token."""

        url = build_url(
            self._api_base,
            LOCAL_REFRESH_TOKEN_PATH,
            {"token": self._access_token},
        )
        _LOGGER.debug("Refreshing local API token on %s", mask_host(self._host))
        try:
            body = await request_json(
                self._session, "GET", url, headers=self._auth_headers()
            )
        except TelldusTransportError as err:
            raise TokenRefreshError(
                f"Unable to refresh access token: {err}", status=err.status
            ) from err

        try:
            reply = decode_token_refresh(body)
        except ValueError as err:
            raise TokenRefreshError(f"Unable to refresh access token: {err}") from err
        if not reply.expires:
            _LOGGER.debug("Token refresh reply: %s", redact_text(repr(body)))
            raise TokenRefreshError(
                f"Unable to refresh access token: {reply.error or 'no expiry'}"
            )
        if reply.token:
            self._access_token = reply.token
        self._token_expires = float(reply.expires)
        _LOGGER.debug("Refreshed access token, expires %s", int(reply.expires))

    async def refresh_token(self) -> None:
        """Refresh the bearer token immediately."""

        async with self._lock:
            self._last_refresh = None
        await self._ensure_token()

    async def request(
        self,
        method: str,
        path: str,
        query: QueryParams | None = None,
    ) -> Any:
        """Return the parsed JSON body of ``method path?query``."""

        await self._ensure_token()
        url = build_url(self._api_base, path, query)
        return await request_json(
            self._session, method, url, headers=self._auth_headers()
        )
