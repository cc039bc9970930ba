"""Transport for the Telldus Live cloud API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from oauthlib.oauth1 import SIGNATURE_HMAC_SHA1, SIGNATURE_TYPE_AUTH_HEADER, Client

from ..const import LIVE_API_BASE
from .base import QueryParams, build_url, request_json

_LOGGER = logging.getLogger(__name__)


class LiveTransport:
    """OAuth1 client that signs every request with a fresh signature."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        key: str,
        secret: str,
        token_key: str,
        token_secret: str,
        api_base: str = LIVE_API_BASE,
    ) -> None:
        """Initialise the client with consumer and access-token credentials."""

        self._session = session
        self._api_base = api_base.rstrip("/") if api_base else LIVE_API_BASE
        self._key = key
        self._secret = secret
        self._token_key = token_key
        self._token_secret = token_secret

    @property
    def api_base(self) -> str:
        """Return the cloud API base URL."""

        return self._api_base

    def _oauth_client(self) -> Client:
        """Return a signer for one request."""

        return Client(
            self._key,
            client_secret=self._secret,
            resource_owner_key=self._token_key,
            resource_owner_secret=self._token_secret,
            signature_method=SIGNATURE_HMAC_SHA1,
            signature_type=SIGNATURE_TYPE_AUTH_HEADER,
        )

    def sign(self, method: str, url: str) -> dict[str, str]:
        """Return the OAuth1 ``Authorization`` header for ``method url``."""

        _, headers, _ = self._oauth_client().sign(url, http_method=method.upper())
        return {"Authorization": headers["Authorization"]}

    async def request(
        self,
        method: str,
        path: str,
        query: QueryParams | None = None,
    ) -> Any:
        """Return the parsed JSON body of ``method path?query``."""

        url = build_url(self._api_base, path, query)
        headers = self.sign(method, url)
        return await request_json(self._session, method, url, headers=headers)
