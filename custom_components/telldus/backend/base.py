"""Transport abstraction shared by the local and cloud API clients."""
from __future__ import annotations

import asyncio
from collections.abc import Mapping
import logging
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from ..const import REQUEST_TIMEOUT, USER_AGENT
from ..exceptions import TelldusTransportError
from .sanitize import redact_text

_LOGGER = logging.getLogger(__name__)

QueryParams = Mapping[str, Any]

# Toggle to preview bodies in debug logs (redacted). Leave False by default.
API_LOG_PREVIEW = False


class TransportProto(Protocol):
    """Capability used by the coordinator and the command façade."""

    async def request(
        self,
        method: str,
        path: str,
        query: QueryParams | None = None,
    ) -> Any:
        """Return the parsed JSON body of ``method path?query``.

        Raises ``TelldusTransportError`` when the status is not 200, the
        network call fails or the body is not JSON.
        """


def clean_query(query: QueryParams | None) -> dict[str, Any]:
    """Return ``query`` without ``None`` values and with booleans as ``1``/``0``."""

    if not query:
        return {}
    cleaned: dict[str, Any] = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = int(value)
        else:
            cleaned[key] = value
    return cleaned


def build_url(base: str, path: str, query: QueryParams | None = None) -> str:
    """Return ``base + path`` with ``query`` URL-encoded."""

    url = f"{base.rstrip('/')}{path}"
    params = clean_query(query)
    if not params:
        return url
    return f"{url}?{urlencode(params)}"


async def request_json(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: aiohttp.ClientTimeout | None = None,
) -> Any:
    """Perform an HTTP request and return its JSON body.

    Network failures, statuses other than 200 and unparsable bodies are all
    raised as ``TelldusTransportError``. Errors are logged WITHOUT secrets.
    """

    request_headers = dict(headers or {})
    request_headers.setdefault("User-Agent", USER_AGENT)
    request_headers.setdefault("Accept", "application/json")
    safe_url = redact_text(url)
    _LOGGER.debug("HTTP %s %s", method, safe_url)

    try:
        async with session.request(
            method,
            url,
            headers=request_headers,
            timeout=timeout or aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
        ) as resp:
            ctype = resp.headers.get("Content-Type", "")
            if resp.status != 200:
                try:
                    body_text = await resp.text()
                except Exception:  # noqa: BLE001
                    body_text = "<no body>"
                _LOGGER.error(
                    "HTTP error %s %s -> %s; body=%s",
                    method,
                    safe_url,
                    resp.status,
                    redact_text(body_text)[:200],
                )
                raise TelldusTransportError(
                    f"{method} {safe_url} returned HTTP {resp.status}",
                    status=resp.status,
                )
            try:
                data = await resp.json(content_type=None)
            except ValueError as err:
                raise TelldusTransportError(
                    f"{method} {safe_url} returned a non-JSON body",
                    status=resp.status,
                ) from err
            if API_LOG_PREVIEW:
                _LOGGER.debug(
                    "HTTP %s -> %s, ctype=%s, body[0:200]=%r",
                    safe_url,
                    resp.status,
                    ctype,
                    redact_text(repr(data))[:200],
                )
            else:
                _LOGGER.debug("HTTP %s -> %s, ctype=%s", safe_url, resp.status, ctype)
            return data
    except TelldusTransportError:
        raise
    except asyncio.CancelledError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as err:
        _LOGGER.error(
            "Request %s %s failed (sanitized): %s",
            method,
            safe_url,
            redact_text(str(err)),
        )
        raise TelldusTransportError(
            f"{method} {safe_url} failed: {redact_text(str(err))}"
        ) from err
