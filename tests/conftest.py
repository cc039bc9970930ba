# ruff: noqa: D100,D101,D102,D103,D105,D107,INP001
from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable

import pytest

from custom_components.telldus.api import TelldusClient
from custom_components.telldus.exceptions import TelldusTransportError
from custom_components.telldus.snapshot import SnapshotStore


class MockResponse:
    def __init__(
        self,
        status: int,
        json_data: Any,
        *,
        headers: dict[str, str] | None = None,
        text_data: str | None = "",
        json_exc: Exception | None = None,
    ) -> None:
        self.status = status
        self._json = json_data
        self._text = text_data
        self._json_exc = json_exc
        self.headers = headers if headers is not None else {
            "Content-Type": "application/json"
        }
        self.request_info = None
        self.history = ()

    async def __aenter__(self) -> MockResponse:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def text(self) -> str:
        return self._text or ""

    async def json(self, content_type: str | None = None) -> Any:
        if self._json_exc is not None:
            raise self._json_exc
        return copy.deepcopy(self._json)


class FakeSession:
    """Queue-driven stand-in for ``aiohttp.ClientSession.request``."""

    def __init__(self) -> None:
        self._queue: list[Any] = []
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def queue(self, *responses: Any) -> None:
        self._queue.extend(responses)

    def request(self, method: str, url: str, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((method, url, copy.deepcopy(kwargs)))
        if not self._queue:
            raise AssertionError(f"Unexpected request {method} {url}")
        result = self._queue.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeTransport:
    """Transport double recording every call."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    def queue(self, *responses: Any) -> None:
        self._responses.extend(responses)

    async def request(
        self, method: str, path: str, query: dict[str, Any] | None = None
    ) -> Any:
        self.calls.append((method, path, dict(query) if query is not None else None))
        if not self._responses:
            raise TelldusTransportError("no response queued")
        result = self._responses.pop(0)
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            result = result()
        return copy.deepcopy(result)

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "cache")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_client(
    transport: FakeTransport, store: SnapshotStore, clock: FakeClock
) -> Callable[..., TelldusClient]:
    def _factory(**kwargs: Any) -> TelldusClient:
        return TelldusClient(
            kwargs.pop("transport", transport),
            kwargs.pop("store", store),
            monotonic=kwargs.pop("monotonic", clock),
            **kwargs,
        )

    return _factory
