"""Configuration models for the Telldus client."""

from __future__ import annotations

from collections.abc import Mapping
import os
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .const import (
    DEFAULT_TOKEN_REFRESH_INTERVAL,
    DEVICE_CACHE_TTL,
    DOMAIN,
    LIVE_API_BASE,
    SENSOR_CACHE_TTL,
)


def default_cache_dir() -> Path:
    """Return ``$XDG_CACHE_HOME/telldus`` (``~/.cache/telldus`` by default)."""

    base = os.environ.get("XDG_CACHE_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".cache"
    return root / DOMAIN


class CacheConfig(BaseModel):
    """Where snapshots live and how long each collection stays fresh."""

    model_config = ConfigDict(extra="ignore")

    cache_dir: Path = Field(default_factory=default_cache_dir)
    device_ttl: float = Field(default=DEVICE_CACHE_TTL, ge=0)
    sensor_ttl: float = Field(default=SENSOR_CACHE_TTL, ge=0)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, value: Any) -> Any:
        """Expand ``~`` and fall back to the default for blank values."""

        if value is None or (isinstance(value, str) and not value.strip()):
            return default_cache_dir()
        return Path(value).expanduser()


class LocalConfig(BaseModel):
    """Settings for the local-network API of a TellStick gateway."""

    model_config = ConfigDict(extra="ignore")

    host: str = Field(min_length=1)
    access_token: str = Field(
        min_length=1, validation_alias=AliasChoices("access_token", "accessToken")
    )
    token_refresh_interval: float = Field(
        default=DEFAULT_TOKEN_REFRESH_INTERVAL,
        gt=0,
        validation_alias=AliasChoices(
            "token_refresh_interval", "tokenRefreshIntervalSeconds"
        ),
    )

    @field_validator("host", "access_token")
    @classmethod
    def _strip(cls, value: str) -> str:
        """Trim surrounding whitespace."""

        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class LiveConfig(BaseModel):
    """OAuth1 credentials for the Telldus Live cloud API."""

    model_config = ConfigDict(extra="ignore")

    key: str = Field(min_length=1)
    secret: str = Field(min_length=1)
    token_key: str = Field(
        min_length=1, validation_alias=AliasChoices("token_key", "tokenKey")
    )
    token_secret: str = Field(
        min_length=1, validation_alias=AliasChoices("token_secret", "tokenSecret")
    )
    api_base: str = LIVE_API_BASE

    @field_validator("api_base")
    @classmethod
    def _strip_base(cls, value: str) -> str:
        """Drop the trailing slash so paths can be appended."""

        return value.strip().rstrip("/") or LIVE_API_BASE


TransportConfig = LocalConfig | LiveConfig


def parse_transport_config(
    data: Mapping[str, Any] | TransportConfig,
) -> TransportConfig:
    """Return the transport settings described by ``data``.

    A ``host`` entry selects the local API; otherwise the cloud credentials
    are required. Raises ``pydantic.ValidationError`` on invalid input.
    """

    if isinstance(data, (LocalConfig, LiveConfig)):
        return data
    if data.get("host"):
        return LocalConfig.model_validate(data)
    return LiveConfig.model_validate(data)
