"""Pydantic models for Telldus API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeviceSummary(BaseModel):
    """Device entry returned by ``/devices/list``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | str
    name: str | None = None
    state: int | None = None
    state_value: int | float | str | None = Field(default=None, alias="stateValue")
    methods: int | None = None
    type: str | None = None
    model: str | None = None
    protocol: str | None = None
    parameters: dict[str, Any] | list[Any] | None = None


class SensorValue(BaseModel):
    """Single reading of a sensor."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    value: int | float | str | None = None
    scale: int | str | None = None
    unit: str | None = None


class SensorSummary(BaseModel):
    """Sensor entry returned by ``/sensors/list``."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str | None = None
    data: list[SensorValue] | None = None
    ignored: bool | int | None = None


class TokenRefreshResponse(BaseModel):
    """Reply of the local API ``/refreshToken`` endpoint."""

    model_config = ConfigDict(extra="ignore")

    expires: int | float | None = None
    token: str | None = None
    error: str | None = None
