"""Codec helpers for Telldus list envelopes and token replies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from ..const import COLLECTION_DEVICES, COLLECTION_ENVELOPE_KEYS, COLLECTION_SENSORS
from .telldus_models import (
    DeviceSummary,
    SensorSummary,
    TokenRefreshResponse,
)

_LOGGER = logging.getLogger(__name__)

_ITEM_MODELS: dict[str, type[BaseModel]] = {
    COLLECTION_DEVICES: DeviceSummary,
    COLLECTION_SENSORS: SensorSummary,
}


def envelope_key(collection: str) -> str:
    """Return the envelope key (``device``/``sensor``) of ``collection``."""

    try:
        return COLLECTION_ENVELOPE_KEYS[collection]
    except KeyError as err:
        raise ValueError(f"Unknown collection: {collection!r}") from err


def _normalise_item(collection: str, item: Mapping[str, Any]) -> dict[str, Any] | None:
    """Validate one list entry, keeping the raw mapping when it has an id."""

    try:
        model = _ITEM_MODELS[collection].model_validate(item)
    except ValidationError as err:
        if item.get("id") is None:
            _LOGGER.debug("Dropping %s entry without id: %s", collection, err)
            return None
        return dict(item)
    return model.model_dump(by_alias=True, exclude_unset=True)


def decode_collection_payload(collection: str, raw: Any) -> list[dict[str, Any]]:
    """Return the ordered items of a ``{device: [...]}``/``{sensor: [...]}`` body.

    Raises ``ValueError`` when the envelope itself is malformed; individual
    entries that fail validation are kept as-is when they carry an id.
    """

    key = envelope_key(collection)
    if not isinstance(raw, Mapping):
        raise ValueError(
            f"Unexpected {collection} payload type: {type(raw).__name__}"
        )
    value = raw.get(key)
    if not isinstance(value, list):
        raise ValueError(f"Malformed {collection} envelope: missing {key!r} list")

    items: list[dict[str, Any]] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            _LOGGER.debug("Unexpected %s entry: %r", collection, entry)
            continue
        normalised = _normalise_item(collection, entry)
        if normalised is not None:
            items.append(normalised)
    return items


def encode_collection_payload(
    collection: str, items: Iterable[Mapping[str, Any]]
) -> dict[str, list[dict[str, Any]]]:
    """Wrap ``items`` in the envelope used by the API and snapshot files."""

    return {envelope_key(collection): [dict(item) for item in items]}


def decode_token_refresh(raw: Any) -> TokenRefreshResponse:
    """Validate a ``/refreshToken`` reply; ``ValueError`` when unusable."""

    if not isinstance(raw, Mapping):
        raise ValueError(f"Unexpected token payload type: {type(raw).__name__}")
    try:
        return TokenRefreshResponse.model_validate(raw)
    except ValidationError as err:
        raise ValueError(f"Malformed token payload: {err}") from err


__all__ = [
    "decode_collection_payload",
    "decode_token_refresh",
    "encode_collection_payload",
    "envelope_key",
]
