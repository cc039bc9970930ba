"""Device command bits understood by the Telldus API."""

from __future__ import annotations

from enum import IntFlag
from functools import reduce
import operator
from typing import Any


class Command(IntFlag):
    """Command bitmask.

    A device's ``state`` holds exactly one of these bits: the last command
    that was applied to it.
    """

    ON = 0x0001
    OFF = 0x0002
    BELL = 0x0004
    TOGGLE = 0x0008
    DIM = 0x0010
    LEARN = 0x0020
    EXECUTE = 0x0040
    UP = 0x0080
    DOWN = 0x0100
    STOP = 0x0200
    RGB = 0x0400
    THERMOSTAT = 0x0800


# Union of every command bit; sent as ``supportedMethods`` when listing devices
SUPPORTED_METHODS: int = int(reduce(operator.or_, Command))


def command_names() -> list[str]:
    """Return the lowercase names accepted by the generic command endpoint."""

    return [member.name.lower() for member in Command if member.name]


def lookup_command(name: Any) -> Command | None:
    """Return the ``Command`` for ``name`` or ``None`` when unknown."""

    if not isinstance(name, str):
        return None
    key = name.strip().upper()
    if not key:
        return None
    return Command.__members__.get(key)


def coerce_state(value: Any) -> int | None:
    """Return a cached ``state`` field as an integer bit when possible."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
