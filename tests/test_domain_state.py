from __future__ import annotations

import logging
import threading

import pytest

from custom_components.telldus.const import DEVICE_CACHE_TTL, SENSOR_CACHE_TTL
from custom_components.telldus.domain.commands import Command
from custom_components.telldus.domain.state import CollectionCache


def _devices() -> list[dict]:
    return [
        {"id": 5, "name": "Lamp", "state": int(Command.ON), "stateValue": None},
        {"id": "7", "name": "Dimmer", "state": int(Command.DIM), "stateValue": "128"},
        {"id": 9, "name": "Blind", "state": int(Command.UP), "stateValue": None},
    ]


@pytest.mark.parametrize("ttl", [DEVICE_CACHE_TTL, SENSOR_CACHE_TTL])
def test_needs_refresh_follows_ttl(ttl: float) -> None:
    cache = CollectionCache("devices", ttl)

    assert cache.is_cold
    assert cache.needs_refresh(0.0)

    cache.replace(_devices(), 100.0)
    assert not cache.is_cold
    assert cache.last_refresh == 100.0
    assert not cache.needs_refresh(100.0)
    assert not cache.needs_refresh(100.0 + ttl - 0.001)
    assert cache.needs_refresh(100.0 + ttl)
    assert cache.needs_refresh(100.0 + ttl + 50)


def test_default_ttls_match_collections() -> None:
    assert DEVICE_CACHE_TTL == 5.0
    assert SENSOR_CACHE_TTL == 60.0


def test_get_all_is_empty_when_cold_and_ordered_when_warm() -> None:
    cache = CollectionCache("devices", 5)
    assert cache.get_all() == []

    cache.replace(_devices(), 0)
    assert [item["id"] for item in cache.get_all()] == [5, "7", 9]


def test_get_all_returns_copies() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    items = cache.get_all()
    items[0]["state"] = 999
    items.clear()

    assert cache.get_by_id(5)["state"] == int(Command.ON)
    assert len(cache.get_all()) == 3


def test_replace_copies_input() -> None:
    source = _devices()
    cache = CollectionCache("devices", 5)
    cache.replace(source, 0)

    source[0]["name"] = "Changed"

    assert cache.get_by_id(5)["name"] == "Lamp"


@pytest.mark.parametrize("lookup", [5, "5", " 5 ", 5.0])
def test_get_by_id_tolerates_numeric_strings(lookup) -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    assert cache.get_by_id(lookup)["name"] == "Lamp"


def test_get_by_id_matches_string_ids_with_numbers() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    assert cache.get_by_id(7)["name"] == "Dimmer"
    assert cache.get_by_id(8) is None
    assert cache.get_by_id(None) is None


def test_get_by_id_on_cold_cache() -> None:
    assert CollectionCache("sensors", 60).get_by_id(1) is None


def test_first_duplicate_id_wins() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace([{"id": 1, "name": "first"}, {"id": "1", "name": "second"}], 0)

    assert cache.get_by_id(1)["name"] == "first"
    assert len(cache.get_all()) == 2


def test_replace_swaps_whole_snapshot() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)
    cache.replace([{"id": 11, "name": "New"}], 10)

    assert cache.get_by_id(5) is None
    assert [item["id"] for item in cache.get_all()] == [11]
    assert cache.last_refresh == 10


def test_dim_state_survives_on_command() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    assert cache.patch_state(7, Command.ON)
    assert cache.get_by_id(7)["state"] == int(Command.DIM)

    assert cache.patch_state(7, Command.OFF)
    assert cache.get_by_id(7)["state"] == int(Command.OFF)

    assert cache.patch_state(7, Command.ON)
    assert cache.get_by_id(7)["state"] == int(Command.ON)


def test_dim_preservation_accepts_string_state() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace([{"id": 1, "state": "16"}], 0)

    cache.patch_state(1, Command.ON)

    assert cache.get_by_id(1)["state"] == int(Command.DIM)


def test_patch_state_sets_other_commands() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    cache.patch_state("9", Command.DOWN)
    assert cache.get_by_id(9)["state"] == int(Command.DOWN)
    cache.patch_state(9, Command.STOP)
    assert cache.get_by_id(9)["state"] == int(Command.STOP)


def test_patch_does_not_touch_freshness() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    cache.patch_state(5, Command.OFF)
    cache.patch_state_value(5, 10)

    assert cache.last_refresh == 0
    assert cache.needs_refresh(5)


def test_patch_missing_item_is_logged_noop(caplog: pytest.LogCaptureFixture) -> None:
    cache = CollectionCache("devices", 5)

    with caplog.at_level(logging.DEBUG):
        assert not cache.patch_state(5, Command.ON)
        assert not cache.patch_state_value(5, 80)

    assert cache.is_cold
    assert "state patch skipped" in caplog.text

    cache.replace(_devices(), 0)
    assert not cache.patch_state(404, Command.ON)
    assert [item["state"] for item in cache.get_all()] == [1, 16, 128]


def test_patch_state_value_overwrites() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace(_devices(), 0)

    assert cache.patch_state_value(" 7", 80)
    assert cache.get_by_id(7)["stateValue"] == 80
    assert cache.get_by_id(7)["state"] == int(Command.DIM)

    cache.patch_state_value(7, None)
    assert cache.get_by_id(7)["stateValue"] is None


def test_clear_makes_cache_cold() -> None:
    cache = CollectionCache("sensors", 60)
    cache.replace([{"id": 1}], 0)

    cache.clear()

    assert cache.is_cold
    assert cache.needs_refresh(1)
    assert cache.get_all() == []


def test_patches_apply_to_current_snapshot_under_threads() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace([{"id": n, "state": int(Command.OFF)} for n in range(50)], 0)

    def _patch() -> None:
        for n in range(50):
            cache.patch_state(n, Command.ON)

    workers = [threading.Thread(target=_patch) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert {item["state"] for item in cache.get_all()} == {int(Command.ON)}


def test_replace_and_patches_interleave_under_threads() -> None:
    cache = CollectionCache("devices", 5)
    ids = list(range(20))
    errors: list[str] = []
    done = threading.Event()

    def _snapshot(generation: int) -> list[dict]:
        order = ids if generation % 2 == 0 else list(reversed(ids))
        return [
            {
                "id": n,
                "generation": generation,
                "state": int(Command.OFF),
                "stateValue": None,
            }
            for n in order
        ]

    cache.replace(_snapshot(0), 0)

    def _replace() -> None:
        try:
            for generation in range(1, 300):
                cache.replace(_snapshot(generation), generation)
        finally:
            done.set()

    def _patch(owned: list[int]) -> None:
        marker = 0
        while not done.is_set():
            marker += 1
            n = owned[marker % len(owned)]
            cache.patch_state_value(n, marker)
            item = cache.get_by_id(n)
            if item["id"] != n:
                errors.append(f"index returned {item['id']} for {n}")
            if item["stateValue"] not in (marker, None):
                errors.append(f"{n} holds {item['stateValue']}, expected {marker}")
            snapshot = cache.get_all()
            if {entry["generation"] for entry in snapshot} != {
                snapshot[0]["generation"]
            }:
                errors.append("snapshot mixes generations")
            if sorted(entry["id"] for entry in snapshot) != ids:
                errors.append("snapshot lost items")

    workers = [threading.Thread(target=_replace)] + [
        threading.Thread(target=_patch, args=(ids[k::3],)) for k in range(3)
    ]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert errors == []
    assert cache.last_refresh == 299

    for n in ids:
        assert cache.patch_state(n, Command.ON)
        assert cache.patch_state_value(n, n * 10)
    final = cache.get_all()
    assert [item["id"] for item in final] == list(reversed(ids))
    assert all(item["generation"] == 299 for item in final)
    assert all(item["state"] == int(Command.ON) for item in final)
    assert [item["stateValue"] for item in final] == [n * 10 for n in reversed(ids)]


def test_get_all_copies_nested_values() -> None:
    cache = CollectionCache("sensors", 60)
    cache.replace([{"id": 1, "data": [{"value": 21.5}]}], 0)

    cache.get_all()[0]["data"][0]["value"] = -999
    cache.get_by_id(1)["data"].append({"value": 0})

    assert cache.get_by_id(1)["data"] == [{"value": 21.5}]


def test_get_by_id_compares_numeric_text_by_value() -> None:
    cache = CollectionCache("devices", 5)
    cache.replace([{"id": 5, "name": "five"}, {"id": 7.5, "name": "seven"}], 0)

    assert cache.get_by_id("05")["name"] == "five"
    assert cache.get_by_id("7.50")["name"] == "seven"
