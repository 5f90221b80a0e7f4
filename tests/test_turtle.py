"""Tests for the turtle entity and its merge rules."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from pydantic import ValidationError

from quayturtles.exceptions import TurtleValidationError
from quayturtles.models.status import InventorySlot, Orientation, Position
from quayturtles.models.turtle import EPOCH
from quayturtles.state.turtle import Turtle
from quayturtles.validation import StatusValidator


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _online(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "online": True,
        "fuel": 10,
        "position": {"x": 1, "y": 2, "z": 3},
        "orientation": "north",
        "whitelist": ["minecraft:stone"],
        "inventory": [{"name": "minecraft:coal", "damage": 0, "count": 12}],
    }
    payload.update(overrides)
    return payload


def _turtle(clock: _Clock | None = None) -> Turtle:
    return Turtle("42", validator=StatusValidator(), clock=clock or _Clock())


def test_new_turtle_has_default_state() -> None:
    turtle = _turtle()
    assert turtle.id == "42"
    assert turtle.online is False
    assert turtle.fuel == 0
    assert turtle.position is None
    assert turtle.orientation is None
    assert turtle.whitelist == ()
    assert turtle.inventory == ()
    assert turtle.last_update == EPOCH
    assert turtle.initialised is False


def test_online_update_replaces_online_facet_and_stamps_time() -> None:
    clock = _Clock()
    turtle = _turtle(clock)

    snapshot = turtle.apply_update(_online())

    assert snapshot is turtle.snapshot
    assert turtle.online is True
    assert turtle.fuel == 10
    assert turtle.position == Position(x=1, y=2, z=3)
    assert turtle.orientation is Orientation.NORTH
    assert turtle.whitelist == ("minecraft:stone",)
    assert turtle.inventory == (InventorySlot(name="minecraft:coal", damage=0, count=12),)
    assert turtle.last_update == clock.now
    assert turtle.initialised is True


def test_second_online_update_advances_last_update() -> None:
    clock = _Clock()
    turtle = _turtle(clock)
    turtle.apply_update(_online())

    clock.advance(30)
    turtle.apply_update(_online(fuel=9, orientation="west"))

    assert turtle.last_update == clock.now
    assert turtle.fuel == 9
    assert turtle.orientation is Orientation.WEST


def test_offline_update_keeps_last_update_and_retains_stale_fields() -> None:
    clock = _Clock()
    turtle = _turtle(clock)
    turtle.apply_update(_online())
    online_at = clock.now

    clock.advance(60)
    turtle.apply_update({"online": False})

    assert turtle.online is False
    assert turtle.last_update == online_at
    # Last-known values stay in storage after going offline.
    assert turtle.fuel == 10
    assert turtle.position == Position(x=1, y=2, z=3)
    assert turtle.whitelist == ("minecraft:stone",)


def test_offline_before_any_online_update() -> None:
    turtle = _turtle()

    turtle.apply_update({"online": False})

    assert turtle.initialised is True
    assert turtle.online is False
    assert turtle.last_update == EPOCH
    assert turtle.fuel == 0
    assert turtle.position is None
    assert turtle.orientation is None
    assert turtle.whitelist == ()
    assert turtle.inventory == ()


def test_offline_update_merges_fields_it_carries() -> None:
    turtle = _turtle()
    turtle.apply_update(_online())

    turtle.apply_update({"online": False, "fuel": 3})

    assert turtle.fuel == 3
    assert turtle.orientation is Orientation.NORTH


def test_online_offline_cycle() -> None:
    clock = _Clock()
    turtle = _turtle(clock)
    for _ in range(3):
        clock.advance(1)
        turtle.apply_update(_online())
        assert turtle.online is True
        assert turtle.last_update == clock.now
        clock.advance(1)
        turtle.apply_update({"online": False})
        assert turtle.online is False
        assert turtle.last_update == clock.now - timedelta(seconds=1)


@pytest.mark.parametrize(
    "payload",
    [
        {"online": True, "position": {"x": 1, "y": 2, "z": 3}},
        _online(fuel=-1),
        _online(orientation="up"),
        {"online": "yes"},
        {"online": False, "whitelist": [1]},
        ["not", "an", "object"],
    ],
)
def test_invalid_update_leaves_state_untouched(payload: Any) -> None:
    turtle = _turtle()
    turtle.apply_update(_online())
    before = turtle.snapshot

    with pytest.raises(TurtleValidationError) as excinfo:
        turtle.apply_update(payload)

    assert excinfo.value.errors
    assert turtle.snapshot is before


def test_rejected_first_update_leaves_turtle_uninitialised() -> None:
    turtle = _turtle()
    payload = _online()
    del payload["fuel"]

    with pytest.raises(TurtleValidationError):
        turtle.apply_update(payload)

    assert turtle.initialised is False
    assert turtle.online is False


def test_snapshot_is_immutable() -> None:
    turtle = _turtle()
    turtle.apply_update(_online())
    with pytest.raises(ValidationError):
        turtle.snapshot.fuel = 99  # type: ignore[misc]


def test_readers_never_see_mixed_updates() -> None:
    turtle = _turtle()
    stop = threading.Event()
    mismatches: list[tuple[Any, Any]] = []

    def reader() -> None:
        while not stop.is_set():
            snap = turtle.snapshot
            if snap.online and snap.position is not None and snap.position.x != snap.fuel:
                mismatches.append((snap.fuel, snap.position))

    def writer(offset: int) -> None:
        for i in range(200):
            value = offset + i
            turtle.apply_update(_online(fuel=value, position={"x": value, "y": value, "z": value}))

    readers = [threading.Thread(target=reader) for _ in range(2)]
    writers = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(3)]
    for thread in readers + writers:
        thread.start()
    for thread in writers:
        thread.join()
    stop.set()
    for thread in readers:
        thread.join()

    assert mismatches == []
    assert turtle.fuel == turtle.position.x  # type: ignore[union-attr]
