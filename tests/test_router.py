"""Tests for status topic routing and the end-to-end ingest scenarios."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from quayturtles.ingestion.router import StatusRouter, status_topic, status_topic_filter
from quayturtles.query import TurtleQuery
from quayturtles.state.registry import TurtleRegistry
from quayturtles.validation import StatusValidator


def _online(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "online": True,
        "fuel": 10,
        "position": {"x": 1, "y": 2, "z": 3},
        "orientation": "north",
        "whitelist": [],
        "inventory": [],
    }
    payload.update(overrides)
    return payload


def _setup(base_topic: str = "base") -> tuple[TurtleRegistry, StatusRouter, TurtleQuery]:
    registry = TurtleRegistry(StatusValidator())
    return registry, StatusRouter(registry, base_topic=base_topic), TurtleQuery(registry)


class TestTopics:
    def test_topic_filter(self) -> None:
        assert status_topic_filter("quayos/turtles") == "quayos/turtles/+/status"
        assert status_topic_filter("/quayos/turtles/") == "quayos/turtles/+/status"

    def test_status_topic(self) -> None:
        assert status_topic("quayos/turtles", "42") == "quayos/turtles/42/status"

    def test_router_exposes_filter(self) -> None:
        _, router, _ = _setup("quayos/turtles")
        assert router.topic_filter == "quayos/turtles/+/status"

    @pytest.mark.parametrize(
        ("topic", "expected"),
        [
            ("quayos/turtles/42/status", "42"),
            ("quayos/turtles/miner-a/status", "miner-a"),
            ("quayos/turtles/status", None),
            ("quayos/turtles/42/foo", None),
            ("quayos/turtles//status", None),
            ("quayos/turtles/a/b/status", None),
            ("other/turtles/42/status", None),
            ("quayos/turtles/42/status/extra", None),
            ("quayos/turtles/42/status\n", None),
        ],
    )
    def test_parse_turtle_id(self, topic: str, expected: str | None) -> None:
        _, router, _ = _setup("quayos/turtles")
        assert router.parse_turtle_id(topic) == expected

    def test_base_topic_is_matched_literally(self) -> None:
        _, router, _ = _setup("a.b")
        assert router.parse_turtle_id("a.b/1/status") == "1"
        assert router.parse_turtle_id("axb/1/status") is None


class TestHandleStatus:
    def test_routes_to_turtle(self) -> None:
        registry, router, _ = _setup("quayos/turtles")

        assert router.handle_status("quayos/turtles/42/status", _online()) is True

        turtle = registry.get("42")
        assert turtle.online is True
        assert turtle.fuel == 10

    @pytest.mark.parametrize("topic", ["quayos/turtles/status", "quayos/turtles/42/foo"])
    def test_unroutable_topic_is_discarded(self, topic: str, caplog: pytest.LogCaptureFixture) -> None:
        registry, router, _ = _setup("quayos/turtles")

        with caplog.at_level(logging.ERROR, logger="quayturtles.ingestion.router"):
            assert router.handle_status(topic, _online()) is False

        assert len(registry) == 0
        assert "Could not extract turtle id" in caplog.text

    def test_invalid_payload_is_logged_and_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        registry, router, _ = _setup()
        payload = _online()
        del payload["fuel"]

        with caplog.at_level(logging.WARNING, logger="quayturtles.ingestion.router"):
            assert router.handle_status("base/A/status", payload) is False

        turtle = registry.get("A")
        assert turtle.initialised is False
        assert "fuel" in caplog.text

    def test_bad_message_does_not_affect_other_turtles(self) -> None:
        registry, router, _ = _setup()
        router.handle_status("base/A/status", _online(fuel=5))
        router.handle_status("base/B/status", _online(fuel=7))

        router.handle_status("base/A/status", {"online": True})
        router.handle_status("base/B/status", _online(fuel=6))

        assert registry.get("A").fuel == 5
        assert registry.get("B").fuel == 6

    def test_updates_for_same_turtle_apply_in_order(self) -> None:
        registry, router, _ = _setup()
        for fuel in range(10):
            router.handle_status("base/A/status", _online(fuel=fuel))
        assert registry.get("A").fuel == 9


class TestScenarios:
    def test_single_online_turtle_is_listed(self) -> None:
        _, router, query = _setup()

        router.handle_status("base/A/status", _online())

        summaries = query.list_summaries(include_offline=False)
        assert [(s.id, s.online) for s in summaries] == [("A", True)]

    def test_turtle_going_offline(self) -> None:
        _, router, query = _setup()
        router.handle_status("base/A/status", _online())

        router.handle_status("base/A/status", {"online": False})

        assert query.list_summaries(include_offline=False) == []
        summaries = query.list_summaries(include_offline=True)
        assert [(s.id, s.online) for s in summaries] == [("A", False)]

        # Stale values are retained and still surfaced by the detail view.
        wire = query.detail("A").to_wire()
        assert wire["online"] is False
        assert wire["position"] == {"x": 1, "y": 2, "z": 3}
        assert wire["orientation"] == "north"

    def test_offline_only_turtle_detail_omits_position(self) -> None:
        _, router, query = _setup()

        router.handle_status("base/A/status", {"online": False})

        wire = query.detail("A").to_wire()
        assert "position" not in wire
        assert "orientation" not in wire
        assert wire["fuel"] == 0
