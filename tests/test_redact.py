from __future__ import annotations

from quayturtles._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "mqtt_server": "mqtt://broker",
        "mqtt_password": "pw",
        "nested": {"password": "pw", "token": "abc"},
    }

    redacted = redact_for_log(payload)
    assert redacted["mqtt_server"] == "mqtt://broker"
    assert redacted["mqtt_password"] == "<redacted>"
    assert redacted["nested"]["password"] == "<redacted>"
    assert redacted["nested"]["token"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_caps_long_inventories() -> None:
    inventory = [{"name": "minecraft:dirt", "damage": 0, "count": 64}] * 20
    redacted = redact_for_log({"inventory": inventory}, max_items=16)
    assert len(redacted["inventory"]) == 17
    assert redacted["inventory"][-1] == "<+4 more>"
