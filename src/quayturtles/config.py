"""Service configuration for quayturtles."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from quayturtles.exceptions import TurtleConfigError

DEFAULT_MQTT_SERVER = "mqtt://test.mosquitto.org"
DEFAULT_BASE_TOPIC = "quayos/turtles"


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise TurtleConfigError(f"{env_key} must be an integer, got {value!r}") from exc


def normalize_base_topic(value: str) -> str:
    """Strip surrounding slashes and reject empty or wildcard topics."""
    topic = value.strip().strip("/")
    if not topic:
        raise TurtleConfigError("base_topic must be non-empty")
    if "+" in topic or "#" in topic:
        raise TurtleConfigError(f"base_topic must not contain MQTT wildcards: {value!r}")
    return topic


@dataclasses.dataclass(frozen=True)
class TurtleConfig:
    """Service configuration.

    Parameters
    ----------
    mqtt_server : str
        Broker URL, e.g. ``mqtt://test.mosquitto.org`` or
        ``mqtts://broker:8883``.
    base_topic : str
        Topic prefix; status updates arrive on ``<base_topic>/<id>/status``.
    mqtt_username : str or None
        Optional broker username.
    mqtt_password : str or None
        Optional broker password.
    mqtt_client_id : str
        MQTT client id. Empty lets the broker assign one.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    http_host : str
        Interface the query server binds to.
    http_port : int
        Port the query server listens on.
    seed_count : int
        Number of online test statuses to publish on startup (ids
        ``0..seed_count-1``). ``0`` disables seeding.
    """

    mqtt_server: str = DEFAULT_MQTT_SERVER
    base_topic: str = DEFAULT_BASE_TOPIC
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_client_id: str = ""
    mqtt_keepalive: int = 60
    http_host: str = "0.0.0.0"
    http_port: int = 3000
    seed_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_topic", normalize_base_topic(self.base_topic))
        if not self.mqtt_server.strip():
            raise TurtleConfigError("mqtt_server must be non-empty")
        if not 0 <= self.http_port < 65536:
            raise TurtleConfigError(f"http_port out of range: {self.http_port}")
        if self.mqtt_keepalive <= 0:
            raise TurtleConfigError(f"mqtt_keepalive must be positive: {self.mqtt_keepalive}")
        if self.seed_count < 0:
            raise TurtleConfigError(f"seed_count must not be negative: {self.seed_count}")

    @classmethod
    def from_env(cls, **overrides: Any) -> TurtleConfig:
        """Create configuration from environment variables.

        Reads ``MQTT_SERVER``, ``MQTT_BASE_TOPIC`` and the optional
        ``MQTT_*``, ``HTTP_*`` and ``SEED_TEST_MESSAGES`` variables. Explicit keyword
        arguments override environment values; ``None`` overrides are
        ignored so unset CLI options fall through to the environment.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TurtleConfig
            Populated configuration.
        """
        env = os.environ
        overrides = {k: v for k, v in overrides.items() if v is not None}

        _ENV_STR_MAP = {
            "MQTT_SERVER": "mqtt_server",
            "MQTT_BASE_TOPIC": "base_topic",
            "MQTT_USERNAME": "mqtt_username",
            "MQTT_PASSWORD": "mqtt_password",
            "MQTT_CLIENT_ID": "mqtt_client_id",
            "HTTP_HOST": "http_host",
        }
        _ENV_INT_MAP = {
            "MQTT_KEEPALIVE": "mqtt_keepalive",
            "HTTP_PORT": "http_port",
            "SEED_TEST_MESSAGES": "seed_count",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val != "":
                config_kwargs[field_name] = val
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip() and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
