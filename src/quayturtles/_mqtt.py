"""Internal MQTT runtime: broker parsing, payload decoding, threaded client."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from quayturtles.exceptions import TurtleTransportError

_PLAIN_SCHEMES = frozenset({"mqtt", "tcp"})
_TLS_SCHEMES = frozenset({"mqtts", "ssl", "tls"})

MessageHandler = Callable[[str, dict[str, Any]], Any]


@dataclass(frozen=True)
class BrokerAddress:
    """Where and how to connect to the MQTT broker."""

    host: str
    port: int
    tls: bool = False


def parse_broker_url(raw_url: str) -> BrokerAddress:
    """Parse ``mqtt://host[:port]`` style broker URLs.

    ``mqtt://`` and ``tcp://`` default to port 1883; ``mqtts://``,
    ``ssl://`` and ``tls://`` default to 8883 and enable TLS. A bare
    ``host[:port]`` is treated as ``mqtt://``.
    """
    value = raw_url.strip()
    if not value:
        raise TurtleTransportError("Broker URL is empty")

    scheme = "mqtt"
    if "://" in value:
        scheme, value = value.split("://", 1)
        scheme = scheme.lower()
    if scheme not in _PLAIN_SCHEMES | _TLS_SCHEMES:
        raise TurtleTransportError(f"Unsupported broker scheme: {scheme!r}")
    tls = scheme in _TLS_SCHEMES

    if "/" in value:
        value = value.split("/", 1)[0]
    if "@" in value:
        value = value.rsplit("@", 1)[1]

    host, sep, maybe_port = value.rpartition(":")
    if sep and maybe_port.isdigit():
        port = int(maybe_port)
    else:
        host = value
        port = 8883 if tls else 1883
    if not host:
        raise TurtleTransportError(f"Broker URL has no host: {raw_url!r}")
    return BrokerAddress(host=host, port=port, tls=tls)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def decode_status_payload(payload: bytes, *, topic: str = "") -> dict[str, Any]:
    """Decode an MQTT payload into a JSON object.

    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and are rejected.
    """
    try:
        parsed = json.loads(payload.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as exc:
        raise TurtleTransportError(f"MQTT payload is not valid JSON: {exc}", topic=topic) from exc
    if not isinstance(parsed, dict):
        raise TurtleTransportError("MQTT payload is not a JSON object", topic=topic)
    return parsed


def encode_status_payload(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


class TurtleMqttRuntime:
    """Threaded paho-mqtt runtime that hands decoded messages to an asyncio loop.

    paho delivers messages on a single network thread; each one is queued
    onto the loop with ``call_soon_threadsafe``, which keeps arrival order.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_message: MessageHandler,
        keepalive: int = 60,
        subscribe_timeout: float = 10.0,
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_message = on_message
        self._keepalive = keepalive
        self._subscribe_timeout = subscribe_timeout
        self._client_id = client_id
        self._username = username
        self._password = password
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._topic_filter: str | None = None
        self._subscribed = threading.Event()
        self._subscribe_error: str | None = None

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def start(self, address: BrokerAddress, topic_filter: str) -> None:
        """Connect and subscribe to *topic_filter*.

        Blocks until the broker acknowledges the subscription, so anything
        published after this returns is delivered back to the handler.
        """
        self.stop()
        self._logger.info(
            "Connecting to MQTT server host=%s port=%s tls=%s",
            address.host,
            address.port,
            address.tls,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if self._username:
            client.username_pw_set(self._username, self._password)
        if address.tls:
            client.tls_set()

        self._topic_filter = topic_filter
        self._subscribed.clear()
        self._subscribe_error = None

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                self._subscribe_error = f"connect refused: {reason_code}"
                self._subscribed.set()
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)
            # Subscribing here also restores the subscription after a reconnect.
            if self._topic_filter:
                self._logger.info("Registering topic handler topic=%s", self._topic_filter)
                c.subscribe(self._topic_filter, qos=0)

        def on_subscribe(
            _c: mqtt.Client,
            _userdata: Any,
            mid: int,
            reason_code_list: list[Any],
            _properties: Any,
        ) -> None:
            self._on_subscribed(mid, reason_code_list)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                payload = decode_status_payload(msg.payload, topic=msg.topic)
            except TurtleTransportError as exc:
                self._logger.warning("Dropping undecodable message topic=%s: %s", msg.topic, exc)
                return
            self._loop.call_soon_threadsafe(self._dispatch, msg.topic, payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.warning("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_subscribe = on_subscribe
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(address.host, address.port, keepalive=self._keepalive)
        except OSError as exc:
            raise TurtleTransportError(f"Could not connect to {address.host}:{address.port}: {exc}") from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

        if not self._subscribed.wait(self._subscribe_timeout):
            self.stop()
            raise TurtleTransportError(
                f"No subscription acknowledgement within {self._subscribe_timeout}s",
                topic=topic_filter,
            )
        error = self._subscribe_error
        if error is not None:
            self.stop()
            raise TurtleTransportError(f"Could not subscribe: {error}", topic=topic_filter)

    def _on_subscribed(self, mid: int, reason_codes: list[Any]) -> None:
        failed = [code for code in reason_codes if code.is_failure]
        if failed:
            self._logger.warning("MQTT subscribe rejected mid=%s reasons=%s", mid, failed)
            self._subscribe_error = f"rejected by broker: {failed[0]}"
        else:
            self._logger.debug("MQTT subscribed mid=%s", mid)
        self._subscribed.set()

    def _dispatch(self, topic: str, payload: dict[str, Any]) -> None:
        if not self._running:
            self._logger.debug("Dropping message received after stop topic=%s", topic)
            return
        try:
            self._on_message(topic, payload)
        except Exception:
            self._logger.exception("Message handler failed topic=%s", topic)

    def publish(self, topic: str, payload: dict[str, Any], *, qos: int = 0) -> None:
        """Publish a JSON payload and wait until paho has sent it."""
        client = self._client
        if client is None or not self._running:
            raise TurtleTransportError("MQTT runtime is not running", topic=topic)
        info = client.publish(topic, encode_status_payload(payload), qos=qos)
        try:
            info.wait_for_publish(timeout=5.0)
        except (RuntimeError, ValueError) as exc:
            raise TurtleTransportError(f"Publish failed: {exc}", topic=topic) from exc

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        topic_filter = self._topic_filter
        self._topic_filter = None
        self._subscribed.clear()

        if client is None:
            return
        try:
            if was_running:
                self._logger.info("Shutting down MQTT client")
                if topic_filter and client.is_connected():
                    client.unsubscribe(topic_filter)
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
