"""Service wiring: MQTT ingest, registry and REST server in one process."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from typing import Any

from quayturtles._mqtt import TurtleMqttRuntime, parse_broker_url
from quayturtles._redact import redact_for_log
from quayturtles.config import TurtleConfig
from quayturtles.exceptions import TurtleTransportError
from quayturtles.ingestion.router import StatusRouter, status_topic
from quayturtles.query import TurtleQuery
from quayturtles.server import TurtleServer
from quayturtles.state.registry import TurtleRegistry
from quayturtles.validation import StatusValidator

_logger = logging.getLogger(__name__)

_STOP_SIGNALS = ("SIGINT", "SIGQUIT", "SIGTERM")


def seed_status() -> dict[str, Any]:
    """Online status published for each seeded test turtle."""
    return {
        "online": True,
        "fuel": 0,
        "position": {"x": 0, "y": 0, "z": 0},
        "orientation": "north",
        "whitelist": [],
        "inventory": [],
    }


class TurtleService:
    """Builds every component once and threads them together.

    Usage::

        service = TurtleService(TurtleConfig.from_env())
        await service.run()
    """

    def __init__(
        self,
        config: TurtleConfig,
        *,
        runtime_factory: Callable[..., TurtleMqttRuntime] = TurtleMqttRuntime,
    ) -> None:
        self._config = config
        self.validator = StatusValidator()
        self.registry = TurtleRegistry(self.validator)
        self.router = StatusRouter(self.registry, base_topic=config.base_topic)
        self.query = TurtleQuery(self.registry)
        self.server = TurtleServer(self.query)
        self._runtime_factory = runtime_factory
        self._runtime: TurtleMqttRuntime | None = None
        self._stop_event = asyncio.Event()

    @property
    def runtime(self) -> TurtleMqttRuntime | None:
        return self._runtime

    async def start(self) -> None:
        """Connect to the broker, subscribe, and start the REST server."""
        config = self._config
        _logger.debug("Starting service config=%s", redact_for_log(vars(config)))
        loop = asyncio.get_running_loop()
        address = parse_broker_url(config.mqtt_server)

        runtime = self._runtime_factory(
            loop=loop,
            on_message=self.router.handle_status,
            keepalive=config.mqtt_keepalive,
            client_id=config.mqtt_client_id,
            username=config.mqtt_username,
            password=config.mqtt_password,
        )
        await loop.run_in_executor(None, runtime.start, address, self.router.topic_filter)
        self._runtime = runtime

        try:
            await self.server.start(config.http_host, config.http_port)
        except OSError:
            await self._stop_runtime()
            raise

        if config.seed_count:
            try:
                await self.seed(config.seed_count)
            except TurtleTransportError:
                await self.stop()
                raise

    async def seed(self, count: int) -> None:
        """Publish *count* online test statuses for ids ``0..count-1``."""
        runtime = self._runtime
        if runtime is None:
            return
        loop = asyncio.get_running_loop()
        _logger.info("Sending test messages count=%d", count)
        for index in range(count):
            topic = status_topic(self._config.base_topic, str(index))
            await loop.run_in_executor(None, runtime.publish, topic, seed_status())

    def request_stop(self) -> None:
        """Ask :meth:`run` to shut down."""
        self._stop_event.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for name in _STOP_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                loop.add_signal_handler(signum, self._on_signal, name)
            except (NotImplementedError, RuntimeError):
                _logger.debug("Signal handlers unavailable for %s", name)

    def _on_signal(self, name: str) -> None:
        _logger.info("Received %s, shutting down", name)
        self.request_stop()

    async def run(self) -> None:
        """Run until :meth:`request_stop` is called or a stop signal arrives."""
        try:
            await self.start()
            self.install_signal_handlers()
            await self._stop_event.wait()
        finally:
            await self.stop()

    async def _stop_runtime(self) -> None:
        runtime = self._runtime
        self._runtime = None
        if runtime is None:
            return
        await asyncio.get_running_loop().run_in_executor(None, runtime.stop)

    async def stop(self) -> None:
        """Stop ingesting first, then stop serving queries."""
        await self._stop_runtime()
        await self.server.stop()
