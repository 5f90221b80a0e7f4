"""REST server exposing read-only turtle queries."""

from __future__ import annotations

import logging

from aiohttp import web

from quayturtles.exceptions import TurtleNotFoundError
from quayturtles.query import TurtleQuery

_logger = logging.getLogger(__name__)

QUERY_KEY = web.AppKey("query", TurtleQuery)

_TRUTHY_FLAGS = frozenset({"true", "✓"})


async def list_turtles(request: web.Request) -> web.Response:
    include_offline = request.query.get("include_offline") in _TRUTHY_FLAGS
    _logger.info("GET /turtles include_offline=%s", include_offline)
    summaries = request.app[QUERY_KEY].list_summaries(include_offline=include_offline)
    return web.json_response({"turtles": [summary.to_wire() for summary in summaries]})


async def get_turtle(request: web.Request) -> web.Response:
    turtle_id = request.match_info["turtle_id"]
    _logger.info("GET /turtles/%s", turtle_id)
    try:
        detail = request.app[QUERY_KEY].detail(turtle_id)
    except TurtleNotFoundError:
        return web.json_response({"error": "Turtle does not exist", "turtleId": turtle_id}, status=404)
    return web.json_response(detail.to_wire())


def build_app(query: TurtleQuery) -> web.Application:
    """Create the aiohttp application with all routes mounted."""
    app = web.Application()
    app[QUERY_KEY] = query
    app.router.add_get("/turtles", list_turtles)
    app.router.add_get("/turtles/{turtle_id}", get_turtle)
    return app


class TurtleServer:
    """Owns the aiohttp runner for the query API."""

    def __init__(self, query: TurtleQuery) -> None:
        self._app = build_app(query)
        self._runner: web.AppRunner | None = None

    @property
    def app(self) -> web.Application:
        return self._app

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self, host: str, port: int) -> None:
        """Start listening on *host*:*port*."""
        _logger.info("Starting REST server host=%s port=%d", host, port)
        runner = web.AppRunner(self._app)
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            _logger.error("Error starting REST server port=%d", port)
            raise
        self._runner = runner
        _logger.info("Started REST server port=%d", port)

    async def stop(self) -> None:
        """Stop the server if running."""
        runner = self._runner
        self._runner = None
        if runner is None:
            return
        _logger.info("Stopping REST server")
        await runner.cleanup()
