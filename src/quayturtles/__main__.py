"""Command line entry point: ``python -m quayturtles``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from quayturtles.config import TurtleConfig
from quayturtles.exceptions import TurtleError
from quayturtles.service import TurtleService


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="quayturtles",
        description="Track quayOS turtle status over MQTT and serve it over HTTP.",
    )
    parser.add_argument("--server", help="MQTT broker URL (env MQTT_SERVER).")
    parser.add_argument("--base-topic", help="Status topic prefix (env MQTT_BASE_TOPIC).")
    parser.add_argument("--host", dest="http_host", help="HTTP bind address (env HTTP_HOST).")
    parser.add_argument("--port", dest="http_port", type=int, help="HTTP port (env HTTP_PORT).")
    parser.add_argument(
        "--seed",
        dest="seed_count",
        type=int,
        help="Publish N online test statuses on startup (env SEED_TEST_MESSAGES).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = TurtleConfig.from_env(
            mqtt_server=args.server,
            base_topic=args.base_topic,
            http_host=args.http_host,
            http_port=args.http_port,
            seed_count=args.seed_count,
        )
        asyncio.run(TurtleService(config).run())
    except TurtleError as exc:
        logging.getLogger("quayturtles").error("%s", exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
