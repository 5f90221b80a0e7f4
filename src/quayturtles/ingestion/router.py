"""Status ingest routing.

Maps an inbound ``(topic, payload)`` pair from the status wildcard
subscription to the right turtle and applies the update. Nothing here may
raise for bad input: unroutable topics and invalid payloads are logged and
dropped so one bad message never stalls the subscription.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from quayturtles._redact import redact_for_log
from quayturtles.config import normalize_base_topic
from quayturtles.exceptions import TurtleValidationError
from quayturtles.state.registry import TurtleRegistry

_logger = logging.getLogger(__name__)

STATUS_SUFFIX = "status"


def status_topic_filter(base_topic: str) -> str:
    """Subscription filter matching every turtle's status topic."""
    return f"{normalize_base_topic(base_topic)}/+/{STATUS_SUFFIX}"


def status_topic(base_topic: str, turtle_id: str) -> str:
    """Topic a single turtle publishes its status on."""
    return f"{normalize_base_topic(base_topic)}/{turtle_id}/{STATUS_SUFFIX}"


class StatusRouter:
    """Routes status messages to turtles in a :class:`TurtleRegistry`."""

    def __init__(self, registry: TurtleRegistry, *, base_topic: str) -> None:
        self._registry = registry
        self._base_topic = normalize_base_topic(base_topic)
        self._pattern = re.compile(rf"{re.escape(self._base_topic)}/([^/]+)/{STATUS_SUFFIX}")

    @property
    def base_topic(self) -> str:
        return self._base_topic

    @property
    def topic_filter(self) -> str:
        return status_topic_filter(self._base_topic)

    def parse_turtle_id(self, topic: str) -> str | None:
        """Extract the turtle id from ``<base>/<id>/status``.

        Returns ``None`` when the topic has no id segment, a different
        suffix, or a different base.
        """
        match = self._pattern.fullmatch(topic)
        if match is None:
            return None
        return match.group(1)

    def handle_status(self, topic: str, payload: Any) -> bool:
        """Apply one status message.

        Returns
        -------
        bool
            ``True`` if the update was applied, ``False`` if it was dropped.
        """
        turtle_id = self.parse_turtle_id(topic)
        if turtle_id is None:
            _logger.error("Could not extract turtle id from topic=%s", topic)
            return False

        _logger.debug("Received status update id=%s topic=%s", turtle_id, topic)

        try:
            self._registry.get_or_create(turtle_id).apply_update(payload)
        except TurtleValidationError as exc:
            _logger.warning(
                "Failed to update turtle status id=%s errors=%s payload=%s",
                turtle_id,
                [str(error) for error in exc.errors],
                redact_for_log(payload),
            )
            return False
        return True
