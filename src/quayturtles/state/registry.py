"""Turtle registry.

The registry is the only owner of :class:`Turtle` objects. Everything else
borrows them through :meth:`TurtleRegistry.get_or_create` or
:meth:`TurtleRegistry.get`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from quayturtles.exceptions import TurtleInvalidArgumentError, TurtleNotFoundError
from quayturtles.state.turtle import Turtle, _utcnow
from quayturtles.validation import StatusValidator

_logger = logging.getLogger(__name__)


def _require_id(turtle_id: Any) -> str:
    if not isinstance(turtle_id, str) or not turtle_id:
        raise TurtleInvalidArgumentError(f"turtle id must be a non-empty string, got {turtle_id!r}")
    return turtle_id


class TurtleRegistry:
    """In-memory map of turtle id to :class:`Turtle`.

    Map-level mutation and iteration are guarded by one lock; per-turtle
    updates are serialized by each turtle's own lock.
    """

    def __init__(
        self,
        validator: StatusValidator,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._validator = validator
        self._clock = clock
        self._lock = threading.Lock()
        self._turtles: dict[str, Turtle] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._turtles)

    def __contains__(self, turtle_id: object) -> bool:
        return isinstance(turtle_id, str) and self.exists(turtle_id)

    def get_or_create(self, turtle_id: str) -> Turtle:
        """Get a turtle, implicitly creating it if it does not exist yet.

        Raises
        ------
        TurtleInvalidArgumentError
            If *turtle_id* is not a non-empty string.
        """
        turtle_id = _require_id(turtle_id)
        with self._lock:
            turtle = self._turtles.get(turtle_id)
            if turtle is None:
                _logger.debug("Creating a new turtle object id=%s", turtle_id)
                turtle = Turtle(turtle_id, validator=self._validator, clock=self._clock)
                self._turtles[turtle_id] = turtle
            return turtle

    def get(self, turtle_id: str) -> Turtle:
        """Look up an existing turtle without creating one.

        Raises
        ------
        TurtleNotFoundError
            If no turtle with *turtle_id* is registered.
        """
        with self._lock:
            turtle = self._turtles.get(turtle_id)
        if turtle is None:
            raise TurtleNotFoundError(turtle_id)
        return turtle

    def exists(self, turtle_id: str) -> bool:
        with self._lock:
            return turtle_id in self._turtles

    def delete(self, turtle_id: str) -> None:
        """Remove a turtle; unknown ids are ignored."""
        with self._lock:
            removed = self._turtles.pop(turtle_id, None)
        if removed is not None:
            _logger.debug("Removed turtle id=%s", turtle_id)

    def list_turtles(self) -> list[Turtle]:
        """Return a point-in-time list of all registered turtles."""
        with self._lock:
            return list(self._turtles.values())
