"""Turtle entity.

Holds the server-side state of one in-game turtle and applies status
updates to it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from quayturtles._redact import redact_for_log
from quayturtles.models.status import InventorySlot, Orientation, Position
from quayturtles.models.turtle import TurtleSnapshot
from quayturtles.validation import StatusValidator

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Turtle:
    """Stores the server side state of an in-game turtle.

    State lives in an immutable :class:`TurtleSnapshot` that is replaced as
    a whole on every update, so readers always see one complete update.
    Updates to the same turtle are serialized by a per-turtle lock.

    Instances are created by :meth:`TurtleRegistry.get_or_create`.
    """

    def __init__(
        self,
        turtle_id: str,
        *,
        validator: StatusValidator,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._validator = validator
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = TurtleSnapshot(id=turtle_id)

    def __repr__(self) -> str:
        snap = self._snapshot
        return f"Turtle(id={snap.id!r}, online={snap.online}, initialised={snap.initialised})"

    @property
    def snapshot(self) -> TurtleSnapshot:
        """The current consistent state."""
        return self._snapshot

    @property
    def id(self) -> str:
        return self._snapshot.id

    @property
    def online(self) -> bool:
        return self._snapshot.online

    @property
    def fuel(self) -> int | float:
        return self._snapshot.fuel

    @property
    def position(self) -> Position | None:
        return self._snapshot.position

    @property
    def orientation(self) -> Orientation | None:
        return self._snapshot.orientation

    @property
    def whitelist(self) -> tuple[str, ...]:
        return self._snapshot.whitelist

    @property
    def inventory(self) -> tuple[InventorySlot, ...]:
        return self._snapshot.inventory

    @property
    def last_update(self) -> datetime:
        return self._snapshot.last_update

    @property
    def initialised(self) -> bool:
        return self._snapshot.initialised

    def apply_update(self, status: Any) -> TurtleSnapshot:
        """Update the status of the turtle.

        The update is all-or-nothing: an invalid payload leaves the turtle
        untouched.

        Parameters
        ----------
        status : Mapping
            Decoded status payload.

        Returns
        -------
        TurtleSnapshot
            The state after the update.

        Raises
        ------
        TurtleValidationError
            If the payload is invalid.
        """
        _logger.debug("Received turtle status update id=%s status=%s", self.id, redact_for_log(status))

        patch = self._validator.parse(status)

        with self._lock:
            snapshot = self._snapshot.merged(patch, now=self._clock())
            self._snapshot = snapshot

        _logger.debug(
            "Updated turtle status id=%s online=%s fields=%s",
            snapshot.id,
            snapshot.online,
            sorted(patch.model_fields_set),
        )
        return snapshot
