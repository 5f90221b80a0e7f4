"""Custom exception hierarchy for quayturtles."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quayturtles.validation import FieldError


class TurtleError(Exception):
    """Base exception for all quayturtles errors."""


class TurtleConfigError(TurtleError):
    """Invalid or missing configuration."""


class TurtleTransportError(TurtleError):
    """MQTT-level failure (broker address, undecodable payload)."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)


class TurtleValidationError(TurtleError):
    """A status payload failed schema validation.

    ``errors`` carries one :class:`~quayturtles.validation.FieldError` per
    offending field so callers can log or report exactly what was wrong.
    """

    def __init__(self, message: str, *, errors: Sequence[FieldError] = ()) -> None:
        self.errors: tuple[FieldError, ...] = tuple(errors)
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        detail = "; ".join(str(error) for error in self.errors)
        return f"{base}: {detail}"


class TurtleInvalidArgumentError(TurtleError, ValueError):
    """Malformed call into the registry (e.g. empty or non-string id)."""


class TurtleNotFoundError(TurtleError, LookupError):
    """Query for a turtle id that is not registered."""

    def __init__(self, turtle_id: str) -> None:
        self.turtle_id = turtle_id
        super().__init__(f"Turtle does not exist: {turtle_id!r}")
