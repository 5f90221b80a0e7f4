"""quayturtles - MQTT status tracking and HTTP queries for quayOS turtles."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("quayturtles")
except PackageNotFoundError:
    __version__ = "0+local"
from quayturtles.config import TurtleConfig
from quayturtles.exceptions import (
    TurtleConfigError,
    TurtleError,
    TurtleInvalidArgumentError,
    TurtleNotFoundError,
    TurtleTransportError,
    TurtleValidationError,
)
from quayturtles.ingestion.router import StatusRouter, status_topic, status_topic_filter
from quayturtles.models import (
    InventorySlot,
    OnlineStatus,
    Orientation,
    Position,
    StatusPatch,
    TurtleDetail,
    TurtleSnapshot,
    TurtleSummary,
)
from quayturtles.query import TurtleQuery
from quayturtles.service import TurtleService
from quayturtles.state.registry import TurtleRegistry
from quayturtles.state.turtle import Turtle
from quayturtles.validation import FieldError, StatusValidator, ValidationResult

__all__ = [
    "__version__",
    "FieldError",
    "InventorySlot",
    "OnlineStatus",
    "Orientation",
    "Position",
    "StatusPatch",
    "StatusRouter",
    "StatusValidator",
    "Turtle",
    "TurtleConfig",
    "TurtleConfigError",
    "TurtleDetail",
    "TurtleError",
    "TurtleInvalidArgumentError",
    "TurtleNotFoundError",
    "TurtleQuery",
    "TurtleRegistry",
    "TurtleService",
    "TurtleSnapshot",
    "TurtleSummary",
    "TurtleTransportError",
    "TurtleValidationError",
    "ValidationResult",
    "status_topic",
    "status_topic_filter",
]
