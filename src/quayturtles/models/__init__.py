"""Data models for turtle status payloads and state."""

from quayturtles.models._base import NonNegativeNumber, Number, TurtleBaseModel
from quayturtles.models.query import TurtleDetail, TurtleSummary
from quayturtles.models.status import (
    InventorySlot,
    OnlineFlag,
    OnlineStatus,
    Orientation,
    Position,
    StatusPatch,
)
from quayturtles.models.turtle import EPOCH, TurtleSnapshot

__all__ = [
    "EPOCH",
    "InventorySlot",
    "NonNegativeNumber",
    "Number",
    "OnlineFlag",
    "OnlineStatus",
    "Orientation",
    "Position",
    "StatusPatch",
    "TurtleBaseModel",
    "TurtleDetail",
    "TurtleSnapshot",
    "TurtleSummary",
]
