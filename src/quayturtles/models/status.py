"""Turtle status update models.

A status update is an explicit patch: every attribute except ``online`` is
optional, and :attr:`pydantic.BaseModel.model_fields_set` records which ones
the turtle actually sent. :class:`OnlineStatus` is the same patch with the
full online facet required.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import StrictBool, StrictStr, field_validator

from quayturtles.models._base import NonNegativeNumber, Number, TurtleBaseModel


class Orientation(StrEnum):
    """Compass direction a turtle is facing."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


class Position(TurtleBaseModel):
    """Position relative to the world origin."""

    x: Number
    y: Number
    z: Number


class InventorySlot(TurtleBaseModel):
    """One inventory slot.

    Parameters
    ----------
    name : str
        Item name in the slot.
    damage : int or float
        Damage value of the item.
    count : int or float
        Number of items in the stack.
    """

    name: StrictStr
    damage: Number
    count: Number


class OnlineFlag(TurtleBaseModel):
    """Just the ``online`` discriminator, validated before the full payload."""

    online: StrictBool


class StatusPatch(TurtleBaseModel):
    """A validated status update.

    Only the fields in ``model_fields_set`` were present in the payload;
    the ``None`` defaults of the others mean "leave unchanged".
    """

    online: StrictBool
    fuel: NonNegativeNumber | None = None
    position: Position | None = None
    orientation: Orientation | None = None
    whitelist: tuple[StrictStr, ...] | None = None
    inventory: tuple[InventorySlot, ...] | None = None

    @field_validator("fuel", "position", "orientation", "whitelist", "inventory", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Absent means "unchanged"; an explicit null is not a valid value.
        if value is None:
            raise ValueError("must not be null")
        return value

    def present_fields(self) -> dict[str, Any]:
        """Return the fields the payload carried, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class OnlineStatus(StatusPatch):
    """Status of an online turtle: the whole online facet is required."""

    fuel: NonNegativeNumber
    position: Position
    orientation: Orientation
    whitelist: tuple[StrictStr, ...]
    inventory: tuple[InventorySlot, ...]
