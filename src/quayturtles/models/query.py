"""Read-side views exposed to the HTTP layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from quayturtles.models.status import InventorySlot, Orientation, Position
from quayturtles.models.turtle import TurtleSnapshot


class TurtleSummary(BaseModel):
    """One entry of the turtle list."""

    model_config = ConfigDict(frozen=True)

    id: str
    online: bool
    last_contact: datetime
    position: Position | None = None

    @classmethod
    def from_snapshot(cls, snapshot: TurtleSnapshot) -> TurtleSummary:
        return cls(
            id=snapshot.id,
            online=snapshot.online,
            last_contact=snapshot.last_update,
            position=snapshot.position,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class TurtleDetail(BaseModel):
    """Full view of a single turtle.

    ``position`` and ``orientation`` are left out of :meth:`to_wire`
    rather than sent as ``null`` when the turtle never reported them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    online: bool
    fuel: int | float
    last_contact: datetime
    whitelist: tuple[str, ...]
    inventory: tuple[InventorySlot, ...]
    position: Position | None = None
    orientation: Orientation | None = None

    @classmethod
    def from_snapshot(cls, snapshot: TurtleSnapshot) -> TurtleDetail:
        return cls(
            id=snapshot.id,
            online=snapshot.online,
            fuel=snapshot.fuel,
            last_contact=snapshot.last_update,
            whitelist=snapshot.whitelist,
            inventory=snapshot.inventory,
            position=snapshot.position,
            orientation=snapshot.orientation,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
