"""Server-side turtle state snapshot."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from quayturtles.models.status import InventorySlot, Orientation, Position, StatusPatch

#: ``last_update`` value of a turtle that has never reported online.
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class TurtleSnapshot(BaseModel):
    """Immutable view of one turtle's state.

    Parameters
    ----------
    id : str
        The turtle's unique id.
    online : bool
        Whether the latest report said the turtle is online.
    fuel : int or float
        Fuel level.
    position : Position or None
        Last reported position; ``None`` until first reported.
    orientation : Orientation or None
        Last reported orientation; ``None`` until first reported.
    whitelist : tuple of str
        Blocks the turtle may mine.
    inventory : tuple of InventorySlot
        Inventory slots in order.
    last_update : datetime
        Time of the last *online* update; :data:`EPOCH` before the first.
    initialised : bool
        Whether at least one update was applied.

    The online facet (fuel through inventory) is only meaningful while
    ``online`` is true. Values from the last online report are retained
    after the turtle goes offline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    online: bool = False
    fuel: int | float = 0
    position: Position | None = None
    orientation: Orientation | None = None
    whitelist: tuple[str, ...] = ()
    inventory: tuple[InventorySlot, ...] = ()
    last_update: datetime = EPOCH
    initialised: bool = False

    def merged(self, patch: StatusPatch, *, now: datetime) -> TurtleSnapshot:
        """Return a new snapshot with *patch* applied.

        Fields present in the patch overwrite, absent fields are kept.
        ``initialised`` always becomes true; ``last_update`` advances to
        *now* only when the merged state is online.
        """
        update: dict[str, Any] = patch.present_fields()
        update["initialised"] = True
        if update.get("online", self.online):
            update["last_update"] = now
        return self.model_copy(update=update)
