"""Shared base model and field types for turtle status payloads.

Turtles send plain JSON. Field types here are strict about JSON kinds: a
number must be a JSON number (``true`` and ``"5"`` are rejected), while
unknown keys are ignored for forward compatibility.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict


def require_number(value: Any) -> Any:
    """Reject anything that is not a real JSON number.

    ``bool`` is a subclass of ``int`` in Python, so it is excluded explicitly.
    NaN and the infinities are rejected as well.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if not math.isfinite(value):
        raise ValueError("must be a finite number")
    return value


def require_non_negative(value: int | float) -> int | float:
    if value < 0:
        raise ValueError("must be non-negative")
    return value


Number = Annotated[int | float, BeforeValidator(require_number)]
"""A JSON number; ints stay ints and floats stay floats."""

NonNegativeNumber = Annotated[Number, AfterValidator(require_non_negative)]


class TurtleBaseModel(BaseModel):
    """Base for turtle payload models.

    * frozen, so a validated payload can be shared without copying
    * unknown keys are ignored rather than rejected
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )
