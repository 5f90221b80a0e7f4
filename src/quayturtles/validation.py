"""Status schema validation.

The validator is a pure function over a candidate payload. It checks the
``online`` flag first and then validates the payload against the model that
flag selects, so a missing online facet is reported field by field.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, cast

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from quayturtles.exceptions import TurtleValidationError
from quayturtles.models.status import OnlineFlag, OnlineStatus, StatusPatch


@dataclass(frozen=True)
class FieldError:
    """One validation failure: where it happened and why."""

    path: tuple[str | int, ...]
    reason: str

    @property
    def location(self) -> str:
        if not self.path:
            return "<payload>"
        return ".".join(str(part) for part in self.path)

    def __str__(self) -> str:
        return f"{self.location}: {self.reason}"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for a status payload.

    ``patch`` is set only when ``valid`` is true.
    """

    valid: bool
    errors: tuple[FieldError, ...] = ()
    patch: StatusPatch | None = None


def _field_errors(exc: PydanticValidationError) -> Iterator[FieldError]:
    for error in exc.errors(include_url=False, include_context=False, include_input=False):
        yield FieldError(path=tuple(error["loc"]), reason=error["msg"])


def _check(model: type[BaseModel], payload: Any) -> tuple[BaseModel | None, tuple[FieldError, ...]]:
    try:
        return model.model_validate(payload), ()
    except PydanticValidationError as exc:
        return None, tuple(_field_errors(exc))


class StatusValidator:
    """Validates turtle status payloads.

    Rules:
    - the payload must be an object with a boolean ``online``
    - when online, ``fuel``, ``position``, ``orientation``, ``whitelist``
      and ``inventory`` are all required
    - when offline, nothing else is required, but whatever is present
      must still be valid since it will be merged
    - unknown keys are ignored
    """

    def validate(self, payload: Any) -> ValidationResult:
        flag, errors = _check(OnlineFlag, payload)
        if flag is None:
            return ValidationResult(valid=False, errors=errors)

        model = OnlineStatus if flag.online else StatusPatch  # type: ignore[attr-defined]
        patch, errors = _check(model, payload)
        if patch is None:
            return ValidationResult(valid=False, errors=errors)
        return ValidationResult(valid=True, patch=cast(StatusPatch, patch))

    def parse(self, payload: Any) -> StatusPatch:
        """Validate *payload* and return the typed patch.

        Raises
        ------
        TurtleValidationError
            If the payload does not satisfy the status contract.
        """
        result = self.validate(payload)
        if not result.valid or result.patch is None:
            raise TurtleValidationError("Invalid status payload", errors=result.errors)
        return result.patch
