"""Tri-state field values used by update objects."""

from enum import Enum
from typing import Any


class FieldState(Enum):
    """Markers for update fields that carry no concrete value.

    ``UNSET`` leaves the backend value unchanged; ``CLEAR`` removes it.
    """

    UNSET = "unset"
    CLEAR = "clear"

    def __repr__(self) -> str:
        return self.name


UNSET = FieldState.UNSET
CLEAR = FieldState.CLEAR


def is_unset(value: Any) -> bool:
    return value is FieldState.UNSET


def is_clear(value: Any) -> bool:
    return value is FieldState.CLEAR


def has_value(value: Any) -> bool:
    """True when the field carries a concrete value (neither UNSET nor CLEAR)."""
    return not isinstance(value, FieldState)


def from_caller_value(value: Any) -> Any:
    """Map a caller-supplied dict value to its tri-state form (None clears)."""
    return CLEAR if value is None else value
