"""Update-mask differ for provider config updates.

Walks the canonical field table of a provider kind and, for every field the
update supplies (a value or ``CLEAR``), writes it into the payload and
appends its wire path to the mask. Nested SAML fields stay nested in the
payload and are flattened to dotted paths in the mask.
"""

from dataclasses import dataclass
from typing import Any

from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError
from ..models.field_maps import FieldSpec
from ..models.fields import FieldState


@dataclass(frozen=True)
class MaskedUpdate:
    """Payload and mask entries produced for one update."""

    payload: dict[str, Any]
    mask: list[str]

    @property
    def update_mask(self) -> str:
        return ",".join(self.mask)


def build_masked_update(update: Any, table: tuple[FieldSpec, ...]) -> MaskedUpdate:
    """Diff an update object against a canonical field table.

    Args:
        update: Update object whose attributes are UNSET, CLEAR or a value
        table: Canonical field table of the provider kind

    Returns:
        MaskedUpdate: Payload in canonical insertion order and its mask

    Raises:
        ArgumentError: If the update touches no field
    """
    payload: dict[str, Any] = {}
    mask: list[str] = []

    for spec in table:
        value = getattr(update, spec.attr, FieldState.UNSET)
        if value is FieldState.UNSET:
            continue
        wire_value = None if value is FieldState.CLEAR else spec.to_wire(value)

        if spec.group:
            payload.setdefault(spec.group, {})[spec.wire] = wire_value
        else:
            payload[spec.wire] = wire_value
        mask.append(spec.mask_path)

    if not mask:
        raise ArgumentError(
            AuthErrorCode.INVALID_CONFIG,
            "The update request must change at least one field.",
        )

    return MaskedUpdate(payload=payload, mask=mask)
