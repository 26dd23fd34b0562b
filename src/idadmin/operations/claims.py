"""Custom claim checks shared by claim updates and user import."""

import json
from collections.abc import Mapping
from typing import Any

from ..core.config import MAX_CLAIMS_PAYLOAD_SIZE
from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError
from ..utils.validators import is_non_null_dict

RESERVED_CLAIMS = frozenset(
    {
        "acr",
        "amr",
        "at_hash",
        "aud",
        "auth_time",
        "azp",
        "cnf",
        "c_hash",
        "exp",
        "iat",
        "iss",
        "jti",
        "nbf",
        "nonce",
        "sub",
        "firebase",
    }
)


def encode_custom_claims(claims: Mapping[str, Any] | None) -> str:
    """Validate custom claims and serialize them for the wire.

    Args:
        claims: Claims mapping; None serializes to an empty object

    Returns:
        str: Compact JSON string

    Raises:
        ArgumentError: If the claims are not a mapping, use a reserved name,
            are not JSON serializable or exceed the size limit
    """
    if claims is None:
        claims = {}
    if not is_non_null_dict(claims):
        raise ArgumentError(AuthErrorCode.INVALID_CLAIMS, field="customClaims", value=claims)

    for key in claims:
        if key in RESERVED_CLAIMS:
            raise ArgumentError(
                AuthErrorCode.FORBIDDEN_CLAIM,
                f'Developer claim "{key}" is reserved and cannot be specified.',
                field="customClaims",
            )

    try:
        serialized = json.dumps(dict(claims), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ArgumentError(
            AuthErrorCode.INVALID_CLAIMS,
            f"Custom claims must be JSON serializable: {e}",
            field="customClaims",
        ) from e

    if len(serialized) > MAX_CLAIMS_PAYLOAD_SIZE:
        raise ArgumentError(
            AuthErrorCode.CLAIMS_TOO_LARGE,
            f"Developer claims payload should not exceed {MAX_CLAIMS_PAYLOAD_SIZE} characters.",
            field="customClaims",
        )
    return serialized
