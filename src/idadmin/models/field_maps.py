"""Static bidirectional field-name tables.

Each entry ties together the Python attribute name, the name callers use
in plain dicts (``photoURL``, ``ssoURL``) and the backend wire name. SAML
fields additionally name the nested wire group (``idpConfig`` or
``spConfig``) they live in.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldSpec:
    """One updatable field and its names on each side of the wire."""

    attr: str
    caller: str
    wire: str
    group: str | None = None
    encode: Callable[[Any], Any] | None = None

    @property
    def mask_path(self) -> str:
        """Dotted path of the field as it appears in an update mask."""
        if self.group:
            return f"{self.group}.{self.wire}"
        return self.wire

    def to_wire(self, value: Any) -> Any:
        if value is None or self.encode is None:
            return value
        return self.encode(value)


def _encode_certificates(certificates: Iterable[str]) -> list[dict[str, str]]:
    return [{"x509Certificate": cert} for cert in certificates]


# Canonical order matters: update masks are emitted in this order
OIDC_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("display_name", "displayName", "displayName"),
    FieldSpec("enabled", "enabled", "enabled"),
    FieldSpec("client_id", "clientId", "clientId"),
    FieldSpec("issuer", "issuer", "issuer"),
)

SAML_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("display_name", "displayName", "displayName"),
    FieldSpec("enabled", "enabled", "enabled"),
    FieldSpec("idp_entity_id", "idpEntityId", "idpEntityId", "idpConfig"),
    FieldSpec("sso_url", "ssoURL", "ssoUrl", "idpConfig"),
    FieldSpec("enable_request_signing", "enableRequestSigning", "signRequest", "idpConfig"),
    FieldSpec(
        "x509_certificates",
        "x509Certificates",
        "idpCertificates",
        "idpConfig",
        encode=_encode_certificates,
    ),
    FieldSpec("rp_entity_id", "rpEntityId", "spEntityId", "spConfig"),
    FieldSpec("callback_url", "callbackURL", "callbackUri", "spConfig"),
)

# Account fields shared by create and update; "disabled" is renamed to
# "disableUser" on update only.
USER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("uid", "uid", "localId"),
    FieldSpec("email", "email", "email"),
    FieldSpec("email_verified", "emailVerified", "emailVerified"),
    FieldSpec("display_name", "displayName", "displayName"),
    FieldSpec("photo_url", "photoURL", "photoUrl"),
    FieldSpec("phone_number", "phoneNumber", "phoneNumber"),
    FieldSpec("password", "password", "password"),
    FieldSpec("disabled", "disabled", "disabled"),
)

UPDATE_WIRE_RENAMES = {"disabled": "disableUser"}

# Attributes whose clearing is expressed through deleteAttribute
DELETABLE_ATTRIBUTES = {
    "display_name": "DISPLAY_NAME",
    "photo_url": "PHOTO_URL",
}


def caller_name_index(fields: Iterable[FieldSpec]) -> dict[str, str]:
    """Map every accepted input key (caller name or attribute) to an attribute."""
    index: dict[str, str] = {}
    for spec in fields:
        index[spec.caller] = spec.attr
        index[spec.attr] = spec.attr
    return index


def attrs_from_mapping(
    data: Mapping[str, Any],
    fields: Iterable[FieldSpec],
    aliases: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Translate a caller dict into attribute keyword arguments.

    Args:
        data: Caller-supplied mapping using caller or attribute names
        fields: Field table to translate with
        aliases: Additional input keys mapped to attribute names

    Returns:
        Dict[str, Any]: Keyword arguments keyed by attribute name

    Raises:
        KeyError: If the mapping contains an unknown key
    """
    index = caller_name_index(fields)
    index.update(aliases or {})
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in index:
            raise KeyError(key)
        kwargs[index[key]] = value
    return kwargs

# Import records are built from caller dicts only; no update mask applies
IMPORT_FIELDS: tuple[FieldSpec, ...] = USER_FIELDS[:6] + (
    FieldSpec("disabled", "disabled", "disabled"),
    FieldSpec("metadata", "metadata", "metadata"),
    FieldSpec("provider_data", "providerData", "providerUserInfo"),
    FieldSpec("custom_claims", "customClaims", "customAttributes"),
    FieldSpec("password_hash", "passwordHash", "passwordHash"),
    FieldSpec("password_salt", "passwordSalt", "salt"),
    FieldSpec("tenant_id", "tenantId", "tenantId"),
    FieldSpec("multi_factor", "multiFactor", "mfaInfo"),
)

PROFILE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("uid", "uid", "rawId"),
    FieldSpec("provider_id", "providerId", "providerId"),
    FieldSpec("email", "email", "email"),
    FieldSpec("display_name", "displayName", "displayName"),
    FieldSpec("photo_url", "photoURL", "photoUrl"),
    FieldSpec("phone_number", "phoneNumber", "phoneNumber"),
)

IMPORT_METADATA_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("creation_time", "creationTime", "createdAt"),
    FieldSpec("last_sign_in_time", "lastSignInTime", "lastLoginAt"),
)

SECOND_FACTOR_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("uid", "uid", "mfaEnrollmentId"),
    FieldSpec("phone_number", "phoneNumber", "phoneInfo"),
    FieldSpec("display_name", "displayName", "displayName"),
    FieldSpec("enrollment_time", "enrollmentTime", "enrolledAt"),
    FieldSpec("factor_id", "factorId", "factorId"),
)

HASH_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("algorithm", "algorithm", "hashAlgorithm"),
    FieldSpec("key", "key", "signerKey"),
    FieldSpec("salt_separator", "saltSeparator", "saltSeparator"),
    FieldSpec("rounds", "rounds", "rounds"),
    FieldSpec("memory_cost", "memoryCost", "memoryCost"),
    FieldSpec("parallelization", "parallelization", "parallelization"),
    FieldSpec("block_size", "blockSize", "blockSize"),
    FieldSpec("derived_key_length", "derivedKeyLength", "dkLen"),
)
