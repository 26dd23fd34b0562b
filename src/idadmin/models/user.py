"""Account data models for identity administration."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError, ProtocolError
from ..utils.time_utils import millis_to_datetime, parse_iso_datetime
from .field_maps import (
    IMPORT_FIELDS,
    IMPORT_METADATA_FIELDS,
    PROFILE_FIELDS,
    SECOND_FACTOR_FIELDS,
    USER_FIELDS,
    FieldSpec,
    attrs_from_mapping,
)
from .fields import UNSET, FieldState, from_caller_value


@dataclass(frozen=True)
class ProviderUserInfo:
    """A federated identity linked to an account."""

    uid: str
    provider_id: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "ProviderUserInfo":
        """Parse one ``providerUserInfo`` entry.

        Raises:
            ProtocolError: If the entry lacks ``rawId`` or ``providerId``
        """
        if not data.get("rawId") or not data.get("providerId"):
            raise ProtocolError(
                "INTERNAL ASSERT FAILED: Invalid user info response",
                details=str(data),
            )
        return cls(
            uid=data["rawId"],
            provider_id=data["providerId"],
            email=data.get("email"),
            display_name=data.get("displayName"),
            photo_url=data.get("photoUrl"),
            phone_number=data.get("phoneNumber"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "providerId": self.provider_id,
            "email": self.email,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            "phoneNumber": self.phone_number,
        }


@dataclass(frozen=True)
class UserMetadata:
    """Account creation and sign-in timestamps."""

    creation_time: datetime | None = None
    last_sign_in_time: datetime | None = None
    last_refresh_time: datetime | None = None

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "UserMetadata":
        return cls(
            creation_time=millis_to_datetime(data.get("createdAt")),
            last_sign_in_time=millis_to_datetime(data.get("lastLoginAt")),
            last_refresh_time=parse_iso_datetime(data.get("lastRefreshAt")),
        )


@dataclass(frozen=True)
class AccountRecord:
    """An account as returned by the backend."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    disabled: bool = False
    custom_claims: dict[str, Any] | None = None
    provider_data: list[ProviderUserInfo] = field(default_factory=list)
    metadata: UserMetadata = field(default_factory=UserMetadata)
    tokens_valid_after_millis: int | None = None
    tenant_id: str | None = None
    password_hash: str | None = None
    password_salt: str | None = None

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> "AccountRecord":
        """Create an AccountRecord from one entry of a lookup response.

        Args:
            data: Account data as returned by the backend

        Returns:
            AccountRecord: Parsed account

        Raises:
            ProtocolError: If the data lacks ``localId`` or is malformed
        """
        if not isinstance(data, Mapping) or not data.get("localId"):
            raise ProtocolError(
                "INTERNAL ASSERT FAILED: Invalid user response",
                details=str(data),
            )

        custom_claims = None
        raw_claims = data.get("customAttributes")
        if raw_claims:
            try:
                custom_claims = json.loads(raw_claims)
            except (TypeError, ValueError) as e:
                raise ProtocolError(
                    "INTERNAL ASSERT FAILED: Invalid custom attributes in user response",
                    details=str(e),
                ) from e

        tokens_valid_after = None
        if data.get("validSince") is not None:
            try:
                tokens_valid_after = int(data["validSince"]) * 1000
            except (TypeError, ValueError) as e:
                raise ProtocolError(
                    "INTERNAL ASSERT FAILED: Invalid validSince in user response",
                    details=str(e),
                ) from e

        return cls(
            uid=data["localId"],
            email=data.get("email"),
            email_verified=bool(data.get("emailVerified", False)),
            display_name=data.get("displayName"),
            photo_url=data.get("photoUrl"),
            phone_number=data.get("phoneNumber"),
            disabled=bool(data.get("disabled", False)),
            custom_claims=custom_claims,
            provider_data=[
                ProviderUserInfo.from_response(entry)
                for entry in data.get("providerUserInfo") or []
            ],
            metadata=UserMetadata.from_response(data),
            tokens_valid_after_millis=tokens_valid_after,
            tenant_id=data.get("tenantId"),
            password_hash=data.get("passwordHash"),
            password_salt=data.get("salt"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary keyed by caller names."""
        return {
            "uid": self.uid,
            "email": self.email,
            "emailVerified": self.email_verified,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            "phoneNumber": self.phone_number,
            "disabled": self.disabled,
            "customClaims": self.custom_claims,
            "providerData": [info.to_dict() for info in self.provider_data],
            "metadata": {
                "creationTime": _isoformat(self.metadata.creation_time),
                "lastSignInTime": _isoformat(self.metadata.last_sign_in_time),
                "lastRefreshTime": _isoformat(self.metadata.last_refresh_time),
            },
            "tokensValidAfterMillis": self.tokens_valid_after_millis,
            "tenantId": self.tenant_id,
        }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class UserCreate:
    """Properties of an account to create. All values are validated on send."""

    uid: Any = None
    email: Any = None
    email_verified: Any = None
    display_name: Any = None
    photo_url: Any = None
    phone_number: Any = None
    password: Any = None
    disabled: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserCreate":
        return cls(**kwargs_from_mapping(data, USER_FIELDS))

    def supplied(self) -> dict[str, Any]:
        """Attributes that carry a value, in canonical field order."""
        return {
            spec.attr: getattr(self, spec.attr)
            for spec in USER_FIELDS
            if getattr(self, spec.attr) is not None
        }


_UPDATE_FIELDS: tuple[FieldSpec, ...] = tuple(
    spec for spec in USER_FIELDS if spec.attr != "uid"
)


@dataclass
class UserUpdate:
    """Partial update of an account.

    Fields default to ``UNSET``. ``CLEAR`` removes the display name, photo
    URL or phone number; the remaining fields cannot be cleared.
    """

    email: Any = UNSET
    email_verified: Any = UNSET
    display_name: Any = UNSET
    photo_url: Any = UNSET
    phone_number: Any = UNSET
    password: Any = UNSET
    disabled: Any = UNSET

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserUpdate":
        """Build an update from caller names; ``None`` values mean clear."""
        kwargs = kwargs_from_mapping(data, _UPDATE_FIELDS)
        return cls(**{name: from_caller_value(value) for name, value in kwargs.items()})

    def supplied(self) -> dict[str, Any]:
        """Attributes that are not UNSET, in canonical field order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not FieldState.UNSET
        }


def kwargs_from_mapping(
    data: Mapping[str, Any], table: tuple[FieldSpec, ...], label: str = "user"
) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            f"{label.capitalize()} properties must be a non-null object.",
            value=data,
        )
    try:
        return attrs_from_mapping(data, table)
    except KeyError as e:
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            f'Unsupported {label} property "{e.args[0]}".',
            field=e.args[0],
        ) from None


@dataclass(frozen=True)
class UidIdentifier:
    uid: str


@dataclass(frozen=True)
class EmailIdentifier:
    email: str


@dataclass(frozen=True)
class PhoneIdentifier:
    phone_number: str


@dataclass(frozen=True)
class ProviderIdentifier:
    provider_id: str
    provider_uid: str


UserIdentifier = UidIdentifier | EmailIdentifier | PhoneIdentifier | ProviderIdentifier


def identifier_matches(identifier: UserIdentifier, record: AccountRecord) -> bool:
    """Check whether an account satisfies a lookup identifier."""
    if isinstance(identifier, UidIdentifier):
        return identifier.uid == record.uid
    if isinstance(identifier, EmailIdentifier):
        return identifier.email == record.email
    if isinstance(identifier, PhoneIdentifier):
        return identifier.phone_number == record.phone_number
    if isinstance(identifier, ProviderIdentifier):
        return any(
            info.provider_id == identifier.provider_id
            and info.uid == identifier.provider_uid
            for info in record.provider_data
        )
    raise ArgumentError(
        AuthErrorCode.INVALID_ARGUMENT,
        "Unsupported user identifier type.",
        value=identifier,
    )


@dataclass
class GetUsersResult:
    """Accounts found by a multi-identifier lookup."""

    users: list[AccountRecord] = field(default_factory=list)
    not_found: list[UserIdentifier] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderProfile:
    """A federated identity attached to an account being imported."""

    uid: Any = None
    provider_id: Any = None
    email: Any = None
    display_name: Any = None
    photo_url: Any = None
    phone_number: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProviderProfile":
        return cls(**kwargs_from_mapping(data, PROFILE_FIELDS, "provider profile"))


@dataclass(frozen=True)
class ImportMetadata:
    """Timestamps of an imported account, as UTC date strings."""

    creation_time: Any = None
    last_sign_in_time: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImportMetadata":
        return cls(**kwargs_from_mapping(data, IMPORT_METADATA_FIELDS, "metadata"))


@dataclass(frozen=True)
class SecondFactor:
    """An enrolled second factor of an imported account. Only "phone" is supported."""

    uid: Any = None
    phone_number: Any = None
    display_name: Any = None
    enrollment_time: Any = None
    factor_id: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SecondFactor":
        return cls(**kwargs_from_mapping(data, SECOND_FACTOR_FIELDS, "second factor"))


@dataclass
class UserImportRecord:
    """An account to import. Values are validated by the import encoder."""

    uid: Any
    email: Any = None
    email_verified: Any = None
    display_name: Any = None
    phone_number: Any = None
    photo_url: Any = None
    disabled: Any = None
    metadata: ImportMetadata | None = None
    provider_data: list[ProviderProfile] | None = None
    custom_claims: Mapping[str, Any] | None = None
    password_hash: Any = None
    password_salt: Any = None
    tenant_id: Any = None
    # {"enrolledFactors": [SecondFactor, ...]}
    multi_factor: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserImportRecord":
        """Build a record from caller names (``photoURL``, ``providerData``...).

        Nested metadata, provider profiles and enrolled factors are converted
        when given as dicts; anything else is left for the import encoder to
        reject.
        """
        kwargs = kwargs_from_mapping(data, IMPORT_FIELDS, "user import")
        if "uid" not in kwargs:
            kwargs["uid"] = None

        metadata = kwargs.get("metadata")
        if isinstance(metadata, Mapping):
            kwargs["metadata"] = ImportMetadata.from_dict(metadata)

        provider_data = kwargs.get("provider_data")
        if isinstance(provider_data, list):
            kwargs["provider_data"] = [
                ProviderProfile.from_dict(profile) if isinstance(profile, Mapping) else profile
                for profile in provider_data
            ]

        multi_factor = kwargs.get("multi_factor")
        if isinstance(multi_factor, Mapping) and isinstance(
            multi_factor.get("enrolledFactors"), list
        ):
            kwargs["multi_factor"] = {
                **multi_factor,
                "enrolledFactors": [
                    SecondFactor.from_dict(factor) if isinstance(factor, Mapping) else factor
                    for factor in multi_factor["enrolledFactors"]
                ],
            }
        return cls(**kwargs)
