"""Federated identity-provider configuration models."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from ..core.exceptions import ArgumentError, ProtocolError
from ..core.error_codes import AuthErrorCode
from .field_maps import OIDC_FIELDS, SAML_FIELDS, FieldSpec, attrs_from_mapping
from .fields import UNSET, FieldState, from_caller_value

RESOURCE_NAME_PATTERN = re.compile(
    r"^projects/[^/]+/(?:tenants/[^/]+/)?"
    r"(?:oauthIdpConfigs|inboundSamlConfigs)/((?:oidc|saml)\..+)$"
)


class ProviderKind(Enum):
    """Kind of federated provider, implied by the provider id prefix."""

    OIDC = "oidc"
    SAML = "saml"

    @property
    def prefix(self) -> str:
        return f"{self.value}."

    @property
    def field_table(self) -> tuple[FieldSpec, ...]:
        return OIDC_FIELDS if self is ProviderKind.OIDC else SAML_FIELDS

    @classmethod
    def from_type(cls, value: "str | ProviderKind") -> "ProviderKind":
        """Resolve a listing filter type such as ``"oidc"`` or ``"saml"``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                'The provider config type must be either "saml" or "oidc".',
                field="type",
                value=value,
            ) from None


def provider_kind(provider_id: Any) -> ProviderKind | None:
    """Return the provider kind implied by the id prefix, if any."""
    if not isinstance(provider_id, str):
        return None
    for kind in ProviderKind:
        if provider_id.startswith(kind.prefix) and len(provider_id) > len(kind.prefix):
            return kind
    return None


def provider_id_from_resource_name(resource_name: Any) -> str | None:
    """Extract ``oidc.xxx``/``saml.xxx`` from a backend resource name.

    Example:
        >>> provider_id_from_resource_name("projects/p/oauthIdpConfigs/oidc.a")
        'oidc.a'
    """
    if not isinstance(resource_name, str):
        return None
    match = RESOURCE_NAME_PATTERN.match(resource_name)
    return match.group(1) if match else None


@dataclass(frozen=True)
class OIDCProviderConfig:
    """OIDC provider configuration as returned by the backend."""

    provider_id: str
    client_id: str
    issuer: str
    display_name: str | None = None
    enabled: bool = False

    kind = ProviderKind.OIDC

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "OIDCProviderConfig":
        """Build a config from an ``oauthIdpConfigs`` response.

        Raises:
            ProtocolError: If the response lacks a name, client id or issuer
        """
        provider_id = provider_id_from_resource_name(
            response.get("name") if isinstance(response, Mapping) else None
        )
        if (
            provider_id is None
            or not response.get("clientId")
            or not response.get("issuer")
        ):
            raise ProtocolError(
                "INTERNAL ASSERT FAILED: Invalid OIDC configuration response",
                details=str(response),
            )
        return cls(
            provider_id=provider_id,
            client_id=response["clientId"],
            issuer=response["issuer"],
            display_name=response.get("displayName"),
            enabled=bool(response.get("enabled", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the config keyed by caller-facing names."""
        return {
            "providerId": self.provider_id,
            "displayName": self.display_name,
            "enabled": self.enabled,
            "clientId": self.client_id,
            "issuer": self.issuer,
        }


@dataclass(frozen=True)
class SAMLProviderConfig:
    """SAML provider configuration as returned by the backend."""

    provider_id: str
    idp_entity_id: str
    sso_url: str
    rp_entity_id: str
    x509_certificates: list[str] = field(default_factory=list)
    callback_url: str | None = None
    enable_request_signing: bool = False
    display_name: str | None = None
    enabled: bool = False

    kind = ProviderKind.SAML

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "SAMLProviderConfig":
        """Build a config from an ``inboundSamlConfigs`` response.

        Raises:
            ProtocolError: If the response lacks a name or either config group
        """
        provider_id = provider_id_from_resource_name(
            response.get("name") if isinstance(response, Mapping) else None
        )
        idp_config = response.get("idpConfig") if provider_id else None
        sp_config = response.get("spConfig") if provider_id else None
        if (
            provider_id is None
            or not isinstance(idp_config, Mapping)
            or not isinstance(sp_config, Mapping)
            or not idp_config.get("idpEntityId")
            or not idp_config.get("ssoUrl")
            or not sp_config.get("spEntityId")
        ):
            raise ProtocolError(
                "INTERNAL ASSERT FAILED: Invalid SAML configuration response",
                details=str(response),
            )

        certificates = [
            entry["x509Certificate"]
            for entry in idp_config.get("idpCertificates") or []
            if isinstance(entry, Mapping) and entry.get("x509Certificate")
        ]
        return cls(
            provider_id=provider_id,
            idp_entity_id=idp_config["idpEntityId"],
            sso_url=idp_config["ssoUrl"],
            rp_entity_id=sp_config["spEntityId"],
            x509_certificates=certificates,
            callback_url=sp_config.get("callbackUri"),
            enable_request_signing=bool(idp_config.get("signRequest", False)),
            display_name=response.get("displayName"),
            enabled=bool(response.get("enabled", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the config keyed by caller-facing names."""
        return {
            "providerId": self.provider_id,
            "displayName": self.display_name,
            "enabled": self.enabled,
            "idpEntityId": self.idp_entity_id,
            "ssoURL": self.sso_url,
            "x509Certificates": list(self.x509_certificates),
            "enableRequestSigning": self.enable_request_signing,
            "rpEntityId": self.rp_entity_id,
            "callbackURL": self.callback_url,
        }


ProviderConfig = OIDCProviderConfig | SAMLProviderConfig


def parse_provider_config(
    kind: ProviderKind, response: Mapping[str, Any]
) -> ProviderConfig:
    if kind is ProviderKind.OIDC:
        return OIDCProviderConfig.from_response(response)
    return SAMLProviderConfig.from_response(response)


@dataclass
class OIDCConfigCreate:
    """Input for creating an OIDC provider config.

    Values are loosely typed; every value is validated by the
    request builder before anything is sent.
    """

    provider_id: Any = None
    client_id: Any = None
    issuer: Any = None
    display_name: Any = None
    enabled: Any = None

    kind = ProviderKind.OIDC

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OIDCConfigCreate":
        return cls(**_create_kwargs(data, OIDC_FIELDS))


@dataclass
class SAMLConfigCreate:
    """Input for creating a SAML provider config."""

    provider_id: Any = None
    idp_entity_id: Any = None
    sso_url: Any = None
    x509_certificates: Any = None
    rp_entity_id: Any = None
    callback_url: Any = None
    enable_request_signing: Any = None
    display_name: Any = None
    enabled: Any = None

    kind = ProviderKind.SAML

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SAMLConfigCreate":
        return cls(**_create_kwargs(data, SAML_FIELDS))


@dataclass
class OIDCConfigUpdate:
    """Partial update of an OIDC provider config.

    Every field defaults to ``UNSET``; assign ``CLEAR`` to remove a value.
    """

    display_name: Any = UNSET
    enabled: Any = UNSET
    client_id: Any = UNSET
    issuer: Any = UNSET

    kind = ProviderKind.OIDC

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OIDCConfigUpdate":
        """Build an update from caller names; ``None`` values mean clear."""
        return cls(**_update_kwargs(data, OIDC_FIELDS))

    def supplied_fields(self) -> list[str]:
        return _supplied(self)


@dataclass
class SAMLConfigUpdate:
    """Partial update of a SAML provider config."""

    display_name: Any = UNSET
    enabled: Any = UNSET
    idp_entity_id: Any = UNSET
    sso_url: Any = UNSET
    enable_request_signing: Any = UNSET
    x509_certificates: Any = UNSET
    rp_entity_id: Any = UNSET
    callback_url: Any = UNSET

    kind = ProviderKind.SAML

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SAMLConfigUpdate":
        """Build an update from caller names; ``None`` values mean clear."""
        return cls(**_update_kwargs(data, SAML_FIELDS))

    def supplied_fields(self) -> list[str]:
        return _supplied(self)


ProviderConfigCreate = OIDCConfigCreate | SAMLConfigCreate
ProviderConfigUpdate = OIDCConfigUpdate | SAMLConfigUpdate

_PROVIDER_ID_ALIASES = {"providerId": "provider_id", "provider_id": "provider_id"}


def create_request_from_dict(data: Mapping[str, Any]) -> ProviderConfigCreate:
    """Pick the create input type from the ``providerId`` prefix.

    Raises:
        ArgumentError: If the provider id is missing or has no known prefix
    """
    provider_id = data.get("providerId", data.get("provider_id"))
    if provider_id is None:
        raise ArgumentError(AuthErrorCode.MISSING_PROVIDER_ID, field="providerId")
    kind = provider_kind(provider_id)
    if kind is ProviderKind.OIDC:
        return OIDCConfigCreate.from_dict(data)
    if kind is ProviderKind.SAML:
        return SAMLConfigCreate.from_dict(data)
    raise ArgumentError(
        AuthErrorCode.INVALID_PROVIDER_ID, field="providerId", value=provider_id
    )


def update_request_from_dict(
    kind: ProviderKind, data: Mapping[str, Any]
) -> ProviderConfigUpdate:
    if kind is ProviderKind.OIDC:
        return OIDCConfigUpdate.from_dict(data)
    return SAMLConfigUpdate.from_dict(data)


def _create_kwargs(data: Mapping[str, Any], table: tuple[FieldSpec, ...]) -> dict[str, Any]:
    try:
        return attrs_from_mapping(data, table, aliases=_PROVIDER_ID_ALIASES)
    except KeyError as e:
        raise ArgumentError(
            AuthErrorCode.INVALID_CONFIG,
            f'Unsupported provider config field "{e.args[0]}".',
            field=e.args[0],
        ) from None


def _update_kwargs(data: Mapping[str, Any], table: tuple[FieldSpec, ...]) -> dict[str, Any]:
    try:
        kwargs = attrs_from_mapping(data, table)
    except KeyError as e:
        raise ArgumentError(
            AuthErrorCode.INVALID_CONFIG,
            f'Unsupported provider config field "{e.args[0]}".',
            field=e.args[0],
        ) from None
    return {name: from_caller_value(value) for name, value in kwargs.items()}


def _supplied(update: Any) -> list[str]:
    return [
        f.name for f in fields(update) if getattr(update, f.name) is not FieldState.UNSET
    ]
