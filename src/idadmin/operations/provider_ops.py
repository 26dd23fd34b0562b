"""OIDC and SAML provider configuration operations."""

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from ..core.dispatcher import RequestDispatcher
from ..core.endpoints import OIDC_ENDPOINTS, SAML_ENDPOINTS, ProviderEndpoints
from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError
from ..models.fields import FieldState
from ..models.page import PageResult
from ..models.provider_config import (
    OIDCConfigCreate,
    ProviderConfig,
    ProviderConfigCreate,
    ProviderConfigUpdate,
    ProviderKind,
    SAMLConfigCreate,
    create_request_from_dict,
    parse_provider_config,
    provider_kind,
    update_request_from_dict,
)
from ..utils.logging_utils import get_logger
from ..utils.validators import (
    FieldValidator,
    default_validator,
    is_non_empty_list,
    is_non_empty_string,
)
from .pagination import OIDC_LISTING, SAML_LISTING, PageEndpoint, fetch_page, iterate_all
from .update_mask import build_masked_update

logger = get_logger(__name__)

# Fields a provider config cannot exist without
REQUIRED_FIELDS: dict[ProviderKind, tuple[str, ...]] = {
    ProviderKind.OIDC: ("client_id", "issuer"),
    ProviderKind.SAML: (
        "idp_entity_id",
        "sso_url",
        "x509_certificates",
        "rp_entity_id",
        "callback_url",
    ),
}

MISSING_FIELD_ERRORS = {
    "client_id": AuthErrorCode.MISSING_OAUTH_CLIENT_ID,
    "issuer": AuthErrorCode.MISSING_ISSUER,
    "rp_entity_id": AuthErrorCode.MISSING_SAML_RELYING_PARTY_CONFIG,
}

_ENDPOINTS: dict[ProviderKind, ProviderEndpoints] = {
    ProviderKind.OIDC: OIDC_ENDPOINTS,
    ProviderKind.SAML: SAML_ENDPOINTS,
}
_LISTINGS: dict[ProviderKind, PageEndpoint] = {
    ProviderKind.OIDC: OIDC_LISTING,
    ProviderKind.SAML: SAML_LISTING,
}
_LABELS = {ProviderKind.OIDC: "OIDCProviderConfig", ProviderKind.SAML: "SAMLProviderConfig"}


class ProviderConfigManager:
    """Create, read, update, delete and list federated provider configs."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        validator: FieldValidator = default_validator,
    ) -> None:
        self.dispatcher = dispatcher
        self.validator = validator

    def _kind_of(self, provider_id: Any) -> ProviderKind:
        if provider_id is None:
            raise ArgumentError(AuthErrorCode.MISSING_PROVIDER_ID, field="providerId")
        kind = provider_kind(provider_id)
        if kind is None:
            raise ArgumentError(
                AuthErrorCode.INVALID_PROVIDER_ID, field="providerId", value=provider_id
            )
        return kind

    def get_provider_config(self, provider_id: Any) -> ProviderConfig:
        """Fetch a config; the id prefix selects OIDC or SAML.

        Raises:
            ArgumentError: If the id has no ``oidc.`` or ``saml.`` prefix
            BackendError: ``configuration-not-found`` if it does not exist
        """
        kind = self._kind_of(provider_id)
        response = self.dispatcher.invoke(
            _ENDPOINTS[kind].get, path_params={"providerId": provider_id}
        )
        return parse_provider_config(kind, response)

    def delete_provider_config(self, provider_id: Any) -> None:
        kind = self._kind_of(provider_id)
        self.dispatcher.invoke(
            _ENDPOINTS[kind].delete, path_params={"providerId": provider_id}
        )
        logger.info(
            f"Deleted provider config {provider_id}",
            extra={"operation": _ENDPOINTS[kind].delete.name},
        )

    def create_provider_config(
        self, config: ProviderConfigCreate | Mapping[str, Any]
    ) -> ProviderConfig:
        """Validate and create a provider config.

        Args:
            config: Create input, or a caller dict whose ``providerId``
                prefix selects the kind

        Returns:
            ProviderConfig: The config as stored by the backend

        Raises:
            ArgumentError: If the id or any field is missing or invalid
        """
        if not isinstance(config, OIDCConfigCreate | SAMLConfigCreate):
            config = create_request_from_dict(config)

        kind = self._kind_of(config.provider_id)
        if kind is not config.kind:
            raise ArgumentError(
                AuthErrorCode.INVALID_PROVIDER_ID,
                field="providerId",
                value=config.provider_id,
            )

        payload: dict[str, Any] = {}
        for spec in kind.field_table:
            value = getattr(config, spec.attr)
            if value is None:
                if spec.attr in REQUIRED_FIELDS[kind]:
                    self._raise_missing(kind, spec.attr, spec.caller)
                continue
            self._check_value(kind, spec.attr, spec.caller, value)
            if spec.group:
                payload.setdefault(spec.group, {})[spec.wire] = spec.to_wire(value)
            else:
                payload[spec.wire] = spec.to_wire(value)

        endpoints = _ENDPOINTS[kind]
        response = self.dispatcher.invoke(
            endpoints.create, payload, path_params={"providerId": config.provider_id}
        )
        logger.info(
            f"Created provider config {config.provider_id}",
            extra={"operation": endpoints.create.name},
        )
        return parse_provider_config(kind, response)

    def update_provider_config(
        self,
        provider_id: Any,
        update: ProviderConfigUpdate | Mapping[str, Any],
    ) -> ProviderConfig:
        """Apply a partial update using a field mask.

        Only supplied fields are sent and listed in the mask, in canonical
        order. ``CLEAR`` removes optional values; required fields cannot be
        cleared.

        Raises:
            ArgumentError: If the id is invalid, the update targets another
                provider kind, touches no field, or carries an invalid value
        """
        kind = self._kind_of(provider_id)
        if isinstance(update, Mapping):
            update = update_request_from_dict(kind, update)
        if getattr(update, "kind", None) is not kind:
            raise ArgumentError(
                AuthErrorCode.INVALID_PROVIDER_ID,
                f"The update does not apply to provider {provider_id}.",
                field="providerId",
                value=provider_id,
            )

        for spec in kind.field_table:
            value = getattr(update, spec.attr)
            if value is FieldState.UNSET:
                continue
            if value is FieldState.CLEAR:
                if spec.attr in REQUIRED_FIELDS[kind]:
                    raise ArgumentError(
                        AuthErrorCode.INVALID_CONFIG,
                        f'"{_LABELS[kind]}.{spec.caller}" cannot be removed.',
                        field=spec.caller,
                    )
                continue
            self._check_value(kind, spec.attr, spec.caller, value)

        masked = build_masked_update(update, kind.field_table)
        endpoints = _ENDPOINTS[kind]
        response = self.dispatcher.invoke(
            endpoints.update,
            masked.payload,
            path_params={"providerId": provider_id, "updateMask": masked.update_mask},
        )
        logger.info(
            f"Updated provider config {provider_id}: {masked.update_mask}",
            extra={"operation": endpoints.update.name},
        )
        return parse_provider_config(kind, response)

    def list_provider_configs(
        self,
        provider_type: str | ProviderKind,
        max_results: Any = None,
        page_token: Any = None,
    ) -> PageResult[ProviderConfig]:
        """Fetch one page of configs of one kind (at most 100)."""
        kind = ProviderKind.from_type(provider_type)
        return fetch_page(
            self.dispatcher,
            _LISTINGS[kind],
            lambda item: parse_provider_config(kind, item),
            max_results=max_results,
            page_token=page_token,
        )

    def iterate_provider_configs(
        self, provider_type: str | ProviderKind, limit: int | None = None
    ) -> Iterator[ProviderConfig]:
        return iterate_all(
            lambda token: self.list_provider_configs(provider_type, page_token=token),
            limit=limit,
        )

    def _raise_missing(self, kind: ProviderKind, attr: str, caller: str) -> None:
        info = MISSING_FIELD_ERRORS.get(attr, AuthErrorCode.INVALID_CONFIG)
        raise ArgumentError(
            info,
            f'"{_LABELS[kind]}.{caller}" must be provided.',
            field=caller,
        )

    def _check_value(self, kind: ProviderKind, attr: str, caller: str, value: Any) -> None:
        label = f"{_LABELS[kind]}.{caller}"
        checks: dict[str, Callable[[Any], Any]] = {
            "display_name": lambda v: self.validator.require_display_name(v, caller),
            "enabled": lambda v: self.validator.require_boolean(
                v, caller, AuthErrorCode.INVALID_CONFIG, f'"{label}" must be a boolean.'
            ),
            "client_id": lambda v: self.validator.require_non_empty_string(
                v,
                caller,
                AuthErrorCode.INVALID_CONFIG,
                f'"{label}" must be a valid non-empty string.',
            ),
            "issuer": lambda v: self.validator.require_url(
                v, caller, message=f'"{label}" must be a valid URL string.'
            ),
            "idp_entity_id": lambda v: self.validator.require_non_empty_string(
                v,
                caller,
                AuthErrorCode.INVALID_CONFIG,
                f'"{label}" must be a valid non-empty string.',
            ),
            "sso_url": lambda v: self.validator.require_url(
                v, caller, message=f'"{label}" must be a valid URL string.'
            ),
            "x509_certificates": lambda v: self._check_certificates(v, caller, label),
            "rp_entity_id": lambda v: self.validator.require_non_empty_string(
                v,
                caller,
                AuthErrorCode.INVALID_CONFIG,
                f'"{label}" must be a valid non-empty string.',
            ),
            "callback_url": lambda v: self.validator.require_url(
                v, caller, message=f'"{label}" must be a valid URL string.'
            ),
            "enable_request_signing": lambda v: self.validator.require_boolean(
                v, caller, AuthErrorCode.INVALID_CONFIG, f'"{label}" must be a boolean.'
            ),
        }
        checks[attr](value)

    def _check_certificates(self, value: Any, caller: str, label: str) -> None:
        if not is_non_empty_list(value) or not all(
            is_non_empty_string(cert) for cert in value
        ):
            raise self.validator.fail(
                AuthErrorCode.INVALID_CONFIG,
                caller,
                value,
                f'"{label}" must be a valid array of X509 certificate strings.',
            )
