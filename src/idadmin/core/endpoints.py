"""Static descriptors for every backend operation.

Each :class:`ApiSettings` names an endpoint template (with ``{slot}``
placeholders), its HTTP verb and API version, and optional request and
response validators. Request validators run before anything is sent;
response validators run after a successful call.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

from ..utils.validators import is_email, is_non_empty_string, is_number
from .error_codes import AuthErrorCode
from .exceptions import ArgumentError, BackendError, ProtocolError

Validator = Callable[[Mapping[str, Any]], None]

SLOT_PATTERN = re.compile(r"\{(\w+)\}")

EMAIL_ACTION_REQUEST_TYPES = ("PASSWORD_RESET", "VERIFY_EMAIL", "EMAIL_SIGNIN")

# Session cookie lifetime bounds in seconds (5 minutes to 2 weeks)
MIN_SESSION_COOKIE_DURATION_SECS = 5 * 60
MAX_SESSION_COOKIE_DURATION_SECS = 14 * 24 * 60 * 60


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ApiSettings:
    """Descriptor of one backend operation."""

    name: str
    endpoint: str
    method: HttpMethod
    version: str = "v1"
    request_validator: Validator | None = None
    response_validator: Validator | None = None

    @property
    def sends_query(self) -> bool:
        """GET and DELETE payloads travel as query parameters."""
        return self.method in (HttpMethod.GET, HttpMethod.DELETE)

    def render_path(self, path_params: Mapping[str, Any] | None = None) -> str:
        """Fill the endpoint template slots.

        Values are percent-encoded except for commas, so that update masks
        such as ``displayName,enabled`` stay readable.

        Raises:
            ProtocolError: If a slot has no value
        """
        params = path_params or {}

        def substitute(match: re.Match[str]) -> str:
            slot = match.group(1)
            if slot not in params or params[slot] is None:
                raise ProtocolError(
                    f"INTERNAL ASSERT FAILED: Missing path parameter {slot!r} for {self.name}"
                )
            return quote(str(params[slot]), safe=",")

        return SLOT_PATTERN.sub(substitute, self.endpoint)


def _require_user_identifier(request: Mapping[str, Any]) -> None:
    if not any(
        request.get(key)
        for key in ("localId", "email", "phoneNumber", "federatedUserId")
    ):
        raise ProtocolError(
            "INTERNAL ASSERT FAILED: Server request is missing user identifier"
        )


def _require_local_id(request: Mapping[str, Any]) -> None:
    if not request.get("localId"):
        raise ProtocolError(
            "INTERNAL ASSERT FAILED: Server request is missing user identifier"
        )


def _require_users_found(response: Mapping[str, Any]) -> None:
    if not response.get("users"):
        raise BackendError(AuthErrorCode.USER_NOT_FOUND)


def _require_created_local_id(response: Mapping[str, Any]) -> None:
    if not response.get("localId"):
        raise ProtocolError("INTERNAL ASSERT FAILED: Unable to create new user")


def _require_updated_local_id(response: Mapping[str, Any]) -> None:
    if not response.get("localId"):
        raise BackendError(AuthErrorCode.USER_NOT_FOUND)


def _require_local_ids(request: Mapping[str, Any]) -> None:
    local_ids = request.get("localIds")
    if not isinstance(local_ids, list | tuple) or not local_ids:
        raise ProtocolError(
            "INTERNAL ASSERT FAILED: Server request is missing user identifiers"
        )


def _require_import_users(request: Mapping[str, Any]) -> None:
    users = request.get("users")
    if not isinstance(users, list) or not users:
        raise ProtocolError(
            "INTERNAL ASSERT FAILED: Server request is missing users to import"
        )


def _validate_oob_request(request: Mapping[str, Any]) -> None:
    request_type = request.get("requestType")
    if request_type not in EMAIL_ACTION_REQUEST_TYPES:
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            f'"{request_type}" is not a supported email action request type.',
            field="requestType",
        )
    email = request.get("email")
    if not is_email(email):
        raise ArgumentError(AuthErrorCode.INVALID_EMAIL, field="email", value=email)


def _require_oob_link(response: Mapping[str, Any]) -> None:
    if not response.get("oobLink"):
        raise ProtocolError(
            "INTERNAL ASSERT FAILED: Unable to create the email action link"
        )


def _validate_session_cookie_request(request: Mapping[str, Any]) -> None:
    id_token = request.get("idToken")
    if not is_non_empty_string(id_token):
        raise ArgumentError(AuthErrorCode.INVALID_ID_TOKEN, field="idToken")
    duration = request.get("validDuration")
    if (
        not is_number(duration)
        or duration < MIN_SESSION_COOKIE_DURATION_SECS
        or duration > MAX_SESSION_COOKIE_DURATION_SECS
    ):
        raise ArgumentError(
            AuthErrorCode.INVALID_SESSION_COOKIE_DURATION,
            field="expiresIn",
            value=duration,
        )


def _require_session_cookie(response: Mapping[str, Any]) -> None:
    if not response.get("sessionCookie"):
        raise ProtocolError("INTERNAL ASSERT FAILED: Unable to create the session cookie")


def _require_resource_name(description: str) -> Validator:
    def validate(response: Mapping[str, Any]) -> None:
        if not is_non_empty_string(response.get("name")):
            raise ProtocolError(f"INTERNAL ASSERT FAILED: Unable to {description}")

    return validate


LOOKUP_ACCOUNTS = ApiSettings(
    "lookup_accounts",
    "/accounts:lookup",
    HttpMethod.POST,
    request_validator=_require_user_identifier,
    response_validator=_require_users_found,
)
LOOKUP_ACCOUNTS_BY_IDENTIFIERS = ApiSettings(
    "lookup_accounts_by_identifiers",
    "/accounts:lookup",
    HttpMethod.POST,
)
CREATE_ACCOUNT = ApiSettings(
    "create_account",
    "/accounts",
    HttpMethod.POST,
    response_validator=_require_created_local_id,
)
UPDATE_ACCOUNT = ApiSettings(
    "update_account",
    "/accounts:update",
    HttpMethod.POST,
    request_validator=_require_local_id,
    response_validator=_require_updated_local_id,
)
DELETE_ACCOUNT = ApiSettings(
    "delete_account",
    "/accounts:delete",
    HttpMethod.POST,
    request_validator=_require_local_id,
)
BATCH_DELETE_ACCOUNTS = ApiSettings(
    "batch_delete_accounts",
    "/accounts:batchDelete",
    HttpMethod.POST,
    request_validator=_require_local_ids,
)
DOWNLOAD_ACCOUNTS = ApiSettings(
    "download_accounts",
    "/accounts:batchGet",
    HttpMethod.GET,
)
UPLOAD_ACCOUNTS = ApiSettings(
    "upload_accounts",
    "/accounts:batchCreate",
    HttpMethod.POST,
    request_validator=_require_import_users,
)
GET_OOB_CODE = ApiSettings(
    "get_oob_code",
    "/accounts:sendOobCode",
    HttpMethod.POST,
    request_validator=_validate_oob_request,
    response_validator=_require_oob_link,
)
CREATE_SESSION_COOKIE = ApiSettings(
    "create_session_cookie",
    ":createSessionCookie",
    HttpMethod.POST,
    request_validator=_validate_session_cookie_request,
    response_validator=_require_session_cookie,
)

GET_OAUTH_IDP_CONFIG = ApiSettings(
    "get_oauth_idp_config",
    "/oauthIdpConfigs/{providerId}",
    HttpMethod.GET,
    version="v2",
    response_validator=_require_resource_name("get OIDC configuration"),
)
DELETE_OAUTH_IDP_CONFIG = ApiSettings(
    "delete_oauth_idp_config",
    "/oauthIdpConfigs/{providerId}",
    HttpMethod.DELETE,
    version="v2",
)
CREATE_OAUTH_IDP_CONFIG = ApiSettings(
    "create_oauth_idp_config",
    "/oauthIdpConfigs?oauthIdpConfigId={providerId}",
    HttpMethod.POST,
    version="v2",
    response_validator=_require_resource_name("create new OIDC configuration"),
)
UPDATE_OAUTH_IDP_CONFIG = ApiSettings(
    "update_oauth_idp_config",
    "/oauthIdpConfigs/{providerId}?updateMask={updateMask}",
    HttpMethod.PATCH,
    version="v2",
    response_validator=_require_resource_name("update OIDC configuration"),
)
LIST_OAUTH_IDP_CONFIGS = ApiSettings(
    "list_oauth_idp_configs",
    "/oauthIdpConfigs",
    HttpMethod.GET,
    version="v2",
)

GET_INBOUND_SAML_CONFIG = ApiSettings(
    "get_inbound_saml_config",
    "/inboundSamlConfigs/{providerId}",
    HttpMethod.GET,
    version="v2",
    response_validator=_require_resource_name("get SAML configuration"),
)
DELETE_INBOUND_SAML_CONFIG = ApiSettings(
    "delete_inbound_saml_config",
    "/inboundSamlConfigs/{providerId}",
    HttpMethod.DELETE,
    version="v2",
)
CREATE_INBOUND_SAML_CONFIG = ApiSettings(
    "create_inbound_saml_config",
    "/inboundSamlConfigs?inboundSamlConfigId={providerId}",
    HttpMethod.POST,
    version="v2",
    response_validator=_require_resource_name("create new SAML configuration"),
)
UPDATE_INBOUND_SAML_CONFIG = ApiSettings(
    "update_inbound_saml_config",
    "/inboundSamlConfigs/{providerId}?updateMask={updateMask}",
    HttpMethod.PATCH,
    version="v2",
    response_validator=_require_resource_name("update SAML configuration"),
)
LIST_INBOUND_SAML_CONFIGS = ApiSettings(
    "list_inbound_saml_configs",
    "/inboundSamlConfigs",
    HttpMethod.GET,
    version="v2",
)


@dataclass(frozen=True)
class ProviderEndpoints:
    """The five descriptors serving one provider kind."""

    get: ApiSettings
    delete: ApiSettings
    create: ApiSettings
    update: ApiSettings
    list: ApiSettings


OIDC_ENDPOINTS = ProviderEndpoints(
    get=GET_OAUTH_IDP_CONFIG,
    delete=DELETE_OAUTH_IDP_CONFIG,
    create=CREATE_OAUTH_IDP_CONFIG,
    update=UPDATE_OAUTH_IDP_CONFIG,
    list=LIST_OAUTH_IDP_CONFIGS,
)
SAML_ENDPOINTS = ProviderEndpoints(
    get=GET_INBOUND_SAML_CONFIG,
    delete=DELETE_INBOUND_SAML_CONFIG,
    create=CREATE_INBOUND_SAML_CONFIG,
    update=UPDATE_INBOUND_SAML_CONFIG,
    list=LIST_INBOUND_SAML_CONFIGS,
)
