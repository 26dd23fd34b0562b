"""Translation of backend machine codes into stable client errors.

The backend reports failures as an envelope of the form::

    {"error": {"code": 400, "message": "USER_NOT_FOUND"}}

where ``message`` may carry extra detail after a colon
(``"INVALID_CLAIMS : Claims are too long"``). The translator maps the
machine code through an extensible table and falls back to a generic
internal error that echoes the raw backend text, so that codes unknown to
this client never crash it or get silently misclassified.
"""

import json
from collections.abc import Mapping
from typing import Any

from ..utils.logging_utils import get_logger
from .error_codes import AuthErrorCode, ErrorInfo
from .exceptions import BackendError

logger = get_logger(__name__)

DEFAULT_SERVER_CODES: dict[str, ErrorInfo] = {
    "BILLING_NOT_ENABLED": AuthErrorCode.BILLING_NOT_ENABLED,
    "CLAIMS_TOO_LARGE": AuthErrorCode.CLAIMS_TOO_LARGE,
    "CONFIGURATION_EXISTS": AuthErrorCode.CONFIGURATION_EXISTS,
    "CONFIGURATION_NOT_FOUND": AuthErrorCode.CONFIGURATION_NOT_FOUND,
    "INSUFFICIENT_PERMISSION": AuthErrorCode.INSUFFICIENT_PERMISSION,
    "INVALID_CONFIG": AuthErrorCode.INVALID_CONFIG,
    "INVALID_CONFIG_ID": AuthErrorCode.INVALID_PROVIDER_ID,
    "INVALID_CONTINUE_URI": AuthErrorCode.INVALID_CONTINUE_URI,
    "INVALID_DYNAMIC_LINK_DOMAIN": AuthErrorCode.INVALID_DYNAMIC_LINK_DOMAIN,
    "DUPLICATE_EMAIL": AuthErrorCode.EMAIL_ALREADY_EXISTS,
    "DUPLICATE_LOCAL_ID": AuthErrorCode.UID_ALREADY_EXISTS,
    "DUPLICATE_MFA_ENROLLMENT_ID": AuthErrorCode.SECOND_FACTOR_UID_ALREADY_EXISTS,
    "EMAIL_EXISTS": AuthErrorCode.EMAIL_ALREADY_EXISTS,
    "FORBIDDEN_CLAIM": AuthErrorCode.FORBIDDEN_CLAIM,
    "INVALID_CLAIMS": AuthErrorCode.INVALID_CLAIMS,
    "INVALID_DURATION": AuthErrorCode.INVALID_SESSION_COOKIE_DURATION,
    "INVALID_EMAIL": AuthErrorCode.INVALID_EMAIL,
    "INVALID_DISPLAY_NAME": AuthErrorCode.INVALID_DISPLAY_NAME,
    "INVALID_ID_TOKEN": AuthErrorCode.INVALID_ID_TOKEN,
    "INVALID_NAME": AuthErrorCode.INVALID_NAME,
    "INVALID_OAUTH_CLIENT_ID": AuthErrorCode.INVALID_OAUTH_CLIENT_ID,
    "INVALID_PAGE_SELECTION": AuthErrorCode.INVALID_PAGE_TOKEN,
    "INVALID_PHONE_NUMBER": AuthErrorCode.INVALID_PHONE_NUMBER,
    "INVALID_PROJECT_ID": AuthErrorCode.INVALID_PROJECT_ID,
    "INVALID_PROVIDER_ID": AuthErrorCode.INVALID_PROVIDER_ID,
    "INVALID_SERVICE_ACCOUNT": AuthErrorCode.INVALID_SERVICE_ACCOUNT,
    "INVALID_TESTING_PHONE_NUMBER": AuthErrorCode.INVALID_TESTING_PHONE_NUMBER,
    "INVALID_TENANT_TYPE": AuthErrorCode.INVALID_TENANT_TYPE,
    "MISSING_ANDROID_PACKAGE_NAME": AuthErrorCode.MISSING_ANDROID_PACKAGE_NAME,
    "MISSING_CONFIG": AuthErrorCode.MISSING_CONFIG,
    "MISSING_CONFIG_ID": AuthErrorCode.MISSING_PROVIDER_ID,
    "MISSING_DISPLAY_NAME": AuthErrorCode.MISSING_DISPLAY_NAME,
    "MISSING_EMAIL": AuthErrorCode.MISSING_EMAIL,
    "MISSING_IOS_BUNDLE_ID": AuthErrorCode.MISSING_IOS_BUNDLE_ID,
    "MISSING_ISSUER": AuthErrorCode.MISSING_ISSUER,
    "MISSING_LOCAL_ID": AuthErrorCode.MISSING_UID,
    "MISSING_OAUTH_CLIENT_ID": AuthErrorCode.MISSING_OAUTH_CLIENT_ID,
    "MISSING_PROVIDER_ID": AuthErrorCode.MISSING_PROVIDER_ID,
    "MISSING_SAML_RELYING_PARTY_CONFIG": AuthErrorCode.MISSING_SAML_RELYING_PARTY_CONFIG,
    "MISSING_USER_ACCOUNT": AuthErrorCode.MISSING_UID,
    "OPERATION_NOT_ALLOWED": AuthErrorCode.OPERATION_NOT_ALLOWED,
    "PERMISSION_DENIED": AuthErrorCode.INSUFFICIENT_PERMISSION,
    "PHONE_NUMBER_EXISTS": AuthErrorCode.PHONE_NUMBER_ALREADY_EXISTS,
    "PROJECT_NOT_FOUND": AuthErrorCode.PROJECT_NOT_FOUND,
    "QUOTA_EXCEEDED": AuthErrorCode.QUOTA_EXCEEDED,
    "SECOND_FACTOR_LIMIT_EXCEEDED": AuthErrorCode.SECOND_FACTOR_LIMIT_EXCEEDED,
    "TENANT_NOT_FOUND": AuthErrorCode.TENANT_NOT_FOUND,
    "TENANT_ID_MISMATCH": AuthErrorCode.MISMATCHING_TENANT_ID,
    "TOKEN_EXPIRED": AuthErrorCode.ID_TOKEN_EXPIRED,
    "UNAUTHORIZED_DOMAIN": AuthErrorCode.UNAUTHORIZED_DOMAIN,
    "UNSUPPORTED_FIRST_FACTOR": AuthErrorCode.UNSUPPORTED_FIRST_FACTOR,
    "UNSUPPORTED_SECOND_FACTOR": AuthErrorCode.UNSUPPORTED_SECOND_FACTOR,
    "UNSUPPORTED_TENANT_OPERATION": AuthErrorCode.UNSUPPORTED_TENANT_OPERATION,
    "UNVERIFIED_EMAIL": AuthErrorCode.UNVERIFIED_EMAIL,
    "USER_DISABLED": AuthErrorCode.USER_DISABLED,
    "USER_NOT_FOUND": AuthErrorCode.USER_NOT_FOUND,
    "WEAK_PASSWORD": AuthErrorCode.INVALID_PASSWORD,
}


def split_server_code(server_message: str | None) -> tuple[str, str | None]:
    """Split a backend message into its machine code and optional detail.

    Args:
        server_message: Raw backend message, e.g. ``"CODE : detail"``

    Returns:
        tuple: (machine code, detail or None)
    """
    text = (server_message or "").strip()
    code, sep, detail = text.partition(":")
    if not sep:
        return text, None
    return code.strip(), detail.strip() or None


def extract_error_envelope(body: Any) -> str | None:
    """Return the backend machine-code string from an error envelope.

    Args:
        body: Decoded response body

    Returns:
        Optional[str]: The ``error.message`` string, or None when the body
        carries no recognizable structured envelope
    """
    if not isinstance(body, Mapping):
        return None
    error = body.get("error")
    if not isinstance(error, Mapping):
        return None
    message = error.get("message")
    if isinstance(message, str) and message:
        return message
    return None


class BackendErrorTranslator:
    """Maps backend machine codes to :class:`BackendError` instances.

    The table is injectable and extensible at runtime so that codes
    introduced by the backend later can be mapped without a release.
    """

    def __init__(self, table: Mapping[str, ErrorInfo] | None = None) -> None:
        self._table: dict[str, ErrorInfo] = dict(
            DEFAULT_SERVER_CODES if table is None else table
        )

    def register(self, server_code: str, info: ErrorInfo) -> None:
        """Add or replace the mapping for a backend machine code."""
        self._table[server_code] = info

    def lookup(self, server_code: str) -> ErrorInfo | None:
        """Return the client error info for a machine code, if known."""
        return self._table.get(server_code)

    def from_server_error(
        self,
        server_message: str | None,
        raw_response: Any = None,
        status_code: int | None = None,
        endpoint: str | None = None,
    ) -> BackendError:
        """Create the client-facing error for a backend machine code.

        Args:
            server_message: Backend machine code, optionally with detail
            raw_response: Raw server response, echoed for unknown codes
            status_code: HTTP status code, if any
            endpoint: Backend endpoint that reported the error

        Returns:
            BackendError: Translated error
        """
        server_code, detail = split_server_code(server_message)
        info = self._table.get(server_code)

        if info is not None:
            return BackendError(
                info,
                message=detail,
                server_code=server_code,
                status_code=status_code,
                endpoint=endpoint,
            )

        logger.warning(
            f"Unrecognized backend error code: {server_code or '<none>'}",
            extra={
                "api_endpoint": endpoint,
                "status_code": status_code,
            },
        )
        raw_text = _render_raw(raw_response if raw_response is not None else server_message)
        message = AuthErrorCode.INTERNAL_ERROR.message
        if detail:
            message = detail
        if raw_text:
            message = f'{message} Raw server response: "{raw_text}"'
        return BackendError(
            AuthErrorCode.INTERNAL_ERROR,
            message=message,
            server_code=server_code or None,
            status_code=status_code,
            endpoint=endpoint,
        )

    def from_http_failure(
        self,
        status_code: int,
        body: Any,
        endpoint: str | None = None,
    ) -> BackendError:
        """Translate a failed HTTP response, with or without an envelope.

        Args:
            status_code: HTTP status code
            body: Decoded JSON body, or raw text when the body was not JSON
            endpoint: Backend endpoint that failed

        Returns:
            BackendError: Translated error
        """
        server_message = extract_error_envelope(body)
        if server_message is not None:
            return self.from_server_error(
                server_message,
                raw_response=body,
                status_code=status_code,
                endpoint=endpoint,
            )

        raw_text = _render_raw(body)
        message = (
            f"Unexpected response with status: {status_code} and body: {raw_text}"
            if raw_text
            else f"Unexpected response with status: {status_code}"
        )
        return BackendError(
            AuthErrorCode.INTERNAL_ERROR,
            message=message,
            status_code=status_code,
            endpoint=endpoint,
        )


def _render_raw(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, sort_keys=True)
    except (TypeError, ValueError):
        return str(raw)


default_translator = BackendErrorTranslator()
