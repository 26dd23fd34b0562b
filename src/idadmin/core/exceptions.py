"""Custom exception hierarchy for the idadmin identity administration client."""

from typing import Any

import requests

from .error_codes import AuthErrorCode, ErrorInfo


class IdAdminError(Exception):
    """Base exception for idadmin.

    Every error surfaced to callers carries a stable ``code`` (for example
    ``auth/user-not-found``) and a human-readable message.
    """

    def __init__(
        self,
        info: ErrorInfo,
        message: str | None = None,
        details: str | None = None,
    ):
        """Initialize the exception.

        Args:
            info: Stable error code and default message
            message: Optional message overriding the default one
            details: Optional additional details about the error
        """
        self.info = info
        self.code = info.code
        self.message = message or info.message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message."""
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message

    def has_code(self, slug: str) -> bool:
        """Check the error code without the ``auth/`` prefix.

        Args:
            slug: Unprefixed error code, e.g. ``user-not-found``

        Returns:
            bool: True if the code matches
        """
        return self.code == f"{AuthErrorCode.PREFIX}/{slug}"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation of the error."""
        return {"code": self.code, "message": self.message}


class AuthConfigError(IdAdminError):
    """Client configuration errors.

    Raised when the environment is missing a project ID, a bearer credential
    cannot be produced, or a collaborator needed by an operation is absent.
    """

    def __init__(self, message: str, details: str | None = None):
        super().__init__(AuthErrorCode.INVALID_CREDENTIAL, message, details)


class ArgumentError(IdAdminError):
    """Malformed caller input.

    Always detected before any network call is made, and never retried.
    """

    def __init__(
        self,
        info: ErrorInfo,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
    ):
        """Initialize the argument error.

        Args:
            info: Stable error code and default message
            message: Optional message overriding the default one
            field: The caller-facing field that failed validation
            value: The offending value
        """
        self.field = field
        self.value = value
        super().__init__(info, message)

    def _format_message(self) -> str:
        """Format the message with field context."""
        parts = [self.message]

        if self.field:
            parts.append(f"Field: {self.field}")

        if self.value is not None:
            parts.append(f"Value: {self.value!r}")

        return " | ".join(parts)


class ProtocolError(IdAdminError):
    """Backend response does not match the expected shape.

    Signals a contract mismatch between this client and the backend rather
    than a business condition; surfaced as-is and never retried.
    """

    def __init__(self, message: str, details: str | None = None):
        super().__init__(AuthErrorCode.INTERNAL_ERROR, message, details)


class BackendError(IdAdminError):
    """Server-reported business condition translated to a stable code."""

    def __init__(
        self,
        info: ErrorInfo,
        message: str | None = None,
        server_code: str | None = None,
        status_code: int | None = None,
        endpoint: str | None = None,
    ):
        """Initialize the backend error.

        Args:
            info: Translated client error info
            message: Optional message overriding the default one
            server_code: The raw backend machine code
            status_code: The HTTP status code from the response
            endpoint: The backend endpoint that failed
        """
        self.server_code = server_code
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(info, message)

    def _format_message(self) -> str:
        """Format the message with API context."""
        parts = [self.message]

        if self.status_code:
            parts.append(f"Status: {self.status_code}")

        if self.endpoint:
            parts.append(f"Endpoint: {self.endpoint}")

        return " | ".join(parts)


class TransportError(IdAdminError):
    """Network or timeout failure reported by the HTTP transport."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: str | None = None,
    ):
        self.endpoint = endpoint
        super().__init__(AuthErrorCode.NETWORK_ERROR, message, details)


class TokenRejectedError(IdAdminError):
    """A decoded session artifact was rejected after verification.

    Raised for revoked tokens, tenant mismatches and disabled accounts.
    """


def wrap_transport_exception(
    exc: Exception, endpoint: str | None = None
) -> IdAdminError:
    """Wrap transport-level exceptions into the idadmin exception hierarchy.

    Args:
        exc: The original exception raised while sending a request
        endpoint: Optional endpoint context

    Returns:
        IdAdminError: Wrapped exception
    """
    if isinstance(exc, IdAdminError):
        return exc

    if isinstance(exc, requests.exceptions.Timeout):
        return TransportError(
            message="Request timed out",
            endpoint=endpoint,
            details=str(exc),
        )

    if isinstance(exc, requests.exceptions.ConnectionError):
        return TransportError(
            message="Failed to connect to the identity backend",
            endpoint=endpoint,
            details=str(exc),
        )

    if isinstance(exc, requests.exceptions.RequestException):
        return TransportError(
            message="HTTP request failed",
            endpoint=endpoint,
            details=str(exc),
        )

    return TransportError(
        message=f"Unexpected transport error: {exc}",
        endpoint=endpoint,
    )
