"""Field validators shared by every request builder.

The ``is_*`` predicates are pure and never raise. :class:`FieldValidator`
wraps them into ``require_*`` checks that raise :class:`ArgumentError`
naming the offending field, and can be replaced wholesale by injecting a
subclass into the dispatcher and operation managers.
"""

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

from ..core.error_codes import AuthErrorCode, ErrorInfo
from ..core.exceptions import ArgumentError

MAX_UID_LENGTH = 128
MIN_PASSWORD_LENGTH = 6

EMAIL_PATTERN = re.compile(r"^[^@]+@[^@]+$")
PHONE_ALNUM_PATTERN = re.compile(r"[a-zA-Z0-9]")

# Characters that may legally appear anywhere in a URL
URL_ILLEGAL_CHARS = re.compile(r"[^a-z0-9:/?#\[\]@!$&'()*+,;=.\-_~%]", re.IGNORECASE)
URL_HOSTNAME_PATTERN = re.compile(r"^[a-zA-Z0-9][\w\-]*(\.[a-zA-Z0-9][\w\-]*)*$")
URL_PATH_PATTERN = re.compile(r"^(/[\w\-\.\~\!\$\'\(\)\*\+\,\;\=\:\@]+)*$")
URL_SCHEME_PATTERN = re.compile(r"^(https?):", re.IGNORECASE)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_number(value: Any) -> bool:
    """True for ints and floats; booleans are not numbers here."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def is_bytes(value: Any) -> bool:
    return isinstance(value, bytes | bytearray)


def is_non_null_dict(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_list(value: Any) -> bool:
    return isinstance(value, list | tuple)


def is_non_empty_list(value: Any) -> bool:
    return is_list(value) and len(value) > 0


def is_uid(uid: Any) -> bool:
    """Check for a non-empty string of at most 128 characters."""
    return isinstance(uid, str) and 0 < len(uid) <= MAX_UID_LENGTH


def is_password(password: Any) -> bool:
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def is_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def is_phone_number(phone_number: Any) -> bool:
    """Loose E.164 check: a leading ``+`` and at least one alphanumeric."""
    if not isinstance(phone_number, str) or not phone_number:
        return False
    return phone_number.startswith("+") and bool(
        PHONE_ALNUM_PATTERN.search(phone_number)
    )


def is_url(url: Any) -> bool:
    """Check that a string is an absolute http(s) URL.

    Args:
        url: Value to check

    Returns:
        bool: True if the value is a well-formed http or https URL
    """
    if not isinstance(url, str) or not url:
        return False
    if URL_ILLEGAL_CHARS.search(url):
        return False

    scheme_match = URL_SCHEME_PATTERN.match(url)
    if scheme_match is None:
        return False
    if not url[scheme_match.end():].startswith("//"):
        return False

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return False

    if not hostname or not URL_HOSTNAME_PATTERN.match(hostname):
        return False

    path = parts.path
    if path and path != "/" and not URL_PATH_PATTERN.match(path):
        return False
    return True


def is_provider_id(provider_id: Any) -> bool:
    return is_non_empty_string(provider_id)


def is_tenant_id(tenant_id: Any) -> bool:
    return is_non_empty_string(tenant_id)


class FieldValidator:
    """Validation rules raising :class:`ArgumentError` on failure.

    Each ``require_*`` method returns the validated value so that callers can
    validate and assign in a single expression.
    """

    def fail(
        self, info: ErrorInfo, field: str, value: Any, message: str | None = None
    ) -> ArgumentError:
        """Build the error raised for a failed field check."""
        return ArgumentError(info, message=message, field=field, value=value)

    def require_uid(self, uid: Any, field: str = "uid") -> str:
        if not is_uid(uid):
            raise self.fail(AuthErrorCode.INVALID_UID, field, uid)
        return uid

    def require_email(self, email: Any, field: str = "email") -> str:
        if not is_email(email):
            raise self.fail(AuthErrorCode.INVALID_EMAIL, field, email)
        return email

    def require_phone_number(self, phone_number: Any, field: str = "phoneNumber") -> str:
        if not is_phone_number(phone_number):
            raise self.fail(AuthErrorCode.INVALID_PHONE_NUMBER, field, phone_number)
        return phone_number

    def require_password(self, password: Any, field: str = "password") -> str:
        # Never echo the password back in the error
        if not is_password(password):
            raise self.fail(AuthErrorCode.INVALID_PASSWORD, field, None)
        return password

    def require_display_name(self, display_name: Any, field: str = "displayName") -> str:
        if not is_string(display_name):
            raise self.fail(AuthErrorCode.INVALID_DISPLAY_NAME, field, display_name)
        return display_name

    def require_photo_url(self, photo_url: Any, field: str = "photoURL") -> str:
        if not is_url(photo_url):
            raise self.fail(AuthErrorCode.INVALID_PHOTO_URL, field, photo_url)
        return photo_url

    def require_email_verified(self, value: Any, field: str = "emailVerified") -> bool:
        if not is_boolean(value):
            raise self.fail(AuthErrorCode.INVALID_EMAIL_VERIFIED, field, value)
        return value

    def require_disabled(self, value: Any, field: str = "disabled") -> bool:
        if not is_boolean(value):
            raise self.fail(AuthErrorCode.INVALID_DISABLED_FIELD, field, value)
        return value

    def require_provider_id(self, provider_id: Any, field: str = "providerId") -> str:
        if not is_provider_id(provider_id):
            raise self.fail(AuthErrorCode.INVALID_PROVIDER_ID, field, provider_id)
        return provider_id

    def require_provider_uid(self, provider_uid: Any, field: str = "uid") -> str:
        if not is_non_empty_string(provider_uid):
            raise self.fail(AuthErrorCode.INVALID_PROVIDER_UID, field, provider_uid)
        return provider_uid

    def require_tenant_id(self, tenant_id: Any, field: str = "tenantId") -> str:
        if not is_tenant_id(tenant_id):
            raise self.fail(AuthErrorCode.INVALID_TENANT_ID, field, tenant_id)
        return tenant_id

    def require_url(
        self,
        url: Any,
        field: str,
        info: ErrorInfo = AuthErrorCode.INVALID_CONFIG,
        message: str | None = None,
    ) -> str:
        if not is_url(url):
            raise self.fail(info, field, url, message)
        return url

    def require_boolean(
        self,
        value: Any,
        field: str,
        info: ErrorInfo = AuthErrorCode.INVALID_ARGUMENT,
        message: str | None = None,
    ) -> bool:
        if not is_boolean(value):
            raise self.fail(info, field, value, message)
        return value

    def require_non_empty_string(
        self,
        value: Any,
        field: str,
        info: ErrorInfo = AuthErrorCode.INVALID_ARGUMENT,
        message: str | None = None,
    ) -> str:
        if not is_non_empty_string(value):
            raise self.fail(info, field, value, message)
        return value

    def require_bytes(self, value: Any, field: str, info: ErrorInfo) -> bytes:
        if not is_bytes(value):
            raise self.fail(info, field, None)
        return bytes(value)

    def require_claims(self, claims: Any, field: str = "customClaims") -> Mapping[str, Any]:
        if not is_non_null_dict(claims):
            raise self.fail(AuthErrorCode.INVALID_CLAIMS, field, claims)
        return claims


default_validator = FieldValidator()
