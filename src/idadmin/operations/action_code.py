"""Email action links: password reset, email verification and sign-in."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..core.dispatcher import RequestDispatcher
from ..core.endpoints import GET_OOB_CODE
from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError
from ..utils.logging_utils import get_logger
from ..utils.validators import is_boolean, is_non_empty_string, is_non_null_dict, is_url

logger = get_logger(__name__)

PASSWORD_RESET = "PASSWORD_RESET"
VERIFY_EMAIL = "VERIFY_EMAIL"
EMAIL_SIGNIN = "EMAIL_SIGNIN"

_UNDEFINED = object()


@dataclass(frozen=True)
class ActionCodeSettings:
    """Where an email action link continues and which apps may open it."""

    url: Any = _UNDEFINED
    handle_code_in_app: Any = None
    dynamic_link_domain: Any = None
    ios_bundle_id: Any = None
    android_package_name: Any = None
    android_minimum_version: Any = None
    android_install_app: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "ActionCodeSettings":
        """Build settings from the caller layout.

        The layout is ``{"url", "handleCodeInApp", "dynamicLinkDomain",
        "iOS": {"bundleId"}, "android": {"packageName", "minimumVersion",
        "installApp"}}``.

        Raises:
            ArgumentError: If the settings or a nested platform entry is not
                an object, or a platform entry lacks its identifier
        """
        if not is_non_null_dict(data):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                '"ActionCodeSettings" must be a non-null object.',
            )

        kwargs: dict[str, Any] = {
            "url": data.get("url", _UNDEFINED),
            "handle_code_in_app": data.get("handleCodeInApp"),
            "dynamic_link_domain": data.get("dynamicLinkDomain"),
        }

        if "iOS" in data:
            ios = data["iOS"]
            if not is_non_null_dict(ios):
                raise ArgumentError(
                    AuthErrorCode.INVALID_ARGUMENT,
                    '"ActionCodeSettings.iOS" must be a valid non-null object.',
                )
            if "bundleId" not in ios:
                raise ArgumentError(AuthErrorCode.MISSING_IOS_BUNDLE_ID)
            kwargs["ios_bundle_id"] = ios["bundleId"]

        if "android" in data:
            android = data["android"]
            if not is_non_null_dict(android):
                raise ArgumentError(
                    AuthErrorCode.INVALID_ARGUMENT,
                    '"ActionCodeSettings.android" must be a valid non-null object.',
                )
            if "packageName" not in android:
                raise ArgumentError(AuthErrorCode.MISSING_ANDROID_PACKAGE_NAME)
            kwargs["android_package_name"] = android["packageName"]
            kwargs["android_minimum_version"] = android.get("minimumVersion")
            kwargs["android_install_app"] = android.get("installApp")

        return cls(**kwargs)


def encode_action_code_settings(settings: ActionCodeSettings | Mapping[str, Any]) -> dict[str, Any]:
    """Validate action code settings and return their wire fields.

    Args:
        settings: Settings object or caller dict

    Returns:
        Dict[str, Any]: Wire fields with absent values omitted

    Raises:
        ArgumentError: If the continue URL is missing or invalid, or another
            setting has the wrong type
    """
    if not isinstance(settings, ActionCodeSettings):
        settings = ActionCodeSettings.from_dict(settings)

    if settings.url is _UNDEFINED:
        raise ArgumentError(AuthErrorCode.MISSING_CONTINUE_URI)
    if not is_url(settings.url):
        raise ArgumentError(AuthErrorCode.INVALID_CONTINUE_URI, value=settings.url)

    if settings.handle_code_in_app is not None and not is_boolean(settings.handle_code_in_app):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            '"ActionCodeSettings.handleCodeInApp" must be a boolean.',
        )

    if settings.dynamic_link_domain is not None and not is_non_empty_string(
        settings.dynamic_link_domain
    ):
        raise ArgumentError(AuthErrorCode.INVALID_DYNAMIC_LINK_DOMAIN)

    if settings.ios_bundle_id is not None and not is_non_empty_string(settings.ios_bundle_id):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            '"ActionCodeSettings.iOS.bundleId" must be a valid non-empty string.',
        )

    android_configured = settings.android_package_name is not None
    if android_configured:
        if not is_non_empty_string(settings.android_package_name):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                '"ActionCodeSettings.android.packageName" must be a valid non-empty string.',
            )
        if settings.android_minimum_version is not None and not is_non_empty_string(
            settings.android_minimum_version
        ):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                '"ActionCodeSettings.android.minimumVersion" must be a valid non-empty string.',
            )
        if settings.android_install_app is not None and not is_boolean(
            settings.android_install_app
        ):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                '"ActionCodeSettings.android.installApp" must be a valid boolean.',
            )

    wire: dict[str, Any] = {
        "continueUrl": settings.url,
        "canHandleCodeInApp": bool(settings.handle_code_in_app),
        "dynamicLinkDomain": settings.dynamic_link_domain,
        "androidPackageName": settings.android_package_name,
        "androidMinimumVersion": settings.android_minimum_version,
        "androidInstallApp": bool(settings.android_install_app) if android_configured else None,
        "iOSBundleId": settings.ios_bundle_id,
    }
    return {key: value for key, value in wire.items() if value is not None}


def build_email_action_request(
    request_type: str,
    email: Any,
    settings: ActionCodeSettings | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the ``accounts:sendOobCode`` payload returning the link only.

    Raises:
        ArgumentError: If sign-in link settings are missing or invalid
    """
    payload: dict[str, Any] = {
        "requestType": request_type,
        "email": email,
        "returnOobLink": True,
    }
    if settings is None:
        if request_type == EMAIL_SIGNIN:
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                f"`ActionCodeSettings` is required when `requestType` === '{EMAIL_SIGNIN}'",
            )
        return payload

    payload.update(encode_action_code_settings(settings))
    return payload


def generate_email_action_link(
    dispatcher: RequestDispatcher,
    request_type: str,
    email: Any,
    settings: ActionCodeSettings | Mapping[str, Any] | None = None,
) -> str:
    """Generate an out-of-band email action link without sending email."""
    payload = build_email_action_request(request_type, email, settings)
    response = dispatcher.invoke(GET_OOB_CODE, payload)
    logger.debug(
        f"Generated {request_type} link",
        extra={"operation": GET_OOB_CODE.name},
    )
    return response["oobLink"]
