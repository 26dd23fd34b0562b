"""Stable client error codes and their default messages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorInfo:
    """A stable error code paired with its default human-readable message."""

    code: str
    message: str


_PREFIX = "auth"


def _auth(slug: str, message: str) -> ErrorInfo:
    return ErrorInfo(code=f"{_PREFIX}/{slug}", message=message)


class AuthErrorCode:
    """Client-facing error codes surfaced by every idadmin operation."""

    PREFIX = _PREFIX

    BILLING_NOT_ENABLED = _auth(
        "billing-not-enabled", "Feature requires billing to be enabled."
    )
    CLAIMS_TOO_LARGE = _auth(
        "claims-too-large", "Developer claims maximum payload size exceeded."
    )
    CONFIGURATION_EXISTS = _auth(
        "configuration-exists",
        "A configuration already exists with the provided identifier.",
    )
    CONFIGURATION_NOT_FOUND = _auth(
        "configuration-not-found",
        "There is no configuration corresponding to the provided identifier.",
    )
    EMAIL_ALREADY_EXISTS = _auth(
        "email-already-exists",
        "The email address is already in use by another account.",
    )
    FORBIDDEN_CLAIM = _auth(
        "reserved-claim",
        "The specified developer claim is reserved and cannot be specified.",
    )
    ID_TOKEN_EXPIRED = _auth(
        "id-token-expired", "The provided ID token is expired."
    )
    ID_TOKEN_REVOKED = _auth(
        "id-token-revoked", "The ID token has been revoked."
    )
    INSUFFICIENT_PERMISSION = _auth(
        "insufficient-permission",
        "The credential used to authorize the request lacks the required permission.",
    )
    INTERNAL_ERROR = _auth("internal-error", "An internal error has occurred.")
    INVALID_ARGUMENT = _auth("argument-error", "Invalid argument provided.")
    INVALID_CLAIMS = _auth(
        "invalid-claims", "The provided custom claim attributes are invalid."
    )
    INVALID_CONFIG = _auth(
        "invalid-config", "The provided configuration is invalid."
    )
    INVALID_CONTINUE_URI = _auth(
        "invalid-continue-uri", "The continue URL must be a valid URL string."
    )
    INVALID_CREATION_TIME = _auth(
        "invalid-creation-time", "The creation time must be a valid UTC date string."
    )
    INVALID_CREDENTIAL = _auth(
        "invalid-credential", "Invalid credential or client configuration provided."
    )
    INVALID_DISABLED_FIELD = _auth(
        "invalid-disabled-field", "The disabled field must be a boolean."
    )
    INVALID_DISPLAY_NAME = _auth(
        "invalid-display-name", "The displayName field must be a valid string."
    )
    INVALID_DYNAMIC_LINK_DOMAIN = _auth(
        "invalid-dynamic-link-domain",
        "The provided dynamic link domain is not configured or authorized for the "
        "current project.",
    )
    INVALID_EMAIL = _auth(
        "invalid-email", "The email address is improperly formatted."
    )
    INVALID_EMAIL_VERIFIED = _auth(
        "invalid-email-verified", "The emailVerified field must be a boolean."
    )
    INVALID_ENROLLED_FACTORS = _auth(
        "invalid-enrolled-factors",
        "The enrolled factors must be a valid array of MultiFactorInfo objects.",
    )
    INVALID_ENROLLMENT_TIME = _auth(
        "invalid-enrollment-time",
        "The second factor enrollment time must be a valid UTC date string.",
    )
    INVALID_HASH_ALGORITHM = _auth(
        "invalid-hash-algorithm",
        "The hash algorithm must match one of the strings in the list of supported "
        "algorithms.",
    )
    INVALID_HASH_BLOCK_SIZE = _auth(
        "invalid-hash-block-size", "The hash block size must be a valid number."
    )
    INVALID_HASH_DERIVED_KEY_LENGTH = _auth(
        "invalid-hash-derived-key-length",
        "The hash derived key length must be a valid number.",
    )
    INVALID_HASH_KEY = _auth(
        "invalid-hash-key", "The hash key must a valid byte buffer."
    )
    INVALID_HASH_MEMORY_COST = _auth(
        "invalid-hash-memory-cost", "The hash memory cost must be a valid number."
    )
    INVALID_HASH_PARALLELIZATION = _auth(
        "invalid-hash-parallelization", "The hash parallelization must be a valid number."
    )
    INVALID_HASH_ROUNDS = _auth(
        "invalid-hash-rounds", "The hash rounds must be a valid number."
    )
    INVALID_HASH_SALT_SEPARATOR = _auth(
        "invalid-hash-salt-separator",
        "The hashing algorithm salt separator field must be a valid byte buffer.",
    )
    INVALID_ID_TOKEN = _auth(
        "invalid-id-token", "The provided ID token is not a valid ID token."
    )
    INVALID_LAST_SIGN_IN_TIME = _auth(
        "invalid-last-sign-in-time",
        "The last sign-in time must be a valid UTC date string.",
    )
    INVALID_NAME = _auth(
        "invalid-name", "The resource name provided is invalid."
    )
    INVALID_OAUTH_CLIENT_ID = _auth(
        "invalid-oauth-client-id", "The provided OAuth client ID is invalid."
    )
    INVALID_PAGE_TOKEN = _auth(
        "invalid-page-token", "The page token must be a valid non-empty string."
    )
    INVALID_PASSWORD = _auth(
        "invalid-password", "The password must be a string with at least 6 characters."
    )
    INVALID_PASSWORD_HASH = _auth(
        "invalid-password-hash", "The password hash must be a valid byte buffer."
    )
    INVALID_PASSWORD_SALT = _auth(
        "invalid-password-salt", "The password salt must be a valid byte buffer."
    )
    INVALID_PHONE_NUMBER = _auth(
        "invalid-phone-number",
        "The phone number must be a non-empty E.164 standard compliant identifier string.",
    )
    INVALID_PHOTO_URL = _auth(
        "invalid-photo-url", "The photoURL field must be a valid URL."
    )
    INVALID_PROJECT_ID = _auth(
        "invalid-project-id",
        "Invalid parent project. Either parent project doesn't exist or didn't "
        "enable multi-tenancy.",
    )
    INVALID_PROVIDER_DATA = _auth(
        "invalid-provider-data",
        "The providerData must be a valid array of UserInfo objects.",
    )
    INVALID_PROVIDER_ID = _auth(
        "invalid-provider-id",
        "The providerId must be a valid supported provider identifier string.",
    )
    INVALID_PROVIDER_UID = _auth(
        "invalid-provider-uid", "The providerUid must be a valid provider uid string."
    )
    INVALID_SERVICE_ACCOUNT = _auth(
        "invalid-service-account", "Invalid service account."
    )
    INVALID_SESSION_COOKIE_DURATION = _auth(
        "invalid-session-cookie-duration",
        "The session cookie duration must be a valid number in milliseconds between "
        "5 minutes and 2 weeks.",
    )
    INVALID_TENANT_ID = _auth(
        "invalid-tenant-id", "The tenant ID must be a valid non-empty string."
    )
    INVALID_TENANT_TYPE = _auth(
        "invalid-tenant-type", 'Tenant type must be either "full_service" or "lightweight".'
    )
    INVALID_TESTING_PHONE_NUMBER = _auth(
        "invalid-testing-phone-number",
        "Invalid testing phone number or invalid test code provided.",
    )
    INVALID_UID = _auth(
        "invalid-uid", "The uid must be a non-empty string with at most 128 characters."
    )
    INVALID_USER_IMPORT = _auth(
        "invalid-user-import", "The user record to import is invalid."
    )
    MAXIMUM_USER_COUNT_EXCEEDED = _auth(
        "maximum-user-count-exceeded",
        "The maximum allowed number of users to import has been exceeded.",
    )
    MISMATCHING_TENANT_ID = _auth(
        "mismatching-tenant-id",
        "User tenant ID does not match with the current tenant-scoped client tenant ID.",
    )
    MISSING_ANDROID_PACKAGE_NAME = _auth(
        "missing-android-pkg-name",
        "An Android Package Name must be provided if the Android App is required to "
        "be installed.",
    )
    MISSING_CONFIG = _auth(
        "missing-config", "The provided configuration is missing required attributes."
    )
    MISSING_CONTINUE_URI = _auth(
        "missing-continue-uri", "A valid continue URL must be provided in the request."
    )
    MISSING_DISPLAY_NAME = _auth(
        "missing-display-name",
        "The resource being created or edited is missing a valid display name.",
    )
    MISSING_EMAIL = _auth(
        "missing-email", "The email is required for the specified action."
    )
    MISSING_HASH_ALGORITHM = _auth(
        "missing-hash-algorithm",
        "Importing users with password hashes requires that the hashing algorithm "
        "and its parameters be provided.",
    )
    MISSING_IOS_BUNDLE_ID = _auth(
        "missing-ios-bundle-id", "The request is missing an iOS Bundle ID."
    )
    MISSING_ISSUER = _auth(
        "missing-issuer", "The OAuth/OIDC configuration issuer must not be empty."
    )
    MISSING_OAUTH_CLIENT_ID = _auth(
        "missing-oauth-client-id",
        "The OAuth/OIDC configuration client ID must not be empty.",
    )
    MISSING_PROVIDER_ID = _auth(
        "missing-provider-id", "A valid provider ID must be provided in the request."
    )
    MISSING_SAML_RELYING_PARTY_CONFIG = _auth(
        "missing-saml-relying-party-config",
        "The SAML configuration provided is missing a relying party configuration.",
    )
    MISSING_UID = _auth(
        "missing-uid", "A uid identifier is required for the current operation."
    )
    NETWORK_ERROR = _auth(
        "network-error", "A network error occurred while contacting the backend."
    )
    OPERATION_NOT_ALLOWED = _auth(
        "operation-not-allowed",
        "The given sign-in provider is disabled for this project.",
    )
    PHONE_NUMBER_ALREADY_EXISTS = _auth(
        "phone-number-already-exists", "The user with the provided phone number already exists."
    )
    PROJECT_NOT_FOUND = _auth(
        "project-not-found", "No project was found for the provided credential."
    )
    QUOTA_EXCEEDED = _auth(
        "quota-exceeded", "The project quota for the specified operation has been exceeded."
    )
    SECOND_FACTOR_LIMIT_EXCEEDED = _auth(
        "second-factor-limit-exceeded",
        "The maximum number of allowed second factors on a user has been exceeded.",
    )
    SECOND_FACTOR_UID_ALREADY_EXISTS = _auth(
        "second-factor-uid-already-exists", 'The specified second factor "uid" already exists.'
    )
    SESSION_COOKIE_EXPIRED = _auth(
        "session-cookie-expired", "The session cookie is expired."
    )
    SESSION_COOKIE_REVOKED = _auth(
        "session-cookie-revoked", "The session cookie has been revoked."
    )
    TENANT_NOT_FOUND = _auth(
        "tenant-not-found", "There is no tenant corresponding to the provided identifier."
    )
    UID_ALREADY_EXISTS = _auth(
        "uid-already-exists", "The user with the provided uid already exists."
    )
    UNAUTHORIZED_DOMAIN = _auth(
        "unauthorized-continue-uri",
        "The domain of the continue URL is not whitelisted.",
    )
    UNSUPPORTED_FIRST_FACTOR = _auth(
        "unsupported-first-factor", "A multi-factor user requires a supported first factor."
    )
    UNSUPPORTED_SECOND_FACTOR = _auth(
        "unsupported-second-factor",
        "The request specified an unsupported type of second factor.",
    )
    UNSUPPORTED_TENANT_OPERATION = _auth(
        "unsupported-tenant-operation",
        "This operation is not supported in a multi-tenant context.",
    )
    UNVERIFIED_EMAIL = _auth(
        "unverified-email", "A verified email is required for the specified action."
    )
    USER_DISABLED = _auth(
        "user-disabled", "The user record is disabled."
    )
    USER_NOT_DISABLED = _auth(
        "user-not-disabled",
        "The user must be disabled in order to bulk delete it (or you must pass force=true).",
    )
    USER_NOT_FOUND = _auth(
        "user-not-found", "There is no user record corresponding to the provided identifier."
    )
