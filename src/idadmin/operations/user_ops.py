"""Typed account operations over the request dispatcher."""

import time
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from ..core.config import (
    MAX_DELETE_BATCH_SIZE,
    MAX_LOOKUP_IDENTIFIERS,
    MAX_SESSION_COOKIE_DURATION_MS,
    MIN_SESSION_COOKIE_DURATION_MS,
)
from ..core.dispatcher import RequestDispatcher
from ..core.endpoints import (
    BATCH_DELETE_ACCOUNTS,
    CREATE_ACCOUNT,
    CREATE_SESSION_COOKIE,
    DELETE_ACCOUNT,
    LOOKUP_ACCOUNTS,
    LOOKUP_ACCOUNTS_BY_IDENTIFIERS,
    UPDATE_ACCOUNT,
)
from ..core.error_codes import AuthErrorCode
from ..core.error_translator import split_server_code
from ..core.exceptions import (
    ArgumentError,
    AuthConfigError,
    BackendError,
    IdAdminError,
    ProtocolError,
)
from ..core.interfaces import TokenVerifierProtocol
from ..models.field_maps import DELETABLE_ATTRIBUTES, UPDATE_WIRE_RENAMES, USER_FIELDS
from ..models.fields import FieldState
from ..models.page import PageResult
from ..models.user import (
    AccountRecord,
    EmailIdentifier,
    GetUsersResult,
    PhoneIdentifier,
    ProviderIdentifier,
    UidIdentifier,
    UserCreate,
    UserIdentifier,
    UserImportRecord,
    UserUpdate,
    identifier_matches,
)
from ..models.user_import import DeleteUsersResult, HashConfig, ImportResult, IndexedError
from ..utils.logging_utils import get_logger, log_operation
from ..utils.validators import FieldValidator, default_validator, is_list, is_number
from .action_code import (
    EMAIL_SIGNIN,
    PASSWORD_RESET,
    VERIFY_EMAIL,
    ActionCodeSettings,
    generate_email_action_link,
)
from .claims import encode_custom_claims
from .pagination import ACCOUNT_EXPORT, fetch_page, iterate_all
from .revocation import ArtifactKind, RevocationChecker
from .user_import import import_users

logger = get_logger(__name__)

_WIRE_NAMES = {spec.attr: spec.wire for spec in USER_FIELDS}


class UserManager:
    """Account management operations for one project or tenant scope."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        validator: FieldValidator = default_validator,
        token_verifier: TokenVerifierProtocol | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            dispatcher: Dispatcher bound to the project or tenant path
            validator: Field validator set
            token_verifier: Verifier decoding ID tokens and session cookies
        """
        self.dispatcher = dispatcher
        self.validator = validator
        self.token_verifier = token_verifier

    @property
    def tenant_id(self) -> str | None:
        return self.dispatcher.tenant_id

    # Lookups

    def get_user(self, uid: Any) -> AccountRecord:
        """Get an account by uid.

        Raises:
            ArgumentError: If the uid is invalid
            BackendError: ``user-not-found`` if no account has this uid
        """
        self.validator.require_uid(uid)
        return self._lookup({"localId": [uid]})

    def get_user_by_email(self, email: Any) -> AccountRecord:
        self.validator.require_email(email)
        return self._lookup({"email": [email]})

    def get_user_by_phone_number(self, phone_number: Any) -> AccountRecord:
        self.validator.require_phone_number(phone_number)
        return self._lookup({"phoneNumber": [phone_number]})

    def _lookup(self, payload: dict[str, Any]) -> AccountRecord:
        response = self.dispatcher.invoke(LOOKUP_ACCOUNTS, payload)
        return AccountRecord.from_response(response["users"][0])

    def get_users(self, identifiers: Sequence[UserIdentifier]) -> GetUsersResult:
        """Look up to 100 accounts by mixed identifiers in one call.

        Args:
            identifiers: Uid, email, phone or provider identifiers

        Returns:
            GetUsersResult: Accounts found and the identifiers that matched
            no account
        """
        if not is_list(identifiers):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT,
                "`identifiers` parameter must be a list.",
            )
        if len(identifiers) > MAX_LOOKUP_IDENTIFIERS:
            raise ArgumentError(
                AuthErrorCode.MAXIMUM_USER_COUNT_EXCEEDED,
                f"`identifiers` parameter must have <= {MAX_LOOKUP_IDENTIFIERS} entries.",
            )
        if not identifiers:
            return GetUsersResult()

        payload: dict[str, list[Any]] = {}
        for identifier in identifiers:
            key, value = self._encode_identifier(identifier)
            payload.setdefault(key, []).append(value)

        response = self.dispatcher.invoke(LOOKUP_ACCOUNTS_BY_IDENTIFIERS, payload)
        users = [AccountRecord.from_response(entry) for entry in response.get("users") or []]
        not_found = [
            identifier
            for identifier in identifiers
            if not any(identifier_matches(identifier, user) for user in users)
        ]
        return GetUsersResult(users=users, not_found=not_found)

    def _encode_identifier(self, identifier: UserIdentifier) -> tuple[str, Any]:
        if isinstance(identifier, UidIdentifier):
            return "localId", self.validator.require_uid(identifier.uid)
        if isinstance(identifier, EmailIdentifier):
            return "email", self.validator.require_email(identifier.email)
        if isinstance(identifier, PhoneIdentifier):
            return "phoneNumber", self.validator.require_phone_number(identifier.phone_number)
        if isinstance(identifier, ProviderIdentifier):
            return "federatedUserId", {
                "providerId": self.validator.require_provider_id(identifier.provider_id),
                "rawId": self.validator.require_provider_uid(identifier.provider_uid),
            }
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            "Unsupported user identifier type.",
            value=identifier,
        )

    # Writes

    def create_user(self, properties: UserCreate | Mapping[str, Any]) -> AccountRecord:
        """Create an account and return it as stored by the backend.

        Raises:
            ArgumentError: If a property is invalid
            BackendError: ``internal-error`` if the new account cannot be read
                back
        """
        if not isinstance(properties, UserCreate):
            properties = UserCreate.from_dict(properties)
        payload = self._encode_create(properties)

        response = self.dispatcher.invoke(CREATE_ACCOUNT, payload)
        uid = response["localId"]
        logger.info(f"Created user {uid}", extra={"operation": CREATE_ACCOUNT.name, "uid": uid})

        try:
            return self.get_user(uid)
        except BackendError as e:
            if e.has_code("user-not-found"):
                raise BackendError(
                    AuthErrorCode.INTERNAL_ERROR,
                    "Unable to create the user record provided.",
                ) from e
            raise

    def _encode_create(self, properties: UserCreate) -> dict[str, Any]:
        v = self.validator
        checks = {
            "uid": v.require_uid,
            "email": v.require_email,
            "email_verified": v.require_email_verified,
            "display_name": v.require_display_name,
            "photo_url": v.require_photo_url,
            "phone_number": v.require_phone_number,
            "password": v.require_password,
            "disabled": v.require_disabled,
        }
        payload: dict[str, Any] = {}
        for attr, value in properties.supplied().items():
            payload[_WIRE_NAMES[attr]] = checks[attr](value)
        return payload

    def update_user(self, uid: Any, update: UserUpdate | Mapping[str, Any]) -> AccountRecord:
        """Apply a partial update and return the updated account.

        ``CLEAR`` on the display name or photo URL becomes a
        ``deleteAttribute`` entry; on the phone number, a ``deleteProvider``
        entry for ``phone``.

        Raises:
            ArgumentError: If the uid or a property is invalid, or a field that
                cannot be removed is cleared
            BackendError: ``user-not-found`` if no account has this uid
        """
        self.validator.require_uid(uid)
        if not isinstance(update, UserUpdate):
            update = UserUpdate.from_dict(update)

        payload: dict[str, Any] = {"localId": uid}
        payload.update(self._encode_update(update))

        self.dispatcher.invoke(UPDATE_ACCOUNT, payload)
        logger.info(f"Updated user {uid}", extra={"operation": UPDATE_ACCOUNT.name, "uid": uid})
        return self.get_user(uid)

    def _encode_update(self, update: UserUpdate) -> dict[str, Any]:
        v = self.validator
        checks = {
            "email": v.require_email,
            "email_verified": v.require_email_verified,
            "display_name": v.require_display_name,
            "photo_url": v.require_photo_url,
            "phone_number": v.require_phone_number,
            "password": v.require_password,
            "disabled": v.require_disabled,
        }
        payload: dict[str, Any] = {}
        delete_attributes: list[str] = []
        delete_providers: list[str] = []

        for attr, value in update.supplied().items():
            if value is FieldState.CLEAR:
                if attr in DELETABLE_ATTRIBUTES:
                    delete_attributes.append(DELETABLE_ATTRIBUTES[attr])
                elif attr == "phone_number":
                    delete_providers.append("phone")
                else:
                    raise ArgumentError(
                        AuthErrorCode.INVALID_ARGUMENT,
                        f'"{attr}" cannot be removed from a user.',
                        field=attr,
                    )
                continue
            wire_name = UPDATE_WIRE_RENAMES.get(attr, _WIRE_NAMES[attr])
            payload[wire_name] = checks[attr](value)

        if delete_attributes:
            payload["deleteAttribute"] = delete_attributes
        if delete_providers:
            payload["deleteProvider"] = delete_providers
        return payload

    def set_custom_user_claims(self, uid: Any, claims: Mapping[str, Any] | None) -> None:
        """Replace the developer claims of an account; None removes them all."""
        self.validator.require_uid(uid)
        payload = {
            "localId": uid,
            "customAttributes": encode_custom_claims({} if claims is None else claims),
        }
        self.dispatcher.invoke(UPDATE_ACCOUNT, payload)
        logger.info(
            f"Set custom claims for user {uid}",
            extra={"operation": "set_custom_user_claims", "uid": uid},
        )

    def revoke_refresh_tokens(self, uid: Any) -> None:
        """Invalidate every refresh token issued before now."""
        self.validator.require_uid(uid)
        payload = {"localId": uid, "validSince": int(time.time())}
        self.dispatcher.invoke(UPDATE_ACCOUNT, payload)
        logger.info(
            f"Revoked refresh tokens for user {uid}",
            extra={"operation": "revoke_refresh_tokens", "uid": uid},
        )

    def delete_user(self, uid: Any) -> None:
        self.validator.require_uid(uid)
        self.dispatcher.invoke(DELETE_ACCOUNT, {"localId": uid})
        logger.info(f"Deleted user {uid}", extra={"operation": DELETE_ACCOUNT.name, "uid": uid})

    @log_operation("delete_users")
    def delete_users(self, uids: Sequence[Any]) -> DeleteUsersResult:
        """Delete up to 1000 accounts in one call, whether or not they are disabled.

        Args:
            uids: Uids to delete

        Returns:
            DeleteUsersResult: Counts plus per-index errors

        Raises:
            ArgumentError: If there are too many uids or one is invalid
        """
        if not is_list(uids):
            raise ArgumentError(
                AuthErrorCode.INVALID_ARGUMENT, "`uids` parameter must be a list."
            )
        if len(uids) > MAX_DELETE_BATCH_SIZE:
            raise ArgumentError(
                AuthErrorCode.MAXIMUM_USER_COUNT_EXCEEDED,
                f"`uids` parameter must have <= {MAX_DELETE_BATCH_SIZE} entries.",
            )
        for uid in uids:
            self.validator.require_uid(uid)
        if not uids:
            return DeleteUsersResult()

        response = self.dispatcher.invoke(
            BATCH_DELETE_ACCOUNTS, {"localIds": list(uids), "force": True}
        )

        errors = []
        for entry in response.get("errors") or []:
            index = entry.get("index")
            if not isinstance(index, int) or not 0 <= index < len(uids):
                raise ProtocolError(
                    "INTERNAL ASSERT FAILED: Corrupt batchDeleteAccounts response",
                    details=str(entry),
                )
            errors.append(IndexedError(index=index, error=self._delete_error(entry.get("message"))))
        errors.sort(key=lambda entry: entry.index)

        result = DeleteUsersResult(
            success_count=len(uids) - len(errors),
            failure_count=len(errors),
            errors=errors,
        )
        logger.info(
            f"Deleted {result.success_count} users, {result.failure_count} failed",
            extra={"operation": BATCH_DELETE_ACCOUNTS.name},
        )
        return result

    def _delete_error(self, message: Any) -> IdAdminError:
        text = message if isinstance(message, str) else ""
        if text.startswith("NOT_DISABLED"):
            return BackendError(AuthErrorCode.USER_NOT_DISABLED, text, server_code="NOT_DISABLED")
        server_code, detail = split_server_code(text)
        info = self.dispatcher.translator.lookup(server_code)
        if info is not None:
            return BackendError(info, detail, server_code=server_code)
        return BackendError(AuthErrorCode.INTERNAL_ERROR, text or None)

    # Export and import

    def list_users(
        self, max_results: Any = None, page_token: Any = None
    ) -> PageResult[AccountRecord]:
        """Fetch one page of accounts (at most 1000)."""
        return fetch_page(
            self.dispatcher,
            ACCOUNT_EXPORT,
            AccountRecord.from_response,
            max_results=max_results,
            page_token=page_token,
        )

    def iterate_users(self, page_size: Any = None, limit: int | None = None) -> Iterator[AccountRecord]:
        """Yield accounts across pages, one backend call per page."""
        return iterate_all(
            lambda token: self.list_users(max_results=page_size, page_token=token),
            limit=limit,
        )

    def import_users(
        self,
        records: Sequence[UserImportRecord],
        hash_config: HashConfig | None = None,
    ) -> ImportResult:
        return import_users(self.dispatcher, records, hash_config, self.validator)

    # Session artifacts

    def create_session_cookie(self, id_token: Any, expires_in_ms: Any) -> str:
        """Exchange an ID token for a session cookie.

        Args:
            id_token: ID token to exchange
            expires_in_ms: Cookie lifetime, between 5 minutes and 14 days

        Returns:
            str: Session cookie

        Raises:
            BackendError: ``unsupported-tenant-operation`` for tenant scopes
            ArgumentError: If the token or duration is invalid
        """
        if self.tenant_id is not None:
            raise BackendError(AuthErrorCode.UNSUPPORTED_TENANT_OPERATION)
        if (
            not is_number(expires_in_ms)
            or expires_in_ms < MIN_SESSION_COOKIE_DURATION_MS
            or expires_in_ms > MAX_SESSION_COOKIE_DURATION_MS
        ):
            raise ArgumentError(
                AuthErrorCode.INVALID_SESSION_COOKIE_DURATION,
                field="expiresIn",
                value=expires_in_ms,
            )

        seconds = expires_in_ms / 1000
        payload = {
            "idToken": id_token,
            "validDuration": int(seconds) if float(seconds).is_integer() else seconds,
        }
        response = self.dispatcher.invoke(CREATE_SESSION_COOKIE, payload)
        return response["sessionCookie"]

    def verify_id_token(self, id_token: str, check_revoked: bool = False) -> dict[str, Any]:
        """Verify an ID token and run the tenant and optional revocation checks."""
        verifier = self._require_verifier()
        claims = verifier.verify_id_token(id_token)
        return self._checker().check(claims, ArtifactKind.ID_TOKEN, check_revoked).claims

    def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = False
    ) -> dict[str, Any]:
        verifier = self._require_verifier()
        claims = verifier.verify_session_cookie(session_cookie)
        return self._checker().check(claims, ArtifactKind.SESSION_COOKIE, check_revoked).claims

    def _require_verifier(self) -> TokenVerifierProtocol:
        if self.token_verifier is None:
            raise AuthConfigError("A token verifier must be configured to verify tokens")
        return self.token_verifier

    def _checker(self) -> RevocationChecker:
        return RevocationChecker(self.get_user, tenant_id=self.tenant_id)

    # Email action links

    def generate_password_reset_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any] | None = None
    ) -> str:
        return generate_email_action_link(self.dispatcher, PASSWORD_RESET, email, settings)

    def generate_email_verification_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any] | None = None
    ) -> str:
        return generate_email_action_link(self.dispatcher, VERIFY_EMAIL, email, settings)

    def generate_sign_in_with_email_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any]
    ) -> str:
        return generate_email_action_link(self.dispatcher, EMAIL_SIGNIN, email, settings)
