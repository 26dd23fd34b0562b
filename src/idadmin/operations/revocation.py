"""Revocation and tenant checks applied to verified session artifacts.

Signature and claim verification are done by an injected token verifier.
The checks here run on the decoded claims, in this order: tenant, then the
optional revocation lookup.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.error_codes import AuthErrorCode, ErrorInfo
from ..core.exceptions import TokenRejectedError
from ..models.user import AccountRecord
from ..utils.logging_utils import get_logger
from ..utils.validators import is_number

logger = get_logger(__name__)


class VerificationStage(Enum):
    DECODED = "decoded"
    TENANT_CHECKED = "tenant_checked"
    REVOCATION_CHECKED = "revocation_checked"
    ACCEPTED = "accepted"


class ArtifactKind(Enum):
    """Kind of session artifact, selecting the error raised on revocation."""

    ID_TOKEN = "id_token"
    SESSION_COOKIE = "session_cookie"

    @property
    def revoked_error(self) -> ErrorInfo:
        if self is ArtifactKind.SESSION_COOKIE:
            return AuthErrorCode.SESSION_COOKIE_REVOKED
        return AuthErrorCode.ID_TOKEN_REVOKED


@dataclass
class VerificationState:
    """Decoded claims and how far they have progressed through the checks."""

    claims: dict[str, Any]
    stage: VerificationStage = VerificationStage.DECODED
    history: list[VerificationStage] = field(default_factory=list)

    def advance(self, stage: VerificationStage) -> None:
        self.history.append(self.stage)
        self.stage = stage


def revocation_cutoff_seconds(tokens_valid_after_millis: int | None) -> int | None:
    """Round a millisecond cutoff up to whole seconds."""
    if tokens_valid_after_millis is None:
        return None
    return -(-int(tokens_valid_after_millis) // 1000)


def is_revoked(issued_at_seconds: Any, tokens_valid_after_millis: int | None) -> bool:
    """Check whether a token issued at a given time predates the cutoff.

    Args:
        issued_at_seconds: Issuance time of the token, epoch seconds
        tokens_valid_after_millis: Cutoff of the account, or None

    Returns:
        bool: True only when a cutoff exists and the token was issued
        strictly before it
    """
    cutoff = revocation_cutoff_seconds(tokens_valid_after_millis)
    if cutoff is None:
        return False
    return issued_at_seconds < cutoff


def check_tenant(claims: Mapping[str, Any], expected_tenant_id: str | None) -> None:
    """Reject claims issued for another tenant.

    Raises:
        TokenRejectedError: If a tenant is expected and the ``firebase.tenant``
            claim is missing or different
    """
    if expected_tenant_id is None:
        return
    firebase_claims = claims.get("firebase")
    tenant = firebase_claims.get("tenant") if isinstance(firebase_claims, Mapping) else None
    if tenant != expected_tenant_id:
        raise TokenRejectedError(AuthErrorCode.MISMATCHING_TENANT_ID)


class RevocationChecker:
    """Runs the tenant and revocation checks over decoded claims.

    Args:
        lookup_account: Fetches the account of a uid; used only when the
            revocation check is requested
        tenant_id: Tenant the claims must belong to, or None for the
            project-level scope
    """

    def __init__(
        self,
        lookup_account: Callable[[str], AccountRecord],
        tenant_id: str | None = None,
    ) -> None:
        self.lookup_account = lookup_account
        self.tenant_id = tenant_id

    def check(
        self,
        claims: Mapping[str, Any],
        kind: ArtifactKind = ArtifactKind.ID_TOKEN,
        check_revoked: bool = False,
    ) -> VerificationState:
        """Move decoded claims through the checks until accepted.

        Raises:
            TokenRejectedError: On tenant mismatch, a disabled account or a
                revoked artifact
        """
        state = VerificationState(claims=dict(claims))

        check_tenant(state.claims, self.tenant_id)
        state.advance(VerificationStage.TENANT_CHECKED)

        if check_revoked:
            self._check_revocation(state.claims, kind)
            state.advance(VerificationStage.REVOCATION_CHECKED)

        state.advance(VerificationStage.ACCEPTED)
        return state

    def _check_revocation(self, claims: Mapping[str, Any], kind: ArtifactKind) -> None:
        uid = claims.get("sub") or claims.get("uid")
        account = self.lookup_account(uid)

        if account.disabled:
            logger.info(
                "Rejecting artifact of disabled account",
                extra={"operation": "check_revoked", "uid": uid},
            )
            raise TokenRejectedError(AuthErrorCode.USER_DISABLED)

        auth_time = claims.get("auth_time")
        if not is_number(auth_time):
            raise TokenRejectedError(
                AuthErrorCode.INVALID_ID_TOKEN,
                'Decoded claims are missing a numeric "auth_time".',
            )

        if is_revoked(auth_time, account.tokens_valid_after_millis):
            logger.info(
                f"Rejecting revoked {kind.value}",
                extra={"operation": "check_revoked", "uid": uid},
            )
            raise TokenRejectedError(kind.revoked_error)
