"""Batch user import encoder.

Validation happens in three layers. The batch size and, when any record
carries a password hash, the call-wide hash configuration are checked first
and fail the whole call. Each record is then validated on its own: a record
that fails is dropped from the payload and its error is kept at its
original index. At most one ``accounts:batchCreate`` call is made, and its
per-record errors are mapped back to original indices and merged with the
local ones.
"""

import base64
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..core.config import MAX_IMPORT_BATCH_SIZE
from ..core.dispatcher import RequestDispatcher
from ..core.endpoints import UPLOAD_ACCOUNTS
from ..core.error_codes import AuthErrorCode
from ..core.error_translator import BackendErrorTranslator, split_server_code
from ..core.exceptions import ArgumentError, BackendError, IdAdminError
from ..models.user import ImportMetadata, ProviderProfile, SecondFactor, UserImportRecord
from ..models.user_import import HashConfig, ImportResult, IndexedError
from ..utils.logging_utils import get_logger, log_operation
from ..utils.time_utils import datetime_to_millis, iso_timestamp, parse_utc_date_string
from ..utils.validators import (
    FieldValidator,
    default_validator,
    is_bytes,
    is_list,
    is_number,
)
from .claims import encode_custom_claims

logger = get_logger(__name__)

HMAC_ALGORITHMS = ("HMAC_SHA512", "HMAC_SHA256", "HMAC_SHA1", "HMAC_MD5")
ROUNDS_ALGORITHMS = ("MD5", "SHA1", "SHA256", "SHA512", "PBKDF_SHA1", "PBKDF2_SHA256")

MAX_HASH_ROUNDS = 120000
SCRYPT_ROUNDS_RANGE = (1, 8)
SCRYPT_MEMORY_COST_RANGE = (1, 14)


def to_web_safe_base64(data: bytes) -> str:
    return base64.urlsafe_b64encode(bytes(data)).decode("ascii")


def _in_range(value: Any, low: int, high: int) -> bool:
    return is_number(value) and low <= value <= high


def encode_hash_config(hash_config: HashConfig | None) -> dict[str, Any]:
    """Validate the hash configuration and return its wire options.

    Args:
        hash_config: Hash configuration shared by the batch

    Returns:
        Dict[str, Any]: ``hashAlgorithm`` and its algorithm-specific options

    Raises:
        ArgumentError: If the algorithm is missing or unsupported, or one of
            its parameters is invalid
    """
    if hash_config is None or not hash_config.algorithm:
        raise ArgumentError(
            AuthErrorCode.MISSING_HASH_ALGORITHM,
            '"hash.algorithm" is missing from the provided "UserImportOptions".',
        )

    algorithm = hash_config.algorithm
    options: dict[str, Any] = {"hashAlgorithm": algorithm}

    if algorithm in HMAC_ALGORITHMS:
        if not is_bytes(hash_config.key) or not hash_config.key:
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_KEY,
                f'A non-empty "hash.key" byte buffer must be provided for '
                f"hash algorithm {algorithm}.",
            )
        options["signerKey"] = to_web_safe_base64(hash_config.key)

    elif algorithm in ROUNDS_ALGORITHMS:
        if not _in_range(hash_config.rounds, 0, MAX_HASH_ROUNDS):
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_ROUNDS,
                f'A valid "hash.rounds" number between 0 and {MAX_HASH_ROUNDS} must be '
                f"provided for hash algorithm {algorithm}.",
            )
        options["rounds"] = hash_config.rounds

    elif algorithm == "SCRYPT":
        if not is_bytes(hash_config.key):
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_KEY,
                f'A "hash.key" byte buffer must be provided for hash algorithm {algorithm}.',
            )
        if not _in_range(hash_config.rounds, *SCRYPT_ROUNDS_RANGE):
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_ROUNDS,
                f'A valid "hash.rounds" number between 1 and 8 must be provided for '
                f"hash algorithm {algorithm}.",
            )
        if not _in_range(hash_config.memory_cost, *SCRYPT_MEMORY_COST_RANGE):
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_MEMORY_COST,
                f'A valid "hash.memoryCost" number between 1 and 14 must be provided for '
                f"hash algorithm {algorithm}.",
            )
        salt_separator = hash_config.salt_separator
        if salt_separator is None:
            salt_separator = b""
        if not is_bytes(salt_separator):
            raise ArgumentError(
                AuthErrorCode.INVALID_HASH_SALT_SEPARATOR,
                '"hash.saltSeparator" must be a byte buffer.',
            )
        options["signerKey"] = to_web_safe_base64(hash_config.key)
        options["rounds"] = hash_config.rounds
        options["memoryCost"] = hash_config.memory_cost
        options["saltSeparator"] = to_web_safe_base64(salt_separator)

    elif algorithm == "BCRYPT":
        pass

    elif algorithm == "STANDARD_SCRYPT":
        for attr, name, info, wire in (
            ("memory_cost", "memoryCost", AuthErrorCode.INVALID_HASH_MEMORY_COST, "cpuMemCost"),
            (
                "parallelization",
                "parallelization",
                AuthErrorCode.INVALID_HASH_PARALLELIZATION,
                "parallelization",
            ),
            ("block_size", "blockSize", AuthErrorCode.INVALID_HASH_BLOCK_SIZE, "blockSize"),
            (
                "derived_key_length",
                "derivedKeyLength",
                AuthErrorCode.INVALID_HASH_DERIVED_KEY_LENGTH,
                "dkLen",
            ),
        ):
            value = getattr(hash_config, attr)
            if not is_number(value):
                raise ArgumentError(
                    info,
                    f'A valid "hash.{name}" number must be provided for '
                    f"hash algorithm {algorithm}.",
                )
            options[wire] = value

    else:
        raise ArgumentError(
            AuthErrorCode.INVALID_HASH_ALGORITHM,
            f'Unsupported hash algorithm provider "{algorithm}".',
        )

    return options


def _encode_time(value: Any, info: Any, field_name: str) -> int:
    parsed = parse_utc_date_string(value)
    if parsed is None:
        raise ArgumentError(info, field=field_name, value=value)
    return datetime_to_millis(parsed)


def _encode_provider_profile(
    profile: Any, validator: FieldValidator
) -> dict[str, Any]:
    if isinstance(profile, Mapping):
        profile = ProviderProfile.from_dict(profile)
    if not isinstance(profile, ProviderProfile):
        raise ArgumentError(
            AuthErrorCode.INVALID_PROVIDER_DATA, field="providerData", value=profile
        )

    entry: dict[str, Any] = {
        "rawId": validator.require_provider_uid(profile.uid, "providerData.uid"),
        "providerId": validator.require_provider_id(
            profile.provider_id, "providerData.providerId"
        ),
    }
    if profile.display_name is not None:
        entry["displayName"] = validator.require_display_name(
            profile.display_name, "providerData.displayName"
        )
    if profile.email is not None:
        entry["email"] = validator.require_email(profile.email, "providerData.email")
    if profile.photo_url is not None:
        entry["photoUrl"] = validator.require_photo_url(
            profile.photo_url, "providerData.photoURL"
        )
    if profile.phone_number is not None:
        entry["phoneNumber"] = validator.require_phone_number(
            profile.phone_number, "providerData.phoneNumber"
        )
    return entry


def _encode_second_factor(factor: Any, validator: FieldValidator) -> dict[str, Any]:
    if isinstance(factor, Mapping):
        factor = SecondFactor.from_dict(factor)
    if not isinstance(factor, SecondFactor):
        raise ArgumentError(
            AuthErrorCode.INVALID_ENROLLED_FACTORS,
            field="multiFactor.enrolledFactors",
            value=factor,
        )
    if factor.factor_id != "phone":
        raise ArgumentError(
            AuthErrorCode.UNSUPPORTED_SECOND_FACTOR,
            f'Unsupported second factor "{factor.factor_id}".',
            field="multiFactor.enrolledFactors.factorId",
            value=factor.factor_id,
        )

    entry: dict[str, Any] = {}
    if factor.uid is not None:
        entry["mfaEnrollmentId"] = validator.require_non_empty_string(
            factor.uid, "multiFactor.enrolledFactors.uid", AuthErrorCode.INVALID_UID
        )
    if factor.display_name is not None:
        entry["displayName"] = validator.require_display_name(
            factor.display_name, "multiFactor.enrolledFactors.displayName"
        )
    if factor.enrollment_time is not None:
        parsed = parse_utc_date_string(factor.enrollment_time)
        if parsed is None:
            raise ArgumentError(
                AuthErrorCode.INVALID_ENROLLMENT_TIME,
                field="multiFactor.enrolledFactors.enrollmentTime",
                value=factor.enrollment_time,
            )
        entry["enrolledAt"] = iso_timestamp(parsed)
    entry["phoneInfo"] = validator.require_phone_number(
        factor.phone_number, "multiFactor.enrolledFactors.phoneNumber"
    )
    return entry


def encode_import_record(
    record: UserImportRecord, validator: FieldValidator = default_validator
) -> dict[str, Any]:
    """Validate one record and encode it to its wire form.

    Checks run in a fixed order and the first failure is raised.

    Raises:
        ArgumentError: If any field of the record is invalid
    """
    if isinstance(record, Mapping):
        record = UserImportRecord.from_dict(record)
    if not isinstance(record, UserImportRecord):
        raise ArgumentError(
            AuthErrorCode.INVALID_USER_IMPORT, "Invalid user import record.", value=record
        )

    wire: dict[str, Any] = {"localId": validator.require_uid(record.uid)}

    if record.email is not None:
        wire["email"] = validator.require_email(record.email)
    if record.display_name is not None:
        wire["displayName"] = validator.require_display_name(record.display_name)
    if record.photo_url is not None:
        wire["photoUrl"] = validator.require_photo_url(record.photo_url)
    if record.phone_number is not None:
        wire["phoneNumber"] = validator.require_phone_number(record.phone_number)
    if record.email_verified is not None:
        wire["emailVerified"] = validator.require_email_verified(record.email_verified)
    if record.disabled is not None:
        wire["disabled"] = validator.require_disabled(record.disabled)

    metadata = record.metadata or ImportMetadata()
    if isinstance(metadata, Mapping):
        metadata = ImportMetadata.from_dict(metadata)
    if not isinstance(metadata, ImportMetadata):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            "User metadata must be a valid object.",
            field="metadata",
            value=metadata,
        )
    if metadata.creation_time is not None:
        wire["createdAt"] = _encode_time(
            metadata.creation_time,
            AuthErrorCode.INVALID_CREATION_TIME,
            "metadata.creationTime",
        )
    if metadata.last_sign_in_time is not None:
        wire["lastLoginAt"] = _encode_time(
            metadata.last_sign_in_time,
            AuthErrorCode.INVALID_LAST_SIGN_IN_TIME,
            "metadata.lastSignInTime",
        )

    if record.custom_claims is not None:
        wire["customAttributes"] = encode_custom_claims(record.custom_claims)

    if record.password_hash is not None:
        wire["passwordHash"] = to_web_safe_base64(
            validator.require_bytes(
                record.password_hash, "passwordHash", AuthErrorCode.INVALID_PASSWORD_HASH
            )
        )
    if record.password_salt is not None:
        wire["salt"] = to_web_safe_base64(
            validator.require_bytes(
                record.password_salt, "passwordSalt", AuthErrorCode.INVALID_PASSWORD_SALT
            )
        )

    if record.provider_data is not None:
        if not is_list(record.provider_data):
            raise ArgumentError(
                AuthErrorCode.INVALID_PROVIDER_DATA,
                field="providerData",
                value=record.provider_data,
            )
        wire["providerUserInfo"] = [
            _encode_provider_profile(profile, validator)
            for profile in record.provider_data
        ]

    if record.multi_factor is not None:
        enrolled = (
            record.multi_factor.get("enrolledFactors")
            if isinstance(record.multi_factor, Mapping)
            else None
        )
        if not is_list(enrolled):
            raise ArgumentError(
                AuthErrorCode.INVALID_ENROLLED_FACTORS,
                field="multiFactor",
                value=record.multi_factor,
            )
        wire["mfaInfo"] = [_encode_second_factor(factor, validator) for factor in enrolled]

    if record.tenant_id is not None:
        wire["tenantId"] = validator.require_tenant_id(record.tenant_id)

    return wire


@dataclass
class EncodedImport:
    """Payload for one upload call plus the bookkeeping to read its result."""

    total: int
    payload: dict[str, Any]
    sent_indices: list[int] = field(default_factory=list)
    local_errors: list[IndexedError] = field(default_factory=list)

    @property
    def has_records(self) -> bool:
        return bool(self.sent_indices)


def encode_import(
    records: Sequence[UserImportRecord],
    hash_config: HashConfig | None = None,
    validator: FieldValidator = default_validator,
    max_batch_size: int = MAX_IMPORT_BATCH_SIZE,
) -> EncodedImport:
    """Encode a batch for ``accounts:batchCreate``.

    Raises:
        ArgumentError: If the batch is too large or the hash configuration is
            missing or invalid while a record carries a password hash
    """
    if not is_list(records):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            "Users to import must be provided as a list.",
        )
    if len(records) > max_batch_size:
        raise ArgumentError(
            AuthErrorCode.MAXIMUM_USER_COUNT_EXCEEDED,
            f"A maximum of {max_batch_size} users can be imported at once.",
        )

    payload: dict[str, Any] = {}
    if any(_password_hash(record) is not None for record in records):
        payload.update(encode_hash_config(hash_config))

    users: list[dict[str, Any]] = []
    encoded = EncodedImport(total=len(records), payload=payload)
    for index, record in enumerate(records):
        try:
            users.append(encode_import_record(record, validator))
        except ArgumentError as e:
            encoded.local_errors.append(IndexedError(index=index, error=e))
            continue
        encoded.sent_indices.append(index)

    payload["users"] = users
    return encoded


def _password_hash(record: Any) -> Any:
    if isinstance(record, Mapping):
        return record.get("passwordHash", record.get("password_hash"))
    return getattr(record, "password_hash", None)


def build_import_result(
    encoded: EncodedImport,
    server_errors: Sequence[Mapping[str, Any]] | None,
    translator: BackendErrorTranslator | None = None,
) -> ImportResult:
    """Merge local and server errors into one result ordered by index.

    Server error indices refer to positions in the sent payload and are
    mapped back to positions in the original input.
    """
    errors = list(encoded.local_errors)
    for server_error in server_errors or []:
        sent_index = server_error.get("index")
        if not isinstance(sent_index, int) or not 0 <= sent_index < len(encoded.sent_indices):
            logger.warning(
                f"Ignoring import error with unexpected index: {server_error}",
                extra={"operation": UPLOAD_ACCOUNTS.name},
            )
            continue
        errors.append(
            IndexedError(
                index=encoded.sent_indices[sent_index],
                error=_import_error(server_error.get("message"), translator),
            )
        )

    errors.sort(key=lambda entry: entry.index)
    return ImportResult(
        success_count=encoded.total - len(errors),
        failure_count=len(errors),
        errors=errors,
    )


def _import_error(
    message: Any, translator: BackendErrorTranslator | None
) -> IdAdminError:
    text = message if isinstance(message, str) else ""
    if translator is not None:
        server_code, detail = split_server_code(text)
        info = translator.lookup(server_code)
        if info is not None:
            return BackendError(info, message=detail, server_code=server_code)
    return BackendError(AuthErrorCode.INVALID_USER_IMPORT, message=text or None)


@log_operation("import_users")
def import_users(
    dispatcher: RequestDispatcher,
    records: Sequence[UserImportRecord],
    hash_config: HashConfig | None = None,
    validator: FieldValidator = default_validator,
) -> ImportResult:
    """Import up to 1000 accounts with at most one backend call.

    Args:
        dispatcher: Request dispatcher
        records: Accounts to import
        hash_config: Hash configuration, required when any record has a
            password hash
        validator: Field validator set

    Returns:
        ImportResult: Success and failure counts with per-index errors
    """
    encoded = encode_import(records, hash_config, validator)

    if not encoded.has_records:
        logger.info(
            f"No valid records to import out of {encoded.total}",
            extra={"operation": UPLOAD_ACCOUNTS.name},
        )
        return build_import_result(encoded, [])

    response = dispatcher.invoke(UPLOAD_ACCOUNTS, encoded.payload)
    result = build_import_result(encoded, response.get("error"), dispatcher.translator)
    logger.info(
        f"Imported {result.success_count} users, {result.failure_count} failed",
        extra={"operation": UPLOAD_ACCOUNTS.name},
    )
    return result
