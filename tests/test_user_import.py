"""Tests for the batch user import encoder."""

import time

import pytest

from idadmin.core.error_codes import AuthErrorCode
from idadmin.core.exceptions import ArgumentError
from idadmin.models.user import (
    ImportMetadata,
    ProviderProfile,
    SecondFactor,
    UserImportRecord,
)
from idadmin.models.user_import import HashConfig
from idadmin.operations.user_import import (
    encode_hash_config,
    encode_import,
    encode_import_record,
    import_users,
    to_web_safe_base64,
)


class TestEncodeHashConfig:
    """Test validation of the call-wide hash configuration."""

    def test_missing_algorithm(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(None)

        assert exc_info.value.code == AuthErrorCode.MISSING_HASH_ALGORITHM.code

    def test_unknown_algorithm(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(HashConfig(algorithm="ROT13"))

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_ALGORITHM.code

    def test_hmac_requires_key(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(HashConfig(algorithm="HMAC_SHA256", key=b""))

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_KEY.code

    def test_hmac_key_is_web_safe_base64(self):
        options = encode_hash_config(HashConfig(algorithm="HMAC_SHA256", key=b"\xfb\xff"))

        assert options == {"hashAlgorithm": "HMAC_SHA256", "signerKey": "-_8="}

    @pytest.mark.parametrize("rounds", [0, 120000])
    def test_rounds_bounds_accepted(self, rounds):
        options = encode_hash_config(HashConfig(algorithm="PBKDF2_SHA256", rounds=rounds))

        assert options == {"hashAlgorithm": "PBKDF2_SHA256", "rounds": rounds}

    @pytest.mark.parametrize("rounds", [-1, 120001, None, "8"])
    def test_rounds_out_of_range(self, rounds):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(HashConfig(algorithm="SHA256", rounds=rounds))

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_ROUNDS.code

    def test_scrypt(self):
        options = encode_hash_config(
            HashConfig(algorithm="SCRYPT", key=b"key", rounds=8, memory_cost=14)
        )

        assert options == {
            "hashAlgorithm": "SCRYPT",
            "signerKey": to_web_safe_base64(b"key"),
            "rounds": 8,
            "memoryCost": 14,
            "saltSeparator": "",
        }

    def test_scrypt_memory_cost_bound(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(
                HashConfig(algorithm="SCRYPT", key=b"key", rounds=8, memory_cost=15)
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_MEMORY_COST.code

    def test_scrypt_salt_separator_must_be_bytes(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(
                HashConfig(
                    algorithm="SCRYPT", key=b"key", rounds=1, memory_cost=1, salt_separator="x"
                )
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_SALT_SEPARATOR.code

    def test_standard_scrypt(self):
        options = encode_hash_config(
            HashConfig(
                algorithm="STANDARD_SCRYPT",
                memory_cost=1024,
                parallelization=16,
                block_size=8,
                derived_key_length=64,
            )
        )

        assert options == {
            "hashAlgorithm": "STANDARD_SCRYPT",
            "cpuMemCost": 1024,
            "parallelization": 16,
            "blockSize": 8,
            "dkLen": 64,
        }

    def test_standard_scrypt_parallelization(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_hash_config(
                HashConfig(
                    algorithm="STANDARD_SCRYPT",
                    memory_cost=1024,
                    block_size=8,
                    derived_key_length=64,
                )
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_PARALLELIZATION.code

    def test_bcrypt_needs_no_parameters(self):
        assert encode_hash_config(HashConfig(algorithm="BCRYPT")) == {"hashAlgorithm": "BCRYPT"}


class TestEncodeImportRecord:
    """Test per-record validation and encoding."""

    def test_full_record(self):
        record = UserImportRecord(
            uid="uid1",
            email="user@example.com",
            email_verified=True,
            display_name="User",
            photo_url="https://example.com/photo.png",
            phone_number="+15555550100",
            disabled=False,
            metadata=ImportMetadata(creation_time="Tue, 02 Jan 2024 03:04:05 GMT"),
            provider_data=[
                ProviderProfile(uid="g-1", provider_id="google.com", email="user@example.com")
            ],
            custom_claims={"admin": True},
            password_hash=b"hash",
            password_salt=b"salt",
            tenant_id="tenant-1",
        )

        wire = encode_import_record(record)

        assert wire == {
            "localId": "uid1",
            "email": "user@example.com",
            "displayName": "User",
            "photoUrl": "https://example.com/photo.png",
            "phoneNumber": "+15555550100",
            "emailVerified": True,
            "disabled": False,
            "createdAt": 1704164645000,
            "customAttributes": '{"admin":true}',
            "passwordHash": to_web_safe_base64(b"hash"),
            "salt": to_web_safe_base64(b"salt"),
            "providerUserInfo": [
                {"rawId": "g-1", "providerId": "google.com", "email": "user@example.com"}
            ],
            "tenantId": "tenant-1",
        }

    def test_from_caller_dict(self):
        wire = encode_import_record(
            {
                "uid": "uid1",
                "photoURL": "https://example.com/p.png",
                "metadata": {"lastSignInTime": "2024-01-02T03:04:05Z"},
                "providerData": [{"uid": "g-1", "providerId": "google.com"}],
            }
        )

        assert wire["photoUrl"] == "https://example.com/p.png"
        assert wire["lastLoginAt"] == 1704164645000
        assert wire["providerUserInfo"] == [{"rawId": "g-1", "providerId": "google.com"}]

    def test_unknown_dict_key(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record({"uid": "uid1", "nickname": "x"})

        assert exc_info.value.code == AuthErrorCode.INVALID_ARGUMENT.code

    def test_invalid_creation_time(self):
        record = UserImportRecord(uid="uid1", metadata=ImportMetadata(creation_time="yesterday"))

        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(record)

        assert exc_info.value.code == AuthErrorCode.INVALID_CREATION_TIME.code

    def test_reserved_claim(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(UserImportRecord(uid="uid1", custom_claims={"sub": "x"}))

        assert exc_info.value.code == AuthErrorCode.FORBIDDEN_CLAIM.code

    def test_password_hash_must_be_bytes(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(UserImportRecord(uid="uid1", password_hash="hash"))

        assert exc_info.value.code == AuthErrorCode.INVALID_PASSWORD_HASH.code

    def test_provider_data_must_be_list(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(UserImportRecord(uid="uid1", provider_data="google.com"))

        assert exc_info.value.code == AuthErrorCode.INVALID_PROVIDER_DATA.code

    def test_provider_profile_needs_provider_id(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(
                UserImportRecord(uid="uid1", provider_data=[ProviderProfile(uid="g-1")])
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_PROVIDER_ID.code

    def test_enrolled_second_factor(self):
        wire = encode_import_record(
            {
                "uid": "uid1",
                "multiFactor": {
                    "enrolledFactors": [
                        {
                            "uid": "mfa-1",
                            "phoneNumber": "+15555550100",
                            "displayName": "Work phone",
                            "enrollmentTime": "Tue, 02 Jan 2024 03:04:05 GMT",
                            "factorId": "phone",
                        }
                    ]
                },
            }
        )

        assert wire["mfaInfo"] == [
            {
                "mfaEnrollmentId": "mfa-1",
                "displayName": "Work phone",
                "enrolledAt": "2024-01-02T03:04:05.000Z",
                "phoneInfo": "+15555550100",
            }
        ]

    def test_second_factor_record_instance(self):
        record = UserImportRecord(
            uid="uid1",
            multi_factor={
                "enrolledFactors": [SecondFactor(phone_number="+15555550100", factor_id="phone")]
            },
        )

        assert encode_import_record(record)["mfaInfo"] == [{"phoneInfo": "+15555550100"}]

    def test_enrolled_factors_must_be_list(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record({"uid": "uid1", "multiFactor": {"enrolledFactors": "phone"}})

        assert exc_info.value.code == AuthErrorCode.INVALID_ENROLLED_FACTORS.code

    def test_unsupported_second_factor(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(
                {
                    "uid": "uid1",
                    "multiFactor": {
                        "enrolledFactors": [{"phoneNumber": "+15555550100", "factorId": "totp"}]
                    },
                }
            )

        assert exc_info.value.code == AuthErrorCode.UNSUPPORTED_SECOND_FACTOR.code

    def test_invalid_enrollment_time(self):
        factor = SecondFactor(
            phone_number="+15555550100", enrollment_time="last week", factor_id="phone"
        )

        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record(
                UserImportRecord(uid="uid1", multi_factor={"enrolledFactors": [factor]})
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_ENROLLMENT_TIME.code

    def test_not_a_record(self):
        with pytest.raises(ArgumentError) as exc_info:
            encode_import_record("uid1")

        assert exc_info.value.code == AuthErrorCode.INVALID_USER_IMPORT.code


class TestEncodeImport:
    def test_too_many_records(self):
        records = [UserImportRecord(uid=f"u{i}") for i in range(1001)]

        with pytest.raises(ArgumentError) as exc_info:
            encode_import(records)

        assert exc_info.value.code == AuthErrorCode.MAXIMUM_USER_COUNT_EXCEEDED.code

    def test_hash_config_ignored_without_hashes(self):
        encoded = encode_import([UserImportRecord(uid="u1")], HashConfig(algorithm="ROT13"))

        assert encoded.payload == {"users": [{"localId": "u1"}]}

    def test_local_errors_keep_original_index(self):
        encoded = encode_import(
            [UserImportRecord(uid="u0"), UserImportRecord(uid=""), UserImportRecord(uid="u2")]
        )

        assert encoded.sent_indices == [0, 2]
        assert [entry.index for entry in encoded.local_errors] == [1]
        assert [user["localId"] for user in encoded.payload["users"]] == ["u0", "u2"]

    def test_long_invalid_photo_url_rejected_quickly(self):
        start = time.monotonic()

        encoded = encode_import([{"uid": "u1", "photoURL": "https://" + "a" * 40 + "$/"}])

        assert time.monotonic() - start < 1.0
        assert encoded.payload["users"] == []
        assert encoded.local_errors[0].index == 0
        assert encoded.local_errors[0].error.code == AuthErrorCode.INVALID_PHOTO_URL.code

    def test_malformed_second_factor_is_local_error(self):
        encoded = encode_import(
            [
                UserImportRecord(uid="u0"),
                {
                    "uid": "u1",
                    "multiFactor": {
                        "enrolledFactors": [{"phoneNumber": "not-a-phone", "factorId": "phone"}]
                    },
                },
            ]
        )

        assert encoded.sent_indices == [0]
        assert [entry.index for entry in encoded.local_errors] == [1]
        assert encoded.local_errors[0].error.code == AuthErrorCode.INVALID_PHONE_NUMBER.code


class TestImportUsers:
    """Test the full import call."""

    def test_too_many_records_makes_no_call(self, dispatcher, transport):
        records = [UserImportRecord(uid=f"u{i}") for i in range(1001)]

        with pytest.raises(ArgumentError):
            import_users(dispatcher, records)

        assert transport.requests == []

    def test_unknown_algorithm_makes_no_call(self, dispatcher, transport):
        records = [UserImportRecord(uid="u1", password_hash=b"hash")]

        with pytest.raises(ArgumentError) as exc_info:
            import_users(dispatcher, records, HashConfig(algorithm="ROT13"))

        assert exc_info.value.code == AuthErrorCode.INVALID_HASH_ALGORITHM.code
        assert transport.requests == []

    def test_no_valid_records_makes_no_call(self, dispatcher, transport):
        result = import_users(dispatcher, [UserImportRecord(uid=""), {"uid": None}])

        assert transport.requests == []
        assert result.success_count == 0
        assert result.failure_count == 2
        assert [entry.index for entry in result.errors] == [0, 1]

    def test_local_and_server_errors_merged(self, dispatcher, transport):
        transport.queue(
            {
                "error": [
                    {"index": 1, "message": "DUPLICATE_LOCAL_ID : uid u3 exists"},
                    {"index": 0, "message": "SOMETHING_NEW"},
                ]
            }
        )
        records = [
            UserImportRecord(uid="u0"),
            UserImportRecord(uid="u1", email="not-an-email"),
            UserImportRecord(uid="u2"),
            UserImportRecord(uid="u3"),
        ]

        result = import_users(dispatcher, records)

        assert result.success_count == 1
        assert result.failure_count == 3
        assert [entry.index for entry in result.errors] == [0, 1, 3]
        assert result.errors[0].error.code == AuthErrorCode.INVALID_USER_IMPORT.code
        assert result.errors[0].error.message == "SOMETHING_NEW"
        assert result.errors[1].error.code == AuthErrorCode.INVALID_EMAIL.code
        assert result.errors[2].error.code == AuthErrorCode.UID_ALREADY_EXISTS.code

    def test_request_shape(self, dispatcher, transport):
        transport.queue({})
        records = [UserImportRecord(uid="u1", password_hash=b"hash")]

        result = import_users(dispatcher, records, HashConfig(algorithm="BCRYPT"))

        request = transport.last_request
        assert request.method == "POST"
        assert request.url == "https://identity.test/v1/projects/project-id/accounts:batchCreate"
        assert request.json_body == {
            "hashAlgorithm": "BCRYPT",
            "users": [{"localId": "u1", "passwordHash": to_web_safe_base64(b"hash")}],
        }
        assert result.success_count == 1
        assert result.errors == []

    def test_server_error_with_bad_index_ignored(self, dispatcher, transport):
        transport.queue({"error": [{"index": 5, "message": "INVALID_EMAIL"}]})

        result = import_users(dispatcher, [UserImportRecord(uid="u1")])

        assert result.success_count == 1
        assert result.failure_count == 0
