"""Tests for data models."""

from datetime import UTC, datetime

import pytest

from idadmin.core.error_codes import AuthErrorCode
from idadmin.core.exceptions import ArgumentError, BackendError, ProtocolError
from idadmin.models.config import DEFAULT_API_HOST, ClientConfig
from idadmin.models.fields import CLEAR, UNSET
from idadmin.models.page import PageResult
from idadmin.models.provider_config import (
    OIDCProviderConfig,
    ProviderKind,
    create_request_from_dict,
    provider_id_from_resource_name,
    provider_kind,
)
from idadmin.models.user import (
    AccountRecord,
    ProviderIdentifier,
    ProviderUserInfo,
    SecondFactor,
    UserCreate,
    UserImportRecord,
    UserUpdate,
    identifier_matches,
)
from idadmin.models.user_import import HashConfig, ImportResult, IndexedError


class TestAccountRecord:
    """Test AccountRecord parsing."""

    def test_minimal(self):
        record = AccountRecord.from_response({"localId": "uid1"})

        assert record.uid == "uid1"
        assert record.email_verified is False
        assert record.disabled is False
        assert record.custom_claims is None
        assert record.provider_data == []
        assert record.tokens_valid_after_millis is None

    def test_metadata(self):
        record = AccountRecord.from_response(
            {
                "localId": "uid1",
                "createdAt": "1704164645000",
                "lastLoginAt": 1704164646000,
                "lastRefreshAt": "2024-01-02T03:04:07.000Z",
            }
        )

        assert record.metadata.creation_time == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert record.metadata.last_sign_in_time == datetime(2024, 1, 2, 3, 4, 6, tzinfo=UTC)
        assert record.metadata.last_refresh_time == datetime(2024, 1, 2, 3, 4, 7, tzinfo=UTC)

    def test_missing_local_id(self):
        with pytest.raises(ProtocolError):
            AccountRecord.from_response({"email": "user@example.com"})

    def test_invalid_custom_attributes(self):
        with pytest.raises(ProtocolError):
            AccountRecord.from_response({"localId": "uid1", "customAttributes": "{not json"})

    def test_invalid_provider_entry(self):
        with pytest.raises(ProtocolError):
            AccountRecord.from_response({"localId": "uid1", "providerUserInfo": [{"rawId": "x"}]})

    def test_to_dict_uses_caller_names(self):
        record = AccountRecord.from_response(
            {"localId": "uid1", "photoUrl": "https://example.com/p.png", "validSince": "10"}
        )

        data = record.to_dict()

        assert data["uid"] == "uid1"
        assert data["photoURL"] == "https://example.com/p.png"
        assert data["tokensValidAfterMillis"] == 10000
        assert data["metadata"]["creationTime"] is None


class TestIdentifiers:
    def test_provider_identifier_matches_linked_identity(self):
        record = AccountRecord(
            uid="uid1", provider_data=[ProviderUserInfo(uid="g-1", provider_id="google.com")]
        )

        assert identifier_matches(ProviderIdentifier("google.com", "g-1"), record)
        assert not identifier_matches(ProviderIdentifier("google.com", "g-2"), record)

    def test_unknown_identifier_type(self):
        with pytest.raises(ArgumentError):
            identifier_matches("uid1", AccountRecord(uid="uid1"))


class TestUserInputs:
    def test_create_from_dict(self):
        properties = UserCreate.from_dict({"uid": "uid1", "photoURL": "https://x.com/p"})

        assert properties.supplied() == {"uid": "uid1", "photo_url": "https://x.com/p"}

    def test_create_unknown_property(self):
        with pytest.raises(ArgumentError) as exc_info:
            UserCreate.from_dict({"nickname": "x"})

        assert exc_info.value.message == 'Unsupported user property "nickname".'

    def test_create_requires_mapping(self):
        with pytest.raises(ArgumentError) as exc_info:
            UserCreate.from_dict(None)

        assert exc_info.value.code == AuthErrorCode.INVALID_ARGUMENT.code

    def test_update_defaults_to_unset(self):
        update = UserUpdate()

        assert update.email is UNSET
        assert update.supplied() == {}

    def test_update_none_means_clear(self):
        update = UserUpdate.from_dict({"photoURL": None, "disabled": True})

        assert update.supplied() == {"photo_url": CLEAR, "disabled": True}

    def test_update_rejects_uid(self):
        with pytest.raises(ArgumentError):
            UserUpdate.from_dict({"uid": "other"})

    def test_import_record_from_dict(self):
        record = UserImportRecord.from_dict(
            {
                "uid": "uid1",
                "metadata": {"creationTime": "2024-01-02T03:04:05Z"},
                "providerData": [{"uid": "g-1", "providerId": "google.com"}],
            }
        )

        assert record.metadata.creation_time == "2024-01-02T03:04:05Z"
        assert record.provider_data[0].provider_id == "google.com"

    def test_import_record_enrolled_factors_from_dict(self):
        record = UserImportRecord.from_dict(
            {
                "uid": "uid1",
                "multiFactor": {
                    "enrolledFactors": [{"phoneNumber": "+15555550100", "factorId": "phone"}]
                },
            }
        )

        assert record.multi_factor["enrolledFactors"] == [
            SecondFactor(phone_number="+15555550100", factor_id="phone")
        ]

    def test_second_factor_unknown_field(self):
        with pytest.raises(ArgumentError) as exc_info:
            SecondFactor.from_dict({"factorId": "phone", "secret": "x"})

        assert exc_info.value.code == AuthErrorCode.INVALID_ARGUMENT.code

    def test_hash_config_from_dict(self):
        config = HashConfig.from_dict({"algorithm": "SCRYPT", "memoryCost": 14, "saltSeparator": b""})

        assert config.memory_cost == 14
        assert config.salt_separator == b""

    def test_hash_config_unknown_field(self):
        with pytest.raises(ArgumentError) as exc_info:
            HashConfig.from_dict({"algorithm": "SCRYPT", "cost": 1})

        assert exc_info.value.message == 'Unsupported hash property "cost".'


class TestProviderModels:
    def test_provider_kind_from_prefix(self):
        assert provider_kind("oidc.a") is ProviderKind.OIDC
        assert provider_kind("saml.a") is ProviderKind.SAML
        assert provider_kind("saml.") is None
        assert provider_kind(None) is None

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("projects/p/oauthIdpConfigs/oidc.a", "oidc.a"),
            ("projects/p/tenants/t/inboundSamlConfigs/saml.b", "saml.b"),
            ("projects/p/oauthIdpConfigs/google.com", None),
            (None, None),
        ],
    )
    def test_provider_id_from_resource_name(self, name, expected):
        assert provider_id_from_resource_name(name) == expected

    def test_create_request_requires_provider_id(self):
        with pytest.raises(ArgumentError) as exc_info:
            create_request_from_dict({"clientId": "x"})

        assert exc_info.value.code == AuthErrorCode.MISSING_PROVIDER_ID.code

    def test_oidc_to_dict(self):
        config = OIDCProviderConfig(provider_id="oidc.a", client_id="c", issuer="https://i")

        assert config.to_dict() == {
            "providerId": "oidc.a",
            "displayName": None,
            "enabled": False,
            "clientId": "c",
            "issuer": "https://i",
        }


class TestResults:
    def test_page_to_dict(self):
        page = PageResult(
            items=[OIDCProviderConfig(provider_id="oidc.a", client_id="c", issuer="https://i")],
            next_page_token="next",
        )

        data = page.to_dict("providerConfigs")

        assert data["providerConfigs"][0]["providerId"] == "oidc.a"
        assert data["pageToken"] == "next"

    def test_page_to_dict_without_token(self):
        assert PageResult().to_dict() == {"items": []}

    def test_import_result_to_dict(self):
        result = ImportResult(
            success_count=1,
            failure_count=1,
            errors=[IndexedError(index=3, error=BackendError(AuthErrorCode.INVALID_USER_IMPORT))],
        )

        assert result.to_dict() == {
            "success_count": 1,
            "failure_count": 1,
            "errors": [
                {
                    "index": 3,
                    "code": AuthErrorCode.INVALID_USER_IMPORT.code,
                    "message": AuthErrorCode.INVALID_USER_IMPORT.message,
                }
            ],
        }


class TestClientConfig:
    """Test ClientConfig model."""

    def test_from_env_vars_dev(self):
        config = ClientConfig.from_env_vars(
            {
                "DEV_IDADMIN_PROJECT_ID": "dev-project",
                "DEV_IDADMIN_TENANT_ID": "tenant-1",
                "DEV_IDADMIN_ACCESS_TOKEN": "token",
            },
            "dev",
        )

        assert config.project_id == "dev-project"
        assert config.tenant_id == "tenant-1"
        assert config.access_token == "token"
        assert config.api_host == DEFAULT_API_HOST

    def test_from_env_vars_prod_ignores_dev_vars(self):
        with pytest.raises(ValueError):
            ClientConfig.from_env_vars({"DEV_IDADMIN_PROJECT_ID": "dev-project"}, "prod")

    def test_api_host_trailing_slash_removed(self):
        assert ClientConfig(project_id="p", api_host="http://localhost:9099/").api_host == (
            "http://localhost:9099"
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"project_id": "a/b"},
            {"project_id": "p", "environment": "staging"},
            {"project_id": "p", "tenant_id": "t/1"},
            {"project_id": "p", "api_host": "ftp://host"},
            {"project_id": "p", "timeout": 0},
        ],
    )
    def test_validate_rejects(self, kwargs):
        assert not ClientConfig(**kwargs).validate()

    def test_to_dict_redacts_token(self):
        data = ClientConfig(project_id="p", access_token="secret").to_dict()

        assert data["access_token"] == "***REDACTED***"
