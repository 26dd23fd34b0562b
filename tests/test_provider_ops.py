"""Tests for OIDC and SAML provider config operations."""

import pytest

from idadmin.core.error_codes import AuthErrorCode
from idadmin.core.exceptions import ArgumentError, BackendError, ProtocolError
from idadmin.models.fields import CLEAR
from idadmin.models.provider_config import (
    OIDCConfigUpdate,
    OIDCProviderConfig,
    SAMLConfigCreate,
    SAMLConfigUpdate,
    SAMLProviderConfig,
)

OIDC_RESPONSE = {
    "name": "projects/project-id/oauthIdpConfigs/oidc.provider",
    "clientId": "CLIENT_ID",
    "issuer": "https://oidc.example.com",
    "displayName": "OIDC provider",
    "enabled": True,
}

SAML_RESPONSE = {
    "name": "projects/project-id/inboundSamlConfigs/saml.provider",
    "displayName": "SAML provider",
    "enabled": True,
    "idpConfig": {
        "idpEntityId": "IDP_ENTITY_ID",
        "ssoUrl": "https://example.com/login",
        "signRequest": True,
        "idpCertificates": [{"x509Certificate": "CERT1"}, {"x509Certificate": "CERT2"}],
    },
    "spConfig": {
        "spEntityId": "RP_ENTITY_ID",
        "callbackUri": "https://project-id.example.com/__/auth/handler",
    },
}

SAML_CREATE = {
    "providerId": "saml.provider",
    "displayName": "SAML provider",
    "enabled": True,
    "idpEntityId": "IDP_ENTITY_ID",
    "ssoURL": "https://example.com/login",
    "x509Certificates": ["CERT1", "CERT2"],
    "rpEntityId": "RP_ENTITY_ID",
    "callbackURL": "https://project-id.example.com/__/auth/handler",
    "enableRequestSigning": True,
}


class TestOIDCConfigs:
    """Test OIDC provider config operations."""

    def test_create(self, client, transport):
        transport.queue(OIDC_RESPONSE)

        config = client.create_provider_config(
            {
                "providerId": "oidc.provider",
                "clientId": "CLIENT_ID",
                "issuer": "https://oidc.example.com",
                "displayName": "OIDC provider",
                "enabled": True,
            }
        )

        request = transport.last_request
        assert request.method == "POST"
        assert request.url == (
            "https://identity.test/v2/projects/project-id/oauthIdpConfigs"
            "?oauthIdpConfigId=oidc.provider"
        )
        assert request.json_body == {
            "displayName": "OIDC provider",
            "enabled": True,
            "clientId": "CLIENT_ID",
            "issuer": "https://oidc.example.com",
        }
        assert config == OIDCProviderConfig(
            provider_id="oidc.provider",
            client_id="CLIENT_ID",
            issuer="https://oidc.example.com",
            display_name="OIDC provider",
            enabled=True,
        )

    def test_create_missing_client_id(self, client, transport):
        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config(
                {"providerId": "oidc.provider", "issuer": "https://oidc.example.com"}
            )

        assert exc_info.value.code == AuthErrorCode.MISSING_OAUTH_CLIENT_ID.code
        assert transport.requests == []

    def test_create_invalid_issuer(self, client, transport):
        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config(
                {"providerId": "oidc.provider", "clientId": "CLIENT_ID", "issuer": "not a url"}
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code
        assert exc_info.value.message == '"OIDCProviderConfig.issuer" must be a valid URL string.'

    def test_create_unknown_field(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config({"providerId": "oidc.provider", "secret": "x"})

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code

    def test_get(self, client, transport):
        transport.queue(OIDC_RESPONSE)

        config = client.get_provider_config("oidc.provider")

        assert transport.last_request.method == "GET"
        assert transport.last_request.url.endswith("/v2/projects/project-id/oauthIdpConfigs/oidc.provider")
        assert config.issuer == "https://oidc.example.com"

    def test_get_not_found(self, client, transport):
        transport.queue(
            {"error": {"code": 404, "message": "CONFIGURATION_NOT_FOUND"}}, status_code=404
        )

        with pytest.raises(BackendError) as exc_info:
            client.get_provider_config("oidc.missing")

        assert exc_info.value.code == AuthErrorCode.CONFIGURATION_NOT_FOUND.code

    def test_get_malformed_response(self, client, transport):
        transport.queue({"name": "projects/project-id/oauthIdpConfigs/oidc.provider"})

        with pytest.raises(ProtocolError):
            client.get_provider_config("oidc.provider")

    def test_update(self, client, transport):
        transport.queue(OIDC_RESPONSE)

        client.update_provider_config(
            "oidc.provider", OIDCConfigUpdate(enabled=False, display_name=CLEAR)
        )

        request = transport.last_request
        assert request.method == "PATCH"
        assert request.url.endswith(
            "/oauthIdpConfigs/oidc.provider?updateMask=displayName,enabled"
        )
        assert request.json_body == {"displayName": None, "enabled": False}

    def test_update_cannot_clear_required_field(self, client, transport):
        with pytest.raises(ArgumentError) as exc_info:
            client.update_provider_config("oidc.provider", {"issuer": None})

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code
        assert transport.requests == []

    def test_update_wrong_kind(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.update_provider_config("oidc.provider", SAMLConfigUpdate(enabled=True))

        assert exc_info.value.code == AuthErrorCode.INVALID_PROVIDER_ID.code

    def test_update_without_changes(self, client, transport):
        with pytest.raises(ArgumentError) as exc_info:
            client.update_provider_config("oidc.provider", {})

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code
        assert transport.requests == []

    def test_delete(self, client, transport):
        transport.queue({})

        client.delete_provider_config("oidc.provider")

        assert transport.last_request.method == "DELETE"
        assert transport.last_request.url.endswith("/oauthIdpConfigs/oidc.provider")


class TestSAMLConfigs:
    """Test SAML provider config operations."""

    def test_create_nests_groups(self, client, transport):
        transport.queue(SAML_RESPONSE)

        config = client.create_provider_config(SAML_CREATE)

        assert transport.last_request.url.endswith(
            "/v2/projects/project-id/inboundSamlConfigs?inboundSamlConfigId=saml.provider"
        )
        assert transport.last_request.json_body == {
            "displayName": "SAML provider",
            "enabled": True,
            "idpConfig": {
                "idpEntityId": "IDP_ENTITY_ID",
                "ssoUrl": "https://example.com/login",
                "signRequest": True,
                "idpCertificates": [{"x509Certificate": "CERT1"}, {"x509Certificate": "CERT2"}],
            },
            "spConfig": {
                "spEntityId": "RP_ENTITY_ID",
                "callbackUri": "https://project-id.example.com/__/auth/handler",
            },
        }
        assert isinstance(config, SAMLProviderConfig)
        assert config.x509_certificates == ["CERT1", "CERT2"]
        assert config.enable_request_signing is True

    def test_create_missing_rp_entity_id(self, client):
        data = dict(SAML_CREATE)
        del data["rpEntityId"]

        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config(data)

        assert exc_info.value.code == AuthErrorCode.MISSING_SAML_RELYING_PARTY_CONFIG.code

    def test_create_invalid_certificates(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config(dict(SAML_CREATE, x509Certificates=[]))

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code

    def test_create_kind_mismatch(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.create_provider_config(SAMLConfigCreate(provider_id="oidc.provider"))

        assert exc_info.value.code == AuthErrorCode.INVALID_PROVIDER_ID.code

    def test_update_nested_field(self, client, transport):
        transport.queue(SAML_RESPONSE)

        client.update_provider_config("saml.provider", {"ssoURL": "https://x"})

        assert transport.last_request.url.endswith(
            "/inboundSamlConfigs/saml.provider?updateMask=idpConfig.ssoUrl"
        )
        assert transport.last_request.json_body == {"idpConfig": {"ssoUrl": "https://x"}}

    def test_get_parses_nested_response(self, client, transport):
        transport.queue(SAML_RESPONSE)

        config = client.get_provider_config("saml.provider")

        assert config.provider_id == "saml.provider"
        assert config.rp_entity_id == "RP_ENTITY_ID"
        assert config.to_dict()["ssoURL"] == "https://example.com/login"


class TestProviderIds:
    @pytest.mark.parametrize("provider_id", ["google.com", "oidc.", "saml", ""])
    def test_invalid_provider_id(self, client, transport, provider_id):
        with pytest.raises(ArgumentError) as exc_info:
            client.get_provider_config(provider_id)

        assert exc_info.value.code == AuthErrorCode.INVALID_PROVIDER_ID.code
        assert transport.requests == []

    def test_missing_provider_id(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.delete_provider_config(None)

        assert exc_info.value.code == AuthErrorCode.MISSING_PROVIDER_ID.code


class TestListProviderConfigs:
    def test_list_oidc(self, client, transport):
        transport.queue({"oauthIdpConfigs": [OIDC_RESPONSE], "nextPageToken": "next"})

        page = client.list_provider_configs("oidc", max_results=10)

        assert transport.last_request.params == {"pageSize": 10}
        assert transport.last_request.url.endswith("/v2/projects/project-id/oauthIdpConfigs")
        assert [config.provider_id for config in page.items] == ["oidc.provider"]
        assert page.next_page_token == "next"

    def test_list_saml_empty(self, client, transport):
        transport.queue({})

        page = client.list_provider_configs("saml", page_token="tok")

        assert transport.last_request.params == {"pageSize": 100, "pageToken": "tok"}
        assert page.items == []

    def test_max_results_bound(self, client, transport):
        with pytest.raises(ArgumentError):
            client.list_provider_configs("oidc", max_results=101)

        assert transport.requests == []

    def test_unknown_type(self, client):
        with pytest.raises(ArgumentError) as exc_info:
            client.list_provider_configs("ldap")

        assert exc_info.value.code == AuthErrorCode.INVALID_ARGUMENT.code

    def test_iterate(self, client, transport):
        second = dict(OIDC_RESPONSE, name="projects/project-id/oauthIdpConfigs/oidc.second")
        transport.queue({"oauthIdpConfigs": [OIDC_RESPONSE], "nextPageToken": "next"})
        transport.queue({"oauthIdpConfigs": [second]})

        ids = [config.provider_id for config in client.iterate_provider_configs("oidc")]

        assert ids == ["oidc.provider", "oidc.second"]
