"""Tests for the provider config update-mask differ."""

import json

import pytest

from idadmin.core.error_codes import AuthErrorCode
from idadmin.core.exceptions import ArgumentError
from idadmin.models.field_maps import OIDC_FIELDS, SAML_FIELDS
from idadmin.models.fields import CLEAR
from idadmin.models.provider_config import OIDCConfigUpdate, SAMLConfigUpdate
from idadmin.operations.update_mask import build_masked_update


class TestBuildMaskedUpdate:
    def test_single_nested_saml_field(self):
        update = SAMLConfigUpdate.from_dict({"ssoURL": "https://x"})

        masked = build_masked_update(update, SAML_FIELDS)

        assert masked.payload == {"idpConfig": {"ssoUrl": "https://x"}}
        assert masked.update_mask == "idpConfig.ssoUrl"

    def test_mask_follows_canonical_order(self):
        update = OIDCConfigUpdate(issuer="https://issuer.example.com", display_name="Name")

        masked = build_masked_update(update, OIDC_FIELDS)

        assert masked.mask == ["displayName", "issuer"]
        assert list(masked.payload) == ["displayName", "issuer"]

    def test_clear_sends_null_and_lists_field(self):
        update = OIDCConfigUpdate(display_name=CLEAR)

        masked = build_masked_update(update, OIDC_FIELDS)

        assert masked.payload == {"displayName": None}
        assert masked.update_mask == "displayName"

    def test_none_in_dict_means_clear(self):
        update = SAMLConfigUpdate.from_dict({"callbackURL": None, "enabled": False})

        masked = build_masked_update(update, SAML_FIELDS)

        assert masked.payload == {"enabled": False, "spConfig": {"callbackUri": None}}
        assert masked.update_mask == "enabled,spConfig.callbackUri"

    def test_certificates_are_wrapped(self):
        update = SAMLConfigUpdate(x509_certificates=["CERT1", "CERT2"])

        masked = build_masked_update(update, SAML_FIELDS)

        assert masked.payload == {
            "idpConfig": {
                "idpCertificates": [{"x509Certificate": "CERT1"}, {"x509Certificate": "CERT2"}]
            }
        }

    def test_groups_share_one_nested_object(self):
        update = SAMLConfigUpdate(
            idp_entity_id="IDP", enable_request_signing=True, rp_entity_id="RP"
        )

        masked = build_masked_update(update, SAML_FIELDS)

        assert masked.payload == {
            "idpConfig": {"idpEntityId": "IDP", "signRequest": True},
            "spConfig": {"spEntityId": "RP"},
        }
        assert masked.update_mask == "idpConfig.idpEntityId,idpConfig.signRequest,spConfig.spEntityId"

    def test_key_order_does_not_change_output(self):
        data = {
            "callbackURL": "https://app.example.com/callback",
            "displayName": "SAML",
            "x509Certificates": ["CERT1"],
            "enabled": True,
            "rpEntityId": "RP",
            "ssoURL": "https://idp.example.com/sso",
            "idpEntityId": "IDP",
        }
        reordered = dict(reversed(list(data.items())))

        first = build_masked_update(SAMLConfigUpdate.from_dict(data), SAML_FIELDS)
        second = build_masked_update(SAMLConfigUpdate.from_dict(reordered), SAML_FIELDS)

        assert first.update_mask == second.update_mask
        assert json.dumps(first.payload) == json.dumps(second.payload)

    def test_empty_update_rejected(self):
        with pytest.raises(ArgumentError) as exc_info:
            build_masked_update(OIDCConfigUpdate(), OIDC_FIELDS)

        assert exc_info.value.code == AuthErrorCode.INVALID_CONFIG.code
