"""Tests for issuance models and request builders"""

import json
from urllib.parse import parse_qs, urlencode, urlsplit

import pytest
from pydantic import ValidationError

from wallet_oidc.domain.issuance import (
    IssuanceError,
    IssuanceRequest,
    IssuerCommunicationError,
    TokenResponse,
    build_authorization_code_token_request,
    build_authorization_redirect,
    build_credential_request,
    build_pre_authorized_token_request,
    build_pushed_authorization_request,
    metadata_url,
)
from wallet_oidc.domain.value_objects import OAuthState


class TestIssuanceRequest:
    """Tests for IssuanceRequest"""

    def test_accepts_wire_aliases(self):
        """camelCase and hyphenated wire names are accepted"""
        request = IssuanceRequest.model_validate(
            {
                "issuer": "https://issuer.example.com",
                "credentialType": "PermanentResidentCard",
                "userPINRequired": True,
                "opState": "op-1",
                "pre-authorized_code": "foo",
            }
        )

        assert request.credential_type == "PermanentResidentCard"
        assert request.user_pin_required is True
        assert request.op_state == "op-1"
        assert request.pre_authorized_code == "foo"
        assert request.is_pre_authorized

    def test_defaults(self):
        request = IssuanceRequest(issuer="https://issuer.example.com", credential_type="VC")

        assert request.user_pin_required is False
        assert request.op_state is None
        assert not request.is_pre_authorized

    def test_blank_issuer_rejected(self):
        with pytest.raises(ValidationError):
            IssuanceRequest(issuer="  ", credential_type="VC")


class TestTokenResponse:
    def test_pending_without_access_token(self):
        assert TokenResponse(authorization_pending=True).is_pending
        assert not TokenResponse(authorization_pending=True, access_token="t").is_pending
        assert not TokenResponse(access_token="t").is_pending


class TestIssuanceError:
    def test_cause_is_chained(self):
        """Upstream errors are kept as cause and __cause__"""
        upstream = ValueError("boom")
        error = IssuerCommunicationError("token request failed", cause=upstream)

        assert isinstance(error, IssuanceError)
        assert error.cause is upstream
        assert error.__cause__ is upstream


class TestBuilders:
    """Tests for wire-format builders"""

    def test_metadata_url(self):
        assert metadata_url("https://issuer.example.com/") == "https://issuer.example.com/.well-known/openid-configuration"

    def test_pre_authorized_token_request_encoding(self):
        """Fields are encoded in grant_type, code, pin order"""
        body = urlencode(build_pre_authorized_token_request("foo", "1234"))

        assert body == "grant_type=urn%3Aietf%3Aparams%3Aoauth%3Agrant-type%3Apre-authorized_code&pre-authorized_code=foo&user_pin=1234"

    def test_pre_authorized_token_request_without_pin(self):
        """user_pin is omitted when no PIN is given"""
        fields = dict(build_pre_authorized_token_request("foo", None))
        assert "user_pin" not in fields

    def test_pushed_authorization_request(self):
        """PAR carries compact authorization_details and empty op_state"""
        fields = build_pushed_authorization_request(
            "wallet-client", "https://wallet.example.com/cb", OAuthState("s-1"), "PermanentResidentCard", None
        )

        assert [name for name, _ in fields] == [
            "response_type",
            "client_id",
            "redirect_uri",
            "state",
            "op_state",
            "authorization_details",
        ]
        values = dict(fields)
        assert values["response_type"] == "code"
        assert values["state"] == "s-1"
        assert values["op_state"] == ""
        assert values["authorization_details"] == '[{"type":"openid_credential","credential_type":"PermanentResidentCard"}]'

    def test_authorization_redirect(self):
        redirect = build_authorization_redirect("https://issuer.example.com/authorize", "urn:par:1", "wallet-client")

        parts = urlsplit(redirect)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://issuer.example.com/authorize"
        assert parse_qs(parts.query) == {"request_uri": ["urn:par:1"], "client_id": ["wallet-client"]}

    def test_authorization_redirect_keeps_existing_query(self):
        redirect = build_authorization_redirect("https://issuer.example.com/authorize?tenant=a", "urn:par:1", "c")
        assert redirect.startswith("https://issuer.example.com/authorize?tenant=a&request_uri=")

    def test_authorization_code_token_request(self):
        fields = build_authorization_code_token_request("code-1", "https://wallet.example.com/cb", "wallet-client")

        assert fields == [
            ("grant_type", "authorization_code"),
            ("code", "code-1"),
            ("redirect_uri", "https://wallet.example.com/cb"),
            ("client_id", "wallet-client"),
        ]

    def test_credential_request(self):
        body = build_credential_request("PermanentResidentCard", "did:example:holder", "proof.jwt")

        assert json.loads(json.dumps(body)) == {
            "type": "PermanentResidentCard",
            "did": "did:example:holder",
            "proof": {"proof_type": "jwt", "jwt": "proof.jwt"},
        }
