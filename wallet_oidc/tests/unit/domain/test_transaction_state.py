"""Tests for transaction state marshalling"""

import base64
import json

import pytest
from returns.result import Failure, Success

from wallet_oidc.domain.issuance import IssuerMetadata, MalformedStateError, TransactionState
from wallet_oidc.domain.transaction_state import marshal_state, unmarshal_state

SECRET = b"state-secret"


@pytest.fixture
def transaction_state(issuer_metadata: IssuerMetadata) -> TransactionState:
    return TransactionState(
        credential_type="UniversityDegreeCredential",
        client_id="wallet-client",
        issuer_metadata=issuer_metadata,
        oauth_state="oauth-state-1",
    )


def _decode(encoded: str) -> dict:
    payload = encoded.split(".")[0]
    return json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))


class TestMarshalState:
    """Tests for marshal_state"""

    def test_uses_camel_case_keys(self, transaction_state: TransactionState):
        """Encoded JSON uses the credentialType/clientID/issuerMetadata/oauthState keys"""
        document = _decode(marshal_state(transaction_state))

        assert set(document) == {"credentialType", "clientID", "issuerMetadata", "oauthState"}
        assert document["issuerMetadata"]["token_endpoint"] == "https://issuer.example.com/token"

    def test_url_safe_without_padding(self, transaction_state: TransactionState):
        """Encoding is base64url without padding"""
        encoded = marshal_state(transaction_state)

        assert "=" not in encoded
        assert "+" not in encoded and "/" not in encoded
        assert "." not in encoded

    def test_secret_appends_tag(self, transaction_state: TransactionState):
        """A secret appends a '.'-separated integrity tag"""
        encoded = marshal_state(transaction_state, SECRET)

        payload, tag = encoded.split(".")
        assert payload == marshal_state(transaction_state)
        assert tag


class TestUnmarshalState:
    """Tests for unmarshal_state"""

    def test_round_trip(self, transaction_state: TransactionState):
        """unmarshal(marshal(s)) == s"""
        assert unmarshal_state(marshal_state(transaction_state)) == Success(transaction_state)

    def test_round_trip_with_secret(self, transaction_state: TransactionState):
        """Tagged state round-trips with the same secret"""
        encoded = marshal_state(transaction_state, SECRET)
        assert unmarshal_state(encoded, SECRET) == Success(transaction_state)

    def test_empty_input_fails(self):
        """Empty client state is malformed"""
        result = unmarshal_state("")
        assert isinstance(result, Failure)
        assert isinstance(result.failure(), MalformedStateError)

    def test_invalid_base64_fails(self):
        """Garbage input is malformed"""
        result = unmarshal_state("!!!not-base64!!!")
        assert isinstance(result.failure(), MalformedStateError)

    def test_missing_fields_fail(self):
        """JSON without required fields is malformed"""
        encoded = base64.urlsafe_b64encode(b'{"credentialType":"x"}').decode().rstrip("=")
        result = unmarshal_state(encoded)
        assert isinstance(result.failure(), MalformedStateError)

    def test_tampered_payload_rejected(self, transaction_state: TransactionState):
        """Changing the payload invalidates the tag"""
        payload, tag = marshal_state(transaction_state, SECRET).split(".")
        forged = transaction_state.model_copy(update={"oauth_state": "attacker"})
        forged_payload = marshal_state(forged)

        result = unmarshal_state(f"{forged_payload}.{tag}", SECRET)
        assert isinstance(result.failure(), MalformedStateError)
        assert "does not match" in str(result.failure())

    def test_missing_tag_rejected_when_secret_configured(self, transaction_state: TransactionState):
        """Untagged state is rejected when a secret is configured"""
        result = unmarshal_state(marshal_state(transaction_state), SECRET)
        assert isinstance(result.failure(), MalformedStateError)

    def test_wrong_secret_rejected(self, transaction_state: TransactionState):
        encoded = marshal_state(transaction_state, SECRET)
        assert isinstance(unmarshal_state(encoded, b"other-secret"), Failure)

    def test_tag_ignored_without_secret(self, transaction_state: TransactionState):
        """Without a secret the tag is not checked"""
        encoded = marshal_state(transaction_state, SECRET)
        assert unmarshal_state(encoded) == Success(transaction_state)

    @pytest.mark.parametrize("tag", ["tég", "\udcff", "ß" * 43])
    def test_non_ascii_tag_rejected(self, transaction_state: TransactionState, tag: str):
        """Tags outside the base64url alphabet are malformed, not an exception"""
        payload = marshal_state(transaction_state)

        result = unmarshal_state(f"{payload}.{tag}", SECRET)

        assert isinstance(result.failure(), MalformedStateError)
