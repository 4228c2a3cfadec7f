"""Tests for wallet configuration"""

import pytest
from pydantic import ValidationError

from wallet_oidc.domain.wallet_config import WalletConfig

BASE = {
    "wallet_callback_uri": "https://wallet.example.com/cb",
    "client_id": "wallet-client",
    "user_did": "did:example:holder",
}


class TestWalletConfig:
    """Tests for WalletConfig"""

    def test_defaults(self):
        config = WalletConfig(**BASE)

        assert config.signing_algorithm == "ES256"
        assert config.http_timeout_seconds == 30.0
        assert config.state_secret_bytes is None
        assert config.key_id == "did:example:holder"

    def test_state_secret_bytes(self):
        config = WalletConfig(**BASE, state_secret="s3cret")
        assert config.state_secret_bytes == b"s3cret"

    def test_invalid_algorithm(self):
        with pytest.raises(ValidationError, match="Invalid signing algorithm"):
            WalletConfig(**BASE, signing_algorithm="none")

    def test_public_jwk_rejected(self):
        """Signing JWK must hold private key material"""
        with pytest.raises(ValidationError, match="private key"):
            WalletConfig(**BASE, signing_jwk={"kty": "EC", "crv": "P-256", "x": "x", "y": "y"})

    def test_user_did_must_be_did(self):
        with pytest.raises(ValidationError, match="must be a DID"):
            WalletConfig(**{**BASE, "user_did": "holder"})

    def test_immutable(self):
        config = WalletConfig(**BASE)
        with pytest.raises(ValidationError):
            config.client_id = "other"
