"""Wallet configuration model

Identity and tuning values the issuance and presentation engines need:

- Wallet client identity toward issuers (client ID, redirect URI, holder DID)
- Proof and token signing key
- Agent REST endpoint for DID resolution and credential queries
- Transaction state integrity secret
- Transport and deferred-issuance polling limits

All configuration is immutable and validated.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_ALGORITHMS = frozenset(
    {
        "RS256",
        "RS384",
        "RS512",
        "ES256",
        "ES384",
        "ES512",
        "PS256",
        "PS384",
        "PS512",
        "EdDSA",
    }
)


class WalletConfig(BaseModel):
    """
    Complete wallet configuration.

    Attributes:
        wallet_callback_uri: Redirect URI registered with issuers
        client_id: Wallet OAuth client ID
        user_did: Holder DID bound into issued credentials
        signing_algorithm: JWS algorithm for proofs and response tokens
        signing_jwk: Private JWK used by the shipped signers
        signing_kid: Key ID placed in signed headers (DID URL)
        agent_url: Base URL of the wallet agent REST API
        state_secret: Key for transaction state integrity tags
        http_timeout_seconds: Transport timeout for every outbound request
        deferred_poll_interval_seconds: Polling delay when the issuer sends none
        deferred_max_attempts: Token requests made before giving up on a deferred grant
    """

    model_config = ConfigDict(frozen=True)

    wallet_callback_uri: str = Field(..., min_length=1, description="Wallet OIDC redirect URI")
    client_id: str = Field(..., min_length=1, description="Wallet OAuth client ID")
    user_did: str = Field(..., min_length=1, description="Holder DID")
    signing_algorithm: str = Field("ES256", description="JWS signing algorithm")
    signing_jwk: Optional[Dict[str, Any]] = Field(None, description="Private signing JWK")
    signing_kid: Optional[str] = Field(None, description="Key ID for signed headers")
    agent_url: Optional[str] = Field(None, description="Wallet agent REST base URL")
    state_secret: Optional[str] = Field(None, description="Transaction state HMAC secret")
    http_timeout_seconds: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    deferred_poll_interval_seconds: float = Field(5.0, ge=0, description="Default polling interval")
    deferred_max_attempts: int = Field(12, ge=1, description="Maximum deferred polling attempts")

    @field_validator("signing_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Invalid signing algorithm: {v}. Must be one of {sorted(SUPPORTED_ALGORITHMS)}")
        return v

    @field_validator("signing_jwk")
    @classmethod
    def validate_jwk(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if v is None:
            return v
        if "kty" not in v:
            raise ValueError("JWK must contain 'kty' field")
        if "d" not in v:
            raise ValueError("signing JWK must contain private key material")
        return v

    @field_validator("user_did")
    @classmethod
    def validate_user_did(cls, v: str) -> str:
        if not v.startswith("did:"):
            raise ValueError(f"user_did must be a DID, got {v!r}")
        return v

    @property
    def state_secret_bytes(self) -> Optional[bytes]:
        """State secret as HMAC key bytes, or None when tagging is disabled"""
        if not self.state_secret:
            return None
        return self.state_secret.encode("utf-8")

    @property
    def key_id(self) -> str:
        """Key ID for signed headers, defaulting to the holder DID"""
        return self.signing_kid or self.user_did
