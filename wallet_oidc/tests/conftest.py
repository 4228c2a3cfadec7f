"""Common test fixtures and HTTP stubs"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import pytest
from returns.result import Failure, Result, Success

from wallet_oidc.adapter.output.jose.keys import generate_key
from wallet_oidc.domain.clock import FixedClock
from wallet_oidc.domain.issuance import IssuerMetadata
from wallet_oidc.domain.wallet_config import WalletConfig
from wallet_oidc.port.output import ProofSigner, SigningError

ISSUER = "https://issuer.example.com"
WALLET_CALLBACK = "https://wallet.example.com/callback"
USER_DID = "did:example:holder"
CLIENT_ID = "wallet-client"


class IssuerStub:
    """
    httpx.MockTransport handler emulating an OpenID4CI issuer.

    Token responses are served in order; the last one repeats.
    """

    def __init__(self, base_url: str = ISSUER):
        self.base_url = base_url
        self.requests: list[httpx.Request] = []
        self.metadata: dict[str, Any] = {
            "issuer": base_url,
            "authorization_endpoint": f"{base_url}/authorize",
            "token_endpoint": f"{base_url}/token",
            "pushed_authorization_request_endpoint": f"{base_url}/par",
            "credential_endpoint": f"{base_url}/credential",
        }
        self.par_response: tuple[int, Any] = (201, {"request_uri": "urn:ietf:params:oauth:request_uri:par-1", "expires_in": 60})
        self.token_responses: list[tuple[int, Any]] = [
            (200, {"access_token": "access-1", "token_type": "Bearer", "c_nonce": "nonce-1", "expires_in": 300})
        ]
        self.credential_response: tuple[int, Any] = (
            200,
            {"format": "ldp_vc", "credential": {"id": "urn:uuid:vc-1", "type": ["VerifiableCredential"]}},
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/.well-known/openid-configuration":
            return httpx.Response(200, json=self.metadata)
        if path == "/par":
            return httpx.Response(self.par_response[0], json=self.par_response[1])
        if path == "/token":
            status, body = self.token_responses.pop(0) if len(self.token_responses) > 1 else self.token_responses[0]
            return httpx.Response(status, json=body)
        if path == "/credential":
            return httpx.Response(self.credential_response[0], json=self.credential_response[1])
        return httpx.Response(404, json={"error": "not_found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def form(self, request: httpx.Request) -> str:
        return request.content.decode("ascii")

    def json_body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)


class RecordingProofSigner(ProofSigner):
    """Proof signer returning a fixed token and recording its inputs"""

    def __init__(self, token: str = "proof.jwt.token", error: Optional[str] = None):
        self.token = token
        self.error = error
        self.calls: list[tuple[str, str, int, Optional[str]]] = []

    def sign(self, issuer: str, audience: str, issued_at: int, nonce: Optional[str]) -> Result[str, SigningError]:
        self.calls.append((issuer, audience, issued_at, nonce))
        if self.error:
            return Failure(SigningError(self.error))
        return Success(self.token)


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Fixed clock at 2024-01-15 12:00:00 UTC"""
    return FixedClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def signing_jwk() -> dict:
    """Ephemeral private P-256 JWK"""
    return generate_key("EC", "P-256").as_dict(private=True)


@pytest.fixture
def wallet_config(signing_jwk: dict) -> WalletConfig:
    """Wallet configuration without state tagging"""
    return WalletConfig(
        wallet_callback_uri=WALLET_CALLBACK,
        client_id=CLIENT_ID,
        user_did=USER_DID,
        signing_jwk=signing_jwk,
        signing_kid=f"{USER_DID}#key-1",
        agent_url="https://agent.example.com",
        deferred_poll_interval_seconds=5.0,
        deferred_max_attempts=3,
    )


@pytest.fixture
def issuer_metadata() -> IssuerMetadata:
    return IssuerMetadata(
        issuer=ISSUER,
        authorization_endpoint=f"{ISSUER}/authorize",
        token_endpoint=f"{ISSUER}/token",
        pushed_authorization_request_endpoint=f"{ISSUER}/par",
        credential_endpoint=f"{ISSUER}/credential",
    )


@pytest.fixture
def issuer_stub() -> IssuerStub:
    return IssuerStub()


@pytest.fixture
def proof_signer() -> RecordingProofSigner:
    return RecordingProofSigner()
