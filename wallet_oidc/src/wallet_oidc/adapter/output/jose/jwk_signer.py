"""Proof and token signers backed by a private JWK"""

from typing import Any, Dict, Optional

from joserfc import jwt
from returns.result import Failure, Result, Success

from wallet_oidc.adapter.output.jose.keys import load_key
from wallet_oidc.port.output import ProofSigner, SigningError, TokenSigner

PROOF_JWT_TYPE = "openid4vci-proof+jwt"


class JwkProofSigner(ProofSigner):
    """
    Signs OpenID4CI proof JWTs with a local private key.

    Attributes:
        jwk: Private JWK
        algorithm: JWS algorithm
        kid: Key ID placed in the proof header (holder DID URL)
    """

    def __init__(self, jwk: Dict[str, Any], algorithm: str, kid: Optional[str] = None):
        self.key = load_key(jwk)
        self.algorithm = algorithm
        self.kid = kid

    def sign(self, issuer: str, audience: str, issued_at: int, nonce: Optional[str]) -> Result[str, SigningError]:
        header = {"alg": self.algorithm, "typ": PROOF_JWT_TYPE}
        if self.kid:
            header["kid"] = self.kid

        claims: Dict[str, Any] = {"iss": issuer, "aud": audience, "iat": issued_at}
        if nonce:
            claims["nonce"] = nonce

        try:
            return Success(jwt.encode(header, claims, self.key, algorithms=[self.algorithm]))
        except Exception as e:
            return Failure(SigningError(f"Failed to sign proof JWT: {e}"))


class JwkTokenSigner(TokenSigner):
    """Signs response tokens with a local private key, using the header's alg"""

    def __init__(self, jwk: Dict[str, Any]):
        self.key = load_key(jwk)

    def sign(self, header: Dict[str, Any], payload: Dict[str, Any]) -> Result[str, SigningError]:
        algorithm = header.get("alg")
        if not algorithm:
            return Failure(SigningError("token header has no alg"))
        try:
            return Success(jwt.encode(header, payload, self.key, algorithms=[algorithm]))
        except Exception as e:
            return Failure(SigningError(f"Failed to sign JWT: {e}"))
