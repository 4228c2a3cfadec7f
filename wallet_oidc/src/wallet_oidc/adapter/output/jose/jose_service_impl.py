"""JOSE service implementation using joserfc"""

import base64
import json
from typing import Any, Dict

from joserfc import jwt
from returns.result import Failure, Result, Success

from wallet_oidc.adapter.output.jose.keys import load_key
from wallet_oidc.port.output import (
    JoseError,
    JoseService,
    SignatureVerificationError,
    TokenDecodeError,
)


class JoseServiceImpl(JoseService):
    """
    Implementation of JoseService using joserfc library.

    Reads verifier request objects and verifies their signatures.
    """

    def decode_unverified(self, token: str) -> Result[tuple[Dict[str, Any], Dict[str, Any]], TokenDecodeError]:
        """
        Decode header and payload without checking the signature.

        Args:
            token: Compact JWS (header.payload.signature)

        Returns:
            Success((header, payload)) or Failure(TokenDecodeError)
        """
        parts = token.split(".") if token else []
        if len(parts) != 3:
            return Failure(TokenDecodeError(f"expected 3 token segments, got {len(parts)}"))

        try:
            header = json.loads(_b64decode(parts[0]))
            payload = json.loads(_b64decode(parts[1]))
        except ValueError as e:
            return Failure(TokenDecodeError(f"token segments are not base64url JSON: {e}"))

        if not isinstance(header, dict) or not isinstance(payload, dict):
            return Failure(TokenDecodeError("token header and payload must be JSON objects"))
        return Success((header, payload))

    def verify(self, token: str, jwk: Dict[str, Any], algorithm: str) -> Result[Dict[str, Any], JoseError]:
        """
        Verify a compact JWS signature and return its claims.

        Args:
            token: Compact JWS
            jwk: Public key
            algorithm: Expected JWS algorithm

        Returns:
            Success(claims) or Failure(JoseError)
        """
        try:
            key = load_key(jwk)
        except Exception as e:
            return Failure(JoseError(f"Failed to load verification key: {e}"))

        try:
            decoded = jwt.decode(token, key, algorithms=[algorithm])
            return Success(decoded.claims)

        except Exception as e:
            return Failure(SignatureVerificationError(f"Failed to verify JWT: {e}"))


def _b64decode(segment: str) -> bytes:
    padding = -len(segment) % 4
    return base64.urlsafe_b64decode(segment + "=" * padding)
