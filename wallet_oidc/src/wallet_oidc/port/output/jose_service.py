"""JOSE service port - Interface for request object decoding and verification"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from returns.result import Result


class JoseError(Exception):
    """Base exception for JOSE operations"""

    pass


class TokenDecodeError(JoseError):
    """Token is not a well-formed compact JWS"""

    pass


class SignatureVerificationError(JoseError):
    """Signature does not verify with the given key"""

    pass


class JoseService(ABC):
    """Service for reading and verifying compact JWS tokens"""

    @abstractmethod
    def decode_unverified(self, token: str) -> Result[tuple[Dict[str, Any], Dict[str, Any]], TokenDecodeError]:
        """
        Decode header and payload without checking the signature.

        Args:
            token: Compact JWS

        Returns:
            Success((header, payload)) or Failure(TokenDecodeError)
        """
        pass

    @abstractmethod
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
        pass
