"""Signer ports - Proof-of-possession and response token signing"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from returns.result import Result


class SigningError(Exception):
    """Signer could not produce a token"""

    pass


class ProofSigner(ABC):
    """Signs OpenID4CI proof-of-possession JWTs"""

    @abstractmethod
    def sign(self, issuer: str, audience: str, issued_at: int, nonce: Optional[str]) -> Result[str, SigningError]:
        """
        Create a proof JWT for a credential request.

        Args:
            issuer: Wallet client ID
            audience: Credential issuer identifier
            issued_at: Issue time (JWT NumericDate)
            nonce: c_nonce from the token response

        Returns:
            Success(compact JWS) or Failure(SigningError)
        """
        pass


class TokenSigner(ABC):
    """Signs OpenID4VP response tokens"""

    @abstractmethod
    def sign(self, header: Dict[str, Any], payload: Dict[str, Any]) -> Result[str, SigningError]:
        """
        Sign a JWT with the given header and claims.

        Returns:
            Success(compact JWS) or Failure(SigningError)
        """
        pass
