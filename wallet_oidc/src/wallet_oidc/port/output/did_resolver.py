"""DID resolver port - Interface for resolving verifier DIDs"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from returns.result import Result


class DIDResolutionError(Exception):
    """DID could not be resolved to a document"""

    def __init__(self, did: str, reason: str = ""):
        self.did = did
        super().__init__(f"failed to resolve {did}: {reason}" if reason else f"failed to resolve {did}")


class DIDResolver(ABC):
    """Resolves a DID to its DID document"""

    @abstractmethod
    async def resolve(self, did: str) -> Result[Dict[str, Any], DIDResolutionError]:
        """
        Resolve a DID.

        Args:
            did: DID without fragment

        Returns:
            Success(DID document) or Failure(DIDResolutionError)
        """
        pass
