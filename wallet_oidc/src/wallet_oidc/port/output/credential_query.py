"""Credential query port - Interface to the wallet's credential store"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from returns.result import Result


class CredentialQueryServiceError(Exception):
    """Wallet query could not be executed"""

    pass


class NoResultFound(CredentialQueryServiceError):
    """Wallet holds no credential satisfying the query"""

    def __init__(self) -> None:
        super().__init__("requested credentials were not found")


class CredentialQueryService(ABC):
    """
    Executes credential queries against the holder's wallet.

    Supported query types are PresentationExchange, QueryByExample,
    QueryByFrame and DIDAuth.
    """

    @abstractmethod
    async def query(
        self, auth_token: str, queries: List[Dict[str, Any]]
    ) -> Result[List[Dict[str, Any]], CredentialQueryServiceError]:
        """
        Run queries and return the resulting presentations.

        Args:
            auth_token: Wallet unlock token
            queries: Credential queries

        Returns:
            Success(list of presentations) or Failure(CredentialQueryServiceError)
        """
        pass
