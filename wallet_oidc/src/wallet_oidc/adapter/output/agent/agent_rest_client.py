"""DID resolution and credential queries through the wallet agent REST API"""

import base64
import logging
from typing import Any, Dict, List

from returns.result import Failure, Result, Success

from wallet_oidc.port.output import (
    CredentialQueryService,
    CredentialQueryServiceError,
    DIDResolutionError,
    DIDResolver,
    HttpClient,
    NoResultFound,
)

LOGGER = logging.getLogger(__name__)

# Agent error returned when no stored credential satisfies a query
NO_RESULT_FOUND_MARKERS = ("code: 12009", "no result found")


class AgentRestDIDResolver(DIDResolver):
    """
    Resolves DIDs through the agent's VDR endpoint.

    GET {agent_url}/vdr/did/resolve/{base64url(did)}
    """

    def __init__(self, agent_url: str, http_client: HttpClient):
        self.agent_url = agent_url.rstrip("/")
        self.http_client = http_client

    async def resolve(self, did: str) -> Result[Dict[str, Any], DIDResolutionError]:
        encoded = base64.urlsafe_b64encode(did.encode("utf-8")).decode("ascii").rstrip("=")
        response = await self.http_client.get_json(f"{self.agent_url}/vdr/did/resolve/{encoded}")
        if isinstance(response, Failure):
            return Failure(DIDResolutionError(did, str(response.failure())))

        try:
            body = response.unwrap().json()
        except ValueError as e:
            return Failure(DIDResolutionError(did, f"malformed resolution response: {e}"))

        document = _unwrap_document(body)
        if document is None:
            return Failure(DIDResolutionError(did, "resolution response has no DID document"))
        return Success(document)


class AgentRestCredentialQuery(CredentialQueryService):
    """
    Runs credential queries through the agent's wallet endpoint.

    POST {agent_url}/vcwallet/query with {userID, auth, query}
    """

    def __init__(self, agent_url: str, user_id: str, http_client: HttpClient):
        self.agent_url = agent_url.rstrip("/")
        self.user_id = user_id
        self.http_client = http_client

    async def query(
        self, auth_token: str, queries: List[Dict[str, Any]]
    ) -> Result[List[Dict[str, Any]], CredentialQueryServiceError]:
        body = {"userID": self.user_id, "auth": auth_token, "query": queries}
        response = await self.http_client.post_json(f"{self.agent_url}/vcwallet/query", body)
        if isinstance(response, Failure):
            error = response.failure()
            if error.body and any(marker in error.body for marker in NO_RESULT_FOUND_MARKERS):
                return Failure(NoResultFound())
            return Failure(CredentialQueryServiceError(f"wallet query failed: {error}"))

        try:
            results = response.unwrap().json().get("results")
        except (ValueError, AttributeError) as e:
            return Failure(CredentialQueryServiceError(f"malformed wallet query response: {e}"))

        if not results:
            return Failure(NoResultFound())
        LOGGER.debug("Wallet query returned %d result(s)", len(results))
        return Success(list(results))


def _unwrap_document(body: Any) -> Any:
    """DID document from a resolution result, a {did: ...} wrapper or a bare document"""
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("did"), dict):
        body = body["did"]
    if isinstance(body.get("didDocument"), dict):
        return body["didDocument"]
    if "id" in body:
        return body
    return None
