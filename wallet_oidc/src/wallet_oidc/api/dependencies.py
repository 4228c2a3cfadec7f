"""Dependency injection container for FastAPI"""

from typing import Optional

import httpx

from wallet_oidc.adapter import (
    AgentRestCredentialQuery,
    AgentRestDIDResolver,
    HttpxClient,
    JoseServiceImpl,
    JwkProofSigner,
    JwkTokenSigner,
)
from wallet_oidc.application import OpenID4CIImpl, OpenID4VPImpl
from wallet_oidc.config import load_or_create_config
from wallet_oidc.domain.clock import Clock, SystemClock
from wallet_oidc.domain.wallet_config import WalletConfig
from wallet_oidc.port.input import IssueCredential, PresentCredential
from wallet_oidc.port.output import (
    CredentialQueryService,
    DIDResolver,
    HttpClient,
    JoseService,
    ProofSigner,
    TokenSigner,
)


class DependencyContainer:
    """
    Dependency injection container for the wallet application.

    Manages singleton instances of services and use cases.
    """

    def __init__(
        self,
        config: Optional[WalletConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize container with optional configuration.

        Args:
            config: Wallet configuration (if None, loaded from the environment)
            transport: httpx transport for all outbound requests (tests)
            clock: Clock override (tests)
        """
        self._config = config
        self._transport = transport
        self._clock = clock
        self._http_client: Optional[HttpClient] = None
        self._jose_service: Optional[JoseService] = None
        self._proof_signer: Optional[ProofSigner] = None
        self._token_signer: Optional[TokenSigner] = None
        self._did_resolver: Optional[DIDResolver] = None
        self._credential_query: Optional[CredentialQueryService] = None
        self._issue_credential: Optional[IssueCredential] = None
        self._present_credential: Optional[PresentCredential] = None

    def get_config(self) -> WalletConfig:
        if self._config is None:
            self._config = load_or_create_config()
        return self._config

    def get_clock(self) -> Clock:
        if self._clock is None:
            self._clock = SystemClock()
        return self._clock

    def get_http_client(self) -> HttpClient:
        if self._http_client is None:
            self._http_client = HttpxClient(
                timeout=self.get_config().http_timeout_seconds,
                transport=self._transport,
            )
        return self._http_client

    def get_jose_service(self) -> JoseService:
        if self._jose_service is None:
            self._jose_service = JoseServiceImpl()
        return self._jose_service

    def get_proof_signer(self) -> ProofSigner:
        if self._proof_signer is None:
            config = self.get_config()
            self._proof_signer = JwkProofSigner(
                self._require_signing_jwk(), config.signing_algorithm, kid=config.key_id
            )
        return self._proof_signer

    def get_token_signer(self) -> TokenSigner:
        if self._token_signer is None:
            self._token_signer = JwkTokenSigner(self._require_signing_jwk())
        return self._token_signer

    def get_did_resolver(self) -> DIDResolver:
        if self._did_resolver is None:
            self._did_resolver = AgentRestDIDResolver(self._require_agent_url(), self.get_http_client())
        return self._did_resolver

    def get_credential_query(self) -> CredentialQueryService:
        if self._credential_query is None:
            self._credential_query = AgentRestCredentialQuery(
                self._require_agent_url(), self.get_config().user_did, self.get_http_client()
            )
        return self._credential_query

    def get_issue_credential(self) -> IssueCredential:
        """Get IssueCredential use case (singleton)"""
        if self._issue_credential is None:
            self._issue_credential = OpenID4CIImpl(
                config=self.get_config(),
                http_client=self.get_http_client(),
                proof_signer=self.get_proof_signer(),
                clock=self.get_clock(),
            )
        return self._issue_credential

    def get_present_credential(self) -> PresentCredential:
        """Get PresentCredential use case (singleton)"""
        if self._present_credential is None:
            self._present_credential = OpenID4VPImpl(
                http_client=self.get_http_client(),
                did_resolver=self.get_did_resolver(),
                credential_query=self.get_credential_query(),
                token_signer=self.get_token_signer(),
                jose_service=self.get_jose_service(),
            )
        return self._present_credential

    def _require_signing_jwk(self) -> dict:
        jwk = self.get_config().signing_jwk
        if jwk is None:
            raise RuntimeError("a signing key is required (set WALLET_SIGNING_KEY)")
        return jwk

    def _require_agent_url(self) -> str:
        agent_url = self.get_config().agent_url
        if not agent_url:
            raise RuntimeError("the wallet agent URL is required (set WALLET_AGENT_URL)")
        return agent_url


# Global container instance
_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get or create global dependency container"""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def set_container(container: DependencyContainer) -> None:
    """Set global dependency container (useful for testing)"""
    global _container
    _container = container


# FastAPI dependency functions
def get_issue_credential_use_case() -> IssueCredential:
    return get_container().get_issue_credential()


def get_present_credential_use_case() -> PresentCredential:
    return get_container().get_present_credential()
