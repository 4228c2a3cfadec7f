"""Adapter layer - Infrastructure implementations"""

from wallet_oidc.adapter.output import (
    AgentRestCredentialQuery,
    AgentRestDIDResolver,
    HttpxClient,
    JoseServiceImpl,
    JwkProofSigner,
    JwkTokenSigner,
)

__all__ = [
    "HttpxClient",
    "JoseServiceImpl",
    "JwkProofSigner",
    "JwkTokenSigner",
    "AgentRestDIDResolver",
    "AgentRestCredentialQuery",
]
