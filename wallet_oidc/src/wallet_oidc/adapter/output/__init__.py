"""Output adapters - Infrastructure implementations of output ports"""

from wallet_oidc.adapter.output.http import HttpxClient
from wallet_oidc.adapter.output.jose import JoseServiceImpl, JwkProofSigner, JwkTokenSigner
from wallet_oidc.adapter.output.agent import AgentRestCredentialQuery, AgentRestDIDResolver

__all__ = [
    "HttpxClient",
    "JoseServiceImpl",
    "JwkProofSigner",
    "JwkTokenSigner",
    "AgentRestDIDResolver",
    "AgentRestCredentialQuery",
]
