"""JOSE adapters (joserfc)"""

from wallet_oidc.adapter.output.jose.jose_service_impl import JoseServiceImpl
from wallet_oidc.adapter.output.jose.jwk_signer import JwkProofSigner, JwkTokenSigner

__all__ = ["JoseServiceImpl", "JwkProofSigner", "JwkTokenSigner"]
