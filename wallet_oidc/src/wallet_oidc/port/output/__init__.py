"""Output ports - Interfaces for external dependencies"""

from wallet_oidc.port.output.http_client import (
    HttpClient,
    HttpResponse,
    TransportError,
)
from wallet_oidc.port.output.did_resolver import (
    DIDResolver,
    DIDResolutionError,
)
from wallet_oidc.port.output.credential_query import (
    CredentialQueryService,
    CredentialQueryServiceError,
    NoResultFound,
)
from wallet_oidc.port.output.signer import (
    ProofSigner,
    TokenSigner,
    SigningError,
)
from wallet_oidc.port.output.jose_service import (
    JoseService,
    JoseError,
    TokenDecodeError,
    SignatureVerificationError,
)

__all__ = [
    # HTTP Client
    "HttpClient",
    "HttpResponse",
    "TransportError",
    # DID Resolver
    "DIDResolver",
    "DIDResolutionError",
    # Credential Query
    "CredentialQueryService",
    "CredentialQueryServiceError",
    "NoResultFound",
    # Signers
    "ProofSigner",
    "TokenSigner",
    "SigningError",
    # JOSE Service
    "JoseService",
    "JoseError",
    "TokenDecodeError",
    "SignatureVerificationError",
]
