"""Port layer - Interfaces between domain and adapters

Input Ports (Use Cases):
- IssueCredential: OpenID4CI authorization-code and pre-authorized flows
- PresentCredential: OpenID4VP request handling and response submission

Output Ports (External Dependencies):
- HttpClient: Outbound HTTP transport
- DIDResolver: Verifier DID resolution
- CredentialQueryService: Wallet credential store queries
- ProofSigner / TokenSigner: Key-holding signers
- JoseService: Compact JWS decoding and verification
"""

from wallet_oidc.port.input import *
from wallet_oidc.port.output import *
