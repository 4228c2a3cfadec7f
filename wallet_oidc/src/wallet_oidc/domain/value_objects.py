"""Value objects and protocol constants shared by the issuance and presentation flows"""

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Final

WELL_KNOWN_OPENID_CONFIGURATION: Final[str] = "/.well-known/openid-configuration"
AUTHORIZATION_DETAILS_TYPE: Final[str] = "openid_credential"
SELF_ISSUED_V2_ISSUER: Final[str] = "https://self-issued.me/v2/openid-vc"
VERIFIABLE_CREDENTIALS_CONTEXT: Final[str] = "https://www.w3.org/2018/credentials/v1"


@dataclass(frozen=True)
class OAuthState:
    """
    Locally generated correlation nonce for the authorization-code flow.

    Sent as 'state' in the pushed authorization request and echoed back by the
    issuer on the wallet callback.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("OAuthState cannot be blank")

    def __str__(self) -> str:
        return self.value

    def matches(self, returned: str) -> bool:
        """Exact string comparison against the value returned by the issuer"""
        return secrets.compare_digest(self.value.encode(), returned.encode())

    @staticmethod
    def generate() -> "OAuthState":
        """Generate an unguessable state value"""
        return OAuthState(value=secrets.token_urlsafe(32))


@dataclass(frozen=True)
class KeyId:
    """
    Key identifier referencing a DID verification method.

    Usually a DID URL ('did:example:123#key-1'); a bare DID is accepted too.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("KeyId cannot be blank")

    def __str__(self) -> str:
        return self.value

    @property
    def did(self) -> str:
        """The DID part of the key identifier, without fragment"""
        return self.value.split("#", 1)[0]

    @property
    def fragment(self) -> str | None:
        if "#" not in self.value:
            return None
        return self.value.split("#", 1)[1]


class GrantType(str, Enum):
    """OAuth grant types used against the issuer token endpoint"""

    AUTHORIZATION_CODE: Final[str] = "authorization_code"
    PRE_AUTHORIZED_CODE: Final[str] = "urn:ietf:params:oauth:grant-type:pre-authorized_code"

    def __str__(self) -> str:
        return self.value


class ProofType(str, Enum):
    """Proof-of-possession types for credential requests"""

    JWT: Final[str] = "jwt"

    def __str__(self) -> str:
        return self.value


class QueryType(str, Enum):
    """Credential query types understood by the wallet runtime"""

    PRESENTATION_EXCHANGE: Final[str] = "PresentationExchange"
    QUERY_BY_EXAMPLE: Final[str] = "QueryByExample"
    QUERY_BY_FRAME: Final[str] = "QueryByFrame"
    DID_AUTH: Final[str] = "DIDAuth"

    def __str__(self) -> str:
        return self.value
