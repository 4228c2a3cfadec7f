"""OpenID4VP presentation models, errors and token builders"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, Field
from returns.result import Failure, Result, Success

from wallet_oidc.domain.presentation_exchange import NormalizedGroup
from wallet_oidc.domain.value_objects import (
    SELF_ISSUED_V2_ISSUER,
    VERIFIABLE_CREDENTIALS_CONTEXT,
    KeyId,
    QueryType,
)

DEFAULT_TOKEN_ALGORITHM = "ES256"


# ======================
# Error Types
# ======================


class PresentationFlowError(Exception):
    """Base error for presentation flows"""

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class MissingAuthTokenError(PresentationFlowError):
    """Wallet auth token was not supplied"""

    def __init__(self) -> None:
        super().__init__("auth token is required to query the wallet")


class InvalidRequestURLError(PresentationFlowError):
    """Presentation request URL carries no request_uri"""


class RequestObjectError(PresentationFlowError):
    """Request object cannot be fetched, decoded or is incomplete"""


class VerificationMethodNotFoundError(PresentationFlowError):
    """Verifier DID document has no verification method for the request kid"""

    def __init__(self, kid: str, cause: Optional[BaseException] = None):
        super().__init__(f"no verification method found for key {kid}", cause)
        self.kid = kid


class RequestSignatureError(PresentationFlowError):
    """Request object signature does not verify against the verifier key"""


class CredentialQueryError(PresentationFlowError):
    """Wallet credential query failed"""


class InvalidSubmissionError(PresentationFlowError):
    """Submission request is missing required values"""


class SubmissionError(PresentationFlowError):
    """Response tokens could not be signed or posted to the verifier"""


# ======================
# Models
# ======================


@dataclass(frozen=True)
class RequestObject:
    """
    Decoded verifier request object.

    Attributes:
        header: JOSE header
        payload: JWT claims
        token: Compact serialization as fetched
    """

    header: dict[str, Any]
    payload: dict[str, Any]
    token: str

    @property
    def kid(self) -> Optional[str]:
        return self.header.get("kid")

    @property
    def alg(self) -> Optional[str]:
        return self.header.get("alg")


class PresentationContext(BaseModel):
    """
    Correlation values of one presentation interaction.

    Returned by initiate() and handed back to submit(), so that a single
    engine can serve any number of interactions.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., min_length=1)
    nonce: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)


@dataclass(frozen=True)
class SubmitPresentationRequest:
    """
    User-approved presentation to send to the verifier.

    Attributes:
        kid: Wallet key ID used to sign both tokens (DID URL)
        presentation: Reselected query results; the first one is submitted
        expiry: Token expiry (JWT NumericDate)
        alg: Signing algorithm
    """

    kid: str
    presentation: list[dict[str, Any]]
    expiry: Optional[int]
    alg: str = DEFAULT_TOKEN_ALGORITHM


@dataclass(frozen=True)
class PresentationInitiated:
    """
    Result of initiating a presentation.

    Attributes:
        context: Values to hand back to submit()
        results: Raw credential query results
        normalized: Normalized groups, one list per query result
    """

    context: PresentationContext
    results: list[dict[str, Any]]
    normalized: list[list[NormalizedGroup]] = field(default_factory=list)


@dataclass(frozen=True)
class SubmissionResult:
    """Verifier response to the posted tokens"""

    redirect_uri: str
    status_code: int
    body: str


# ======================
# Request handling
# ======================


def extract_request_uri(request_url: str) -> Result[str, InvalidRequestURLError]:
    """
    Extract the request_uri parameter of a presentation request URL.

    Accepts both 'openid-vc://?request_uri=...' deep links and plain https URLs.
    """
    if not request_url or not request_url.strip():
        return Failure(InvalidRequestURLError("request url is missing"))

    query = urlsplit(request_url.strip()).query
    values = parse_qs(query).get("request_uri")
    if not values or not values[0]:
        return Failure(InvalidRequestURLError("invalid request url: request_uri is missing"))
    return Success(values[0])


def extract_presentation_definition(payload: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """
    Presentation definition requested by a request object payload.

    Found under claims.vp_token.presentation_definition; a definition placed
    directly under claims.vp_token is accepted as well.
    """
    claims = payload.get("claims")
    if not isinstance(claims, Mapping):
        return None
    vp_token = claims.get("vp_token")
    if not isinstance(vp_token, Mapping):
        return None
    definition = vp_token.get("presentation_definition")
    if isinstance(definition, Mapping):
        return dict(definition)
    if "input_descriptors" in vp_token:
        return dict(vp_token)
    return None


def build_context(request_object: RequestObject) -> Result[PresentationContext, RequestObjectError]:
    payload = request_object.payload
    missing = [name for name in ("client_id", "nonce", "redirect_uri") if not payload.get(name)]
    if missing:
        return Failure(RequestObjectError(f"request object is missing {', '.join(missing)}"))
    return Success(
        PresentationContext(
            client_id=payload["client_id"],
            nonce=payload["nonce"],
            redirect_uri=payload["redirect_uri"],
        )
    )


def build_presentation_query(definition: Mapping[str, Any]) -> list[dict[str, Any]]:
    return [{"type": QueryType.PRESENTATION_EXCHANGE.value, "credentialQuery": [dict(definition)]}]


def select_verification_method(did_document: Mapping[str, Any], kid: str) -> Optional[dict[str, Any]]:
    """
    Find the verification method a request kid refers to.

    A DID URL kid matches the method with that ID (relative '#fragment' IDs
    included); a bare DID kid matches the first method of that DID.
    """
    key_id = KeyId(kid)
    for method in did_document.get("verificationMethod") or []:
        method_id = method.get("id", "")
        if method_id.startswith("#"):
            method_id = key_id.did + method_id
        if key_id.fragment is None:
            if method_id.split("#", 1)[0] == key_id.did:
                return method
        elif method_id == kid:
            return method
    return None


# ======================
# Submission
# ======================


def validate_submission(request: SubmitPresentationRequest) -> Result[SubmitPresentationRequest, InvalidSubmissionError]:
    if not request.kid or not request.kid.strip():
        return Failure(InvalidSubmissionError("kid is missing"))
    if not request.presentation:
        return Failure(InvalidSubmissionError("presentation is missing"))

    first = request.presentation[0]
    for name in ("presentation_submission", "type", "verifiableCredential"):
        if not first.get(name):
            return Failure(InvalidSubmissionError(f"presentation is missing {name}"))

    if not request.expiry:
        return Failure(InvalidSubmissionError("expiry is missing"))
    return Success(request)


def build_token_header(alg: str, kid: str) -> dict[str, Any]:
    return {"alg": alg, "kid": kid, "typ": "JWT"}


def build_id_token_payload(
    did: str, context: PresentationContext, presentation: Mapping[str, Any], expiry: int
) -> dict[str, Any]:
    """Self-issued ID token carrying the presentation submission"""
    return {
        "sub": did,
        "nonce": context.nonce,
        "_vp_token": {"presentation_submission": presentation["presentation_submission"]},
        "aud": context.client_id,
        "iss": SELF_ISSUED_V2_ISSUER,
        "exp": expiry,
    }


def build_vp_token_payload(
    did: str, context: PresentationContext, presentation: Mapping[str, Any], expiry: int
) -> dict[str, Any]:
    """VP token wrapping the selected credentials"""
    return {
        "nonce": context.nonce,
        "vp": {
            "@context": presentation.get("@context") or [VERIFIABLE_CREDENTIALS_CONTEXT],
            "type": presentation["type"],
            "verifiableCredential": presentation["verifiableCredential"],
        },
        "aud": context.client_id,
        "iss": did,
        "exp": expiry,
    }
