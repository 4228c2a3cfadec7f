"""API models - Request and response DTOs"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuthorizeRequestModel(BaseModel):
    """Request to start credential issuance"""

    issuance_request: Dict[str, Any] = Field(..., description="Issuance request received from the issuer")
    user_pin: Optional[str] = Field(None, description="User PIN for pre-authorized issuance")


class AuthorizeResponseModel(BaseModel):
    """Outcome of starting issuance: a redirect to follow or an issued credential"""

    status: str = Field(..., description="'redirect' or 'issued'")
    redirect: Optional[str] = Field(None, description="Issuer authorization URL")
    client_state: Optional[str] = Field(None, description="Opaque state to return on callback")
    format: Optional[str] = Field(None, description="Credential format")
    credential: Optional[Any] = Field(None, description="Issued credential")


class IssuedCredentialResponseModel(BaseModel):
    """Credential obtained from the issuer"""

    status: str = Field("issued", description="Always 'issued'")
    format: str = Field(..., description="Credential format")
    credential: Any = Field(..., description="Issued credential")


class PresentationContextModel(BaseModel):
    """Correlation values of a presentation interaction"""

    client_id: str = Field(..., min_length=1, description="Verifier client ID")
    nonce: str = Field(..., min_length=1, description="Verifier nonce")
    redirect_uri: str = Field(..., min_length=1, description="Verifier response endpoint")


class InitiatePresentationRequestModel(BaseModel):
    """Request to start a presentation"""

    auth_token: str = Field(..., description="Wallet unlock token")
    url: str = Field(..., description="Verifier request URL carrying request_uri")


class NormalizedGroupModel(BaseModel):
    """Credentials matched for one input descriptor"""

    id: str
    name: Optional[str] = None
    purpose: Optional[str] = None
    format: Optional[str] = None
    credentials: List[Any] = Field(default_factory=list)


class InitiatePresentationResponseModel(BaseModel):
    """Matching credentials and the interaction context"""

    context: PresentationContextModel
    results: List[Dict[str, Any]] = Field(..., description="Raw query results")
    normalized: List[List[NormalizedGroupModel]] = Field(..., description="Results grouped by input descriptor")


class SubmitPresentationRequestModel(BaseModel):
    """User-approved presentation"""

    context: PresentationContextModel
    kid: str = Field(..., description="Wallet signing key ID (DID URL)")
    presentation: List[Dict[str, Any]] = Field(..., description="Reselected presentations")
    expiry: Optional[int] = Field(None, description="Token expiry (seconds since epoch)")
    alg: str = Field("ES256", description="Signing algorithm")


class SubmitPresentationResponseModel(BaseModel):
    """Verifier response to the submission"""

    redirect_uri: str
    status_code: int
    body: str


class NormalizeRequestModel(BaseModel):
    """Query and one of its results"""

    query: List[Dict[str, Any]]
    presentation: Dict[str, Any]


class ReselectRequestModel(BaseModel):
    """Presentation and the user's selections"""

    presentation: Dict[str, Any]
    selections: Dict[str, str] = Field(default_factory=dict, description="Input descriptor ID -> credential ID")


class ErrorResponseModel(BaseModel):
    """Standard error response"""

    error: str = Field(..., description="Error code")
    error_description: str = Field(..., description="Human-readable error description")
