"""OpenID4CI issuance models, errors and wire-format builders

This module holds everything about credential issuance that does not need a
network: the documents exchanged with the issuer, the transaction state that
crosses the redirect boundary, and pure functions that build each request
body exactly as the issuer expects it.

Request builders return lists of (name, value) pairs so that form fields are
encoded in a stable order.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from wallet_oidc.domain.value_objects import (
    AUTHORIZATION_DETAILS_TYPE,
    WELL_KNOWN_OPENID_CONFIGURATION,
    GrantType,
    OAuthState,
    ProofType,
)


# ======================
# Issuer documents
# ======================


class IssuanceRequest(BaseModel):
    """
    Issuance request received out of band from an issuer.

    Attributes:
        issuer: Issuer base URI (metadata lives under its .well-known path)
        credential_type: Type of credential being requested
        user_pin_required: Whether the pre-authorized grant needs a user PIN
        op_state: Issuer correlation token for issuer-initiated flows
        pre_authorized_code: Code for the pre-authorized grant
    """

    model_config = ConfigDict(frozen=True)

    issuer: str = Field(..., min_length=1, description="Issuer base URI")
    credential_type: str = Field(
        ...,
        validation_alias=AliasChoices("credential_type", "credentialType"),
        description="Requested credential type",
    )
    user_pin_required: bool = Field(
        False,
        validation_alias=AliasChoices("user_pin_required", "userPINRequired"),
        description="PIN required for pre-auth",
    )
    op_state: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("op_state", "opState"),
        description="Issuer-initiated op_state",
    )
    pre_authorized_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("pre_authorized_code", "pre-authorized_code", "preAuthorizedCode"),
        description="Pre-authorized code",
    )

    @field_validator("issuer")
    @classmethod
    def validate_issuer(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("issuer cannot be blank")
        return v

    @property
    def is_pre_authorized(self) -> bool:
        return bool(self.pre_authorized_code)


class IssuerMetadata(BaseModel):
    """OpenID discovery document of a credential issuer"""

    model_config = ConfigDict(frozen=True, extra="allow")

    issuer: str
    authorization_endpoint: Optional[str] = None
    token_endpoint: str
    pushed_authorization_request_endpoint: Optional[str] = None
    credential_endpoint: str
    require_pushed_authorization_requests: Optional[bool] = None


class TokenResponse(BaseModel):
    """Issuer token endpoint response"""

    model_config = ConfigDict(frozen=True, extra="allow")

    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    c_nonce: Optional[str] = None
    c_nonce_expires_in: Optional[int] = None
    authorization_pending: bool = False
    interval: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        """Deferred flow: the issuer has not authorized the grant yet"""
        return self.authorization_pending and not self.access_token


class CredentialResponse(BaseModel):
    """Issuer credential endpoint response"""

    model_config = ConfigDict(frozen=True, extra="allow")

    format: str
    credential: Any


class TransactionState(BaseModel):
    """
    Client-side state of one authorization-code flow.

    Carried by the caller across the browser redirect and consumed exactly
    once by the callback. Holds public flow metadata only.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    credential_type: str = Field(..., alias="credentialType")
    client_id: str = Field(..., alias="clientID")
    issuer_metadata: IssuerMetadata = Field(..., alias="issuerMetadata")
    oauth_state: str = Field(..., alias="oauthState", min_length=1)


# ======================
# Flow results
# ======================


@dataclass(frozen=True)
class AuthorizationRedirect:
    """
    Result of starting an authorization-code flow.

    Attributes:
        redirect: Issuer authorization URL the user agent must be sent to
        client_state: Opaque transaction state to hand back to callback()
    """

    redirect: str
    client_state: str


@dataclass(frozen=True)
class IssuedCredential:
    """Credential obtained from the issuer"""

    format: str
    credential: Any


# ======================
# Error Types
# ======================


class IssuanceError(Exception):
    """Base error for issuance flows"""

    def __init__(self, message: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class MissingPINError(IssuanceError):
    """Pre-authorized grant requires a user PIN but none was supplied"""

    def __init__(self) -> None:
        super().__init__("user PIN is required for this pre-authorized issuance")


class MissingAuthorizationCodeError(IssuanceError):
    """Wallet callback carries no authorization code"""

    def __init__(self) -> None:
        super().__init__("callback URI is missing the 'code' parameter")


class MissingStateError(IssuanceError):
    """Wallet callback carries no state"""

    def __init__(self) -> None:
        super().__init__("callback URI is missing the 'state' parameter")


class MissingClientStateError(IssuanceError):
    """Caller did not supply the stored client state"""

    def __init__(self) -> None:
        super().__init__("client state is required to complete issuance")


class MalformedStateError(IssuanceError):
    """Client state does not decode to a transaction state"""


class StateMismatchError(IssuanceError):
    """Callback state does not belong to the supplied transaction"""

    def __init__(self) -> None:
        super().__init__("callback state does not match the transaction's oauth state")


class IssuerCommunicationError(IssuanceError):
    """Issuer rejected a step or returned an unusable response"""


class ProofSigningError(IssuanceError):
    """Proof-of-possession signer failed"""


class AuthorizationPendingTimeoutError(IssuanceError):
    """Deferred authorization did not complete within the polling budget"""

    def __init__(self, attempts: int):
        super().__init__(f"authorization still pending after {attempts} polling attempts")
        self.attempts = attempts


class IssuanceCancelledError(IssuanceError):
    """Deferred issuance was cancelled by the caller"""

    def __init__(self) -> None:
        super().__init__("deferred issuance was cancelled")


# ======================
# Wire-format builders
# ======================


def metadata_url(issuer: str) -> str:
    """Discovery document location for an issuer"""
    return issuer.rstrip("/") + WELL_KNOWN_OPENID_CONFIGURATION


def build_pushed_authorization_request(
    client_id: str,
    redirect_uri: str,
    oauth_state: OAuthState,
    credential_type: str,
    op_state: Optional[str],
) -> list[tuple[str, str]]:
    """
    Form fields of the pushed authorization request.

    authorization_details is compact JSON, matching a JSON.stringify'd value.
    """
    authorization_details = [{"type": AUTHORIZATION_DETAILS_TYPE, "credential_type": credential_type}]
    return [
        ("response_type", "code"),
        ("client_id", client_id),
        ("redirect_uri", redirect_uri),
        ("state", str(oauth_state)),
        ("op_state", op_state or ""),
        ("authorization_details", json.dumps(authorization_details, separators=(",", ":"))),
    ]


def build_authorization_redirect(authorization_endpoint: str, request_uri: str, client_id: str) -> str:
    """Issuer authorization URL carrying the PAR request_uri"""
    separator = "&" if "?" in authorization_endpoint else "?"
    query = urlencode([("request_uri", request_uri), ("client_id", client_id)])
    return f"{authorization_endpoint}{separator}{query}"


def build_authorization_code_token_request(code: str, redirect_uri: str, client_id: str) -> list[tuple[str, str]]:
    return [
        ("grant_type", GrantType.AUTHORIZATION_CODE.value),
        ("code", code),
        ("redirect_uri", redirect_uri),
        ("client_id", client_id),
    ]


def build_pre_authorized_token_request(pre_authorized_code: str, user_pin: Optional[str]) -> list[tuple[str, str]]:
    fields = [
        ("grant_type", GrantType.PRE_AUTHORIZED_CODE.value),
        ("pre-authorized_code", pre_authorized_code),
    ]
    if user_pin:
        fields.append(("user_pin", user_pin))
    return fields


def build_credential_request(credential_type: str, user_did: str, proof_jwt: str) -> dict[str, Any]:
    return {
        "type": credential_type,
        "did": user_did,
        "proof": {"proof_type": ProofType.JWT.value, "jwt": proof_jwt},
    }
