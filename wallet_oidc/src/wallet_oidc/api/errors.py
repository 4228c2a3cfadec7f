"""Mapping of flow errors to HTTP error responses"""

import logging
import re

from fastapi.responses import JSONResponse

from wallet_oidc.api.models import ErrorResponseModel
from wallet_oidc.domain.issuance import (
    AuthorizationPendingTimeoutError,
    IssuerCommunicationError,
    MalformedStateError,
    MissingAuthorizationCodeError,
    MissingClientStateError,
    MissingPINError,
    MissingStateError,
    StateMismatchError,
)
from wallet_oidc.domain.presentation import (
    CredentialQueryError,
    InvalidRequestURLError,
    InvalidSubmissionError,
    MissingAuthTokenError,
    RequestObjectError,
    RequestSignatureError,
    SubmissionError,
    VerificationMethodNotFoundError,
)
from wallet_oidc.domain.presentation_exchange import PresentationExchangeError

LOGGER = logging.getLogger(__name__)

BAD_REQUEST = (
    MissingPINError,
    MissingAuthorizationCodeError,
    MissingStateError,
    MissingClientStateError,
    MalformedStateError,
    StateMismatchError,
    MissingAuthTokenError,
    InvalidRequestURLError,
    InvalidSubmissionError,
)
UNPROCESSABLE = (
    PresentationExchangeError,
    VerificationMethodNotFoundError,
    CredentialQueryError,
)
BAD_GATEWAY = (
    IssuerCommunicationError,
    AuthorizationPendingTimeoutError,
    RequestObjectError,
    RequestSignatureError,
    SubmissionError,
)


def error_code(error: Exception) -> str:
    """snake_case error code from the exception class name"""
    name = type(error).__name__
    if name.endswith("Error") and name != "Error":
        name = name[: -len("Error")]
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name).lower()


def status_for(error: Exception) -> int:
    if isinstance(error, BAD_REQUEST):
        return 400
    if isinstance(error, UNPROCESSABLE):
        return 422
    if isinstance(error, BAD_GATEWAY):
        return 502
    return 500


def error_response(error: Exception) -> JSONResponse:
    status = status_for(error)
    if status >= 500:
        LOGGER.warning("Request failed: %s", error)
    return JSONResponse(
        status_code=status,
        content=ErrorResponseModel(error=error_code(error), error_description=str(error)).model_dump(),
    )


def invalid_request(description: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorResponseModel(error="invalid_request", error_description=description).model_dump(),
    )
