"""Issuance API endpoints"""

from typing import Optional, Union

from fastapi import APIRouter, Cookie, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from returns.result import Failure

from wallet_oidc.api.dependencies import get_issue_credential_use_case
from wallet_oidc.api.errors import error_response, invalid_request
from wallet_oidc.api.models import (
    AuthorizeRequestModel,
    AuthorizeResponseModel,
    ErrorResponseModel,
    IssuedCredentialResponseModel,
)
from wallet_oidc.domain.issuance import AuthorizationRedirect, IssuanceRequest
from wallet_oidc.port.input import DeferredIssuance, IssueCredential

router = APIRouter(prefix="/issuance", tags=["Issuance"])

CLIENT_STATE_COOKIE = "client_state"


@router.post(
    "/authorize",
    response_model=AuthorizeResponseModel,
    summary="Start credential issuance",
    responses={400: {"model": ErrorResponseModel}, 502: {"model": ErrorResponseModel}},
)
async def authorize(
    body: AuthorizeRequestModel,
    issue_credential_uc: IssueCredential = Depends(get_issue_credential_use_case),
) -> Union[AuthorizeResponseModel, JSONResponse]:
    """
    Start issuance for a request received from an issuer.

    Authorization-code requests return the issuer redirect and set the
    client_state cookie read back by the callback. Pre-authorized requests
    return the issued credential, waiting for deferred issuers as needed.
    """
    try:
        issuance_request = IssuanceRequest.model_validate(body.issuance_request)
    except ValidationError as e:
        return invalid_request(f"Invalid issuance request: {e}")

    result = await issue_credential_uc.authorize(issuance_request, body.user_pin)
    if isinstance(result, Failure):
        return error_response(result.failure())

    outcome = result.unwrap()

    if isinstance(outcome, AuthorizationRedirect):
        response = JSONResponse(
            content=AuthorizeResponseModel(
                status="redirect", redirect=outcome.redirect, client_state=outcome.client_state
            ).model_dump(exclude_none=True)
        )
        response.set_cookie(CLIENT_STATE_COOKIE, outcome.client_state, httponly=True, samesite="lax")
        return response

    if isinstance(outcome, DeferredIssuance):
        deferred = await outcome.result()
        if isinstance(deferred, Failure):
            return error_response(deferred.failure())
        outcome = deferred.unwrap()

    return AuthorizeResponseModel(status="issued", format=outcome.format, credential=outcome.credential)


@router.get(
    "/callback",
    response_model=IssuedCredentialResponseModel,
    summary="Wallet OIDC redirect endpoint",
    responses={400: {"model": ErrorResponseModel}, 502: {"model": ErrorResponseModel}},
)
async def callback(
    request: Request,
    client_state_cookie: Optional[str] = Cookie(None, alias=CLIENT_STATE_COOKIE),
    client_state_param: Optional[str] = Query(None, alias=CLIENT_STATE_COOKIE),
    issue_credential_uc: IssueCredential = Depends(get_issue_credential_use_case),
) -> Union[IssuedCredentialResponseModel, JSONResponse]:
    """
    Complete an authorization-code flow.

    The issuer redirects here with code and state; the client state comes from
    the cookie set by /issuance/authorize or a client_state query parameter.
    """
    client_state = client_state_cookie or client_state_param
    result = await issue_credential_uc.callback(str(request.url), client_state)
    if isinstance(result, Failure):
        return error_response(result.failure())

    issued = result.unwrap()
    response = JSONResponse(
        content=IssuedCredentialResponseModel(format=issued.format, credential=issued.credential).model_dump()
    )
    response.delete_cookie(CLIENT_STATE_COOKIE)
    return response
