"""Presentation and Presentation Exchange API endpoints"""

from typing import List, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from returns.result import Failure

from wallet_oidc.api.dependencies import get_present_credential_use_case
from wallet_oidc.api.errors import error_response
from wallet_oidc.api.models import (
    ErrorResponseModel,
    InitiatePresentationRequestModel,
    InitiatePresentationResponseModel,
    NormalizedGroupModel,
    NormalizeRequestModel,
    PresentationContextModel,
    ReselectRequestModel,
    SubmitPresentationRequestModel,
    SubmitPresentationResponseModel,
)
from wallet_oidc.domain.presentation import PresentationContext, SubmitPresentationRequest
from wallet_oidc.domain.presentation_exchange import normalize, reselect
from wallet_oidc.port.input import PresentCredential

router = APIRouter(tags=["Presentation"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponseModel},
    422: {"model": ErrorResponseModel},
    502: {"model": ErrorResponseModel},
}


@router.post(
    "/presentations/initiate",
    response_model=InitiatePresentationResponseModel,
    summary="Start an OpenID4VP presentation",
    responses=ERROR_RESPONSES,
)
async def initiate_presentation(
    body: InitiatePresentationRequestModel,
    present_credential_uc: PresentCredential = Depends(get_present_credential_use_case),
) -> Union[InitiatePresentationResponseModel, JSONResponse]:
    result = await present_credential_uc.initiate(body.auth_token, body.url)
    if isinstance(result, Failure):
        return error_response(result.failure())

    initiated = result.unwrap()
    return InitiatePresentationResponseModel(
        context=PresentationContextModel(**initiated.context.model_dump()),
        results=initiated.results,
        normalized=[[NormalizedGroupModel(**group.model_dump()) for group in groups] for groups in initiated.normalized],
    )


@router.post(
    "/presentations/submit",
    response_model=SubmitPresentationResponseModel,
    summary="Submit the selected presentation to the verifier",
    responses=ERROR_RESPONSES,
)
async def submit_presentation(
    body: SubmitPresentationRequestModel,
    present_credential_uc: PresentCredential = Depends(get_present_credential_use_case),
) -> Union[SubmitPresentationResponseModel, JSONResponse]:
    context = PresentationContext(**body.context.model_dump())
    request = SubmitPresentationRequest(
        kid=body.kid, presentation=body.presentation, expiry=body.expiry, alg=body.alg
    )
    result = await present_credential_uc.submit(context, request)
    if isinstance(result, Failure):
        return error_response(result.failure())

    submitted = result.unwrap()
    return SubmitPresentationResponseModel(
        redirect_uri=submitted.redirect_uri, status_code=submitted.status_code, body=submitted.body
    )


@router.post(
    "/presentation-exchange/normalize",
    response_model=List[NormalizedGroupModel],
    summary="Group a query result by input descriptor",
    responses={422: {"model": ErrorResponseModel}},
)
async def normalize_presentation(body: NormalizeRequestModel) -> Union[List[NormalizedGroupModel], JSONResponse]:
    result = normalize(body.query, body.presentation)
    if isinstance(result, Failure):
        return error_response(result.failure())
    return [NormalizedGroupModel(**group.model_dump()) for group in result.unwrap()]


@router.post(
    "/presentation-exchange/reselect",
    summary="Keep only the selected credential per input descriptor",
    responses={422: {"model": ErrorResponseModel}},
)
async def reselect_presentation(body: ReselectRequestModel) -> JSONResponse:
    result = reselect(body.presentation, body.selections)
    if isinstance(result, Failure):
        return error_response(result.failure())
    return JSONResponse(content=result.unwrap())
