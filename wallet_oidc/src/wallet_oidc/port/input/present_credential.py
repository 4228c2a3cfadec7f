"""Present credential use case - OpenID4VP wallet flow"""

from abc import ABC, abstractmethod
from typing import Union

from returns.result import Result

from wallet_oidc.domain.presentation import (
    PresentationContext,
    PresentationFlowError,
    PresentationInitiated,
    SubmissionResult,
    SubmitPresentationRequest,
)
from wallet_oidc.domain.presentation_exchange import PresentationExchangeError


class PresentCredential(ABC):
    """
    Use case: answer a verifier's OpenID4VP request.

    Flow:
    1. initiate() fetches and verifies the request object, queries the wallet
       and returns matching credentials with the interaction context
    2. The user picks credentials (see presentation_exchange.reselect)
    3. submit() signs the ID and VP tokens and posts them to the verifier
    """

    @abstractmethod
    async def initiate(
        self, auth_token: str, request_url: str
    ) -> Result[PresentationInitiated, Union[PresentationFlowError, PresentationExchangeError]]:
        """
        Start a presentation.

        Args:
            auth_token: Wallet unlock token for credential queries
            request_url: Verifier deep link carrying request_uri

        Returns:
            Success(PresentationInitiated) or Failure(PresentationFlowError |
            PresentationExchangeError)
        """
        pass

    @abstractmethod
    async def submit(
        self, context: PresentationContext, request: SubmitPresentationRequest
    ) -> Result[SubmissionResult, PresentationFlowError]:
        """
        Sign and post the response tokens.

        Args:
            context: Context returned by initiate()
            request: Selected presentation and signing parameters

        Returns:
            Success(SubmissionResult) or Failure(PresentationFlowError)
        """
        pass
