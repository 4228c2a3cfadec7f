"""Issue credential use case - OpenID4CI wallet flows"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from returns.result import Result

from wallet_oidc.domain.issuance import (
    AuthorizationRedirect,
    IssuanceError,
    IssuanceRequest,
    IssuedCredential,
)


class DeferredIssuance(ABC):
    """
    Pre-authorized issuance waiting for the issuer to authorize the grant.

    Polling runs in the background once started; callers await result() or
    cancel() it.
    """

    @abstractmethod
    async def result(self) -> Result[IssuedCredential, IssuanceError]:
        """
        Wait for the deferred flow to finish.

        Returns:
            Success(IssuedCredential) or Failure(IssuanceError);
            Failure(IssuanceCancelledError) once cancelled
        """
        pass

    @abstractmethod
    def cancel(self) -> bool:
        """Stop polling. Returns False if the flow already finished."""
        pass

    @abstractmethod
    def done(self) -> bool:
        pass


AuthorizeOutcome = Union[AuthorizationRedirect, IssuedCredential, DeferredIssuance]


class IssueCredential(ABC):
    """
    Use case: obtain a credential from an OpenID4CI issuer.

    Flow (authorization code):
    1. authorize() pushes an authorization request and returns the issuer
       redirect plus opaque client state for the caller to keep
    2. The user authenticates at the issuer, which redirects to the wallet
    3. callback() validates the redirect against the client state, exchanges
       the code and fetches the credential

    Flow (pre-authorized code):
    1. authorize() exchanges the code (and PIN) and fetches the credential
       directly, or returns a DeferredIssuance while the issuer is pending
    """

    @abstractmethod
    async def authorize(
        self, issuance_request: IssuanceRequest, user_pin: Optional[str] = None
    ) -> Result[AuthorizeOutcome, IssuanceError]:
        """
        Start issuance.

        Args:
            issuance_request: Issuance request received from the issuer
            user_pin: PIN for pre-authorized grants that require one

        Returns:
            Success(AuthorizationRedirect | IssuedCredential | DeferredIssuance)
            or Failure(IssuanceError)
        """
        pass

    @abstractmethod
    async def callback(self, callback_uri: str, client_state: Optional[str]) -> Result[IssuedCredential, IssuanceError]:
        """
        Complete an authorization-code flow.

        Args:
            callback_uri: Full wallet redirect URI including code and state
            client_state: Opaque state returned by authorize()

        Returns:
            Success(IssuedCredential) or Failure(IssuanceError)
        """
        pass
