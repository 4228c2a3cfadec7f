"""IssueCredential use case implementation (OpenID4CI)"""

import json
import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from returns.result import Failure, Result, Success

from wallet_oidc.application.deferred_issuance import DeferredIssuanceTask
from wallet_oidc.domain.clock import Clock
from wallet_oidc.domain.issuance import (
    AuthorizationRedirect,
    CredentialResponse,
    IssuanceError,
    IssuanceRequest,
    IssuedCredential,
    IssuerCommunicationError,
    IssuerMetadata,
    MissingAuthorizationCodeError,
    MissingClientStateError,
    MissingPINError,
    MissingStateError,
    ProofSigningError,
    StateMismatchError,
    TokenResponse,
    TransactionState,
    build_authorization_code_token_request,
    build_authorization_redirect,
    build_credential_request,
    build_pre_authorized_token_request,
    build_pushed_authorization_request,
    metadata_url,
)
from wallet_oidc.domain.transaction_state import marshal_state, unmarshal_state
from wallet_oidc.domain.value_objects import OAuthState
from wallet_oidc.domain.wallet_config import WalletConfig
from wallet_oidc.port.input import AuthorizeOutcome, IssueCredential
from wallet_oidc.port.output import HttpClient, ProofSigner, TransportError

LOGGER = logging.getLogger(__name__)

AUTHORIZATION_PENDING = "authorization_pending"


class OpenID4CIImpl(IssueCredential):
    """
    Implementation of the IssueCredential use case.

    Holds no per-flow state: the authorization-code flow's state travels
    through the caller as opaque client state, so one instance serves any
    number of concurrent issuances.
    """

    def __init__(
        self,
        config: WalletConfig,
        http_client: HttpClient,
        proof_signer: ProofSigner,
        clock: Clock,
    ):
        self.config = config
        self.http_client = http_client
        self.proof_signer = proof_signer
        self.clock = clock

    async def authorize(
        self, issuance_request: IssuanceRequest, user_pin: Optional[str] = None
    ) -> Result[AuthorizeOutcome, IssuanceError]:
        """
        Start issuance for a request received from an issuer.

        Flow (pre-authorized code):
        1. Require a PIN when the issuer asks for one
        2. Fetch issuer metadata
        3. Exchange the pre-authorized code for an access token
        4. Fetch the credential, or start deferred polling while pending

        Flow (authorization code):
        1. Fetch issuer metadata
        2. Push the authorization request with a fresh oauth state
        3. Return the issuer redirect and the marshalled transaction state
        """
        try:
            if issuance_request.is_pre_authorized:
                return await self._authorize_pre_authorized(issuance_request, user_pin)
            return await self._push_authorization_request(issuance_request)

        except Exception as e:
            return Failure(IssuanceError(f"Unexpected error: {e}", cause=e))

    async def callback(self, callback_uri: str, client_state: Optional[str]) -> Result[IssuedCredential, IssuanceError]:
        """
        Complete an authorization-code flow from the wallet redirect.

        Flow:
        1. Read code and state from the redirect URI
        2. Decode the client state
        3. Check the returned state against the transaction's oauth state
        4. Exchange the code for an access token
        5. Fetch the credential
        """
        try:
            params = parse_qs(urlsplit(callback_uri or "").query)
            code = _first(params, "code")
            if not code:
                return Failure(MissingAuthorizationCodeError())

            returned_state = _first(params, "state")
            if not returned_state:
                return Failure(MissingStateError())

            if not client_state:
                return Failure(MissingClientStateError())

            state_result = unmarshal_state(client_state, self.config.state_secret_bytes)
            if isinstance(state_result, Failure):
                LOGGER.warning("Rejected client state: %s", state_result.failure())
                return state_result

            transaction = state_result.unwrap()
            if not OAuthState(transaction.oauth_state).matches(returned_state):
                LOGGER.warning("Callback state does not match transaction for issuer %s", transaction.issuer_metadata.issuer)
                return Failure(StateMismatchError())

            token_result = await self._request_token(
                transaction.issuer_metadata,
                build_authorization_code_token_request(code, self.config.wallet_callback_uri, transaction.client_id),
            )
            if isinstance(token_result, Failure):
                return token_result

            return await self.get_credential(
                token_result.unwrap(),
                transaction.credential_type,
                transaction.issuer_metadata,
                transaction.client_id,
            )

        except Exception as e:
            return Failure(IssuanceError(f"Unexpected error: {e}", cause=e))

    async def get_credential(
        self,
        token: TokenResponse,
        credential_type: str,
        issuer_metadata: IssuerMetadata,
        client_id: str,
    ) -> Result[IssuedCredential, IssuanceError]:
        """
        Redeem an access token for a credential.

        Args:
            token: Token endpoint response
            credential_type: Credential type to request
            issuer_metadata: Issuer metadata snapshot of this flow
            client_id: Wallet client ID (proof issuer)

        Returns:
            Success(IssuedCredential) or Failure(IssuanceError)
        """
        if not token.access_token:
            return Failure(IssuerCommunicationError("token response has no access_token"))

        proof_result = self.proof_signer.sign(client_id, issuer_metadata.issuer, self.clock.timestamp(), token.c_nonce)
        if isinstance(proof_result, Failure):
            error = proof_result.failure()
            return Failure(ProofSigningError(f"failed to sign proof of possession: {error}", cause=error))

        body = build_credential_request(credential_type, self.config.user_did, proof_result.unwrap())
        LOGGER.debug("Requesting %s credential from %s", credential_type, issuer_metadata.credential_endpoint)

        response = await self.http_client.post_json(
            issuer_metadata.credential_endpoint,
            body,
            headers={"Authorization": f"Bearer {token.access_token}"},
        )
        if isinstance(response, Failure):
            error = response.failure()
            return Failure(IssuerCommunicationError(f"credential request failed: {error}", cause=error))

        try:
            credential = CredentialResponse.model_validate_json(response.unwrap().text)
        except ValueError as e:
            return Failure(IssuerCommunicationError("credential response is malformed", cause=e))

        LOGGER.info("Received %s credential (%s) from %s", credential_type, credential.format, issuer_metadata.issuer)
        return Success(IssuedCredential(format=credential.format, credential=credential.credential))

    # ======================
    # Flow steps
    # ======================

    async def _authorize_pre_authorized(
        self, issuance_request: IssuanceRequest, user_pin: Optional[str]
    ) -> Result[AuthorizeOutcome, IssuanceError]:
        if issuance_request.user_pin_required and not user_pin:
            return Failure(MissingPINError())

        metadata_result = await self._fetch_metadata(issuance_request.issuer)
        if isinstance(metadata_result, Failure):
            return metadata_result
        metadata = metadata_result.unwrap()

        fields = build_pre_authorized_token_request(issuance_request.pre_authorized_code, user_pin)
        token_result = await self._request_token(metadata, fields)
        if isinstance(token_result, Failure):
            return token_result
        token = token_result.unwrap()

        async def fetch_credential(granted: TokenResponse) -> Result[IssuedCredential, IssuanceError]:
            return await self.get_credential(granted, issuance_request.credential_type, metadata, self.config.client_id)

        if token.is_pending:
            LOGGER.info("Issuer %s deferred authorization, polling token endpoint", metadata.issuer)
            task = DeferredIssuanceTask(
                poll_token=lambda: self._request_token(metadata, fields),
                fetch_credential=fetch_credential,
                clock=self.clock,
                interval=token.interval or self.config.deferred_poll_interval_seconds,
                max_attempts=self.config.deferred_max_attempts,
            )
            return Success(task.start())

        return await fetch_credential(token)

    async def _push_authorization_request(self, issuance_request: IssuanceRequest) -> Result[AuthorizeOutcome, IssuanceError]:
        metadata_result = await self._fetch_metadata(issuance_request.issuer)
        if isinstance(metadata_result, Failure):
            return metadata_result
        metadata = metadata_result.unwrap()

        if not metadata.pushed_authorization_request_endpoint or not metadata.authorization_endpoint:
            return Failure(IssuerCommunicationError(f"issuer {metadata.issuer} does not support pushed authorization requests"))

        oauth_state = OAuthState.generate()
        fields = build_pushed_authorization_request(
            self.config.client_id,
            self.config.wallet_callback_uri,
            oauth_state,
            issuance_request.credential_type,
            issuance_request.op_state,
        )
        response = await self.http_client.post_form(metadata.pushed_authorization_request_endpoint, fields)
        if isinstance(response, Failure):
            error = response.failure()
            return Failure(IssuerCommunicationError(f"pushed authorization request failed: {error}", cause=error))

        try:
            request_uri = response.unwrap().json().get("request_uri")
        except (ValueError, AttributeError) as e:
            return Failure(IssuerCommunicationError("pushed authorization response is malformed", cause=e))
        if not request_uri:
            return Failure(IssuerCommunicationError("pushed authorization response has no request_uri"))

        transaction = TransactionState(
            credential_type=issuance_request.credential_type,
            client_id=self.config.client_id,
            issuer_metadata=metadata,
            oauth_state=str(oauth_state),
        )
        LOGGER.info("Pushed authorization request to %s", metadata.issuer)
        return Success(
            AuthorizationRedirect(
                redirect=build_authorization_redirect(metadata.authorization_endpoint, request_uri, self.config.client_id),
                client_state=marshal_state(transaction, self.config.state_secret_bytes),
            )
        )

    async def _fetch_metadata(self, issuer: str) -> Result[IssuerMetadata, IssuanceError]:
        url = metadata_url(issuer)
        LOGGER.debug("Fetching issuer metadata from %s", url)

        response = await self.http_client.get_json(url)
        if isinstance(response, Failure):
            error = response.failure()
            return Failure(IssuerCommunicationError(f"failed to fetch issuer metadata: {error}", cause=error))

        try:
            return Success(IssuerMetadata.model_validate_json(response.unwrap().text))
        except ValueError as e:
            return Failure(IssuerCommunicationError("issuer metadata is malformed", cause=e))

    async def _request_token(self, metadata: IssuerMetadata, fields: list[tuple[str, str]]) -> Result[TokenResponse, IssuanceError]:
        response = await self.http_client.post_form(metadata.token_endpoint, fields)
        if isinstance(response, Failure):
            error = response.failure()
            pending = _pending_token_error(error)
            if pending is not None:
                return Success(pending)
            return Failure(IssuerCommunicationError(f"token request failed: {error}", cause=error))

        try:
            return Success(TokenResponse.model_validate_json(response.unwrap().text))
        except ValueError as e:
            return Failure(IssuerCommunicationError("token response is malformed", cause=e))


def _first(params: dict[str, list[str]], name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


def _pending_token_error(error: TransportError) -> Optional[TokenResponse]:
    """OAuth 'authorization_pending' error response, as a pending TokenResponse"""
    if error.status_code != 400 or not error.body:
        return None
    try:
        body = json.loads(error.body)
    except ValueError:
        return None
    if not isinstance(body, dict) or body.get("error") != AUTHORIZATION_PENDING:
        return None
    return TokenResponse(authorization_pending=True, interval=body.get("interval"))
