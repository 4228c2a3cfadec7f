"""PresentCredential use case implementation (OpenID4VP)"""

import logging
from typing import Any, Dict, Union

from returns.result import Failure, Result, Success

from wallet_oidc.domain.presentation import (
    CredentialQueryError,
    MissingAuthTokenError,
    PresentationContext,
    PresentationFlowError,
    PresentationInitiated,
    RequestObject,
    RequestObjectError,
    RequestSignatureError,
    SubmissionError,
    SubmissionResult,
    SubmitPresentationRequest,
    VerificationMethodNotFoundError,
    build_context,
    build_id_token_payload,
    build_presentation_query,
    build_token_header,
    build_vp_token_payload,
    extract_presentation_definition,
    extract_request_uri,
    select_verification_method,
    validate_submission,
)
from wallet_oidc.domain.presentation_exchange import NormalizedGroup, PresentationExchangeError, normalize
from wallet_oidc.domain.value_objects import KeyId
from wallet_oidc.port.input import PresentCredential
from wallet_oidc.port.output import (
    CredentialQueryService,
    DIDResolver,
    HttpClient,
    JoseService,
    NoResultFound,
    TokenSigner,
)

LOGGER = logging.getLogger(__name__)


class OpenID4VPImpl(PresentCredential):
    """
    Implementation of the PresentCredential use case.

    The interaction's client_id, nonce and redirect_uri are returned to the
    caller in a PresentationContext rather than kept on the instance.
    """

    def __init__(
        self,
        http_client: HttpClient,
        did_resolver: DIDResolver,
        credential_query: CredentialQueryService,
        token_signer: TokenSigner,
        jose_service: JoseService,
    ):
        self.http_client = http_client
        self.did_resolver = did_resolver
        self.credential_query = credential_query
        self.token_signer = token_signer
        self.jose_service = jose_service

    async def initiate(
        self, auth_token: str, request_url: str
    ) -> Result[PresentationInitiated, Union[PresentationFlowError, PresentationExchangeError]]:
        """
        Fetch a verifier request and find matching credentials.

        Flow:
        1. Extract request_uri from the request URL
        2. Fetch and decode the request object
        3. Resolve the verifier key from the kid and verify the signature
        4. Read the presentation definition and interaction context
        5. Query the wallet with the definition
        6. Normalize each result by input descriptor
        """
        try:
            if not auth_token:
                return Failure(MissingAuthTokenError())

            uri_result = extract_request_uri(request_url)
            if isinstance(uri_result, Failure):
                return uri_result

            request_object_result = await self._fetch_request_object(uri_result.unwrap())
            if isinstance(request_object_result, Failure):
                return request_object_result
            request_object = request_object_result.unwrap()

            verify_result = await self._verify_request_object(request_object)
            if isinstance(verify_result, Failure):
                return verify_result

            definition = extract_presentation_definition(request_object.payload)
            if definition is None:
                return Failure(RequestObjectError("request object has no presentation definition"))

            context_result = build_context(request_object)
            if isinstance(context_result, Failure):
                return context_result
            context = context_result.unwrap()

            query = build_presentation_query(definition)
            query_result = await self.credential_query.query(auth_token, query)
            if isinstance(query_result, Failure):
                error = query_result.failure()
                if isinstance(error, NoResultFound):
                    return Failure(CredentialQueryError("requested credentials were not found", cause=error))
                return Failure(CredentialQueryError(f"credential query failed: {error}", cause=error))
            results = query_result.unwrap()

            normalized: list[list[NormalizedGroup]] = []
            for presentation in results:
                groups = normalize(query, presentation)
                if isinstance(groups, Failure):
                    return groups
                normalized.append(groups.unwrap())

            LOGGER.info(
                "Presentation requested by %s matched %d result(s)",
                context.client_id,
                len(results),
            )
            return Success(PresentationInitiated(context=context, results=results, normalized=normalized))

        except Exception as e:
            return Failure(PresentationFlowError(f"Unexpected error: {e}", cause=e))

    async def submit(
        self, context: PresentationContext, request: SubmitPresentationRequest
    ) -> Result[SubmissionResult, PresentationFlowError]:
        """
        Sign the ID and VP tokens and post them to the verifier.

        Flow:
        1. Validate the submission request
        2. Build and sign the ID token (presentation submission)
        3. Build and sign the VP token (selected credentials)
        4. Form-post both to the context's redirect_uri
        """
        try:
            validated = validate_submission(request)
            if isinstance(validated, Failure):
                return validated

            presentation = request.presentation[0]
            did = KeyId(request.kid).did
            header = build_token_header(request.alg, request.kid)

            id_token = self._sign(header, build_id_token_payload(did, context, presentation, request.expiry), "id_token")
            if isinstance(id_token, Failure):
                return id_token

            vp_token = self._sign(header, build_vp_token_payload(did, context, presentation, request.expiry), "vp_token")
            if isinstance(vp_token, Failure):
                return vp_token

            response = await self.http_client.post_form(
                context.redirect_uri,
                [("id_token", id_token.unwrap()), ("vp_token", vp_token.unwrap())],
            )
            if isinstance(response, Failure):
                error = response.failure()
                LOGGER.warning("Verifier %s rejected presentation: %s", context.client_id, error)
                return Failure(SubmissionError(f"failed to submit presentation: {error}", cause=error))

            submitted = response.unwrap()
            LOGGER.info("Presentation submitted to %s", context.client_id)
            return Success(
                SubmissionResult(
                    redirect_uri=context.redirect_uri,
                    status_code=submitted.status_code,
                    body=submitted.text,
                )
            )

        except Exception as e:
            return Failure(PresentationFlowError(f"Unexpected error: {e}", cause=e))

    async def _fetch_request_object(self, request_uri: str) -> Result[RequestObject, PresentationFlowError]:
        LOGGER.debug("Fetching request object from %s", request_uri)
        response = await self.http_client.get_text(request_uri)
        if isinstance(response, Failure):
            error = response.failure()
            return Failure(RequestObjectError(f"failed to fetch request object: {error}", cause=error))

        token = response.unwrap().text.strip()
        decoded = self.jose_service.decode_unverified(token)
        if isinstance(decoded, Failure):
            error = decoded.failure()
            return Failure(RequestObjectError(f"request object is not a valid JWT: {error}", cause=error))

        header, payload = decoded.unwrap()
        if not header.get("kid"):
            return Failure(RequestObjectError("request object header has no kid"))
        if not header.get("alg"):
            return Failure(RequestObjectError("request object header has no alg"))
        return Success(RequestObject(header=header, payload=payload, token=token))

    async def _verify_request_object(self, request_object: RequestObject) -> Result[Dict[str, Any], PresentationFlowError]:
        kid = request_object.kid
        resolved = await self.did_resolver.resolve(KeyId(kid).did)
        if isinstance(resolved, Failure):
            return Failure(VerificationMethodNotFoundError(kid, cause=resolved.failure()))

        method = select_verification_method(resolved.unwrap(), kid)
        if method is None or not method.get("publicKeyJwk"):
            return Failure(VerificationMethodNotFoundError(kid))

        verified = self.jose_service.verify(request_object.token, method["publicKeyJwk"], request_object.alg)
        if isinstance(verified, Failure):
            error = verified.failure()
            LOGGER.warning("Request object signature from %s did not verify", kid)
            return Failure(RequestSignatureError(f"request object signature verification failed: {error}", cause=error))
        return verified

    def _sign(self, header: Dict[str, Any], payload: Dict[str, Any], name: str) -> Result[str, PresentationFlowError]:
        signed = self.token_signer.sign(header, payload)
        if isinstance(signed, Failure):
            error = signed.failure()
            return Failure(SubmissionError(f"failed to sign {name}: {error}", cause=error))
        return signed
