"""Deferred pre-authorized issuance polling"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from returns.result import Failure, Result

from wallet_oidc.domain.clock import Clock
from wallet_oidc.domain.issuance import (
    AuthorizationPendingTimeoutError,
    IssuanceCancelledError,
    IssuanceError,
    IssuedCredential,
    TokenResponse,
)
from wallet_oidc.port.input import DeferredIssuance

LOGGER = logging.getLogger(__name__)

PollToken = Callable[[], Awaitable[Result[TokenResponse, IssuanceError]]]
FetchCredential = Callable[[TokenResponse], Awaitable[Result[IssuedCredential, IssuanceError]]]


class DeferredIssuanceTask(DeferredIssuance):
    """
    Background task polling the issuer token endpoint.

    Each round waits through the injected clock, re-posts the token request
    and stops at the first non-pending response, which is then redeemed for
    the credential. The issuer may adjust the polling interval in any pending
    response.
    """

    def __init__(
        self,
        poll_token: PollToken,
        fetch_credential: FetchCredential,
        clock: Clock,
        interval: float,
        max_attempts: int,
    ):
        self.poll_token = poll_token
        self.fetch_credential = fetch_credential
        self.clock = clock
        self.interval = interval
        self.max_attempts = max_attempts
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "DeferredIssuanceTask":
        """Schedule polling on the running event loop"""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    async def result(self) -> Result[IssuedCredential, IssuanceError]:
        task = self.start()._task
        # wait() leaves the polling task running if our caller is cancelled
        await asyncio.wait({task})
        if task.cancelled():
            return Failure(IssuanceCancelledError())
        return task.result()

    def cancel(self) -> bool:
        if self._task is None or self._task.done():
            return False
        LOGGER.info("Cancelling deferred issuance")
        return self._task.cancel()

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def _run(self) -> Result[IssuedCredential, IssuanceError]:
        interval = self.interval
        try:
            for attempt in range(1, self.max_attempts + 1):
                await self.clock.sleep(interval)

                token_result = await self.poll_token()
                if isinstance(token_result, Failure):
                    LOGGER.warning("Deferred token request failed: %s", token_result.failure())
                    return token_result

                token = token_result.unwrap()
                if token.is_pending:
                    if token.interval:
                        interval = token.interval
                    LOGGER.debug("Authorization still pending (attempt %d/%d)", attempt, self.max_attempts)
                    continue

                LOGGER.info("Deferred authorization granted after %d attempt(s)", attempt)
                return await self.fetch_credential(token)

            LOGGER.warning("Deferred authorization still pending after %d attempts", self.max_attempts)
            return Failure(AuthorizationPendingTimeoutError(self.max_attempts))

        except Exception as e:
            return Failure(IssuanceError(f"Unexpected error: {e}", cause=e))
