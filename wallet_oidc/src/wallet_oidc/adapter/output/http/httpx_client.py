"""HTTP client implementation using httpx"""

import json
import logging
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import urlencode

import httpx
from returns.result import Failure, Result, Success

from wallet_oidc.port.output import HttpClient, HttpResponse, TransportError

LOGGER = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class HttpxClient(HttpClient):
    """
    HttpClient on top of httpx.AsyncClient.

    A client is opened per request, so an instance can be shared freely
    between concurrent flows. Redirects are not followed and requests are
    never retried.

    Attributes:
        timeout: Timeout in seconds applied to every request
        transport: Optional httpx transport (httpx.MockTransport in tests)
    """

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def get_text(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Result[HttpResponse, TransportError]:
        return await self._send("GET", url, headers=headers)

    async def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Result[HttpResponse, TransportError]:
        return await self._send("GET", url, headers={"Accept": JSON_CONTENT_TYPE, **(headers or {})})

    async def post_form(
        self,
        url: str,
        fields: Sequence[tuple[str, str]],
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result[HttpResponse, TransportError]:
        return await self._send(
            "POST",
            url,
            headers={"Content-Type": FORM_CONTENT_TYPE, **(headers or {})},
            content=urlencode(list(fields)).encode("ascii"),
        )

    async def post_json(
        self,
        url: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result[HttpResponse, TransportError]:
        return await self._send(
            "POST",
            url,
            headers={"Content-Type": JSON_CONTENT_TYPE, **(headers or {})},
            content=json.dumps(body).encode("utf-8"),
        )

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> Result[HttpResponse, TransportError]:
        LOGGER.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as e:
            LOGGER.warning("%s %s failed: %s", method, url, e)
            return Failure(TransportError(f"{method} {url} failed: {e}", url=url))

        if not response.is_success:
            LOGGER.warning("%s %s returned HTTP %d", method, url, response.status_code)
            return Failure(
                TransportError(
                    f"{method} {url} returned HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                    body=response.text,
                )
            )

        return Success(
            HttpResponse(
                status_code=response.status_code,
                text=response.text,
                headers={name.lower(): value for name, value in response.headers.items()},
            )
        )
