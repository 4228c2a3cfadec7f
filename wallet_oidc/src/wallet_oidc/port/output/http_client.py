"""HTTP client port - Interface for outbound requests to issuers and verifiers"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from returns.result import Result


@dataclass(frozen=True)
class HttpResponse:
    """
    Successful (2xx) HTTP response.

    Attributes:
        status_code: HTTP status code
        text: Decoded response body
        headers: Response headers (lower-cased names)
    """

    status_code: int
    text: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Parse the body as JSON (raises ValueError when it is not)"""
        return json.loads(self.text)


class TransportError(Exception):
    """
    Request could not be completed or returned a non-2xx status.

    Attributes:
        url: Request URL
        status_code: HTTP status when a response was received
        body: Response body when a response was received
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body


class HttpClient(ABC):
    """
    Outbound HTTP transport used by the flow engines.

    Every method resolves to Failure(TransportError) on connection errors,
    timeouts and non-2xx responses.
    """

    @abstractmethod
    async def get_text(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Result[HttpResponse, TransportError]:
        pass

    @abstractmethod
    async def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Result[HttpResponse, TransportError]:
        """GET with 'Accept: application/json'"""
        pass

    @abstractmethod
    async def post_form(
        self,
        url: str,
        fields: Sequence[tuple[str, str]],
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result[HttpResponse, TransportError]:
        """
        POST an application/x-www-form-urlencoded body.

        Args:
            url: Target URL
            fields: Form fields, encoded in the given order
            headers: Extra request headers

        Returns:
            Success(HttpResponse) or Failure(TransportError)
        """
        pass

    @abstractmethod
    async def post_json(
        self,
        url: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result[HttpResponse, TransportError]:
        """POST a JSON body"""
        pass
