"""
Transport collaborator used by the model layer.

The model only needs four verbs that either return a decoded response or raise
RestClientError. Whether the call was meaningful is decided afterwards from the
`{status, data}` envelope, so any HTTP status carrying a JSON body counts as a
delivered response.
"""
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel

logger = logging.getLogger("RestClient")

_MISSING = object()


class RestClientError(Exception):
    """The request could not be delivered or its answer could not be decoded."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        response: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.response = response
        self.cause = cause


class RestClientResponse(BaseModel):
    """Decoded answer of the resource server."""
    status_code: int = 0
    body: Any = None

    def status(self) -> Optional[str]:
        if isinstance(self.body, dict):
            return self.body.get("status")
        return None

    def has_data(self) -> bool:
        return isinstance(self.body, dict) and "data" in self.body

    def data(self) -> Any:
        if not self.has_data():
            return None
        return self.body["data"]


@runtime_checkable
class RestClient(Protocol):
    async def get(self, url: str) -> RestClientResponse: ...
    async def post(self, url: str, body: Any) -> RestClientResponse: ...
    async def put(self, url: str, body: Any) -> RestClientResponse: ...
    async def delete(self, url: str) -> RestClientResponse: ...


class HttpxRestClient:
    """RestClient backed by httpx.AsyncClient."""

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._transport = transport

    async def get(self, url: str) -> RestClientResponse:
        return await self._send("GET", url)

    async def post(self, url: str, body: Any) -> RestClientResponse:
        return await self._send("POST", url, body)

    async def put(self, url: str, body: Any) -> RestClientResponse:
        return await self._send("PUT", url, body)

    async def delete(self, url: str) -> RestClientResponse:
        return await self._send("DELETE", url)

    async def _send(self, method: str, url: str, body: Any = _MISSING) -> RestClientResponse:
        logger.debug(f"{method} {url}")
        kwargs = {"headers": {"Content-Type": "application/json"}}
        if body is not _MISSING:
            kwargs["json"] = body
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout on {method} {url}")
            raise RestClientError(f"Timeout on {method} {url}", url, cause=e) from e
        except httpx.NetworkError as e:
            logger.warning(f"Network error on {method} {url}: {e}")
            raise RestClientError(f"Network error on {method} {url}: {e}", url, cause=e) from e
        except httpx.HTTPError as e:
            logger.warning(f"HTTP error on {method} {url}: {e}")
            raise RestClientError(f"HTTP error on {method} {url}: {e}", url, cause=e) from e

        try:
            decoded = response.json()
        except ValueError as e:
            raise RestClientError(
                f"Undecodable answer to {method} {url}",
                url,
                status_code=response.status_code,
                response=response.text,
                cause=e,
            ) from e
        logger.debug(f"{method} {url} answered {response.status_code}")
        return RestClientResponse(status_code=response.status_code, body=decoded)
