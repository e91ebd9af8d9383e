"""
Common fixtures for the model and admin tests.
Provides a scripted rest client and the connection setup/teardown.
"""
import asyncio
import pytest
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from t6s_backend.core.config import ConnectionSettings, DatabaseConnection
from t6s_backend.core.rest_client import RestClientError, RestClientResponse
from t6s_backend.model.registry import ModelRegistry

BASE = "http://db.test:4000/api"

_NO_DATA = object()


def url(*parts: Any) -> str:
    """URL on the test resource server."""
    return "/".join([BASE] + [str(p) for p in parts])


def envelope(data: Any = _NO_DATA, status: str = "success") -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": status}
    if data is not _NO_DATA:
        body["data"] = data
    return body


@dataclass
class ScriptedResponse:
    body: Any = None
    status_code: int = 200
    error: Optional[BaseException] = None
    delay: float = 0.0


class MockRestClient:
    """
    RestClient answering from scripted responses.

    Responses are queued per (method, url); the last one of a queue is reused.
    Every call is recorded as (method, url, body).
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Any]] = []
        self._scripts: Dict[Tuple[str, str], List[ScriptedResponse]] = {}

    def on(
        self,
        method: str,
        target: str,
        data: Any = _NO_DATA,
        status: str = "success",
        body: Any = _NO_DATA,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> "MockRestClient":
        if body is _NO_DATA:
            body = envelope(data, status)
        self._scripts.setdefault((method, target), []).append(
            ScriptedResponse(body=body, error=error, delay=delay)
        )
        return self

    def fail(self, method: str, target: str, delay: float = 0.0) -> "MockRestClient":
        error = RestClientError(f"Connection refused on {method} {target}", target)
        return self.on(method, target, error=error, delay=delay)

    def calls_to(self, method: Optional[str] = None, target: Optional[str] = None) -> List[Tuple[str, str, Any]]:
        return [
            call for call in self.calls
            if (method is None or call[0] == method) and (target is None or call[1] == target)
        ]

    async def _answer(self, method: str, target: str, body: Any = None) -> RestClientResponse:
        self.calls.append((method, target, body))
        queue = self._scripts.get((method, target))
        if not queue:
            raise AssertionError(f"Unexpected request {method} {target}")
        scripted = queue[0] if len(queue) == 1 else queue.pop(0)
        if scripted.delay:
            await asyncio.sleep(scripted.delay)
        if scripted.error is not None:
            raise scripted.error
        return RestClientResponse(status_code=scripted.status_code, body=scripted.body)

    async def get(self, url: str) -> RestClientResponse:
        return await self._answer("GET", url)

    async def post(self, url: str, body: Any) -> RestClientResponse:
        return await self._answer("POST", url, body)

    async def put(self, url: str, body: Any) -> RestClientResponse:
        return await self._answer("PUT", url, body)

    async def delete(self, url: str) -> RestClientResponse:
        return await self._answer("DELETE", url)


# ========================================================================
# Fixtures
# ========================================================================

@pytest.fixture(autouse=True)
def rest():
    """Setup and teardown for each test."""
    DatabaseConnection.configure(ConnectionSettings(host="db.test", port=4000))
    client = MockRestClient()
    ModelRegistry.use_client(client)

    yield client

    ModelRegistry.clear()
    DatabaseConnection.reset()
