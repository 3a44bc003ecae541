"""
Shared test fixtures for rest-plan tests.

Provides a mock HTTP transport, a recording requester, and sample
interface declarations.
"""

from __future__ import annotations

from typing import Annotated, Any, Protocol

import httpx
import pytest

from rest_plan.declarations import Body, HeaderParam, PathParam, QueryParam, get, header, post
from rest_plan.factory import ImplementationFactory
from rest_plan.models import CancellationToken, RequestInfo, Response


# -----------------------------------------------------------------------------
# Mock HTTP Transport
# -----------------------------------------------------------------------------


class MockTransport(httpx.AsyncBaseTransport):
    """
    Transport that answers from a routing table instead of the network.

    Routes are keyed by "METHOD /path" or by a bare "/path" matching any
    method; the method-specific route wins. Unrouted requests get a 404.
    Every request is recorded, in order, on `requests`.
    """

    def __init__(self, routes: dict[str, tuple[int, Any]]):
        self.routes = dict(routes)
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, status: int, payload: Any) -> None:
        self.routes[f"{method.upper()} {path}"] = (status, payload)

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == method.upper()]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        path = request.url.path
        for key in (f"{request.method} {path}", path):
            if key in self.routes:
                status, payload = self.routes[key]
                return httpx.Response(status, json=payload, request=request)

        return httpx.Response(404, json={"error": "Not found"}, request=request)


# -----------------------------------------------------------------------------
# Recording Requester
# -----------------------------------------------------------------------------


class RecordingRequester:
    """Requester that records every call and returns a canned result."""

    def __init__(self, result: Any = None):
        self.result = result
        self.calls: list[tuple[str, RequestInfo, Any]] = []

    async def execute_void(self, info: RequestInfo) -> None:
        self.calls.append(("void", info, None))

    async def execute_typed(self, info: RequestInfo, result_type: Any) -> Any:
        self.calls.append(("typed", info, result_type))
        return self.result

    async def execute_raw_response(self, info: RequestInfo) -> Any:
        self.calls.append(("raw_response", info, None))
        return self.result

    async def execute_envelope(self, info: RequestInfo, result_type: Any) -> Any:
        self.calls.append(("envelope", info, result_type))
        return self.result

    @property
    def last(self) -> tuple[str, RequestInfo, Any]:
        return self.calls[-1]


# -----------------------------------------------------------------------------
# Sample Interfaces
# -----------------------------------------------------------------------------


@header("X-Client", "tests")
@header("Accept", "application/json")
class ItemsApi(Protocol):
    @get("/items")
    async def list_items(
        self,
        q: Annotated[str | None, QueryParam()] = None,
        page_size: Annotated[int, QueryParam("pageSize")] = 20,
    ) -> list[dict]: ...

    @get("/items/{id}")
    @header("Cache-Control", "no-cache")
    async def get_item(self, id: Annotated[int, PathParam()]) -> dict: ...

    @get("/items/{id}")
    async def get_item_response(self, id: Annotated[int, PathParam()]) -> Response[dict]: ...

    @get("/items/{id}")
    async def get_item_raw(self, id: Annotated[int, PathParam()]) -> httpx.Response: ...

    @post("/items")
    async def create_item(
        self,
        item: Annotated[dict, Body()],
        api_key: Annotated[str, HeaderParam("X-Api-Key")],
        cancellation_token: CancellationToken = CancellationToken.none(),
    ) -> None: ...


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def factory() -> ImplementationFactory:
    """A fresh, empty implementation cache."""
    return ImplementationFactory()


@pytest.fixture
def requester() -> RecordingRequester:
    return RecordingRequester()


@pytest.fixture
def items_api(factory: ImplementationFactory, requester: RecordingRequester) -> ItemsApi:
    return factory.create_implementation(ItemsApi, requester)


@pytest.fixture
def mock_transport() -> MockTransport:
    """Routes for the ItemsApi sample; writes are routed per test."""
    return MockTransport({
        "GET /items": (200, [{"id": 1, "name": "Item 1"}]),
        "GET /items/1": (200, {"id": 1, "name": "Item 1"}),
        "/items/999": (404, {"error": "Not found"}),
    })


@pytest.fixture
async def http_client(mock_transport: MockTransport):
    client = httpx.AsyncClient(
        base_url="https://api.example.com",
        transport=mock_transport,
    )
    yield client
    await client.aclose()
