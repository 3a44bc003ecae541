"""
RestClient: one base URL, one httpx client, any number of interfaces.

Wires an ImplementationFactory to an HttpxRequester so declared interfaces
can be used directly:

    async with RestClient("https://api.example.com") as client:
        users = client.implement(UsersApi)
        user = await users.get_user(42)
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx

from .config import HTTP_TIMEOUT_SECONDS, JSONPLACEHOLDER_BASE_URL, USER_AGENT
from .factory import ImplementationFactory, default_factory
from .http_requester import HttpxRequester

T = TypeVar("T")


class RestClient:
    """
    Builds interface implementations that send requests to `base_url`.

    The httpx client is created lazily unless one is injected; an injected
    client is still closed by close().
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        factory: ImplementationFactory | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"User-Agent": USER_AGENT, **(headers or {})}
        self.factory = factory if factory is not None else default_factory
        self._client = http_client
        self._requester: HttpxRequester | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
        return self._client

    @property
    def requester(self) -> HttpxRequester:
        if self._requester is None:
            self._requester = HttpxRequester(self.client)
        return self._requester

    def implement(self, interface_type: type[T]) -> T:
        """Return an implementation of `interface_type` bound to this client."""
        return self.factory.create_implementation(interface_type, self.requester)

    async def close(self) -> None:
        """Clean up HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._requester = None

    async def __aenter__(self) -> RestClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# -----------------------------------------------------------------------------
# Factory Functions
# -----------------------------------------------------------------------------


def create_jsonplaceholder_client(
    *,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    factory: ImplementationFactory | None = None,
) -> RestClient:
    """
    Create a RestClient pre-configured for the JSONPlaceholder API.

    The caller owns the returned client and closes it:

        async with create_jsonplaceholder_client() as client:
            api = client.implement(JsonPlaceholderApi)
            posts = await api.get_posts()
    """
    return RestClient(JSONPLACEHOLDER_BASE_URL, timeout=timeout, factory=factory)
