"""HTTP fetch capability.

A fetcher opens a URL as an async context manager yielding a response with
a status code and an awaitable body. Status is checked before the body is
read, so transport failures and body read failures surface separately.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol

import httpx

from feed_sync.config import DEFAULT_USER_AGENT

# Errors a fetch or body read may raise for a network-level failure
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)


class FetchResponse(Protocol):
    status_code: int

    async def aread(self) -> bytes: ...


class Fetcher(Protocol):
    def open(self, url: str) -> AsyncContextManager[FetchResponse]: ...


class HttpFetcher:
    """Fetches feeds with httpx.

    Args:
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header sent with every request
        client: Optional shared client; when given the caller owns its lifecycle
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
        )

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[httpx.Response]:
        async with AsyncExitStack() as stack:
            client = self._client
            if client is None:
                client = await stack.enter_async_context(self._new_client())
            response = await stack.enter_async_context(client.stream("GET", url))
            yield response
