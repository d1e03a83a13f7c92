"""
Data Fetcher — HTTP client for upstream reserve data and regulatory text.

The upstream schemas are not controlled by StableGuard. The fetcher only
returns the decoded body; shape handling lives with the caller. Failures
raise, callers degrade to their fallback values.
"""

from typing import Any, Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)


class DataFetcher(Protocol):
    """Capability: fetch one upstream document."""

    async def fetch(self, endpoint: str) -> Any:
        """Decoded JSON body."""
        ...

    async def fetch_text(self, endpoint: str) -> str:
        """Raw text body."""
        ...


class HttpDataFetcher:
    """GET an endpoint with httpx."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get(self, endpoint: str) -> httpx.Response:
        async with self._client() as client:
            resp = await client.get(endpoint)
            resp.raise_for_status()
        logger.debug("upstream_fetched", endpoint=endpoint, status=resp.status_code)
        return resp

    async def fetch(self, endpoint: str) -> Any:
        return (await self._get(endpoint)).json()

    async def fetch_text(self, endpoint: str) -> str:
        return (await self._get(endpoint)).text
