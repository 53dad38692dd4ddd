"""
Page fetching with a bounded, cancellable timeout.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of a single GET request."""
    url: str
    ok: bool
    status: int = 0
    text: str = ""
    error: Optional[str] = None


class PageFetcher:
    """
    Fetches pages over HTTP.

    Every request is wrapped in asyncio.wait_for, so a slow server is
    cancelled after `timeout` seconds and reported as a failed fetch.
    Failures never raise; callers check FetchResult.ok.
    """

    def __init__(
        self,
        user_agent: str = "GEO-Platform/1.0",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )

    async def close(self):
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        timeout = timeout or self.timeout
        try:
            response = await asyncio.wait_for(
                self.client.get(url, headers={"User-Agent": self.user_agent}),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Timed out after {timeout}s fetching {url}")
            return FetchResult(url=url, ok=False, error="timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Request error fetching {url}: {e}")
            return FetchResult(url=url, ok=False, error=str(e))

        if not response.is_success:
            logger.warning(f"HTTP error fetching {url}: {response.status_code}")
            return FetchResult(
                url=url,
                ok=False,
                status=response.status_code,
                error=f"HTTP {response.status_code}",
            )

        return FetchResult(url=url, ok=True, status=response.status_code, text=response.text)
