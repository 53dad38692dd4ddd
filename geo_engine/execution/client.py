"""
OpenAI Responses API Client

Asks a question with the service's own web_search tool enabled and
returns the raw JSON reply.

API: POST https://api.openai.com/v1/responses
Body: {"model": ..., "tools": [{"type": "web_search"}], "input": question}
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from geo_engine.errors import AnswerServiceError

logger = logging.getLogger(__name__)

RESPONSES_URL = "https://api.openai.com/v1/responses"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)


class ResponsesClient:
    """
    Async client for the Responses API.

    Usage:
        async with ResponsesClient(api_key="sk-...") as client:
            data = await client.create_response("Who offers POS systems in Zurich?")
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o",
        url: str = RESPONSES_URL,
        timeout: float = 60.0,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key
            model: Model id sent with every request
            url: Responses endpoint
            timeout: Per-request timeout in seconds
            retry_config: Retry configuration (optional)
            client: Preconfigured httpx client (optional)

        Raises:
            AnswerServiceError: If no API key is configured.
        """
        if not api_key:
            raise AnswerServiceError("OpenAI API key is not configured")

        self.model = model
        self.url = url
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._closed = False

    async def create_response(self, question: str) -> Any:
        if self._closed:
            raise AnswerServiceError("Client has been closed")

        payload = {
            "model": self.model,
            "tools": [{"type": "web_search"}],
            "input": question,
        }
        logger.debug(f"Responses API request: model={self.model}, input={question[:80]!r}")
        return await self._request_with_retry(payload)

    async def _request_with_retry(self, payload: Dict[str, Any]) -> Any:
        """Make request with retry logic."""
        config = self.retry_config
        last_exception = None

        for attempt in range(config.max_retries + 1):
            try:
                response = await asyncio.wait_for(
                    self._client.post(self.url, json=payload, headers=self._headers),
                    timeout=self.timeout,
                )

                if response.status_code >= 400:
                    error_data = self._error_body(response)
                    message = self._error_message(error_data, response)

                    if response.status_code in config.retryable_status_codes:
                        last_exception = AnswerServiceError(
                            f"API error: {response.status_code}",
                            status_code=response.status_code,
                            response=error_data,
                        )
                    else:
                        raise AnswerServiceError(
                            f"API error: {response.status_code} - {message}",
                            status_code=response.status_code,
                            response=error_data,
                        )
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise AnswerServiceError(f"Failed to parse API response: {e}") from e

            except asyncio.TimeoutError:
                last_exception = AnswerServiceError(f"Request timed out after {self.timeout}s")
            except httpx.RequestError as e:
                last_exception = AnswerServiceError(f"Request failed: {e}")

            if attempt < config.max_retries:
                delay = min(
                    config.initial_delay * (config.exponential_base**attempt),
                    config.max_delay,
                )
                logger.warning(
                    f"Responses API request failed, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{config.max_retries + 1})"
                )
                await asyncio.sleep(delay)

        raise last_exception

    @staticmethod
    def _error_body(response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {"raw": response.text[:500]}
        return data if isinstance(data, dict) else {"raw": data}

    @staticmethod
    def _error_message(error_data: Dict[str, Any], response: httpx.Response) -> str:
        error = error_data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or response.status_code)
        return str(error or error_data.get("raw") or response.reason_phrase)[:500]

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            if self._owns_client:
                await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
