"""
Claude API Client

Async client used to synthesize categories and questions from site
content, with token tracking and retry on transient failures.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import anthropic

from geo_engine.utils.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage across calls."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class CompletionResponse:
    """Response from a Claude completion."""
    content: str
    usage: TokenUsage
    model: str
    stop_reason: str
    success: bool = True
    error: Optional[str] = None


class ClaudeClient:
    """
    Async client for the Claude API.

    API errors never raise from complete(); they come back as a
    CompletionResponse with success=False so callers can fall back.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 2000
    TEMPERATURE = 0.7

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY setting)
            model: Model to use (defaults to CLAUDE_MODEL setting)
            client: Preconfigured AsyncAnthropic instance
        """
        settings = get_settings()
        self.api_key = api_key or settings.ANTHROPIC_API_KEY
        if not self.api_key and client is None:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or settings.CLAUDE_MODEL or self.DEFAULT_MODEL
        self.async_client = client or anthropic.AsyncAnthropic(api_key=self.api_key)

        self.total_usage = TokenUsage()
        self.call_count = 0

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ) -> CompletionResponse:
        try:
            kwargs = {
                "model": self.model,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "messages": [{"role": "user", "content": prompt}],
            }
            if system:
                kwargs["system"] = system

            response = await self.async_client.messages.create(**kwargs)

            content = ""
            for block in response.content:
                if hasattr(block, "text"):
                    content += block.text

            usage = TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            self.total_usage.input_tokens += usage.input_tokens
            self.total_usage.output_tokens += usage.output_tokens
            self.call_count += 1

            logger.info(f"Claude call: {usage.input_tokens} in, {usage.output_tokens} out")

            return CompletionResponse(
                content=content,
                usage=usage,
                model=self.model,
                stop_reason=response.stop_reason or "",
            )

        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            return CompletionResponse(
                content="",
                usage=TokenUsage(),
                model=self.model,
                stop_reason="error",
                success=False,
                error=str(e),
            )

    async def complete_with_retry(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_retries: int = 3,
        **kwargs,
    ) -> CompletionResponse:
        """Retry transient failures with exponential backoff."""
        response = None
        for attempt in range(max_retries):
            response = await self.complete(prompt, system, **kwargs)
            if response.success:
                return response

            if attempt < max_retries - 1:
                wait_time = 2 ** attempt
                logger.warning(
                    f"Claude call failed (attempt {attempt + 1}/{max_retries}), "
                    f"retrying in {wait_time}s: {response.error}"
                )
                await asyncio.sleep(wait_time)

        return response

    async def close(self):
        if self.call_count:
            logger.info(
                f"Claude usage: {self.call_count} calls, "
                f"{self.total_usage.total_tokens} tokens "
                f"({self.total_usage.input_tokens} in, {self.total_usage.output_tokens} out)"
            )
        await self.async_client.close()
