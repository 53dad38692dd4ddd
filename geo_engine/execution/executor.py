"""
Answer Executor

Runs prompts one after another against the answer service. A prompt
that fails or comes back empty is logged and left out of the results;
the batch always continues.
"""

import logging
from datetime import datetime
from typing import List, Optional

from geo_engine.errors import AnswerServiceError
from geo_engine.models import LLMResponse, Prompt, WebSearchCitation
from geo_engine.utils.config import Settings, get_settings

from .client import ResponsesClient
from .parser import extract_citations, extract_output_text

logger = logging.getLogger(__name__)

DEBUG_MODEL = "debug"


def dummy_response(prompt: Prompt) -> LLMResponse:
    """Canned answer used in debug mode instead of calling the service."""
    text = (
        f"[DEBUG MODE] Placeholder answer for the question: \"{prompt.text}\"\n\n"
        "A real run would contain a detailed, web-search-backed answer here, "
        "with citations to external sources."
    )
    return LLMResponse(
        prompt_id=prompt.id,
        output_text=text,
        citations=[
            WebSearchCitation(
                url="https://example.com/article1",
                title="Example article",
                snippet="Example citation from an external source.",
            )
        ],
        model=DEBUG_MODEL,
    )


class AnswerExecutor:
    """Executes prompts against the Responses API."""

    def __init__(self, client: Optional[ResponsesClient], debug_mode: bool = False):
        self.client = client
        self.debug_mode = debug_mode

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AnswerExecutor":
        settings = settings or get_settings()
        client = None
        if settings.OPENAI_API_KEY:
            client = ResponsesClient(
                api_key=settings.OPENAI_API_KEY,
                model=settings.OPENAI_MODEL,
                url=settings.OPENAI_RESPONSES_URL,
                timeout=settings.ANSWER_TIMEOUT,
            )
        return cls(client, debug_mode=settings.DEBUG_MODE)

    def _require_client(self) -> ResponsesClient:
        if self.client is None:
            raise AnswerServiceError("OpenAI API key is not configured")
        return self.client

    async def execute_prompt(self, prompt: Prompt) -> LLMResponse:
        """
        Raises:
            AnswerServiceError: Missing credentials, HTTP failure, timeout
                or an empty answer.
        """
        if self.debug_mode:
            logger.info(f"DEBUG MODE: returning dummy response for {prompt.id}")
            return dummy_response(prompt)

        client = self._require_client()
        data = await client.create_response(prompt.text)

        output_text = extract_output_text(data)
        if not output_text.strip():
            raise AnswerServiceError("Answer service returned an empty answer", response=data)

        citations = extract_citations(data)
        logger.debug(
            f"Prompt {prompt.id}: {len(output_text)} chars, {len(citations)} citations"
        )
        return LLMResponse(
            prompt_id=prompt.id,
            output_text=output_text,
            citations=citations,
            model=client.model,
            created_at=datetime.now(),
        )

    async def execute_prompts(self, prompts: List[Prompt]) -> List[LLMResponse]:
        """
        Execute prompts sequentially.

        Raises:
            AnswerServiceError: Only when no credentials are configured,
                since no prompt could succeed.
        """
        if not self.debug_mode:
            self._require_client()

        responses = []
        for prompt in prompts:
            try:
                response = await self.execute_prompt(prompt)
            except Exception as e:
                logger.warning(f"Failed to execute prompt {prompt.id}: {e}")
                continue

            if not response.output_text.strip():
                logger.warning(f"Prompt {prompt.id} returned no output text")
                continue
            responses.append(response)

        logger.info(f"Executed {len(responses)}/{len(prompts)} prompts successfully")
        return responses

    async def close(self):
        if self.client:
            await self.client.close()
