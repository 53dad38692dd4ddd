"""
LLM-backed question synthesis.

One Claude call per category, strictly sequential with a pause between
calls. Any category the model cannot serve falls back to templates, and
short replies are topped up from templates.
"""

import asyncio
import logging
from typing import List, Optional

from geo_engine.errors import SynthesisError
from geo_engine.llm import ClaudeClient, extract_json
from geo_engine.models import Category, Prompt, UserInput

from .generator import PromptGenerator, classify_intent, make_prompt_id

logger = logging.getLogger(__name__)

CONTENT_EXCERPT_CHARS = 2000

QUESTION_PROMPT = """You are a customer-experience expert. Write exactly {count} realistic, direct questions in language "{language}" that real customers would type into a search engine or an AI assistant when looking for a provider.

Requirements:
- Brand-neutral: no company or brand names
- Short, specific, search-style phrasing ("Who offers...", "Who sells...", "Is there...", "What does ... cost")
- Always include the local reference "{region}"
- The customer is actively looking for a provider or solution

Context:
- Category: {category} - {description}
- Country: {country}
- Region: {region}
- Content excerpt: {content}

Return only a JSON object with a "questions" array of exactly {count} strings:
{{"questions": ["...", "..."]}}"""


class LLMPromptSynthesizer:
    """Asks Claude for customer questions per category."""

    def __init__(
        self,
        client: ClaudeClient,
        fallback: Optional[PromptGenerator] = None,
        request_delay: float = 2.0,
    ):
        self.client = client
        self.fallback = fallback or PromptGenerator()
        self.request_delay = request_delay

    async def synthesize(
        self,
        categories: List[Category],
        user_input: UserInput,
        content: str,
        questions_per_category: int = 5,
    ) -> List[Prompt]:
        prompts: List[Prompt] = []
        for index, category in enumerate(categories):
            if index > 0 and self.request_delay > 0:
                await asyncio.sleep(self.request_delay)

            try:
                category_prompts = await self.synthesize_category(
                    category, user_input, content, questions_per_category
                )
            except SynthesisError as e:
                logger.warning(f"Using template prompts for '{category.name}': {e}")
                category_prompts = self.fallback.generate_category_prompts(
                    category, user_input, questions_per_category
                )
            prompts.extend(category_prompts)

        logger.info(f"Synthesized {len(prompts)} prompts for {len(categories)} categories")
        return prompts

    async def synthesize_category(
        self,
        category: Category,
        user_input: UserInput,
        content: str,
        count: int,
    ) -> List[Prompt]:
        """
        Raises:
            SynthesisError: API failure or no usable questions.
        """
        region = user_input.region or user_input.country
        prompt = QUESTION_PROMPT.format(
            count=count,
            language=user_input.language,
            region=region,
            category=category.name,
            description=category.description,
            country=user_input.country,
            content=content[:CONTENT_EXCERPT_CHARS],
        )

        response = await self.client.complete_with_retry(prompt)
        if not response.success:
            raise SynthesisError(f"Question synthesis failed: {response.error}")

        data = extract_json(response.content, required_key="questions")
        questions = [
            q.strip() for q in (data or {}).get("questions") or []
            if isinstance(q, str) and q.strip()
        ]
        if not questions:
            raise SynthesisError("Question synthesis returned no questions")

        prompts = [
            Prompt(
                id=make_prompt_id(category.id, index),
                category_id=category.id,
                text=question,
                language=user_input.language,
                country=user_input.country,
                region=user_input.region,
                intent=classify_intent(question),
            )
            for index, question in enumerate(questions[:count])
        ]

        if len(prompts) < count:
            logger.debug(
                f"Only {len(prompts)} questions for '{category.name}', "
                f"topping up from templates"
            )
            extra = self.fallback.generate_category_prompts(category, user_input, count)
            prompts.extend(extra[:count - len(prompts)])

        return prompts[:count]
