"""
LLM-backed category synthesis.
"""

import logging
from typing import List

from geo_engine.errors import SynthesisError
from geo_engine.llm import ClaudeClient, extract_json
from geo_engine.models import Category

from .generator import make_category_id

logger = logging.getLogger(__name__)

LLM_CATEGORY_CONFIDENCE = 0.8
CONTENT_EXCERPT_CHARS = 8000

CATEGORY_PROMPT = """Analyze the following website content and suggest 15-20 thematic categories that represent the main topics, products, or services.

Return only a JSON object with a "categories" array:
{{"categories": [{{"name": "Category Name", "description": "Brief description", "keywords": ["keyword1", "keyword2"]}}]}}

Language of names and descriptions: {language}

Content:
{content}

Return only valid JSON, no other text."""


class LLMCategorySynthesizer:
    """Asks Claude for categories describing a site."""

    def __init__(self, client: ClaudeClient):
        self.client = client

    async def synthesize(self, content: str, language: str) -> List[Category]:
        """
        Raises:
            SynthesisError: API failure, unparseable reply or no categories.
        """
        prompt = CATEGORY_PROMPT.format(
            language=language,
            content=content[:CONTENT_EXCERPT_CHARS],
        )
        response = await self.client.complete_with_retry(prompt)
        if not response.success:
            raise SynthesisError(f"Category synthesis failed: {response.error}")

        data = extract_json(response.content, required_key="categories")
        if data is None:
            raise SynthesisError("Category synthesis returned no JSON")

        categories = []
        for item in data.get("categories") or []:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name") or "").strip()
            if not name:
                continue
            categories.append(
                Category(
                    id=make_category_id(name),
                    name=name,
                    description=str(item.get("description") or "").strip(),
                    confidence=LLM_CATEGORY_CONFIDENCE,
                )
            )

        if not categories:
            raise SynthesisError("Category synthesis returned no categories")

        logger.info(f"Synthesized {len(categories)} categories")
        return categories
