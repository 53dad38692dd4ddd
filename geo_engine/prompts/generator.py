"""
Prompt Generator

Expands categories into localized, literal questions from the template
tables.
"""

import logging
import re
import uuid
from typing import List

from geo_engine.models import Category, Intent, Prompt, UserInput
from geo_engine.utils.urls import extract_brand_name

from .templates import get_templates

logger = logging.getLogger(__name__)

QUESTION_WORDS = re.compile(r"how|what|should|best|which|when", re.IGNORECASE)
DECISION_WORDS = re.compile(r"cost|price|compare|choose|recommend", re.IGNORECASE)
YES_NO_WORDS = re.compile(r"is|are|does|can", re.IGNORECASE)

GENERIC_FILLERS = {
    "industry": "the industry",
    "competitor": "competitors",
    "tool": "other tools",
}


def classify_intent(text: str) -> Intent:
    """
    High: a question word plus a buying-decision word.
    Medium: a yes/no question word. Low: anything else.

    Patterns match substrings, not whole words.
    """
    if QUESTION_WORDS.search(text) and DECISION_WORDS.search(text):
        return Intent.HIGH
    if YES_NO_WORDS.search(text):
        return Intent.MEDIUM
    return Intent.LOW


def product_name(user_input: UserInput) -> str:
    return extract_brand_name(user_input.normalized_website_url) or "the product"


def fill_template(template: str, user_input: UserInput) -> str:
    values = {
        "product": product_name(user_input),
        "country": user_input.country,
        "region": user_input.region or user_input.country,
        **GENERIC_FILLERS,
    }
    question = template
    for key, value in values.items():
        question = question.replace(f"{{{key}}}", value)
    return question


def make_prompt_id(category_id: str, index: int) -> str:
    return f"prompt_{category_id}_{index}_{uuid.uuid4().hex[:8]}"


class PromptGenerator:
    """Template-based prompt generation."""

    def generate_prompts(
        self,
        categories: List[Category],
        user_input: UserInput,
        questions_per_category: int = 5,
    ) -> List[Prompt]:
        prompts = []
        for category in categories:
            prompts.extend(
                self.generate_category_prompts(category, user_input, questions_per_category)
            )
        logger.info(f"Generated {len(prompts)} prompts for {len(categories)} categories")
        return prompts

    def generate_category_prompts(
        self,
        category: Category,
        user_input: UserInput,
        count: int,
    ) -> List[Prompt]:
        """Exactly min(count, available templates) prompts."""
        templates = get_templates(category.name, user_input.language)
        prompts = []
        for index, template in enumerate(templates[:max(count, 0)]):
            prompts.append(
                Prompt(
                    id=make_prompt_id(category.id, index),
                    category_id=category.id,
                    text=fill_template(template, user_input),
                    language=user_input.language,
                    country=user_input.country,
                    region=user_input.region,
                    # Classified on the template, before placeholders are filled
                    intent=classify_intent(template),
                )
            )
        return prompts
