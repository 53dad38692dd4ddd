"""
Prompt generation - localized questions per category.
"""

from .generator import PromptGenerator, classify_intent, fill_template, product_name
from .llm import LLMPromptSynthesizer
from .templates import PROMPT_TEMPLATES, get_templates

__all__ = [
    "PromptGenerator",
    "classify_intent",
    "fill_template",
    "product_name",
    "LLMPromptSynthesizer",
    "PROMPT_TEMPLATES",
    "get_templates",
]
