"""
Categorization - topical categories derived from site content.
"""

from .generator import (
    CATEGORY_TEMPLATES,
    CategoryGenerator,
    CategoryTemplate,
    calculate_category_confidence,
    find_source_pages,
    make_category_id,
)
from .llm import LLMCategorySynthesizer

__all__ = [
    "CATEGORY_TEMPLATES",
    "CategoryGenerator",
    "CategoryTemplate",
    "calculate_category_confidence",
    "find_source_pages",
    "make_category_id",
    "LLMCategorySynthesizer",
]
