"""
Category Generator

Scores a fixed set of topic templates against a site's normalized
content. A template's confidence is the share of its keywords present
anywhere in the corpus plus a boost of up to 0.3 for the share of pages
that mention at least one of them.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from typing import List, Tuple

from geo_engine.models import Category, CrawledPage, WebsiteContent

logger = logging.getLogger(__name__)

PAGE_BOOST = 0.3


@dataclass(frozen=True)
class CategoryTemplate:
    name: str
    description: str
    keywords: Tuple[str, ...]


CATEGORY_TEMPLATES: Tuple[CategoryTemplate, ...] = (
    CategoryTemplate(
        "Product",
        "Product features and capabilities",
        ("product", "feature", "solution", "offering", "service"),
    ),
    CategoryTemplate(
        "Pricing",
        "Pricing information and plans",
        ("price", "cost", "pricing", "plan", "subscription", "fee"),
    ),
    CategoryTemplate(
        "Comparison",
        "Comparisons with alternatives",
        ("compare", "vs", "versus", "alternative", "competitor"),
    ),
    CategoryTemplate(
        "Use Cases",
        "Use cases and applications",
        ("use case", "example", "scenario", "application", "how to"),
    ),
    CategoryTemplate(
        "Industry",
        "Industry-specific information",
        ("industry", "sector", "vertical", "market", "domain"),
    ),
    CategoryTemplate(
        "Problems / Solutions",
        "Problems addressed and solutions provided",
        ("problem", "solution", "challenge", "issue", "solve"),
    ),
    CategoryTemplate(
        "Integration",
        "Integration capabilities",
        ("integrate", "api", "connection", "compatible", "works with"),
    ),
    CategoryTemplate(
        "Support",
        "Support and documentation",
        ("support", "help", "documentation", "guide", "tutorial"),
    ),
)


def make_category_id(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "category"
    return f"cat_{slug}_{uuid.uuid4().hex[:8]}"


def _mentions_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def calculate_category_confidence(
    template: CategoryTemplate,
    content_text: str,
    pages: List[CrawledPage],
) -> float:
    """Keyword coverage plus page-spread boost, capped at 1.0."""
    keywords = tuple(kw.lower() for kw in template.keywords)
    if not keywords:
        return 0.0

    content_text = content_text.lower()
    matched = sum(1 for kw in keywords if kw in content_text)
    confidence = matched / len(keywords)

    if pages:
        pages_with_keywords = sum(
            1 for page in pages if _mentions_any(page.content.lower(), keywords)
        )
        confidence += (pages_with_keywords / len(pages)) * PAGE_BOOST

    return min(confidence, 1.0)


def find_source_pages(template: CategoryTemplate, pages: List[CrawledPage]) -> List[str]:
    keywords = tuple(kw.lower() for kw in template.keywords)
    urls = []
    for page in pages:
        page_text = " ".join([page.title, *page.headings, page.content]).lower()
        if _mentions_any(page_text, keywords):
            urls.append(page.url)
    return urls


class CategoryGenerator:
    """Template-based category generation."""

    def __init__(self, templates: Tuple[CategoryTemplate, ...] = CATEGORY_TEMPLATES):
        self.templates = templates

    def generate_categories(
        self,
        content: WebsiteContent,
        min_confidence: float = 0.5,
        max_categories: int = 10,
    ) -> List[Category]:
        """
        Categories whose confidence reaches min_confidence, best first,
        at most max_categories of them.
        """
        categories = []
        for template in self.templates:
            confidence = calculate_category_confidence(
                template, content.normalized_content, content.pages
            )
            if confidence < min_confidence:
                continue
            categories.append(
                Category(
                    id=make_category_id(template.name),
                    name=template.name,
                    description=template.description,
                    confidence=confidence,
                    source_pages=find_source_pages(template, content.pages),
                )
            )

        categories.sort(key=lambda c: c.confidence, reverse=True)
        categories = categories[:max(max_categories, 0)]

        logger.info(
            f"Generated {len(categories)} template categories for {content.domain} "
            f"(min_confidence={min_confidence})"
        )
        return categories
