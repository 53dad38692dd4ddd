"""
Brand Mention & Citation Detection

exact     - word-boundary occurrences of the brand name outside citations
fuzzy     - always 0; answers are deterministic enough that approximate
            matching only adds noise
citations - markdown links [text](url) whose url contains the brand's
            domain form
contexts  - up to 5 sentences containing the brand name or domain form
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from geo_engine.models import BrandMention
from geo_engine.utils.text import Span, exclude_contained, find_spans, split_sentences
from geo_engine.utils.urls import brand_domain_form

logger = logging.getLogger(__name__)

MAX_CONTEXTS = 5

MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)]*)\)")


def citation_pattern(domain: str) -> re.Pattern:
    return re.compile(
        rf"\[([^\]]*)\]\([^)]*{re.escape(domain)}[^)]*\)",
        re.IGNORECASE,
    )


def mention_pattern(brand: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(brand)}\b", re.IGNORECASE)


def find_citation_ranges(text: str, domain: str) -> List[Span]:
    if not domain:
        return []
    return find_spans(citation_pattern(domain), text)


class BrandMentionDetector:
    """Detects brand mentions in one answer text."""

    def __init__(self, brand_name: str, fuzzy_threshold: float = 0.7):
        self.brand_name = brand_name.strip()
        # Kept for configuration compatibility; fuzzy matching is disabled
        self.fuzzy_threshold = fuzzy_threshold
        self.brand_lower = self.brand_name.lower()
        self.brand_domain = brand_domain_form(self.brand_name)

    def detect_mentions(self, text: str) -> BrandMention:
        if not self.brand_name or not text:
            return BrandMention()

        citation_ranges = find_citation_ranges(text, self.brand_domain)
        mention_spans = find_spans(mention_pattern(self.brand_name), text)
        exact = len(exclude_contained(mention_spans, citation_ranges))

        return BrandMention(
            exact=exact,
            fuzzy=0,
            contexts=self.extract_contexts(text),
            citations=len(citation_ranges),
        )

    def extract_contexts(self, text: str) -> List[str]:
        contexts: List[str] = []
        for sentence in split_sentences(text):
            lower = sentence.lower()
            if self.brand_lower in lower or self.brand_domain in lower:
                if sentence not in contexts:
                    contexts.append(sentence)
            if len(contexts) >= MAX_CONTEXTS:
                break
        return contexts


@dataclass
class TextStats:
    """Link and mention statistics of an answer."""
    citations: List[str] = field(default_factory=list)
    mentions: int = 0
    other_links: List[str] = field(default_factory=list)


def extract_text_stats(text: str, brand_name: str, domain: Optional[str] = None) -> TextStats:
    """
    Split the markdown links of an answer into brand citations and
    other links, and count brand mentions outside brand citations.
    """
    domain = (domain or brand_domain_form(brand_name)).lower()
    stats = TextStats()

    citation_ranges = []
    for match in MARKDOWN_LINK_PATTERN.finditer(text):
        url = match.group(2).strip()
        if domain and domain in url.lower():
            citation_ranges.append(Span(match.start(), match.end()))
            if url not in stats.citations:
                stats.citations.append(url)
        elif url and url not in stats.other_links:
            stats.other_links.append(url)

    if brand_name.strip():
        spans = find_spans(mention_pattern(brand_name.strip()), text)
        stats.mentions = len(exclude_contained(spans, citation_ranges))

    return stats
