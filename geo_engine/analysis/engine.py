"""
Analysis Engine

Scores every answered prompt and aggregates the results of a run.
"""

import logging
import re
from typing import List, Optional

from geo_engine.models import (
    AnalysisSummary,
    BrandCitation,
    Category,
    CategoryMetrics,
    CompetitiveAnalysis,
    LLMResponse,
    Prompt,
    PromptAnalysis,
    WebSearchCitation,
)
from geo_engine.utils.urls import brand_domain_form

from . import metrics
from .brand_mention import BrandMentionDetector
from .competitor import CompetitorDetector
from .sentiment import SentimentAnalyzer

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


class AnalysisEngine:
    """
    Usage:
        engine = AnalysisEngine("Acmecorp", website_url="https://acmecorp.com")
        analyses = engine.analyze_responses(prompts, responses)
        category_metrics = engine.calculate_category_metrics(categories, prompts, analyses)
    """

    def __init__(
        self,
        brand_name: str,
        website_url: Optional[str] = None,
        fuzzy_threshold: float = 0.7,
        competitors: Optional[List[str]] = None,
    ):
        self.brand_name = brand_name
        self.website_url = website_url
        self.competitors = list(competitors or [])
        self.mention_detector = BrandMentionDetector(brand_name, fuzzy_threshold)
        self.sentiment_analyzer = SentimentAnalyzer()
        self.competitor_detector = CompetitorDetector(brand_name, self.competitors)

    def analyze_responses(
        self,
        prompts: List[Prompt],
        responses: List[LLMResponse],
    ) -> List[PromptAnalysis]:
        """One analysis per prompt that has a response; others are skipped."""
        by_prompt = {r.prompt_id: r for r in responses}
        analyses = [
            self.analyze_response(prompt, by_prompt[prompt.id])
            for prompt in prompts
            if prompt.id in by_prompt
        ]
        logger.info(f"Analyzed {len(analyses)} responses for {self.brand_name}")
        return analyses

    def analyze_response(self, prompt: Prompt, response: LLMResponse) -> PromptAnalysis:
        mentions = self.mention_detector.detect_mentions(response.output_text)
        sentiment = self.sentiment_analyzer.analyze(response.output_text)
        brand_citations = self.find_brand_citations(response)
        mention_count = mentions.exact + mentions.fuzzy

        return PromptAnalysis(
            prompt_id=prompt.id,
            category_id=prompt.category_id,
            brand_mentions=mentions,
            sentiment=sentiment,
            citation_count=len(response.citations),
            citation_urls=[c.url for c in response.citations],
            brand_citations=brand_citations,
            competitor_mentions=self.competitor_detector.count_mentions(response.output_text),
            is_mentioned=mention_count > 0,
            is_cited=bool(brand_citations) or mentions.citations > 0,
            mention_count=mention_count,
        )

    def find_brand_citations(self, response: LLMResponse) -> List[BrandCitation]:
        """Web-search citations naming the brand or linking to its domain."""
        brand_lower = self.brand_name.lower()
        brand_in_url = brand_domain_form(self.brand_name)
        if not brand_lower:
            return []

        found = []
        for citation in response.citations:
            citation_text = f"{citation.title or ''} {citation.snippet or ''}".lower()
            in_text = brand_lower in citation_text
            in_url = brand_in_url in citation.url.lower()
            if not (in_text or in_url):
                continue

            if in_text:
                context = self._citation_context(citation, brand_lower)
            else:
                context = self._url_context(response.output_text, citation.url)

            found.append(
                BrandCitation(
                    url=citation.url,
                    title=citation.title,
                    snippet=citation.snippet,
                    context=context,
                )
            )
        return found

    @staticmethod
    def _citation_context(citation: WebSearchCitation, brand_lower: str) -> str:
        text = f"{citation.title or ''} {citation.snippet or ''}"
        for sentence in SENTENCE_BOUNDARY.split(text):
            if brand_lower in sentence.lower():
                return sentence.strip()
        return ""

    @staticmethod
    def _url_context(text: str, url: str) -> str:
        """Link text of a markdown link to url, else the sentence holding it."""
        match = re.search(rf"\[([^\]]+)\]\({re.escape(url)}\)", text, re.IGNORECASE)
        if match:
            return match.group(1)
        for sentence in SENTENCE_BOUNDARY.split(text):
            if url in sentence:
                return sentence.strip()
        return ""

    def calculate_category_metrics(
        self,
        categories: List[Category],
        prompts: List[Prompt],
        analyses: List[PromptAnalysis],
    ) -> List[CategoryMetrics]:
        return [
            metrics.calculate_category_metrics(category.id, prompts, analyses)
            for category in categories
        ]

    def perform_competitive_analysis(
        self,
        analyses: List[PromptAnalysis],
        prompts: List[Prompt],
    ) -> CompetitiveAnalysis:
        return metrics.perform_competitive_analysis(
            analyses, prompts, self.competitor_detector.competitors
        )

    def summarize(
        self,
        prompts: List[Prompt],
        analyses: List[PromptAnalysis],
        category_metrics: List[CategoryMetrics],
        responses: List[LLMResponse],
    ) -> AnalysisSummary:
        return metrics.build_summary(
            prompts,
            analyses,
            category_metrics,
            responses,
            brand_domain=self.website_url,
        )
