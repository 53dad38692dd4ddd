"""
Metrics Aggregation

Rolls per-prompt analyses up into category metrics, the competitive
picture of a run, and a run summary.

Visibility score per category:
    sum(exact * 10 + fuzzy * 5 + citations * 2 +/- 5 for tone)
    / (analyses * 50) * 100, clamped to [0, 100]
"""

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from geo_engine.models import (
    AnalysisSummary,
    CategoryMetrics,
    CompetitiveAnalysis,
    LLMResponse,
    Prompt,
    PromptAnalysis,
    TimeSeriesPoint,
    Tone,
)
from geo_engine.utils.urls import get_host, strip_www

EXACT_WEIGHT = 10
FUZZY_WEIGHT = 5
CITATION_WEIGHT = 2
TONE_ADJUSTMENT = 5
MAX_POINTS_PER_ANALYSIS = 50
MAX_TOP_SOURCES = 10


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_visibility_score(analyses: List[PromptAnalysis]) -> float:
    if not analyses:
        return 0.0

    score = 0
    for analysis in analyses:
        score += analysis.brand_mentions.exact * EXACT_WEIGHT
        score += analysis.brand_mentions.fuzzy * FUZZY_WEIGHT
        score += analysis.citation_count * CITATION_WEIGHT
        if analysis.sentiment.tone == Tone.POSITIVE:
            score += TONE_ADJUSTMENT
        elif analysis.sentiment.tone == Tone.NEGATIVE:
            score -= TONE_ADJUSTMENT

    max_possible = len(analyses) * MAX_POINTS_PER_ANALYSIS
    return _clamp(score / max_possible * 100, 0.0, 100.0)


def calculate_category_metrics(
    category_id: str,
    prompts: List[Prompt],
    analyses: List[PromptAnalysis],
) -> CategoryMetrics:
    """
    Metrics for one category. Rates are per prompt of the category,
    answered or not; a category without analyses scores all zeros.
    """
    prompt_ids = {p.id for p in prompts if p.category_id == category_id}
    category_analyses = [a for a in analyses if a.prompt_id in prompt_ids]

    if not category_analyses:
        return CategoryMetrics(category_id=category_id)

    total_prompts = len(prompt_ids)
    mentioned = sum(1 for a in category_analyses if a.is_mentioned)
    total_citations = sum(a.citation_count for a in category_analyses)

    return CategoryMetrics(
        category_id=category_id,
        visibility_score=calculate_visibility_score(category_analyses),
        citation_rate=total_citations / total_prompts,
        brand_mention_rate=mentioned / total_prompts,
    )


def perform_competitive_analysis(
    analyses: List[PromptAnalysis],
    prompts: List[Prompt],
    competitors: Optional[Iterable[str]] = None,
) -> CompetitiveAnalysis:
    """
    Share of voice across the whole run.

    brand_share and competitor_shares are percentages of all brand plus
    competitor mentions. Prompts without an analysis count as having no
    brand mention.
    """
    by_prompt = {a.prompt_id: a for a in analyses}

    brand_total = sum(a.mention_count for a in analyses)
    competitor_totals: Dict[str, int] = {name: 0 for name in competitors or []}
    for analysis in analyses:
        for name, count in analysis.competitor_mentions.items():
            competitor_totals[name] = competitor_totals.get(name, 0) + count

    all_mentions = brand_total + sum(competitor_totals.values())
    if all_mentions:
        brand_share = brand_total / all_mentions * 100
        competitor_shares = {
            name: count / all_mentions * 100 for name, count in competitor_totals.items()
        }
    else:
        brand_share = 0.0
        competitor_shares = {name: 0.0 for name in competitor_totals}

    white_space_topics = []
    missing_brand_prompts = []
    dominated_prompts = []
    for prompt in prompts:
        analysis = by_prompt.get(prompt.id)
        if analysis is None or not analysis.is_mentioned:
            white_space_topics.append(prompt.text)
            missing_brand_prompts.append(prompt.id)
        if analysis and any(
            count > analysis.mention_count for count in analysis.competitor_mentions.values()
        ):
            dominated_prompts.append(prompt.id)

    return CompetitiveAnalysis(
        brand_share=brand_share,
        competitor_shares=competitor_shares,
        white_space_topics=white_space_topics,
        dominated_prompts=dominated_prompts,
        missing_brand_prompts=missing_brand_prompts,
    )


def top_sources(
    responses: List[LLMResponse],
    exclude_domain: Optional[str] = None,
    limit: int = MAX_TOP_SOURCES,
) -> List[Dict[str, object]]:
    """Most cited domains across answers, optionally skipping the brand's own."""
    excluded = strip_www(get_host(exclude_domain)) if exclude_domain else ""
    counts: Counter = Counter()
    for response in responses:
        for citation in response.citations:
            domain = strip_www(get_host(citation.url))
            if domain and domain != excluded:
                counts[domain] += 1
    return [{"domain": d, "count": c} for d, c in counts.most_common(limit)]


def build_summary(
    prompts: List[Prompt],
    analyses: List[PromptAnalysis],
    category_metrics: List[CategoryMetrics],
    responses: List[LLMResponse],
    brand_domain: Optional[str] = None,
) -> AnalysisSummary:
    """total_prompts counts every generated prompt; rates are over answered ones."""
    answered = len(analyses)
    mentioned = sum(1 for a in analyses if a.is_mentioned)
    cited = sum(1 for a in analyses if a.is_cited)
    scores = [m.visibility_score for m in category_metrics]

    return AnalysisSummary(
        total_prompts=len(prompts),
        answered_prompts=answered,
        mention_rate=mentioned / answered if answered else 0.0,
        citation_rate=cited / answered if answered else 0.0,
        average_visibility=sum(scores) / len(scores) if scores else 0.0,
        tone_distribution=dict(Counter(a.sentiment.tone.value for a in analyses)),
        top_sources=top_sources(responses, exclude_domain=brand_domain),
    )


def time_series_point(summary: AnalysisSummary, timestamp: Optional[datetime] = None) -> TimeSeriesPoint:
    return TimeSeriesPoint(
        timestamp=timestamp or datetime.now(),
        visibility_score=summary.average_visibility,
        mention_rate=summary.mention_rate,
        citation_rate=summary.citation_rate,
    )
