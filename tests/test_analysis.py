"""
Tests for brand mention detection, sentiment, competitor tracking and
metrics aggregation.
"""

from datetime import datetime

import pytest

from conftest import make_response
from geo_engine.analysis import (
    AnalysisEngine,
    BrandMentionDetector,
    CompetitorDetector,
    SentimentAnalyzer,
    build_summary,
    calculate_category_metrics,
    calculate_visibility_score,
    extract_text_stats,
    perform_competitive_analysis,
    time_series_point,
)
from geo_engine.models import (
    BrandMention,
    CategoryMetrics,
    Prompt,
    PromptAnalysis,
    SentimentAnalysis,
    Tone,
    WebSearchCitation,
)


def analysis(
    prompt_id: str,
    exact: int = 0,
    citations: int = 0,
    tone: Tone = Tone.NEUTRAL,
    competitors: dict = None,
    category_id: str = "cat_a",
) -> PromptAnalysis:
    return PromptAnalysis(
        prompt_id=prompt_id,
        category_id=category_id,
        brand_mentions=BrandMention(exact=exact),
        sentiment=SentimentAnalysis(tone=tone),
        citation_count=citations,
        competitor_mentions=competitors or {},
        is_mentioned=exact > 0,
        mention_count=exact,
    )


def prompt(prompt_id: str, category_id: str = "cat_a") -> Prompt:
    return Prompt(
        id=prompt_id,
        category_id=category_id,
        text=f"Question {prompt_id}?",
        language="en",
        country="US",
    )


# =============================================================================
# BRAND MENTIONS
# =============================================================================


class TestBrandMentionDetector:
    """Exact mentions, markdown citations and contexts."""

    def test_mention_inside_citation_not_counted(self):
        text = "AcmeCorp is great. [AcmeCorp](https://acmecorp.com) leads the market."
        mention = BrandMentionDetector("AcmeCorp").detect_mentions(text)

        assert mention.exact == 1
        assert mention.citations == 1
        assert mention.fuzzy == 0
        assert len(mention.contexts) == 2

    def test_word_boundaries_and_case(self):
        text = "acmecorp and ACMECORP are here, AcmeCorpX is not."
        mention = BrandMentionDetector("AcmeCorp").detect_mentions(text)
        assert mention.exact == 2

    def test_multi_word_brand_citation(self):
        text = "Try [their site](https://www.acmecorp.com/pos) from Acme Corp."
        mention = BrandMentionDetector("Acme Corp").detect_mentions(text)

        assert mention.citations == 1
        assert mention.exact == 1

    def test_contexts_capped(self):
        text = " ".join(f"Acme sentence {i}." for i in range(8))
        mention = BrandMentionDetector("Acme").detect_mentions(text)
        assert len(mention.contexts) == 5

    def test_empty_inputs(self):
        assert BrandMentionDetector("Acme").detect_mentions("") == BrandMention()
        assert BrandMentionDetector("").detect_mentions("Acme") == BrandMention()


class TestExtractTextStats:
    """Brand citations versus other links."""

    def test_splits_links(self):
        text = (
            "See [Acme](https://acme.com/pricing) and [Review](https://review.org/pos). "
            "Acme leads. Also [again](https://acme.com/pricing)."
        )
        stats = extract_text_stats(text, "Acme", "acme.com")

        assert stats.citations == ["https://acme.com/pricing"]
        assert stats.other_links == ["https://review.org/pos"]
        assert stats.mentions == 1


# =============================================================================
# SENTIMENT
# =============================================================================


class TestSentimentAnalyzer:
    """Keyword tone rules."""

    def test_positive(self):
        result = SentimentAnalyzer().analyze("Great, trusted and popular.")
        assert result.tone == Tone.POSITIVE
        assert result.keywords == ["great", "trusted", "popular"]

    def test_negative(self):
        assert SentimentAnalyzer().analyze("Slow and outdated.").tone == Tone.NEGATIVE

    def test_mixed(self):
        result = SentimentAnalyzer().analyze("Acme is excellent and reliable, but expensive.")
        assert result.tone == Tone.MIXED
        assert result.confidence == 1.0

    def test_neutral_minimum_confidence(self):
        result = SentimentAnalyzer().analyze("Nothing to see here")
        assert result.tone == Tone.NEUTRAL
        assert result.confidence == 0.1
        assert result.keywords == []

    def test_confidence_scales_with_length(self):
        text = "word " * 199 + "great"
        assert SentimentAnalyzer().analyze(text).confidence == pytest.approx(0.5)


# =============================================================================
# COMPETITORS
# =============================================================================


class TestCompetitorDetector:
    """Named competitor counting."""

    def test_deduplicates_and_excludes_brand(self):
        detector = CompetitorDetector("Acmecorp", ["Globex", "globex", "AcmeCorp", " "])
        assert detector.competitors == ["Globex"]

    def test_counts_word_boundary_mentions(self):
        detector = CompetitorDetector("Acme", ["Globex", "Initech"])
        counts = detector.count_mentions("Globex and GLOBEX, not Globexx.")
        assert counts == {"Globex": 2, "Initech": 0}

    def test_discovers_companies_from_comparisons(self):
        text = (
            "Acmecorp is solid, but Globex Systems is a popular choice. "
            "Compared to Initech Software, Globex Systems is cheaper."
        )
        detector = CompetitorDetector("Acmecorp", [])

        assert detector.discover(text) == ["Initech Software", "Globex Systems"]
        assert detector.count_mentions(text) == {"Initech Software": 1, "Globex Systems": 2}

    def test_discovery_skips_brand_and_common_words(self):
        text = (
            "Acme Corp is a trusted vendor. Compared to Acme Corp, Globex Systems is cheaper. "
            "Top Picks is a good option. Globex Systems is a popular option."
        )
        assert CompetitorDetector("Acme Corp", []).discover(text) == ["Globex Systems"]

    def test_named_competitor_not_rediscovered(self):
        detector = CompetitorDetector("Acme", ["Globex Systems"])
        counts = detector.count_mentions("Globex Systems is a popular choice.")
        assert counts == {"Globex Systems": 1}

    @pytest.mark.parametrize("name", ["acmecorp", "AcmeCorp", "acmecorp.com", "Acmecorp Inc", "Acmecorp Solutions"])
    def test_brand_spellings(self, name):
        assert CompetitorDetector("Acmecorp", []).is_brand_name(name)

    def test_other_names_are_not_brand(self):
        detector = CompetitorDetector("Acmecorp", [])
        assert not detector.is_brand_name("Globex")
        assert not detector.is_brand_name("Acmecorp Terminal Partners")


# =============================================================================
# ANALYSIS ENGINE
# =============================================================================


class TestAnalysisEngine:
    """Per-response analysis."""

    def _engine(self):
        return AnalysisEngine("Acmecorp", website_url="https://acmecorp.com", competitors=["Globex"])

    def test_analyze_response(self):
        response = make_response(
            "p1",
            "Acmecorp is the best POS provider. Globex is another option, but Globex is expensive.",
            [
                WebSearchCitation(url="https://acmecorp.com/pos", title="Acmecorp POS", snippet=""),
                WebSearchCitation(url="https://review.org/pos", title="Top POS", snippet=""),
            ],
        )
        result = self._engine().analyze_response(prompt("p1"), response)

        assert result.is_mentioned
        assert result.mention_count == 1
        assert result.citation_count == 2
        assert result.citation_urls == ["https://acmecorp.com/pos", "https://review.org/pos"]
        assert [c.url for c in result.brand_citations] == ["https://acmecorp.com/pos"]
        assert result.brand_citations[0].context == "Acmecorp POS"
        assert result.is_cited
        assert result.competitor_mentions == {"Globex": 2}
        assert result.sentiment.tone == Tone.MIXED

    def test_brand_citation_by_url_uses_link_text(self):
        response = make_response(
            "p1",
            "Read the [pricing page](https://acmecorp.com/pricing) for details.",
            [WebSearchCitation(url="https://acmecorp.com/pricing", title="Pricing", snippet="")],
        )
        citations = self._engine().find_brand_citations(response)

        assert len(citations) == 1
        assert citations[0].context == "pricing page"

    def test_unanswered_prompts_skipped(self):
        prompts = [prompt("p1"), prompt("p2")]
        analyses = self._engine().analyze_responses(prompts, [make_response("p2", "No brand here.")])

        assert [a.prompt_id for a in analyses] == ["p2"]
        assert not analyses[0].is_mentioned
        assert not analyses[0].is_cited


# =============================================================================
# METRICS
# =============================================================================


class TestVisibilityScore:
    """Weighted, normalized, clamped score."""

    def test_weights(self):
        score = calculate_visibility_score([analysis("p1", exact=1, citations=2, tone=Tone.POSITIVE)])
        assert score == pytest.approx(38.0)

    def test_negative_tone_clamped_at_zero(self):
        assert calculate_visibility_score([analysis("p1", tone=Tone.NEGATIVE)]) == 0.0

    def test_clamped_at_hundred(self):
        assert calculate_visibility_score([analysis("p1", exact=10)]) == 100.0

    def test_empty(self):
        assert calculate_visibility_score([]) == 0.0


class TestCategoryMetrics:
    """Rates over all prompts of a category."""

    def test_rates(self):
        prompts = [prompt("p1"), prompt("p2"), prompt("p3", category_id="cat_b")]
        analyses = [analysis("p1", exact=1, citations=2), analysis("p3", category_id="cat_b")]

        metrics = calculate_category_metrics("cat_a", prompts, analyses)

        assert metrics.brand_mention_rate == 0.5
        assert metrics.citation_rate == 1.0
        assert metrics.visibility_score == pytest.approx(28.0)

    def test_no_analyses_all_zero(self):
        metrics = calculate_category_metrics("cat_a", [prompt("p1")], [])
        assert metrics == CategoryMetrics(category_id="cat_a")

    def test_score_clamped_on_construction(self):
        assert CategoryMetrics(category_id="x", visibility_score=140).visibility_score == 100.0


class TestCompetitiveAnalysis:
    """Share of voice and coverage gaps."""

    def test_shares_and_gaps(self):
        prompts = [prompt("p1"), prompt("p2"), prompt("p3")]
        analyses = [
            analysis("p1", exact=1, competitors={"Globex": 2}),
            analysis("p2", competitors={"Globex": 0}),
        ]

        result = perform_competitive_analysis(analyses, prompts, ["Globex"])

        assert result.brand_share == pytest.approx(100 / 3)
        assert result.competitor_shares["Globex"] == pytest.approx(200 / 3)
        assert result.missing_brand_prompts == ["p2", "p3"]
        assert result.white_space_topics == ["Question p2?", "Question p3?"]
        assert result.dominated_prompts == ["p1"]

    def test_discovered_competitor_dominates(self):
        engine = AnalysisEngine("Acmecorp", website_url="https://acmecorp.com")
        prompts = [prompt("p1")]
        answer = make_response(
            "p1",
            "Acmecorp works, but Globex Systems is a popular choice. "
            "Globex Systems is also cheaper.",
        )

        analyses = engine.analyze_responses(prompts, [answer])
        result = perform_competitive_analysis(analyses, prompts, engine.competitors)

        assert analyses[0].competitor_mentions == {"Globex Systems": 2}
        assert result.brand_share == pytest.approx(100 / 3)
        assert result.competitor_shares == {"Globex Systems": pytest.approx(200 / 3)}
        assert result.dominated_prompts == ["p1"]

    def test_no_mentions(self):
        result = perform_competitive_analysis([analysis("p1")], [prompt("p1")], ["Globex"])

        assert result.brand_share == 0.0
        assert result.competitor_shares == {"Globex": 0.0}
        assert result.dominated_prompts == []


class TestSummary:
    """Run-level rollup."""

    def test_build_summary(self):
        prompts = [prompt("p1"), prompt("p2")]
        analyses = [analysis("p1", exact=1, tone=Tone.POSITIVE), analysis("p2")]
        analyses[0].is_cited = True
        responses = [
            make_response("p1", "x", [
                WebSearchCitation(url="https://www.acmecorp.com/a"),
                WebSearchCitation(url="https://review.org/a"),
            ]),
            make_response("p2", "y", [WebSearchCitation(url="https://review.org/b")]),
        ]
        metrics = [CategoryMetrics(category_id="cat_a", visibility_score=30.0),
                   CategoryMetrics(category_id="cat_b", visibility_score=10.0)]

        summary = build_summary(prompts, analyses, metrics, responses, "https://acmecorp.com")

        assert summary.total_prompts == 2
        assert summary.answered_prompts == 2
        assert summary.mention_rate == 0.5
        assert summary.citation_rate == 0.5
        assert summary.average_visibility == 20.0
        assert summary.tone_distribution == {"positive": 1, "neutral": 1}
        assert summary.top_sources == [{"domain": "review.org", "count": 2}]

    def test_rates_over_answered_prompts(self):
        prompts = [prompt("p1"), prompt("p2"), prompt("p3"), prompt("p4")]
        analyses = [analysis("p1", exact=1), analysis("p2")]

        summary = build_summary(prompts, analyses, [], [])

        assert summary.total_prompts == 4
        assert summary.answered_prompts == 2
        assert summary.mention_rate == 0.5

    def test_time_series_point(self):
        summary = build_summary([], [], [], [])
        point = time_series_point(summary, timestamp=datetime(2024, 5, 1))

        assert point.timestamp == datetime(2024, 5, 1)
        assert point.visibility_score == 0.0
        assert point.mention_rate == 0.0
