"""
Tests for category generation, prompt generation and the Claude-backed
synthesizers.
"""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from geo_engine.categorization import (
    CATEGORY_TEMPLATES,
    CategoryGenerator,
    LLMCategorySynthesizer,
    calculate_category_confidence,
    find_source_pages,
    make_category_id,
)
from geo_engine.errors import SynthesisError
from geo_engine.llm import ClaudeClient, CompletionResponse, TokenUsage, extract_json
from geo_engine.models import Category, CrawledPage, Intent, UserInput, WebsiteContent
from geo_engine.prompts import (
    LLMPromptSynthesizer,
    PromptGenerator,
    classify_intent,
    fill_template,
    get_templates,
)


def completion(content: str, success: bool = True, error: str = None) -> CompletionResponse:
    return CompletionResponse(
        content=content,
        usage=TokenUsage(input_tokens=10, output_tokens=20),
        model="claude-test",
        stop_reason="end_turn" if success else "error",
        success=success,
        error=error,
    )


def mock_claude(*replies: CompletionResponse) -> MagicMock:
    client = MagicMock(spec=ClaudeClient)
    client.complete_with_retry = AsyncMock(side_effect=list(replies))
    return client


def template(name: str):
    return next(t for t in CATEGORY_TEMPLATES if t.name == name)


# =============================================================================
# CATEGORY GENERATION
# =============================================================================


class TestCategoryConfidence:
    """Keyword coverage plus page-spread boost."""

    def test_keyword_share_without_pages(self):
        confidence = calculate_category_confidence(template("Pricing"), "Our price and plan", [])
        assert confidence == pytest.approx(2 / 6)

    def test_page_boost(self):
        pages = [
            CrawledPage(url="https://acme.com/", title="Home", content="See our price list"),
            CrawledPage(url="https://acme.com/team", title="Team", content="About us"),
        ]
        confidence = calculate_category_confidence(template("Pricing"), "price plan", pages)
        assert confidence == pytest.approx(2 / 6 + 0.5 * 0.3)

    def test_capped_at_one(self):
        text = "product feature solution offering service"
        pages = [CrawledPage(url="https://acme.com/", title="Home", content=text)]
        assert calculate_category_confidence(template("Product"), text, pages) == 1.0

    def test_source_pages(self):
        pages = [
            CrawledPage(url="https://acme.com/help", title="Help center", content=""),
            CrawledPage(url="https://acme.com/jobs", title="Jobs", content="Join us"),
        ]
        assert find_source_pages(template("Support"), pages) == ["https://acme.com/help"]


class TestCategoryGenerator:
    """Template categories filtered and ranked by confidence."""

    def _content(self, text: str) -> WebsiteContent:
        pages = [CrawledPage(url="https://acme.com/", title="Home", content=text)]
        return WebsiteContent(domain="acme.com", pages=pages, normalized_content=text)

    def test_filters_by_confidence_and_sorts(self):
        text = (
            "Our product has every feature. The solution and offering include "
            "a service with a simple price plan and subscription fee."
        )
        categories = CategoryGenerator().generate_categories(self._content(text), 0.5, 10)

        names = [c.name for c in categories]
        assert names[0] == "Product"
        assert "Pricing" in names
        assert all(c.confidence >= 0.5 for c in categories)
        assert categories == sorted(categories, key=lambda c: c.confidence, reverse=True)

    def test_max_categories(self):
        text = " ".join(kw for t in CATEGORY_TEMPLATES for kw in t.keywords)
        categories = CategoryGenerator().generate_categories(self._content(text), 0.0, 3)
        assert len(categories) == 3

    def test_empty_content(self):
        content = WebsiteContent(domain="acme.com")
        assert CategoryGenerator().generate_categories(content) == []

    def test_category_ids_unique(self):
        assert make_category_id("Use Cases") != make_category_id("Use Cases")
        assert make_category_id("Use Cases").startswith("cat_use_cases_")


class TestLLMCategorySynthesizer:
    """Claude-backed categories."""

    @pytest.mark.asyncio
    async def test_parses_categories(self):
        reply = completion(
            'Here you go:\n```json\n{"categories": [{"name": "POS Systems", '
            '"description": "Point of sale"}, {"name": ""}, {"name": "Payments"}]}\n```'
        )
        synthesizer = LLMCategorySynthesizer(mock_claude(reply))

        categories = await synthesizer.synthesize("content", "en")

        assert [c.name for c in categories] == ["POS Systems", "Payments"]
        assert all(c.confidence == 0.8 for c in categories)

    @pytest.mark.asyncio
    async def test_api_failure_raises(self):
        synthesizer = LLMCategorySynthesizer(mock_claude(completion("", False, "overloaded")))
        with pytest.raises(SynthesisError):
            await synthesizer.synthesize("content", "en")

    @pytest.mark.asyncio
    async def test_unparseable_reply_raises(self):
        synthesizer = LLMCategorySynthesizer(mock_claude(completion("no json here")))
        with pytest.raises(SynthesisError):
            await synthesizer.synthesize("content", "en")


# =============================================================================
# PROMPT GENERATION
# =============================================================================


class TestClassifyIntent:
    """Substring-based intent rules."""

    @pytest.mark.parametrize("text,intent", [
        ("How much does Acme cost in US?", Intent.HIGH),
        ("Which provider would you recommend?", Intent.HIGH),
        ("Is Acme reliable?", Intent.MEDIUM),
        ("Tell me about Acme", Intent.LOW),
    ])
    def test_rules(self, text, intent):
        assert classify_intent(text) == intent


class TestPromptGenerator:
    """Template-based prompts."""

    def test_fill_template(self, user_input):
        filled = fill_template("Should I choose {product} or {competitor} in {region}?", user_input)
        assert filled == "Should I choose Acmecorp or competitors in US?"

    def test_exact_count_per_category(self, user_input, category):
        prompts = PromptGenerator().generate_prompts([category], user_input, 3)

        assert len(prompts) == 3
        assert all(p.category_id == category.id for p in prompts)
        assert prompts[0].text == "What are the key features of Acmecorp in US?"
        assert len({p.id for p in prompts}) == 3

    def test_count_capped_by_templates(self, user_input, category):
        prompts = PromptGenerator().generate_prompts([category], user_input, 50)
        assert len(prompts) == len(get_templates(category.name, "en"))

    def test_localized_templates(self):
        user_input = UserInput(website_url="acme.ch", country="CH", language="de", region="Zurich")
        pricing = Category(id="cat_pricing_1", name="Pricing", description="", confidence=0.9)

        prompts = PromptGenerator().generate_prompts([pricing], user_input, 3)

        assert prompts[0].text == "Wie viel kostet Acme in CH?"
        assert prompts[2].text == "Ist Acme für kleine Unternehmen in Zurich erschwinglich?"
        assert all(p.language == "de" and p.region == "Zurich" for p in prompts)

    def test_unknown_language_falls_back_to_english(self):
        assert get_templates("Pricing", "xx") == get_templates("Pricing", "en")


class TestLLMPromptSynthesizer:
    """Claude-backed questions with template fallback."""

    @pytest.mark.asyncio
    async def test_tops_up_short_replies(self, user_input, category):
        reply = completion(
            '{"questions": ["Who offers POS systems in US?", "What does a POS system cost in US?"]}'
        )
        synthesizer = LLMPromptSynthesizer(mock_claude(reply), request_delay=0)

        prompts = await synthesizer.synthesize([category], user_input, "content", 3)

        assert len(prompts) == 3
        assert prompts[0].text == "Who offers POS systems in US?"
        assert prompts[1].intent == Intent.HIGH
        assert prompts[2].text == "What are the key features of Acmecorp in US?"

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_templates(self, user_input, category):
        client = mock_claude(completion("", False, "rate limited"))
        synthesizer = LLMPromptSynthesizer(client, request_delay=0)

        prompts = await synthesizer.synthesize([category], user_input, "content", 2)

        assert [p.text for p in prompts] == [
            "What are the key features of Acmecorp in US?",
            "How does Acmecorp work for businesses in US?",
        ]

    @pytest.mark.asyncio
    async def test_one_call_per_category(self, user_input, category):
        other = Category(id="cat_pricing_2", name="Pricing", description="", confidence=0.7)
        client = mock_claude(
            completion('{"questions": ["Q1?"]}'),
            completion('{"questions": ["Q2?"]}'),
        )
        synthesizer = LLMPromptSynthesizer(client, request_delay=0)

        prompts = await synthesizer.synthesize([category, other], user_input, "", 1)

        assert [p.text for p in prompts] == ["Q1?", "Q2?"]
        assert client.complete_with_retry.await_count == 2


# =============================================================================
# LLM CLIENT
# =============================================================================


class TestExtractJson:
    """JSON objects inside free-form replies."""

    def test_plain_json(self):
        assert extract_json('{"questions": ["a"]}') == {"questions": ["a"]}

    def test_fenced_block(self):
        text = 'Sure!\n```json\n{"categories": []}\n```\nDone.'
        assert extract_json(text, required_key="categories") == {"categories": []}

    def test_embedded_object(self):
        assert extract_json('Result: {"a": 1} end') == {"a": 1}

    def test_required_key_missing(self):
        assert extract_json('{"other": 1}', required_key="questions") is None

    def test_no_json(self):
        assert extract_json("nothing") is None
        assert extract_json("") is None


class TestClaudeClient:
    """Completion wrapper around AsyncAnthropic."""

    def _client(self, create):
        api = MagicMock()
        api.messages.create = create
        return ClaudeClient(api_key="test-key", model="claude-test", client=api)

    @pytest.mark.asyncio
    async def test_complete_tracks_usage(self):
        message = SimpleNamespace(
            content=[SimpleNamespace(text="Hello "), SimpleNamespace(text="world")],
            usage=SimpleNamespace(input_tokens=3, output_tokens=4),
            stop_reason="end_turn",
        )
        client = self._client(AsyncMock(return_value=message))

        response = await client.complete("Hi")

        assert response.success
        assert response.content == "Hello world"
        assert client.total_usage.total_tokens == 7
        assert client.call_count == 1

    @pytest.mark.asyncio
    async def test_close_logs_usage_totals(self, caplog):
        message = SimpleNamespace(
            content=[SimpleNamespace(text="ok")],
            usage=SimpleNamespace(input_tokens=3, output_tokens=4),
            stop_reason="end_turn",
        )
        client = self._client(AsyncMock(return_value=message))
        client.async_client.close = AsyncMock()

        await client.complete("Hi")
        await client.complete("Again")
        with caplog.at_level(logging.INFO, logger="geo_engine.llm.client"):
            await client.close()

        assert "Claude usage: 2 calls, 14 tokens (6 in, 8 out)" in caplog.text
        client.async_client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_api_error_returned_not_raised(self):
        error = anthropic.APIError(
            "overloaded",
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"),
            body=None,
        )
        client = self._client(AsyncMock(side_effect=error))

        response = await client.complete("Hi")

        assert not response.success
        assert "overloaded" in response.error

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(
            "geo_engine.llm.client.get_settings",
            lambda: SimpleNamespace(ANTHROPIC_API_KEY=None, CLAUDE_MODEL=None),
        )
        with pytest.raises(ValueError):
            ClaudeClient()
