"""
Tests for the Responses API client, reply parsing and the answer
executor.
"""

import json

import httpx
import pytest

from conftest import SAMPLE_RESPONSES_PAYLOAD
from geo_engine.errors import AnswerServiceError
from geo_engine.execution import (
    AnswerExecutor,
    ResponsesClient,
    RetryConfig,
    extract_citations,
    extract_output_text,
)
from geo_engine.utils.config import Settings


NO_RETRY = RetryConfig(max_retries=0)
FAST_RETRY = RetryConfig(max_retries=2, initial_delay=0.0, max_delay=0.0)


def responses_client(handler, retry_config=NO_RETRY, timeout: float = 5.0) -> ResponsesClient:
    return ResponsesClient(
        api_key="sk-test",
        timeout=timeout,
        retry_config=retry_config,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


# =============================================================================
# REPLY PARSING
# =============================================================================


class TestExtractOutputText:
    """Tolerant output text lookup."""

    def test_completed_message(self):
        assert extract_output_text(SAMPLE_RESPONSES_PAYLOAD) == (
            "Acmecorp is a leading provider of POS systems."
        )

    def test_data_wrapper(self):
        assert extract_output_text({"data": SAMPLE_RESPONSES_PAYLOAD}).startswith("Acmecorp")
        assert extract_output_text({"data": SAMPLE_RESPONSES_PAYLOAD["output"]}).startswith("Acmecorp")

    def test_bare_list(self):
        assert extract_output_text(SAMPLE_RESPONSES_PAYLOAD["output"]).startswith("Acmecorp")

    def test_direct_fields(self):
        assert extract_output_text({"output_text": "direct"}) == "direct"
        assert extract_output_text({"message": {"output_text": "nested"}}) == "nested"
        assert extract_output_text({"outputText": "camel"}) == "camel"

    def test_incomplete_message_ignored(self):
        payload = {
            "output": [{
                "type": "message",
                "status": "in_progress",
                "content": [{"type": "output_text", "text": "partial"}],
            }]
        }
        assert extract_output_text(payload) == ""

    def test_unrecognized_shape(self):
        assert extract_output_text({"foo": "bar"}) == ""
        assert extract_output_text(None) == ""


class TestExtractCitations:
    """url_citation annotations."""

    def test_title_defaults_to_url(self):
        citations = extract_citations(SAMPLE_RESPONSES_PAYLOAD)

        assert [c.url for c in citations] == [
            "https://acmecorp.com/pos",
            "https://review.example.org/best-pos",
        ]
        assert citations[0].title == "Acmecorp POS"
        assert citations[1].title == "https://review.example.org/best-pos"
        assert citations[1].snippet == ""

    def test_deduplicated_by_url(self):
        annotation = {"type": "url_citation", "url": "https://a.com", "title": "First"}
        payload = {
            "output": [{
                "type": "message",
                "status": "completed",
                "content": [{
                    "type": "output_text",
                    "text": "x",
                    "annotations": [annotation, dict(annotation, title="Second"), {"type": "file_citation"}],
                }],
            }]
        }
        citations = extract_citations(payload)

        assert len(citations) == 1
        assert citations[0].title == "First"

    def test_no_annotations(self):
        assert extract_citations({"output_text": "plain"}) == []


# =============================================================================
# RESPONSES CLIENT
# =============================================================================


class TestResponsesClient:
    """HTTP behavior of the Responses API client."""

    def test_requires_api_key(self):
        with pytest.raises(AnswerServiceError):
            ResponsesClient(api_key=None)

    @pytest.mark.asyncio
    async def test_request_body_enables_web_search(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=SAMPLE_RESPONSES_PAYLOAD)

        client = responses_client(handler)
        data = await client.create_response("Who sells POS systems?")

        assert data == SAMPLE_RESPONSES_PAYLOAD
        assert seen["body"] == {
            "model": "gpt-4o",
            "tools": [{"type": "web_search"}],
            "input": "Who sells POS systems?",
        }
        assert seen["auth"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_non_retryable_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"error": {"message": "bad input"}})

        client = responses_client(handler, retry_config=FAST_RETRY)
        with pytest.raises(AnswerServiceError) as exc_info:
            await client.create_response("q")

        assert exc_info.value.status_code == 400
        assert "bad input" in str(exc_info.value)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_retryable_status(self):
        statuses = [503, 429, 200]

        def handler(request):
            status = statuses.pop(0)
            if status == 200:
                return httpx.Response(200, json={"output_text": "ok"})
            return httpx.Response(status, text="busy")

        client = responses_client(handler, retry_config=FAST_RETRY)
        assert await client.create_response("q") == {"output_text": "ok"}

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        client = responses_client(lambda request: httpx.Response(502), retry_config=FAST_RETRY)
        with pytest.raises(AnswerServiceError) as exc_info:
            await client.create_response("q")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_closed_client_rejects_requests(self):
        client = responses_client(lambda request: httpx.Response(200, json={}))
        await client.close()
        with pytest.raises(AnswerServiceError):
            await client.create_response("q")


# =============================================================================
# ANSWER EXECUTOR
# =============================================================================


class TestAnswerExecutor:
    """Batch execution with per-prompt isolation."""

    @pytest.mark.asyncio
    async def test_execute_prompt(self, sample_prompts):
        executor = AnswerExecutor(
            responses_client(lambda request: httpx.Response(200, json=SAMPLE_RESPONSES_PAYLOAD))
        )
        response = await executor.execute_prompt(sample_prompts[0])

        assert response.prompt_id == sample_prompts[0].id
        assert response.output_text.startswith("Acmecorp")
        assert len(response.citations) == 2
        assert response.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_failed_prompt_is_skipped(self, sample_prompts):
        def handler(request):
            body = json.loads(request.content)
            if body["input"] == sample_prompts[2].text:
                return httpx.Response(500, json={"error": {"message": "internal"}})
            return httpx.Response(200, json=SAMPLE_RESPONSES_PAYLOAD)

        executor = AnswerExecutor(responses_client(handler))
        responses = await executor.execute_prompts(sample_prompts)

        assert len(responses) == 4
        assert sample_prompts[2].id not in {r.prompt_id for r in responses}
        assert [r.prompt_id for r in responses] == [
            p.id for i, p in enumerate(sample_prompts) if i != 2
        ]

    @pytest.mark.asyncio
    async def test_empty_answer_is_skipped(self, sample_prompts):
        def handler(request):
            body = json.loads(request.content)
            if body["input"] == sample_prompts[0].text:
                return httpx.Response(200, json={"output": []})
            return httpx.Response(200, json={"output_text": "An answer."})

        executor = AnswerExecutor(responses_client(handler))
        responses = await executor.execute_prompts(sample_prompts[:2])

        assert [r.prompt_id for r in responses] == [sample_prompts[1].id]

    @pytest.mark.asyncio
    async def test_missing_credentials_raise(self, sample_prompts):
        executor = AnswerExecutor(client=None)
        with pytest.raises(AnswerServiceError):
            await executor.execute_prompts(sample_prompts)

    @pytest.mark.asyncio
    async def test_debug_mode_returns_canned_answers(self, sample_prompts):
        executor = AnswerExecutor(client=None, debug_mode=True)
        responses = await executor.execute_prompts(sample_prompts)

        assert len(responses) == len(sample_prompts)
        assert all("[DEBUG MODE]" in r.output_text for r in responses)
        assert all(len(r.citations) == 1 for r in responses)

    def test_from_settings_without_key(self):
        executor = AnswerExecutor.from_settings(Settings(_env_file=None, OPENAI_API_KEY=None))
        assert executor.client is None

    def test_from_settings_with_key(self):
        settings = Settings(_env_file=None, OPENAI_API_KEY="sk-test", OPENAI_MODEL="gpt-4.1")
        executor = AnswerExecutor.from_settings(settings)
        assert executor.client.model == "gpt-4.1"
