"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

from datetime import datetime
from typing import Dict, List, Union

import httpx
import pytest

from geo_engine.ingestion import PageFetcher
from geo_engine.models import (
    Category,
    LLMResponse,
    Prompt,
    UserInput,
    WebSearchCitation,
)


# ============================================================================
# HTTP Fakes
# ============================================================================

Route = Union[str, tuple]


def build_transport(routes: Dict[str, Route], calls: List[str] = None) -> httpx.MockTransport:
    """
    MockTransport answering by URL path.

    A route value is either the body (status 200) or a (status, body)
    tuple. Unknown paths return 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=route)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_fetcher():
    """Factory for a PageFetcher backed by a path -> body mapping."""
    def factory(routes: Dict[str, Route], calls: List[str] = None) -> PageFetcher:
        client = httpx.AsyncClient(transport=build_transport(routes, calls))
        return PageFetcher(client=client)

    return factory


# ============================================================================
# Mock Data Fixtures
# ============================================================================

@pytest.fixture
def user_input() -> UserInput:
    return UserInput(
        website_url="https://acmecorp.com",
        country="US",
        language="en",
    )


@pytest.fixture
def category() -> Category:
    return Category(
        id="cat_products_services_1",
        name="Products & Services",
        description="Products and services offered",
        confidence=0.8,
    )


@pytest.fixture
def sample_prompts() -> List[Prompt]:
    return [
        Prompt(
            id=f"prompt_{i}",
            category_id="cat_products_services_1",
            text=f"Question number {i} about Acmecorp?",
            language="en",
            country="US",
        )
        for i in range(1, 6)
    ]


def make_response(prompt_id: str, text: str, citations: List[WebSearchCitation] = None) -> LLMResponse:
    return LLMResponse(
        prompt_id=prompt_id,
        output_text=text,
        citations=citations or [],
        model="gpt-4o",
        created_at=datetime(2024, 1, 1, 12, 0, 0),
    )


SAMPLE_RESPONSES_PAYLOAD = {
    "id": "resp_123",
    "output": [
        {"type": "web_search_call", "id": "ws_1", "status": "completed"},
        {
            "type": "message",
            "status": "completed",
            "role": "assistant",
            "content": [
                {
                    "type": "output_text",
                    "text": "Acmecorp is a leading provider of POS systems.",
                    "annotations": [
                        {
                            "type": "url_citation",
                            "url": "https://acmecorp.com/pos",
                            "title": "Acmecorp POS",
                            "start_index": 0,
                            "end_index": 8,
                        },
                        {
                            "type": "url_citation",
                            "url": "https://review.example.org/best-pos",
                            "start_index": 10,
                            "end_index": 20,
                        },
                    ],
                }
            ],
        },
    ],
}
