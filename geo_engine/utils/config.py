"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Answer service (OpenAI Responses API)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_RESPONSES_URL: str = "https://api.openai.com/v1/responses"

    # Claude API (category and prompt synthesis)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"

    # Application Settings
    DEBUG_MODE: bool = False
    LOG_LEVEL: str = "INFO"
    RUNS_PATH: Optional[str] = None

    # Crawling
    MAX_PAGES: int = 50
    MAX_DEPTH: int = 3
    USER_AGENT: str = "GEO-Platform/1.0"

    # Generation
    MIN_CATEGORY_CONFIDENCE: float = 0.5
    MAX_CATEGORIES: int = 10
    QUESTIONS_PER_CATEGORY: int = 5

    # Analysis
    BRAND_FUZZY_THRESHOLD: float = 0.7
    SENTIMENT_CONFIDENCE_THRESHOLD: float = 0.6

    # Timeouts (seconds)
    CRAWL_TIMEOUT: float = 30.0
    SITEMAP_TIMEOUT: float = 10.0
    ANSWER_TIMEOUT: float = 60.0
    LLM_REQUEST_DELAY: float = 2.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()


@dataclass
class PipelineConfig:
    """Tuning knobs handed to pipeline components."""
    max_pages: int = 50
    max_depth: int = 3
    timeout: float = 30.0
    sitemap_timeout: float = 10.0
    user_agent: str = "GEO-Platform/1.0"
    min_category_confidence: float = 0.5
    max_categories: int = 10
    questions_per_category: int = 5
    brand_fuzzy_threshold: float = 0.7
    answer_timeout: float = 60.0
    llm_request_delay: float = 2.0
    debug_mode: bool = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PipelineConfig":
        settings = settings or get_settings()
        return cls(
            max_pages=settings.MAX_PAGES,
            max_depth=settings.MAX_DEPTH,
            timeout=settings.CRAWL_TIMEOUT,
            sitemap_timeout=settings.SITEMAP_TIMEOUT,
            user_agent=settings.USER_AGENT,
            min_category_confidence=settings.MIN_CATEGORY_CONFIDENCE,
            max_categories=settings.MAX_CATEGORIES,
            questions_per_category=settings.QUESTIONS_PER_CATEGORY,
            brand_fuzzy_threshold=settings.BRAND_FUZZY_THRESHOLD,
            answer_timeout=settings.ANSWER_TIMEOUT,
            llm_request_delay=settings.LLM_REQUEST_DELAY,
            debug_mode=settings.DEBUG_MODE,
        )
