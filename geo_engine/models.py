"""
Data Models for the GEO Engine

Pipeline records passed between ingestion, generation, execution,
analysis and the workflow layer.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from geo_engine.errors import InputValidationError
from geo_engine.utils.urls import ensure_scheme


# =============================================================================
# ENUMS
# =============================================================================


class Intent(str, Enum):
    """Purchase intent of a generated question."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Tone(str, Enum):
    """Overall tone of an answer."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class RunStatus(str, Enum):
    """Lifecycle status of a workflow run."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStep(str, Enum):
    """Workflow steps in execution order."""
    PENDING = "pending"
    SITEMAP = "sitemap"
    CONTENT = "content"
    CATEGORIES = "categories"
    PROMPTS = "prompts"
    EXECUTION = "execution"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# USER INPUT
# =============================================================================


class UserInput(BaseModel):
    """Website and market a run analyzes."""

    model_config = ConfigDict(populate_by_name=True)

    website_url: str = Field(..., alias="websiteUrl")
    country: str
    language: str
    region: Optional[str] = None
    competitors: List[str] = Field(default_factory=list)

    @property
    def normalized_website_url(self) -> str:
        return ensure_scheme(self.website_url)


REQUIRED_INPUT_FIELDS = ("website_url", "country", "language")


def validate_user_input(data: Any) -> UserInput:
    """
    Validate raw input before a run starts.

    Accepts a UserInput or a mapping (snake_case or camelCase keys).

    Raises:
        InputValidationError: If websiteUrl, country or language is
            missing or blank.
    """
    if isinstance(data, UserInput):
        user_input = data
    else:
        try:
            user_input = UserInput.model_validate(data or {})
        except ValidationError as e:
            missing = [
                str(err["loc"][0]) for err in e.errors() if err.get("loc")
            ]
            raise InputValidationError(
                f"Invalid input: {', '.join(missing) or 'unknown fields'}",
                fields=missing,
            ) from e

    blank = [
        name for name in REQUIRED_INPUT_FIELDS
        if not str(getattr(user_input, name) or "").strip()
    ]
    if blank:
        raise InputValidationError(
            f"Missing required fields: {', '.join(blank)}",
            fields=blank,
        )

    return user_input


# =============================================================================
# INGESTION
# =============================================================================


@dataclass(frozen=True)
class CrawledPage:
    """A fetched and parsed page. Immutable once created."""
    url: str
    title: str
    headings: List[str] = field(default_factory=list)
    content: str = ""
    topics: List[str] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)
    language: str = "en"


@dataclass
class WebsiteContent:
    """All crawled pages of a site plus the normalized corpus."""
    domain: str
    pages: List[CrawledPage] = field(default_factory=list)
    normalized_content: str = ""
    language: str = "en"


@dataclass
class SitemapDiscovery:
    """Outcome of sitemap resolution."""
    found_sitemap: bool
    urls: List[str] = field(default_factory=list)
    is_index: bool = False
    location: Optional[str] = None


# =============================================================================
# GENERATION
# =============================================================================


@dataclass
class Category:
    id: str
    name: str
    description: str
    confidence: float
    source_pages: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.confidence = max(0.0, min(1.0, float(self.confidence)))


@dataclass
class Prompt:
    id: str
    category_id: str
    text: str
    language: str
    country: str
    intent: Intent = Intent.LOW
    region: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


# =============================================================================
# EXECUTION
# =============================================================================


@dataclass
class WebSearchCitation:
    url: str
    title: Optional[str] = None
    snippet: Optional[str] = None


@dataclass
class LLMResponse:
    """Answer produced for one prompt."""
    prompt_id: str
    output_text: str
    citations: List[WebSearchCitation] = field(default_factory=list)
    model: str = ""
    created_at: datetime = field(default_factory=datetime.now)


# =============================================================================
# ANALYSIS
# =============================================================================


@dataclass
class BrandMention:
    exact: int = 0
    fuzzy: int = 0
    contexts: List[str] = field(default_factory=list)
    citations: int = 0


@dataclass
class SentimentAnalysis:
    tone: Tone = Tone.NEUTRAL
    confidence: float = 0.1
    keywords: List[str] = field(default_factory=list)


@dataclass
class BrandCitation:
    """A web-search citation that links to or names the brand."""
    url: str
    title: Optional[str] = None
    snippet: Optional[str] = None
    context: str = ""


@dataclass
class PromptAnalysis:
    """One prompt and its answer, scored."""
    prompt_id: str
    category_id: str
    brand_mentions: BrandMention
    sentiment: SentimentAnalysis
    citation_count: int = 0
    citation_urls: List[str] = field(default_factory=list)
    brand_citations: List[BrandCitation] = field(default_factory=list)
    competitor_mentions: Dict[str, int] = field(default_factory=dict)
    is_mentioned: bool = False
    is_cited: bool = False
    mention_count: int = 0


@dataclass
class CategoryMetrics:
    category_id: str
    visibility_score: float = 0.0
    citation_rate: float = 0.0
    brand_mention_rate: float = 0.0

    def __post_init__(self):
        self.visibility_score = max(0.0, min(100.0, float(self.visibility_score)))


@dataclass
class CompetitiveAnalysis:
    brand_share: float = 0.0
    competitor_shares: Dict[str, float] = field(default_factory=dict)
    white_space_topics: List[str] = field(default_factory=list)
    dominated_prompts: List[str] = field(default_factory=list)
    missing_brand_prompts: List[str] = field(default_factory=list)


@dataclass
class TimeSeriesPoint:
    timestamp: datetime
    visibility_score: float
    mention_rate: float
    citation_rate: float


@dataclass
class AnalysisSummary:
    """Run-level rollup shown next to the category metrics."""
    total_prompts: int = 0
    answered_prompts: int = 0
    mention_rate: float = 0.0
    citation_rate: float = 0.0
    average_visibility: float = 0.0
    tone_distribution: Dict[str, int] = field(default_factory=dict)
    top_sources: List[Dict[str, Any]] = field(default_factory=list)


# =============================================================================
# WORKFLOW
# =============================================================================


@dataclass
class WorkflowRun:
    """Persisted status record of one run."""
    id: str
    user_input: UserInput
    status: RunStatus = RunStatus.RUNNING
    step: WorkflowStep = WorkflowStep.PENDING
    progress: int = 0
    message: str = ""
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.status in (RunStatus.COMPLETED, RunStatus.FAILED)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_input": self.user_input.model_dump(),
            "status": self.status.value,
            "step": self.step.value,
            "progress": self.progress,
            "message": self.message,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "WorkflowRun":
        """Create from dictionary."""
        data = dict(data)
        data["user_input"] = UserInput.model_validate(data["user_input"])
        data["status"] = RunStatus(data["status"])
        data["step"] = WorkflowStep(data["step"])
        data["created_at"] = datetime.fromisoformat(data["created_at"])
        data["updated_at"] = datetime.fromisoformat(data["updated_at"])
        return cls(**data)


@dataclass
class AnalysisBundle:
    """Final results of a completed run."""
    run_id: str
    categories: List[Category] = field(default_factory=list)
    prompts: List[Prompt] = field(default_factory=list)
    responses: List[LLMResponse] = field(default_factory=list)
    analyses: List[PromptAnalysis] = field(default_factory=list)
    category_metrics: List[CategoryMetrics] = field(default_factory=list)
    competitive_analysis: Optional[CompetitiveAnalysis] = None
    summary: Optional[AnalysisSummary] = None
    time_series: List[TimeSeriesPoint] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return to_jsonable(asdict(self))

    @classmethod
    def from_dict(cls, data: Dict) -> "AnalysisBundle":
        """Rebuild from the output of to_dict."""
        prompts = [
            Prompt(**{
                **p,
                "intent": Intent(p["intent"]),
                "created_at": datetime.fromisoformat(p["created_at"]),
            })
            for p in data.get("prompts", [])
        ]
        responses = [
            LLMResponse(**{
                **r,
                "citations": [WebSearchCitation(**c) for c in r.get("citations", [])],
                "created_at": datetime.fromisoformat(r["created_at"]),
            })
            for r in data.get("responses", [])
        ]
        analyses = [
            PromptAnalysis(**{
                **a,
                "brand_mentions": BrandMention(**a["brand_mentions"]),
                "sentiment": SentimentAnalysis(**{
                    **a["sentiment"],
                    "tone": Tone(a["sentiment"]["tone"]),
                }),
                "brand_citations": [BrandCitation(**c) for c in a.get("brand_citations", [])],
            })
            for a in data.get("analyses", [])
        ]
        competitive = data.get("competitive_analysis")
        summary = data.get("summary")

        return cls(
            run_id=data["run_id"],
            categories=[Category(**c) for c in data.get("categories", [])],
            prompts=prompts,
            responses=responses,
            analyses=analyses,
            category_metrics=[CategoryMetrics(**m) for m in data.get("category_metrics", [])],
            competitive_analysis=CompetitiveAnalysis(**competitive) if competitive is not None else None,
            summary=AnalysisSummary(**summary) if summary is not None else None,
            time_series=[
                TimeSeriesPoint(**{**t, "timestamp": datetime.fromisoformat(t["timestamp"])})
                for t in data.get("time_series", [])
            ],
        )


def to_jsonable(value: Any) -> Any:
    """Recursively convert enums and datetimes for JSON output."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
