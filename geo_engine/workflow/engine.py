"""
Workflow Engine

Sequences the pipeline as a step state machine:

    sitemap -> content -> categories -> prompts -> execution -> completed

Each step can be invoked on its own (interactive mode, so a caller can
review or edit categories and prompts in between) or chained by
run_all() (automatic mode). Status, step, progress and message are
persisted after every step. An unhandled error inside a step marks the
run failed, records the error and stops further progression.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from geo_engine.analysis import AnalysisEngine, time_series_point
from geo_engine.categorization import (
    CategoryGenerator,
    LLMCategorySynthesizer,
    make_category_id,
)
from geo_engine.errors import WorkflowError
from geo_engine.execution import AnswerExecutor
from geo_engine.ingestion import (
    ContentScraper,
    PageFetcher,
    SiteCrawler,
    SitemapResolver,
)
from geo_engine.llm import ClaudeClient
from geo_engine.models import (
    AnalysisBundle,
    Category,
    Prompt,
    RunStatus,
    SitemapDiscovery,
    UserInput,
    WebsiteContent,
    WorkflowRun,
    WorkflowStep,
    validate_user_input,
)
from geo_engine.persistence import InMemoryRunStore, JsonFileRunStore, RunStore
from geo_engine.prompts import LLMPromptSynthesizer, PromptGenerator, product_name
from geo_engine.utils.config import PipelineConfig, Settings, get_settings

from .steps import ANALYSIS_PROGRESS, STEP_PROGRESS, ensure_transition

logger = logging.getLogger(__name__)

# Template fallback casts a wider net than regular generation
FALLBACK_MIN_CONFIDENCE = 0.3
FALLBACK_MAX_CATEGORIES = 15
MERGE_MIN_CONFIDENCE = 0.3
MERGE_MAX_CATEGORIES = 10

DEFAULT_CATEGORIES = (
    ("Products & Services", "Products and services offered"),
    ("Features", "Key features and capabilities"),
    ("Use Cases", "Common use cases and applications"),
)
DEFAULT_CATEGORY_CONFIDENCE = 0.5

SITEMAP_DOCUMENT_SUFFIXES = (".xml", ".xml.gz")


def default_categories() -> List[Category]:
    return [
        Category(
            id=make_category_id(name),
            name=name,
            description=description,
            confidence=DEFAULT_CATEGORY_CONFIDENCE,
        )
        for name, description in DEFAULT_CATEGORIES
    ]


def merge_categories(primary: List[Category], extra: List[Category]) -> List[Category]:
    """primary followed by extra, deduplicated by case-insensitive name."""
    merged = []
    seen = set()
    for category in list(primary) + list(extra):
        key = category.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        merged.append(category)
    return merged


class WorkflowEngine:
    """
    Runs the visibility pipeline for stored runs.

    Usage (interactive):
        engine = WorkflowEngine.from_settings()
        run = await engine.create_run({"websiteUrl": "acme.com", "country": "CH", "language": "de"})
        await engine.find_sitemap(run.id)
        await engine.fetch_content(run.id)
        categories = await engine.generate_categories(run.id)
        await engine.save_selected_categories(run.id, [c.id for c in categories[:3]])
        await engine.generate_prompts(run.id)
        bundle = await engine.execute_prompts(run.id)
    """

    def __init__(
        self,
        store: RunStore,
        fetcher: PageFetcher,
        executor: AnswerExecutor,
        config: Optional[PipelineConfig] = None,
        claude_client: Optional[ClaudeClient] = None,
    ):
        self.store = store
        self.config = config or PipelineConfig()
        self.fetcher = fetcher
        self.executor = executor
        self.claude_client = claude_client

        self.sitemap_resolver = SitemapResolver(fetcher, timeout=self.config.sitemap_timeout)
        self.crawler = SiteCrawler(fetcher, self.config)
        self.scraper = ContentScraper(self.crawler)
        self.category_generator = CategoryGenerator()
        self.prompt_generator = PromptGenerator()

        self.category_synthesizer = None
        self.prompt_synthesizer = None
        if claude_client is not None:
            self.category_synthesizer = LLMCategorySynthesizer(claude_client)
            self.prompt_synthesizer = LLMPromptSynthesizer(
                claude_client,
                fallback=self.prompt_generator,
                request_delay=self.config.llm_request_delay,
            )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[RunStore] = None,
    ) -> "WorkflowEngine":
        """Build an engine with clients configured from settings."""
        settings = settings or get_settings()
        config = PipelineConfig.from_settings(settings)

        if store is None:
            store = JsonFileRunStore(settings.RUNS_PATH) if settings.RUNS_PATH else InMemoryRunStore()

        claude_client = None
        if settings.ANTHROPIC_API_KEY and not settings.DEBUG_MODE:
            claude_client = ClaudeClient(
                api_key=settings.ANTHROPIC_API_KEY,
                model=settings.CLAUDE_MODEL,
            )
        else:
            logger.info("LLM synthesis disabled, using template categories and prompts")

        return cls(
            store=store,
            fetcher=PageFetcher(user_agent=config.user_agent, timeout=config.timeout),
            executor=AnswerExecutor.from_settings(settings),
            config=config,
            claude_client=claude_client,
        )

    async def close(self):
        await self.fetcher.close()
        await self.executor.close()
        if self.claude_client is not None:
            await self.claude_client.close()

    # =========================================================================
    # Run lifecycle
    # =========================================================================

    async def create_run(self, data) -> WorkflowRun:
        """
        Validate input and create a pending run.

        Raises:
            InputValidationError: Missing websiteUrl, country or language.
        """
        user_input = validate_user_input(data)
        return await self.store.create_run(user_input)

    async def get_run(self, run_id: str) -> WorkflowRun:
        return await self.store.get_run(run_id)

    async def fail_run(self, run_id: str, error: str) -> WorkflowRun:
        run = await self.store.get_run(run_id)
        return await self.store.update_run_status(
            run_id,
            WorkflowStep.FAILED,
            run.progress,
            f"Failed during {run.step.value}: {error}",
            status=RunStatus.FAILED,
            error=error,
        )

    @asynccontextmanager
    async def _step(self, run_id: str, step: WorkflowStep, message: str):
        """
        Enter a step: check the transition, persist the new status, and
        mark the run failed if the body raises.
        """
        run = await self.store.get_run(run_id)
        ensure_transition(run.step, step, run_id)
        await self.store.update_run_status(run_id, step, STEP_PROGRESS[step], message)
        logger.info(f"Run {run_id}: {message}")

        try:
            yield run
        except Exception as e:
            logger.error(f"Run {run_id} failed in step {step.value}: {e}")
            await self.fail_run(run_id, str(e))
            if isinstance(e, WorkflowError):
                raise
            raise WorkflowError(str(e), run_id=run_id, step=step.value) from e

    async def _finish_step(self, run_id: str, step: WorkflowStep, message: str, progress: int = None):
        progress = STEP_PROGRESS[step] if progress is None else progress
        await self.store.update_run_status(run_id, step, progress, message)
        logger.info(f"Run {run_id}: {message}")

    # =========================================================================
    # Steps
    # =========================================================================

    async def find_sitemap(self, run_id: str) -> SitemapDiscovery:
        async with self._step(run_id, WorkflowStep.SITEMAP, "Discovering sitemap") as run:
            website_url = run.user_input.normalized_website_url
            discovery = await self.sitemap_resolver.resolve(website_url)
            await self.store.save_sitemap_urls(run_id, discovery.urls)

            source = discovery.location if discovery.found_sitemap else "homepage links"
            await self._finish_step(
                run_id, WorkflowStep.SITEMAP,
                f"Found {len(discovery.urls)} URLs via {source}",
            )
            return discovery

    async def fetch_content(self, run_id: str, urls: Optional[List[str]] = None) -> WebsiteContent:
        """
        Fetch page content. Uses the given URLs, else the sitemap URLs;
        nested sitemap documents are skipped and, with no page URLs
        left, the site is crawled from its homepage.
        """
        async with self._step(run_id, WorkflowStep.CONTENT, "Fetching page content") as run:
            user_input = run.user_input
            if urls is None:
                urls = await self.store.get_sitemap_urls(run_id)
            page_urls = [
                u for u in urls if not u.lower().endswith(SITEMAP_DOCUMENT_SUFFIXES)
            ]

            content = await self.scraper.scrape(
                user_input.normalized_website_url,
                user_input.language,
                urls=page_urls or None,
            )
            await self.store.save_content(run_id, content)
            await self._finish_step(
                run_id, WorkflowStep.CONTENT,
                f"Fetched {len(content.pages)} pages",
            )
            return content

    async def generate_categories(self, run_id: str) -> List[Category]:
        """
        LLM categories merged with template categories; on LLM failure,
        template categories with a wider net; if still empty, defaults.
        """
        async with self._step(run_id, WorkflowStep.CATEGORIES, "Generating categories") as run:
            content = await self._require_content(run_id)
            categories = await self._build_categories(content, run.user_input)
            await self.store.save_categories(run_id, categories)
            await self._finish_step(
                run_id, WorkflowStep.CATEGORIES,
                f"Generated {len(categories)} categories",
            )
            return categories

    async def _build_categories(self, content: WebsiteContent, user_input: UserInput) -> List[Category]:
        if self.category_synthesizer is not None:
            try:
                llm_categories = await self.category_synthesizer.synthesize(
                    content.normalized_content, user_input.language
                )
                template_categories = self.category_generator.generate_categories(
                    content, MERGE_MIN_CONFIDENCE, MERGE_MAX_CATEGORIES
                )
                return merge_categories(llm_categories, template_categories)
            except Exception as e:
                logger.warning(f"LLM category generation failed, using templates: {e}")

        categories = self.category_generator.generate_categories(
            content, FALLBACK_MIN_CONFIDENCE, FALLBACK_MAX_CATEGORIES
        )
        if not categories:
            logger.warning("No template categories matched, using default categories")
            categories = default_categories()
        return categories

    async def save_selected_categories(
        self,
        run_id: str,
        category_ids: List[str],
        custom_categories: Optional[List[Category]] = None,
    ) -> List[Category]:
        """Keep only the chosen categories, plus any custom ones."""
        run = await self.store.get_run(run_id)
        self._require_step(run, WorkflowStep.CATEGORIES)

        wanted = set(category_ids)
        current = await self.store.get_categories(run_id)
        selected = [c for c in current if c.id in wanted]
        selected = merge_categories(selected, custom_categories or [])

        await self.store.save_categories(run_id, selected)
        await self._finish_step(
            run_id, WorkflowStep.CATEGORIES,
            f"Selected {len(selected)} categories",
        )
        return selected

    async def generate_prompts(self, run_id: str, questions_per_category: Optional[int] = None) -> List[Prompt]:
        count = questions_per_category or self.config.questions_per_category

        async with self._step(run_id, WorkflowStep.PROMPTS, "Generating prompts") as run:
            categories = await self.store.get_categories(run_id)
            if not categories:
                raise WorkflowError("No categories to generate prompts for", run_id=run_id)

            if self.prompt_synthesizer is not None:
                content = await self.store.get_content(run_id)
                prompts = await self.prompt_synthesizer.synthesize(
                    categories,
                    run.user_input,
                    content.normalized_content if content else "",
                    count,
                )
            else:
                prompts = self.prompt_generator.generate_prompts(categories, run.user_input, count)

            await self.store.save_prompts(run_id, prompts)
            await self._finish_step(
                run_id, WorkflowStep.PROMPTS,
                f"Generated {len(prompts)} prompts",
            )
            return prompts

    async def save_selected_prompts(self, run_id: str, prompts: List[Prompt]) -> List[Prompt]:
        """Replace the run's prompts with a caller-edited list."""
        run = await self.store.get_run(run_id)
        self._require_step(run, WorkflowStep.PROMPTS)

        await self.store.save_prompts(run_id, prompts)
        await self._finish_step(
            run_id, WorkflowStep.PROMPTS,
            f"Selected {len(prompts)} prompts",
        )
        return list(prompts)

    async def execute_prompts(self, run_id: str) -> AnalysisBundle:
        """
        Execute prompts, score the answers and complete the run.

        Only prompts that received an answer are kept.
        """
        async with self._step(run_id, WorkflowStep.EXECUTION, "Executing prompts") as run:
            user_input = run.user_input
            prompts = await self.store.get_prompts(run_id)
            categories = await self.store.get_categories(run_id)

            responses = await self.executor.execute_prompts(prompts)
            answered_ids = {r.prompt_id for r in responses}
            answered = [p for p in prompts if p.id in answered_ids]

            await self.store.save_prompts(run_id, answered)
            await self.store.save_responses(run_id, responses)
            await self._finish_step(
                run_id, WorkflowStep.EXECUTION,
                f"Analyzing {len(responses)}/{len(prompts)} answered prompts",
                progress=ANALYSIS_PROGRESS,
            )

            engine = AnalysisEngine(
                product_name(user_input),
                website_url=user_input.normalized_website_url,
                fuzzy_threshold=self.config.brand_fuzzy_threshold,
                competitors=user_input.competitors,
            )
            analyses = engine.analyze_responses(answered, responses)
            category_metrics = engine.calculate_category_metrics(categories, answered, analyses)
            competitive = engine.perform_competitive_analysis(analyses, answered)
            summary = engine.summarize(prompts, analyses, category_metrics, responses)

            await self.store.save_analyses(run_id, analyses)
            await self.store.save_metrics(
                run_id,
                category_metrics,
                competitive,
                summary=summary,
                time_series_point=time_series_point(summary),
            )

        await self._complete(run_id)
        return await self.store.get_results(run_id)

    async def _complete(self, run_id: str):
        run = await self.store.get_run(run_id)
        ensure_transition(run.step, WorkflowStep.COMPLETED, run_id)
        await self.store.update_run_status(
            run_id,
            WorkflowStep.COMPLETED,
            STEP_PROGRESS[WorkflowStep.COMPLETED],
            "Analysis completed",
            status=RunStatus.COMPLETED,
        )
        logger.info(f"Run {run_id}: completed")

    async def run_all(self, run_id: str) -> AnalysisBundle:
        """Automatic mode: chain every step."""
        await self.find_sitemap(run_id)
        await self.fetch_content(run_id)
        await self.generate_categories(run_id)
        await self.generate_prompts(run_id)
        return await self.execute_prompts(run_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _require_content(self, run_id: str) -> WebsiteContent:
        content = await self.store.get_content(run_id)
        if content is None:
            raise WorkflowError("Content has not been fetched", run_id=run_id)
        return content

    @staticmethod
    def _require_step(run: WorkflowRun, step: WorkflowStep):
        if run.step != step:
            raise WorkflowError(
                f"Run is in step '{run.step.value}', expected '{step.value}'",
                run_id=run.id,
                step=step.value,
            )
