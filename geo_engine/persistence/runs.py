"""
Run Storage

Persists workflow runs and the artifacts each step produces. The
workflow only talks to the RunStore interface; InMemoryRunStore keeps
everything in process, JsonFileRunStore additionally writes the status
record and the final results of every run to disk.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from geo_engine.errors import RunNotFoundError
from geo_engine.models import (
    AnalysisBundle,
    AnalysisSummary,
    Category,
    CategoryMetrics,
    CompetitiveAnalysis,
    LLMResponse,
    Prompt,
    PromptAnalysis,
    RunStatus,
    TimeSeriesPoint,
    UserInput,
    WebsiteContent,
    WorkflowRun,
    WorkflowStep,
)

logger = logging.getLogger(__name__)


class RunStore(ABC):
    """Storage capability consumed by the workflow engine."""

    @abstractmethod
    async def create_run(self, user_input: UserInput) -> WorkflowRun:
        pass

    @abstractmethod
    async def get_run(self, run_id: str) -> WorkflowRun:
        """Raises RunNotFoundError for unknown ids."""
        pass

    @abstractmethod
    async def update_run_status(
        self,
        run_id: str,
        step: WorkflowStep,
        progress: int,
        message: str,
        status: Optional[RunStatus] = None,
        error: Optional[str] = None,
    ) -> WorkflowRun:
        pass

    @abstractmethod
    async def save_sitemap_urls(self, run_id: str, urls: List[str]):
        pass

    @abstractmethod
    async def get_sitemap_urls(self, run_id: str) -> List[str]:
        pass

    @abstractmethod
    async def save_content(self, run_id: str, content: WebsiteContent):
        pass

    @abstractmethod
    async def get_content(self, run_id: str) -> Optional[WebsiteContent]:
        pass

    @abstractmethod
    async def save_categories(self, run_id: str, categories: List[Category]):
        pass

    @abstractmethod
    async def get_categories(self, run_id: str) -> List[Category]:
        pass

    @abstractmethod
    async def save_prompts(self, run_id: str, prompts: List[Prompt]):
        pass

    @abstractmethod
    async def get_prompts(self, run_id: str) -> List[Prompt]:
        pass

    @abstractmethod
    async def save_responses(self, run_id: str, responses: List[LLMResponse]):
        pass

    @abstractmethod
    async def save_analyses(self, run_id: str, analyses: List[PromptAnalysis]):
        pass

    @abstractmethod
    async def save_metrics(
        self,
        run_id: str,
        category_metrics: List[CategoryMetrics],
        competitive_analysis: CompetitiveAnalysis,
        summary: Optional[AnalysisSummary] = None,
        time_series_point: Optional[TimeSeriesPoint] = None,
    ):
        pass

    @abstractmethod
    async def get_results(self, run_id: str) -> AnalysisBundle:
        pass


@dataclass
class RunRecord:
    """Everything stored for one run."""
    run: WorkflowRun
    sitemap_urls: List[str] = field(default_factory=list)
    content: Optional[WebsiteContent] = None
    categories: List[Category] = field(default_factory=list)
    prompts: List[Prompt] = field(default_factory=list)
    responses: List[LLMResponse] = field(default_factory=list)
    analyses: List[PromptAnalysis] = field(default_factory=list)
    category_metrics: List[CategoryMetrics] = field(default_factory=list)
    competitive_analysis: Optional[CompetitiveAnalysis] = None
    summary: Optional[AnalysisSummary] = None
    time_series: List[TimeSeriesPoint] = field(default_factory=list)


class InMemoryRunStore(RunStore):
    """Run storage held in process memory, keyed by run id."""

    def __init__(self):
        self._records: Dict[str, RunRecord] = {}

    def _record(self, run_id: str) -> RunRecord:
        record = self._records.get(run_id)
        if record is None:
            raise RunNotFoundError(run_id)
        return record

    def _persist(self, record: RunRecord):
        """Hook for write-through subclasses."""

    async def create_run(self, user_input: UserInput) -> WorkflowRun:
        run = WorkflowRun(
            id=f"run_{uuid.uuid4().hex[:16]}",
            user_input=user_input,
            message="Run created",
        )
        record = RunRecord(run=run)
        self._records[run.id] = record
        self._persist(record)
        logger.info(f"Created run {run.id} for {user_input.website_url}")
        return run

    async def get_run(self, run_id: str) -> WorkflowRun:
        return self._record(run_id).run

    async def update_run_status(
        self,
        run_id: str,
        step: WorkflowStep,
        progress: int,
        message: str,
        status: Optional[RunStatus] = None,
        error: Optional[str] = None,
    ) -> WorkflowRun:
        record = self._record(run_id)
        run = record.run
        run.step = step
        run.progress = max(0, min(100, int(progress)))
        run.message = message
        if status is not None:
            run.status = status
        if error is not None:
            run.error = error
        run.updated_at = datetime.now()
        self._persist(record)
        logger.debug(f"Run {run_id}: {step.value} {run.progress}% - {message}")
        return run

    async def save_sitemap_urls(self, run_id: str, urls: List[str]):
        self._record(run_id).sitemap_urls = list(urls)

    async def get_sitemap_urls(self, run_id: str) -> List[str]:
        return list(self._record(run_id).sitemap_urls)

    async def save_content(self, run_id: str, content: WebsiteContent):
        self._record(run_id).content = content

    async def get_content(self, run_id: str) -> Optional[WebsiteContent]:
        return self._record(run_id).content

    async def save_categories(self, run_id: str, categories: List[Category]):
        self._record(run_id).categories = list(categories)

    async def get_categories(self, run_id: str) -> List[Category]:
        return list(self._record(run_id).categories)

    async def save_prompts(self, run_id: str, prompts: List[Prompt]):
        self._record(run_id).prompts = list(prompts)

    async def get_prompts(self, run_id: str) -> List[Prompt]:
        return list(self._record(run_id).prompts)

    async def save_responses(self, run_id: str, responses: List[LLMResponse]):
        self._record(run_id).responses = list(responses)

    async def save_analyses(self, run_id: str, analyses: List[PromptAnalysis]):
        self._record(run_id).analyses = list(analyses)

    async def save_metrics(
        self,
        run_id: str,
        category_metrics: List[CategoryMetrics],
        competitive_analysis: CompetitiveAnalysis,
        summary: Optional[AnalysisSummary] = None,
        time_series_point: Optional[TimeSeriesPoint] = None,
    ):
        record = self._record(run_id)
        record.category_metrics = list(category_metrics)
        record.competitive_analysis = competitive_analysis
        record.summary = summary
        if time_series_point is not None:
            record.time_series.append(time_series_point)
        self._persist(record)

    async def get_results(self, run_id: str) -> AnalysisBundle:
        record = self._record(run_id)
        return AnalysisBundle(
            run_id=run_id,
            categories=list(record.categories),
            prompts=list(record.prompts),
            responses=list(record.responses),
            analyses=list(record.analyses),
            category_metrics=list(record.category_metrics),
            competitive_analysis=record.competitive_analysis,
            summary=record.summary,
            time_series=list(record.time_series),
        )


class JsonFileRunStore(InMemoryRunStore):
    """
    In-memory run storage that writes through to JSON files.

    {run_id}.json holds the status record, {run_id}.results.json the
    results once metrics are saved. Runs from earlier processes can be
    polled by id and their results reloaded; other intermediate
    artifacts (sitemap URLs, content) are not.
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        Args:
            storage_path: Directory for run files.
                          Defaults to ~/.geo_engine/runs/
        """
        super().__init__()
        if storage_path is None:
            storage_path = str(Path.home() / ".geo_engine" / "runs")
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _run_path(self, run_id: str) -> Path:
        return self.storage_path / f"{run_id}.json"

    def _results_path(self, run_id: str) -> Path:
        return self.storage_path / f"{run_id}.results.json"

    def _persist(self, record: RunRecord):
        run = record.run
        try:
            with open(self._run_path(run.id), "w") as f:
                json.dump(run.to_dict(), f, indent=2)

            if record.competitive_analysis is not None:
                bundle = AnalysisBundle(
                    run_id=run.id,
                    categories=record.categories,
                    prompts=record.prompts,
                    responses=record.responses,
                    analyses=record.analyses,
                    category_metrics=record.category_metrics,
                    competitive_analysis=record.competitive_analysis,
                    summary=record.summary,
                    time_series=record.time_series,
                )
                with open(self._results_path(run.id), "w") as f:
                    json.dump(bundle.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save run {run.id}: {e}")

    async def get_run(self, run_id: str) -> WorkflowRun:
        if run_id in self._records:
            return self._records[run_id].run

        path = self._run_path(run_id)
        if not path.exists():
            raise RunNotFoundError(run_id)

        with open(path, "r") as f:
            run = WorkflowRun.from_dict(json.load(f))
        self._records[run_id] = RunRecord(run=run)
        return run

    async def get_results(self, run_id: str) -> AnalysisBundle:
        await self.get_run(run_id)
        record = self._records[run_id]
        if record.competitive_analysis is not None:
            return await super().get_results(run_id)

        path = self._results_path(run_id)
        if not path.exists():
            return await super().get_results(run_id)

        with open(path, "r") as f:
            bundle = AnalysisBundle.from_dict(json.load(f))

        record.categories = bundle.categories
        record.prompts = bundle.prompts
        record.responses = bundle.responses
        record.analyses = bundle.analyses
        record.category_metrics = bundle.category_metrics
        record.competitive_analysis = bundle.competitive_analysis
        record.summary = bundle.summary
        record.time_series = bundle.time_series
        logger.debug(f"Loaded results for run {run_id} from {path}")
        return await super().get_results(run_id)
