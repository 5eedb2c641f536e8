"""
Competitor Analysis Job

Drives one analysis end to end:
- Fetches client and competitor summaries from a MetricsProvider
- Runs gap scoring and benchmarking
- Merges recommendations and plans the strategy
- Tracks status/progress and records failures without raising

Status lifecycle:
    initializing -> crawling -> analyzing -> generating_reports -> completed
    (any stage) -> failed

Usage:
    from competitor_intel.jobs.analysis_job import AnalysisJob
    from competitor_intel.services.metrics_provider import JsonDirectoryMetricsProvider

    job = AnalysisJob(
        client_domain="example.com",
        competitor_domains=["a.com", "b.com"],
        provider=JsonDirectoryMetricsProvider("data/competitor_intel"),
    )
    job.run()
    print(job.status, job.results.keys())
"""

import json
import threading
import uuid
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from runner.logging_setup import get_job_logger
from competitor_intel.config import get_job_config
from competitor_intel.models import SiteSummary
from competitor_intel.services.benchmark_engine import BenchmarkEngine, BenchmarkComparison
from competitor_intel.services.gap_scorer import GapScorer, GapAnalysis
from competitor_intel.services.metrics_provider import MetricsProvider, collect_site_summaries
from competitor_intel.services.recommendation_merger import RecommendationMerger
from competitor_intel.services.strategy_planner import StrategyPlanner, Strategy


class JobStatus(Enum):
    INITIALIZING = "initializing"
    CRAWLING = "crawling"
    ANALYZING = "analyzing"
    GENERATING_REPORTS = "generating_reports"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class JobProgress:
    """Competitor fetch progress."""
    total: int
    completed: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "completed": self.completed, "failed": self.failed}


def _generate_job_id() -> str:
    return uuid.uuid4().hex


class AnalysisJob:
    """
    One competitor analysis run.

    The job owns its whole object graph; nothing is shared between jobs.
    run() never raises for a component failure: the job is marked failed
    and partial results are discarded.
    """

    def __init__(
        self,
        client_domain: Optional[str],
        competitor_domains: List[str],
        provider: MetricsProvider,
        keywords: Optional[List[str]] = None,
        history: Optional[Dict[str, Any]] = None,
        timeline_months: Optional[int] = None,
        industry_benchmarks: Optional[Dict[str, Any]] = None,
        start_date: Optional[date] = None,
        reports_dir: Optional[str] = None,
        job_id: Optional[str] = None,
    ):
        if not competitor_domains:
            raise ValueError("At least one competitor URL must be provided")

        self.id = job_id or _generate_job_id()
        self.logger = get_job_logger(self.id)
        if not client_domain:
            self.logger.warning("No client domain provided; analysis will run without client data")

        self.client_domain = client_domain
        self.competitor_domains = list(competitor_domains)
        self.provider = provider
        self.keywords = list(keywords or [])
        self.history = history or {}
        self.start_date = start_date
        self.reports_dir = Path(reports_dir) if reports_dir else None

        self.config = get_job_config()
        if timeline_months is not None:
            self.config["timeline_months"] = timeline_months

        self.gap_scorer = GapScorer()
        self.benchmark_engine = BenchmarkEngine(
            industry_benchmarks=industry_benchmarks,
            enable_forecasting=self.config["enable_forecasting"],
            forecast_periods=self.config["forecast_periods"],
            minimum_data_points=self.config["minimum_data_points"],
        )
        self.merger = RecommendationMerger()
        self.planner = StrategyPlanner(
            timeline_months=self.config["timeline_months"],
            enable_roi_projection=self.config["enable_roi_projection"],
        )

        self.status = JobStatus.INITIALIZING
        self.progress = JobProgress(total=len(self.competitor_domains))
        self.start_time = datetime.now()
        self.end_time: Optional[datetime] = None
        self.error: Optional[str] = None

        self.gap_analysis: Optional[GapAnalysis] = None
        self.benchmark_comparison: Optional[BenchmarkComparison] = None
        self.strategy: Optional[Strategy] = None
        self.results: Dict[str, Any] = {}

    def run(self) -> Dict[str, Any]:
        """
        Execute the analysis.

        Returns:
            Job state dict (see to_dict)
        """
        self.logger.info(
            f"Starting analysis for {self.client_domain or '(no client)'} "
            f"with {len(self.competitor_domains)} competitors"
        )

        try:
            self.status = JobStatus.CRAWLING
            client, competitors = collect_site_summaries(self.provider, self.client_domain, self.competitor_domains)
            if client is None:
                client = SiteSummary.failed("", "No client domain provided")

            for domain, summary in competitors.items():
                if summary.ok:
                    self.progress.completed += 1
                else:
                    self.progress.failed += 1
                    self.logger.warning(f"Competitor {domain} unavailable: {summary.error}")

            self.status = JobStatus.ANALYZING
            today = self.start_date or date.today()
            gap_analysis = self.gap_scorer.analyze(client, competitors, keywords=self.keywords)
            comparison = self.benchmark_engine.analyze(client, competitors, history=self.history, today=today)

            self.status = JobStatus.GENERATING_REPORTS
            recommendations = self.merger.build(gap_analysis.opportunities, comparison.recommendations)
            strategy = self.planner.plan(recommendations, start_date=today)

            results = {
                "gapAnalysis": gap_analysis.to_dict(),
                "benchmarks": comparison.to_dict(),
                "strategy": strategy.to_dict(),
            }
            if self.reports_dir:
                self._save_report(results)

            self.gap_analysis = gap_analysis
            self.benchmark_comparison = comparison
            self.strategy = strategy
            self.results = results
            self.status = JobStatus.COMPLETED
            self.logger.info(
                f"Analysis completed: {self.progress.completed}/{self.progress.total} "
                f"competitors, {len(recommendations)} recommendations"
            )

        except Exception as e:
            self.status = JobStatus.FAILED
            self.error = str(e)
            self.results = {}
            self.logger.error(f"Analysis failed: {e}")

        finally:
            self.end_time = datetime.now()

        return self.to_dict()

    def _save_report(self, results: Dict[str, Any]):
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        path = self.reports_dir / f"{self.id}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2)
        self.logger.info(f"Saved analysis report to {path}")

    @property
    def completed(self) -> bool:
        return self.status == JobStatus.COMPLETED

    def status_dict(self) -> Dict[str, Any]:
        """Job state without results."""
        return {
            "id": self.id,
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "error": self.error,
        }

    def to_dict(self) -> Dict[str, Any]:
        result = self.status_dict()
        result["results"] = self.results
        return result


class JobRegistry:
    """In-process registry of analysis jobs, keyed by job id."""

    def __init__(self):
        self._jobs: Dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def submit(self, job: AnalysisJob) -> str:
        with self._lock:
            self._jobs[job.id] = job
        return job.id

    def create_job(self, *args, **kwargs) -> str:
        """Create and register a job; arguments are passed to AnalysisJob."""
        return self.submit(AnalysisJob(*args, **kwargs))

    def run_job(self, job_id: str) -> Dict[str, Any]:
        return self._get(job_id).run()

    def get_status(self, job_id: str) -> Dict[str, Any]:
        return self._get(job_id).status_dict()

    def get_results(self, job_id: str) -> Dict[str, Any]:
        job = self._get(job_id)
        if not job.completed:
            raise RuntimeError(f"Analysis job {job_id} is not completed (status: {job.status.value})")
        return job.results

    def _get(self, job_id: str) -> AnalysisJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise KeyError(f"Analysis job not found: {job_id}")
        return job


# Module-level singleton
_job_registry_instance = None


def get_job_registry() -> JobRegistry:
    """Get or create the singleton JobRegistry instance."""
    global _job_registry_instance
    if _job_registry_instance is None:
        _job_registry_instance = JobRegistry()
    return _job_registry_instance
