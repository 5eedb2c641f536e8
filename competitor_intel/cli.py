"""
Competitor Intelligence CLI

Runs a single analysis from the command line and prints a short summary.
"""

import json
from typing import Optional, List, Dict, Any

from runner.logging_setup import get_logger
from competitor_intel.config import get_job_config
from competitor_intel.jobs.analysis_job import AnalysisJob, JobStatus
from competitor_intel.services.metrics_provider import (
    HttpMetricsProvider,
    JsonDirectoryMetricsProvider,
    MetricsProvider,
)

logger = get_logger("CompetitorIntelCLI")


def build_provider(data_dir: Optional[str] = None, provider_url: Optional[str] = None) -> MetricsProvider:
    """HTTP provider when a URL is given (or configured), else the JSON directory."""
    config = get_job_config()
    if provider_url:
        return HttpMetricsProvider(provider_url, timeout=config["http_timeout"])
    if data_dir:
        return JsonDirectoryMetricsProvider(data_dir)
    if config["metrics_provider_url"]:
        return HttpMetricsProvider(config["metrics_provider_url"], timeout=config["http_timeout"])
    return JsonDirectoryMetricsProvider(config["metrics_data_dir"])


def load_history(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def run_analysis(
    client: Optional[str],
    competitors: List[str],
    keywords: Optional[List[str]] = None,
    data_dir: Optional[str] = None,
    provider_url: Optional[str] = None,
    history_file: Optional[str] = None,
    timeline_months: Optional[int] = None,
    output: Optional[str] = None,
) -> int:
    """
    Run one analysis job and report it.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    try:
        job = AnalysisJob(
            client_domain=client,
            competitor_domains=competitors,
            provider=build_provider(data_dir, provider_url),
            keywords=keywords,
            history=load_history(history_file),
            timeline_months=timeline_months,
        )
    except (ValueError, OSError) as e:
        logger.error(f"Could not start analysis: {e}")
        print(f"Error: {e}")
        return 1

    state = job.run()

    if job.status == JobStatus.FAILED:
        print(f"Analysis failed: {job.error}")
        return 1

    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2)
        logger.info(f"Wrote analysis results to {output}")

    _print_summary(job)
    return 0


def _print_summary(job: AnalysisJob):
    scores = job.gap_analysis.scores
    recommendations = job.strategy.recommendations

    print(f"\n{'='*60}")
    print("Competitor Analysis")
    print(f"{'='*60}")
    print(f"Job:         {job.id}")
    print(f"Client:      {job.client_domain or '-'}")
    print(f"Competitors: {job.progress.completed}/{job.progress.total} available")
    print(f"Overall:     {scores['overall']:.1f}")
    for category, ranking in job.benchmark_comparison.rankings.items():
        print(
            f"  {category:<12} gap score {scores[category]:5.1f}   "
            f"rank {ranking.client_rank}/{len(ranking.competitors) + 1}"
        )
    print(f"\nTop recommendations ({len(recommendations)} total):")
    for rec in recommendations[:5]:
        print(f"  [{rec.priority.value:<8}] {rec.title} ({rec.category})")
    print(f"{'='*60}\n")
