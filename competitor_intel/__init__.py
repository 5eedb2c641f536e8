"""
Competitor Intelligence Module

Competitive SEO analysis for a client site against a set of competitors:
- Gap scoring with impact-weighted category scores
- Benchmarks, rankings and trend forecasts against competitors and industry
- Deduplicated, prioritized recommendations
- Phased implementation strategy with resources and ROI projection

Site metrics come from an injected MetricsProvider; the crawler itself lives
outside this package.
"""

__version__ = "1.0.0"
__author__ = "WashDB Bot"

from competitor_intel.models import (
    Category,
    Priority,
    RecommendationSource,
    SiteSummary,
    Recommendation,
)
from competitor_intel.jobs.analysis_job import AnalysisJob, JobRegistry, JobStatus

__all__ = [
    "Category",
    "Priority",
    "RecommendationSource",
    "SiteSummary",
    "Recommendation",
    "AnalysisJob",
    "JobRegistry",
    "JobStatus",
]
