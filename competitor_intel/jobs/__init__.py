"""
Competitor Intelligence Jobs

Analysis job lifecycle and the in-process job registry.
"""

from competitor_intel.jobs.analysis_job import (
    AnalysisJob,
    JobProgress,
    JobRegistry,
    JobStatus,
    get_job_registry,
)

__all__ = [
    "AnalysisJob",
    "JobProgress",
    "JobRegistry",
    "JobStatus",
    "get_job_registry",
]
