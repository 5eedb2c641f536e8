"""
Runner support package.

Shared process-level plumbing (logging) for the competitor_intel entry points.
"""

from runner.logging_setup import (
    JobLogAdapter,
    get_job_logger,
    get_logger,
    set_log_level,
    setup_logging,
)

__all__ = [
    "JobLogAdapter",
    "get_job_logger",
    "get_logger",
    "set_log_level",
    "setup_logging",
]
