"""
Competitor Intelligence Configuration

Defines runtime settings and calibration tables for competitor analysis:
- Planning horizon and forecasting options
- Metrics provider endpoints
- Score weights, priority thresholds and industry baselines
- Implementation phase layout

Numeric calibrations below came with the analysis model without a documented
derivation. They are unverified tuning: keep them as-is unless re-calibrated.
"""

from typing import Dict, Any
import os

from dotenv import load_dotenv


load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# PLANNING & FORECASTING
# =============================================================================

TIMELINE_MONTHS = int(os.getenv("COMPETITOR_TIMELINE_MONTHS", "6"))
FORECAST_PERIODS = int(os.getenv("COMPETITOR_FORECAST_PERIODS", "3"))
MINIMUM_DATA_POINTS = int(os.getenv("COMPETITOR_MIN_DATA_POINTS", "3"))
ENABLE_FORECASTING = _env_flag("COMPETITOR_ENABLE_FORECASTING", "true")
ENABLE_ROI_PROJECTION = _env_flag("COMPETITOR_ENABLE_ROI", "true")


# =============================================================================
# METRICS PROVIDER
# =============================================================================

METRICS_PROVIDER_URL = os.getenv("COMPETITOR_METRICS_URL", "")
METRICS_DATA_DIR = os.getenv("COMPETITOR_DATA_DIR", "data/competitor_intel")
HTTP_TIMEOUT = int(os.getenv("COMPETITOR_HTTP_TIMEOUT", "30"))


# =============================================================================
# SCORING (unverified tuning)
# =============================================================================

# Overall gap score weights per category (sum to 1.0)
CATEGORY_WEIGHTS = {
    "technical": 0.20,
    "content": 0.25,
    "keywords": 0.20,
    "performance": 0.15,
    "onPage": 0.10,
    "structure": 0.10,
}

# impactScore -> priority
PRIORITY_THRESHOLDS = {
    "critical": 4.5,
    "high": 3.5,
    "medium": 2.5,
}

# Impact score treated as a critical gap
CRITICAL_GAP_THRESHOLD = 4.0


# =============================================================================
# INDUSTRY BENCHMARKS (unverified tuning)
# =============================================================================

DEFAULT_INDUSTRY_BENCHMARKS = {
    "technical": {
        "overall": 70,
        "metrics": {
            "missingTitlesPercent": 5,
            "missingDescriptionsPercent": 10,
            "hasSchemaMarkupPercent": 60,
            "hasCanonicalPercent": 80,
            "hasMobileViewportPercent": 95,
        },
    },
    "content": {
        "overall": 70,
        "metrics": {
            "averageTitleLength": 55,
            "averageDescriptionLength": 150,
            "averageContentLength": 1500,
        },
    },
    "keywords": {
        "overall": 70,
        "metrics": {
            "keywordCoverage": 80,
            "averageDensity": 2.5,
            "averageImportance": 70,
            "inTitlePercent": 80,
            "inDescriptionPercent": 70,
            "inHeadingsPercent": 60,
        },
    },
    "performance": {
        "overall": 70,
        "metrics": {
            "domContentLoaded": 1000,
            "load": 2500,
            "firstPaint": 800,
            "firstContentfulPaint": 1000,
            "largestContentfulPaint": 2500,
        },
    },
    "onPage": {
        "overall": 70,
        "metrics": {
            "imageAltTextPercent": 90,
            "internalLinksPerPage": 15,
            "externalLinksPerPage": 3,
            "brokenLinksPercent": 1,
        },
    },
    "structure": {
        "overall": 70,
        "metrics": {
            "averageDepth": 3,
            "categoryRatio": 0.6,
            "orphanedPagesPercent": 5,
        },
    },
}


# =============================================================================
# IMPLEMENTATION PLAN (unverified tuning)
# =============================================================================

PHASES = [
    {
        "name": "Phase 1: Quick Wins",
        "duration_months": 1,
        "max_tasks": 5,
        "priorities": ["critical", "high"],
    },
    {
        "name": "Phase 2: Core Improvements",
        "duration_months": 2,
        "max_tasks": 8,
        "priorities": ["high", "medium"],
    },
    {
        "name": "Phase 3: Advanced Optimization",
        "duration_months": 3,
        "max_tasks": 12,
        "priorities": ["medium", "low"],
    },
]

RESOURCE_CATEGORIES = ["time", "technical", "content", "cost"]


# =============================================================================
# LOGGING
# =============================================================================

LOG_DIR = os.getenv("COMPETITOR_LOG_DIR", "logs/competitor_intel")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_job_config() -> Dict[str, Any]:
    """Get the effective runtime settings for an analysis job."""
    return {
        "timeline_months": TIMELINE_MONTHS,
        "forecast_periods": FORECAST_PERIODS,
        "minimum_data_points": MINIMUM_DATA_POINTS,
        "enable_forecasting": ENABLE_FORECASTING,
        "enable_roi_projection": ENABLE_ROI_PROJECTION,
        "metrics_provider_url": METRICS_PROVIDER_URL or None,
        "metrics_data_dir": METRICS_DATA_DIR,
        "http_timeout": HTTP_TIMEOUT,
    }
