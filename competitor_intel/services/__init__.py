"""
Competitor Intelligence Services

Analysis components for competitive SEO:
- Gap scoring
- Benchmarking, rankings and trend forecasts
- Recommendation merging
- Strategy planning
- Metrics providers
"""

from competitor_intel.services.gap_scorer import (
    GapScorer,
    GapAnalysis,
    calculate_impact_score,
    get_gap_scorer,
)
from competitor_intel.services.benchmark_engine import (
    BenchmarkEngine,
    BenchmarkComparison,
    CategoryBenchmark,
    Ranking,
    TrendSeries,
    get_benchmark_engine,
)
from competitor_intel.services.recommendation_merger import (
    RecommendationMerger,
    normalize_title,
    levenshtein_ratio,
    get_recommendation_merger,
)
from competitor_intel.services.strategy_planner import (
    StrategyPlanner,
    Strategy,
    get_strategy_planner,
)
from competitor_intel.services.metrics_provider import (
    MetricsProvider,
    StaticMetricsProvider,
    JsonDirectoryMetricsProvider,
    HttpMetricsProvider,
    collect_site_summaries,
)

__all__ = [
    # Gap scoring
    "GapScorer",
    "GapAnalysis",
    "calculate_impact_score",
    "get_gap_scorer",
    # Benchmarks
    "BenchmarkEngine",
    "BenchmarkComparison",
    "CategoryBenchmark",
    "Ranking",
    "TrendSeries",
    "get_benchmark_engine",
    # Recommendations
    "RecommendationMerger",
    "normalize_title",
    "levenshtein_ratio",
    "get_recommendation_merger",
    # Strategy
    "StrategyPlanner",
    "Strategy",
    "get_strategy_planner",
    # Metrics providers
    "MetricsProvider",
    "StaticMetricsProvider",
    "JsonDirectoryMetricsProvider",
    "HttpMetricsProvider",
    "collect_site_summaries",
]
