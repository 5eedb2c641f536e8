"""
Benchmark Engine

Scores the client, each competitor and the industry baseline per category:
- Category scores on a 0-100 scale (technical, content, keywords,
  performance, on-page, structure)
- Per-metric comparison (client value vs competitor mean vs industry value)
- Competitor rankings with score distribution and percentiles
- Score history with a moving-average forecast
- Benchmark-driven recommendations

The forecast is a deliberately simple extrapolation of the average change over
the last three points; it is not a statistical model.

Usage:
    from competitor_intel.services.benchmark_engine import get_benchmark_engine

    engine = get_benchmark_engine()
    comparison = engine.analyze(client, competitors, history=history)

    ranking = comparison.rankings["technical"]
    print(ranking.client_rank, len(ranking.competitors))
"""

import math
from datetime import date
from typing import Dict, Any, List, Optional, Callable
from dataclasses import dataclass, field

from runner.logging_setup import get_logger
from competitor_intel.config import (
    DEFAULT_INDUSTRY_BENCHMARKS,
    ENABLE_FORECASTING,
    FORECAST_PERIODS,
    MINIMUM_DATA_POINTS,
)
from competitor_intel.models import (
    CATEGORIES,
    Recommendation,
    RecommendationSource,
    SiteSummary,
    as_number,
)
from competitor_intel.utils import add_months, domain_from_url, parse_iso, to_iso


# =============================================================================
# SCORING TABLES (unverified tuning)
# =============================================================================

TECHNICAL_WEIGHTS = {
    "missingTitlesPercent": 0.2,
    "missingDescriptionsPercent": 0.2,
    "hasSchemaMarkupPercent": 0.2,
    "hasCanonicalPercent": 0.2,
    "hasMobileViewportPercent": 0.2,
}

CONTENT_OPTIMAL_RANGES = {
    "averageTitleLength": (50, 60),
    "averageDescriptionLength": (140, 160),
    "averageContentLength": (800, 2000),
}
CONTENT_WEIGHTS = {
    "averageTitleLength": 0.25,
    "averageDescriptionLength": 0.25,
    "averageContentLength": 0.5,
}

# Lower is better: (good, medium, poor) in milliseconds
PERFORMANCE_THRESHOLDS = {
    "domContentLoaded": (1000, 2000, 3000),
    "load": (2000, 4000, 6000),
    "firstPaint": (800, 1500, 2500),
    "firstContentfulPaint": (1000, 2000, 3000),
    "largestContentfulPaint": (2500, 4000, 6000),
}
PERFORMANCE_WEIGHTS = {
    "domContentLoaded": 0.25,
    "load": 0.25,
    "firstPaint": 0.2,
    "firstContentfulPaint": 0.15,
    "largestContentfulPaint": 0.15,
}

ON_PAGE_THRESHOLDS = {
    "imageAltTextPercent": {"min": 80, "max": 100},
    "internalLinksPerPage": {"min": 5, "max": 50},
}
ON_PAGE_WEIGHTS = {
    "imageAltTextPercent": 0.5,
    "internalLinksPerPage": 0.5,
}

STRUCTURE_DEFAULTS = {
    "averageDepth": 3,
    "categoryRatio": 0.6,
    "orphanedPagesPercent": 5,
}
STRUCTURE_THRESHOLDS = {
    "averageDepth": {"inverse": True, "min": 2, "max": 4},
    "categoryRatio": {"inverse": False, "min": 0.4, "max": 0.8},
    "orphanedPagesPercent": {"inverse": True, "min": 0, "max": 10},
}
STRUCTURE_WEIGHTS = {
    "averageDepth": 0.4,
    "categoryRatio": 0.3,
    "orphanedPagesPercent": 0.3,
}

# Recommendation triggers
UNDERPERFORMANCE_RATIO = 0.8
MISSING_ELEMENT_RATIO = 1.5
SCHEMA_DEFICIT_RATIO = 0.7
DEPTH_EXCESS_RATIO = 1.3
CATEGORY_RATIO_DEFICIT = 0.7
ORPHANED_EXCESS_RATIO = 1.5
MISSING_TITLES_FLOOR = 5
MISSING_DESCRIPTIONS_FLOOR = 10
SCHEMA_MARKUP_CEILING = 50

DISTRIBUTION_RANGES = [(0, 20), (20, 40), (40, 60), (60, 80), (80, 100)]
FORECAST_WINDOW = 3


# =============================================================================
# SCORING FUNCTIONS
# =============================================================================

def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


def _higher_is_better(value: float, threshold: Dict[str, float]) -> float:
    low, high = threshold["min"], threshold["max"]
    if value >= high:
        return 100.0
    if value >= low:
        return 50 + ((value - low) / (high - low)) * 50
    return max(0.0, (value / low) * 50)


def _lower_is_better(value: float, threshold: Dict[str, float]) -> float:
    low, high = threshold["min"], threshold["max"]
    if value <= low:
        return 100.0
    if value <= high:
        return 100 - ((value - low) / (high - low)) * 50
    return max(0.0, 50 - ((value - high) / high) * 50)


def _weighted_mean(scores: Dict[str, float], weights: Dict[str, float]) -> float:
    total = sum(score * weights[name] for name, score in scores.items())
    weight_sum = sum(weights[name] for name in scores)
    return total / weight_sum if weight_sum > 0 else 0.0


def score_technical(site: SiteSummary) -> float:
    """Weighted seoHealth percentage; missing-* metrics are inverted."""
    if site.section("seoHealth") is None:
        return 0.0
    scores = {}
    for metric in TECHNICAL_WEIGHTS:
        value = site.metric("seoHealth", metric)
        if value is None:
            continue
        scores[metric] = 100 - value if metric.startswith("missing") else value
    return _clamp(_weighted_mean(scores, TECHNICAL_WEIGHTS))


def score_content(site: SiteSummary) -> float:
    """Distance of content lengths from their optimal ranges."""
    if site.section("contentStats") is None:
        return 0.0
    scores = {}
    for metric, (low, high) in CONTENT_OPTIMAL_RANGES.items():
        value = site.metric("contentStats", metric)
        if value is None:
            continue
        if low <= value <= high:
            scores[metric] = 100.0
        elif value < low:
            scores[metric] = value / low * 100
        else:
            scores[metric] = high / value * 100
    return _clamp(_weighted_mean(scores, CONTENT_WEIGHTS))


def score_keywords(site: SiteSummary) -> float:
    """Mean keyword importance score."""
    if not site.keyword_analysis:
        return 0.0
    total = sum(as_number(data.get("importanceScore")) or 0.0
                for data in site.keyword_analysis.values())
    return _clamp(total / len(site.keyword_analysis))


def score_performance(site: SiteSummary) -> float:
    """Piecewise-linear timing score against good/medium/poor thresholds."""
    if site.section("averagePerformance") is None:
        return 0.0
    scores = {}
    for metric, (good, medium, poor) in PERFORMANCE_THRESHOLDS.items():
        value = site.metric("averagePerformance", metric)
        if value is None:
            continue
        if value <= good:
            score = 100.0
        elif value <= medium:
            score = 75 - ((value - good) / (medium - good)) * 25
        elif value <= poor:
            score = 50 - ((value - medium) / (poor - medium)) * 25
        else:
            score = max(0.0, 25 - ((value - poor) / poor) * 25)
        scores[metric] = score
    return _clamp(_weighted_mean(scores, PERFORMANCE_WEIGHTS))


def on_page_metrics(site: SiteSummary) -> Dict[str, float]:
    """Derived on-page ratios (only those computable from the document)."""
    metrics = {}

    if site.section("images") is not None:
        with_alt = site.metric("images", "withAlt") or 0.0
        total = with_alt + (site.metric("images", "withoutAlt") or 0.0)
        if total > 0:
            metrics["imageAltTextPercent"] = with_alt / total * 100

    pages = site.pages_analyzed
    internal = site.metric("links", "internal")
    external = site.metric("links", "external")
    if pages:
        if internal is not None:
            metrics["internalLinksPerPage"] = internal / pages
        if external is not None:
            metrics["externalLinksPerPage"] = external / pages

    broken = site.metric("links", "broken")
    link_total = (internal or 0.0) + (external or 0.0)
    if broken is not None and link_total > 0:
        metrics["brokenLinksPercent"] = broken / link_total * 100

    return metrics


def score_on_page(site: SiteSummary) -> float:
    """Alt-text coverage and internal link density."""
    if not site.seo:
        return 0.0
    metrics = on_page_metrics(site)
    scores = {
        name: _higher_is_better(value, ON_PAGE_THRESHOLDS[name])
        for name, value in metrics.items()
        if name in ON_PAGE_WEIGHTS
    }
    return _clamp(_weighted_mean(scores, ON_PAGE_WEIGHTS))


def score_structure(site: SiteSummary) -> float:
    """Depth, categorization and orphan rate; absent metrics use defaults."""
    total = 0.0
    for metric, default in STRUCTURE_DEFAULTS.items():
        value = site.metric("structure", metric) or default
        threshold = STRUCTURE_THRESHOLDS[metric]
        if threshold["inverse"]:
            score = _lower_is_better(value, threshold)
        else:
            score = _higher_is_better(value, threshold)
        total += score * STRUCTURE_WEIGHTS[metric]
    return _clamp(total)


CATEGORY_SCORERS: Dict[str, Callable[[SiteSummary], float]] = {
    "technical": score_technical,
    "content": score_content,
    "keywords": score_keywords,
    "performance": score_performance,
    "onPage": score_on_page,
    "structure": score_structure,
}


def category_score(category: str, site: SiteSummary) -> float:
    scorer = CATEGORY_SCORERS.get(category)
    return scorer(site) if scorer else 0.0


def _keyword_metrics(site: SiteSummary) -> Dict[str, float]:
    entries = list(site.keyword_analysis.values())
    if not entries:
        return {}

    def share(name: str) -> float:
        hits = sum(1 for entry in entries if (as_number(entry.get(name)) or 0) > 0)
        return hits / len(entries) * 100

    def mean(name: str) -> float:
        return sum(as_number(entry.get(name)) or 0.0 for entry in entries) / len(entries)

    return {
        "keywordCoverage": share("pages"),
        "averageDensity": mean("density"),
        "averageImportance": mean("importanceScore"),
        "inTitlePercent": share("inTitle"),
        "inDescriptionPercent": share("inDescription"),
        "inHeadingsPercent": share("inHeadings"),
    }


def site_metrics(category: str, site: SiteSummary) -> Dict[str, float]:
    """Raw metric values for a category, as compared in benchmarks."""
    sections = {
        "technical": "seoHealth",
        "content": "contentStats",
        "performance": "averagePerformance",
        "structure": "structure",
    }
    if category in sections:
        values = site.section(sections[category]) or {}
        return {
            name: as_number(value)
            for name, value in values.items()
            if as_number(value) is not None
        }
    if category == "keywords":
        return _keyword_metrics(site)
    if category == "onPage":
        return on_page_metrics(site)
    return {}


def percentile(sorted_scores: List[float], pct: float) -> float:
    """Nearest-rank percentile of an ascending list (0 when empty)."""
    if not sorted_scores:
        return 0.0
    index = math.ceil((pct / 100) * len(sorted_scores)) - 1
    return sorted_scores[max(0, min(len(sorted_scores) - 1, index))]


def _range_index(score: float) -> Optional[int]:
    for index, (low, high) in enumerate(DISTRIBUTION_RANGES):
        last = index == len(DISTRIBUTION_RANGES) - 1
        if low <= score < high or (last and score == high):
            return index
    return None


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class MetricBenchmark:
    """One metric compared across client, competitors and industry."""
    client_value: float
    competitor_average: Optional[float] = None
    industry_average: Optional[float] = None
    threshold: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "clientValue": round(self.client_value, 2),
            "competitorAverage": None if self.competitor_average is None else round(self.competitor_average, 2),
            "industryAverage": self.industry_average,
        }
        if self.threshold is not None:
            result["threshold"] = dict(self.threshold)
        return result


@dataclass
class CategoryBenchmark:
    """Client / competitor-average / industry score triple for a category."""
    client_score: float
    competitor_average: float
    industry_benchmark: float
    metrics: Dict[str, MetricBenchmark] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientScore": round(self.client_score, 2),
            "competitorAverage": round(self.competitor_average, 2),
            "industryBenchmark": round(self.industry_benchmark, 2),
            "metrics": {name: metric.to_dict() for name, metric in self.metrics.items()},
        }


@dataclass
class RankedCompetitor:
    name: str
    url: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url, "score": round(self.score, 2)}


@dataclass
class ScoreDistribution:
    """Competitor score histogram plus percentiles."""
    counts: List[int]
    client_position: Optional[int]
    percentiles: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ranges": [
                {"min": low, "max": high, "label": f"{low}-{high}"}
                for low, high in DISTRIBUTION_RANGES
            ],
            "counts": list(self.counts),
            "clientPosition": self.client_position,
            "percentiles": {name: round(value, 2) for name, value in self.percentiles.items()},
        }


@dataclass
class Ranking:
    """Client's ordinal position among competitors for a category."""
    client_rank: int
    client_score: float
    competitors: List[RankedCompetitor] = field(default_factory=list)
    distribution: Optional[ScoreDistribution] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientRank": self.client_rank,
            "competitors": [competitor.to_dict() for competitor in self.competitors],
            "distribution": self.distribution.to_dict() if self.distribution else None,
        }


@dataclass
class TrendPoint:
    date: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": round(self.value, 2)}


@dataclass
class TrendSeries:
    """Score history (append-only) plus a freshly computed forecast."""
    client_history: List[TrendPoint] = field(default_factory=list)
    competitor_history: List[TrendPoint] = field(default_factory=list)
    industry_history: List[TrendPoint] = field(default_factory=list)
    forecast_client: List[TrendPoint] = field(default_factory=list)
    forecast_competitor: List[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientHistory": [point.to_dict() for point in self.client_history],
            "competitorHistory": [point.to_dict() for point in self.competitor_history],
            "industryHistory": [point.to_dict() for point in self.industry_history],
            "forecastClient": [point.to_dict() for point in self.forecast_client],
            "forecastCompetitor": [point.to_dict() for point in self.forecast_competitor],
        }


@dataclass
class BenchmarkComparison:
    """Benchmarks, rankings, trends and recommendations for one client."""
    client_domain: str
    categories: List[str]
    benchmarks: Dict[str, CategoryBenchmark] = field(default_factory=dict)
    rankings: Dict[str, Ranking] = field(default_factory=dict)
    trends: Dict[str, TrendSeries] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "benchmarks": {cat: self.benchmarks[cat].to_dict() for cat in self.categories if cat in self.benchmarks},
            "rankings": {cat: self.rankings[cat].to_dict() for cat in self.categories if cat in self.rankings},
            "trends": {cat: self.trends[cat].to_dict() for cat in self.categories if cat in self.trends},
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }


def forecast_series(history: List[TrendPoint], periods: int) -> List[TrendPoint]:
    """
    Extend a series by `periods` monthly points.

    Uses the average change across the last three points. The running value
    is not clamped; each emitted value is clamped to [0, 100].
    """
    if len(history) < 2:
        return []

    window = history[-FORECAST_WINDOW:]
    total_change = sum(later.value - earlier.value for earlier, later in zip(window, window[1:]))
    average_change = total_change / (len(window) - 1)

    forecast = []
    value = history[-1].value
    current = parse_iso(history[-1].date)
    for _ in range(periods):
        value += average_change
        current = add_months(current, 1)
        forecast.append(TrendPoint(date=to_iso(current), value=_clamp(value)))
    return forecast


# =============================================================================
# RECOMMENDATION TEMPLATES
# =============================================================================

# category -> (title, label, recommendation category, closing sentence, impact)
CATEGORY_RECOMMENDATIONS = {
    "technical": (
        "Improve Technical SEO Foundation",
        "technical SEO",
        "Technical SEO",
        "Technical SEO provides the foundation for all other SEO efforts.",
        "High - Technical issues can prevent search engines from properly indexing and ranking your content.",
    ),
    "content": (
        "Strengthen Content Quality",
        "content",
        "Content",
        "Comprehensive, well-structured content is central to ranking for competitive queries.",
        "High - Content depth and relevance directly influence rankings and engagement.",
    ),
    "keywords": (
        "Improve Keyword Targeting",
        "keyword",
        "Keywords",
        "Stronger keyword targeting widens the set of searches your pages can rank for.",
        "High - Keyword targeting determines which searches your pages are eligible for.",
    ),
    "performance": (
        "Improve Site Performance",
        "performance",
        "Performance",
        "Slow pages lose visitors and are treated less favorably by search engines.",
        "High - Page speed affects rankings, user experience and conversions.",
    ),
    "onPage": (
        "Enhance On-Page SEO",
        "on-page SEO",
        "On-Page SEO",
        "On-page elements help search engines interpret the relevance of each page.",
        "Medium - Image and link optimization improve accessibility and crawlability.",
    ),
    "structure": (
        "Improve Site Structure",
        "site structure",
        "Site Structure",
        "A well-organized site structure improves user experience and helps search engines understand your content.",
        "High - Site structure affects both user experience and search engine crawling.",
    ),
}


class BenchmarkEngine:
    """
    Compares a client against competitors and an industry baseline.

    Each category is scored with its own normalization rule, then ranked,
    trended and turned into recommendations where the client trails.
    """

    def __init__(
        self,
        industry_benchmarks: Optional[Dict[str, Any]] = None,
        enable_forecasting: bool = ENABLE_FORECASTING,
        forecast_periods: int = FORECAST_PERIODS,
        minimum_data_points: int = MINIMUM_DATA_POINTS,
    ):
        self.logger = get_logger("BenchmarkEngine")

        if not industry_benchmarks:
            self.logger.warning("No industry benchmark data provided. Using default values.")
            industry_benchmarks = DEFAULT_INDUSTRY_BENCHMARKS
        self.industry_benchmarks = industry_benchmarks

        self.enable_forecasting = enable_forecasting
        self.forecast_periods = forecast_periods
        self.minimum_data_points = minimum_data_points

    def analyze(
        self,
        client: SiteSummary,
        competitors: Dict[str, SiteSummary],
        categories: Optional[List[str]] = None,
        history: Optional[Dict[str, Any]] = None,
        today: Optional[date] = None,
    ) -> BenchmarkComparison:
        """
        Benchmark the client in each category.

        Args:
            client: Client site summary
            competitors: Competitor summaries keyed by URL or domain
            categories: Subset of categories (default: all, in report order)
            history: Optional {"client"|"competitors"|"industry": {category: [points]}}
            today: Date of the current period (default: today)

        Returns:
            BenchmarkComparison
        """
        categories = [c for c in (categories or CATEGORIES) if c in CATEGORY_SCORERS]
        today = today or date.today()
        usable = {key: summary for key, summary in competitors.items() if summary.ok}

        self.logger.info(f"Starting benchmark analysis for {client.domain} ({len(usable)} competitors)")

        comparison = BenchmarkComparison(client_domain=client.domain, categories=categories)

        for category in categories:
            benchmark = self._benchmark(category, client, usable)
            comparison.benchmarks[category] = benchmark
            comparison.rankings[category] = self._ranking(category, benchmark.client_score, usable)
            comparison.trends[category] = self._trends(category, benchmark, history or {}, today)

        if client.ok:
            comparison.recommendations = self._recommendations(comparison)
        else:
            self.logger.warning(f"Client data for {client.domain or '(no client)'} has errors; skipping recommendations")

        self.logger.info(
            f"Benchmark analysis completed: {len(categories)} categories, "
            f"{len(comparison.recommendations)} recommendations"
        )
        return comparison

    def industry_overall(self, category: str) -> float:
        return as_number(self.industry_benchmarks.get(category, {}).get("overall")) or 0.0

    # =========================================================================
    # Benchmarks & rankings
    # =========================================================================

    def _benchmark(
        self,
        category: str,
        client: SiteSummary,
        competitors: Dict[str, SiteSummary],
    ) -> CategoryBenchmark:
        client_score = category_score(category, client)
        competitor_scores = [category_score(category, summary) for summary in competitors.values()]
        competitor_average = sum(competitor_scores) / len(competitor_scores) if competitor_scores else 0.0

        industry_metrics = self.industry_benchmarks.get(category, {}).get("metrics", {})
        client_values = site_metrics(category, client)
        competitor_values = [site_metrics(category, summary) for summary in competitors.values()]

        metrics = {}
        for name in industry_metrics:
            if name not in client_values:
                continue
            present = [values[name] for values in competitor_values if name in values]
            metrics[name] = MetricBenchmark(
                client_value=client_values[name],
                competitor_average=sum(present) / len(present) if present else None,
                industry_average=as_number(industry_metrics.get(name)),
                threshold=STRUCTURE_THRESHOLDS.get(name) if category == "structure" else None,
            )

        return CategoryBenchmark(
            client_score=client_score,
            competitor_average=competitor_average,
            industry_benchmark=_clamp(self.industry_overall(category)),
            metrics=metrics,
        )

    def _ranking(
        self,
        category: str,
        client_score: float,
        competitors: Dict[str, SiteSummary],
    ) -> Ranking:
        ranked = sorted(
            (
                RankedCompetitor(name=domain_from_url(key), url=key, score=category_score(category, summary))
                for key, summary in competitors.items()
            ),
            key=lambda competitor: competitor.score,
            reverse=True,
        )

        # Ties favor the client
        client_rank = 1 + sum(1 for competitor in ranked if competitor.score > client_score)

        scores = [competitor.score for competitor in ranked]
        counts = [0] * len(DISTRIBUTION_RANGES)
        for score in scores:
            index = _range_index(score)
            if index is not None:
                counts[index] += 1
        ascending = sorted(scores)

        distribution = ScoreDistribution(
            counts=counts,
            client_position=_range_index(client_score),
            percentiles={
                "p25": percentile(ascending, 25),
                "p50": percentile(ascending, 50),
                "p75": percentile(ascending, 75),
                "client": client_score,
            },
        )

        return Ranking(
            client_rank=client_rank,
            client_score=client_score,
            competitors=ranked,
            distribution=distribution,
        )

    # =========================================================================
    # Trends
    # =========================================================================

    @staticmethod
    def _history_points(history: Dict[str, Any], group: str, category: str, value_key: str) -> List[TrendPoint]:
        points = []
        for point in (history.get(group) or {}).get(category) or []:
            value = as_number(point.get(value_key))
            if point.get("date") and value is not None:
                points.append(TrendPoint(date=to_iso(parse_iso(point["date"])), value=value))
        return points

    def _trends(
        self,
        category: str,
        benchmark: CategoryBenchmark,
        history: Dict[str, Any],
        today: date,
    ) -> TrendSeries:
        current = to_iso(today)

        client_history = self._history_points(history, "client", category, "score")
        client_history.append(TrendPoint(current, benchmark.client_score))

        competitor_history = self._history_points(history, "competitors", category, "averageScore")
        competitor_history.append(TrendPoint(current, benchmark.competitor_average))

        industry_history = self._history_points(history, "industry", category, "score")
        industry_history.append(TrendPoint(current, self.industry_overall(category)))

        series = TrendSeries(
            client_history=client_history,
            competitor_history=competitor_history,
            industry_history=industry_history,
        )

        if self.enable_forecasting and len(client_history) >= self.minimum_data_points:
            series.forecast_client = forecast_series(client_history, self.forecast_periods)
            series.forecast_competitor = forecast_series(competitor_history, self.forecast_periods)

        return series

    # =========================================================================
    # Recommendations
    # =========================================================================

    def _recommendations(self, comparison: BenchmarkComparison) -> List[Recommendation]:
        recommendations = []

        for category in comparison.categories:
            benchmark = comparison.benchmarks.get(category)
            if benchmark is None:
                continue

            category_rec = self._category_recommendation(category, benchmark)
            if category_rec:
                recommendations.append(category_rec)

            if category == "technical":
                recommendations.extend(self._technical_recommendations(benchmark))
            elif category == "structure":
                recommendations.extend(self._structure_recommendations(benchmark))

        self.logger.info(f"Generated {len(recommendations)} benchmark recommendations")
        return recommendations

    def _category_recommendation(self, category: str, benchmark: CategoryBenchmark) -> Optional[Recommendation]:
        client = benchmark.client_score
        behind_competitors = client < benchmark.competitor_average * UNDERPERFORMANCE_RATIO
        behind_industry = client < benchmark.industry_benchmark * UNDERPERFORMANCE_RATIO
        if not (behind_competitors or behind_industry):
            return None

        title, label, rec_category, closing, impact = CATEGORY_RECOMMENDATIONS[category]
        if behind_competitors:
            reference = f"competitors ({benchmark.competitor_average:.1f})"
        else:
            reference = f"industry benchmark ({benchmark.industry_benchmark:.1f})"

        return Recommendation(
            title=title,
            description=f"Your {label} score ({client:.1f}) is significantly below {reference}. {closing}",
            category=rec_category,
            source=RecommendationSource.BENCHMARK_COMPARISON,
            impact=impact,
        )

    @staticmethod
    def _reference(metric: MetricBenchmark):
        """Best available comparison value and its label."""
        if metric.competitor_average is not None:
            return metric.competitor_average, "competitors"
        return metric.industry_average, "industry benchmark"

    def _technical_recommendations(self, benchmark: CategoryBenchmark) -> List[Recommendation]:
        recommendations = []
        metrics = benchmark.metrics

        metric = metrics.get("missingTitlesPercent")
        if metric:
            reference, name = self._reference(metric)
            value = metric.client_value
            if reference is not None and value > reference * MISSING_ELEMENT_RATIO and value > MISSING_TITLES_FLOOR:
                recommendations.append(Recommendation(
                    title="Optimize Page Titles",
                    description=(
                        f"{value:.1f}% of your pages are missing title tags, compared to {reference:.1f}% "
                        f"for {name}. Title tags are critical for SEO and user experience."
                    ),
                    category="Technical SEO",
                    source=RecommendationSource.BENCHMARK_COMPARISON,
                    impact="High - Title tags are one of the most important on-page SEO elements.",
                    actions=[
                        "Audit all pages to identify those missing title tags",
                        "Create unique, descriptive titles for each page",
                        "Keep titles under 60 characters to avoid truncation in search results",
                        "Include primary keywords in title tags",
                        "Implement a template system for automatically generating titles for new content",
                    ],
                ))

        metric = metrics.get("missingDescriptionsPercent")
        if metric:
            reference, name = self._reference(metric)
            value = metric.client_value
            if (reference is not None and value > reference * MISSING_ELEMENT_RATIO
                    and value > MISSING_DESCRIPTIONS_FLOOR):
                recommendations.append(Recommendation(
                    title="Add Meta Descriptions",
                    description=(
                        f"{value:.1f}% of your pages are missing meta descriptions, compared to "
                        f"{reference:.1f}% for {name}. Meta descriptions improve click-through rates "
                        f"from search results."
                    ),
                    category="Technical SEO",
                    source=RecommendationSource.BENCHMARK_COMPARISON,
                    impact="Medium - Meta descriptions influence click-through rates from search results.",
                    actions=[
                        "Audit pages to identify those missing meta descriptions",
                        "Write compelling descriptions that encourage clicks",
                        "Keep descriptions between 120-158 characters",
                        "Include relevant keywords naturally",
                        "Make each description unique and relevant to the page content",
                    ],
                ))

        metric = metrics.get("hasSchemaMarkupPercent")
        if metric:
            reference, name = self._reference(metric)
            value = metric.client_value
            if reference is not None and value < reference * SCHEMA_DEFICIT_RATIO and value < SCHEMA_MARKUP_CEILING:
                recommendations.append(Recommendation(
                    title="Implement Schema Markup",
                    description=(
                        f"Only {value:.1f}% of your pages use schema markup, compared to {reference:.1f}% "
                        f"for {name}. Schema markup helps search engines understand your content and "
                        f"can enable rich snippets."
                    ),
                    category="Technical SEO",
                    source=RecommendationSource.BENCHMARK_COMPARISON,
                    impact="Medium - Schema markup enhances search visibility and enables rich results.",
                    actions=[
                        "Identify key page types for schema implementation (products, articles, events, etc.)",
                        "Implement appropriate schema.org markup for each page type",
                        "Test markup with Google's Structured Data Testing Tool",
                        "Prioritize markup that enables rich snippets in search results",
                        "Consider implementing JSON-LD format for easier maintenance",
                    ],
                ))

        return recommendations

    def _structure_recommendations(self, benchmark: CategoryBenchmark) -> List[Recommendation]:
        recommendations = []

        for name, metric in benchmark.metrics.items():
            reference, reference_name = self._reference(metric)
            threshold = metric.threshold
            if reference is None or threshold is None:
                continue
            value = metric.client_value

            if name == "averageDepth":
                if value > reference * DEPTH_EXCESS_RATIO and value > threshold["min"]:
                    recommendations.append(Recommendation(
                        title="Flatten Site Architecture",
                        description=(
                            f"Your site has an average depth of {value:.1f} levels, compared to "
                            f"{reference:.1f} for {reference_name}. Deep site architectures make it harder "
                            f"for users and search engines to find important content."
                        ),
                        category="Site Structure",
                        source=RecommendationSource.BENCHMARK_COMPARISON,
                        impact="High - Flatter site structures improve crawling and user navigation.",
                        actions=[
                            "Ensure important pages are no more than 3 clicks from the homepage",
                            "Restructure navigation to reduce depth",
                            "Implement a clear hierarchy with categories and subcategories",
                            "Add breadcrumb navigation for deeper pages",
                            "Create hub pages that link to related content",
                            "Implement an HTML sitemap for users and XML sitemap for search engines",
                        ],
                    ))
            elif name == "categoryRatio":
                if value < reference * CATEGORY_RATIO_DEFICIT and value < threshold["min"]:
                    recommendations.append(Recommendation(
                        title="Improve Content Organization",
                        description=(
                            f"Your site's category ratio is {value:.2f}, compared to {reference:.2f} for "
                            f"{reference_name}. This indicates that your content may not be well-organized "
                            f"into logical categories."
                        ),
                        category="Site Structure",
                        source=RecommendationSource.BENCHMARK_COMPARISON,
                        impact="Medium - Logical content organization improves user experience and SEO.",
                        actions=[
                            "Create a clear content hierarchy with well-defined categories",
                            "Organize similar content together in topic clusters",
                            "Implement proper URL structure that reflects content hierarchy",
                            "Use breadcrumbs to show content relationships",
                            "Ensure navigation reflects your content structure",
                        ],
                    ))
            elif name == "orphanedPagesPercent":
                if value > reference * ORPHANED_EXCESS_RATIO and value > threshold["min"]:
                    recommendations.append(Recommendation(
                        title="Fix Orphaned Pages",
                        description=(
                            f"{value:.1f}% of your pages are orphaned (not linked from other pages), compared "
                            f"to {reference:.1f}% for {reference_name}. Orphaned pages are difficult for users "
                            f"and search engines to discover."
                        ),
                        category="Site Structure",
                        source=RecommendationSource.BENCHMARK_COMPARISON,
                        impact="Medium - Orphaned pages may not be crawled or found by users.",
                        actions=[
                            "Identify all orphaned pages with a site audit",
                            "Add internal links to orphaned pages from relevant content",
                            "Create section or category pages that link to related content",
                            "Include orphaned but valuable pages in your sitemap",
                            "Consider removing or redirecting low-value orphaned pages",
                        ],
                    ))

        return recommendations


# Module-level singleton
_benchmark_engine_instance = None


def get_benchmark_engine() -> BenchmarkEngine:
    """Get or create the singleton BenchmarkEngine instance."""
    global _benchmark_engine_instance
    if _benchmark_engine_instance is None:
        _benchmark_engine_instance = BenchmarkEngine()
    return _benchmark_engine_instance
