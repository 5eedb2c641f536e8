"""
Benchmark Engine Tests

Covers category scoring, rankings, distributions, trend forecasting and
benchmark recommendations.

Run with: python3 -m pytest tests/unit/test_benchmark_engine.py -v
"""

from datetime import date

import pytest

from competitor_intel.config import DEFAULT_INDUSTRY_BENCHMARKS
from competitor_intel.models import CATEGORIES, RecommendationSource, SiteSummary
from competitor_intel.services.benchmark_engine import (
    BenchmarkEngine,
    TrendPoint,
    forecast_series,
    percentile,
    score_content,
    score_performance,
    score_structure,
    score_technical,
)


TODAY = date(2026, 10, 1)


@pytest.fixture
def engine():
    return BenchmarkEngine(industry_benchmarks=DEFAULT_INDUSTRY_BENCHMARKS)


class TestCategoryScoring:
    """Test per-category 0-100 scoring functions."""

    def test_technical_inverts_missing_metrics(self, client_summary):
        # (80 + 70 + 10 + 50 + 90) / 5
        assert score_technical(client_summary) == pytest.approx(60.0)

    def test_technical_without_data(self):
        assert score_technical(SiteSummary(domain="empty.com")) == 0.0

    def test_content_in_optimal_ranges(self, make_summary):
        site = make_summary("x.com", contentStats={
            "averageTitleLength": 55,
            "averageDescriptionLength": 150,
            "averageContentLength": 1500,
        })
        assert score_content(site) == pytest.approx(100.0)

    def test_content_outside_ranges(self, client_summary):
        expected = 0.25 * 50 + 0.25 * (90 / 140 * 100) + 0.5 * 50
        assert score_content(client_summary) == pytest.approx(expected)

    def test_performance_piecewise(self, make_summary):
        fast = make_summary("x.com", averagePerformance={"load": 2000})
        medium = make_summary("y.com", averagePerformance={"load": 3000})
        assert score_performance(fast) == pytest.approx(100.0)
        assert score_performance(medium) == pytest.approx(62.5)

    def test_structure_defaults(self):
        assert score_structure(SiteSummary(domain="empty.com")) == pytest.approx(75.0)

    def test_structure_scores(self, client_summary):
        assert score_structure(client_summary) == pytest.approx(36.25)

    def test_scores_are_bounded(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)
        for benchmark in comparison.benchmarks.values():
            assert 0 <= benchmark.client_score <= 100
            assert 0 <= benchmark.competitor_average <= 100
            assert 0 <= benchmark.industry_benchmark <= 100


class TestBenchmarks:
    """Test per-category benchmark triples and metric comparison."""

    def test_category_order(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)
        assert list(comparison.to_dict()["benchmarks"]) == CATEGORIES

    def test_technical_benchmark(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        technical = comparison.benchmarks["technical"]
        assert technical.client_score == pytest.approx(60.0)
        assert technical.competitor_average == pytest.approx(88.6)
        assert technical.industry_benchmark == 70

        titles = technical.metrics["missingTitlesPercent"]
        assert titles.client_value == 20
        assert titles.competitor_average == pytest.approx(2.0)
        assert titles.industry_average == 5

    def test_structure_metrics_carry_threshold(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        depth = comparison.benchmarks["structure"].metrics["averageDepth"]
        assert depth.threshold == {"inverse": True, "min": 2, "max": 4}

    def test_errored_competitors_are_excluded(self, client_summary, competitor_summaries,
                                              errored_competitor, engine):
        with_error = dict(competitor_summaries, **{"down.com": errored_competitor})
        comparison = engine.analyze(client_summary, with_error, today=TODAY)

        assert comparison.benchmarks["technical"].competitor_average == pytest.approx(88.6)
        assert len(comparison.rankings["technical"].competitors) == 2

    def test_no_competitors(self, client_summary, engine):
        comparison = engine.analyze(client_summary, {}, today=TODAY)

        technical = comparison.benchmarks["technical"]
        assert technical.competitor_average == 0
        assert technical.metrics["missingTitlesPercent"].competitor_average is None
        assert comparison.rankings["technical"].client_rank == 1

    def test_default_industry_table(self, client_summary):
        comparison = BenchmarkEngine().analyze(client_summary, {}, today=TODAY)
        assert comparison.benchmarks["content"].industry_benchmark == 70


class TestRankings:
    """Test competitor ranking and distribution."""

    def test_rank_among_competitors(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        ranking = comparison.rankings["technical"]
        assert ranking.client_rank == 3
        assert [c.name for c in ranking.competitors] == ["a.com", "b.com"]

    def test_top_client_ranks_first(self, make_summary, engine):
        health = {
            "missingTitlesPercent": 0,
            "missingDescriptionsPercent": 0,
            "hasSchemaMarkupPercent": 100,
            "hasCanonicalPercent": 100,
            "hasMobileViewportPercent": 100,
        }
        client = make_summary("client.com", seoHealth=health)
        competitor = make_summary("https://www.rival.com", seoHealth=dict(health, hasSchemaMarkupPercent=50))

        ranking = engine.analyze(client, {"https://www.rival.com": competitor}, today=TODAY).rankings["technical"]

        assert ranking.client_rank == 1
        assert ranking.competitors[0].name == "rival.com"
        assert ranking.competitors[0].url == "https://www.rival.com"

    def test_ties_favor_client(self, make_summary, engine):
        health = {"hasCanonicalPercent": 80}
        client = make_summary("client.com", seoHealth=health)
        competitor = make_summary("a.com", seoHealth=health)

        ranking = engine.analyze(client, {"a.com": competitor}, today=TODAY).rankings["technical"]
        assert ranking.client_rank == 1

    def test_rank_bounds(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)
        for ranking in comparison.rankings.values():
            assert 1 <= ranking.client_rank <= len(ranking.competitors) + 1
            scores = [c.score for c in ranking.competitors]
            assert scores == sorted(scores, reverse=True)

    def test_distribution(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        distribution = comparison.rankings["technical"].distribution
        assert distribution.counts == [0, 0, 0, 0, 2]
        assert distribution.percentiles["p50"] == pytest.approx(88.6)
        assert distribution.percentiles["client"] == pytest.approx(60.0)

    def test_perfect_score_lands_in_last_bucket(self, make_summary, engine):
        site = make_summary("a.com", seoHealth={"hasCanonicalPercent": 100})
        client = make_summary("client.com", seoHealth={"hasCanonicalPercent": 100})

        distribution = engine.analyze(client, {"a.com": site}, today=TODAY).rankings["technical"].distribution

        assert distribution.counts == [0, 0, 0, 0, 1]
        assert distribution.client_position == 4


class TestPercentile:
    """Test nearest-rank percentile."""

    def test_nearest_rank(self):
        scores = [10, 20, 30, 40]
        assert percentile(scores, 25) == 10
        assert percentile(scores, 50) == 20
        assert percentile(scores, 75) == 30
        assert percentile(scores, 100) == 40

    def test_empty(self):
        assert percentile([], 50) == 0


class TestForecast:
    """Test moving-average trend forecast."""

    def test_linear_extension(self):
        history = [TrendPoint("2026-08-01", 50), TrendPoint("2026-09-01", 55), TrendPoint("2026-10-01", 60)]

        forecast = forecast_series(history, 3)

        assert [p.date for p in forecast] == ["2026-11-01", "2026-12-01", "2027-01-01"]
        assert [p.value for p in forecast] == pytest.approx([65, 70, 75])

    def test_uses_last_three_points(self):
        history = [TrendPoint("2026-06-01", 0), TrendPoint("2026-07-01", 90),
                   TrendPoint("2026-08-01", 80), TrendPoint("2026-09-01", 90)]

        forecast = forecast_series(history, 1)

        assert forecast[0].value == pytest.approx(90)

    def test_values_are_clamped(self):
        history = [TrendPoint("2026-08-01", 80), TrendPoint("2026-09-01", 90), TrendPoint("2026-10-01", 100)]

        forecast = forecast_series(history, 2)

        assert [p.value for p in forecast] == [100, 100]

    def test_short_series(self):
        assert forecast_series([TrendPoint("2026-10-01", 50)], 3) == []
        assert forecast_series([], 3) == []


class TestTrends:
    """Test trend series assembly."""

    def test_without_history(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        for category in CATEGORIES:
            series = comparison.trends[category]
            assert len(series.client_history) == 1
            assert series.client_history[0].date == "2026-10-01"
            assert series.forecast_client == []
        assert comparison.trends["technical"].industry_history[0].value == 70

    def test_with_history_forecasts(self, client_summary, competitor_summaries, engine):
        history = {
            "client": {"technical": [
                {"date": "2026-08-01", "score": 50},
                {"date": "2026-09-01", "score": 55},
            ]},
            "competitors": {"technical": [
                {"date": "2026-09-01", "averageScore": 80},
            ]},
        }

        series = engine.analyze(client_summary, competitor_summaries, history=history, today=TODAY).trends["technical"]

        assert [p.value for p in series.client_history] == pytest.approx([50, 55, 60])
        assert [p.value for p in series.forecast_client] == pytest.approx([65, 70, 75])
        assert len(series.competitor_history) == 2
        assert len(series.forecast_competitor) == 3

    def test_history_is_not_modified(self, client_summary, competitor_summaries, engine):
        history = {"client": {"technical": [{"date": "2026-09-01", "score": 55}]}}

        engine.analyze(client_summary, competitor_summaries, history=history, today=TODAY)

        assert history == {"client": {"technical": [{"date": "2026-09-01", "score": 55}]}}

    def test_forecasting_disabled(self, client_summary, competitor_summaries):
        engine = BenchmarkEngine(industry_benchmarks=DEFAULT_INDUSTRY_BENCHMARKS, enable_forecasting=False)
        history = {"client": {"technical": [
            {"date": "2026-08-01", "score": 50},
            {"date": "2026-09-01", "score": 55},
        ]}}

        series = engine.analyze(client_summary, competitor_summaries, history=history, today=TODAY).trends["technical"]

        assert series.forecast_client == []


class TestBenchmarkRecommendations:
    """Test benchmark-driven recommendations."""

    def test_recommendations(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        titles = [r.title for r in comparison.recommendations]
        for expected in (
            "Improve Technical SEO Foundation",
            "Optimize Page Titles",
            "Add Meta Descriptions",
            "Implement Schema Markup",
            "Improve Site Structure",
            "Flatten Site Architecture",
            "Improve Content Organization",
            "Fix Orphaned Pages",
        ):
            assert expected in titles
        assert all(r.source == RecommendationSource.BENCHMARK_COMPARISON for r in comparison.recommendations)

    def test_category_recommendation_text(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        rec = next(r for r in comparison.recommendations if r.title == "Improve Technical SEO Foundation")
        assert rec.category == "Technical SEO"
        assert "competitors (88.6)" in rec.description
        assert rec.impact.startswith("High")
        assert rec.actions == []

    def test_metric_recommendation_actions(self, client_summary, competitor_summaries, engine):
        comparison = engine.analyze(client_summary, competitor_summaries, today=TODAY)

        rec = next(r for r in comparison.recommendations if r.title == "Optimize Page Titles")
        assert rec.description.startswith("20.0% of your pages are missing title tags, compared to 2.0% for competitors")
        assert len(rec.actions) == 5

        flatten = next(r for r in comparison.recommendations if r.title == "Flatten Site Architecture")
        assert len(flatten.actions) == 6

    def test_falls_back_to_industry_benchmark(self, client_summary, engine):
        comparison = engine.analyze(client_summary, {}, today=TODAY)

        rec = next(r for r in comparison.recommendations if r.title == "Optimize Page Titles")
        assert "for industry benchmark" in rec.description

    def test_no_recommendations_for_strong_client(self, competitor_summaries, engine):
        client = competitor_summaries["a.com"]
        others = {"b.com": competitor_summaries["b.com"]}

        comparison = engine.analyze(client, others, categories=["technical", "structure"], today=TODAY)

        assert comparison.recommendations == []

    def test_no_recommendations_for_errored_client(self, competitor_summaries, errored_competitor, engine):
        comparison = engine.analyze(errored_competitor, competitor_summaries, today=TODAY)

        assert comparison.recommendations == []
        assert list(comparison.rankings) == CATEGORIES
