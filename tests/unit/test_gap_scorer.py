"""
Gap Scorer Tests

Covers impact interpolation, category/overall scoring and the per-category
gap rules.

Run with: python3 -m pytest tests/unit/test_gap_scorer.py -v
"""

import pytest

from competitor_intel.config import CATEGORY_WEIGHTS
from competitor_intel.models import CATEGORIES, Gap, GapData
from competitor_intel.services.gap_scorer import (
    GapScorer,
    calculate_category_score,
    calculate_impact_score,
    calculate_overall_score,
    get_gap_scorer,
    sort_by_impact,
)


def _gap(title, impact, category="technical"):
    return Gap(category=category, title=title, description="", impact_score=impact,
               data=GapData(0.0, 0.0, 0.0))


class TestImpactScore:
    """Test 1-5 impact interpolation."""

    def test_bounds(self):
        assert calculate_impact_score(0, 10, 50) == 1.0
        assert calculate_impact_score(10, 10, 50) == 1.0
        assert calculate_impact_score(50, 10, 50) == 5.0
        assert calculate_impact_score(500, 10, 50) == 5.0

    def test_linear_between_thresholds(self):
        assert calculate_impact_score(30, 10, 50) == pytest.approx(3.0)
        assert calculate_impact_score(24, 20, 100) == pytest.approx(1.2)

    def test_monotonic(self):
        values = [calculate_impact_score(v, 5, 30) for v in range(0, 40)]
        assert values == sorted(values)
        assert all(1.0 <= v <= 5.0 for v in values)


class TestCategoryScores:
    """Test category and overall score roll-up."""

    def test_two_gaps_score_thirty(self):
        gaps = [_gap("A", 3.0), _gap("B", 4.0)]
        assert calculate_category_score(gaps) == pytest.approx(30.0)

    def test_clean_category_scores_hundred(self):
        assert calculate_category_score([]) == 100.0

    def test_overall_is_weighted_sum(self):
        scores = {"technical": 30, "content": 50, "keywords": 100,
                  "performance": 80, "onPage": 60, "structure": 40}
        expected = 30 * 0.2 + 50 * 0.25 + 100 * 0.2 + 80 * 0.15 + 60 * 0.1 + 40 * 0.1
        assert calculate_overall_score(scores) == pytest.approx(expected)

    def test_weights_sum_to_one(self):
        assert sum(CATEGORY_WEIGHTS.values()) == pytest.approx(1.0)


class TestSortByImpact:
    """Test stable impact ordering."""

    def test_descending_and_stable(self):
        gaps = [_gap("low", 1.5), _gap("first", 4.0), _gap("mid", 3.0), _gap("second", 4.0)]
        ordered = sort_by_impact(gaps)
        assert [g.title for g in ordered] == ["first", "second", "mid", "low"]


class TestPerformanceGaps:
    """Test slow-page detection against the 1.2x competitor threshold."""

    def test_slow_load_emits_gap(self, make_summary):
        client = make_summary("client.com", averagePerformance={"load": 3100})
        competitor = make_summary("a.com", averagePerformance={"load": 2500})

        analysis = GapScorer().analyze(client, {"a.com": competitor})

        gaps = analysis.gaps["performance"]
        assert [g.title for g in gaps] == ["Slow Page Load Time"]
        assert gaps[0].data.difference == pytest.approx(600)
        assert gaps[0].impact_score == pytest.approx(1.2)
        assert gaps[0].data.unit == "ms"

    def test_within_threshold_emits_nothing(self, make_summary):
        client = make_summary("client.com", averagePerformance={"load": 2900})
        competitor = make_summary("a.com", averagePerformance={"load": 2500})

        analysis = GapScorer().analyze(client, {"a.com": competitor})

        assert analysis.gaps["performance"] == []
        assert analysis.scores["performance"] == 100.0


class TestGapScorer:
    """Test full gap analysis over fixture sites."""

    def test_technical_gaps(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        by_title = {g.title: g for g in analysis.gaps["technical"]}
        assert set(by_title) == {
            "Missing Page Titles",
            "Missing Meta Descriptions",
            "Limited Schema Markup Usage",
            "Insufficient Canonical Tag Usage",
        }
        assert by_title["Missing Page Titles"].impact_score == pytest.approx(3.08)
        assert by_title["Limited Schema Markup Usage"].impact_score == 5.0
        assert by_title["Missing Page Titles"].data.competitor_average == pytest.approx(2.0)

    def test_keyword_gaps(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(
            client_summary, competitor_summaries, keywords=["pressure washing", "roof cleaning", "unknown"]
        )

        by_title = {g.title: g for g in analysis.gaps["keywords"]}
        assert set(by_title) == {
            'Underutilized Keyword: "pressure washing"',
            'Missing Keyword: "roof cleaning"',
        }
        assert by_title['Missing Keyword: "roof cleaning"'].impact_score == pytest.approx(3.0)
        assert by_title['Underutilized Keyword: "pressure washing"'].impact_score == pytest.approx(3.2)

    def test_content_and_structure_gaps(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        content_titles = [g.title for g in analysis.gaps["content"]]
        assert "Suboptimal Title Lengths" in content_titles
        assert "Thin Content" in content_titles
        assert "Missing H1 Headings" in content_titles
        assert [g.title for g in analysis.gaps["structure"]] == ["Excessive Site Depth"]

    def test_on_page_gaps(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        titles = [g.title for g in analysis.gaps["onPage"]]
        assert titles == ["Poor Image Alt Text Usage", "Insufficient Internal Linking"]

    def test_opportunities_bundle_related_gaps(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        by_title = {o.title: o for o in analysis.opportunities}
        speed = by_title["Improve Page Speed"]
        assert speed.category == "Performance"
        # Highest-impact gap first
        assert speed.related_gaps == ["Slow DOM Content Loaded Time", "Slow Page Load Time"]
        assert speed.impact_score == max(g.impact_score for g in analysis.gaps["performance"])
        assert speed.actions

    def test_scores_follow_gap_impacts(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        for category in CATEGORIES:
            assert analysis.scores[category] == pytest.approx(calculate_category_score(analysis.gaps[category]))
        assert analysis.scores["overall"] == pytest.approx(
            sum(analysis.scores[c] * w for c, w in CATEGORY_WEIGHTS.items())
        )

    def test_zero_competitors_is_neutral(self, client_summary):
        analysis = GapScorer().analyze(client_summary, {})

        assert analysis.all_gaps() == []
        assert analysis.opportunities == []
        for category in CATEGORIES:
            assert analysis.scores[category] == 100.0
        assert analysis.scores["overall"] == pytest.approx(100.0)

    def test_errored_competitors_are_skipped(self, client_summary, competitor_summaries, errored_competitor):
        baseline = GapScorer().analyze(client_summary, competitor_summaries)
        with_error = dict(competitor_summaries, **{"down.com": errored_competitor})

        analysis = GapScorer().analyze(client_summary, with_error)

        assert analysis.to_dict() == baseline.to_dict()

    def test_errored_client_produces_no_gaps(self, competitor_summaries, errored_competitor):
        analysis = GapScorer().analyze(errored_competitor, competitor_summaries)
        assert analysis.all_gaps() == []

    def test_critical_gaps_and_distribution(self, client_summary, competitor_summaries):
        analysis = GapScorer().analyze(client_summary, competitor_summaries)

        critical = analysis.critical_gaps()
        assert all(g.impact_score >= 4.0 for g in critical)
        assert "Limited Schema Markup Usage" in [g.title for g in critical]

        distribution = analysis.impact_distribution()
        assert list(distribution) == CATEGORIES
        assert sum(distribution["technical"].values()) == len(analysis.gaps["technical"])

    def test_to_dict_shape(self, client_summary, competitor_summaries):
        result = GapScorer().analyze(client_summary, competitor_summaries).to_dict()

        assert list(result["gaps"]) == CATEGORIES
        assert set(result["scores"]) == set(CATEGORIES) | {"overall"}
        gap = result["gaps"]["technical"][0]
        assert set(gap) == {"category", "title", "description", "impactScore", "data"}
        assert set(gap["data"]) >= {"clientValue", "competitorAverage", "difference", "unit"}

    def test_singleton(self):
        assert get_gap_scorer() is get_gap_scorer()
