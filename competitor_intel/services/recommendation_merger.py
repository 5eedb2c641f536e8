"""
Recommendation Merger

Turns gap-analysis opportunities and benchmark suggestions into a single
prioritized recommendation list:
- Normalizes both sources into Recommendation objects
- Merges near-duplicates (same category, similar title or overlapping actions)
- Sorts by impact and derives priority from the impact score

Usage:
    from competitor_intel.services.recommendation_merger import get_recommendation_merger

    merger = get_recommendation_merger()
    recommendations = merger.build(gap_analysis.opportunities, comparison.recommendations)
"""

import re
from typing import List, Optional

from runner.logging_setup import get_logger
from competitor_intel.models import (
    Opportunity,
    Recommendation,
    RecommendationSource,
    priority_for_impact,
)


# Similarity cut-offs (unverified tuning)
TITLE_SIMILARITY_THRESHOLD = 0.7
ACTION_SIMILARITY_THRESHOLD = 0.8

# Verbs stripped before comparing titles
TITLE_VERBS = re.compile(r"\b(optimize|improve|enhance|increase|boost|strengthen|fix|implement)\b")

# Checked in order; first match wins
IMPACT_KEYWORDS = [
    ("critical", 5.0),
    ("high", 4.0),
    ("medium", 3.0),
    ("low", 2.0),
]
DEFAULT_IMPACT_SCORE = 3.0


# =============================================================================
# TEXT SIMILARITY
# =============================================================================

def normalize_title(title: str) -> str:
    """Lowercase, drop common action verbs and collapse whitespace."""
    title = TITLE_VERBS.sub("", (title or "").lower())
    return " ".join(title.split())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert/delete/substitute, unit cost)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


def levenshtein_ratio(a: str, b: str) -> float:
    """1 - distance / longer length; 1.0 for two empty strings."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def titles_similar(a: str, b: str) -> bool:
    if not a or not b:
        return False
    left, right = normalize_title(a), normalize_title(b)
    if left in right or right in left:
        return True
    return levenshtein_ratio(left, right) > TITLE_SIMILARITY_THRESHOLD


def actions_overlap(a: List[str], b: List[str]) -> bool:
    """True if any pair of actions is a substring match or nearly identical."""
    if not a or not b:
        return False
    left = [action.lower().strip() for action in a]
    right = [action.lower().strip() for action in b]
    for first in left:
        for second in right:
            if first in second or second in first:
                return True
            if levenshtein_ratio(first, second) > ACTION_SIMILARITY_THRESHOLD:
                return True
    return False


def impact_from_text(text: Optional[str]) -> float:
    """Map a free-text impact ("High - ...") to a 1-5 score."""
    lowered = (text or "").lower()
    for keyword, score in IMPACT_KEYWORDS:
        if keyword in lowered:
            return score
    return DEFAULT_IMPACT_SCORE


def _is_similar(anchor: Recommendation, other: Recommendation) -> bool:
    if anchor.category != other.category:
        return False
    return titles_similar(anchor.title, other.title) or actions_overlap(anchor.actions, other.actions)


def _union(first: List[str], second: List[str]) -> List[str]:
    return first + [item for item in second if item not in first]


class RecommendationMerger:
    """Collects, deduplicates and prioritizes recommendations."""

    def __init__(self):
        self.logger = get_logger("RecommendationMerger")

    def collect(
        self,
        opportunities: List[Opportunity],
        benchmark_recommendations: List[Recommendation],
    ) -> List[Recommendation]:
        """Normalize both sources, skipping benchmark items already present by (title, category)."""
        collected = [
            Recommendation(
                title=opportunity.title,
                description=opportunity.description,
                category=opportunity.category,
                impact_score=opportunity.impact_score,
                actions=list(opportunity.actions),
                source=RecommendationSource.GAP_ANALYSIS,
                related_items=list(opportunity.related_gaps),
            )
            for opportunity in opportunities
        ]
        seen = {(rec.title, rec.category) for rec in collected}

        for suggestion in benchmark_recommendations:
            key = (suggestion.title, suggestion.category)
            if key in seen:
                continue
            seen.add(key)
            collected.append(Recommendation(
                title=suggestion.title,
                description=suggestion.description,
                category=suggestion.category,
                impact_score=impact_from_text(suggestion.impact),
                actions=list(suggestion.actions),
                source=RecommendationSource.BENCHMARK_COMPARISON,
                related_items=list(suggestion.related_items),
                impact=suggestion.impact,
            ))

        return collected

    def merge(self, recommendations: List[Recommendation]) -> List[Recommendation]:
        """
        Merge near-duplicates in one left-to-right pass, keeping first-occurrence order.

        Each later item is compared against the anchor as it arrived, not the
        accumulated merge, so a chain A~B~C where A and C differ yields two items.
        """
        return self._merge_pass(recommendations)

    def build(
        self,
        opportunities: List[Opportunity],
        benchmark_recommendations: List[Recommendation],
    ) -> List[Recommendation]:
        """Collect, merge, sort by impact (stable) and assign priorities."""
        collected = self.collect(opportunities, benchmark_recommendations)
        merged = self.merge(collected)
        ranked = sorted(merged, key=lambda rec: rec.impact_score, reverse=True)

        self.logger.info(
            f"Merged {len(collected)} recommendations into {len(ranked)} "
            f"({len(opportunities)} opportunities, {len(benchmark_recommendations)} benchmark suggestions)"
        )
        return ranked

    @staticmethod
    def _merge_pass(recommendations: List[Recommendation]) -> List[Recommendation]:
        merged = []
        consumed = set()

        for index, anchor in enumerate(recommendations):
            if index in consumed:
                continue

            actions = list(anchor.actions)
            related = list(anchor.related_items)
            impact_score = anchor.impact_score

            for other_index in range(index + 1, len(recommendations)):
                if other_index in consumed:
                    continue
                other = recommendations[other_index]
                if not _is_similar(anchor, other):
                    continue
                consumed.add(other_index)
                actions = _union(actions, other.actions)
                related = _union(related, other.related_items)
                impact_score = max(impact_score, other.impact_score)

            merged.append(Recommendation(
                title=anchor.title,
                description=anchor.description,
                category=anchor.category,
                impact_score=impact_score,
                priority=priority_for_impact(impact_score),
                actions=actions,
                source=anchor.source,
                related_items=related,
                impact=anchor.impact,
            ))

        return merged


# Module-level singleton
_recommendation_merger_instance = None


def get_recommendation_merger() -> RecommendationMerger:
    """Get or create the singleton RecommendationMerger instance."""
    global _recommendation_merger_instance
    if _recommendation_merger_instance is None:
        _recommendation_merger_instance = RecommendationMerger()
    return _recommendation_merger_instance
