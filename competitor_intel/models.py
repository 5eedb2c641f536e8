"""
Competitor Intelligence Data Model

Shared types passed between the analysis services:
- Category / Priority / RecommendationSource enums
- SiteSummary: crawler document for one site (immutable input)
- Gap / GapData / Opportunity: gap scoring output
- Recommendation: unit of work fed into strategy planning

Every output type serializes with to_dict() using the camelCase keys of the
report layer.
"""

from enum import Enum
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

from competitor_intel.config import PRIORITY_THRESHOLDS


class Category(Enum):
    """Analysis category, in report order."""
    TECHNICAL = "technical"
    CONTENT = "content"
    KEYWORDS = "keywords"
    PERFORMANCE = "performance"
    ON_PAGE = "onPage"
    STRUCTURE = "structure"


CATEGORIES = [category.value for category in Category]


class Priority(Enum):
    """Recommendation priority."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITIES = [priority.value for priority in Priority]


class RecommendationSource(Enum):
    """Where a recommendation originated."""
    GAP_ANALYSIS = "gap-analysis"
    BENCHMARK_COMPARISON = "benchmark-comparison"


def priority_for_impact(impact_score: float) -> Priority:
    """Map a 1-5 impact score onto a priority bucket."""
    if impact_score >= PRIORITY_THRESHOLDS["critical"]:
        return Priority.CRITICAL
    if impact_score >= PRIORITY_THRESHOLDS["high"]:
        return Priority.HIGH
    if impact_score >= PRIORITY_THRESHOLDS["medium"]:
        return Priority.MEDIUM
    return Priority.LOW


def as_number(value: Any) -> Optional[float]:
    """Return value as float if it is a real number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


# Where each metric section lives inside a crawler document
SECTION_PATHS = {
    "seoHealth": ("summary", "seoHealth"),
    "contentStats": ("summary", "contentStats"),
    "headingsDistribution": ("summary", "contentStats", "headingsDistribution"),
    "averagePerformance": ("summary", "averagePerformance"),
    "images": ("seo", "images"),
    "links": ("seo", "links"),
    "structure": ("structure",),
}


@dataclass(frozen=True)
class SiteSummary:
    """
    Aggregated crawl metrics for one site.

    Mirrors the crawler's per-site document: a `summary` block (seoHealth,
    contentStats, averagePerformance, pagesAnalyzed), a `seo` block (images,
    links), a `structure` block and a per-keyword `keywordAnalysis` map.
    A populated `error` marks a failed crawl; such sites are skipped.
    """
    domain: str
    summary: Dict[str, Any] = field(default_factory=dict)
    seo: Dict[str, Any] = field(default_factory=dict)
    structure: Dict[str, Any] = field(default_factory=dict)
    keyword_analysis: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, domain: str, document: Dict[str, Any]) -> "SiteSummary":
        """Build from a crawler document."""
        document = document or {}
        return cls(
            domain=document.get("domain") or domain,
            summary=document.get("summary") or {},
            seo=document.get("seo") or {},
            structure=document.get("structure") or {},
            keyword_analysis=document.get("keywordAnalysis") or {},
            error=document.get("error"),
        )

    @classmethod
    def failed(cls, domain: str, error: str) -> "SiteSummary":
        """Placeholder for a site whose metrics could not be fetched."""
        return cls(domain=domain, error=error)

    @property
    def ok(self) -> bool:
        return not self.error

    def section(self, name: str) -> Optional[Dict[str, Any]]:
        """Return a metric section (see SECTION_PATHS) or None if absent."""
        node: Any = {
            "summary": self.summary,
            "seo": self.seo,
            "structure": self.structure,
        }
        for key in SECTION_PATHS[name]:
            if not isinstance(node, dict) or not node.get(key):
                return None
            node = node[key]
        return node if isinstance(node, dict) else None

    def metric(self, section: str, name: str) -> Optional[float]:
        """Numeric metric from a section, None when absent or non-numeric."""
        values = self.section(section)
        if values is None:
            return None
        return as_number(values.get(name))

    @property
    def pages_analyzed(self) -> Optional[float]:
        return as_number(self.summary.get("pagesAnalyzed"))

    def keyword(self, keyword: str) -> Optional[Dict[str, Any]]:
        data = self.keyword_analysis.get(keyword)
        return data if data else None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "domain": self.domain,
            "summary": self.summary,
            "seo": self.seo,
            "structure": self.structure,
            "keywordAnalysis": self.keyword_analysis,
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class GapData:
    """Values behind a gap, in the unit of the compared metric."""
    client_value: float
    competitor_average: float
    difference: float
    unit: str = ""
    optimal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "clientValue": round(self.client_value, 2),
            "competitorAverage": round(self.competitor_average, 2),
            "difference": round(self.difference, 2),
            "unit": self.unit,
        }
        if self.optimal:
            result["optimal"] = self.optimal
        return result


@dataclass(frozen=True)
class Gap:
    """A quantified deficiency of the client vs the competitor aggregate."""
    category: str
    title: str
    description: str
    impact_score: float
    data: GapData

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "impactScore": round(self.impact_score, 2),
            "data": self.data.to_dict(),
        }


@dataclass
class Opportunity:
    """Themed bundle of related gaps with a shared action checklist."""
    title: str
    description: str
    category: str
    impact_score: float
    actions: List[str] = field(default_factory=list)
    related_gaps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impactScore": round(self.impact_score, 2),
            "actions": list(self.actions),
            "relatedGaps": list(self.related_gaps),
        }


@dataclass
class Recommendation:
    """
    Actionable, prioritized unit of work.

    Benchmark suggestions arrive with only a textual `impact` (e.g.
    "High - ..."); their impact_score is resolved when they are collected
    for merging.
    """
    title: str
    description: str
    category: str
    impact_score: float = 3.0
    priority: Optional[Priority] = None
    actions: List[str] = field(default_factory=list)
    source: RecommendationSource = RecommendationSource.GAP_ANALYSIS
    related_items: List[str] = field(default_factory=list)
    impact: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impactScore": round(self.impact_score, 2),
            "priority": self.priority.value if self.priority else None,
            "actions": list(self.actions),
            "source": self.source.value,
            "relatedItems": list(self.related_items),
        }
        if self.impact:
            result["impact"] = self.impact
        return result
