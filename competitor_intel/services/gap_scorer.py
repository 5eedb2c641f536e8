"""
Gap Scorer

Compares a client site against the competitor aggregate, category by category:
- Technical SEO health (titles, descriptions, schema, canonicals, mobile viewport)
- Content (title/description lengths, content depth, H1 coverage)
- Keywords (missing, underutilized, absent from titles)
- Performance (load, DOM content loaded, first paint)
- On-page (image alt text, internal linking)
- Site structure (click depth)

Every gap carries a 1-5 impact score interpolated between a per-rule (min, max)
threshold pair. Gaps are bundled into themed opportunities and rolled up into
0-100 category scores plus a weighted overall score.

Usage:
    from competitor_intel.services.gap_scorer import get_gap_scorer

    scorer = get_gap_scorer()
    analysis = scorer.analyze(client, competitors, keywords=["pressure washing"])

    print(analysis.scores["overall"])
    for gap in analysis.gaps_sorted_by_impact():
        print(gap.title, gap.impact_score)
"""

from typing import Dict, Any, List, Optional, Tuple
from dataclasses import dataclass, field

from runner.logging_setup import get_logger
from competitor_intel.config import CATEGORY_WEIGHTS, CRITICAL_GAP_THRESHOLD
from competitor_intel.models import (
    CATEGORIES,
    Gap,
    GapData,
    Opportunity,
    SiteSummary,
    as_number,
)


# =============================================================================
# RULE THRESHOLDS (unverified tuning)
# =============================================================================

# Content length bounds (characters)
TITLE_LENGTH_BOUNDS = (30, 70)
TITLE_TOO_SHORT_BELOW = 40
DESCRIPTION_LENGTH_BOUNDS = (80, 170)
DESCRIPTION_TOO_SHORT_BELOW = 100
THIN_CONTENT_RATIO = 0.7
H1_COVERAGE_RATIO = 0.9

# Keyword usage ratios vs competitor average
KEYWORD_DENSITY_RATIO = 0.5
KEYWORD_TITLE_RATIO = 0.5
UNDERUTILIZED_IMPORTANCE_FACTOR = 0.8
TITLE_ABSENT_IMPORTANCE_FACTOR = 0.6

# Performance: flag when client is this much slower than competitors
PERFORMANCE_SLOWDOWN_RATIO = 1.2

# On-page ratios vs competitor average
ALT_TEXT_RATIO = 0.8
INTERNAL_LINKS_RATIO = 0.7

# Structure: flag when client depth exceeds competitor depth by this factor
DEPTH_RATIO = 1.3

# (min, max) impact thresholds per rule
IMPACT_THRESHOLDS = {
    "title_length": (5, 25),
    "description_length": (10, 50),
    "thin_content": (200, 1000),
    "h1_coverage": (10, 40),
    "keyword": (20, 100),
    "performance": (20, 100),
    "alt_text": (10, 50),
    "internal_links": (20, 70),
    "depth": (1, 3),
}


@dataclass(frozen=True)
class TechnicalRule:
    """Percentage-point comparison of one seoHealth metric."""
    metric: str
    title: str
    # True when a higher client value is worse (e.g. missing-title %)
    higher_is_worse: bool
    trigger: float
    thresholds: Tuple[float, float]
    description: str


TECHNICAL_RULES = [
    TechnicalRule(
        "missingTitlesPercent", "Missing Page Titles", True, 5, (5, 30),
        "{client:.1f}% of your pages are missing title tags, "
        "compared to {competitor:.1f}% for competitors.",
    ),
    TechnicalRule(
        "missingDescriptionsPercent", "Missing Meta Descriptions", True, 10, (10, 40),
        "{client:.1f}% of your pages are missing meta descriptions, "
        "compared to {competitor:.1f}% for competitors.",
    ),
    TechnicalRule(
        "hasSchemaMarkupPercent", "Limited Schema Markup Usage", False, 15, (15, 50),
        "Only {client:.1f}% of your pages use schema markup, "
        "compared to {competitor:.1f}% for competitors.",
    ),
    TechnicalRule(
        "hasCanonicalPercent", "Insufficient Canonical Tag Usage", False, 20, (20, 60),
        "Only {client:.1f}% of your pages use canonical tags, "
        "compared to {competitor:.1f}% for competitors.",
    ),
    TechnicalRule(
        "hasMobileViewportPercent", "Poor Mobile Optimization", False, 10, (10, 40),
        "Only {client:.1f}% of your pages have mobile viewport meta tags, "
        "compared to {competitor:.1f}% for competitors.",
    ),
]

# (metric, gap title, label used in the description)
PERFORMANCE_RULES = [
    ("load", "Slow Page Load Time", "page load time"),
    ("domContentLoaded", "Slow DOM Content Loaded Time", "DOM content loaded time"),
    ("firstPaint", "Slow First Paint Time", "first paint time"),
]

KEYWORD_FIELDS = [
    "occurrences", "pages", "inTitle", "inDescription",
    "inHeadings", "density", "importanceScore",
]


# =============================================================================
# OPPORTUNITY TEMPLATES
# =============================================================================

OPPORTUNITY_TEMPLATES = [
    {
        "gap_category": "technical",
        "match": "Title",
        "title": "Optimize Page Titles",
        "description": "Improve your page titles to increase search visibility and click-through rates.",
        "category": "Technical SEO",
        "actions": [
            "Ensure every page has a unique, descriptive title tag",
            "Keep titles between 50-60 characters to avoid truncation in search results",
            "Include primary keywords in the title, preferably near the beginning",
            "Follow a consistent title format across the site",
        ],
    },
    {
        "gap_category": "technical",
        "match": "Description",
        "title": "Improve Meta Descriptions",
        "description": "Create compelling meta descriptions to increase click-through rates from search results.",
        "category": "Technical SEO",
        "actions": [
            "Add unique meta descriptions to all pages",
            "Keep descriptions between 120-158 characters",
            "Include a call-to-action to encourage clicks",
            "Incorporate relevant keywords naturally",
        ],
    },
    {
        "gap_category": "technical",
        "match": "Schema",
        "title": "Implement Schema Markup",
        "description": (
            "Add structured data markup to improve how search engines understand your "
            "content and enable rich snippets in search results."
        ),
        "category": "Technical SEO",
        "actions": [
            "Implement schema.org markup for your primary content types",
            "Add Organization, LocalBusiness, or Person schema to your homepage",
            "Add Product schema to all product pages",
            "Implement Article or BlogPosting schema for blog content",
            "Use Schema markup validator to ensure correct implementation",
        ],
    },
    {
        "gap_category": "content",
        "match": "Thin Content",
        "title": "Expand Content Depth",
        "description": "Create more comprehensive content to better satisfy user intent and improve search rankings.",
        "category": "Content",
        "actions": [
            "Identify and prioritize thin content pages",
            "Expand content with valuable, relevant information",
            "Add subheadings to improve content structure",
            "Include more examples, statistics, and visual elements",
            "Address common questions related to the topic",
        ],
    },
    {
        "gap_category": "content",
        "match": "Heading",
        "title": "Improve Heading Structure",
        "description": "Optimize your content structure with proper headings to enhance readability and SEO.",
        "category": "Content",
        "actions": [
            "Ensure every page has a single H1 tag containing the primary keyword",
            "Use H2 tags for main sections and H3 tags for subsections",
            "Include relevant keywords in headings naturally",
            "Create a logical hierarchy with your heading structure",
            "Keep headings descriptive and concise",
        ],
    },
    {
        "gap_category": "keywords",
        "match": "Missing Keyword",
        "title": "Expand Keyword Coverage",
        "description": "Target important keywords that your competitors are ranking for but are missing from your site.",
        "category": "Keywords",
        "actions": [
            "Create new content targeting the missing keywords",
            "Update existing content to incorporate missing keywords",
            "Add missing keywords to titles and headings where relevant",
            "Include missing keywords in meta descriptions",
        ],
    },
    {
        "gap_category": "keywords",
        "match": "Underutilized",
        "title": "Optimize Existing Keywords",
        "description": "Improve your usage of keywords that are underutilized compared to competitors.",
        "category": "Keywords",
        "actions": [
            "Incorporate underutilized keywords in more pages",
            "Add keywords to important on-page elements (titles, headings, first paragraph)",
            "Create new content clusters around underutilized keywords",
            "Update internal linking to target keyword-focused pages",
        ],
    },
    {
        "gap_category": "performance",
        "match": "Slow",
        "title": "Improve Page Speed",
        "description": "Optimize your site speed to enhance user experience and search rankings.",
        "category": "Performance",
        "actions": [
            "Optimize and compress images",
            "Minify CSS, JavaScript, and HTML",
            "Implement browser caching",
            "Reduce server response time",
            "Prioritize visible content",
            "Reduce the number of HTTP requests",
            "Use a content delivery network (CDN)",
        ],
    },
    {
        "gap_category": "onPage",
        "match": "Image",
        "title": "Optimize Images",
        "description": "Improve image optimization for better accessibility, user experience, and SEO.",
        "category": "On-Page SEO",
        "actions": [
            "Add descriptive alt text to all images",
            "Compress images to reduce file size without sacrificing quality",
            "Use appropriate image formats (JPEG for photos, PNG for graphics)",
            "Implement lazy loading for images",
            "Ensure responsive images for mobile devices",
        ],
    },
    {
        "gap_category": "onPage",
        "match": "Linking",
        "title": "Improve Internal Linking",
        "description": (
            "Enhance your internal linking structure to better distribute page authority "
            "and help users navigate your site."
        ),
        "category": "On-Page SEO",
        "actions": [
            "Create a logical site structure with clear navigation",
            "Add contextual links within content",
            "Use descriptive anchor text that includes target keywords",
            "Link from high-authority pages to important content",
            "Create pillar pages and content clusters",
            "Fix broken internal links",
        ],
    },
    {
        "gap_category": "structure",
        "match": "Depth",
        "title": "Flatten Site Architecture",
        "description": (
            "Improve your site structure to reduce click depth and make important pages "
            "more accessible to users and search engines."
        ),
        "category": "Site Structure",
        "actions": [
            "Reorganize site navigation to reduce depth",
            "Ensure important pages are no more than 3 clicks from the homepage",
            "Implement a logical category structure",
            "Add breadcrumb navigation",
            "Create an HTML sitemap for users",
            "Maintain an updated XML sitemap for search engines",
        ],
    },
]


# =============================================================================
# SCORING HELPERS
# =============================================================================

def calculate_impact_score(value: float, min_threshold: float, max_threshold: float) -> float:
    """
    Interpolate a 1-5 impact score.

    Below min_threshold scores 1, at or above max_threshold scores 5,
    linear in between.
    """
    if value < min_threshold:
        return 1.0
    if value >= max_threshold:
        return 5.0
    normalized = (value - min_threshold) / (max_threshold - min_threshold)
    return 1.0 + normalized * 4.0


def calculate_category_score(gaps: List[Gap]) -> float:
    """100 for a clean category, reduced by the share of maximum possible impact."""
    if not gaps:
        return 100.0
    total_impact = sum(gap.impact_score for gap in gaps)
    max_possible = 5 * len(gaps)
    score = 100 - (total_impact / max_possible) * 100
    return max(0.0, min(100.0, score))


def calculate_overall_score(scores: Dict[str, float]) -> float:
    """Weighted sum of category scores."""
    return sum(
        scores.get(category, 0.0) * weight
        for category, weight in CATEGORY_WEIGHTS.items()
    )


def sort_by_impact(items: List[Any]) -> List[Any]:
    """Stable sort by impact_score, highest first."""
    return sorted(items, key=lambda item: item.impact_score, reverse=True)


def impact_level(impact_score: float) -> str:
    """Bucket an impact score for distribution reporting."""
    if impact_score <= 2:
        return "low"
    if impact_score <= 3:
        return "medium"
    if impact_score <= 4:
        return "high"
    return "critical"


def _mean(values: List[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    if not present:
        return None
    return sum(present) / len(present)


def _competitor_average(competitors: List[SiteSummary], section: str, metric: str) -> Optional[float]:
    return _mean([competitor.metric(section, metric) for competitor in competitors])


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class GapAnalysis:
    """Gaps, opportunities and scores for one client vs its competitors."""
    client_domain: str
    gaps: Dict[str, List[Gap]] = field(default_factory=dict)
    opportunities: List[Opportunity] = field(default_factory=list)
    scores: Dict[str, float] = field(default_factory=dict)
    keywords: List[str] = field(default_factory=list)

    def all_gaps(self) -> List[Gap]:
        """All gaps in category order."""
        return [gap for category in CATEGORIES for gap in self.gaps.get(category, [])]

    def gaps_sorted_by_impact(self) -> List[Gap]:
        return sort_by_impact(self.all_gaps())

    def opportunities_sorted_by_impact(self) -> List[Opportunity]:
        return sort_by_impact(self.opportunities)

    def critical_gaps(self, threshold: float = CRITICAL_GAP_THRESHOLD) -> List[Gap]:
        """Gaps at or above the critical impact threshold, highest first."""
        return [gap for gap in self.gaps_sorted_by_impact() if gap.impact_score >= threshold]

    def impact_distribution(self) -> Dict[str, Dict[str, int]]:
        """Count of low/medium/high/critical gaps per category."""
        distribution = {}
        for category in CATEGORIES:
            counts = {"low": 0, "medium": 0, "high": 0, "critical": 0}
            for gap in self.gaps.get(category, []):
                counts[impact_level(gap.impact_score)] += 1
            distribution[category] = counts
        return distribution

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gaps": {
                category: [gap.to_dict() for gap in self.gaps.get(category, [])]
                for category in CATEGORIES
            },
            "opportunities": [opportunity.to_dict() for opportunity in self.opportunities],
            "scores": {name: round(score, 2) for name, score in self.scores.items()},
            "impactDistribution": self.impact_distribution(),
        }


# =============================================================================
# SCORER
# =============================================================================

class GapScorer:
    """
    Identifies where a client trails its competitors.

    Competitor entries flagged with an error are skipped, as is any
    competitor lacking the metric under comparison. A category with no
    comparable competitor data produces no gaps.
    """

    def __init__(self):
        self.logger = get_logger("GapScorer")

    def analyze(
        self,
        client: SiteSummary,
        competitors: Dict[str, SiteSummary],
        keywords: Optional[List[str]] = None,
    ) -> GapAnalysis:
        """
        Run gap analysis for all categories.

        Args:
            client: Client site summary
            competitors: Competitor summaries keyed by domain
            keywords: Optional keywords to check coverage for

        Returns:
            GapAnalysis with gaps per category, opportunities and scores
        """
        keywords = list(keywords or [])
        usable = [summary for summary in competitors.values() if summary.ok]

        self.logger.info(
            f"Starting gap analysis for {client.domain} "
            f"against {len(usable)}/{len(competitors)} usable competitors"
        )

        gaps: Dict[str, List[Gap]] = {category: [] for category in CATEGORIES}

        if client.ok:
            gaps["technical"] = self._technical_gaps(client, usable)
            gaps["content"] = self._content_gaps(client, usable)
            gaps["keywords"] = self._keyword_gaps(client, usable, keywords)
            gaps["performance"] = self._performance_gaps(client, usable)
            gaps["onPage"] = self._on_page_gaps(client, usable)
            gaps["structure"] = self._structure_gaps(client, usable)
        else:
            self.logger.warning(f"Client data for {client.domain} has errors: {client.error}")

        for category in CATEGORIES:
            self.logger.info(f"{category} gap analysis completed, found {len(gaps[category])} gaps")

        opportunities = self._build_opportunities(gaps)

        scores = {category: calculate_category_score(gaps[category]) for category in CATEGORIES}
        scores["overall"] = calculate_overall_score(scores)

        self.logger.info(
            f"Gap analysis completed: {sum(len(g) for g in gaps.values())} gaps, "
            f"{len(opportunities)} opportunities, overall score {scores['overall']:.1f}"
        )

        return GapAnalysis(
            client_domain=client.domain,
            gaps=gaps,
            opportunities=opportunities,
            scores=scores,
            keywords=keywords,
        )

    # =========================================================================
    # Category rules
    # =========================================================================

    def _technical_gaps(self, client: SiteSummary, competitors: List[SiteSummary]) -> List[Gap]:
        gaps = []

        for rule in TECHNICAL_RULES:
            client_value = client.metric("seoHealth", rule.metric)
            competitor_value = _competitor_average(competitors, "seoHealth", rule.metric)
            if client_value is None or competitor_value is None:
                continue

            if rule.higher_is_worse:
                difference = client_value - competitor_value
            else:
                difference = competitor_value - client_value

            if difference > rule.trigger:
                gaps.append(Gap(
                    category="technical",
                    title=rule.title,
                    description=rule.description.format(client=client_value, competitor=competitor_value),
                    impact_score=calculate_impact_score(difference, *rule.thresholds),
                    data=GapData(client_value, competitor_value, difference, unit="%"),
                ))

        return gaps

    def _content_gaps(self, client: SiteSummary, competitors: List[SiteSummary]) -> List[Gap]:
        gaps = []

        # Title length
        client_title = client.metric("contentStats", "averageTitleLength")
        competitor_title = _competitor_average(competitors, "contentStats", "averageTitleLength")
        if client_title is not None and competitor_title is not None:
            low, high = TITLE_LENGTH_BOUNDS
            if client_title < low or client_title > high:
                difference = abs(client_title - competitor_title)
                verdict = "too short" if client_title < TITLE_TOO_SHORT_BELOW else "too long"
                gaps.append(Gap(
                    category="content",
                    title="Suboptimal Title Lengths",
                    description=(
                        f"Your average title length is {client_title:.0f} characters, which is {verdict}. "
                        f"Competitor average is {competitor_title:.0f} characters."
                    ),
                    impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["title_length"]),
                    data=GapData(client_title, competitor_title, difference,
                                 unit="characters", optimal="50-60 characters"),
                ))

        # Meta description length
        client_desc = client.metric("contentStats", "averageDescriptionLength")
        competitor_desc = _competitor_average(competitors, "contentStats", "averageDescriptionLength")
        if client_desc is not None and competitor_desc is not None:
            low, high = DESCRIPTION_LENGTH_BOUNDS
            if client_desc < low or client_desc > high:
                difference = abs(client_desc - competitor_desc)
                verdict = "too short" if client_desc < DESCRIPTION_TOO_SHORT_BELOW else "too long"
                gaps.append(Gap(
                    category="content",
                    title="Suboptimal Meta Description Lengths",
                    description=(
                        f"Your average meta description length is {client_desc:.0f} characters, "
                        f"which is {verdict}. Competitor average is {competitor_desc:.0f} characters."
                    ),
                    impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["description_length"]),
                    data=GapData(client_desc, competitor_desc, difference,
                                 unit="characters", optimal="120-158 characters"),
                ))

        # Content depth
        client_length = client.metric("contentStats", "averageContentLength")
        competitor_length = _competitor_average(competitors, "contentStats", "averageContentLength")
        if client_length is not None and competitor_length:
            if client_length < competitor_length * THIN_CONTENT_RATIO:
                difference = competitor_length - client_length
                share = client_length / competitor_length * 100
                gaps.append(Gap(
                    category="content",
                    title="Thin Content",
                    description=(
                        f"Your average content length is {client_length:.0f} characters, which is "
                        f"{share:.0f}% of your competitors' average ({competitor_length:.0f} characters)."
                    ),
                    impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["thin_content"]),
                    data=GapData(client_length, competitor_length, difference, unit="characters"),
                ))

        h1_gap = self._h1_gap(client, competitors)
        if h1_gap:
            gaps.append(h1_gap)

        return gaps

    def _h1_gap(self, client: SiteSummary, competitors: List[SiteSummary]) -> Optional[Gap]:
        client_h1 = client.metric("headingsDistribution", "h1")
        client_pages = client.pages_analyzed
        if client_h1 is None or not client_pages:
            return None

        competitor_h1 = 0.0
        competitor_pages = 0.0
        for competitor in competitors:
            h1 = competitor.metric("headingsDistribution", "h1")
            pages = competitor.pages_analyzed
            if h1 is None or not pages:
                continue
            competitor_h1 += h1
            competitor_pages += pages

        if competitor_pages == 0:
            return None

        client_ratio = client_h1 / client_pages
        competitor_ratio = competitor_h1 / competitor_pages

        if client_ratio < H1_COVERAGE_RATIO and competitor_ratio > H1_COVERAGE_RATIO:
            difference = (competitor_ratio - client_ratio) * 100
            return Gap(
                category="content",
                title="Missing H1 Headings",
                description=(
                    f"Only {client_ratio * 100:.0f}% of your pages have H1 headings, "
                    f"compared to {competitor_ratio * 100:.0f}% for competitors."
                ),
                impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["h1_coverage"]),
                data=GapData(client_ratio * 100, competitor_ratio * 100, difference, unit="%"),
            )
        return None

    def _keyword_gaps(
        self,
        client: SiteSummary,
        competitors: List[SiteSummary],
        keywords: List[str],
    ) -> List[Gap]:
        gaps = []
        min_threshold, max_threshold = IMPACT_THRESHOLDS["keyword"]

        for keyword in keywords:
            entries = [competitor.keyword(keyword) for competitor in competitors]
            entries = [entry for entry in entries if entry]
            # Skip keywords with no competitor data
            if not entries:
                continue

            competitor = {
                name: sum(as_number(entry.get(name)) or 0.0 for entry in entries) / len(entries)
                for name in KEYWORD_FIELDS
            }
            importance = competitor["importanceScore"]
            client_data = client.keyword(keyword)
            client_pages = as_number(client_data.get("pages")) if client_data else None

            if not client_data or not client_pages:
                gaps.append(Gap(
                    category="keywords",
                    title=f'Missing Keyword: "{keyword}"',
                    description=(
                        f'Your site does not use the keyword "{keyword}" which appears on '
                        f"{competitor['density']:.0f}% of competitor pages with an importance "
                        f"score of {importance:.0f}/100."
                    ),
                    impact_score=calculate_impact_score(importance, min_threshold, max_threshold),
                    data=GapData(0.0, competitor["density"], competitor["density"], unit="% density"),
                ))
                continue

            client_density = as_number(client_data.get("density")) or 0.0
            client_in_title = as_number(client_data.get("inTitle")) or 0.0

            if client_density < competitor["density"] * KEYWORD_DENSITY_RATIO:
                gaps.append(Gap(
                    category="keywords",
                    title=f'Underutilized Keyword: "{keyword}"',
                    description=(
                        f'Your site uses the keyword "{keyword}" on only {client_density:.0f}% of pages, '
                        f"compared to {competitor['density']:.0f}% for competitors."
                    ),
                    impact_score=calculate_impact_score(
                        importance * UNDERUTILIZED_IMPORTANCE_FACTOR, min_threshold, max_threshold
                    ),
                    data=GapData(client_density, competitor["density"],
                                 competitor["density"] - client_density, unit="% density"),
                ))
            elif client_in_title < competitor["inTitle"] * KEYWORD_TITLE_RATIO:
                gaps.append(Gap(
                    category="keywords",
                    title=f'Keyword Missing from Titles: "{keyword}"',
                    description=(
                        f'Your site uses the keyword "{keyword}" in titles on only {client_in_title:.0f} '
                        f"pages, compared to {competitor['inTitle']:.0f} for competitors."
                    ),
                    impact_score=calculate_impact_score(
                        importance * TITLE_ABSENT_IMPORTANCE_FACTOR, min_threshold, max_threshold
                    ),
                    data=GapData(client_in_title, competitor["inTitle"],
                                 competitor["inTitle"] - client_in_title, unit="titles"),
                ))

        return gaps

    def _performance_gaps(self, client: SiteSummary, competitors: List[SiteSummary]) -> List[Gap]:
        gaps = []

        for metric, title, label in PERFORMANCE_RULES:
            client_value = client.metric("averagePerformance", metric)
            competitor_value = _competitor_average(competitors, "averagePerformance", metric)
            if client_value is None or not competitor_value:
                continue

            if client_value > competitor_value * PERFORMANCE_SLOWDOWN_RATIO:
                difference = client_value - competitor_value
                percent = difference / competitor_value * 100
                gaps.append(Gap(
                    category="performance",
                    title=title,
                    description=(
                        f"Your average {label} is {client_value:.2f}ms, which is {percent:.1f}% slower "
                        f"than your competitors ({competitor_value:.2f}ms)."
                    ),
                    impact_score=calculate_impact_score(percent, *IMPACT_THRESHOLDS["performance"]),
                    data=GapData(client_value, competitor_value, difference, unit="ms"),
                ))

        return gaps

    def _on_page_gaps(self, client: SiteSummary, competitors: List[SiteSummary]) -> List[Gap]:
        gaps = []

        # Image alt text coverage
        if client.section("images") is not None:
            with_alt = client.metric("images", "withAlt") or 0.0
            without_alt = client.metric("images", "withoutAlt") or 0.0
            total = with_alt + without_alt
            client_percent = with_alt / total * 100 if total > 0 else 0.0

            with_images = [c for c in competitors if c.section("images") is not None]
            if with_images:
                avg_with = sum(c.metric("images", "withAlt") or 0.0 for c in with_images) / len(with_images)
                avg_without = sum(c.metric("images", "withoutAlt") or 0.0 for c in with_images) / len(with_images)
                competitor_total = avg_with + avg_without
                competitor_percent = avg_with / competitor_total * 100 if competitor_total > 0 else 0.0

                if client_percent < competitor_percent * ALT_TEXT_RATIO:
                    difference = competitor_percent - client_percent
                    gaps.append(Gap(
                        category="onPage",
                        title="Poor Image Alt Text Usage",
                        description=(
                            f"Only {client_percent:.1f}% of your images have alt text, "
                            f"compared to {competitor_percent:.1f}% for competitors."
                        ),
                        impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["alt_text"]),
                        data=GapData(client_percent, competitor_percent, difference, unit="% with alt text"),
                    ))

        # Internal links per page
        client_internal = client.metric("links", "internal")
        if client_internal is not None:
            client_per_page = client_internal / (client.pages_analyzed or 1)

            internal_counts = []
            page_counts = []
            for competitor in competitors:
                internal = competitor.metric("links", "internal")
                pages = competitor.pages_analyzed
                if internal is None or not pages:
                    continue
                internal_counts.append(internal)
                page_counts.append(pages)

            if page_counts:
                competitor_per_page = (
                    (sum(internal_counts) / len(internal_counts)) / (sum(page_counts) / len(page_counts))
                )
                if competitor_per_page > 0 and client_per_page < competitor_per_page * INTERNAL_LINKS_RATIO:
                    difference = competitor_per_page - client_per_page
                    percent = difference / competitor_per_page * 100
                    gaps.append(Gap(
                        category="onPage",
                        title="Insufficient Internal Linking",
                        description=(
                            f"Your pages have an average of {client_per_page:.1f} internal links per page, "
                            f"compared to {competitor_per_page:.1f} for competitors."
                        ),
                        impact_score=calculate_impact_score(percent, *IMPACT_THRESHOLDS["internal_links"]),
                        data=GapData(client_per_page, competitor_per_page, difference, unit="links per page"),
                    ))

        return gaps

    def _structure_gaps(self, client: SiteSummary, competitors: List[SiteSummary]) -> List[Gap]:
        client_depth = client.metric("structure", "averageDepth") or 0.0
        competitor_depth = _competitor_average(competitors, "structure", "averageDepth") or 0.0

        if client_depth > 0 and competitor_depth > 0 and client_depth > competitor_depth * DEPTH_RATIO:
            difference = client_depth - competitor_depth
            return [Gap(
                category="structure",
                title="Excessive Site Depth",
                description=(
                    f"Your site has an average depth of {client_depth:.1f} levels, "
                    f"compared to {competitor_depth:.1f} for competitors."
                ),
                impact_score=calculate_impact_score(difference, *IMPACT_THRESHOLDS["depth"]),
                data=GapData(client_depth, competitor_depth, difference, unit="levels"),
            )]
        return []

    # =========================================================================
    # Opportunities
    # =========================================================================

    def _build_opportunities(self, gaps: Dict[str, List[Gap]]) -> List[Opportunity]:
        """Bundle gaps into themed opportunities (highest-impact gaps first)."""
        opportunities = []

        for template in OPPORTUNITY_TEMPLATES:
            ranked = sort_by_impact(gaps.get(template["gap_category"], []))
            members = [gap for gap in ranked if template["match"] in gap.title]
            if not members:
                continue

            opportunities.append(Opportunity(
                title=template["title"],
                description=template["description"],
                category=template["category"],
                impact_score=max(gap.impact_score for gap in members),
                actions=list(template["actions"]),
                related_gaps=[gap.title for gap in members],
            ))

        self.logger.info(f"Generated {len(opportunities)} opportunities from gap analysis")
        return opportunities


# Module-level singleton
_gap_scorer_instance = None


def get_gap_scorer() -> GapScorer:
    """Get or create the singleton GapScorer instance."""
    global _gap_scorer_instance
    if _gap_scorer_instance is None:
        _gap_scorer_instance = GapScorer()
    return _gap_scorer_instance
