"""
Pytest configuration and shared fixtures for competitor analysis tests.

Provides crawler-style site documents for a client, two competitors and a
competitor whose crawl failed.
"""

import copy
import os

import pytest

from competitor_intel.models import SiteSummary


# Test markers
def pytest_configure(config):
    """Register custom markers and keep test runs off the log directory."""
    os.environ.setdefault("COMPETITOR_LOG_TO_FILE", "false")

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


CLIENT_DOCUMENT = {
    "domain": "client.com",
    "summary": {
        "pagesAnalyzed": 20,
        "seoHealth": {
            "missingTitlesPercent": 20,
            "missingDescriptionsPercent": 30,
            "hasSchemaMarkupPercent": 10,
            "hasCanonicalPercent": 50,
            "hasMobileViewportPercent": 90,
        },
        "contentStats": {
            "averageTitleLength": 25,
            "averageDescriptionLength": 90,
            "averageContentLength": 400,
            "headingsDistribution": {"h1": 12, "h2": 30},
        },
        "averagePerformance": {
            "load": 3100,
            "domContentLoaded": 1500,
            "firstPaint": 900,
        },
    },
    "seo": {
        "images": {"withAlt": 30, "withoutAlt": 70},
        "links": {"internal": 100, "external": 20},
    },
    "structure": {
        "averageDepth": 4.5,
        "categoryRatio": 0.3,
        "orphanedPagesPercent": 15,
    },
    "keywordAnalysis": {
        "pressure washing": {
            "occurrences": 5,
            "pages": 2,
            "inTitle": 0,
            "inDescription": 1,
            "inHeadings": 1,
            "density": 1.0,
            "importanceScore": 40,
        },
    },
}

COMPETITOR_A_DOCUMENT = {
    "domain": "a.com",
    "summary": {
        "pagesAnalyzed": 20,
        "seoHealth": {
            "missingTitlesPercent": 2,
            "missingDescriptionsPercent": 5,
            "hasSchemaMarkupPercent": 60,
            "hasCanonicalPercent": 90,
            "hasMobileViewportPercent": 100,
        },
        "contentStats": {
            "averageTitleLength": 55,
            "averageDescriptionLength": 150,
            "averageContentLength": 1500,
            "headingsDistribution": {"h1": 19, "h2": 60},
        },
        "averagePerformance": {
            "load": 2400,
            "domContentLoaded": 1200,
            "firstPaint": 800,
        },
    },
    "seo": {
        "images": {"withAlt": 90, "withoutAlt": 10},
        "links": {"internal": 400, "external": 40},
    },
    "structure": {
        "averageDepth": 2.5,
        "categoryRatio": 0.6,
        "orphanedPagesPercent": 3,
    },
    "keywordAnalysis": {
        "pressure washing": {
            "occurrences": 40,
            "pages": 15,
            "inTitle": 10,
            "inDescription": 8,
            "inHeadings": 12,
            "density": 4.0,
            "importanceScore": 80,
        },
        "roof cleaning": {
            "occurrences": 20,
            "pages": 8,
            "inTitle": 4,
            "inDescription": 3,
            "inHeadings": 5,
            "density": 3.0,
            "importanceScore": 60,
        },
    },
}

COMPETITOR_B_DOCUMENT = {
    "domain": "b.com",
    "summary": {
        "pagesAnalyzed": 20,
        "seoHealth": {
            "missingTitlesPercent": 2,
            "missingDescriptionsPercent": 5,
            "hasSchemaMarkupPercent": 60,
            "hasCanonicalPercent": 90,
            "hasMobileViewportPercent": 100,
        },
        "contentStats": {
            "averageTitleLength": 55,
            "averageDescriptionLength": 150,
            "averageContentLength": 1500,
            "headingsDistribution": {"h1": 19, "h2": 50},
        },
        "averagePerformance": {
            "load": 2600,
            "domContentLoaded": 1200,
            "firstPaint": 800,
        },
    },
    "seo": {
        "images": {"withAlt": 90, "withoutAlt": 10},
        "links": {"internal": 400, "external": 40},
    },
    "structure": {
        "averageDepth": 2.5,
        "categoryRatio": 0.6,
        "orphanedPagesPercent": 3,
    },
    "keywordAnalysis": {
        "pressure washing": {
            "occurrences": 40,
            "pages": 15,
            "inTitle": 10,
            "inDescription": 8,
            "inHeadings": 12,
            "density": 4.0,
            "importanceScore": 80,
        },
        "roof cleaning": {
            "occurrences": 20,
            "pages": 8,
            "inTitle": 4,
            "inDescription": 3,
            "inHeadings": 5,
            "density": 3.0,
            "importanceScore": 60,
        },
    },
}


@pytest.fixture
def client_document():
    return copy.deepcopy(CLIENT_DOCUMENT)


@pytest.fixture
def competitor_documents():
    return {
        "a.com": copy.deepcopy(COMPETITOR_A_DOCUMENT),
        "b.com": copy.deepcopy(COMPETITOR_B_DOCUMENT),
    }


@pytest.fixture
def client_summary(client_document):
    return SiteSummary.from_dict("client.com", client_document)


@pytest.fixture
def competitor_summaries(competitor_documents):
    return {
        domain: SiteSummary.from_dict(domain, document)
        for domain, document in competitor_documents.items()
    }


@pytest.fixture
def errored_competitor():
    return SiteSummary.failed("down.com", "Crawl failed: connection refused")


@pytest.fixture
def make_summary():
    """Build a SiteSummary from keyword sections, e.g. make_summary("x.com", seoHealth={...})."""
    def _make(domain, pages=20, seo=None, structure=None, keywords=None, **summary_sections):
        summary = {"pagesAnalyzed": pages}
        summary.update(summary_sections)
        return SiteSummary.from_dict(domain, {
            "summary": summary,
            "seo": seo or {},
            "structure": structure or {},
            "keywordAnalysis": keywords or {},
        })
    return _make
