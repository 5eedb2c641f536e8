"""
Metrics Providers

Sources of per-site crawl summaries for the analysis services:
- StaticMetricsProvider: in-memory documents (tests, pre-crawled data)
- JsonDirectoryMetricsProvider: one <domain>.json crawler export per site
- HttpMetricsProvider: crawler API at {base_url}/sites/{domain}/summary

Providers never raise for an unavailable site; they return a SiteSummary
flagged with `error`, which the analysis services skip.

Usage:
    from competitor_intel.services.metrics_provider import (
        JsonDirectoryMetricsProvider,
        collect_site_summaries,
    )

    provider = JsonDirectoryMetricsProvider("data/competitor_intel")
    client, competitors = collect_site_summaries(provider, "example.com", ["a.com", "b.com"])
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import requests

from runner.logging_setup import get_logger
from competitor_intel.config import HTTP_TIMEOUT, METRICS_DATA_DIR
from competitor_intel.models import SiteSummary


class MetricsProvider(ABC):
    """Capability that returns the crawl summary for a domain."""

    @abstractmethod
    def fetch_site_summary(self, domain: str) -> SiteSummary:
        """
        Fetch the summary for one site.

        Args:
            domain: Site domain (e.g. "example.com")

        Returns:
            SiteSummary, with `error` set when the site is unavailable
        """
        pass


class StaticMetricsProvider(MetricsProvider):
    """Serves summaries from a {domain: document} mapping."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None):
        self.documents = dict(documents or {})

    def fetch_site_summary(self, domain: str) -> SiteSummary:
        document = self.documents.get(domain)
        if document is None:
            return SiteSummary.failed(domain, f"No metrics available for {domain}")
        return SiteSummary.from_dict(domain, document)


class JsonDirectoryMetricsProvider(MetricsProvider):
    """Reads crawler exports stored as <directory>/<domain>.json."""

    def __init__(self, directory: str = METRICS_DATA_DIR):
        self.directory = Path(directory)
        self.logger = get_logger("JsonDirectoryMetricsProvider")

    def fetch_site_summary(self, domain: str) -> SiteSummary:
        path = self.directory / f"{domain}.json"
        if not path.exists():
            self.logger.warning(f"No metrics file for {domain} at {path}")
            return SiteSummary.failed(domain, f"Metrics file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read metrics for {domain}: {e}")
            return SiteSummary.failed(domain, f"Invalid metrics file {path}: {e}")

        if not isinstance(document, dict):
            return SiteSummary.failed(domain, f"Invalid metrics file {path}: expected an object")
        return SiteSummary.from_dict(domain, document)


class HttpMetricsProvider(MetricsProvider):
    """Fetches summaries from the crawler's HTTP API."""

    def __init__(self, base_url: str, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger("HttpMetricsProvider")

    def summary_url(self, domain: str) -> str:
        return f"{self.base_url}/sites/{domain}/summary"

    def fetch_site_summary(self, domain: str) -> SiteSummary:
        url = self.summary_url(domain)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            document = response.json()

        except requests.exceptions.Timeout:
            self.logger.warning(f"Timeout fetching metrics for {domain} ({url})")
            return SiteSummary.failed(domain, f"Timeout after {self.timeout}s")

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            self.logger.warning(f"HTTP {status} fetching metrics for {domain}")
            return SiteSummary.failed(domain, f"HTTP error {status}")

        # JSONDecodeError subclasses RequestException, so it must be caught first
        except requests.exceptions.JSONDecodeError as e:
            self.logger.warning(f"Invalid JSON in metrics response for {domain}: {e}")
            return SiteSummary.failed(domain, "Invalid JSON response")

        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Request failed for {domain}: {e}")
            return SiteSummary.failed(domain, str(e))

        if not isinstance(document, dict):
            return SiteSummary.failed(domain, "Invalid metrics response: expected an object")
        return SiteSummary.from_dict(domain, document)


def collect_site_summaries(
    provider: MetricsProvider,
    client_domain: Optional[str],
    competitor_domains: List[str],
) -> Tuple[Optional[SiteSummary], Dict[str, SiteSummary]]:
    """
    Fetch the client and competitor summaries.

    Returns:
        (client summary or None when no client domain is given, {domain: summary})
    """
    client = provider.fetch_site_summary(client_domain) if client_domain else None
    competitors = {domain: provider.fetch_site_summary(domain) for domain in competitor_domains}
    return client, competitors
