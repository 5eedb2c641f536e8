"""
Small date and URL helpers shared by the analysis services.
"""

import calendar
from datetime import date, datetime
from typing import Union
from urllib.parse import urlparse


def to_iso(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def parse_iso(value: Union[str, date]) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def add_months(value: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def domain_from_url(url: str) -> str:
    """Host name without a leading www., falling back to the raw string."""
    parsed = urlparse(url if "://" in url else f"//{url}")
    host = parsed.hostname
    if not host:
        return url
    return host[4:] if host.startswith("www.") else host
