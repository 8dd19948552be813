"""
Month key helpers.

A month key is a ``YYYY-MM`` string. Dates are bucketed by their UTC calendar
date: aware datetimes are converted to UTC, naive ones are taken as UTC.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional, Tuple

_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")


def parse_month(key: str) -> Optional[Tuple[int, int]]:
    """Return ``(year, month)`` for a valid ``YYYY-MM`` key, else None."""
    if not isinstance(key, str):
        return None
    match = _MONTH_RE.fullmatch(key)
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return year, month


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(key: str, offset: int) -> Optional[str]:
    """Move a month key by ``offset`` calendar months (negative goes back)."""
    parsed = parse_month(key)
    if parsed is None:
        return None
    year, month = parsed
    index = year * 12 + (month - 1) + offset
    return format_month(index // 12, index % 12 + 1)


def previous_month(key: str) -> Optional[str]:
    return shift_month(key, -1)


def parse_date(value) -> Optional[date]:
    """Parse an ISO date / datetime string to its UTC calendar date."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def month_of(value) -> Optional[str]:
    """Month key of a transaction date, or None when it can't be parsed."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return format_month(parsed.year, parsed.month)


def current_month(now: Optional[datetime] = None) -> str:
    # Only the HTTP layer calls this; the analyzer always takes the month explicitly.
    now = now or datetime.now(timezone.utc)
    return format_month(now.year, now.month)
