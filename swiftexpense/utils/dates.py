"""Date helpers shared by models and services."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the database stores DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def month_start(value: date) -> date:
    return value.replace(day=1)


def shift_months(value: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``value``."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)
