"""Date-range helpers for analytics queries."""

from __future__ import annotations

from datetime import date, timedelta

DEFAULT_FROM = date(2010, 1, 1)
RECENT_ACTIVITY_DAYS = 90


def resolve_range(
    from_date: date | None, to_date: date | None, today: date | None = None
) -> tuple[date, date]:
    """Apply defaults (2010-01-01 .. today) and swap an inverted range."""
    start = from_date or DEFAULT_FROM
    end = to_date or today or date.today()
    if start > end:
        return end, start
    return start, end


def within_range(value: date, start: date, end: date) -> bool:
    return start <= value <= end


def recent_window_start(start: date, end: date, days: int = RECENT_ACTIVITY_DAYS) -> date:
    """Trailing window start, clipped so it never precedes the range start."""
    return max(end - timedelta(days=days), start)


def year_key(value: date) -> str:
    return f"{value.year:04d}"
