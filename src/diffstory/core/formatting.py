"""Human-readable timestamps for the review viewer."""

from __future__ import annotations

from datetime import UTC, datetime


def _ago(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def format_relative(when: datetime | None, now: datetime | None = None) -> str:
    """Human-readable age of a timestamp ("5 minutes ago").

    Returns "unknown" when the timestamp is missing. Naive datetimes are
    treated as UTC.
    """
    if when is None:
        return "unknown"

    now = now or datetime.now(UTC)
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    seconds = max(0, int((now - when).total_seconds()))
    if seconds < 60:
        return _ago(seconds, "second")

    minutes = seconds // 60
    if minutes < 60:
        return _ago(minutes, "minute")

    hours = minutes // 60
    if hours < 24:
        return _ago(hours, "hour")

    days = hours // 24
    if days < 7:
        return _ago(days, "day")

    weeks = days // 7
    if weeks < 4:
        return _ago(weeks, "week")

    months = max(1, days // 30)
    if months < 12:
        return _ago(months, "month")

    return _ago(days // 365, "year")
