"""Human-readable durations and relative times."""

from __future__ import annotations

from datetime import datetime

from tidyquest.core.clock import elapsed_seconds


def format_duration(minutes: int) -> str:
    """Format a duration: "45 min", "1 hr", "1 hr 30 min"."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours} hr"
    return f"{hours} hr {mins} min"


def format_days_ago(days: int | None, never: str = "Never") -> str:
    if days is None:
        return never
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    return f"{days}d ago"


def format_time_ago(timestamp: datetime, now: datetime) -> str:
    """Compact relative time used on the community feed: "5m ago", "2h ago"."""
    seconds = elapsed_seconds(timestamp, now)
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{days}d ago"
