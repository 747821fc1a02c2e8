"""Calendar helpers shared by the quest engine.

Stored timestamps are ISO instants; "today", "yesterday" and "this week" are
always judged on the local calendar of the `now` being evaluated.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def local_now() -> datetime:
    """Current time as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def align(timestamp: datetime, now: datetime) -> datetime:
    """Express timestamp in the same timezone (or naivety) as now."""
    if timestamp.tzinfo is None and now.tzinfo is None:
        return timestamp
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=now.tzinfo)
    if now.tzinfo is None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp.astimezone(now.tzinfo)


def local_date(timestamp: datetime, now: datetime) -> date:
    return align(timestamp, now).date()


def is_same_day(timestamp: datetime, now: datetime) -> bool:
    return local_date(timestamp, now) == now.date()


def is_yesterday(timestamp: datetime, now: datetime) -> bool:
    return local_date(timestamp, now) == now.date() - timedelta(days=1)


def week_start(now: datetime) -> datetime:
    """Monday 00:00 of the week containing now, in now's timezone."""
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def sunday_based_weekday(now: datetime) -> int:
    """Day index with Sunday = 0 through Saturday = 6."""
    return (now.weekday() + 1) % 7


def elapsed_seconds(since: datetime, now: datetime) -> float:
    return (now - align(since, now)).total_seconds()
