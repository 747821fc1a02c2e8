"""Community bonfire math — pure functions shared by the ledger and the UI.

Completed quests feed a shared fire. Points raise its warmth (0-100%);
after a grace period without contributions it cools at a steady rate.
Decay is computed lazily from the last update time, never by a timer.
"""

from __future__ import annotations

from datetime import datetime

from tidyquest.core.clock import elapsed_seconds

# 100 points = 1% warmth, so a single quest makes visible progress
POINTS_PER_PERCENT = 100
MAX_POSITION = 100.0

DECAY_RATE_PER_HOUR = 0.5
GRACE_PERIOD_HOURS = 4


def apply_contribution(position: float, amount: int) -> float:
    """New warmth after contributing `amount` points, capped at 100%."""
    return min(MAX_POSITION, position + amount / POINTS_PER_PERCENT)


def decayed_position(
    position: float,
    last_updated: datetime | None,
    now: datetime,
    decay_rate: float = DECAY_RATE_PER_HOUR,
    grace_hours: float = GRACE_PERIOD_HOURS,
) -> float:
    """Warmth after cooling since the last contribution, floored at 0."""
    if last_updated is None:
        return position
    hours_since = elapsed_seconds(last_updated, now) / 3600
    decay_hours = max(0.0, hours_since - grace_hours)
    return max(0.0, position - decay_hours * decay_rate)


def bonfire_message(position: float) -> str:
    if position >= 90:
        return "The fire is roaring! Everyone's warm and cozy!"
    if position >= 70:
        return "A beautiful blaze! The warmth brings us together."
    if position >= 50:
        return "The flames are growing strong!"
    if position >= 30:
        return "A steady fire. More hands make it brighter."
    if position >= 10:
        return "Sparks are catching. Keep adding fuel!"
    return "A small flame flickers. Let's build it together."


def fire_size(position: float) -> str:
    """One of "ember", "small", "medium", "large", "roaring"."""
    if position >= 80:
        return "roaring"
    if position >= 60:
        return "large"
    if position >= 35:
        return "medium"
    if position >= 10:
        return "small"
    return "ember"


def people_count(contributors: int, position: float) -> int:
    """How many figures to draw around the fire (0 when nothing happened, max 8)."""
    if position == 0 and contributors == 0:
        return 0
    base = min(contributors, 4)
    if position >= 50:
        bonus = 2
    elif position >= 25:
        bonus = 1
    else:
        bonus = 0
    return min(8, max(1, base + bonus))
