"""Points policy — how many points a quest is worth and what they unlock."""

from __future__ import annotations

from dataclasses import dataclass

_CATEGORY_POINTS = {
    "daily": 100,
    "weekly": 150,
    "monthly": 250,
    "seasonal": 250,
    "deepClean": 300,
    "declutter": 200,
    "laundry": 150,
    "pet": 150,
}

_DEFAULT_POINTS = 100
_SPEED_CLEAN_CAP = 200


@dataclass(frozen=True)
class PointsPolicy:
    """Thresholds for the community bonfire."""

    community_unlock_threshold: int = 300   # lifetime points to unlock
    weekly_minimum_for_access: int = 100    # points per week to stay active


DEFAULT_POLICY = PointsPolicy()


def compute_quest_points(category: str, duration: int | None = None) -> int:
    """Points earned for completing a quest of the given category.

    Speed cleans scale with duration: 5 min = 110, capped at 200, and 100
    when the duration is unknown. Unknown categories are worth 100.
    """
    if category == "speedClean":
        if not duration:
            return _DEFAULT_POINTS
        return min(_SPEED_CLEAN_CAP, _DEFAULT_POINTS + (duration // 5) * 10)
    return _CATEGORY_POINTS.get(category, _DEFAULT_POINTS)
