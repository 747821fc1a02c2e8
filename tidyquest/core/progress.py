"""Progress rules — pure business logic behind quest completion.

Streaks, weekly point resets, reward bookkeeping and community gating.
Every function takes `now` explicitly and returns updated copies; nothing
here touches storage.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from tidyquest.core.clock import elapsed_seconds, is_same_day, is_yesterday, week_start
from tidyquest.core.points import DEFAULT_POLICY, PointsPolicy
from tidyquest.data.models import NamedRoom, UserProfile

logger = logging.getLogger(__name__)


def compute_actual_minutes(
    quest_started_at: datetime | None,
    now: datetime,
    nominal_minutes: int,
) -> int:
    """Minutes actually spent on a quest, at least 1.

    Falls back to the quest's nominal duration when the start is unknown.
    Halves round up.
    """
    if quest_started_at is None:
        return nominal_minutes
    minutes = math.floor(elapsed_seconds(quest_started_at, now) / 60 + 0.5)
    return max(1, minutes)


def apply_streak(
    profile: UserProfile,
    last_active: datetime | None,
    now: datetime,
) -> UserProfile:
    """Update the daily streak for activity at `now`.

    Yesterday -> streak grows; already active today -> unchanged;
    anything else (gap or first activity) -> streak restarts at 1.
    """
    current = profile.current_streak
    longest = profile.longest_streak

    if last_active is not None and is_yesterday(last_active, now):
        current += 1
        longest = max(longest, current)
    elif last_active is not None and is_same_day(last_active, now):
        return profile
    else:
        current = 1

    return profile.model_copy(update={"current_streak": current, "longest_streak": longest})


def needs_weekly_reset(profile: UserProfile, now: datetime) -> bool:
    """True once now falls in a later Monday-based week than the last reset.

    The stored reset date is a local Monday 00:00 written in the offset of its
    own week. Its calendar date is compared as stored, so a DST change
    between the two weeks never shifts it into the previous week.
    """
    if profile.weekly_points_reset_date is None:
        return True
    return profile.weekly_points_reset_date.date() < week_start(now).date()


def apply_weekly_reset(profile: UserProfile, now: datetime) -> UserProfile:
    """Zero weekly points when a new Monday-based week has started.

    Active community access lapses with the reset and must be re-earned by
    completing quests in the new week.
    """
    if not needs_weekly_reset(profile, now):
        return profile

    start = week_start(now)
    logger.info("Weekly reset: %d points cleared (week of %s)", profile.weekly_points, start.date())
    return profile.model_copy(update={
        "weekly_points": 0,
        "weekly_points_reset_date": start,
        "is_community_access_active": False,
    })


def mark_room_cleaned(
    rooms: list[NamedRoom],
    room_id: str,
    now: datetime,
    deep: bool = False,
) -> list[NamedRoom]:
    """Return a copy of rooms with the targeted room's timestamps set."""
    updated: list[NamedRoom] = []
    found = False
    for room in rooms:
        if room.id == room_id:
            found = True
            changes = {"last_cleaned": now}
            if deep:
                changes["last_deep_cleaned"] = now
            room = room.model_copy(update=changes)
        updated.append(room)
    if not found:
        logger.warning("Room %s not found; no cleaning timestamp recorded", room_id)
    return updated


def apply_completion_rewards(
    profile: UserProfile,
    earned: int,
    actual_minutes: int,
    named_rooms: list[NamedRoom],
) -> UserProfile:
    """Add one completed quest, its minutes and its points to the profile."""
    home = profile.home_config.model_copy(update={"named_rooms": named_rooms})
    return profile.model_copy(update={
        "quests_completed": profile.quests_completed + 1,
        "total_minutes_cleaned": profile.total_minutes_cleaned + actual_minutes,
        "total_points": profile.total_points + earned,
        "weekly_points": profile.weekly_points + earned,
        "home_config": home,
    })


def apply_community_access(
    profile: UserProfile,
    now: datetime,
    policy: PointsPolicy = DEFAULT_POLICY,
) -> UserProfile:
    """Unlock the community once, and mark it active for the week.

    Unlocking happens the first time lifetime points reach the threshold.
    While unlocked, reaching the weekly minimum activates access.
    """
    changes: dict = {}
    unlocked = profile.has_community_access

    if not unlocked and profile.total_points >= policy.community_unlock_threshold:
        unlocked = True
        changes["has_community_access"] = True
        changes["community_unlock_date"] = now
        logger.info("Community unlocked at %d points", profile.total_points)

    if unlocked and profile.weekly_points >= policy.weekly_minimum_for_access:
        changes["is_community_access_active"] = True

    if not changes:
        return profile
    return profile.model_copy(update=changes)
