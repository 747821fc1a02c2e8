"""
TidyQuest — Quest Recommendation Engine.

Picks the next quest to surface from the user's profile, what they already
finished today, and the time of day. Scoring is deterministic (ties go to
the quest listed first in the catalog); the catch-up, fallback and quick
pick paths choose uniformly at random among their candidates.

Day-specific weekly quests are recognized by the weekday name in their
title ("Monday Kitchen Reset" is a Monday quest). This follows how the
catalog is authored; there is no explicit weekday field on a quest.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tidyquest.core.clock import is_same_day, local_now, sunday_based_weekday
from tidyquest.core.home import classify_home_size
from tidyquest.data.catalog import QuestCatalog
from tidyquest.data.models import Quest, UserProfile

logger = logging.getLogger(__name__)

# Sunday = 0 indexing; only weekdays carry day-specific weekly quests
_DAY_QUEST_NAMES = {1: "Monday", 2: "Tuesday", 3: "Wednesday", 4: "Thursday", 5: "Friday"}
# Friday quests are never offered as catch-up
_CATCH_UP_DAYS = {1: "Monday", 2: "Tuesday", 3: "Wednesday", 4: "Thursday"}

_ENERGY_DURATION = {"veryLow": 5, "low": 10, "medium": 20, "high": 45}
_DEFAULT_ENERGY_DURATION = 15

QUICK_WIN_MAX_MINUTES = 10
EASY_MAX_MINUTES = 5
_EASY_CATEGORIES = ("speedClean", "daily")


@dataclass
class Recommendation:
    """Result of a main recommendation."""

    quest: Quest | None
    is_catch_up: bool = False
    today_complete: bool = False


def completed_today(completed: dict[str, datetime], now: datetime) -> set[str]:
    """Ids of quests whose latest completion falls on now's calendar day."""
    return {qid for qid, ts in completed.items() if is_same_day(ts, now)}


def suggested_duration(energy_level: str | None) -> int:
    return _ENERGY_DURATION.get(energy_level, _DEFAULT_ENERGY_DURATION)


def score_quest(quest: Quest, profile: UserProfile, now: datetime) -> int:
    """Additive relevance score; higher is better."""
    score = 0
    hour = now.hour
    title = quest.title.lower()

    # Time of day
    if hour < 12 and "morning" in title:
        score += 20
    elif hour >= 17 and "night" in title:
        score += 20

    # Energy level
    if profile.energy_level:
        ceiling = suggested_duration(profile.energy_level)
        if quest.duration <= ceiling:
            score += 15
        elif quest.duration <= ceiling * 2:
            score += 5

    # Home size
    size = classify_home_size(profile.home_config)
    if size == "small" and quest.category == "speedClean":
        score += 10
    elif size == "medium" and quest.category == "daily":
        score += 10
    elif size == "large" and quest.room:
        score += 10

    # Weekly quests on weekends
    if quest.frequency == "weekly" and sunday_based_weekday(now) in (0, 6):
        score += 10

    # Main struggle
    struggle = profile.main_struggle
    if struggle == "starting":
        if len(quest.steps) <= 5:
            score += 15
    elif struggle == "finishing":
        if quest.duration <= 10:
            score += 15
    elif struggle == "deciding":
        score += 10

    return score


class QuestRecommender:
    """Recommendation engine bound to a catalog and a randomness source."""

    def __init__(
        self,
        catalog: QuestCatalog,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._clock = clock

    # ------------------------------------------------------------------
    # Main recommendation
    # ------------------------------------------------------------------

    def recommend(
        self,
        profile: UserProfile,
        completed: dict[str, datetime],
        now: datetime | None = None,
    ) -> Recommendation:
        """Pick the quest to surface next.

        1. Today's ideal set (daily quests + today's weekday quest) while any
           of it is unfinished: best score wins.
        2. Then a random catch-up quest from an earlier weekday.
        3. Then the best-scoring quest not done today; if everything is done,
           any quest at random.
        """
        now = now or self._clock()
        done_today = completed_today(completed, now)
        todays = self._todays_quests(now)

        remaining = [q for q in todays if q.id not in done_today]
        today_complete = not remaining and len(done_today) > 0

        if remaining:
            return Recommendation(quest=self._best(remaining, profile, now))

        missed = self._missed_weekly_quests(now, done_today)
        if missed:
            quest = self._rng.choice(missed)
            logger.debug("Catch-up quest: %s", quest.id)
            return Recommendation(quest=quest, is_catch_up=True, today_complete=today_complete)

        available = [q for q in self._catalog if q.id not in done_today]
        if not available:
            quest = self._pick(self._catalog.all())
            return Recommendation(quest=quest, today_complete=today_complete)

        return Recommendation(
            quest=self._best(available, profile, now),
            today_complete=today_complete,
        )

    # ------------------------------------------------------------------
    # Quick picks
    # ------------------------------------------------------------------

    def quick_win(
        self,
        profile: UserProfile,
        completed: dict[str, datetime],
        now: datetime | None = None,
    ) -> Quest | None:
        """A quest of 10 minutes or less, preferring 5-minute ones, then speed cleans."""
        now = now or self._clock()
        done_today = completed_today(completed, now)
        quick = [
            q for q in self._catalog.by_max_duration(QUICK_WIN_MAX_MINUTES)
            if q.id not in done_today
        ]

        five_minute = [q for q in quick if q.duration <= EASY_MAX_MINUTES]
        if five_minute:
            return self._pick(five_minute)

        speed_clean = [q for q in quick if q.category == "speedClean"]
        if speed_clean:
            return self._pick(speed_clean)

        return self._pick(quick)

    def easiest(
        self,
        completed: dict[str, datetime],
        now: datetime | None = None,
    ) -> Quest | None:
        """The gentlest possible start, for "I don't know where to begin"."""
        now = now or self._clock()
        done_today = completed_today(completed, now)
        available = [q for q in self._catalog if q.id not in done_today]

        easy = [
            q for q in available
            if q.duration <= EASY_MAX_MINUTES and q.category in _EASY_CATEGORIES
        ]
        if easy:
            return self._pick(easy)

        short = [q for q in available if q.duration <= QUICK_WIN_MAX_MINUTES]
        if short:
            return self._pick(short)

        return self._pick(available)

    def ad_hoc(self, room: str | None, max_duration: int) -> Quest | None:
        """A quest that fits the time available, optionally for one room."""
        candidates = self._catalog.by_max_duration(max_duration)
        if room:
            candidates = [q for q in candidates if q.room == room]

        preferred = [q for q in candidates if q.category in _EASY_CATEGORIES]
        if preferred:
            return self._pick(preferred)

        return self._pick(candidates)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _todays_quests(self, now: datetime) -> list[Quest]:
        day_name = _DAY_QUEST_NAMES.get(sunday_based_weekday(now))
        todays = []
        for quest in self._catalog:
            if quest.category == "daily":
                todays.append(quest)
            elif quest.category == "weekly" and day_name and day_name in quest.title:
                todays.append(quest)
        return todays

    def _missed_weekly_quests(self, now: datetime, done_today: set[str]) -> list[Quest]:
        today = sunday_based_weekday(now)
        missed = []
        for quest in self._catalog:
            if quest.category != "weekly" or quest.id in done_today:
                continue
            if any(
                today > day and name in quest.title
                for day, name in _CATCH_UP_DAYS.items()
            ):
                missed.append(quest)
        return missed

    def _best(self, quests: list[Quest], profile: UserProfile, now: datetime) -> Quest | None:
        if not quests:
            return None
        # max() keeps the first of equal scores, i.e. catalog order
        return max(quests, key=lambda q: score_quest(q, profile, now))

    def _pick(self, quests: list[Quest]) -> Quest | None:
        if not quests:
            return None
        return self._rng.choice(quests)
