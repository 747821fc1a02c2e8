"""Tests for tidyquest.core.recommender — scoring and quest selection."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_quest
from tidyquest.core.recommender import QuestRecommender, completed_today, score_quest
from tidyquest.data.catalog import QuestCatalog
from tidyquest.data.models import HomeConfig, UserProfile

MONDAY = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
WEDNESDAY = datetime(2026, 10, 21, 9, 0, tzinfo=timezone.utc)
SATURDAY = datetime(2026, 10, 24, 9, 0, tzinfo=timezone.utc)
SUNDAY = datetime(2026, 10, 25, 9, 0, tzinfo=timezone.utc)

DAILY_IDS = ("morning-dishes", "night-reset")


def _done(now, *ids):
    return {qid: now - timedelta(minutes=5) for qid in ids}


@pytest.fixture
def recommender(catalog, rng):
    return QuestRecommender(catalog, rng=rng)


class TestCompletedToday:
    def test_only_same_calendar_day(self):
        completed = {
            "a": MONDAY - timedelta(hours=1),
            "b": MONDAY - timedelta(days=1),
        }
        assert completed_today(completed, MONDAY) == {"a"}


class TestScoreQuest:
    def test_morning_title_in_morning(self):
        q = make_quest("m", "Morning Dishes")
        assert score_quest(q, UserProfile(home_config=HomeConfig(bedrooms=3)), MONDAY) == 20

    def test_night_title_in_evening(self):
        q = make_quest("n", "Night Reset")
        evening = MONDAY.replace(hour=18)
        assert score_quest(q, UserProfile(home_config=HomeConfig(bedrooms=3)), evening) == 20

    def test_energy_match(self):
        profile = UserProfile(energy_level="low", home_config=HomeConfig(bedrooms=3))
        at_noon = MONDAY.replace(hour=13)
        assert score_quest(make_quest("a", "A", duration=10), profile, at_noon) == 15
        assert score_quest(make_quest("b", "B", duration=20), profile, at_noon) == 5
        assert score_quest(make_quest("c", "C", duration=21), profile, at_noon) == 0

    def test_home_size_bonus(self):
        at_noon = MONDAY.replace(hour=13)
        small = UserProfile(home_config=HomeConfig(bedrooms=1, bathrooms=1))
        medium = UserProfile(home_config=HomeConfig(bedrooms=2, bathrooms=1))
        large = UserProfile(home_config=HomeConfig(bedrooms=3, bathrooms=2))
        speed = make_quest("s", "S", category="speedClean", frequency="adhoc")
        daily = make_quest("d", "D")
        room_quest = make_quest("r", "R", category="monthly", frequency="monthly", room="kitchen")

        assert score_quest(speed, small, at_noon) == 10
        assert score_quest(daily, medium, at_noon) == 10
        assert score_quest(room_quest, large, at_noon) == 10
        assert score_quest(daily, large, at_noon) == 0

    def test_weekly_on_weekend(self):
        q = make_quest("w", "Monday Kitchen", category="weekly")
        profile = UserProfile(home_config=HomeConfig(bedrooms=2))
        assert score_quest(q, profile, SATURDAY.replace(hour=13)) == 10
        assert score_quest(q, profile, SUNDAY.replace(hour=13)) == 10
        assert score_quest(q, profile, WEDNESDAY.replace(hour=13)) == 0

    def test_struggles(self):
        at_noon = MONDAY.replace(hour=13)
        home = HomeConfig(bedrooms=3)
        short = make_quest("a", "A", duration=10, steps=6)
        few_steps = make_quest("b", "B", duration=30, steps=5)

        starting = UserProfile(main_struggle="starting", home_config=home)
        assert score_quest(few_steps, starting, at_noon) == 15
        assert score_quest(short, starting, at_noon) == 0

        finishing = UserProfile(main_struggle="finishing", home_config=home)
        assert score_quest(short, finishing, at_noon) == 15
        assert score_quest(few_steps, finishing, at_noon) == 0

        deciding = UserProfile(main_struggle="deciding", home_config=home)
        assert score_quest(few_steps, deciding, at_noon) == 10

        time_struggle = UserProfile(main_struggle="time", home_config=home)
        assert score_quest(short, time_struggle, at_noon) == 0


class TestRecommend:
    def test_best_of_todays_set(self, recommender):
        rec = recommender.recommend(UserProfile(), {}, MONDAY)
        assert rec.quest.id == "morning-dishes"
        assert rec.is_catch_up is False
        assert rec.today_complete is False

    def test_evening_prefers_night_quest(self, recommender):
        rec = recommender.recommend(UserProfile(), {}, MONDAY.replace(hour=18))
        assert rec.quest.id == "night-reset"

    def test_todays_weekday_quest_included(self, recommender):
        done = _done(MONDAY, *DAILY_IDS)
        rec = recommender.recommend(UserProfile(), done, MONDAY)
        assert rec.quest.id == "monday-kitchen"
        assert rec.today_complete is False

    def test_catch_up_after_today_done(self, recommender):
        done = _done(WEDNESDAY, *DAILY_IDS, "wednesday-floors")
        rec = recommender.recommend(UserProfile(), done, WEDNESDAY)
        assert rec.is_catch_up is True
        assert rec.today_complete is True
        assert rec.quest.id in {"monday-kitchen", "tuesday-bath"}

    def test_catch_up_skips_quests_done_today(self, recommender):
        done = _done(WEDNESDAY, *DAILY_IDS, "wednesday-floors", "monday-kitchen")
        rec = recommender.recommend(UserProfile(), done, WEDNESDAY)
        assert rec.quest.id == "tuesday-bath"

    def test_saturday_catch_up_never_offers_friday(self, catalog):
        done = _done(SATURDAY, *DAILY_IDS)
        recommender = QuestRecommender(catalog, rng=random.Random(0))
        seen = set()
        for _ in range(200):
            rec = recommender.recommend(UserProfile(), done, SATURDAY)
            assert rec.is_catch_up is True
            seen.add(rec.quest.id)
        assert seen == {"monday-kitchen", "tuesday-bath", "wednesday-floors", "thursday-bed"}

    def test_monday_has_no_catch_up(self, recommender):
        done = _done(MONDAY, *DAILY_IDS, "monday-kitchen")
        rec = recommender.recommend(UserProfile(), done, MONDAY)
        assert rec.is_catch_up is False
        assert rec.today_complete is True
        assert rec.quest.id not in done

    def test_sunday_has_no_catch_up(self, recommender):
        done = _done(SUNDAY, *DAILY_IDS)
        rec = recommender.recommend(UserProfile(), done, SUNDAY)
        assert rec.is_catch_up is False
        # Weekend bonus ties with the small-home speed clean bonus; catalog order wins
        assert rec.quest.id == "monday-kitchen"

    def test_everything_done_picks_any_quest(self, recommender, catalog):
        done = _done(MONDAY, *(q.id for q in catalog))
        rec = recommender.recommend(UserProfile(), done, MONDAY)
        assert rec.quest is not None
        assert rec.today_complete is True

    def test_empty_ideal_set_is_not_complete(self, rng):
        catalog = QuestCatalog([make_quest("x", "Laundry Fold", category="laundry", frequency="adhoc")])
        rec = QuestRecommender(catalog, rng=rng).recommend(UserProfile(), {}, MONDAY)
        assert rec.today_complete is False
        assert rec.quest.id == "x"

    def test_empty_catalog(self, rng):
        rec = QuestRecommender(QuestCatalog([]), rng=rng).recommend(UserProfile(), {}, MONDAY)
        assert rec.quest is None

    def test_uses_clock_when_now_omitted(self, catalog, rng):
        recommender = QuestRecommender(catalog, rng=rng, clock=lambda: MONDAY.replace(hour=18))
        assert recommender.recommend(UserProfile(), {}).quest.id == "night-reset"


class TestQuickPicks:
    def test_quick_win_prefers_five_minutes(self, recommender):
        assert recommender.quick_win(UserProfile(), {}, MONDAY).id == "five-min-tidy"

    def test_quick_win_falls_back_to_ten_minutes(self, recommender):
        quest = recommender.quick_win(UserProfile(), _done(MONDAY, "five-min-tidy"), MONDAY)
        assert quest.id == "morning-dishes"

    def test_quick_win_prefers_speed_clean_over_other_short(self, rng):
        catalog = QuestCatalog([
            make_quest("a", "A", duration=8),
            make_quest("b", "B", category="speedClean", frequency="adhoc", duration=10),
        ])
        assert QuestRecommender(catalog, rng=rng).quick_win(UserProfile(), {}, MONDAY).id == "b"

    def test_quick_win_none_available(self, recommender):
        done = _done(MONDAY, "five-min-tidy", "morning-dishes")
        assert recommender.quick_win(UserProfile(), done, MONDAY) is None

    def test_easiest(self, recommender):
        assert recommender.easiest({}, MONDAY).id == "five-min-tidy"
        assert recommender.easiest(_done(MONDAY, "five-min-tidy"), MONDAY).id == "morning-dishes"

    def test_easiest_falls_back_to_anything(self, recommender):
        quest = recommender.easiest(_done(MONDAY, "five-min-tidy", "morning-dishes"), MONDAY)
        assert quest is not None
        assert quest.duration > 10

    def test_ad_hoc_by_room(self, recommender):
        assert recommender.ad_hoc("kitchen", 15).id == "friday-fridge"
        assert recommender.ad_hoc("kitchen", 10) is None

    def test_ad_hoc_prefers_easy_categories(self, recommender):
        quest = recommender.ad_hoc(None, 30)
        assert quest.category in ("speedClean", "daily")

    def test_ad_hoc_falls_back_to_any_category(self, recommender):
        assert recommender.ad_hoc("bathroom", 60).id in {"tuesday-bath", "deep-bath"}

    def test_random_picks_cover_candidates(self, catalog):
        recommender = QuestRecommender(catalog, rng=random.Random(7))
        seen = {recommender.ad_hoc(None, 15).id for _ in range(100)}
        assert seen == {"morning-dishes", "night-reset", "five-min-tidy"}
