"""Tests for tidyquest.core.community — bonfire math."""

from datetime import datetime, timedelta, timezone

import pytest

from tidyquest.core.community import (
    apply_contribution,
    bonfire_message,
    decayed_position,
    fire_size,
    people_count,
)

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class TestApplyContribution:
    def test_hundred_points_is_one_percent(self):
        assert apply_contribution(10.0, 100) == pytest.approx(11.0)
        assert apply_contribution(0, 150) == pytest.approx(1.5)

    def test_capped_at_hundred(self):
        assert apply_contribution(99.5, 300) == 100.0


class TestDecayedPosition:
    def test_no_decay_within_grace_period(self):
        assert decayed_position(50.0, NOW - timedelta(hours=3), NOW) == 50.0

    def test_decays_after_grace_period(self):
        assert decayed_position(50.0, NOW - timedelta(hours=10), NOW) == pytest.approx(47.0)

    def test_floored_at_zero(self):
        assert decayed_position(2.0, NOW - timedelta(days=3), NOW) == 0.0

    def test_never_updated(self):
        assert decayed_position(12.0, None, NOW) == 12.0


class TestBonfireDisplay:
    def test_messages(self):
        assert bonfire_message(95).startswith("The fire is roaring")
        assert bonfire_message(5).startswith("A small flame")

    def test_fire_size(self):
        assert fire_size(0) == "ember"
        assert fire_size(10) == "small"
        assert fire_size(35) == "medium"
        assert fire_size(60) == "large"
        assert fire_size(80) == "roaring"

    def test_people_count(self):
        assert people_count(0, 0) == 0
        assert people_count(0, 5) == 1
        assert people_count(3, 30) == 4
        assert people_count(10, 75) == 6
