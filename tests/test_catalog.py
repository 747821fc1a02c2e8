"""Tests for tidyquest.data.catalog — the read-only quest catalog."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from conftest import make_quest
from tidyquest.data.catalog import QuestCatalog, load_catalog

_SHIPPED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "quests.json"


class TestQuestCatalog:
    def test_preserves_order(self, catalog):
        ids = [q.id for q in catalog]
        assert ids[0] == "morning-dishes"
        assert ids[-1] == "deep-bath"
        assert len(catalog) == 9

    def test_by_id(self, catalog):
        assert catalog.by_id("monday-kitchen").title == "Monday Kitchen Reset"
        assert catalog.by_id("missing") is None
        assert "monday-kitchen" in catalog

    def test_by_category(self, catalog):
        weekly = catalog.by_category("weekly")
        assert len(weekly) == 5
        assert all(q.category == "weekly" for q in weekly)

    def test_by_max_duration(self, catalog):
        ids = {q.id for q in catalog.by_max_duration(10)}
        assert ids == {"morning-dishes", "five-min-tidy"}

    def test_by_room(self, catalog):
        ids = [q.id for q in catalog.by_room("kitchen")]
        assert ids == ["monday-kitchen", "friday-fridge"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            QuestCatalog([make_quest("a"), make_quest("a")])


class TestLoadCatalog:
    def test_loads_json_file(self, tmp_path):
        path = tmp_path / "quests.json"
        path.write_text(json.dumps([
            {"id": "a", "title": "A", "category": "daily", "frequency": "daily", "duration": 5},
            {"id": "b", "title": "B", "category": "weekly", "frequency": "weekly", "duration": 20},
        ]))
        catalog = load_catalog(path)
        assert [q.id for q in catalog] == ["a", "b"]

    def test_malformed_quest_raises(self, tmp_path):
        path = tmp_path / "quests.json"
        path.write_text(json.dumps([{"id": "a", "title": "A", "category": "nope", "frequency": "daily", "duration": 5}]))
        with pytest.raises(ValidationError):
            load_catalog(path)

    def test_shipped_catalog_is_valid(self):
        catalog = load_catalog(_SHIPPED_CATALOG)
        assert len(catalog) > 0
        weekday_titles = [q.title for q in catalog.by_category("weekly")]
        for day in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday"):
            assert any(day in t for t in weekday_titles)
