"""
TidyQuest — Quest Catalog.

The catalog is authored ahead of time and shipped as JSON. It is read-only:
quests are referenced by id everywhere else, and catalog order matters
(recommendation ties go to the quest listed first).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import TypeAdapter

from tidyquest.data.models import Quest

logger = logging.getLogger(__name__)

_QUEST_LIST = TypeAdapter(list[Quest])


class QuestCatalog:
    """Ordered, read-only collection of quests."""

    def __init__(self, quests: Iterable[Quest]) -> None:
        self._quests: tuple[Quest, ...] = tuple(quests)
        self._by_id = {q.id: q for q in self._quests}
        if len(self._by_id) != len(self._quests):
            raise ValueError("Quest catalog contains duplicate ids")

    def __iter__(self) -> Iterator[Quest]:
        return iter(self._quests)

    def __len__(self) -> int:
        return len(self._quests)

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._by_id

    def all(self) -> list[Quest]:
        return list(self._quests)

    def by_id(self, quest_id: str) -> Quest | None:
        return self._by_id.get(quest_id)

    def by_category(self, category: str) -> list[Quest]:
        return [q for q in self._quests if q.category == category]

    def by_max_duration(self, max_minutes: int) -> list[Quest]:
        return [q for q in self._quests if q.duration <= max_minutes]

    def by_room(self, room: str) -> list[Quest]:
        return [q for q in self._quests if q.room == room]


def load_catalog(path: str | Path | None = None) -> QuestCatalog:
    """Load and validate the quest catalog from a JSON file.

    The file holds a JSON array of quest objects. Malformed files raise:
    the catalog ships with the app, so a broken one is a build error.
    """
    if path is None:
        from tidyquest.config import settings
        path = settings.CATALOG_PATH

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    quests = _QUEST_LIST.validate_python(raw)
    logger.info("Loaded %d quests from %s", len(quests), path)
    return QuestCatalog(quests)
