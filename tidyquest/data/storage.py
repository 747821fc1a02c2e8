"""
TidyQuest — Persistence Gateway.

Typed load/save of every persisted record on top of an async key-value
store. This is a single-user, local-first app: a failed read falls back to
a safe default and a failed write is reported as False, never raised.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, TypeAdapter

from tidyquest.core.clock import local_now
from tidyquest.data.models import CleaningSession, PausedQuest, QuestProgress, UserProfile

if TYPE_CHECKING:
    from tidyquest.ports.storage_port import KeyValueStore

logger = logging.getLogger(__name__)

KEY_USER_PROFILE = "userProfile"
KEY_COMPLETED_QUESTS = "completedQuests"
KEY_QUEST_PROGRESS = "questProgress"
KEY_PAUSED_QUEST = "pausedQuest"
KEY_LAST_ACTIVE_DATE = "lastActiveDate"
KEY_ANONYMOUS_ID = "anonymousId"
KEY_CLEANING_HISTORY = "cleaningHistory"
KEY_ACCOUNT_CREATED = "accountCreated"

# Wiped by reset_all_data. The anonymous id survives a reset.
RESET_KEYS = [
    KEY_USER_PROFILE,
    KEY_COMPLETED_QUESTS,
    KEY_QUEST_PROGRESS,
    KEY_PAUSED_QUEST,
    KEY_LAST_ACTIVE_DATE,
    KEY_CLEANING_HISTORY,
    KEY_ACCOUNT_CREATED,
]

_COMPLETED = TypeAdapter(dict[str, datetime])
_HISTORY = TypeAdapter(list[CleaningSession])
_TIMESTAMP = TypeAdapter(datetime)


class QuestStorage:
    """Typed persistence for profile, completions, history and checkpoints."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    async def _write(self, key: str, payload: str, what: str) -> bool:
        try:
            await self._store.set(key, payload)
            return True
        except Exception as exc:
            logger.error("Failed to save %s: %s", what, exc)
            return False

    async def _remove(self, key: str, what: str) -> bool:
        try:
            await self._store.remove(key)
            return True
        except Exception as exc:
            logger.error("Failed to clear %s: %s", what, exc)
            return False

    @staticmethod
    def _dump(model: BaseModel) -> str:
        return model.model_dump_json()

    # ------------------------------------------------------------------
    # User profile
    # ------------------------------------------------------------------

    async def save_user_profile(self, profile: UserProfile) -> bool:
        return await self._write(KEY_USER_PROFILE, self._dump(profile), "user profile")

    async def load_user_profile(self) -> UserProfile:
        """Stored profile merged over defaults; the default profile if absent or unreadable."""
        try:
            data = await self._store.get(KEY_USER_PROFILE)
            if data:
                return UserProfile.model_validate_json(data)
        except Exception as exc:
            logger.error("Failed to load user profile: %s", exc)
        return UserProfile()

    # ------------------------------------------------------------------
    # Completed quests
    # ------------------------------------------------------------------

    async def load_completed_quests(self) -> dict[str, datetime]:
        try:
            data = await self._store.get(KEY_COMPLETED_QUESTS)
            if data:
                return _COMPLETED.validate_json(data)
        except Exception as exc:
            logger.error("Failed to load completed quests: %s", exc)
        return {}

    async def save_completed_quest(self, quest_id: str, when: datetime) -> bool:
        """Record the latest completion of a quest, replacing any earlier one."""
        # A failed read aborts the write; saving over it would erase every record
        try:
            data = await self._store.get(KEY_COMPLETED_QUESTS)
            completed = _COMPLETED.validate_json(data) if data else {}
        except Exception as exc:
            logger.error("Failed to save completed quest %s: %s", quest_id, exc)
            return False
        completed[quest_id] = when
        return await self._write(
            KEY_COMPLETED_QUESTS,
            _COMPLETED.dump_json(completed).decode(),
            f"completed quest {quest_id}",
        )

    # ------------------------------------------------------------------
    # Quest progress checkpoint
    # ------------------------------------------------------------------

    async def save_quest_progress(self, progress: QuestProgress) -> bool:
        return await self._write(KEY_QUEST_PROGRESS, self._dump(progress), "quest progress")

    async def load_quest_progress(self) -> QuestProgress | None:
        try:
            data = await self._store.get(KEY_QUEST_PROGRESS)
            if data:
                return QuestProgress.model_validate_json(data)
        except Exception as exc:
            logger.error("Failed to load quest progress: %s", exc)
        return None

    async def clear_quest_progress(self) -> bool:
        return await self._remove(KEY_QUEST_PROGRESS, "quest progress")

    # ------------------------------------------------------------------
    # Paused quest
    # ------------------------------------------------------------------

    async def save_paused_quest(self, paused: PausedQuest) -> bool:
        return await self._write(KEY_PAUSED_QUEST, self._dump(paused), "paused quest")

    async def load_paused_quest(self) -> PausedQuest | None:
        try:
            data = await self._store.get(KEY_PAUSED_QUEST)
            if data:
                return PausedQuest.model_validate_json(data)
        except Exception as exc:
            logger.error("Failed to load paused quest: %s", exc)
        return None

    async def clear_paused_quest(self) -> bool:
        return await self._remove(KEY_PAUSED_QUEST, "paused quest")

    # ------------------------------------------------------------------
    # Streak bookkeeping
    # ------------------------------------------------------------------

    async def load_last_active_date(self) -> datetime | None:
        try:
            data = await self._store.get(KEY_LAST_ACTIVE_DATE)
            if data:
                return _TIMESTAMP.validate_json(data)
        except Exception as exc:
            logger.error("Failed to load last active date: %s", exc)
        return None

    async def save_last_active_date(self, when: datetime) -> bool:
        return await self._write(
            KEY_LAST_ACTIVE_DATE, _TIMESTAMP.dump_json(when).decode(), "last active date",
        )

    # ------------------------------------------------------------------
    # Anonymous id (community identity)
    # ------------------------------------------------------------------

    async def get_or_create_anonymous_id(self) -> str:
        try:
            anonymous_id = await self._store.get(KEY_ANONYMOUS_ID)
            if not anonymous_id:
                anonymous_id = f"anon_{uuid.uuid4().hex}"
                await self._store.set(KEY_ANONYMOUS_ID, anonymous_id)
                logger.info("Created anonymous community id")
            return anonymous_id
        except Exception as exc:
            logger.error("Failed to get/create anonymous id: %s", exc)
            return f"anon_{uuid.uuid4().hex}"

    # ------------------------------------------------------------------
    # Cleaning history
    # ------------------------------------------------------------------

    async def load_cleaning_history(self) -> list[CleaningSession]:
        try:
            data = await self._store.get(KEY_CLEANING_HISTORY)
            if data:
                return _HISTORY.validate_json(data)
        except Exception as exc:
            logger.error("Failed to load cleaning history: %s", exc)
        return []

    async def add_cleaning_session(self, session: CleaningSession) -> bool:
        """Append one session to the history."""
        try:
            data = await self._store.get(KEY_CLEANING_HISTORY)
            history = _HISTORY.validate_json(data) if data else []
        except Exception as exc:
            logger.error("Failed to add cleaning session: %s", exc)
            return False
        history.append(session)
        return await self._write(
            KEY_CLEANING_HISTORY, _HISTORY.dump_json(history).decode(), "cleaning history",
        )

    async def get_cleaning_dates(self) -> set[date]:
        """Calendar days with at least one completed quest."""
        history = await self.load_cleaning_history()
        return {session.date for session in history}

    # ------------------------------------------------------------------
    # Account creation date
    # ------------------------------------------------------------------

    async def get_or_create_account_date(self, now: datetime | None = None) -> datetime:
        now = now or local_now()
        try:
            data = await self._store.get(KEY_ACCOUNT_CREATED)
            if data:
                return _TIMESTAMP.validate_json(data)
            await self._store.set(KEY_ACCOUNT_CREATED, _TIMESTAMP.dump_json(now).decode())
        except Exception as exc:
            logger.error("Failed to get/create account date: %s", exc)
        return now

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    async def reset_all_data(self) -> bool:
        try:
            await self._store.multi_remove(RESET_KEYS)
            logger.info("All local data reset")
            return True
        except Exception as exc:
            logger.error("Failed to reset data: %s", exc)
            return False
