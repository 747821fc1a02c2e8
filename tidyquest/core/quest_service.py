"""
TidyQuest — Quest Service.

UI-agnostic service layer that owns the running state of the app: the
user profile, completion records, and the quest session state machine.

    Idle --start--> Active --pause--> Paused --resume--> Active
                     |  ^                |
                     |  +-advance_step   +--dismiss_paused--> Idle
                     +--skip--> Idle
                     +--complete--> Idle (points, streak, rooms, community)

Every mutation is persisted through QuestStorage before the call returns.
Invalid transitions are silent no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Union

from tidyquest.core.clock import local_now
from tidyquest.core.home import (
    RoomStatus,
    classify_home_size,
    merge_missing_rooms,
    rooms_needing_attention,
)
from tidyquest.core.points import DEFAULT_POLICY, PointsPolicy, compute_quest_points
from tidyquest.core.progress import (
    apply_community_access,
    apply_completion_rewards,
    apply_streak,
    apply_weekly_reset,
    compute_actual_minutes,
    mark_room_cleaned,
)
from tidyquest.core.recommender import QuestRecommender, Recommendation
from tidyquest.data.models import (
    CleaningSession,
    HomeConfig,
    PausedQuest,
    Quest,
    QuestProgress,
    UserProfile,
)

if TYPE_CHECKING:
    from tidyquest.data.catalog import QuestCatalog
    from tidyquest.data.storage import QuestStorage
    from tidyquest.ports.community_port import CommunityLedgerPort, CommunityState

logger = logging.getLogger(__name__)

_HOME_CONFIG_FIELDS = {"bedrooms", "bathrooms", "floors", "window_amount", "has_pets"}


# ---------------------------------------------------------------------------
# Session states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    """No quest in progress and nothing paused."""


@dataclass(frozen=True)
class ActiveSession:
    """A quest in progress.

    quest_started_at is None when the session was recovered from a progress
    checkpoint after the app was killed mid-quest.
    """

    quest: Quest
    room_id: str | None
    step_index: int
    quest_started_at: datetime | None
    step_started_at: datetime


@dataclass(frozen=True)
class Paused:
    """A quest checkpointed by the user, waiting to be resumed."""

    snapshot: PausedQuest


SessionState = Union[Idle, ActiveSession, Paused]


# ---------------------------------------------------------------------------
# QuestService
# ---------------------------------------------------------------------------


class QuestService:
    """Owns profile, completion state and the quest session.

    Call load() once before anything else.
    """

    def __init__(
        self,
        storage: QuestStorage,
        catalog: QuestCatalog,
        ledger: CommunityLedgerPort | None = None,
        recommender: QuestRecommender | None = None,
        clock: Callable[[], datetime] = local_now,
        policy: PointsPolicy = DEFAULT_POLICY,
    ) -> None:
        self._storage = storage
        self._catalog = catalog
        self._ledger = ledger
        self._recommender = recommender or QuestRecommender(catalog, clock=clock)
        self._clock = clock
        self._policy = policy

        self._state: SessionState = Idle()
        self._profile = UserProfile()
        self._completed: dict[str, datetime] = {}
        self._history: list[CleaningSession] = []
        self._account_created: datetime | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active(self) -> ActiveSession | None:
        return self._state if isinstance(self._state, ActiveSession) else None

    @property
    def paused_quest(self) -> PausedQuest | None:
        return self._state.snapshot if isinstance(self._state, Paused) else None

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def completed_quests(self) -> dict[str, datetime]:
        return dict(self._completed)

    @property
    def cleaning_history(self) -> list[CleaningSession]:
        return list(self._history)

    @property
    def account_created(self) -> datetime | None:
        return self._account_created

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load persisted state, applying the weekly reset and room migration.

        A paused quest is restored as Paused. Otherwise, a leftover progress
        checkpoint (the app died mid-quest) is restored as Active.
        """
        now = self._clock()

        profile = await self._storage.load_user_profile()
        profile = apply_weekly_reset(profile, now)
        home = profile.home_config
        rooms = merge_missing_rooms(home.named_rooms, home.bedrooms, home.bathrooms, home.has_pets)
        profile = profile.model_copy(update={
            "home_config": home.model_copy(update={"named_rooms": rooms}),
        })
        await self._storage.save_user_profile(profile)
        self._profile = profile

        self._completed = await self._storage.load_completed_quests()
        self._history = await self._storage.load_cleaning_history()
        self._account_created = await self._storage.get_or_create_account_date(now)

        paused = await self._storage.load_paused_quest()
        if paused is not None:
            self._state = Paused(snapshot=paused)
            logger.info("Paused quest '%s' waiting at step %d", paused.quest.id, paused.current_step_index)
        else:
            self._state = await self._recover_checkpoint()

    async def _recover_checkpoint(self) -> SessionState:
        progress = await self._storage.load_quest_progress()
        if progress is None:
            return Idle()

        quest = self._catalog.by_id(progress.quest_id)
        if quest is None or progress.current_step_index >= max(1, len(quest.steps)):
            logger.warning("Discarding stale progress checkpoint for quest %s", progress.quest_id)
            await self._storage.clear_quest_progress()
            return Idle()

        logger.info(
            "Recovered quest '%s' at step %d from checkpoint",
            quest.id, progress.current_step_index,
        )
        return ActiveSession(
            quest=quest,
            room_id=None,
            step_index=progress.current_step_index,
            # The checkpoint's time marks the current step; it is the quest
            # start only while still on the first step
            quest_started_at=progress.started_at if progress.current_step_index == 0 else None,
            step_started_at=progress.started_at,
        )

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def update_profile(self, **changes) -> UserProfile:
        """Apply field changes to the profile and persist it.

        Raises ValueError for unknown fields or values the profile model
        rejects; nothing is saved in that case. Home layout changes go through
        update_home_config instead.
        """
        unknown = set(changes) - set(UserProfile.model_fields) | ({"home_config"} & set(changes))
        if unknown:
            raise ValueError(f"Cannot update profile fields: {sorted(unknown)}")

        self._profile = UserProfile.model_validate({**self._profile.model_dump(), **changes})
        await self._storage.save_user_profile(self._profile)
        return self._profile

    async def complete_onboarding(self) -> UserProfile:
        return await self.update_profile(has_completed_onboarding=True)

    async def update_home_config(self, **changes) -> UserProfile:
        """Change room counts, floors, windows or pets.

        Rooms the new configuration implies are appended; existing rooms are
        never removed or renamed. Raises ValueError for unknown fields or
        invalid values.
        """
        unknown = set(changes) - _HOME_CONFIG_FIELDS
        if unknown:
            raise ValueError(f"Cannot update home config fields: {sorted(unknown)}")

        home = HomeConfig.model_validate({**self._profile.home_config.model_dump(), **changes})
        rooms = merge_missing_rooms(home.named_rooms, home.bedrooms, home.bathrooms, home.has_pets)
        home = home.model_copy(update={"named_rooms": rooms})

        self._profile = self._profile.model_copy(update={"home_config": home})
        await self._storage.save_user_profile(self._profile)
        return self._profile

    async def rename_room(self, room_id: str, name: str) -> bool:
        rooms = self._profile.home_config.named_rooms
        if not any(r.id == room_id for r in rooms):
            return False

        rooms = [r.model_copy(update={"name": name}) if r.id == room_id else r for r in rooms]
        home = self._profile.home_config.model_copy(update={"named_rooms": rooms})
        self._profile = self._profile.model_copy(update={"home_config": home})
        await self._storage.save_user_profile(self._profile)
        return True

    # ------------------------------------------------------------------
    # Quest session
    # ------------------------------------------------------------------

    async def start(self, quest: Quest, room_id: str | None = None) -> ActiveSession:
        """Begin a quest, optionally for one specific room.

        Always allowed: a quest already in progress is abandoned, and a
        paused quest is discarded.
        """
        now = self._clock()
        if isinstance(self._state, Paused):
            logger.info("Discarding paused quest '%s' for new quest", self._state.snapshot.quest.id)
            await self._storage.clear_paused_quest()

        session = ActiveSession(
            quest=quest,
            room_id=room_id,
            step_index=0,
            quest_started_at=now,
            step_started_at=now,
        )
        self._state = session
        await self._storage.save_quest_progress(
            QuestProgress(quest_id=quest.id, current_step_index=0, started_at=now),
        )
        logger.info("Quest started: '%s'%s", quest.id, f" in room {room_id}" if room_id else "")
        return session

    async def advance_step(self) -> int | None:
        """Move to the next step. Returns the new step index, or None at the last step."""
        session = self.active
        if session is None or session.step_index >= len(session.quest.steps) - 1:
            logger.debug("advance_step ignored in state %s", type(self._state).__name__)
            return None

        now = self._clock()
        step_index = session.step_index + 1
        self._state = ActiveSession(
            quest=session.quest,
            room_id=session.room_id,
            step_index=step_index,
            quest_started_at=session.quest_started_at,
            step_started_at=now,
        )
        await self._storage.save_quest_progress(
            QuestProgress(quest_id=session.quest.id, current_step_index=step_index, started_at=now),
        )
        return step_index

    async def pause(self) -> PausedQuest | None:
        """Checkpoint the active quest so the user can come back to it."""
        session = self.active
        if session is None or session.quest_started_at is None:
            logger.debug("pause ignored in state %s", type(self._state).__name__)
            return None

        snapshot = PausedQuest(
            quest=session.quest,
            current_step_index=session.step_index,
            room_id=session.room_id,
            paused_at=self._clock(),
            step_started_at=session.step_started_at,
            quest_started_at=session.quest_started_at,
        )
        await self._storage.save_paused_quest(snapshot)
        await self._storage.clear_quest_progress()
        self._state = Paused(snapshot=snapshot)
        logger.info("Quest paused: '%s' at step %d", session.quest.id, session.step_index)
        return snapshot

    async def resume(self) -> ActiveSession | None:
        """Continue the paused quest at the step where it stopped.

        The quest start is kept, so time spent paused counts toward
        the minutes recorded at completion.
        """
        if not isinstance(self._state, Paused):
            logger.debug("resume ignored in state %s", type(self._state).__name__)
            return None

        snapshot = self._state.snapshot
        now = self._clock()
        session = ActiveSession(
            quest=snapshot.quest,
            room_id=snapshot.room_id,
            step_index=snapshot.current_step_index,
            quest_started_at=snapshot.quest_started_at,
            step_started_at=now,
        )
        self._state = session
        await self._storage.save_quest_progress(
            QuestProgress(
                quest_id=snapshot.quest.id,
                current_step_index=snapshot.current_step_index,
                started_at=now,
            ),
        )
        await self._storage.clear_paused_quest()
        logger.info("Quest resumed: '%s' at step %d", snapshot.quest.id, snapshot.current_step_index)
        return session

    async def dismiss_paused(self) -> bool:
        """Throw away the paused quest."""
        if not isinstance(self._state, Paused):
            return False
        await self._storage.clear_paused_quest()
        logger.info("Paused quest dismissed: '%s'", self._state.snapshot.quest.id)
        self._state = Idle()
        return True

    async def skip(self) -> bool:
        """Leave the active quest without credit."""
        session = self.active
        if session is None:
            return False
        self._state = Idle()
        await self._storage.clear_quest_progress()
        logger.info("Quest skipped: '%s'", session.quest.id)
        return True

    async def complete(self) -> int:
        """Finish the active quest. Returns the points earned (0 if nothing was completed).

        The completion record and history entry are written first; if either
        write fails, nothing is awarded, the quest is not counted as done in
        memory and the session stays active. A completion record already on
        disk is overwritten by the retry. The progress checkpoint is cleared
        only once the profile is saved.
        """
        session = self.active
        if session is None:
            logger.debug("complete ignored in state %s", type(self._state).__name__)
            return 0

        quest = session.quest
        now = self._clock()
        actual_minutes = compute_actual_minutes(session.quest_started_at, now, quest.duration)

        # 1. Completion record
        if not await self._storage.save_completed_quest(quest.id, now):
            logger.error("Quest '%s' not completed: completion record could not be saved", quest.id)
            return 0

        # 2. History
        cleaning_session = CleaningSession(
            quest_id=quest.id,
            quest_title=quest.title,
            date=now.date(),
            actual_minutes=actual_minutes,
            completed_at=now,
        )
        if not await self._storage.add_cleaning_session(cleaning_session):
            logger.error("Quest '%s' not completed: history could not be saved", quest.id)
            return 0
        self._history.append(cleaning_session)
        self._completed[quest.id] = now

        # 3. Points
        earned = compute_quest_points(quest.category, quest.duration)

        # 4. Room timestamps
        rooms = self._profile.home_config.named_rooms
        if session.room_id:
            rooms = mark_room_cleaned(rooms, session.room_id, now, deep=quest.category == "deepClean")

        # 5-7. Stats, points and community gating
        profile = apply_weekly_reset(self._profile, now)
        profile = apply_completion_rewards(profile, earned, actual_minutes, rooms)
        profile = apply_community_access(profile, now, self._policy)

        # 8. Community contribution, best effort
        if profile.has_community_access:
            await self._contribute(earned)

        # 9. Streak and persistence
        last_active = await self._storage.load_last_active_date()
        profile = apply_streak(profile, last_active, now)
        await self._storage.save_last_active_date(now)

        self._profile = profile
        self._state = Idle()
        if await self._storage.save_user_profile(profile):
            await self._storage.clear_quest_progress()
        else:
            logger.error("Profile not saved after completing '%s'; checkpoint kept", quest.id)

        logger.info(
            "Quest completed: '%s' in %d min, +%d points (total %d, streak %d)",
            quest.id, actual_minutes, earned, profile.total_points, profile.current_streak,
        )
        return earned

    async def _contribute(self, earned: int) -> None:
        if self._ledger is None:
            return
        try:
            anonymous_id = await self._storage.get_or_create_anonymous_id()
            await self._ledger.contribute(anonymous_id, earned)
        except Exception as exc:
            logger.warning("Community contribution of %d points failed: %s", earned, exc)

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def recommend(self) -> Recommendation:
        return self._recommender.recommend(self._profile, self._completed, self._clock())

    def quick_win(self) -> Quest | None:
        return self._recommender.quick_win(self._profile, self._completed, self._clock())

    def easiest(self) -> Quest | None:
        return self._recommender.easiest(self._completed, self._clock())

    def ad_hoc(self, room: str | None, max_duration: int) -> Quest | None:
        return self._recommender.ad_hoc(room, max_duration)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def home_size(self) -> str:
        return classify_home_size(self._profile.home_config)

    def actual_minutes_cleaned(self) -> int:
        """Minutes actually spent, summed over the cleaning history."""
        return sum(s.actual_minutes for s in self._history)

    def cleaning_dates(self) -> set[date]:
        return {s.date for s in self._history}

    def rooms_needing_attention(self) -> list[RoomStatus]:
        return rooms_needing_attention(self._profile.home_config.named_rooms, self._clock())

    async def community_state(self) -> CommunityState | None:
        """Current bonfire, or None when unavailable. Only for unlocked users."""
        if self._ledger is None or not self._profile.has_community_access:
            return None
        try:
            return await self._ledger.query_state()
        except Exception as exc:
            logger.warning("Could not fetch community state: %s", exc)
            return None

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    async def reset_all_data(self) -> None:
        """Wipe local progress. The anonymous community id survives."""
        await self._storage.reset_all_data()
        self._state = Idle()
        self._profile = UserProfile()
        self._completed = {}
        self._history = []
        self._account_created = None


async def open_quest_service(
    db_path: str | None = None,
    catalog_path: str | None = None,
) -> QuestService:
    """Build a QuestService from settings and load its state."""
    from tidyquest.adapters.ledger_factory import create_community_ledger
    from tidyquest.adapters.sqlite_store import SQLiteKeyValueStore
    from tidyquest.data.catalog import load_catalog
    from tidyquest.data.storage import QuestStorage

    service = QuestService(
        storage=QuestStorage(SQLiteKeyValueStore(db_path=db_path)),
        catalog=load_catalog(catalog_path),
        ledger=create_community_ledger(),
    )
    await service.load()
    return service
