"""
TidyQuest — Data Models.

Everything here is persisted as JSON in the local key-value store, so the
models double as the storage contract: pydantic validates what comes back
from disk and fills in defaults for fields added after a record was written.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# ---------------------------------------------------------------------------
# Enumerations (stored as plain strings)
# ---------------------------------------------------------------------------

QUEST_CATEGORIES = (
    "daily",
    "weekly",
    "monthly",
    "seasonal",
    "speedClean",
    "deepClean",
    "declutter",
    "laundry",
    "pet",
)

QUEST_FREQUENCIES = ("daily", "weekly", "monthly", "quarterly", "yearly", "adhoc")

ROOMS = (
    "kitchen",
    "bathroom",
    "bedroom",
    "livingRoom",
    "office",
    "laundryRoom",
    "garage",
    "entryway",
    "storage",
    "outdoor",
    "playroom",
    "wholeHome",
)

NAMED_ROOM_TYPES = ("bedroom", "bathroom", "kitchen", "livingRoom", "entryway", "petArea")

SPACE_FEELINGS = ("overwhelmed", "frustrated", "hopeful", "motivated")
CLEANING_STRUGGLES = ("starting", "finishing", "consistency", "motivation", "time", "deciding")
ENERGY_LEVELS = ("veryLow", "low", "medium", "high")
APP_TONES = ("gentle", "practical", "playful")
FLOOR_COUNTS = ("one", "two", "threeOrMore")
WINDOW_AMOUNTS = ("few", "average", "lots")

_PREFERENCE_CHOICES = {
    "feeling_about_space": SPACE_FEELINGS,
    "main_struggle": CLEANING_STRUGGLES,
    "energy_level": ENERGY_LEVELS,
    "preferred_tone": APP_TONES,
}


# ---------------------------------------------------------------------------
# Quest catalog entities (read-only)
# ---------------------------------------------------------------------------


class QuestStep(BaseModel):
    """One instruction inside a quest."""

    model_config = ConfigDict(frozen=True)

    id: str
    instruction: str
    explanation: str | None = None
    duration: int | None = None  # minutes


class Quest(BaseModel):
    """A cleaning quest from the catalog. Never mutated after load.

    JSON example:
    {
        "id": "monday-kitchen",
        "title": "Monday Kitchen Reset",
        "subtitle": "Start the week fresh",
        "category": "weekly",
        "frequency": "weekly",
        "duration": 20,
        "steps": [{"id": "s1", "instruction": "Clear the counters"}],
        "room": "kitchen"
    }
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    subtitle: str = ""
    category: str
    frequency: str
    duration: int = Field(gt=0)  # minutes
    steps: list[QuestStep] = Field(default_factory=list)
    room: str | None = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if v not in QUEST_CATEGORIES:
            raise ValueError(f"Unknown quest category: {v!r}")
        return v

    @field_validator("frequency")
    @classmethod
    def check_frequency(cls, v: str) -> str:
        if v not in QUEST_FREQUENCIES:
            raise ValueError(f"Unknown quest frequency: {v!r}")
        return v

    @field_validator("room")
    @classmethod
    def check_room(cls, v: str | None) -> str | None:
        if v is not None and v not in ROOMS:
            raise ValueError(f"Unknown room: {v!r}")
        return v


# ---------------------------------------------------------------------------
# User profile
# ---------------------------------------------------------------------------


class NamedRoom(BaseModel):
    """A concrete room in the user's home, e.g. "Kids' Bedroom"."""

    id: str
    type: str
    name: str
    last_cleaned: datetime | None = None
    last_deep_cleaned: datetime | None = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        if v not in NAMED_ROOM_TYPES:
            raise ValueError(f"Unknown named room type: {v!r}")
        return v


class HomeConfig(BaseModel):
    bedrooms: int = Field(default=1, ge=0)      # 0 = studio
    bathrooms: float = Field(default=1, ge=0)   # 1.5 = one full bath + a half bath
    floors: str = "one"
    window_amount: str = "average"
    has_pets: bool = False
    named_rooms: list[NamedRoom] = Field(default_factory=list)

    @field_validator("floors")
    @classmethod
    def check_floors(cls, v: str) -> str:
        if v not in FLOOR_COUNTS:
            raise ValueError(f"Unknown floor count: {v!r}")
        return v

    @field_validator("window_amount")
    @classmethod
    def check_window_amount(cls, v: str) -> str:
        if v not in WINDOW_AMOUNTS:
            raise ValueError(f"Unknown window amount: {v!r}")
        return v


class UserProfile(BaseModel):
    """The single profile of this installation.

    Preference fields stay None until onboarding fills them in.
    """

    has_completed_onboarding: bool = False

    # Emotional preferences
    feeling_about_space: str | None = None
    main_struggle: str | None = None
    energy_level: str | None = None
    preferred_tone: str | None = None

    home_config: HomeConfig = Field(default_factory=HomeConfig)

    # Stats
    quests_completed: int = 0
    total_minutes_cleaned: int = 0
    current_streak: int = 0
    longest_streak: int = 0

    # Points
    total_points: int = 0
    weekly_points: int = 0
    weekly_points_reset_date: datetime | None = None

    # Community access
    has_community_access: bool = False
    is_community_access_active: bool = False
    community_unlock_date: datetime | None = None

    external_auth_id: str | None = None

    @field_validator("feeling_about_space", "main_struggle", "energy_level", "preferred_tone")
    @classmethod
    def check_preference(cls, v: str | None, info: ValidationInfo) -> str | None:
        allowed = _PREFERENCE_CHOICES[info.field_name]
        if v is not None and v not in allowed:
            raise ValueError(f"Unknown {info.field_name}: {v!r}")
        return v


# ---------------------------------------------------------------------------
# Progress records
# ---------------------------------------------------------------------------


class CleaningSession(BaseModel):
    """One completed quest with the time it actually took."""

    quest_id: str
    quest_title: str
    date: date             # calendar day of completion
    actual_minutes: int
    completed_at: datetime


class QuestProgress(BaseModel):
    """Lightweight checkpoint of the quest in progress."""

    quest_id: str
    current_step_index: int = 0
    started_at: datetime   # start of the current step


class PausedQuest(BaseModel):
    """Snapshot of a quest the user stepped away from."""

    quest: Quest
    current_step_index: int
    room_id: str | None = None
    paused_at: datetime
    step_started_at: datetime
    quest_started_at: datetime
