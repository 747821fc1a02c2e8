"""Home layout logic — pure derivations from the user's home configuration.

Home-size classification, default room generation, and per-room cleaning
status. No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tidyquest.core.clock import elapsed_seconds
from tidyquest.core.formatting import format_days_ago
from tidyquest.data.models import HomeConfig, NamedRoom

logger = logging.getLogger(__name__)

# Rooms not cleaned for longer than this many days are flagged as urgent
URGENT_AFTER_DAYS = 3


def classify_home_size(config: HomeConfig) -> str:
    """Return "small", "medium" or "large".

    Studios and 1-bed/1-bath homes are small; up to 2 bed and 2 bath is
    medium; anything bigger is large.
    """
    is_studio = config.bedrooms == 0
    if is_studio or (config.bedrooms == 1 and config.bathrooms == 1):
        return "small"
    if config.bedrooms <= 2 and config.bathrooms <= 2:
        return "medium"
    return "large"


def generate_room_id() -> str:
    return uuid.uuid4().hex


def generate_default_rooms(
    bedrooms: int,
    bathrooms: float,
    has_pets: bool = False,
    id_factory: Callable[[], str] = generate_room_id,
) -> list[NamedRoom]:
    """Build the default named rooms for a home.

    Order: kitchen, living room, entryway, then bedrooms, then full
    bathrooms followed by a "Half Bath" when the count is fractional, then
    a pet area.
    """
    rooms = [
        NamedRoom(id=id_factory(), type="kitchen", name="Kitchen"),
        NamedRoom(id=id_factory(), type="livingRoom", name="Living Room"),
        NamedRoom(id=id_factory(), type="entryway", name="Entryway"),
    ]

    for i in range(1, bedrooms + 1):
        name = "Bedroom" if bedrooms == 1 else f"Bedroom {i}"
        rooms.append(NamedRoom(id=id_factory(), type="bedroom", name=name))

    full_bathrooms = math.floor(bathrooms)
    has_half_bath = bathrooms % 1 != 0

    for i in range(1, full_bathrooms + 1):
        name = "Bathroom" if full_bathrooms == 1 and not has_half_bath else f"Bathroom {i}"
        rooms.append(NamedRoom(id=id_factory(), type="bathroom", name=name))

    if has_half_bath:
        rooms.append(NamedRoom(id=id_factory(), type="bathroom", name="Half Bath"))

    if has_pets:
        rooms.append(NamedRoom(id=id_factory(), type="petArea", name="Pet Area"))

    return rooms


def merge_missing_rooms(
    existing: list[NamedRoom],
    bedrooms: int,
    bathrooms: float,
    has_pets: bool = False,
    id_factory: Callable[[], str] = generate_room_id,
) -> list[NamedRoom]:
    """Append the rooms the configuration implies but the list lacks.

    Existing rooms are kept untouched (names and cleaning timestamps are
    user data). For each room type, only the generated rooms beyond the
    number already present are appended. Rooms are never removed, even
    when counts go down.
    """
    if not existing:
        return generate_default_rooms(bedrooms, bathrooms, has_pets, id_factory)

    have = Counter(room.type for room in existing)
    seen: Counter[str] = Counter()
    missing: list[NamedRoom] = []
    for room in generate_default_rooms(bedrooms, bathrooms, has_pets, id_factory):
        seen[room.type] += 1
        if seen[room.type] > have[room.type]:
            missing.append(room)

    if missing:
        logger.info("Adding %d missing rooms: %s", len(missing), [r.name for r in missing])
    return [*existing, *missing]


# ---------------------------------------------------------------------------
# Room status
# ---------------------------------------------------------------------------


@dataclass
class RoomStatus:
    """How long ago a room was cleaned, for the home screen."""

    room: NamedRoom
    cleaned_days: int | None       # None = never cleaned
    deep_cleaned_days: int | None
    cleaned_text: str
    deep_cleaned_text: str
    urgent: bool


def days_since(timestamp: datetime | None, now: datetime) -> int | None:
    """Whole days elapsed since timestamp, or None if it never happened."""
    if timestamp is None:
        return None
    return math.floor(elapsed_seconds(timestamp, now) / 86400)


def room_status(room: NamedRoom, now: datetime) -> RoomStatus:
    cleaned = days_since(room.last_cleaned, now)
    deep = days_since(room.last_deep_cleaned, now)
    return RoomStatus(
        room=room,
        cleaned_days=cleaned,
        deep_cleaned_days=deep,
        cleaned_text=format_days_ago(cleaned),
        deep_cleaned_text=format_days_ago(deep),
        urgent=cleaned is None or cleaned > URGENT_AFTER_DAYS,
    )


def rooms_needing_attention(rooms: list[NamedRoom], now: datetime) -> list[RoomStatus]:
    """Urgent rooms, most neglected first (never-cleaned rooms lead)."""
    statuses = [room_status(r, now) for r in rooms]
    statuses.sort(
        key=lambda s: math.inf if s.cleaned_days is None else s.cleaned_days,
        reverse=True,
    )
    return [s for s in statuses if s.urgent]
