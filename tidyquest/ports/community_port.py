"""Community port — abstract interface to the shared bonfire ledger.

Core modules depend on this protocol, never on a specific backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


class CommunityError(Exception):
    """Raised when any community ledger operation fails."""


@dataclass
class CommunityUser:
    anonymous_id: str
    total_points: int
    last_contribution: datetime | None = None


@dataclass
class Contribution:
    anonymous_id: str
    amount: int
    contributed_at: datetime


@dataclass
class CommunityState:
    """Snapshot of the shared bonfire."""

    position: float                      # 0-100, % warmth
    last_updated: datetime | None
    decay_rate: float                    # % per hour
    total_contributed: int
    users: list[CommunityUser] = field(default_factory=list)
    recent_contributions: list[Contribution] = field(default_factory=list)


class CommunityLedgerPort(Protocol):
    """Abstract community ledger used by the quest service."""

    async def contribute(self, anonymous_id: str, amount: int) -> None: ...

    async def query_state(self) -> CommunityState: ...
