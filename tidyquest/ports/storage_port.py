"""Storage port — abstract async key-value store.

The persistence gateway depends on this protocol, never on a specific
backend. Values are JSON strings.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Abstract key-value interface used by the persistence gateway."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def multi_remove(self, keys: list[str]) -> None: ...
