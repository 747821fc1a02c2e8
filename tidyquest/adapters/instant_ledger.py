"""InstantDB community ledger — implements CommunityLedgerPort.

Talks to the InstantDB admin HTTP API that backs the community bonfire.
A contribution reads the current fire and the contributor's row, then
writes the contribution record, the new fire state and the contributor's
total in a single transact call.

Every failure (network, HTTP status, malformed payload) surfaces as
CommunityError.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import httpx

from tidyquest.core.community import DECAY_RATE_PER_HOUR, apply_contribution
from tidyquest.ports.community_port import (
    CommunityError,
    CommunityState,
    CommunityUser,
    Contribution,
)

logger = logging.getLogger(__name__)

# Attribute name as defined in the remote schema
_USER_ID_ATTR = "oderId"


def _to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _from_ms(ms: int | float | None) -> datetime | None:
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class InstantCommunityLedger:
    """InstantDB implementation of CommunityLedgerPort."""

    def __init__(
        self,
        app_id: str | None = None,
        admin_token: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        recent_limit: int | None = None,
    ) -> None:
        from tidyquest.config import settings

        self._app_id = app_id if app_id is not None else settings.INSTANT_APP_ID
        self._admin_token = admin_token if admin_token is not None else settings.INSTANT_ADMIN_TOKEN
        self._api_url = (api_url or settings.INSTANT_API_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.COMMUNITY_TIMEOUT_SECONDS
        self._recent_limit = recent_limit if recent_limit is not None else settings.RECENT_CONTRIBUTIONS_LIMIT

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._admin_token}",
            "App-Id": self._app_id,
            "Content-Type": "application/json",
        }

    async def _post(self, client: httpx.AsyncClient, path: str, payload: dict) -> dict:
        resp = await client.post(f"{self._api_url}/{path}", json=payload, headers=self._headers())
        resp.raise_for_status()
        return resp.json()

    # ------------------------------------------------------------------
    # CommunityLedgerPort
    # ------------------------------------------------------------------

    async def contribute(self, anonymous_id: str, amount: int) -> None:
        """Add points to the bonfire on behalf of an anonymous user."""
        now_ms = _to_ms(datetime.now(timezone.utc))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                data = await self._post(client, "query", {
                    "query": {
                        "communityRock": {},
                        "users": {"$": {"where": {_USER_ID_ATTR: anonymous_id}}},
                    },
                })

                rocks = data.get("communityRock") or []
                users = data.get("users") or []
                rock = rocks[0] if rocks else None
                user = users[0] if users else None

                position = apply_contribution((rock or {}).get("position") or 0, amount)

                steps: list[list] = [
                    ["update", "contributions", str(uuid.uuid4()), {
                        _USER_ID_ATTR: anonymous_id,
                        "amount": amount,
                        "contributedAt": now_ms,
                    }],
                ]

                if rock:
                    steps.append(["update", "communityRock", rock["id"], {
                        "position": position,
                        "totalContributed": (rock.get("totalContributed") or 0) + amount,
                        "lastUpdated": now_ms,
                    }])
                else:
                    steps.append(["update", "communityRock", str(uuid.uuid4()), {
                        "position": position,
                        "totalContributed": amount,
                        "lastUpdated": now_ms,
                        "decayRate": DECAY_RATE_PER_HOUR,
                    }])

                if user:
                    steps.append(["update", "users", user["id"], {
                        "totalPoints": (user.get("totalPoints") or 0) + amount,
                        "lastContributionDate": now_ms,
                    }])
                else:
                    steps.append(["update", "users", str(uuid.uuid4()), {
                        _USER_ID_ATTR: anonymous_id,
                        "totalPoints": amount,
                        "lastContributionDate": now_ms,
                    }])

                await self._post(client, "transact", {"steps": steps})
        except Exception as exc:
            raise CommunityError(f"Failed to contribute {amount} points: {exc}") from exc

        logger.info("Contributed %d points to the bonfire (warmth now %.2f%%)", amount, position)

    async def query_state(self) -> CommunityState:
        """Fetch the bonfire, all contributors and the latest contributions."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                data = await self._post(client, "query", {
                    "query": {
                        "communityRock": {},
                        "users": {},
                        "contributions": {
                            "$": {
                                "limit": self._recent_limit,
                                "order": {"serverCreatedAt": "desc"},
                            },
                        },
                    },
                })

            rocks = data.get("communityRock") or []
            rock = rocks[0] if rocks else {}
            return CommunityState(
                position=float(rock.get("position") or 0),
                last_updated=_from_ms(rock.get("lastUpdated")),
                decay_rate=float(rock.get("decayRate") or DECAY_RATE_PER_HOUR),
                total_contributed=int(rock.get("totalContributed") or 0),
                users=[
                    CommunityUser(
                        anonymous_id=u.get(_USER_ID_ATTR, ""),
                        total_points=int(u.get("totalPoints") or 0),
                        last_contribution=_from_ms(u.get("lastContributionDate")),
                    )
                    for u in data.get("users") or []
                ],
                recent_contributions=[
                    Contribution(
                        anonymous_id=c.get(_USER_ID_ATTR, ""),
                        amount=int(c.get("amount") or 0),
                        contributed_at=_from_ms(c.get("contributedAt")),
                    )
                    for c in data.get("contributions") or []
                ],
            )
        except Exception as exc:
            raise CommunityError(f"Failed to fetch community state: {exc}") from exc
