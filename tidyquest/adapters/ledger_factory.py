"""Community ledger factory — creates the ledger adapter from config."""

from __future__ import annotations

import logging

from tidyquest.config import settings
from tidyquest.ports.community_port import CommunityLedgerPort

logger = logging.getLogger(__name__)


def create_community_ledger() -> CommunityLedgerPort | None:
    """Return the community ledger, or None when it is not configured.

    With no ledger the quest engine still works; completed quests simply
    are not shared with the community.
    """
    if not settings.INSTANT_APP_ID or not settings.INSTANT_ADMIN_TOKEN:
        logger.info("Community ledger not configured; contributions disabled")
        return None

    from tidyquest.adapters.instant_ledger import InstantCommunityLedger

    return InstantCommunityLedger(
        app_id=settings.INSTANT_APP_ID,
        admin_token=settings.INSTANT_ADMIN_TOKEN,
        api_url=settings.INSTANT_API_URL,
        timeout=settings.COMMUNITY_TIMEOUT_SECONDS,
        recent_limit=settings.RECENT_CONTRIBUTIONS_LIMIT,
    )
