"""Per-user message quotas derived from recent message counts."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.config import Settings, get_settings
from manualchat.core.exceptions import RateLimitExceededError
from manualchat.repositories.messages import MessageRepository

logger = logging.getLogger(__name__)


def max_messages_for(is_guest: bool, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    if is_guest:
        return settings.guest_max_messages_per_day
    return settings.regular_max_messages_per_day


async def ensure_within_quota(
    session: AsyncSession,
    user_id: str,
    *,
    is_guest: bool = False,
    now: datetime | None = None,
) -> int:
    """Raise RateLimitExceededError once the user has used up the window.

    Returns the number of messages still allowed in the current window.
    """
    settings = get_settings()
    limit = max_messages_for(is_guest, settings)
    window = settings.rate_limit_window_hours
    used = await MessageRepository(session).count_recent_messages(user_id, window, now=now)
    if used >= limit:
        logger.info("User %s hit message limit (%d/%d in %dh)", user_id, used, limit, window)
        raise RateLimitExceededError(limit, window)
    return limit - used
