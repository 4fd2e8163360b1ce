"""Message repository: ordered history, rewind, and usage counting."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.db.queries import created_since, id_in, owned_by, where_all
from manualchat.db.repository import Repository, persistence_errors
from manualchat.models.base import utcnow
from manualchat.models.conversation import Conversation, Message
from manualchat.models.vote import Vote

logger = logging.getLogger(__name__)


class MessageRepository(Repository[Message]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Message, session)

    @persistence_errors("save messages")
    async def save_messages(self, messages: Sequence[Message]) -> None:
        await self.add_all(messages)

    @persistence_errors("get messages by conversation id")
    async def get_messages(self, conversation_id: str) -> list[Message]:
        return await self.scalars(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )

    @persistence_errors("get message by id")
    async def get_message(self, id: str) -> Message | None:
        return await self.get(id)

    @persistence_errors("delete messages by conversation id after timestamp")
    async def delete_messages_after(self, conversation_id: str, timestamp: datetime) -> None:
        """Remove messages created at or after ``timestamp`` along with their votes."""
        result = await self.session.execute(
            select(Message.id).where(
                where_all(
                    Message.conversation_id == conversation_id,
                    created_since(Message.created_at, timestamp),
                )
            )
        )
        await self._delete_ids(conversation_id, list(result.scalars().all()))

    @persistence_errors("delete messages by id")
    async def delete_messages(self, conversation_id: str, message_ids: Sequence[str]) -> None:
        """Remove the given messages of one conversation along with their votes."""
        await self._delete_ids(conversation_id, list(message_ids))

    async def _delete_ids(self, conversation_id: str, message_ids: list[str]) -> None:
        if not message_ids:
            return

        await self.session.execute(
            delete(Vote).where(
                where_all(
                    Vote.conversation_id == conversation_id,
                    id_in(Vote.message_id, message_ids),
                )
            )
        )
        await self.session.execute(
            delete(Message).where(
                where_all(
                    Message.conversation_id == conversation_id,
                    id_in(Message.id, message_ids),
                )
            )
        )
        logger.debug(
            "Removed %d messages from conversation %s", len(message_ids), conversation_id
        )

    @persistence_errors("get message count by user id")
    async def count_recent_messages(
        self, user_id: str, window_hours: int, now: datetime | None = None
    ) -> int:
        """Count messages in the user's conversations within the trailing window.

        The lower bound is inclusive: a message created exactly ``window_hours``
        ago is counted.
        """
        since = (now or utcnow()) - timedelta(hours=window_hours)
        result = await self.session.execute(
            select(func.count(Message.id))
            .join(Conversation, Conversation.id == Message.conversation_id)
            .where(
                where_all(
                    owned_by(Conversation.user_id, user_id),
                    created_since(Message.created_at, since),
                )
            )
        )
        return result.scalar_one()
