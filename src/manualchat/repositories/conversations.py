"""Conversation repository: creation, cascading delete, keyset pagination."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.core.exceptions import NotFoundError
from manualchat.db.queries import newer_than, older_than, owned_by, where_all
from manualchat.db.repository import Repository, persistence_errors
from manualchat.models.base import utcnow
from manualchat.models.conversation import Conversation, Message, Visibility
from manualchat.models.vote import Vote

logger = logging.getLogger(__name__)


@dataclass
class ConversationPage:
    items: list[Conversation] = field(default_factory=list)
    has_more: bool = False


class ConversationRepository(Repository[Conversation]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Conversation, session)

    @persistence_errors("save conversation")
    async def create_conversation(self, id: str, user_id: str, title: str) -> Conversation:
        return await self.create(id=id, user_id=user_id, title=title, created_at=utcnow())

    @persistence_errors("get conversation by id")
    async def get_conversation(self, id: str) -> Conversation | None:
        return await self.get(id)

    @persistence_errors("delete conversation by id")
    async def delete_conversation(self, id: str) -> Conversation | None:
        """Delete votes, then messages, then the conversation; return the deleted row."""
        await self.session.execute(delete(Vote).where(Vote.conversation_id == id))
        await self.session.execute(delete(Message).where(Message.conversation_id == id))
        result = await self.session.execute(
            delete(Conversation).where(Conversation.id == id).returning(Conversation)
        )
        deleted = result.scalars().first()
        if deleted is not None:
            logger.debug("Deleted conversation %s", id)
        return deleted

    async def _cursor_timestamp(self, cursor_id: str) -> datetime:
        result = await self.session.execute(
            select(Conversation.created_at).where(Conversation.id == cursor_id).limit(1)
        )
        timestamp = result.scalar_one_or_none()
        if timestamp is None:
            raise NotFoundError("Conversation", cursor_id)
        return timestamp

    @persistence_errors("list conversations by user id")
    async def list_conversations(
        self,
        user_id: str,
        limit: int,
        starting_after: str | None = None,
        ending_before: str | None = None,
    ) -> ConversationPage:
        """Page through a user's conversations, newest first.

        ``starting_after`` continues the listing past the cursor conversation:
        it selects rows strictly *older* than the cursor, not newer, so passing
        the last item of each page walks every conversation exactly once.
        ``ending_before`` returns rows strictly newer than its cursor, still
        newest first. If both are given ``starting_after`` wins. One extra row
        is fetched to decide ``has_more`` without a count query.
        """
        window = None
        if starting_after:
            cursor = await self._cursor_timestamp(starting_after)
            window = older_than(Conversation.created_at, cursor)
        elif ending_before:
            cursor = await self._cursor_timestamp(ending_before)
            window = newer_than(Conversation.created_at, cursor)

        rows = await self.scalars(
            select(Conversation)
            .where(where_all(owned_by(Conversation.user_id, user_id), window))
            .order_by(Conversation.created_at.desc())
            .limit(limit + 1)
        )
        has_more = len(rows) > limit
        return ConversationPage(items=rows[:limit], has_more=has_more)

    @persistence_errors("update conversation visibility")
    async def set_visibility(self, conversation_id: str, visibility: Visibility) -> None:
        await self.session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(visibility=Visibility(visibility))
        )

    @persistence_errors("update conversation title")
    async def update_title(self, conversation_id: str, title: str) -> None:
        await self.session.execute(
            update(Conversation).where(Conversation.id == conversation_id).values(title=title)
        )
