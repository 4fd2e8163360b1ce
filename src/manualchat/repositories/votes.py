"""Vote repository."""

from __future__ import annotations

from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.db.queries import upsert
from manualchat.db.repository import Repository, persistence_errors
from manualchat.models.vote import Vote

VoteType = Literal["up", "down"]


class VoteRepository(Repository[Vote]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Vote, session)

    @persistence_errors("vote message")
    async def vote(self, conversation_id: str, message_id: str, type: VoteType) -> None:
        """Record or overwrite the single vote for ``message_id``."""
        if type not in ("up", "down"):
            raise ValueError(f"Unknown vote type {type!r}")
        is_upvoted = type == "up"
        stmt = upsert(self.session, Vote).values(
            conversation_id=conversation_id,
            message_id=message_id,
            is_upvoted=is_upvoted,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["conversation_id", "message_id"],
            set_={"is_upvoted": stmt.excluded.is_upvoted},
        )
        await self.session.execute(stmt)

    @persistence_errors("get votes by conversation id")
    async def get_votes(self, conversation_id: str) -> list[Vote]:
        return await self.scalars(
            select(Vote)
            .where(Vote.conversation_id == conversation_id)
            .execution_options(populate_existing=True)
        )
