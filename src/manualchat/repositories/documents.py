"""Document and suggestion repository with version-scoped deletes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.db.queries import newer_than, where_all
from manualchat.db.repository import Repository, persistence_errors
from manualchat.models.base import utcnow
from manualchat.models.document import ArtifactKind, Document, Suggestion

logger = logging.getLogger(__name__)


class DocumentRepository(Repository[Document]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Document, session)

    @persistence_errors("save document")
    async def save_document(
        self, id: str, title: str, kind: ArtifactKind, content: str | None, user_id: str
    ) -> Document:
        return await self.create(
            id=id,
            title=title,
            kind=ArtifactKind(kind),
            content=content,
            user_id=user_id,
            created_at=utcnow(),
        )

    @persistence_errors("get documents by id")
    async def get_document_versions(self, id: str) -> list[Document]:
        return await self.scalars(
            select(Document).where(Document.id == id).order_by(Document.created_at.asc())
        )

    @persistence_errors("get document by id")
    async def get_latest_document(self, id: str) -> Document | None:
        result = await self.session.execute(
            select(Document).where(Document.id == id).order_by(Document.created_at.desc()).limit(1)
        )
        return result.scalars().first()

    @persistence_errors("delete documents by id after timestamp")
    async def delete_document_versions_after(self, id: str, timestamp: datetime) -> list[Document]:
        """Drop versions newer than ``timestamp`` and the suggestions tied to them."""
        await self.session.execute(
            delete(Suggestion)
            .where(
                where_all(
                    Suggestion.document_id == id,
                    newer_than(Suggestion.document_created_at, timestamp),
                )
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(
            delete(Document)
            .where(where_all(Document.id == id, newer_than(Document.created_at, timestamp)))
            .returning(Document)
            .execution_options(synchronize_session="fetch")
        )
        deleted = list(result.scalars().all())
        logger.debug("Deleted %d versions of document %s", len(deleted), id)
        return deleted

    @persistence_errors("save suggestions")
    async def save_suggestions(self, suggestions: Sequence[Suggestion]) -> None:
        await self.add_all(suggestions)

    @persistence_errors("get suggestions by document id")
    async def get_suggestions_for_document(self, document_id: str) -> list[Suggestion]:
        return await self.scalars(select(Suggestion).where(Suggestion.document_id == document_id))
