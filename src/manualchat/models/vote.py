"""Vote model."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from manualchat.db.session import Base


class Vote(Base):
    __tablename__ = "votes"

    conversation_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    # At most one vote per message; the upsert conflicts on this.
    message_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("messages.id", ondelete="CASCADE"), primary_key=True, unique=True
    )
    is_upvoted: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self) -> str:
        return f"<Vote message={self.message_id!r} up={self.is_upvoted!r}>"
