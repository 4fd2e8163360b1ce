"""Conversation and Message models."""

import enum

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from manualchat.db.session import Base
from manualchat.models.base import CreatedAtMixin, new_uuid


class Visibility(enum.StrEnum):
    PRIVATE = "private"
    PUBLIC = "public"


class MessageRole(enum.StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Conversation(Base, CreatedAtMixin):
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[Visibility] = mapped_column(
        Enum(Visibility, values_callable=lambda obj: [e.value for e in obj]),
        default=Visibility.PRIVATE,
        nullable=False,
    )

    messages: Mapped[list["Message"]] = relationship(
        back_populates="conversation",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    __table_args__ = (Index("ix_conversations_user_id_created_at", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<Conversation {self.id!r} title={self.title!r}>"


class Message(Base, CreatedAtMixin):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    conversation_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    # Free-form: MessageRole covers the roles the chat flow writes.
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    conversation: Mapped["Conversation"] = relationship(back_populates="messages")

    __table_args__ = (
        Index("ix_messages_conversation_id_created_at", "conversation_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message {self.id!r} role={self.role!r}>"
