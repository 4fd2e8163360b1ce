"""SQLAlchemy models package."""

from manualchat.models.base import CreatedAtMixin
from manualchat.models.conversation import Conversation, Message, MessageRole, Visibility
from manualchat.models.document import ArtifactKind, Document, Suggestion
from manualchat.models.user import User
from manualchat.models.vote import Vote

__all__ = [
    "CreatedAtMixin",
    "User",
    "Conversation",
    "Visibility",
    "Message",
    "MessageRole",
    "Vote",
    "Document",
    "ArtifactKind",
    "Suggestion",
]
