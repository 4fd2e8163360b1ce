"""Entity repositories, one per table family."""

from manualchat.repositories.conversations import ConversationPage, ConversationRepository
from manualchat.repositories.documents import DocumentRepository
from manualchat.repositories.messages import MessageRepository
from manualchat.repositories.users import GuestUser, UserRepository
from manualchat.repositories.votes import VoteRepository, VoteType

__all__ = [
    "ConversationPage",
    "ConversationRepository",
    "DocumentRepository",
    "GuestUser",
    "MessageRepository",
    "UserRepository",
    "VoteRepository",
    "VoteType",
]
