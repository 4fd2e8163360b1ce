"""Chat flow: persist the question, ask the backend, persist the answer."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.core.exceptions import NotFoundError
from manualchat.core.usage import ensure_within_quota
from manualchat.inference import HistoryItem, InferenceClient
from manualchat.models.base import new_uuid, utcnow
from manualchat.models.conversation import Conversation, Message, MessageRole
from manualchat.repositories.conversations import ConversationRepository
from manualchat.repositories.messages import MessageRepository

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 80
DEFAULT_TITLE = "New Chat"


def title_from_message(text: str) -> str:
    """Derive a conversation title from the first line of the first question."""
    lines = text.strip().splitlines()
    if not lines:
        return DEFAULT_TITLE
    return lines[0].strip()[:TITLE_MAX_LENGTH] or DEFAULT_TITLE


def to_history(messages: Sequence[Message]) -> list[HistoryItem]:
    return [HistoryItem(role=str(m.role), content=m.content) for m in messages]


class ChatService:
    def __init__(self, session: AsyncSession, client: InferenceClient | None = None) -> None:
        self.session = session
        self.client = client or InferenceClient()
        self.conversations = ConversationRepository(session)
        self.messages = MessageRepository(session)

    async def _owned_conversation(self, user_id: str, conversation_id: str) -> Conversation:
        conversation = await self.conversations.get_conversation(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            raise NotFoundError("Conversation", conversation_id)
        return conversation

    async def send(
        self,
        user_id: str,
        conversation_id: str,
        text: str,
        *,
        is_guest: bool = False,
        debug_mode: bool = False,
    ) -> Message:
        """Store ``text`` as the user's next turn and return the stored answer."""
        await ensure_within_quota(self.session, user_id, is_guest=is_guest)

        conversation = await self.conversations.get_conversation(conversation_id)
        if conversation is None:
            await self.conversations.create_conversation(
                conversation_id, user_id, title_from_message(text)
            )
            history: list[Message] = []
        elif conversation.user_id != user_id:
            raise NotFoundError("Conversation", conversation_id)
        else:
            history = await self.messages.get_messages(conversation_id)

        question = Message(
            id=new_uuid(),
            conversation_id=conversation_id,
            role=MessageRole.USER,
            content=text,
            attachments=[],
            created_at=utcnow(),
        )
        await self.messages.save_messages([question])
        return await self._answer(conversation_id, text, history, debug_mode)

    async def regenerate(
        self, user_id: str, message_id: str, *, debug_mode: bool = False
    ) -> Message:
        """Replace an assistant answer, dropping it and everything after it."""
        message = await self.messages.get_message(message_id)
        if message is None or message.role != MessageRole.ASSISTANT:
            raise NotFoundError("Message", message_id)
        conversation_id = message.conversation_id
        await self._owned_conversation(user_id, conversation_id)

        ordered = await self.messages.get_messages(conversation_id)
        position = next(i for i, m in enumerate(ordered) if m.id == message_id)
        earlier = ordered[:position]
        questions = [i for i, m in enumerate(earlier) if m.role == MessageRole.USER]
        if not questions:
            raise NotFoundError("Question for message", message_id)
        question = earlier[questions[-1]]

        # Cut by position; the question may share the answer's timestamp.
        await self.messages.delete_messages(conversation_id, [m.id for m in ordered[position:]])
        logger.debug("Regenerating answer %s in conversation %s", message_id, conversation_id)
        return await self._answer(
            conversation_id, question.content, earlier[: questions[-1]], debug_mode
        )

    async def _answer(
        self,
        conversation_id: str,
        text: str,
        history: Sequence[Message],
        debug_mode: bool,
    ) -> Message:
        response = await self.client.ask(text, to_history(history), debug_mode=debug_mode)
        answer = Message(
            id=new_uuid(),
            conversation_id=conversation_id,
            role=MessageRole.ASSISTANT,
            content=response.answer,
            attachments=[image.model_dump() for image in response.images],
            created_at=utcnow(),
        )
        await self.messages.save_messages([answer])
        return answer
