"""Tests for ChatService and title derivation."""

from __future__ import annotations

import itertools
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from manualchat.core.chat import DEFAULT_TITLE, TITLE_MAX_LENGTH, ChatService, title_from_message
from manualchat.core.exceptions import NotFoundError, RateLimitExceededError
from manualchat.inference import ChatResponse, HistoryItem, ImageRef
from manualchat.models.base import utcnow
from manualchat.models.conversation import Conversation, Message, MessageRole
from manualchat.models.vote import Vote
from manualchat.repositories.messages import MessageRepository
from manualchat.repositories.votes import VoteRepository

from .conftest import at


def test_title_uses_first_line():
    assert title_from_message("  How do I reset the TPMS?\nThanks") == "How do I reset the TPMS?"


def test_title_is_truncated():
    assert len(title_from_message("x" * 200)) == TITLE_MAX_LENGTH


def test_title_for_blank_message():
    assert title_from_message("   \n ") == DEFAULT_TITLE


@pytest.fixture
def client():
    fake = MagicMock()
    fake.ask = AsyncMock(
        return_value=ChatResponse(
            answer="Hold the TPMS button for three seconds.",
            images=[ImageRef(url="https://cdn/p12.png", page=12, relevance_score=0.9)],
        )
    )
    return fake


@pytest.fixture
def clock():
    ticks = itertools.count(1)
    with patch("manualchat.core.chat.utcnow", side_effect=lambda: at(next(ticks))):
        yield


async def test_send_creates_conversation(session, client, clock):
    service = ChatService(session, client)
    answer = await service.send("u-1", "c1", "How do I reset the TPMS?\nThanks")

    conversation = await session.get(Conversation, "c1")
    assert conversation.user_id == "u-1"
    assert conversation.title == "How do I reset the TPMS?"

    assert answer.role == MessageRole.ASSISTANT
    assert answer.content.startswith("Hold the TPMS button")
    assert answer.attachments == [
        {"url": "https://cdn/p12.png", "page": 12, "relevance_score": 0.9}
    ]

    stored = await MessageRepository(session).get_messages("c1")
    assert [(m.role, m.content) for m in stored] == [
        (MessageRole.USER, "How do I reset the TPMS?\nThanks"),
        (MessageRole.ASSISTANT, "Hold the TPMS button for three seconds."),
    ]
    client.ask.assert_awaited_once_with(
        "How do I reset the TPMS?\nThanks", [], debug_mode=False
    )


async def test_second_send_passes_history(session, client, clock):
    service = ChatService(session, client)
    await service.send("u-1", "c1", "First question")
    await service.send("u-1", "c1", "Second question", debug_mode=True)

    args, kwargs = client.ask.await_args
    assert args[0] == "Second question"
    assert args[1] == [
        HistoryItem(role="user", content="First question"),
        HistoryItem(role="assistant", content="Hold the TPMS button for three seconds."),
    ]
    assert kwargs == {"debug_mode": True}

    conversation = await session.get(Conversation, "c1")
    assert conversation.title == "First question"


async def test_send_to_foreign_conversation(session, client):
    session.add(Conversation(id="c1", user_id="u-2", title="theirs", created_at=at(0)))
    await session.flush()

    with pytest.raises(NotFoundError):
        await ChatService(session, client).send("u-1", "c1", "hello")

    assert await MessageRepository(session).get_messages("c1") == []
    client.ask.assert_not_awaited()


async def test_send_over_quota(session, client, monkeypatch):
    monkeypatch.setenv("REGULAR_MAX_MESSAGES_PER_DAY", "1")
    session.add(Conversation(id="c1", user_id="u-1", title="t", created_at=utcnow()))
    session.add(
        Message(id="m1", conversation_id="c1", role=MessageRole.USER, content="q",
                created_at=utcnow())
    )
    await session.flush()

    with pytest.raises(RateLimitExceededError):
        await ChatService(session, client).send("u-1", "c1", "one more")
    client.ask.assert_not_awaited()


@pytest.fixture
async def thread(session):
    session.add(Conversation(id="c1", user_id="u-1", title="t", created_at=at(0)))
    session.add_all(
        [
            Message(id="q1", conversation_id="c1", role=MessageRole.USER,
                    content="Where is the jack?", created_at=at(1)),
            Message(id="a1", conversation_id="c1", role=MessageRole.ASSISTANT,
                    content="Under the floor.", created_at=at(2)),
            Message(id="q2", conversation_id="c1", role=MessageRole.USER,
                    content="And the spare?", created_at=at(3)),
            Message(id="a2", conversation_id="c1", role=MessageRole.ASSISTANT,
                    content="Next to it.", created_at=at(4)),
        ]
    )
    await session.flush()
    return session


async def test_regenerate_replaces_answer_and_later_turns(thread, client):
    answer = await ChatService(thread, client).regenerate("u-1", "a1")

    client.ask.assert_awaited_once_with("Where is the jack?", [], debug_mode=False)
    thread.expunge_all()
    stored = await MessageRepository(thread).get_messages("c1")
    assert [m.id for m in stored] == ["q1", answer.id]


async def test_regenerate_last_answer_keeps_history(thread, client):
    await ChatService(thread, client).regenerate("u-1", "a2")

    args, _ = client.ask.await_args
    assert args[0] == "And the spare?"
    assert [item.content for item in args[1]] == ["Where is the jack?", "Under the floor."]


async def test_regenerate_keeps_question_with_same_timestamp(session, client):
    session.add(Conversation(id="c1", user_id="u-1", title="t", created_at=at(0)))
    session.add_all(
        [
            Message(id="q1", conversation_id="c1", role=MessageRole.USER,
                    content="Where is the jack?", created_at=at(1)),
            Message(id="a1", conversation_id="c1", role=MessageRole.ASSISTANT,
                    content="Under the floor.", created_at=at(1)),
        ]
    )
    session.add(Vote(conversation_id="c1", message_id="a1", is_upvoted=False))
    await session.flush()

    answer = await ChatService(session, client).regenerate("u-1", "a1")

    client.ask.assert_awaited_once_with("Where is the jack?", [], debug_mode=False)
    session.expunge_all()
    stored = await MessageRepository(session).get_messages("c1")
    assert [m.id for m in stored] == ["q1", answer.id]
    assert await VoteRepository(session).get_votes("c1") == []


async def test_regenerate_rejects_user_message(thread, client):
    with pytest.raises(NotFoundError):
        await ChatService(thread, client).regenerate("u-1", "q1")


async def test_regenerate_foreign_conversation(thread, client):
    with pytest.raises(NotFoundError):
        await ChatService(thread, client).regenerate("u-2", "a1")
    client.ask.assert_not_awaited()
