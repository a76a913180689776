from __future__ import annotations

import asyncio

import pytest

from app.services.collab_service import (
    ChatSession,
    ChatSessionRegistry,
    ChatValidationError,
    ResponderBusy,
    ResponderState,
    render_response,
)
from app.services.session_service import NotAuthenticated


def test_send_appends_user_message_then_one_reply(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=0.01)
        user_msg, task = chat.send("What is 2+2?", demo_session)

        # user message is visible before the loop gets a chance to run the reply
        assert [m.role for m in chat.messages] == ["user"]
        assert user_msg.content == "What is 2+2?"
        assert chat.state == ResponderState.awaiting_response

        reply = await task
        assert [m.role for m in chat.messages] == ["user", "assistant"]
        assert chat.messages[-1] is reply
        assert "What is 2+2?" in reply.content
        assert reply.content == render_response("What is 2+2?")
        assert chat.state == ResponderState.idle
        assert chat.pending is None
        assert len({m.id for m in chat.messages}) == 2

    asyncio.run(scenario())


def test_send_trims_input(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=0)
        user_msg, task = chat.send("  hi there \n", demo_session)
        reply = await task
        assert user_msg.content == "hi there"
        assert '"hi there"' in reply.content

    asyncio.run(scenario())


def test_blank_or_anonymous_send_appends_nothing(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=0)
        with pytest.raises(ChatValidationError):
            chat.send("   ", demo_session)
        with pytest.raises(NotAuthenticated):
            chat.send("hello", None)
        assert chat.messages == []
        assert chat.state == ResponderState.idle

    asyncio.run(scenario())


def test_second_send_while_awaiting_is_rejected(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=0.05)
        _, task = chat.send("first", demo_session)
        with pytest.raises(ResponderBusy):
            chat.send("second", demo_session)
        await task
        _, task2 = chat.send("second", demo_session)
        await task2
        assert [m.role for m in chat.messages] == ["user", "assistant", "user", "assistant"]

    asyncio.run(scenario())


def test_cancel_discards_pending_reply(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=10)
        _, task = chat.send("slow question", demo_session)
        assert chat.cancel() is True
        assert chat.state == ResponderState.idle
        with pytest.raises(asyncio.CancelledError):
            await task
        assert [m.role for m in chat.messages] == ["user"]
        assert chat.cancel() is False

    asyncio.run(scenario())


def test_send_right_after_cancel_keeps_new_pending(demo_session):
    async def scenario():
        chat = ChatSession("1", delay_seconds=10)
        chat.send("one", demo_session)
        chat.cancel()
        chat.delay_seconds = 0.01
        _, task = chat.send("two", demo_session)
        # let the cancelled task run its cleanup
        await asyncio.sleep(0)
        assert chat.pending is task
        assert chat.state == ResponderState.awaiting_response
        reply = await task
        assert '"two"' in reply.content

    asyncio.run(scenario())


def test_registry_scopes_chats_per_user_and_discard_cancels(demo_session):
    async def scenario():
        registry = ChatSessionRegistry(delay_seconds=10)
        mine = registry.get("1")
        assert registry.get("1") is mine
        assert registry.get("2") is not mine

        _, task = mine.send("hello", demo_session)
        assert registry.discard("1") is True
        assert registry.discard("1") is False
        await asyncio.sleep(0.01)
        assert task.cancelled()
        assert registry.get("1").messages == []
        assert registry.discard_all() == 2

    asyncio.run(scenario())
