"""Simulated multi-agent collaboration chat.

No model is called. Each user message is answered once, after a fixed
delay, with a canned template that quotes the message. The answer is an
asyncio task handed back to the caller so it can be awaited or cancelled.

State per chat session:
  idle --send--> sending --schedule--> awaiting_response --reply|cancel--> idle
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from app.services.session_service import NotAuthenticated, SessionUser

logger = logging.getLogger(__name__)


RESPONSE_TEMPLATE = (
    'This is a simulated response to: "{content}". In production, this would involve real '
    "multi-agent collaboration using Claude, GPT-4, Gemini, and Perplexity for research-enhanced responses."
)

MSG_LOGIN_REQUIRED = "Please log in to use AI chat"


class ChatValidationError(ValueError):
    pass


class ResponderBusy(RuntimeError):
    pass


class ResponderState(str, Enum):
    idle = "idle"
    sending = "sending"
    awaiting_response = "awaiting_response"


@dataclass
class ChatMessage:
    id: str
    role: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }


def render_response(content: str) -> str:
    return RESPONSE_TEMPLATE.format(content=content)


class ChatSession:
    """In-memory transcript of one user's chat. Never persisted."""

    def __init__(self, owner_id: str, *, delay_seconds: float):
        self.owner_id = str(owner_id)
        self.delay_seconds = float(delay_seconds)
        self.messages: List[ChatMessage] = []
        self.state = ResponderState.idle
        self._pending: Optional[asyncio.Task] = None
        self._last_id = 0

    def _next_id(self) -> str:
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    @property
    def pending(self) -> Optional[asyncio.Task]:
        return self._pending

    def send(self, content: Optional[str], session: Optional[SessionUser]) -> Tuple[ChatMessage, asyncio.Task]:
        """Append the user's message now and schedule the simulated answer.

        Must be called from a running event loop. Returns the user message and
        the task that resolves to the assistant message.
        """

        text = (content or "").strip()
        if not text:
            raise ChatValidationError("Message is empty")
        if session is None:
            raise NotAuthenticated(MSG_LOGIN_REQUIRED)
        if self.state != ResponderState.idle:
            raise ResponderBusy("Agents are still collaborating on the previous message")

        self.state = ResponderState.sending
        user_msg = ChatMessage(id=self._next_id(), role="user", content=text)
        self.messages.append(user_msg)

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._respond(user_msg))
        self._pending = task
        self.state = ResponderState.awaiting_response
        logger.info("Chat user_id=%s: scheduled response in %.2fs", self.owner_id, self.delay_seconds)
        return user_msg, task

    async def _respond(self, user_msg: ChatMessage) -> ChatMessage:
        me = asyncio.current_task()
        try:
            await asyncio.sleep(self.delay_seconds)
            reply = ChatMessage(id=self._next_id(), role="assistant", content=render_response(user_msg.content))
            self.messages.append(reply)
            return reply
        finally:
            # A cancel() followed by a new send() already replaced the pending task
            if self._pending is me:
                self._pending = None
                self.state = ResponderState.idle

    def cancel(self) -> bool:
        task = self._pending
        if task is None or task.done():
            return False
        task.cancel()
        self._pending = None
        self.state = ResponderState.idle
        logger.info("Chat user_id=%s: pending response cancelled", self.owner_id)
        return True

    def clear(self) -> None:
        self.cancel()
        self.messages = []

    def snapshot(self) -> Dict[str, Any]:
        return {"state": self.state.value, "messages": [m.to_dict() for m in self.messages]}


class ChatSessionRegistry:
    """One chat session per signed-in user id, kept for the life of the process."""

    def __init__(self, *, delay_seconds: float):
        self.delay_seconds = float(delay_seconds)
        self._sessions: Dict[str, ChatSession] = {}

    def get(self, owner_id: str) -> ChatSession:
        key = str(owner_id)
        chat = self._sessions.get(key)
        if chat is None:
            chat = ChatSession(key, delay_seconds=self.delay_seconds)
            self._sessions[key] = chat
        return chat

    def discard(self, owner_id: str) -> bool:
        chat = self._sessions.pop(str(owner_id), None)
        if chat is None:
            return False
        chat.cancel()
        return True

    def discard_all(self) -> int:
        owners = list(self._sessions)
        for owner_id in owners:
            self.discard(owner_id)
        return len(owners)

    def __len__(self) -> int:
        return len(self._sessions)
