from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel


class ChatSendRequest(BaseModel):
    content: str = ""


class MessageOut(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: str


class ChatStateOut(BaseModel):
    state: Literal["idle", "sending", "awaiting_response"]
    messages: List[MessageOut]
