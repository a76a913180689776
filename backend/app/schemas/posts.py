from __future__ import annotations

from pydantic import BaseModel, Field


class PostCreateRequest(BaseModel):
    title: str = Field(default="", max_length=255)
    content: str = ""


class PostOut(BaseModel):
    id: str
    title: str
    content: str
    author: str
    createdAt: str
