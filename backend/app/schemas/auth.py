from __future__ import annotations

from pydantic import BaseModel


class SignInRequest(BaseModel):
    # Blank values are accepted here and rejected by the sign-in flow
    email: str = ""
    password: str = ""


class SessionOut(BaseModel):
    userId: str
    name: str
    email: str


class DemoAccountOut(BaseModel):
    name: str
    email: str
    password: str
