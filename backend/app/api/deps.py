"""Common FastAPI dependencies.

The session manager and chat registry live on `app.state` and are resolved
once per request here instead of being read from module globals by routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, Response

from app.core.config import settings
from app.services.collab_service import ChatSessionRegistry
from app.services.session_service import SessionManager, SessionUser


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_chat_registry(request: Request) -> ChatSessionRegistry:
    return request.app.state.chat_registry


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(settings.SESSION_MAX_AGE_SECONDS),
        httponly=True,
        secure=bool(settings.SESSION_COOKIE_SECURE),
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def _bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def get_current_session_optional(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> Optional[SessionUser]:
    """Resolve the caller's session from the cookie (or a bearer header).

    Returns None for anonymous callers and for invalid/expired tokens. Cookie
    sessions older than the update age get a fresh token on the response.
    """

    from_cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    token = from_cookie or _bearer_token(request)
    claims = manager.read_claims(token)
    if claims is None:
        return None

    if from_cookie and manager.needs_refresh(claims):
        set_session_cookie(response, manager.refresh(claims))
    return manager.project(claims)


def require_session(session: Optional[SessionUser] = Depends(get_current_session_optional)) -> SessionUser:
    if not session:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session
