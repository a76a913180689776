from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.api.deps import (
    clear_session_cookie,
    get_chat_registry,
    get_current_session_optional,
    get_session_manager,
    set_session_cookie,
)
from app.schemas.auth import DemoAccountOut, SessionOut, SignInRequest
from app.services.collab_service import ChatSessionRegistry
from app.services.session_service import SessionManager, SessionUser
from app.services.signin_service import demo_accounts, submit


router = APIRouter(tags=["auth"])

SIGNIN_PAGE = "/auth/signin"


def _session_out(s: SessionUser) -> SessionOut:
    return SessionOut(userId=s.user_id, name=s.name, email=s.email)


@router.get("/auth/signin")
def signin_page(request: Request):
    data = {
        "pages": {"signIn": SIGNIN_PAGE},
        "providers": [
            {
                "id": "credentials",
                "name": "credentials",
                "type": "credentials",
                "signinUrl": "/api/auth/signin",
                "fields": {
                    "email": {"label": "Email", "type": "email"},
                    "password": {"label": "Password", "type": "password"},
                },
            }
        ],
    }
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/auth/signin")
def signin(
    request: Request,
    payload: SignInRequest,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    result = submit(manager, payload.email, payload.password)
    if not result.ok:
        raise HTTPException(status_code=result.status_code, detail={"code": result.code, "message": result.message})

    assert result.session is not None and result.token is not None
    set_session_cookie(response, result.token)
    out = {"session": _session_out(result.session).model_dump(), "message": result.message, "redirect": "/"}
    return {"request_id": request.state.request_id, "data": out, "error": None}


@router.post("/auth/signout")
async def signout(
    request: Request,
    response: Response,
    session: Optional[SessionUser] = Depends(get_current_session_optional),
    registry: ChatSessionRegistry = Depends(get_chat_registry),
):
    if session is not None:
        # Tearing down the view drops the transcript and any answer still in flight
        registry.discard(session.user_id)
    clear_session_cookie(response)
    return {"request_id": request.state.request_id, "data": {"signed_out": True}, "error": None}


@router.get("/auth/session")
def current_session(request: Request, session: Optional[SessionUser] = Depends(get_current_session_optional)):
    out = _session_out(session).model_dump() if session else None
    return {"request_id": request.state.request_id, "data": out, "error": None}


@router.get("/auth/demo-accounts")
def list_demo_accounts(request: Request):
    out = [DemoAccountOut(**a).model_dump() for a in demo_accounts()]
    return {"request_id": request.state.request_id, "data": out, "error": None}
