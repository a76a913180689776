from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from app.api.deps import get_chat_registry, require_session
from app.schemas.chat import ChatSendRequest, ChatStateOut, MessageOut
from app.services.collab_service import ChatSessionRegistry, ChatValidationError, ResponderBusy
from app.services.session_service import SessionUser


router = APIRouter(tags=["chat"])


@router.get("/chat/messages")
async def get_transcript(
    request: Request,
    session: SessionUser = Depends(require_session),
    registry: ChatSessionRegistry = Depends(get_chat_registry),
):
    chat = registry.get(session.user_id)
    return {"request_id": request.state.request_id, "data": ChatStateOut(**chat.snapshot()).model_dump(), "error": None}


@router.post("/chat/messages", status_code=202)
async def send_message(
    request: Request,
    payload: ChatSendRequest,
    response: Response,
    wait: bool = Query(default=False, description="Hold the request until the simulated answer arrives"),
    session: SessionUser = Depends(require_session),
    registry: ChatSessionRegistry = Depends(get_chat_registry),
):
    chat = registry.get(session.user_id)
    try:
        user_msg, task = chat.send(payload.content, session)
    except ChatValidationError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})
    except ResponderBusy as e:
        raise HTTPException(status_code=409, detail={"code": "RESPONDER_BUSY", "message": str(e)})

    out = {"message": MessageOut(**user_msg.to_dict()).model_dump(), "reply": None, "state": chat.state.value}
    if wait:
        try:
            # shield: a dropped client connection must not cancel the answer
            reply = await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            reply = None
        out["reply"] = MessageOut(**reply.to_dict()).model_dump() if reply else None
        out["state"] = chat.state.value
        response.status_code = 200
    return {"request_id": request.state.request_id, "data": out, "error": None}


@router.delete("/chat/pending")
async def cancel_pending(
    request: Request,
    session: SessionUser = Depends(require_session),
    registry: ChatSessionRegistry = Depends(get_chat_registry),
):
    chat = registry.get(session.user_id)
    cancelled = chat.cancel()
    data = {"cancelled": cancelled, "state": chat.state.value}
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.delete("/chat/messages")
async def clear_transcript(
    request: Request,
    session: SessionUser = Depends(require_session),
    registry: ChatSessionRegistry = Depends(get_chat_registry),
):
    chat = registry.get(session.user_id)
    chat.clear()
    return {"request_id": request.state.request_id, "data": ChatStateOut(**chat.snapshot()).model_dump(), "error": None}
