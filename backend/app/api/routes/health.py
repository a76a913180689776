from fastapi import APIRouter, Request

from app.core.config import settings


router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    directory = getattr(request.app.state.session_manager, "directory", None)
    return {
        "status": "ok",
        "env": settings.ENV,
        "user_directory": getattr(directory, "name", None),
        "chat_sessions": len(request.app.state.chat_registry),
    }
