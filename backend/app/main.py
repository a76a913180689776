from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import configure_logging
from app.api.routes.health import router as health_router
from app.api.routes.auth import router as auth_router
from app.api.routes.posts import router as posts_router
from app.api.routes.chat import router as chat_router
from app.api.routes.shell import router as shell_router
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.collab_service import ChatSessionRegistry
from app.services.session_service import SessionManager
from app.services.user_directory import build_user_directory, seed_users


configure_logging()
logger = logging.getLogger(__name__)


def envelope(request_id: str, data: Any = None, error: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"request_id": request_id, "data": data, "error": error}


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
)

# Application state shared by all requests; routes reach it through app.api.deps
app.state.session_manager = SessionManager(
    build_user_directory(settings.USER_DIRECTORY_BACKEND, session_factory=SessionLocal)
)
app.state.chat_registry = ChatSessionRegistry(delay_seconds=settings.COLLAB_RESPONSE_DELAY_SECONDS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    detail = exc.detail
    # Preserve structured error details when provided (e.g., INVALID_CREDENTIALS).
    if isinstance(detail, dict):
        code = str(detail.get("code") or "HTTP_ERROR")
        message = detail.get("message") or str(detail)
        error = {"code": code, "message": message}
    else:
        error = {"code": "HTTP_ERROR", "message": str(detail)}

    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(
            request_id=req_id,
            data=None,
            error=error,
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return JSONResponse(
        status_code=422,
        content=envelope(
            request_id=req_id,
            data=None,
            error={
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": {"errors": exc.errors()},
            },
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    logger.exception("Unhandled error on %s %s (request_id=%s)", request.method, request.url.path, req_id)
    return JSONResponse(
        status_code=500,
        content=envelope(
            request_id=req_id,
            data=None,
            error={"code": "INTERNAL_ERROR", "message": "Something went wrong"},
        ),
    )


@app.on_event("startup")
def bootstrap_storage():
    """Create tables and, for the database directory, the demo users (safe to run repeatedly)."""

    Base.metadata.create_all(bind=engine)
    if settings.USER_DIRECTORY_BACKEND != "database":
        return
    db = SessionLocal()
    try:
        seed_users(db)
    finally:
        db.close()


@app.on_event("shutdown")
def drop_chat_sessions():
    registry: ChatSessionRegistry = app.state.chat_registry
    registry.discard_all()


app.include_router(health_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(shell_router, prefix="/api")
