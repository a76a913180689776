from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_current_session_optional
from app.db.session import get_db
from app.services.post_service import list_posts, post_out
from app.services.session_service import SessionUser


router = APIRouter(tags=["shell"])


FEATURES = [
    {
        "title": "Real-time Research",
        "description": "Live data gathering and fact-checking via Perplexity integration",
    },
    {
        "title": "Multi-Agent Intelligence",
        "description": "Claude, GPT-4, and Gemini working together for superior results",
    },
    {
        "title": "Cost Optimization",
        "description": "90%+ cost reduction through intelligent API routing",
    },
    {
        "title": "Production Ready",
        "description": "Enterprise-grade system with real-time collaboration",
    },
]


def visible_tabs(session: Optional[SessionUser]) -> list[str]:
    # Chat and Create are only offered to signed-in users
    if session is None:
        return ["home"]
    return ["home", "chat", "create"]


@router.get("/shell")
def shell(
    request: Request,
    session: Optional[SessionUser] = Depends(get_current_session_optional),
    db: Session = Depends(get_db),
):
    data = {
        "session": session.to_dict() if session else None,
        "tabs": visible_tabs(session),
        "features": FEATURES,
        "posts": [post_out(p) for p in list_posts(db)],
    }
    return {"request_id": request.state.request_id, "data": data, "error": None}
