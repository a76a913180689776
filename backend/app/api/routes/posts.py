from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_current_session_optional
from app.db.session import get_db
from app.schemas.posts import PostCreateRequest, PostOut
from app.services.post_service import PostValidationError, create_post, list_posts, post_out
from app.services.session_service import NotAuthenticated, SessionUser


router = APIRouter(tags=["posts"])


@router.get("/posts")
def get_posts(
    request: Request,
    author_id: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = list_posts(db, author_id=author_id, limit=limit)
    data = [PostOut(**post_out(p)).model_dump() for p in rows]
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/posts", status_code=201)
def publish_post(
    request: Request,
    payload: PostCreateRequest,
    session: Optional[SessionUser] = Depends(get_current_session_optional),
    db: Session = Depends(get_db),
):
    try:
        row = create_post(db, title=payload.title, content=payload.content, session=session)
    except PostValidationError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})
    except NotAuthenticated as e:
        raise HTTPException(status_code=401, detail={"code": "NOT_AUTHENTICATED", "message": str(e)})

    out = PostOut(**post_out(row)).model_dump()
    return {"request_id": request.state.request_id, "data": out, "error": None}
