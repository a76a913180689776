from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.post import Post
from app.services.session_service import NotAuthenticated, SessionUser

logger = logging.getLogger(__name__)


MSG_MISSING_FIELDS = "Please fill in both title and content"
MSG_LOGIN_REQUIRED = "Please log in to create posts"

# Retries when two creates race for the same millisecond id
_ID_RETRIES = 3


class PostValidationError(ValueError):
    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


def _next_post_id(db: Session) -> str:
    """Millisecond timestamp id, bumped so ids stay strictly increasing."""

    candidate = _now_ms()
    latest = db.query(Post.id).order_by(Post.seq.desc()).first()
    if latest:
        try:
            last = int(latest[0])
        except (TypeError, ValueError):
            last = 0
        if candidate <= last:
            candidate = last + 1
    return str(candidate)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; rows are always written in UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def post_out(p: Post) -> Dict[str, Any]:
    return {
        "id": str(p.id),
        "title": p.title,
        "content": p.content,
        "author": p.author,
        "createdAt": _as_utc(p.created_at).isoformat().replace("+00:00", "Z"),
    }


def list_posts(db: Session, *, author_id: Optional[str] = None, limit: Optional[int] = None) -> List[Post]:
    q = db.query(Post)
    if author_id:
        q = q.filter(Post.author_id == str(author_id))
    q = q.order_by(Post.seq.desc())
    if limit:
        q = q.limit(int(limit))
    return q.all()


def create_post(db: Session, *, title: Optional[str], content: Optional[str], session: Optional[SessionUser]) -> Post:
    """Validate and append one post. Nothing is written when validation fails."""

    t = (title or "").strip()
    c = (content or "").strip()
    if not t or not c:
        raise PostValidationError(MSG_MISSING_FIELDS)
    if session is None or not session.name:
        raise NotAuthenticated(MSG_LOGIN_REQUIRED)

    for attempt in range(_ID_RETRIES):
        row = Post(
            id=_next_post_id(db),
            title=t,
            content=c,
            author=session.name,
            author_id=session.user_id,
            created_at=datetime.now(timezone.utc),
        )
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt == _ID_RETRIES - 1:
                raise
            continue
        db.refresh(row)
        logger.info("Post %s created by user_id=%s", row.id, session.user_id)
        return row
