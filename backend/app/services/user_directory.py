from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.security import get_password_hash, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


# Demo accounts shown on the sign-in page. Only the hashes end up in a directory.
DEMO_USERS: List[Dict[str, str]] = [
    {"id": "1", "name": "Demo User", "email": "demo@aiagents.com", "password": "demo123"},
    {"id": "2", "name": "System Administrator", "email": "admin@aiagents.com", "password": "admin123"},
    {"id": "3", "name": "Kyle Mabbott", "email": "kyle@aiagents.com", "password": "kyle123"},
]


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str


class UserDirectory:
    """Source of valid identity/credential pairs.

    Implementations only answer one question: which user, if any, owns this
    email/password pair. They never say which half of the pair was wrong.
    """

    name: str = "base"

    def find(self, email: str, password: str) -> Optional[UserRecord]:  # pragma: no cover
        raise NotImplementedError


class StaticUserDirectory(UserDirectory):
    name = "static"

    def __init__(self, users: Iterable[Dict[str, str]]):
        self._by_email: Dict[str, UserRecord] = {}
        for u in users:
            rec = UserRecord(
                id=str(u["id"]),
                name=str(u["name"]),
                email=str(u["email"]),
                password_hash=get_password_hash(str(u["password"])),
            )
            if rec.email in self._by_email:
                raise ValueError(f"Duplicate email in user directory: {rec.email}")
            self._by_email[rec.email] = rec

    def __len__(self) -> int:
        return len(self._by_email)

    def find(self, email: str, password: str) -> Optional[UserRecord]:
        rec = self._by_email.get(email)
        if rec is None:
            return None
        if not verify_password(password, rec.password_hash):
            return None
        return rec


class DatabaseUserDirectory(UserDirectory):
    """Directory backed by the `users` table. Opens a short-lived DB session per lookup."""

    name = "database"

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find(self, email: str, password: str) -> Optional[UserRecord]:
        db = self._session_factory()
        try:
            u = db.query(User).filter(User.email == str(email)).first()
            if not u or not bool(u.is_active):
                return None
            if not verify_password(password, str(u.password_hash)):
                return None
            return UserRecord(id=str(u.id), name=str(u.name), email=str(u.email), password_hash=str(u.password_hash))
        finally:
            db.close()


def seed_users(db: Session, users: Iterable[Dict[str, str]] = DEMO_USERS) -> int:
    """Upsert directory users into the `users` table (safe to run repeatedly).

    Returns the number of rows created.
    """

    created = 0
    for u in users:
        row = db.query(User).filter(User.id == str(u["id"])).first()
        if row is None:
            db.add(
                User(
                    id=str(u["id"]),
                    email=str(u["email"]),
                    name=str(u["name"]),
                    password_hash=get_password_hash(str(u["password"])),
                    is_active=True,
                )
            )
            created += 1
            continue

        # Keep name/email in sync with the seed; only rehash when the password changed
        row.name = str(u["name"])
        row.email = str(u["email"])
        if not verify_password(str(u["password"]), str(row.password_hash)):
            row.password_hash = get_password_hash(str(u["password"]))
    db.commit()
    if created:
        logger.info("Seeded %s directory users", created)
    return created


def build_user_directory(backend: str, *, session_factory: Callable[[], Session] | None = None) -> UserDirectory:
    if backend == "database":
        if session_factory is None:
            raise ValueError("database user directory needs a session factory")
        return DatabaseUserDirectory(session_factory)
    return StaticUserDirectory(DEMO_USERS)
