"""Stateless session tokens.

There is no server-side session store. A session is a signed JWT carrying
`sub` (user id), `name` and `email`; every read decodes the token and
projects those claims into a `SessionUser`. Signing out only clears the
client's cookie: an already issued token stays valid until it expires.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.security import create_access_token, safe_decode_token
from app.services.user_directory import UserDirectory, UserRecord

logger = logging.getLogger(__name__)


class NotAuthenticated(Exception):
    """Raised by services when an operation needs an active session."""


@dataclass(frozen=True)
class SessionUser:
    user_id: str
    name: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return {"userId": self.user_id, "name": self.name, "email": self.email}


class SessionManager:
    def __init__(
        self,
        directory: UserDirectory,
        *,
        max_age_seconds: Optional[int] = None,
        update_age_seconds: Optional[int] = None,
    ):
        self.directory = directory
        self.max_age_seconds = int(settings.SESSION_MAX_AGE_SECONDS if max_age_seconds is None else max_age_seconds)
        self.update_age_seconds = int(
            settings.SESSION_UPDATE_AGE_SECONDS if update_age_seconds is None else update_age_seconds
        )

    def authenticate(self, email: Optional[str], password: Optional[str]) -> Optional[SessionUser]:
        """Return a session for a matching directory entry, else None.

        Blank fields are rejected before the directory is consulted.
        """

        if not email or not password:
            return None

        rec: UserRecord | None = self.directory.find(str(email), str(password))
        if rec is None:
            logger.info("Sign-in rejected for %s", email)
            return None

        logger.info("Sign-in accepted for %s (user_id=%s)", rec.email, rec.id)
        return SessionUser(user_id=rec.id, name=rec.name, email=rec.email)

    def issue_token(self, session: SessionUser) -> str:
        return create_access_token(
            subject=session.user_id,
            expires_seconds=self.max_age_seconds,
            extra={"name": session.name, "email": session.email},
        )

    def read_claims(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        claims = safe_decode_token(token)
        if not claims or not claims.get("sub"):
            return None
        return claims

    @staticmethod
    def project(claims: Dict[str, Any]) -> SessionUser:
        # Token claims -> the session shape handed to routes and views
        return SessionUser(
            user_id=str(claims.get("sub")),
            name=str(claims.get("name") or ""),
            email=str(claims.get("email") or ""),
        )

    def current_session(self, token: Optional[str]) -> Optional[SessionUser]:
        claims = self.read_claims(token)
        if claims is None:
            return None
        return self.project(claims)

    def needs_refresh(self, claims: Dict[str, Any], *, now: Optional[float] = None) -> bool:
        issued_at = int(claims.get("iat") or 0)
        current = int(now if now is not None else time.time())
        return current - issued_at >= self.update_age_seconds

    def refresh(self, claims: Dict[str, Any]) -> str:
        return self.issue_token(self.project(claims))
