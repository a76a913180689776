from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.core.config import settings
from app.services.session_service import SessionManager, SessionUser
from app.services.user_directory import DEMO_USERS

logger = logging.getLogger(__name__)


MSG_MISSING_FIELDS = "Email and password are required."
MSG_INVALID_CREDENTIALS = "Invalid credentials. Please try again."
MSG_UNEXPECTED = "An error occurred. Please try again."
MSG_WELCOME = "Welcome back!"


@dataclass
class SignInResult:
    ok: bool
    message: str
    code: str = "OK"
    status_code: int = 200
    session: Optional[SessionUser] = None
    token: Optional[str] = None


def submit(manager: SessionManager, email: Optional[str], password: Optional[str]) -> SignInResult:
    """Run one sign-in attempt and translate the outcome into a user-facing notice."""

    email = email or ""
    password = password or ""
    # Blank check only; the directory lookup is an exact match on the raw email
    if not email.strip() or not password:
        return SignInResult(ok=False, message=MSG_MISSING_FIELDS, code="VALIDATION_ERROR", status_code=400)

    try:
        session = manager.authenticate(email, password)
        if session is None:
            return SignInResult(ok=False, message=MSG_INVALID_CREDENTIALS, code="INVALID_CREDENTIALS", status_code=401)
        token = manager.issue_token(session)
    except Exception:
        logger.exception("Sign-in failed unexpectedly for %s", email)
        return SignInResult(ok=False, message=MSG_UNEXPECTED, code="SIGNIN_ERROR", status_code=500)

    return SignInResult(ok=True, message=MSG_WELCOME, session=session, token=token)


def demo_accounts() -> List[Dict[str, str]]:
    """Credentials for the sign-in page prefill buttons. Not a security boundary."""

    if not settings.DEMO_ACCOUNTS_ENABLED:
        return []
    return [{"name": u["name"], "email": u["email"], "password": u["password"]} for u in DEMO_USERS]
