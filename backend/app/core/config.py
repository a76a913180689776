import json

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Resolve backend root (…/backend/) regardless of current working directory
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"

class Settings(BaseSettings):
    # Read backend/.env; unknown keys are ignored so a shared .env does not break startup
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "AI Agent Collaboration Hub"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    # One origin or several, comma separated
    # Example: "http://localhost:3000,https://example.com"
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    DATABASE_URL: str = "sqlite:///./hub.db"

    # ===== Session tokens =====
    # AUTH_SECRET has no default on purpose: the app refuses to start without it.
    AUTH_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "hub.session-token"
    SESSION_COOKIE_SECURE: bool = False
    # 30 days, re-issued once the token is older than a day
    SESSION_MAX_AGE_SECONDS: int = 30 * 24 * 60 * 60
    SESSION_UPDATE_AGE_SECONDS: int = 24 * 60 * 60

    # ===== User directory =====
    # static   -> in-process list built from the demo seed
    # database -> users table (demo users are upserted on startup)
    USER_DIRECTORY_BACKEND: str = "static"
    # Exposes the demo credentials for the sign-in page prefill buttons
    DEMO_ACCOUNTS_ENABLED: bool = True

    # ===== Collaboration chat =====
    # Fixed latency of the simulated multi-agent answer
    COLLAB_RESPONSE_DELAY_SECONDS: float = 2.0

    @field_validator("AUTH_SECRET")
    @classmethod
    def _require_strong_secret(cls, v: str) -> str:
        s = (v or "").strip()
        if len(s) < 16:
            raise ValueError("AUTH_SECRET must be set to at least 16 characters")
        return s

    @field_validator("USER_DIRECTORY_BACKEND")
    @classmethod
    def _normalize_directory_backend(cls, v: str) -> str:
        b = (v or "static").strip().lower()
        if b not in {"static", "database"}:
            raise ValueError("USER_DIRECTORY_BACKEND must be 'static' or 'database'")
        return b

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None or v == "":
            return []

        # Already a list: keep as is
        if isinstance(v, list):
            return v

        # String: prefer a JSON list, fall back to comma split
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except Exception:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]

        return v


# main.py and the services import this module-level instance
settings = Settings()
