from __future__ import annotations

import logging

from app.core.config import settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process.

    Uvicorn installs its own handlers; we only attach one if the root logger
    has none so repeated app imports (tests, reload) do not duplicate lines.
    """

    lvl = str(level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=lvl, format=LOG_FORMAT)
    root.setLevel(lvl)
    logging.getLogger("app").setLevel(lvl)
