"DevNotes CMS auth backend"
from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from devnotes.web import config as _cfg
from devnotes.web.auth_utils import PRIVATE_NO_STORE
from devnotes.web.routes.articles import articles_router
from devnotes.web.routes.auth import auth_router
from devnotes.web.routes.users import users_router


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via DEVNOTES_ENABLE_DOTENV (default true
      outside pytest).
    """
    # Under pytest, do not load .env – tests provide their own env.
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("DEVNOTES_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("devnotes.web")


def create_app() -> FastAPI:
    """Build the ASGI app with the auth, users and articles routers."""
    application = FastAPI(
        title="DevNotes CMS auth",
        description="OAuth handshake, login audit and publishing endpoints for the DevNotes CMS",
        version="0.1.0",
    )
    application.include_router(auth_router)
    application.include_router(users_router)
    application.include_router(articles_router)

    @application.get("/health")
    async def health_check():
        # Minimal health endpoint used by orchestrators and tests.
        return JSONResponse({"status": "healthy"}, headers=dict(PRIVATE_NO_STORE))

    logger.info("DevNotes app created (env=%s)", _cfg.get_environment())
    return application


app = create_app()
