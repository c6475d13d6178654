import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.orm import SQLAdminRepo, init_db
from src.api.deps import (
    get_engine,
    get_password_hasher,
    get_rules,
    get_session_factory,
    get_settings,
)
from src.app_shell.bootstrap import bootstrap_admin
from src.app_shell.config import validate_ops_rules

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = get_rules()
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        print(f"CRITICAL: Rules load failed: {e}", file=sys.stderr)
        sys.exit(1)
    validate_ops_rules(rules)

    init_db(get_engine())
    bootstrap_admin(
        rules,
        SQLAdminRepo(get_session_factory()),
        get_password_hasher(),
        settings.admin_email,
        settings.admin_password,
    )

    yield

    get_engine().dispose()


app = FastAPI(
    title="Newsletter Service API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_newsletter,
    admin_templates,
    auth,
    public_newsletter,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(admin_newsletter.router, prefix="/api/admin", tags=["Admin Newsletter"])
app.include_router(
    admin_templates.router, prefix="/api/admin/templates", tags=["Admin Templates"]
)
app.include_router(public_newsletter.router, tags=["Newsletter"])


# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "newsletter"}
