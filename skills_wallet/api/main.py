"""
FastAPI application for the skills wallet.

Provides REST API for:
- Member skill views and completion toggles
- Admin skill catalog management
- Admin assignments and decisions
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import get_settings
from skills_wallet import __version__
from skills_wallet.core.errors import SkillsWalletError
from skills_wallet.core.logging import configure_logging
from skills_wallet.db.database import check_database, init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging()
    logger.info("Starting skills-wallet service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down skills-wallet service...")


app = FastAPI(
    title="Skills Wallet",
    description="""
    Skill assignment and progress tracking for the membership portal.

    ## Progress resolution

    Each (member, skill) view is recomputed on every read from:

    - the skill's current content catalog
    - the member's completion ledger
    - the admin decision (approved / rejected / completed / notes)

    Rejection shows 0%, admin completion shows 100% and locks member edits,
    otherwise progress is completed items over catalog size.
    """,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SkillsWalletError)
async def skills_wallet_error_handler(request: Request, exc: SkillsWalletError) -> JSONResponse:
    """Map typed service errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "skills-wallet",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round-trip."""
    db_status, db_error = check_database()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "components": {"database": db_status},
        "config": settings.get_skills_config(),
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from skills_wallet.api.routers import admin_router, member_router  # noqa: E402

app.include_router(member_router.router, prefix="/api/member", tags=["Member Skills"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["Admin Skills"])
