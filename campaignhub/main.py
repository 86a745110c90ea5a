"""
CampaignHub — FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campaignhub.api.v1 import actions, auth, resources, roles
from campaignhub.config import get_settings
from campaignhub.core.decorators import public
from campaignhub.core.exceptions import CampaignHubError
from campaignhub.core.security import verify_identity
from campaignhub.services.route_protection import protect_route

settings = get_settings()

logging.basicConfig(
    level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize DB tables on startup."""
    from campaignhub.database import init_db

    init_db()
    logger.info(
        "CampaignHub started (environment=%s, route protection fail-open=%s)",
        settings.ENVIRONMENT,
        settings.ROUTE_PROTECTION_FAIL_OPEN,
    )
    yield


# ─── App ──────────────────────────────────────────────────────────────────────

# Every route passes the identity gate, then route protection, in this order.
app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    description=(
        "CampaignHub — role-based access control for the email campaign "
        "platform: roles, resources, actions and per-request route protection."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    dependencies=[Depends(verify_identity), Depends(protect_route)],
)


# ─── CORS ─────────────────────────────────────────────────────────────────────

origins = settings.ALLOWED_ORIGINS if settings.is_production else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Exception handlers ───────────────────────────────────────────────────────


@app.exception_handler(CampaignHubError)
async def campaignhub_exception_handler(
    request: Request, exc: CampaignHubError
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.ENVIRONMENT == "development":
        import traceback

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": str(exc),
                "traceback": traceback.format_exc(),
            },
        )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred.",
        },
    )


# ─── Health endpoint ──────────────────────────────────────────────────────────


@app.get("/health", tags=["health"])
@public
def health_check() -> Dict[str, Any]:
    """Returns system health including DB connectivity."""
    from sqlalchemy import text

    from campaignhub.database import engine

    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.warning("Health check: database unreachable", exc_info=True)

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "db_connected": db_ok,
    }


# ─── Routers ──────────────────────────────────────────────────────────────────

API_PREFIX = settings.API_PREFIX

app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(roles.router, prefix=API_PREFIX)
app.include_router(resources.router, prefix=API_PREFIX)
app.include_router(actions.router, prefix=API_PREFIX)
