"""Leave Desk — FastAPI Application Factory."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from leavedesk.auth.router import router as auth_router
from leavedesk.common.exceptions import register_exception_handlers
from leavedesk.common.rate_limit import limiter
from leavedesk.config import settings
from leavedesk.dashboard.router import router as dashboard_router
from leavedesk.database import engine
from leavedesk.leave.router import router as leave_router
from leavedesk.profiles.router import router as profiles_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Leave Desk starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Leave Desk",
        description="Leave requests, manager approvals, HR reporting and user administration",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])

    # Uploaded documents; in production the reverse proxy serves /uploads
    if settings.ENVIRONMENT != "production":
        try:
            os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
        except OSError as exc:
            logger.warning("Not serving /uploads, %s is unavailable: %s", settings.UPLOAD_DIR, exc)
        else:
            app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    return app


app = create_app()
