"""
PartnerPulse FastAPI application entry point.

Pipeline: partner feeds → signals → classification → scoring → insights → digest
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app import __version__
from app.config import get_settings
from app.db.session import check_db_connection, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("PartnerPulse starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        # Prompt templates ship as package data; a broken install should fail at boot.
        try:
            from app.prompts.loader import load_prompt

            for name in ("classify_signal_v1", "summarize_signal_v1", "insight_v1", "deeper_play_v1"):
                load_prompt(name)
            logger.info("Prompt templates loaded")
        except Exception as e:
            logger.critical("Prompt templates missing at startup: %s", e)
            raise

        yield
    finally:
        logger.info("PartnerPulse shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Mount API routes
    from app.api.auth import router as auth_router
    from app.api.digest import router as digest_router
    from app.api.insights import router as insights_router
    from app.api.objectives import router as objectives_router
    from app.api.partners import router as partners_router

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(partners_router, prefix="/api/partners", tags=["partners"])
    app.include_router(objectives_router, prefix="/api/objectives", tags=["objectives"])
    app.include_router(insights_router, prefix="/api/insights", tags=["insights"])
    app.include_router(digest_router, prefix="/api/digest", tags=["digest"])

    # Internal job endpoints (cron/scripts, token-authenticated)
    from app.api.internal import router as internal_router

    app.include_router(internal_router, tags=["internal"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
