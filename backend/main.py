"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from backend.core.config import get_settings
from backend.risk_analysis import router as risk_analysis_router
from backend.risk_analysis.router import get_active_config

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting %s...", settings.app_name)

    # Fail at startup rather than on the first request if the policy file is bad
    config = get_active_config()
    logger.info(
        "Scoring policy: %s (missing data: %s)",
        settings.risk_policy_file or "built-in defaults",
        config.missing_data_policy.value,
    )

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Compliance risk scoring for crypto-industry entities",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware - configurable via CORS_ORIGINS env var
    cors_origins = settings.cors_origins.split(",") if settings.cors_origins != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(risk_analysis_router)  # /risk-analysis

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "endpoints": {
                "assess": "/risk-analysis/assess - Score one entity",
                "batch": "/risk-analysis/assess/batch - Score several entities",
                "registrations": "/risk-analysis/registrations/assess - Score a portal registration record",
                "policy": "/risk-analysis/policy - Active scoring policy",
                "jurisdictions": "/risk-analysis/jurisdictions/classify - Jurisdiction risk tier",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
