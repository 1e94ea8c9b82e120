"""FastAPI application for the Coach Running engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import adherence, calibration
from .config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting Coach Running v{__version__}")
    logger.info(f"Activity fetch timeout: {settings.activity_fetch_timeout_seconds}s")
    logger.info(f"Running activity types: {', '.join(settings.running_activity_types)}")

    yield

    logger.info("Shutting down Coach Running")


def create_app() -> FastAPI:
    """Build the application with its middleware, handlers and routers."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Coach Running API",
        description="Performance calibration and weekly adherence adaptation",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(calibration.router, prefix="/api/v1/calibration", tags=["calibration"])
    app.include_router(adherence.router, prefix="/api/v1/adherence", tags=["adherence"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "coach_running.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
