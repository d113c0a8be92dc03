"""FastAPI application for the Repcir badge engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .api.deps import get_badge_definition_repository, get_evaluation_worker
from .api.exception_handlers import register_exception_handlers
from .api.routes import badges
from .logging_config import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"Starting Repcir badge engine v{__version__}")
    logger.info(f"Badges DB: {settings.badges_db_path}")

    if settings.seed_catalog_on_startup:
        get_badge_definition_repository().seed()

    worker = get_evaluation_worker()
    worker.start()
    yield
    # Shutdown
    worker.stop()
    logger.info("Shutting down Repcir badge engine")


app = FastAPI(
    title="Repcir Badges API",
    description="Achievement badges for strength, skill and consistency milestones",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

app.include_router(badges.router, prefix="/api/v1/badges", tags=["badges"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
