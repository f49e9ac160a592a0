"""Main FastAPI application for Panelcraft."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables using centralized loader
from panelcraft.core.env_loader import ensure_env_loaded
ensure_env_loaded()

from panelcraft.core.config import settings
from panelcraft.core.constants import PROJECT_NAME, VERSION
from panelcraft.core.logging_config import get_logger, level_from_name, setup_logging
from panelcraft.api.errors import register_error_handlers
from panelcraft.api.limits import limiter
from panelcraft.api.routers import comics, export, ocr, pages, stories

logger = get_logger("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {PROJECT_NAME} API...")
    yield
    logger.info(f"Shutting down {PROJECT_NAME} API...")


app = FastAPI(
    title="Panelcraft API",
    description="AI comic page generation with multi-page story continuity",
    version=VERSION,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
register_error_handlers(app)

# CORS middleware for web UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(comics.router, prefix="/api", tags=["comics"])
app.include_router(export.router, prefix="/api", tags=["export"])
app.include_router(stories.router, prefix="/api/stories", tags=["stories"])
app.include_router(pages.router, prefix="/api/pages", tags=["pages"])
app.include_router(ocr.router, prefix="/api/ocr", tags=["ocr"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Panelcraft API", "version": VERSION}


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def start_server(host: str = None, port: int = None, reload: bool = None):
    """Start the FastAPI server."""
    setup_logging(level=level_from_name(settings.log_level))
    uvicorn.run(
        "panelcraft.api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.debug if reload is None else reload,
        log_level="warning",
    )


if __name__ == "__main__":
    start_server()
