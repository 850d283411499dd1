"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from segtrans import __version__
from segtrans.api.v1.routes import translation
from segtrans.config import settings
from segtrans.models.database.base import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    if settings.persist_results:
        try:
            await init_db()
        except Exception as e:
            logger.error("Failed to initialize database: %s", e)
    if not settings.resolved_api_key:
        logger.warning("No model API key configured; translation requests will fail")

    yield


app = FastAPI(
    title=settings.app_name,
    description="Chunked LLM translation of text segments",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(translation.router, prefix="/api/v1", tags=["translation"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Segment Translator API", "version": __version__}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
