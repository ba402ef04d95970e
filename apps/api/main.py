"""
Music Comment Analyzer - FastAPI Backend
Main application entry point with health check and API routing.
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import settings
from routers import health, comments

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("Starting Music Comment Analyzer API...")
    if not settings.YOUTUBE_API_KEY:
        logger.warning("YOUTUBE_API_KEY is not configured; comment fetches will fail.")
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not configured; requests must supply their own key.")
    yield
    # Shutdown
    logger.info("Shutting down API...")


app = FastAPI(
    title="Music Comment Analyzer API",
    description="Find YouTube comments asking about the music in a video and link to the moment",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(comments.router, prefix="/comments", tags=["Comments"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Music Comment Analyzer API",
        "version": "0.1.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT, reload=True)
