"""
FastAPI main application for Homey
"""
import logging
import os
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

# Add api directory to path for imports
api_dir = os.path.dirname(os.path.abspath(__file__))
if api_dir not in sys.path:
    sys.path.insert(0, api_dir)

from core.config import settings  # noqa: E402
from core.logging import setup_logging  # noqa: E402
from middleware.logging_middleware import RequestLoggingMiddleware  # noqa: E402
from routers import projects  # noqa: E402
from services.generation_client import GenerationClient  # noqa: E402

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Homey API...")

    if settings.gemini_api_key:
        key = settings.gemini_api_key
        key_preview = f"{key[:7]}...{key[-4:]}" if len(key) > 11 else "***"
        logger.info(f"✅ GEMINI_API_KEY is set: {key_preview}")
    else:
        logger.error("❌ GEMINI_API_KEY is NOT set - generation requests will fail!")

    # One client for the whole process, handed to every orchestrator
    app.state.generation_client = GenerationClient(settings)
    logger.info("Application started")

    yield

    logger.info("Shutting down Homey API...")
    await app.state.generation_client.close()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="DIY renovation plans and inspiration images from a photo",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Generated images are large base64 payloads
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint for load balancers"""
    client = getattr(request.app.state, "generation_client", None)
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "api_key_configured": bool(settings.gemini_api_key),
        "usage_stats": client.get_usage_statistics() if client else None,
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {"projects": "/api/projects"},
    }


app.include_router(projects.router, prefix="/api")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
