"""
Clinical Posture Measurement API - Main Application Entry Point

This is the main FastAPI application that provides clinical posture analysis
from front, side and back view landmarks or images.
"""

import logging

import uvicorn
import nest_asyncio
from fastapi import FastAPI

from api.routes import router
from app_config.settings import APIConfig

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure the root logger for the API process."""
    logging.basicConfig(
        level=APIConfig.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=APIConfig.TITLE,
        version=APIConfig.VERSION,
        description=APIConfig.DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Include API routes
    app.include_router(router)

    return app


app = create_app()


@app.on_event("startup")
async def startup_event():
    """Startup event."""
    logger.info("Starting Clinical Posture Measurement API...")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Clinical Posture Measurement API...")


def main():
    """Run the API server."""
    configure_logging()

    # Apply nest_asyncio for compatibility
    nest_asyncio.apply()

    # Run the server
    uvicorn.run(
        app,
        host=APIConfig.HOST,
        port=APIConfig.PORT,
        log_level=APIConfig.LOG_LEVEL,
        reload=False,  # Set to True for development
    )


if __name__ == "__main__":
    main()
