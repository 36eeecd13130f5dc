"""
FastAPI application entry point for the SEO accuracy API.

Configures logging and CORS, manages the database pool lifecycle and
registers the accuracy and confidence routers. Without a DATABASE_URL (or
with PREVIEW_MODE on) the service starts with in-memory adapters and needs
no database at all.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seo_accuracy import __version__
from seo_accuracy.api import api_router
from seo_accuracy.core.config import get_settings
from seo_accuracy.core.database import init_db, close_db
from seo_accuracy.core.exceptions import StorageError
from seo_accuracy.services.report_store import PostgresReportStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: open the pool and make sure the report table exists.
    Shutdown: close the pool.

    A database failure at startup is logged and the service keeps running;
    report persistence is best-effort anyway.
    """
    settings = get_settings()
    logger.info("SEO accuracy API starting")

    try:
        pool = await init_db()
        if pool is not None:
            logger.info("Database connection pool initialized")
            await PostgresReportStore().ensure_schema()
        else:
            logger.info("Running without a database (in-memory report store)")
    except StorageError as e:
        logger.error(f"Failed to prepare report table: {e}")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("SEO accuracy API shutting down")
    if settings.uses_database:
        try:
            await close_db()
            logger.info("Database connection pool closed")
        except Exception as e:
            logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="SEO Accuracy API",
    version=__version__,
    description=(
        "Confidence and accuracy scoring for SEO metrics gathered from "
        "multiple data providers, plus ML-enhanced confidence for keyword "
        "ranking histories."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers carry their own /accuracy and /confidence prefixes
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {
        "name": "SEO Accuracy API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seo_accuracy.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
