"""
FastAPI Application - Story Ranking Backend API
"""
import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings, ensure_directories
from database import init_engine, close_engine, create_tables
from database.init import run_migrations
from utils import logger, init_logging
from .dependencies import build_services
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    init_logging(app_name="api")
    ensure_directories()
    logger.info("Starting API server")

    try:
        await asyncio.to_thread(run_migrations)
    except Exception as e:
        # Fall back to creating tables from the models
        logger.error(f"Migration failed: {e}")
        await create_tables()

    await init_engine()
    services = build_services()
    app.state.rankings = services

    if settings.RANKING_INIT_ON_STARTUP:
        result = await services.initializer.initialize_on_startup()
        if result.get("success"):
            logger.info(f"Startup ranking check: created={result.get('created')}")
        else:
            logger.error(f"Startup ranking initialization failed: {result.get('error')}")

    yield

    # Shutdown
    logger.info("Shutting down API server")
    await services.dispatcher.stop()
    await close_engine()


app = FastAPI(
    title="Story Ranking Backend",
    description="Story stats ingestion and daily / weekly / monthly / all-time leaderboards",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Story Ranking Backend",
        "version": "1.0.0",
        "status": "running"
    }
