"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from morning_brief.config import get_settings
from morning_brief.database import create_tables
from morning_brief.routers import briefings_router, workspaces_router
from morning_brief.services.workspace import WorkspaceLocks

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: create database tables
    await create_tables()
    logger.info("%s started", settings.app_name)
    yield
    # Shutdown: cleanup if needed


app = FastAPI(
    title=settings.app_name,
    description="Morning brief pipeline: synthesis, validation, repair, fallback and delivery gating",
    version="1.0.0",
    lifespan=lifespan,
)

# Single-writer locks for workspace runtime state
app.state.workspace_locks = WorkspaceLocks()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with /api/v1 prefix
app.include_router(briefings_router, prefix="/api/v1")
app.include_router(workspaces_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
