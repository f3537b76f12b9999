"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import matches, pitches, promotions, reservations, users
from app.core.config import settings
from app.core.database import init_db
from app.services.scheduler import match_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Pitch Booking Service")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await init_db()

    if settings.SCHEDULER_ENABLED:
        await match_scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down Pitch Booking Service")
    await match_scheduler.stop()


# Create FastAPI app
app = FastAPI(
    title="Pitch Booking Service",
    description="Book sports pitches, open practice matches and run the game day",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users.router)
app.include_router(pitches.router)
app.include_router(promotions.router)
app.include_router(reservations.router)
app.include_router(matches.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduler_running": match_scheduler.running,
    }
