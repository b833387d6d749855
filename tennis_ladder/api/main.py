"""
Tennis Ladder API Server

FastAPI server for player registration, match reporting and the ladder.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore

from tennis_ladder.api.routes import router, limiter as routes_limiter
from tennis_ladder.database import db
from tennis_ladder.utils import config

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("Starting up Tennis Ladder API...")

    # Fail fast on a misconfigured policy rather than on the first report
    ranking_policy = config.get_ranking_policy()
    score_policy = config.get_score_policy()
    logger.info(f"Ranking policy: {ranking_policy.value}, score policy: {score_policy.value}")

    # Initialize database (create tables if they don't exist)
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Don't raise - allow app to start so /api/health still answers

    yield  # App is running

    # Shutdown
    logger.info("Shutting down Tennis Ladder API...")
    await db.engine.dispose()


app = FastAPI(
    title="Tennis Ladder API",
    description="API for registering players, reporting matches and viewing the tennis ladder",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware - origins configured via ALLOWED_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
