"""Health check and form option route handlers."""

import logging

from fastapi import APIRouter

from tennis_ladder.models.schemas import HealthResponse, OptionsResponse
from tennis_ladder.utils import config
from tennis_ladder.utils.constants import ALLOWED_LEVELS, ALLOWED_LOCATIONS

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Service status
    """
    return {"status": "healthy", "message": "API is running"}


@router.get("/api/options", response_model=OptionsResponse)
async def get_options():
    """Allowed skill levels and match locations, plus the active policies."""
    return {
        "levels": ALLOWED_LEVELS,
        "locations": ALLOWED_LOCATIONS,
        "ranking_policy": config.get_ranking_policy().value,
        "score_policy": config.get_score_policy().value,
    }
