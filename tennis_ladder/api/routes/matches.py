"""Match reporting and match log route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_ladder.api.auth_dependencies import can_report_matches
from tennis_ladder.api.routes import limiter
from tennis_ladder.database import db
from tennis_ladder.database.db import get_db_session
from tennis_ladder.models.schemas import MatchLogEntry, ReportMatchRequest, ReportMatchResponse
from tennis_ladder.services import data_service
from tennis_ladder.services.exceptions import (
    PlayerNotFoundError,
    ReportNotAuthorizedError,
    ScoreError,
    StateError,
    StorageError,
    ValidationError,
)
from tennis_ladder.services.match_recorder import MatchRecorder
from tennis_ladder.utils import config

logger = logging.getLogger(__name__)
router = APIRouter()


def get_match_recorder() -> MatchRecorder:
    """Dependency building the recorder from the configured policies."""
    return MatchRecorder(
        db.AsyncSessionLocal,
        ranking_policy=config.get_ranking_policy(),
        score_policy=config.get_score_policy(),
    )


@router.post("/api/matches", response_model=ReportMatchResponse)
@limiter.limit("10/minute")
async def report_match(
    request: Request,
    payload: ReportMatchRequest,
    is_authorized: bool = Depends(can_report_matches),
    recorder: MatchRecorder = Depends(get_match_recorder),
):
    """
    Report a singles match and update the ladder.

    Request body:
        {
            "match_date": "2025-06-14",
            "location": "Lake Rim Park",
            "winner_id": 7,
            "loser_id": 3,
            "w_s1": "6", "l_s1": "4",
            "w_s2": "3", "l_s2": "6",
            "w_s3": "10", "l_s3": "8"   // Optional third set
        }

    Returns:
        dict: The recorded match with old/new ranks (and ratings under rating_resort)
    """
    try:
        record = await recorder.report_match(payload, is_authorized=is_authorized)
    except ReportNotAuthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except (ValidationError, ScoreError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(
            status_code=500,
            detail="Error saving match. Please verify that players have a valid ladder rank and try again.",
        )

    return {
        "status": "success",
        "message": f"Match {record.id} recorded",
        "match": record,
    }


@router.get("/api/matches", response_model=List[MatchLogEntry])
async def get_match_log(
    limit: Optional[int] = Query(None, ge=1), session: AsyncSession = Depends(get_db_session)
):
    """
    Get the match log.

    Args:
        limit: Optional maximum number of matches

    Returns:
        list: Matches ordered by match date then ID, with player names
    """
    try:
        return await data_service.list_matches(session, limit=limit)
    except Exception as e:
        logger.error(f"Error loading matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error loading matches.")


@router.get("/api/matches/{match_id}", response_model=MatchLogEntry)
async def get_match(match_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a single match log entry."""
    match = await data_service.get_match(session, match_id)
    if match is None:
        raise HTTPException(status_code=404, detail=f"Match with ID {match_id} not found.")
    return match
