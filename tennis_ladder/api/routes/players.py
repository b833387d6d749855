"""Player registration and ladder route handlers."""

import logging

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_ladder.api.routes import limiter
from tennis_ladder.database.db import get_db_session
from tennis_ladder.models.schemas import PlayerResponse, RegisterPlayerRequest, RegisterPlayerResponse
from tennis_ladder.services import data_service
from tennis_ladder.services.exceptions import InvalidRegistrationError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/players", response_model=RegisterPlayerResponse)
@limiter.limit("10/minute")
async def register_player(
    request: Request,
    payload: RegisterPlayerRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Register a new player at the bottom of the ladder.

    Request body:
        {
            "player_name": "Jane Doe",
            "phone": "(910) 555-0100",   // Optional
            "phone_consent": true,       // Optional, defaults to false
            "level": "3.5"
        }

    Returns:
        dict: Created player info
    """
    try:
        player = await data_service.register_player(
            session,
            name=payload.player_name,
            level=payload.level,
            phone=payload.phone,
            phone_consent=payload.phone_consent,
        )
        await session.commit()
        return {
            "status": "success",
            "message": f"Player '{player['full_name']}' registered at rank {player['ladder_rank']}",
            "player": player,
        }
    except InvalidRegistrationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error saving player: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Error saving player. Please try again or contact the administrator.",
        )


@router.get("/api/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: int, session: AsyncSession = Depends(get_db_session)):
    """
    Get a single player.

    Args:
        player_id: ID of the player

    Returns:
        dict: Player info (phone only if the player consented)
    """
    player = await data_service.get_player(session, player_id)
    if player is None:
        raise HTTPException(status_code=404, detail=f"Player with ID {player_id} not found.")
    return player


@router.get("/api/ladder", response_model=List[PlayerResponse])
async def get_ladder(order: str = "rank", session: AsyncSession = Depends(get_db_session)):
    """
    Get the ladder.

    Args:
        order: "rank" (default) or "rating"

    Returns:
        list: All players ordered by ladder rank or by rating (may be empty)
    """
    if order not in ("rank", "rating"):
        raise HTTPException(status_code=400, detail="order must be \"rank\" or \"rating\".")
    try:
        if order == "rating":
            return await data_service.list_players_by_rating(session)
        return await data_service.list_ladder(session)
    except Exception as e:
        logger.error(f"Error loading ladder: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error loading ladder.")
