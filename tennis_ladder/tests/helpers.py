"""Helpers shared by the ladder tests."""

from typing import Dict, List

from sqlalchemy import func, select

from tennis_ladder.database.models import Match, Player
from tennis_ladder.services import data_service

LEVELS = ["3.0", "3.5", "4.0", "4.5"]


async def make_ladder(session_factory, count: int) -> List[int]:
    """Register `count` players; returns their IDs in rank order (rank 1 first)."""
    player_ids = []
    async with session_factory() as session:
        for i in range(count):
            player = await data_service.register_player(
                session,
                name=f"Player {i + 1}",
                level=LEVELS[i % len(LEVELS)],
            )
            player_ids.append(player["id"])
        await session.commit()
    return player_ids


async def ranks_by_id(session_factory) -> Dict[int, int]:
    """Current stored ladder rank for every player."""
    async with session_factory() as session:
        result = await session.execute(select(Player.id, Player.ladder_rank))
        return {row.id: row.ladder_rank for row in result.all()}


async def count_matches(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count(Match.id)))
        return result.scalar_one()
