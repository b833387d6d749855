"""
Data service layer for database operations.
Handles player registration, ladder reads and match persistence.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from tennis_ladder.database.models import CourtLocation, Match, Player, SkillLevel
from tennis_ladder.services.exceptions import InvalidRegistrationError, PlayerNotFoundError
from tennis_ladder.utils.constants import (
    ALLOWED_LEVELS,
    INITIAL_RATING,
    INITIAL_RD,
    INITIAL_VOLATILITY,
    LADDER_LOCK_KEY,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
)
from tennis_ladder.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

# Digits, spaces, +, -, and parentheses
_PHONE_RE = re.compile(r"^[0-9+\-\s()]+$")

#
# Helper functions
#


def sanitize_text(value: Optional[str], max_length: int) -> str:
    """Trim whitespace and truncate to max_length. None becomes ""."""
    cleaned = (value or "").strip()
    return cleaned[:max_length]


def is_valid_phone(phone: Optional[str]) -> bool:
    """Empty phones are allowed; otherwise only digits, spaces, + - ( )."""
    if not phone:
        return True
    return bool(_PHONE_RE.match(phone))


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


def player_to_dict(player: Player, include_phone: bool = True) -> Dict:
    """Serialize a player row; the phone is dropped unless allowed and consented."""
    return {
        "id": player.id,
        "full_name": player.full_name,
        "phone": player.phone if include_phone and player.phone_consent else None,
        "level": _enum_value(player.level),
        "ladder_rank": player.ladder_rank,
        "rating": player.rating,
        "rating_deviation": player.rating_deviation,
        "volatility": player.volatility,
        "wins": player.wins,
        "losses": player.losses,
        "matches_played": player.matches_played,
    }


def match_to_dict(match: Match) -> Dict:
    """Serialize a match row."""
    return {
        "id": match.id,
        "match_date": match.match_date,
        "location": _enum_value(match.location),
        "score": match.score,
        "winner_id": match.winner_id,
        "loser_id": match.loser_id,
        "winner_old_rank": match.winner_old_rank,
        "winner_new_rank": match.winner_new_rank,
        "loser_old_rank": match.loser_old_rank,
        "loser_new_rank": match.loser_new_rank,
        "winner_old_rating": match.winner_old_rating,
        "winner_new_rating": match.winner_new_rating,
        "loser_old_rating": match.loser_old_rating,
        "loser_new_rating": match.loser_new_rating,
        "ranking_policy": match.ranking_policy,
    }


#
# Players
#


async def lock_ladder(session: AsyncSession) -> None:
    """
    Serialize ladder writers for the rest of the current transaction.

    PostgreSQL takes a transaction-scoped advisory lock, which also covers an
    empty ladder where there are no rows to lock. Engines from build_engine
    start SQLite transactions with BEGIN IMMEDIATE, so acquiring the
    connection already holds the write lock there.
    """
    conn = await session.connection()
    if conn.dialect.name == "postgresql":
        await conn.execute(select(func.pg_advisory_xact_lock(LADDER_LOCK_KEY)))


async def get_next_rank(session: AsyncSession) -> int:
    """Rank for a newly registered player: current max + 1, or 1 on an empty ladder."""
    result = await session.execute(select(func.coalesce(func.max(Player.ladder_rank), 0)))
    return int(result.scalar_one()) + 1


async def register_player(
    session: AsyncSession,
    name: Optional[str],
    level,
    phone: Optional[str] = None,
    phone_consent: bool = False,
) -> Dict:
    """
    Register a new player at the bottom of the ladder.

    Args:
        session: Database session
        name: Display name (trimmed, truncated to 100 characters)
        level: Skill level, one of 3.0, 3.5, 4.0, 4.5
        phone: Optional contact phone
        phone_consent: Whether the phone may be shown on the ladder

    Returns:
        dict: Created player

    Raises:
        InvalidRegistrationError: If name, level or phone is invalid
    """
    full_name = sanitize_text(name, MAX_NAME_LENGTH)
    phone_clean = sanitize_text(phone, MAX_PHONE_LENGTH)
    level_value = str(_enum_value(level) or "").strip()

    if not full_name:
        raise InvalidRegistrationError("Player Name is required.")
    if level_value not in ALLOWED_LEVELS:
        raise InvalidRegistrationError(
            f"Invalid level. Allowed values: {', '.join(ALLOWED_LEVELS)}."
        )
    if phone_clean and not is_valid_phone(phone_clean):
        raise InvalidRegistrationError(
            "Invalid phone format. Only digits, spaces, +, -, and parentheses are allowed."
        )

    await lock_ladder(session)
    player = Player(
        full_name=full_name,
        phone=phone_clean or None,
        phone_consent=bool(phone_consent and phone_clean),
        level=SkillLevel(level_value),
        ladder_rank=await get_next_rank(session),
        rating=INITIAL_RATING,
        rating_deviation=INITIAL_RD,
        volatility=INITIAL_VOLATILITY,
        wins=0,
        losses=0,
        matches_played=0,
    )
    session.add(player)
    await session.flush()
    await session.refresh(player)

    logger.info(f"Registered player {player.id} ({full_name}) at rank {player.ladder_rank}")
    return player_to_dict(player)


async def get_player(session: AsyncSession, player_id: int) -> Optional[Dict]:
    """Get a player by ID, or None."""
    player = await session.get(Player, player_id)
    if player is None:
        return None
    return player_to_dict(player)


async def get_players_for_update(
    session: AsyncSession, player_ids: Optional[Iterable[int]] = None
) -> List[Player]:
    """
    Load players with row locks (SELECT ... FOR UPDATE), ordered by ID.

    Locking in a consistent ID order keeps concurrent reports from
    deadlocking. With player_ids=None the whole ladder is locked.

    Raises:
        PlayerNotFoundError: If any requested ID does not exist
    """
    query = select(Player).order_by(Player.id).with_for_update()
    wanted = None
    if player_ids is not None:
        wanted = list(player_ids)
        query = query.where(Player.id.in_(wanted))

    result = await session.execute(query)
    players = list(result.scalars().all())

    if wanted is not None:
        found = {player.id for player in players}
        for player_id in wanted:
            if player_id not in found:
                raise PlayerNotFoundError(player_id)
    return players


async def list_ladder(session: AsyncSession) -> List[Dict]:
    """All players ordered by ladder rank."""
    result = await session.execute(select(Player).order_by(Player.ladder_rank.asc(), Player.id.asc()))
    return [player_to_dict(player) for player in result.scalars().all()]


async def list_players_by_rating(session: AsyncSession) -> List[Dict]:
    """All players ordered by rating desc, RD asc, wins desc, matches played desc, ID asc."""
    result = await session.execute(
        select(Player).order_by(
            Player.rating.desc(),
            Player.rating_deviation.asc(),
            Player.wins.desc(),
            Player.matches_played.desc(),
            Player.id.asc(),
        )
    )
    return [player_to_dict(player) for player in result.scalars().all()]


async def update_player_ranks(session: AsyncSession, players: Iterable[Player], new_ranks: Dict[int, int]) -> None:
    """Write new ladder ranks onto loaded (locked) player rows."""
    now_utc = utcnow()
    for player in players:
        new_rank = new_ranks.get(player.id)
        if new_rank is not None and new_rank != player.ladder_rank:
            player.ladder_rank = new_rank
            player.updated_at = now_utc
    await session.flush()


#
# Matches
#


async def insert_match(session: AsyncSession, **values) -> Match:
    """Insert one match row and return it with its generated ID."""
    match = Match(**values)
    session.add(match)
    await session.flush()
    return match


async def get_match(session: AsyncSession, match_id: int) -> Optional[Dict]:
    """Get a single match log entry by ID, or None."""
    entries = await list_matches(session, match_id=match_id)
    return entries[0] if entries else None


async def list_matches(
    session: AsyncSession, limit: Optional[int] = None, match_id: Optional[int] = None
) -> List[Dict]:
    """Match log, oldest first (match date, then ID), with player names."""
    winner = aliased(Player)
    loser = aliased(Player)

    query = select(
        Match,
        winner.full_name.label("winner_name"),
        loser.full_name.label("loser_name"),
    ).select_from(
        Match
    ).join(
        winner, Match.winner_id == winner.id
    ).join(
        loser, Match.loser_id == loser.id
    ).order_by(
        Match.match_date.asc(),
        Match.id.asc()
    )

    if match_id is not None:
        query = query.where(Match.id == match_id)
    if limit:
        query = query.limit(limit)

    result = await session.execute(query)
    return [
        {**match_to_dict(row.Match), "winner_name": row.winner_name, "loser_name": row.loser_name}
        for row in result.all()
    ]


def location_from_value(value) -> CourtLocation:
    """
    Resolve a location string to its enum member.

    Raises:
        ValueError: If the value is not one of the allowed locations
    """
    return CourtLocation(str(_enum_value(value) or "").strip())
