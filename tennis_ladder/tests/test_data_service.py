"""
Tests for data_service player and match storage operations.
"""
import asyncio

import pytest
from sqlalchemy import update

from tennis_ladder.database.models import Player, SkillLevel
from tennis_ladder.services import data_service
from tennis_ladder.services.exceptions import InvalidRegistrationError, PlayerNotFoundError
from tennis_ladder.tests.helpers import make_ladder, ranks_by_id

# db_session and session_factory fixtures are provided by conftest.py


# ============================================================================
# Helper Tests
# ============================================================================

def test_sanitize_text():
    assert data_service.sanitize_text("  Jane  ", 100) == "Jane"
    assert data_service.sanitize_text(None, 100) == ""
    assert data_service.sanitize_text("x" * 120, 100) == "x" * 100


@pytest.mark.parametrize("phone", [None, "", "910-555-0100", "+1 (910) 555 0100"])
def test_valid_phones(phone):
    assert data_service.is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["call me", "910.555.0100", "555-0100 ext 2"])
def test_invalid_phones(phone):
    assert not data_service.is_valid_phone(phone)


def test_location_from_value():
    assert data_service.location_from_value(" Mazarick Park ").value == "Mazarick Park"
    with pytest.raises(ValueError):
        data_service.location_from_value("Central Park")


# ============================================================================
# Registration Tests
# ============================================================================

@pytest.mark.asyncio
async def test_register_assigns_next_rank(db_session):
    """Each new player goes to the bottom of the ladder."""
    assert await data_service.get_next_rank(db_session) == 1

    first = await data_service.register_player(db_session, name="Ana", level="3.5")
    second = await data_service.register_player(db_session, name="Ben", level=SkillLevel.LEVEL_4_0)

    assert first["ladder_rank"] == 1
    assert second["ladder_rank"] == 2
    assert second["level"] == "4.0"
    assert await data_service.get_next_rank(db_session) == 3


@pytest.mark.asyncio
async def test_register_defaults(db_session):
    player = await data_service.register_player(db_session, name="  Carla Ruiz ", level="3.0")
    assert player["full_name"] == "Carla Ruiz"
    assert player["rating"] == 1500.0
    assert player["rating_deviation"] == 350.0
    assert player["volatility"] == 0.06
    assert player["wins"] == 0
    assert player["losses"] == 0
    assert player["matches_played"] == 0


@pytest.mark.asyncio
async def test_register_next_rank_after_gap(db_session):
    """Next rank is max + 1 even if the stored ranks have a gap."""
    await data_service.register_player(db_session, name="Ana", level="3.5")
    await db_session.execute(update(Player).values(ladder_rank=5))
    player = await data_service.register_player(db_session, name="Ben", level="3.5")
    assert player["ladder_rank"] == 6


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, level, phone, message",
    [
        ("   ", "3.5", None, "Player Name is required"),
        (None, "3.5", None, "Player Name is required"),
        ("Dee", "5.0", None, "Invalid level"),
        ("Dee", "", None, "Invalid level"),
        ("Dee", "3.5", "call me", "Invalid phone format"),
    ],
)
async def test_register_validation(db_session, name, level, phone, message):
    with pytest.raises(InvalidRegistrationError, match=message):
        await data_service.register_player(db_session, name=name, level=level, phone=phone)
    assert await data_service.get_next_rank(db_session) == 1


@pytest.mark.asyncio
async def test_register_truncates_long_values(db_session):
    player = await data_service.register_player(
        db_session, name="N" * 150, level="4.5", phone="5" * 40, phone_consent=True
    )
    assert len(player["full_name"]) == 100
    assert player["phone"] == "5" * 25


# ============================================================================
# Ladder Read Tests
# ============================================================================

@pytest.mark.asyncio
async def test_phone_only_shown_with_consent(db_session):
    await data_service.register_player(
        db_session, name="Shares", level="3.5", phone="910-555-0101", phone_consent=True
    )
    await data_service.register_player(
        db_session, name="Private", level="3.5", phone="910-555-0102", phone_consent=False
    )
    await data_service.register_player(db_session, name="No Phone", level="3.5", phone_consent=True)

    ladder = await data_service.list_ladder(db_session)
    phones = {player["full_name"]: player["phone"] for player in ladder}
    assert phones == {"Shares": "910-555-0101", "Private": None, "No Phone": None}


@pytest.mark.asyncio
async def test_list_ladder_orders_by_rank(session_factory):
    ids = await make_ladder(session_factory, 4)
    async with session_factory() as session:
        await session.execute(update(Player).where(Player.id == ids[0]).values(ladder_rank=9))
        await session.commit()

        ladder = await data_service.list_ladder(session)
    assert [player["id"] for player in ladder] == [ids[1], ids[2], ids[3], ids[0]]


@pytest.mark.asyncio
async def test_list_players_by_rating(session_factory):
    ids = await make_ladder(session_factory, 3)
    async with session_factory() as session:
        await session.execute(update(Player).where(Player.id == ids[2]).values(rating=1700.0))
        await session.execute(update(Player).where(Player.id == ids[0]).values(rating=1400.0))
        await session.commit()

        ordered = await data_service.list_players_by_rating(session)
    assert [player["id"] for player in ordered] == [ids[2], ids[1], ids[0]]


@pytest.mark.asyncio
async def test_get_player(session_factory):
    ids = await make_ladder(session_factory, 2)
    async with session_factory() as session:
        player = await data_service.get_player(session, ids[1])
        missing = await data_service.get_player(session, 999)
    assert player["full_name"] == "Player 2"
    assert missing is None


@pytest.mark.asyncio
async def test_get_players_for_update(session_factory):
    ids = await make_ladder(session_factory, 3)
    async with session_factory() as session:
        everyone = await data_service.get_players_for_update(session)
        assert [player.id for player in everyone] == sorted(ids)

        some = await data_service.get_players_for_update(session, [ids[2], ids[0]])
        assert [player.id for player in some] == [ids[0], ids[2]]

        with pytest.raises(PlayerNotFoundError) as exc_info:
            await data_service.get_players_for_update(session, [ids[0], 999])
        assert exc_info.value.player_id == 999


@pytest.mark.asyncio
async def test_list_matches_empty(db_session):
    assert await data_service.list_matches(db_session) == []
    assert await data_service.get_match(db_session, 1) is None


@pytest.mark.asyncio
async def test_concurrent_registrations_get_distinct_ranks(session_factory):
    await make_ladder(session_factory, 3)

    async def register(name):
        async with session_factory() as session:
            player = await data_service.register_player(session, name=name, level="3.5")
            await session.commit()
            return player["ladder_rank"]

    new_ranks = await asyncio.gather(register("Dana"), register("Eli"), register("Fay"))

    assert sorted(new_ranks) == [4, 5, 6]
    ranks = await ranks_by_id(session_factory)
    assert sorted(ranks.values()) == list(range(1, 7))


@pytest.mark.asyncio
async def test_lock_ladder_opens_transaction(db_session):
    await data_service.lock_ladder(db_session)
    assert db_session.in_transaction()
