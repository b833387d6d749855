"""
SQLAlchemy ORM models for the tennis ladder.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Float,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tennis_ladder.database.db import Base
from tennis_ladder.utils.constants import INITIAL_RATING, INITIAL_RD, INITIAL_VOLATILITY


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class SkillLevel(str, enum.Enum):
    """Self-reported NTRP skill bracket."""

    LEVEL_3_0 = "3.0"
    LEVEL_3_5 = "3.5"
    LEVEL_4_0 = "4.0"
    LEVEL_4_5 = "4.5"


class CourtLocation(str, enum.Enum):
    """Courts where ladder matches are played."""

    LAKE_RIM_PARK = "Lake Rim Park"
    HOPE_MILLS_MUNICIPAL_PARK = "Hope Mills Municipal Park"
    MAZARICK_PARK = "Mazarick Park"
    GATES_FOUR = "Gates Four"
    TERRY_SANFORD = "Terry Sanford"


class Player(Base):
    """Registered ladder players."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(25), nullable=True)
    phone_consent = Column(Boolean, default=False, nullable=False)  # phone shown on ladder only if true
    level = Column(
        Enum(SkillLevel, values_callable=_enum_values, native_enum=False, length=8),
        nullable=False,
    )
    ladder_rank = Column(Integer, nullable=False)
    rating = Column(Float, default=INITIAL_RATING, nullable=False)
    rating_deviation = Column(Float, default=INITIAL_RD, nullable=False)
    volatility = Column(Float, default=INITIAL_VOLATILITY, nullable=False)
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    matches_played = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    matches_won = relationship("Match", foreign_keys="Match.winner_id", back_populates="winner")
    matches_lost = relationship("Match", foreign_keys="Match.loser_id", back_populates="loser")

    # ladder_rank is not unique: row-by-row rank shifts pass through
    # transient duplicates inside the transaction.
    __table_args__ = (
        Index("idx_players_ladder_rank", "ladder_rank"),
        Index("idx_players_rating", "rating"),
        CheckConstraint("ladder_rank >= 1", name="ck_players_rank_positive"),
    )


class Match(Base):
    """Reported match results. Rows are never updated or deleted."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_date = Column(Date, nullable=False)
    location = Column(
        Enum(CourtLocation, values_callable=_enum_values, native_enum=False, length=64),
        nullable=False,
    )
    score = Column(String(32), nullable=False)  # canonical "W-L W-L[ W-L]"
    winner_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    loser_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    winner_old_rank = Column(Integer, nullable=False)
    winner_new_rank = Column(Integer, nullable=False)
    loser_old_rank = Column(Integer, nullable=False)
    loser_new_rank = Column(Integer, nullable=False)
    # Only filled under the rating_resort policy
    winner_old_rating = Column(Float, nullable=True)
    winner_new_rating = Column(Float, nullable=True)
    loser_old_rating = Column(Float, nullable=True)
    loser_new_rating = Column(Float, nullable=True)
    ranking_policy = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    winner = relationship("Player", foreign_keys=[winner_id], back_populates="matches_won")
    loser = relationship("Player", foreign_keys=[loser_id], back_populates="matches_lost")

    __table_args__ = (
        CheckConstraint("winner_id <> loser_id", name="ck_matches_distinct_players"),
        Index("idx_matches_date", "match_date"),
        Index("idx_matches_winner", "winner_id"),
        Index("idx_matches_loser", "loser_id"),
    )
