"""
Pydantic models for API request/response validation.
"""

from datetime import date
from typing import Optional, List, Union
from pydantic import BaseModel, ConfigDict

from tennis_ladder.database.models import SkillLevel

# Raw game counts arrive as form strings or JSON numbers; blanks mean "not played"
RawGames = Optional[Union[int, str]]
RawPlayerId = Optional[Union[int, str]]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str


class OptionsResponse(BaseModel):
    """Values accepted by the registration and match report forms."""

    levels: List[str]
    locations: List[str]
    ranking_policy: str
    score_policy: str


class RegisterPlayerRequest(BaseModel):
    """Request to register a new ladder player."""

    player_name: str
    phone: Optional[str] = None
    phone_consent: bool = False
    level: SkillLevel


class PlayerResponse(BaseModel):
    """A player as shown on the ladder."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone: Optional[str] = None
    level: str
    ladder_rank: int
    rating: float
    rating_deviation: float
    volatility: float
    wins: int
    losses: int
    matches_played: int


class RegisterPlayerResponse(BaseModel):
    """Response from registering a player."""

    status: str
    message: str
    player: PlayerResponse


class ReportMatchRequest(BaseModel):
    """
    Request to report a singles match result.

    Set fields follow the report form: w_sN / l_sN are the winner's and the
    loser's games in set N. Sets 1 and 2 are required, set 3 is optional.
    Every field is taken raw; MatchRecorder validates them so a bad report is
    a 400 with a readable message rather than a schema error.
    """

    match_date: Optional[str] = None
    location: Optional[str] = None
    winner_id: RawPlayerId = None
    loser_id: RawPlayerId = None
    w_s1: RawGames = None
    l_s1: RawGames = None
    w_s2: RawGames = None
    l_s2: RawGames = None
    w_s3: RawGames = None
    l_s3: RawGames = None

    @property
    def raw_sets(self):
        """The three (winner, loser) raw game pairs in set order."""
        return [
            (self.w_s1, self.l_s1),
            (self.w_s2, self.l_s2),
            (self.w_s3, self.l_s3),
        ]


class MatchRecordResponse(BaseModel):
    """A persisted match with before/after ladder state for both players."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    match_date: date
    location: str
    score: str
    winner_id: int
    loser_id: int
    winner_old_rank: int
    winner_new_rank: int
    loser_old_rank: int
    loser_new_rank: int
    winner_old_rating: Optional[float] = None
    winner_new_rating: Optional[float] = None
    loser_old_rating: Optional[float] = None
    loser_new_rating: Optional[float] = None
    ranking_policy: str


class MatchLogEntry(MatchRecordResponse):
    """Match log row with player names."""

    winner_name: str = ""
    loser_name: str = ""


class ReportMatchResponse(BaseModel):
    """Response from reporting a match."""

    status: str
    message: str
    match: MatchRecordResponse
