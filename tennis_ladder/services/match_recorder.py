"""
Match recording.

Validates a reported match, applies the configured ranking policy and
persists the match together with the updated player rows in one
transaction.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from tennis_ladder.database.db import transaction
from tennis_ladder.database.models import Player
from tennis_ladder.models.schemas import MatchRecordResponse, ReportMatchRequest
from tennis_ladder.services import data_service, rank_resolver, rating_service
from tennis_ladder.services.exceptions import (
    InvalidDateError,
    InvalidLocationError,
    InvalidPlayerSelectionError,
    PlayerNotFoundError,
    ReportNotAuthorizedError,
    ScoreError,
    StateError,
    ValidationError,
)
from tennis_ladder.services.rank_resolver import LadderEntry, RankingPolicy, RankResolution
from tennis_ladder.services.score_parser import ScorePolicy, parse_score
from tennis_ladder.utils.constants import ALLOWED_LOCATIONS
from tennis_ladder.utils.datetime_utils import parse_match_date, utcnow

logger = logging.getLogger(__name__)


def _to_entry(player: Player) -> LadderEntry:
    return LadderEntry(
        player_id=player.id,
        rank=player.ladder_rank,
        rating=player.rating,
        rd=player.rating_deviation,
        wins=player.wins,
        matches_played=player.matches_played,
    )


def _to_rating(player: Player) -> rating_service.Rating:
    return rating_service.Rating(
        rating=player.rating,
        rd=player.rating_deviation,
        volatility=player.volatility,
    )


def _validate_player_id(raw, role: str) -> int:
    try:
        player_id = int(raw)
    except (TypeError, ValueError):
        raise InvalidPlayerSelectionError(f"Invalid {role} player.")
    if player_id <= 0:
        raise InvalidPlayerSelectionError(f"Invalid {role} player.")
    return player_id


class MatchRecorder:
    """
    Records reported matches against the ladder.

    The session factory and both policies are fixed at construction; each
    report_match call is one unit of work on its own session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        ranking_policy: RankingPolicy = RankingPolicy.POSITIONAL_SWAP,
        score_policy: ScorePolicy = ScorePolicy.STRICT,
    ):
        self._session_factory = session_factory
        self.ranking_policy = RankingPolicy(ranking_policy)
        self.score_policy = ScorePolicy(score_policy)

    @property
    def uses_ratings(self) -> bool:
        return self.ranking_policy == RankingPolicy.RATING_RESORT

    async def report_match(self, report: ReportMatchRequest, is_authorized: bool) -> MatchRecordResponse:
        """
        Record one match.

        Args:
            report: Raw match report fields
            is_authorized: Whether the caller may report matches

        Returns:
            MatchRecordResponse for the persisted match

        Raises:
            ReportNotAuthorizedError: Caller is not allowed to report
            ValidationError: Bad date, location or player selection
            ScoreError: Invalid set scores
            StateError: Player missing or ladder state corrupt (shared rank)
            StorageError: The transaction failed; nothing was written
        """
        if not is_authorized:
            logger.warning("Rejected match report from an unauthorized caller")
            raise ReportNotAuthorizedError()

        try:
            return await self._record(report)
        except (ValidationError, ScoreError, StateError) as e:
            logger.warning(f"Rejected match report ({type(e).__name__}): {e}")
            raise

    async def _record(self, report: ReportMatchRequest) -> MatchRecordResponse:
        match_date, location, winner_id, loser_id = self._validate(report)
        score = parse_score(report.raw_sets, self.score_policy)

        async with transaction(self._session_factory) as session:
            await data_service.lock_ladder(session)
            players = await data_service.get_players_for_update(session)
            by_id = {player.id: player for player in players}
            for player_id in (winner_id, loser_id):
                if player_id not in by_id:
                    raise PlayerNotFoundError(player_id)
            winner, loser = by_id[winner_id], by_id[loser_id]

            old_ratings = (winner.rating, loser.rating)
            new_ratings: Optional[Tuple[float, float]] = None

            if self.uses_ratings:
                resolution = self._apply_rating_resort(players, winner, loser)
                new_ratings = (winner.rating, loser.rating)
            else:
                resolution = rank_resolver.resolve_positional_swap(
                    [_to_entry(player) for player in players], winner_id, loser_id
                )
                self._record_result(winner, loser)

            await data_service.update_player_ranks(session, players, resolution.new_ranks)

            match = await data_service.insert_match(
                session,
                match_date=match_date,
                location=location,
                score=score.canonical,
                winner_id=winner_id,
                loser_id=loser_id,
                winner_old_rank=resolution.winner_old_rank,
                winner_new_rank=resolution.winner_new_rank,
                loser_old_rank=resolution.loser_old_rank,
                loser_new_rank=resolution.loser_new_rank,
                winner_old_rating=old_ratings[0] if new_ratings else None,
                winner_new_rating=new_ratings[0] if new_ratings else None,
                loser_old_rating=old_ratings[1] if new_ratings else None,
                loser_new_rating=new_ratings[1] if new_ratings else None,
                ranking_policy=self.ranking_policy.value,
            )
            record = MatchRecordResponse(**data_service.match_to_dict(match))

        logger.info(
            f"Recorded match {record.id}: player {winner_id} beat {loser_id} {record.score} "
            f"(ranks {record.winner_old_rank}->{record.winner_new_rank}, "
            f"{record.loser_old_rank}->{record.loser_new_rank})"
        )
        return record

    def _validate(self, report: ReportMatchRequest):
        """Step 1: date, location and player selection. Touches no state."""
        try:
            match_date = parse_match_date(report.match_date)
        except ValueError as e:
            raise InvalidDateError(f"Invalid Match Date: {e}") from e

        location_raw = (report.location or "").strip()
        if not location_raw:
            raise InvalidLocationError("Location is required.")
        try:
            location = data_service.location_from_value(location_raw)
        except ValueError:
            raise InvalidLocationError(
                f"Invalid location. Allowed values: {', '.join(ALLOWED_LOCATIONS)}."
            )

        winner_id = _validate_player_id(report.winner_id, "Winner")
        loser_id = _validate_player_id(report.loser_id, "Loser")
        if winner_id == loser_id:
            raise InvalidPlayerSelectionError("Winner and Loser must be different players.")

        return match_date, location, winner_id, loser_id

    @staticmethod
    def _record_result(winner: Player, loser: Player) -> None:
        now_utc = utcnow()
        winner.wins += 1
        winner.matches_played += 1
        loser.losses += 1
        loser.matches_played += 1
        winner.updated_at = now_utc
        loser.updated_at = now_utc

    def _apply_rating_resort(self, players: List[Player], winner: Player, loser: Player) -> RankResolution:
        """Run the Glicko-2 update on both players, then re-rank everyone by rating."""
        # Shared ranks are rejected before any rating is touched
        rank_resolver.check_participants([_to_entry(winner), _to_entry(loser)], winner.id, loser.id)

        new_winner, new_loser = rating_service.update_match_ratings(_to_rating(winner), _to_rating(loser))
        for player, rating in ((winner, new_winner), (loser, new_loser)):
            player.rating = rating.rating
            player.rating_deviation = rating.rd
            player.volatility = rating.volatility
        self._record_result(winner, loser)

        return rank_resolver.resolve_rating_order(
            [_to_entry(player) for player in players], winner.id, loser.id
        )
