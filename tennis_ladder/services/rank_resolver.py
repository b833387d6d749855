"""
Ladder rank resolution.

Two policies decide how a recorded match changes ladder positions:

- positional_swap: a lower-ranked winner takes the loser's rank and everyone
  from the loser down to just above the winner moves down one place.
- rating_resort: the whole ladder is re-sorted by rating after the Glicko-2
  update, and every stored rank is rewritten.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tennis_ladder.services.exceptions import DuplicateRankError, PlayerNotFoundError, StateError


class RankingPolicy(str, enum.Enum):
    """How ladder ranks change when a match is recorded."""

    POSITIONAL_SWAP = "positional_swap"
    RATING_RESORT = "rating_resort"


@dataclass
class LadderEntry:
    """The slice of a player's state the resolvers need."""

    player_id: int
    rank: Optional[int]
    rating: float = 1500.0
    rd: float = 350.0
    wins: int = 0
    matches_played: int = 0


@dataclass
class RankResolution:
    """Outcome of a rank resolution for the whole ladder."""

    winner_id: int
    loser_id: int
    old_ranks: Dict[int, int]
    new_ranks: Dict[int, int] = field(default_factory=dict)

    @property
    def winner_old_rank(self) -> int:
        return self.old_ranks[self.winner_id]

    @property
    def winner_new_rank(self) -> int:
        return self.new_ranks[self.winner_id]

    @property
    def loser_old_rank(self) -> int:
        return self.old_ranks[self.loser_id]

    @property
    def loser_new_rank(self) -> int:
        return self.new_ranks[self.loser_id]

    def changed_ids(self) -> List[int]:
        """Player IDs whose rank differs from before, in new-rank order."""
        changed = [pid for pid, rank in self.new_ranks.items() if self.old_ranks.get(pid) != rank]
        return sorted(changed, key=lambda pid: self.new_ranks[pid])


def check_participants(ladder: Sequence[LadderEntry], winner_id: int, loser_id: int):
    by_id = {entry.player_id: entry for entry in ladder}
    for player_id in (winner_id, loser_id):
        if player_id not in by_id:
            raise PlayerNotFoundError(player_id)

    winner = by_id[winner_id]
    loser = by_id[loser_id]
    for entry in (winner, loser):
        if entry.rank is None or entry.rank < 1:
            raise StateError(f"Player {entry.player_id} does not have a valid ladder rank.")
    if winner.rank == loser.rank:
        raise DuplicateRankError(winner.rank, winner_id, loser_id)
    return winner, loser


def _old_ranks(ladder: Sequence[LadderEntry]) -> Dict[int, int]:
    return {entry.player_id: entry.rank for entry in ladder}


def resolve_positional_swap(
    ladder: Sequence[LadderEntry], winner_id: int, loser_id: int
) -> RankResolution:
    """
    Apply the positional-swap rule.

    If the winner already ranks above the loser nothing moves. Otherwise the
    winner takes the loser's old rank and every player ranked in
    [loser_old, winner_old) moves down by one, so the loser lands on
    loser_old + 1 and the ranks stay a contiguous 1..N.

    Args:
        ladder: Current entries for every player on the ladder
        winner_id: ID of the match winner
        loser_id: ID of the match loser

    Returns:
        RankResolution with new ranks for every player

    Raises:
        PlayerNotFoundError: A participant is not on the ladder
        DuplicateRankError: Winner and loser share a rank
        StateError: A participant has no valid rank
    """
    winner, loser = check_participants(ladder, winner_id, loser_id)
    resolution = RankResolution(winner_id=winner_id, loser_id=loser_id, old_ranks=_old_ranks(ladder))

    winner_old = winner.rank
    loser_old = loser.rank
    for entry in ladder:
        if entry.player_id == winner_id and winner_old > loser_old:
            new_rank = loser_old
        elif winner_old > loser_old and entry.rank is not None and loser_old <= entry.rank < winner_old:
            new_rank = entry.rank + 1
        else:
            new_rank = entry.rank
        resolution.new_ranks[entry.player_id] = new_rank

    return resolution


def rating_sort_key(entry: LadderEntry):
    """Rating desc, RD asc, wins desc, matches played desc, id asc."""
    return (-entry.rating, entry.rd, -entry.wins, -entry.matches_played, entry.player_id)


def resolve_rating_order(
    ladder: Sequence[LadderEntry], winner_id: int, loser_id: int
) -> RankResolution:
    """
    Re-rank the whole ladder by rating.

    The entries must already carry the post-match ratings and counters for
    both participants; ranks on the entries are the pre-match stored ranks.

    Raises:
        PlayerNotFoundError: A participant is not on the ladder
        DuplicateRankError: Winner and loser share a stored rank
    """
    check_participants(ladder, winner_id, loser_id)
    resolution = RankResolution(winner_id=winner_id, loser_id=loser_id, old_ranks=_old_ranks(ladder))

    for position, entry in enumerate(sorted(ladder, key=rating_sort_key), start=1):
        resolution.new_ranks[entry.player_id] = position

    return resolution
