"""
Score parsing for reported matches.

Turns the raw per-set game counts from a match report into the canonical
score string stored on the match ("6-4 3-6 10-8").
"""

import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from tennis_ladder.services.exceptions import (
    IncompleteSetError,
    InvalidSetScoreError,
    TooFewSetsError,
)
from tennis_ladder.utils.constants import (
    MAX_GAMES_DECIDING_SET,
    MAX_GAMES_REGULAR_SET,
    MAX_SETS,
    MIN_SETS,
)

RawGames = Union[str, int, None]
RawSet = Tuple[RawGames, RawGames]


class ScorePolicy(str, enum.Enum):
    """How strictly set scores are validated."""

    STRICT = "strict"  # games capped per set, 0-0 rejected
    LENIENT = "lenient"  # any non-negative integers


@dataclass(frozen=True)
class ParsedScore:
    """A validated score: ordered (winner_games, loser_games) pairs."""

    sets: Tuple[Tuple[int, int], ...]

    @property
    def canonical(self) -> str:
        return format_score(self.sets)


def _clean(value: RawGames) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_games(raw: str, set_number: int) -> int:
    """Parse one game count; only plain non-negative integers are accepted."""
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidSetScoreError(
            set_number, f"Score for Set {set_number} must be whole numbers."
        )
    return int(raw)


def _max_games(set_number: int) -> int:
    return MAX_GAMES_DECIDING_SET if set_number == MAX_SETS else MAX_GAMES_REGULAR_SET


def parse_score(raw_sets: Sequence[RawSet], policy: ScorePolicy = ScorePolicy.STRICT) -> ParsedScore:
    """
    Validate raw set scores and build the parsed score.

    Sets 1 and 2 are mandatory. Set 3 is optional but must be complete if
    either value is given.

    Args:
        raw_sets: Up to three (winner_games, loser_games) pairs; missing values
            may be None or empty strings
        policy: Validation strictness

    Returns:
        ParsedScore with two or three sets

    Raises:
        IncompleteSetError: A mandatory set is missing a value, or set 3 is one-sided
        InvalidSetScoreError: A value is not a non-negative integer, or (strict)
            is above the per-set cap, or the set is 0-0
        TooFewSetsError: Fewer than two valid sets resulted
    """
    if len(raw_sets) > MAX_SETS:
        raise InvalidSetScoreError(
            len(raw_sets), f"A match has at most {MAX_SETS} sets."
        )

    padded = list(raw_sets) + [(None, None)] * (MAX_SETS - len(raw_sets))
    sets = []

    for set_number, (winner_raw, loser_raw) in enumerate(padded, start=1):
        w_raw = _clean(winner_raw)
        l_raw = _clean(loser_raw)

        if set_number <= MIN_SETS:
            if not w_raw or not l_raw:
                raise IncompleteSetError(set_number)
        else:
            if bool(w_raw) != bool(l_raw):
                raise IncompleteSetError(set_number)
            if not w_raw:
                continue

        winner_games = _parse_games(w_raw, set_number)
        loser_games = _parse_games(l_raw, set_number)

        if policy == ScorePolicy.STRICT:
            max_games = _max_games(set_number)
            if winner_games > max_games or loser_games > max_games:
                raise InvalidSetScoreError(
                    set_number,
                    f"Score for Set {set_number} must be between 0 and {max_games}.",
                )
            if winner_games == 0 and loser_games == 0:
                raise InvalidSetScoreError(
                    set_number, f"Score for Set {set_number} cannot be 0-0."
                )

        sets.append((winner_games, loser_games))

    if len(sets) < MIN_SETS:
        raise TooFewSetsError()

    return ParsedScore(sets=tuple(sets))


def build_score(
    w_s1: RawGames,
    l_s1: RawGames,
    w_s2: RawGames,
    l_s2: RawGames,
    w_s3: RawGames = None,
    l_s3: RawGames = None,
    policy: ScorePolicy = ScorePolicy.STRICT,
) -> str:
    """Validate form-style set fields and return the canonical score string."""
    return parse_score([(w_s1, l_s1), (w_s2, l_s2), (w_s3, l_s3)], policy).canonical


def format_score(sets: Sequence[Tuple[int, int]]) -> str:
    """Join sets as "W-L W-L[ W-L]"."""
    return " ".join(f"{winner}-{loser}" for winner, loser in sets)


def split_score(score: Optional[str]) -> Tuple[Tuple[int, int], ...]:
    """
    Split a canonical score string back into (winner, loser) game pairs.

    Raises:
        ValueError: If the string is not in canonical form
    """
    if not score:
        return ()
    pairs = []
    for chunk in score.split(" "):
        winner, sep, loser = chunk.partition("-")
        if not sep:
            raise ValueError(f"Malformed set score: {chunk!r}")
        pairs.append((int(winner), int(loser)))
    return tuple(pairs)
