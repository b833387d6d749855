"""
Exceptions raised by the ladder services.

Route handlers map these onto HTTP status codes; see api/routes/matches.py.
"""

from typing import Optional


class LadderError(Exception):
    """Base class for all ladder service errors."""


# --- Validation (bad input, nothing written) ---


class ValidationError(LadderError, ValueError):
    """Raised when a report or registration fails input validation."""


class InvalidDateError(ValidationError):
    """Raised when the match date is missing or not a real calendar date."""


class InvalidLocationError(ValidationError):
    """Raised when the match location is not one of the allowed courts."""


class InvalidPlayerSelectionError(ValidationError):
    """Raised when winner/loser ids are invalid or name the same player."""


class InvalidRegistrationError(ValidationError):
    """Raised when a player registration has a bad name, phone or level."""


# --- Score ---


class ScoreError(LadderError, ValueError):
    """Raised when the reported set scores are invalid."""


class IncompleteSetError(ScoreError):
    """Raised when a set has only one of its two game counts."""

    def __init__(self, set_number: int, message: Optional[str] = None):
        self.set_number = set_number
        if message is None:
            if set_number < 3:
                message = f"You must enter Winner and Loser games for Set {set_number}."
            else:
                message = (
                    f"Score for Set {set_number} is incomplete "
                    "(both Winner and Loser need a value)."
                )
        super().__init__(message)


class InvalidSetScoreError(ScoreError):
    """Raised when a set's game counts are non-numeric, out of range or 0-0."""

    def __init__(self, set_number: int, message: str):
        self.set_number = set_number
        super().__init__(message)


class TooFewSetsError(ScoreError):
    """Raised when fewer than two complete sets were reported."""

    def __init__(self, message: str = "You must enter complete scores for Set 1 and Set 2."):
        super().__init__(message)


# --- State (stored data does not allow the operation) ---


class StateError(LadderError):
    """Raised when stored ladder state does not permit the operation."""


class PlayerNotFoundError(StateError):
    """Raised when a referenced player does not exist."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player with ID {player_id} not found.")


class DuplicateRankError(StateError):
    """Raised when winner and loser hold the same stored rank (corrupt ladder)."""

    def __init__(self, rank: int, winner_id: int, loser_id: int):
        self.rank = rank
        super().__init__(
            f"Players {winner_id} and {loser_id} both hold ladder rank {rank}."
        )


# --- Storage / authorization ---


class StorageError(LadderError):
    """Raised when the database transaction fails; all writes are rolled back."""


class ReportNotAuthorizedError(LadderError, PermissionError):
    """Raised when the caller is not permitted to report matches."""

    def __init__(self, message: str = "You are not allowed to report matches."):
        super().__init__(message)
