"""
Environment-driven configuration for the ladder service.

Values are read from the process environment (optionally populated from a
.env file) each time they are requested, so tests can override them with
monkeypatch.setenv.
"""

import os
from typing import List

from dotenv import load_dotenv

from tennis_ladder.services.rank_resolver import RankingPolicy
from tennis_ladder.services.score_parser import ScorePolicy

load_dotenv()


def get_ranking_policy() -> RankingPolicy:
    """
    Ranking policy applied when a match is recorded.

    LADDER_RANKING_POLICY: "positional_swap" (default) or "rating_resort".

    Raises:
        ValueError: If the configured value is not a known policy
    """
    raw = os.getenv("LADDER_RANKING_POLICY", RankingPolicy.POSITIONAL_SWAP.value)
    return RankingPolicy(raw.strip().lower())


def get_score_policy() -> ScorePolicy:
    """
    Score validation strictness.

    LADDER_SCORE_POLICY: "strict" (default) or "lenient".
    """
    raw = os.getenv("LADDER_SCORE_POLICY", ScorePolicy.STRICT.value)
    return ScorePolicy(raw.strip().lower())


def get_reporter_tokens() -> List[str]:
    """Bearer tokens allowed to report matches (LADDER_REPORTER_TOKENS, comma separated)."""
    raw = os.getenv("LADDER_REPORTER_TOKENS", "")
    return [token.strip() for token in raw.split(",") if token.strip()]


def get_allowed_origins() -> List[str]:
    """CORS origins (ALLOWED_ORIGINS, comma separated)."""
    return os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")


def is_test_env() -> bool:
    return os.getenv("ENV", "").lower() == "test"
