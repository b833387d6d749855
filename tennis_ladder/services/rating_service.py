"""
Glicko-2 rating service.
Updates a player's rating, rating deviation and volatility after one match.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from tennis_ladder.utils.constants import (
    CONVERGENCE_TOLERANCE,
    EXPECTED_SCORE_EPSILON,
    GLICKO2_SCALE,
    INITIAL_RATING,
    INITIAL_RD,
    INITIAL_VOLATILITY,
    MAX_EXPONENT,
    MAX_RD,
    MAX_VOLATILITY_ITERATIONS,
    MIN_RD,
    TAU,
)

WIN = 1.0
LOSS = 0.0


@dataclass(frozen=True)
class Rating:
    """A player's Glicko-2 rating on the external (1500-centred) scale."""

    rating: float = INITIAL_RATING
    rd: float = INITIAL_RD
    volatility: float = INITIAL_VOLATILITY

    def sanitized(self) -> "Rating":
        """Replace any non-finite component (or a non-positive volatility) with its default."""
        volatility_ok = _is_finite(self.volatility) and self.volatility > 0
        return Rating(
            rating=self.rating if _is_finite(self.rating) else INITIAL_RATING,
            rd=self.rd if _is_finite(self.rd) else INITIAL_RD,
            volatility=self.volatility if volatility_ok else INITIAL_VOLATILITY,
        )


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


# ============================================================================
# Helper Functions (Glicko-2 steps)
# ============================================================================

def to_glicko2_scale(rating: float, rd: float) -> Tuple[float, float]:
    """Convert rating/RD to the internal scale (mu, phi)."""
    return (rating - INITIAL_RATING) / GLICKO2_SCALE, rd / GLICKO2_SCALE


def from_glicko2_scale(mu: float, phi: float) -> Tuple[float, float]:
    """Convert (mu, phi) back to rating/RD."""
    return mu * GLICKO2_SCALE + INITIAL_RATING, phi * GLICKO2_SCALE


def g(phi: float) -> float:
    """
    Reduce an opponent's impact by their uncertainty.

    g(phi) = 1 / sqrt(1 + 3 phi^2 / pi^2)
    """
    return 1.0 / math.sqrt(1.0 + 3.0 * phi * phi / (math.pi * math.pi))


def expected_score(mu: float, mu_j: float, phi_j: float) -> float:
    """
    Expected score against an opponent.

    E = 1 / (1 + exp(-g(phi_j) * (mu - mu_j)))

    The result is kept inside [EXPECTED_SCORE_EPSILON, 1 - EXPECTED_SCORE_EPSILON]
    so the variance 1 / (g^2 E (1 - E)) stays finite for any rating gap.
    """
    exponent = max(-MAX_EXPONENT, min(MAX_EXPONENT, -g(phi_j) * (mu - mu_j)))
    e = 1.0 / (1.0 + math.exp(exponent))
    return min(max(e, EXPECTED_SCORE_EPSILON), 1.0 - EXPECTED_SCORE_EPSILON)


def new_volatility(sigma: float, phi: float, v: float, delta: float, tau: float = TAU) -> float:
    """
    Solve for the updated volatility with the Illinois algorithm.

    Finds the root of
        f(x) = e^x (delta^2 - phi^2 - v - e^x) / (2 (phi^2 + v + e^x)^2) - (x - a) / tau^2
    where a = ln(sigma^2), and returns exp(root / 2).
    """
    a = math.log(sigma * sigma)
    phi_sq = phi * phi
    delta_sq = delta * delta

    def f(x: float) -> float:
        ex = math.exp(x)
        return (ex * (delta_sq - phi_sq - v - ex)) / (2.0 * (phi_sq + v + ex) ** 2) - (x - a) / (tau * tau)

    big_a = a
    if delta_sq > phi_sq + v:
        big_b = math.log(delta_sq - phi_sq - v)
    else:
        k = 1
        while f(a - k * tau) < 0:
            k += 1
        big_b = a - k * tau

    f_a = f(big_a)
    f_b = f(big_b)

    iterations = 0
    while abs(big_b - big_a) > CONVERGENCE_TOLERANCE and iterations < MAX_VOLATILITY_ITERATIONS:
        big_c = big_a + (big_a - big_b) * f_a / (f_b - f_a)
        f_c = f(big_c)
        if f_c * f_b <= 0:
            big_a, f_a = big_b, f_b
        else:
            f_a = f_a / 2.0
        big_b, f_b = big_c, f_c
        iterations += 1

    return math.exp(big_a / 2.0)


def clamp_rd(rd: float) -> float:
    """Keep rating deviation within [MIN_RD, MAX_RD]."""
    return max(MIN_RD, min(MAX_RD, rd))


# ============================================================================
# Rating updates
# ============================================================================

def update_rating(player: Rating, opponent: Rating, score: float) -> Rating:
    """
    Update a player's rating after a single decisive match.

    Args:
        player: The player's current rating
        opponent: The opponent's current rating (volatility is not used)
        score: 1.0 for a win, 0.0 for a loss

    Returns:
        The player's new Rating, RD clamped to [30, 350]

    Raises:
        ValueError: If score is not 1.0 or 0.0
    """
    if score not in (WIN, LOSS):
        raise ValueError(f"Score must be {WIN} (win) or {LOSS} (loss), got {score}")

    player = player.sanitized()
    opponent = opponent.sanitized()

    mu, phi = to_glicko2_scale(player.rating, player.rd)
    mu_j, phi_j = to_glicko2_scale(opponent.rating, opponent.rd)

    g_j = g(phi_j)
    e = expected_score(mu, mu_j, phi_j)

    v = 1.0 / (g_j * g_j * e * (1.0 - e))
    delta = v * g_j * (score - e)

    sigma_new = new_volatility(player.volatility, phi, v, delta)

    phi_star = math.sqrt(phi * phi + sigma_new * sigma_new)
    phi_new = 1.0 / math.sqrt(1.0 / (phi_star * phi_star) + 1.0 / v)
    mu_new = mu + phi_new * phi_new * g_j * (score - e)

    rating_new, rd_new = from_glicko2_scale(mu_new, phi_new)
    return Rating(rating=rating_new, rd=clamp_rd(rd_new), volatility=sigma_new)


def update_match_ratings(winner: Rating, loser: Rating) -> Tuple[Rating, Rating]:
    """
    Compute both players' new ratings from their pre-match values.

    Returns:
        Tuple of (new_winner_rating, new_loser_rating)
    """
    return update_rating(winner, loser, WIN), update_rating(loser, winner, LOSS)
