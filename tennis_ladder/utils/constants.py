"""
Constants used across the ladder and rating system.
"""

# Registration
ALLOWED_LEVELS = ["3.0", "3.5", "4.0", "4.5"]
MAX_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 25

# Courts where ladder matches may be played
ALLOWED_LOCATIONS = [
    "Lake Rim Park",
    "Hope Mills Municipal Park",
    "Mazarick Park",
    "Gates Four",
    "Terry Sanford",
]

# Score validation (strict policy)
MAX_GAMES_REGULAR_SET = 10
MAX_GAMES_DECIDING_SET = 20  # third set may be a super tiebreak
MIN_SETS = 2
MAX_SETS = 3

# Glicko-2 rating constants
INITIAL_RATING = 1500.0
INITIAL_RD = 350.0
INITIAL_VOLATILITY = 0.06
MIN_RD = 30.0
MAX_RD = 350.0
GLICKO2_SCALE = 173.7178  # Conversion factor between Glicko and Glicko-2 scales
TAU = 0.5  # System constant, constrains volatility change
CONVERGENCE_TOLERANCE = 0.000001
MAX_VOLATILITY_ITERATIONS = 100
EXPECTED_SCORE_EPSILON = 1e-12  # keeps E strictly inside (0, 1)
MAX_EXPONENT = 700.0  # math.exp overflows just above 709

# Advisory lock key shared by every ladder writer (PostgreSQL)
LADDER_LOCK_KEY = 7_411_201
