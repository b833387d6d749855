"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter) lives here; every sub-router imports what
it needs from this package.
"""

from fastapi import APIRouter
from slowapi import Limiter
from slowapi.util import get_remote_address

from tennis_ladder.utils.config import is_test_env

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)
if is_test_env():

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = no_op_limit

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from tennis_ladder.api.routes.health import router as health_router  # noqa: E402
from tennis_ladder.api.routes.players import router as players_router  # noqa: E402
from tennis_ladder.api.routes.matches import router as matches_router  # noqa: E402

router = APIRouter()
router.include_router(health_router)
router.include_router(players_router)
router.include_router(matches_router)
