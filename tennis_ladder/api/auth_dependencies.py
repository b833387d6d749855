"""
Authorization dependencies for FastAPI routes.

Account management lives outside this service; the only question asked
here is whether the caller may report matches.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from tennis_ladder.utils import config

logger = logging.getLogger(__name__)


async def can_report_matches(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
) -> bool:
    """
    Dependency deciding whether the caller may report a match.

    When LADDER_REPORTER_TOKENS is empty every caller is allowed (local
    development). Otherwise the bearer token must match one of the
    configured tokens.

    Args:
        credentials: Optional HTTP Bearer token credentials

    Returns:
        True if the caller may report matches
    """
    allowed_tokens = config.get_reporter_tokens()
    if not allowed_tokens:
        return True

    if credentials is None:
        return False

    token = credentials.credentials
    return any(secrets.compare_digest(token, allowed) for allowed in allowed_tokens)
