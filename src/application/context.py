"""
application.context - Session checks shared by all user-scoped services.

There is no global "current user". Every user-scoped service receives a
SessionProviderPort and asks it for the live session at the moment it
needs one, so a sign-out or account switch is picked up on the next call
instead of leaking one user's cached data to another.
"""

from __future__ import annotations

import logging

from domain.models import AuthSession
from domain.ports import SessionProviderPort
from domain.exceptions import SessionInvalidError

logger = logging.getLogger(__name__)


async def require_session(
    provider: SessionProviderPort,
    user_id: str,
) -> AuthSession:
    """Reconfirm that a valid session exists and belongs to user_id.

    Called before every mutation. Raises SessionInvalidError (never a
    generic error) so the UI can prompt for sign-in instead of a retry.
    """
    session = await provider.current_session()
    if session is None:
        raise SessionInvalidError("No active session found. Please sign in.")
    if session.user_id != user_id:
        logger.warning(
            "Session user %s does not match requested user %s",
            session.user_id, user_id,
        )
        raise SessionInvalidError("User ID mismatch. Please sign in again.")
    return session


async def optional_session(provider: SessionProviderPort) -> AuthSession | None:
    """Return the live session, or None when signed out or expired.

    Used by read paths, which treat an expired session as signed out
    rather than raising.
    """
    try:
        return await provider.current_session()
    except SessionInvalidError as e:
        logger.info("Session no longer valid (%s); treating as signed out", e)
        return None
