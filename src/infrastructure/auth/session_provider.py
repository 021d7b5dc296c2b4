"""
infrastructure.auth.session_provider - JWT-backed session provider.

Implements SessionProviderPort. A session is a signed JWT whose "sub"
claim is the user id; an expired or tampered token is reported as
SessionInvalidError rather than as "signed out".
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError

from domain.models import AuthSession
from domain.exceptions import SessionInvalidError

logger = logging.getLogger(__name__)


class TokenSessionProvider:
    """Holds the current access token and validates it on every read."""

    def __init__(
        self,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expiry_hours: int = 24,
        token: Optional[str] = None,
    ):
        self._jwt_secret = jwt_secret
        self._jwt_algorithm = jwt_algorithm
        self._jwt_expiry_hours = jwt_expiry_hours
        self._token = token

    @property
    def token(self) -> Optional[str]:
        return self._token

    def issue_token(self, user_id: str, expiry_hours: Optional[float] = None) -> str:
        """Sign a token for *user_id* (used by the CLI login and by tests)."""
        hours = self._jwt_expiry_hours if expiry_hours is None else expiry_hours
        expire = datetime.now(timezone.utc) + timedelta(hours=hours)
        payload = {"sub": str(user_id), "exp": expire}
        return jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)

    def sign_in(self, token: str) -> AuthSession:
        """Adopt *token* as the current session after validating it."""
        session = self._decode(token)
        self._token = token
        logger.info("Signed in as %s", session.user_id)
        return session

    def sign_out(self) -> None:
        self._token = None

    async def current_session(self) -> AuthSession | None:
        if not self._token:
            return None
        return self._decode(self._token)

    def _decode(self, token: str) -> AuthSession:
        try:
            payload = jwt.decode(
                token, self._jwt_secret, algorithms=[self._jwt_algorithm],
            )
        except ExpiredSignatureError as exc:
            raise SessionInvalidError("Session expired. Please sign in again.") from exc
        except JWTError as exc:
            raise SessionInvalidError(f"Token verification failed: {exc}") from exc

        user_id = payload.get("sub")
        if not user_id:
            raise SessionInvalidError("Invalid token payload.")
        exp = payload.get("exp")
        return AuthSession(
            user_id=str(user_id),
            access_token=token,
            expires_at=float(exp) if exp is not None else None,
        )
