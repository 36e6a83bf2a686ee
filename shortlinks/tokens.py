"""Bearer token issuing and verification (JWT)."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from .errors import AuthError


INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class TokenService:
    """Sign and verify time-boxed tokens carrying a user id."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 24 * 60 * 60,
        algorithm: str = "HS256",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize token service.

        Args:
            secret: Signing secret
            ttl_seconds: Validity window of issued tokens
            algorithm: JWT signing algorithm
            logger: Optional logger
        """
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm
        self.logger = logger or logging.getLogger(__name__)

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Issue a token for a user.

        Args:
            user_id: Identifier embedded in the token
            now: Issue time (defaults to now UTC)

        Returns:
            Encoded token
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return the user id it carries.

        Raises:
            AuthError: On any failure (bad signature, malformed, expired)
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "userId"]},
            )
        except jwt.PyJWTError as e:
            self.logger.debug(f"Token rejected: {e}")
            raise AuthError(INVALID_TOKEN_MESSAGE) from e

        user_id = payload.get("userId")
        if not isinstance(user_id, str) or not user_id:
            raise AuthError(INVALID_TOKEN_MESSAGE)
        return user_id
