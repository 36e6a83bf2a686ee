"""Account registration, login and bearer-token authentication."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .database.base import Database
from .database.models import User
from .errors import AuthError, ConflictError, DuplicateKeyError, ValidationError
from .passwords import hash_password, verify_password
from .tokens import TokenService
from .common.validators import is_valid_email, is_valid_password


INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters long and contain at least one "
    "uppercase letter, one lowercase letter, and one number"
)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of a request."""

    user_id: str


class AuthService:
    """Register and log in users; turn Authorization headers into an AuthContext."""

    def __init__(
        self,
        db: Database,
        tokens: TokenService,
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.tokens = tokens
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    async def register(self, email: str, password: str) -> Tuple[User, str]:
        """Create an account and issue its first token.

        Raises:
            ValidationError: If email or password do not have the required shape
            ConflictError: If the email is already registered
        """
        email = self.normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        if not is_valid_password(password):
            raise ValidationError(PASSWORD_POLICY_MESSAGE)

        if await self.db.users.get_by_email(email):
            raise ConflictError("User already exists")

        try:
            user = await self.db.users.create(email, hash_password(password))
        except DuplicateKeyError:
            raise ConflictError("User already exists")

        self.logger.info(f"Registered user {user.id}")
        return user, self.tokens.issue(user.id)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue a token.

        Raises:
            AuthError: On unknown email or wrong password (same message for both)
        """
        email = self.normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.db.users.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            self.logger.info("Rejected login attempt")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        self.logger.info(f"User {user.id} logged in")
        return user, self.tokens.issue(user.id)

    def authenticate(self, authorization: Optional[str]) -> AuthContext:
        """Turn an Authorization header value into an AuthContext.

        Raises:
            AuthError: If the header is missing, not a Bearer token, or the token is invalid
        """
        if not authorization or not authorization.startswith("Bearer "):
            raise AuthError("Authentication required")

        token = authorization[len("Bearer "):].strip()
        if not token:
            raise AuthError("Authentication required")

        return AuthContext(user_id=self.tokens.verify(token))
