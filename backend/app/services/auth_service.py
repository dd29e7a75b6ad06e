"""
CuriousDog Backend — Authentication Service
=============================================

What:  Password hashing and access-token issuing/verification.
How:   bcrypt for password hashes, PyJWT (HS256) for bearer tokens.
Who:   UserService (register/login) and the get_current_actor dependency.

Token claims:
    sub:  user id as a string
    iat:  issued-at (seconds since epoch)
    exp:  expiry, settings.jwt_expiry_minutes after iat
"""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless helpers around bcrypt and PyJWT."""

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            logger.warning("Unreadable password hash encountered during login")
            return False

    @property
    def token_lifetime_seconds(self) -> int:
        return settings.jwt_expiry_minutes * 60

    def create_access_token(self, user_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=settings.jwt_expiry_minutes)).timestamp()),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def decode_access_token(self, token: str) -> int:
        """
        Verify a bearer token and return the user id it was issued for.

        Raises:
            AuthenticationError: expired, tampered, or malformed token
        """
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(message="Your session has expired. Please log in again.")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected access token: %s", str(e))
            raise AuthenticationError(message="Invalid authentication token")

        try:
            return int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError(message="Invalid authentication token")


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
