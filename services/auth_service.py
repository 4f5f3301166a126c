"""
Admin authentication.

There is a single shared admin password whose bcrypt hash lives in the
configuration. A successful login yields an HS256 JWT carrying only the
admin role, an issue time and an expiry.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

import bcrypt
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import ValidationError

from app.config import settings
from app.exceptions import ConfigurationError, ServiceValidationError, UnauthorizedError
from domain.enums import Role
from domain.models import utcnow
from domain.schemas.auth_schemas import AuthUser, LoginResponse, TokenClaims

logger = logging.getLogger("mymixes.auth")

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


class TokenError(Exception):
    """Base exception for token-related errors."""


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""


class TokenInvalidError(TokenError):
    """Raised when a token is invalid."""


def _require_secret() -> str:
    if not settings.jwt_secret:
        logger.error("jwt_secret_missing")
        raise ConfigurationError()
    return settings.jwt_secret


class AuthService:
    """Password check and token issue/verification"""

    @staticmethod
    def hash_password(password: str, rounds: int = 12) -> str:
        """bcrypt hash suitable for ADMIN_PASSWORD_HASH"""
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            logger.error("admin_password_hash_malformed")
            raise ConfigurationError()

    @staticmethod
    def create_access_token(
        role: Role = Role.ADMIN,
        expires_delta: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> str:
        secret = _require_secret()
        now = now or utcnow()
        if expires_delta is None:
            expires_delta = timedelta(hours=settings.jwt_expire_hours)

        payload = {
            "role": role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)

    @staticmethod
    def decode_token(token: str) -> TokenClaims:
        """Decode and validate a bearer token.

        Raises:
            TokenExpiredError: If the token has expired.
            TokenInvalidError: If the signature or claims are invalid.
        """
        secret = _require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token expired") from e
        except JWTError as e:
            raise TokenInvalidError("Invalid token") from e

        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as e:
            raise TokenInvalidError("Invalid token") from e

    @staticmethod
    def login(password: Optional[str]) -> LoginResponse:
        """Exchange the admin password for a token"""
        if not password:
            raise ServiceValidationError("Password is required")

        if not settings.admin_password_hash or not settings.jwt_secret:
            logger.error("auth_not_configured")
            raise ConfigurationError()

        if not AuthService.verify_password(password, settings.admin_password_hash):
            logger.warning("admin_login_failed")
            raise UnauthorizedError("Invalid credentials")

        token = AuthService.create_access_token(Role.ADMIN)
        logger.info("admin_login_succeeded")
        return LoginResponse(token=token, user=AuthUser(role=Role.ADMIN.value))
