"""
API dependencies for dependency injection
"""

from typing import Optional
import json
import logging

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, ServiceValidationError, UnauthorizedError
from domain.enums import Role
from domain.models import get_db_session
from domain.schemas.auth_schemas import TokenClaims
from services.auth_service import AuthService, TokenExpiredError, TokenInvalidError
from services.qr_service import QrService

logger = logging.getLogger("mymixes.api.dependencies")

# auto_error=False so a missing header gets our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    """
    Decode the bearer token of the request.

    Usage:
        @router.get("/example")
        def example(claims: TokenClaims = Depends(get_token_claims)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")
    try:
        return AuthService.decode_token(credentials.credentials)
    except TokenExpiredError:
        raise UnauthorizedError("Token expired")
    except TokenInvalidError:
        raise UnauthorizedError("Invalid token")


def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[TokenClaims]:
    """Claims when a valid token is sent; anonymous callers get None"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return AuthService.decode_token(credentials.credentials)
    except (TokenExpiredError, TokenInvalidError):
        return None


def require_admin(claims: TokenClaims = Depends(get_token_claims)) -> TokenClaims:
    if claims.role != Role.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return claims


async def get_qr_token(
    request: Request, token: Optional[str] = Query(default=None)
) -> Optional[str]:
    """QR token from the ``token`` query parameter or the JSON body"""
    if token:
        return token
    raw = await request.body()
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("token"), str):
        return body["token"]
    return None


def require_qr_token(
    recipe_id: int,
    token: Optional[str] = Depends(get_qr_token),
    db: Session = Depends(get_db_session),
) -> str:
    """
    Check the QR token sent with an anonymous review.

    The token must be valid and issued for the recipe in the path.
    """
    if not token:
        raise ServiceValidationError("QR token is required")

    result = QrService.validate_token(db, token)
    if not result.valid or result.recipe_id != recipe_id:
        logger.info(f"qr_token_rejected recipe_id={recipe_id}")
        raise ForbiddenError("Invalid or expired QR token")
    return token
