"""Services package - Business logic layer"""

from services.recipe_service import RecipeService
from services.review_service import ReviewService
from services.qr_service import QrService, QrValidation
from services.auth_service import (
    AuthService,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
)
from services.image_service import ImageService

__all__ = [
    "RecipeService",
    "ReviewService",
    "QrService",
    "QrValidation",
    "AuthService",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "ImageService",
]
