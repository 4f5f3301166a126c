"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.common import CamelModel
from domain.schemas.recipe_schemas import (
    IngredientInput,
    RecipeCreate,
    IngredientTypeResponse,
    IngredientResponse,
    RecipeCounts,
    RecipeSummary,
    RecipeDetail,
    RecipePage,
)
from domain.schemas.review_schemas import (
    ReviewCreate,
    AnonymousReviewCreate,
    ReviewResponse,
)
from domain.schemas.qr_schemas import (
    QrGenerateRequest,
    QrRecipeInfo,
    QrTokenResponse,
    QrDeleteResponse,
)
from domain.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    TokenClaims,
    AuthUser,
    VerifyResponse,
)

__all__ = [
    "CamelModel",
    # Recipe schemas
    "IngredientInput",
    "RecipeCreate",
    "IngredientTypeResponse",
    "IngredientResponse",
    "RecipeCounts",
    "RecipeSummary",
    "RecipeDetail",
    "RecipePage",
    # Review schemas
    "ReviewCreate",
    "AnonymousReviewCreate",
    "ReviewResponse",
    # QR schemas
    "QrGenerateRequest",
    "QrRecipeInfo",
    "QrTokenResponse",
    "QrDeleteResponse",
    # Auth schemas
    "LoginRequest",
    "LoginResponse",
    "TokenClaims",
    "AuthUser",
    "VerifyResponse",
]
