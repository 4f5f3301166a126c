"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.recipe_repository import RecipeRepository
from repositories.ingredient_type_repository import IngredientTypeRepository
from repositories.review_repository import ReviewRepository
from repositories.qr_token_repository import QrTokenRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RecipeRepository",
    "IngredientTypeRepository",
    "ReviewRepository",
    "QrTokenRepository",
]
