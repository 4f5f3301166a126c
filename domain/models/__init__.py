"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    create_database_engine,
    get_engine,
    get_session_factory,
    init_database,
    get_db_session,
    utcnow,
)
from domain.models.user import User
from domain.models.recipe import Recipe
from domain.models.ingredient import Ingredient, IngredientType
from domain.models.review import Review
from domain.models.qr_token import QrToken

__all__ = [
    # Database
    "Base",
    "create_database_engine",
    "get_engine",
    "get_session_factory",
    "init_database",
    "get_db_session",
    "utcnow",
    # Models
    "User",
    "Recipe",
    "Ingredient",
    "IngredientType",
    "Review",
    "QrToken",
]
