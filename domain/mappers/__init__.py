"""
Domain mappers package.
Provides transformation logic between ORM models and DTOs.
"""

from domain.mappers.recipe_mapper import RecipeMapper
from domain.mappers.qr_mapper import QrMapper

__all__ = ["RecipeMapper", "QrMapper"]
