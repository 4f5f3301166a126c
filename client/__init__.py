"""
Client package - API wrapper and navigation model for the MyMixes frontend.
"""

from client.api import ApiError, MyMixesClient
from client.cache import RecipeCache
from client.helpers import format_ingredients, generate_slug
from client.routing import ReviewRoute, build_review_hash, parse_hash

__all__ = [
    "ApiError",
    "MyMixesClient",
    "RecipeCache",
    "format_ingredients",
    "generate_slug",
    "ReviewRoute",
    "build_review_hash",
    "parse_hash",
]
