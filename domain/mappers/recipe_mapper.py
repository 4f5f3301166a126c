"""
Recipe domain mappers.
Handles transformation between ORM models and DTOs for recipes and reviews.
"""

from typing import Iterable, Optional

from domain.models import Recipe, Ingredient, Review
from domain.schemas.recipe_schemas import (
    IngredientResponse,
    IngredientTypeResponse,
    RecipeCounts,
    RecipeDetail,
    RecipeSummary,
)
from domain.schemas.review_schemas import ReviewResponse


class RecipeMapper:
    """Mapper for recipe-related transformations."""

    @staticmethod
    def to_ingredient_response(ingredient: Ingredient) -> IngredientResponse:
        return IngredientResponse(
            id=ingredient.id,
            amount=ingredient.amount,
            recipe_id=ingredient.recipe_id,
            type_id=ingredient.type_id,
            name=ingredient.name,
            type=IngredientTypeResponse(id=ingredient.type.id, name=ingredient.type.name),
        )

    @staticmethod
    def to_review_response(review: Review) -> ReviewResponse:
        return ReviewResponse.model_validate(review)

    @staticmethod
    def to_summary(
        recipe: Recipe, ingredient_count: int = 0, review_count: int = 0
    ) -> RecipeSummary:
        """
        Convert a Recipe row to a grid summary.

        Args:
            recipe: Recipe ORM instance
            ingredient_count: number of ingredient lines
            review_count: number of reviews

        Returns:
            RecipeSummary DTO without child rows
        """
        return RecipeSummary(
            id=recipe.id,
            title=recipe.title,
            slug=recipe.slug,
            image_url=recipe.image_url,
            description=recipe.description,
            method=recipe.method,
            avg_rating=recipe.avg_rating,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
            counts=RecipeCounts(ingredients=ingredient_count, reviews=review_count),
        )

    @staticmethod
    def to_detail(
        recipe: Recipe, reviews: Optional[Iterable[Review]] = None
    ) -> RecipeDetail:
        """
        Convert a Recipe row to the full detail DTO.

        Args:
            recipe: Recipe ORM instance with ingredients loaded
            reviews: reviews to embed; defaults to none

        Returns:
            RecipeDetail DTO with ingredients resolved to their type names
        """
        return RecipeDetail(
            id=recipe.id,
            title=recipe.title,
            slug=recipe.slug,
            image_url=recipe.image_url,
            description=recipe.description,
            method=recipe.method,
            avg_rating=recipe.avg_rating,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
            ingredients=[
                RecipeMapper.to_ingredient_response(i) for i in recipe.ingredients
            ],
            reviews=[RecipeMapper.to_review_response(r) for r in (reviews or [])],
        )
