"""
Recipe Repository - Data access layer for recipes and their ingredient lines
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from domain.models import Recipe, Ingredient, Review
from repositories.base import BaseRepository


class RecipeRepository(BaseRepository[Recipe]):
    """Repository for recipe data access"""

    def __init__(self, db: Session):
        super().__init__(db, Recipe)

    def get_by_slug(self, slug: str) -> Optional[Recipe]:
        """Get recipe by slug with ingredients and their types loaded"""
        return (
            self.db.query(Recipe)
            .options(selectinload(Recipe.ingredients).joinedload(Ingredient.type))
            .filter(Recipe.slug == slug)
            .first()
        )

    def _apply_title_filter(self, q, query: Optional[str]):
        if query:
            q = q.filter(
                func.lower(Recipe.title).contains(query.lower(), autoescape=True)
            )
        return q

    def search(
        self, query: Optional[str] = None, skip: int = 0, limit: int = 12
    ) -> List[Tuple[Recipe, int, int]]:
        """
        Case-insensitive title substring search, newest first.

        Args:
            query: optional substring to look for in titles
            skip: rows to skip
            limit: maximum rows to return

        Returns:
            List of (recipe, ingredient_count, review_count) tuples
        """
        ingredient_count = (
            select(func.count(Ingredient.id))
            .where(Ingredient.recipe_id == Recipe.id)
            .correlate(Recipe)
            .scalar_subquery()
        )
        review_count = (
            select(func.count(Review.id))
            .where(Review.recipe_id == Recipe.id)
            .correlate(Recipe)
            .scalar_subquery()
        )
        q = self.db.query(Recipe, ingredient_count, review_count)
        q = self._apply_title_filter(q, query)
        rows = (
            q.order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [(recipe, int(ing or 0), int(rev or 0)) for recipe, ing, rev in rows]

    def count(self, query: Optional[str] = None) -> int:
        """Count recipes matching the same title filter as search()"""
        q = self._apply_title_filter(self.db.query(func.count(Recipe.id)), query)
        return int(q.scalar() or 0)

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        """Check whether another recipe already uses ``slug``"""
        q = self.db.query(Recipe.id).filter(Recipe.slug == slug)
        if exclude_id is not None:
            q = q.filter(Recipe.id != exclude_id)
        return q.first() is not None

    def replace_ingredients(self, recipe: Recipe, ingredients: List[Ingredient]) -> None:
        """Drop every existing ingredient line of ``recipe`` and attach ``ingredients``.

        Old rows are deleted, not diffed, so ingredient ids change on every call.
        """
        recipe.ingredients.clear()
        self.db.flush()
        recipe.ingredients.extend(ingredients)
        self.db.flush()
