"""
Review Repository - Data access layer for recipe reviews
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from domain.models import Review
from repositories.base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    """Repository for review data access"""

    def __init__(self, db: Session):
        super().__init__(db, Review)

    def list_by_recipe(self, recipe_id: int, limit: Optional[int] = None) -> List[Review]:
        """Get reviews of a recipe, newest first"""
        q = (
            self.db.query(Review)
            .filter(Review.recipe_id == recipe_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def count_by_recipe(self, recipe_id: int) -> int:
        return (
            self.db.query(func.count(Review.id))
            .filter(Review.recipe_id == recipe_id)
            .scalar()
            or 0
        )

    def average_rating(self, recipe_id: int) -> Optional[float]:
        """Arithmetic mean of every rating of the recipe, None without reviews"""
        avg = (
            self.db.query(func.avg(Review.rating))
            .filter(Review.recipe_id == recipe_id)
            .scalar()
        )
        return float(avg) if avg is not None else None
