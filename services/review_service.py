"""
Review service - reviews and the cached average rating.

A new review and the recomputed ``avg_rating`` of its recipe are committed
together.
"""

from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from domain.models import Review
from repositories import RecipeRepository, ReviewRepository
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("mymixes.reviews")


class ReviewService:
    """Business logic for recipe reviews"""

    @staticmethod
    def list_reviews(db: Session, recipe_id: int) -> List[Review]:
        """All reviews of a recipe, newest first"""
        if not RecipeRepository(db).exists(recipe_id):
            raise NotFoundError("Recipe not found")
        return ReviewRepository(db).list_by_recipe(recipe_id)

    @staticmethod
    def create_review(
        db: Session,
        recipe_id: int,
        rating: int,
        comment: str,
        name: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Review:
        """
        Insert a review and refresh the recipe's cached average rating.

        The average is recomputed from every review row of the recipe and
        committed together with the new review.
        """
        if not 1 <= rating <= 5:
            raise ServiceValidationError("Rating must be between 1 and 5")

        recipe = RecipeRepository(db).get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found")

        review_repo = ReviewRepository(db)
        review = Review(
            recipe_id=recipe_id,
            rating=rating,
            comment=comment,
            name=name,
            user_id=user_id,
        )
        try:
            db.add(review)
            db.flush()
            recipe.avg_rating = review_repo.average_rating(recipe_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(review)
        logger.info(
            f"review_created review_id={review.id} recipe_id={recipe_id} "
            f"rating={rating} anonymous={user_id is None} avg_rating={recipe.avg_rating}"
        )
        return review
