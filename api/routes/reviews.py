"""Review routes, signed-in and QR-token based"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from api.dependencies import get_optional_claims, require_qr_token
from domain.mappers import RecipeMapper
from domain.models import get_db_session
from domain.schemas.auth_schemas import TokenClaims
from domain.schemas.review_schemas import (
    AnonymousReviewCreate,
    ReviewCreate,
    ReviewResponse,
)
from services.qr_service import QrService
from services.review_service import ReviewService

router = APIRouter(prefix="/recipes", tags=["Reviews"])
logger = logging.getLogger("mymixes.api.reviews")


@router.get("/{recipe_id}/reviews", response_model=List[ReviewResponse])
def list_reviews(recipe_id: int, db: Session = Depends(get_db_session)):
    reviews = ReviewService.list_reviews(db, recipe_id)
    return [RecipeMapper.to_review_response(r) for r in reviews]


@router.post(
    "/{recipe_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    recipe_id: int,
    payload: ReviewCreate,
    db: Session = Depends(get_db_session),
    claims: Optional[TokenClaims] = Depends(get_optional_claims),
):
    """Post a review; admins appear under their role unless a name is given"""
    name = payload.name
    if name is None and claims is not None:
        name = claims.role
    review = ReviewService.create_review(
        db, recipe_id, rating=payload.rating, comment=payload.comment, name=name
    )
    return RecipeMapper.to_review_response(review)


@router.post(
    "/{recipe_id}/anonymous-reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_anonymous_review(
    recipe_id: int,
    payload: AnonymousReviewCreate,
    token: str = Depends(require_qr_token),
    db: Session = Depends(get_db_session),
):
    """Guest review authorized by a QR token for this recipe"""
    review = ReviewService.create_review(
        db,
        recipe_id,
        rating=payload.rating,
        comment=payload.comment,
        name=payload.name,
    )
    QrService.mark_used(db, token)
    return RecipeMapper.to_review_response(review)
