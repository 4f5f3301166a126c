"""Pydantic schemas for reviews."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from domain.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    """Body of POST /recipes/{id}/reviews"""

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)


class AnonymousReviewCreate(CamelModel):
    """Body of POST /recipes/{id}/anonymous-reviews; a display name is required"""

    name: str = Field(..., min_length=1, max_length=50)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)


class ReviewResponse(CamelModel):
    id: int
    rating: int
    comment: str
    name: Optional[str] = None
    recipe_id: int
    user_id: Optional[int] = None
    created_at: datetime
