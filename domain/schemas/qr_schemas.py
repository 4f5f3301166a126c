"""Pydantic schemas for QR review tokens."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from domain.schemas.common import CamelModel


class QrGenerateRequest(CamelModel):
    recipe_id: int = Field(..., gt=0, description="Recipe the token grants reviews for")


class QrRecipeInfo(CamelModel):
    id: int
    title: str
    slug: str


class QrTokenResponse(CamelModel):
    id: UUID
    token: str
    qr_url: str
    expires_at: datetime
    recipe_id: int
    recipe: QrRecipeInfo
    used: bool = False
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class QrDeleteResponse(CamelModel):
    success: bool = True
    message: str = "QR token deleted successfully"
