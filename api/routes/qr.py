"""QR review token management routes (admin only)"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import Dict, List, Optional
from uuid import UUID

from api.dependencies import require_admin
from domain.mappers import QrMapper
from domain.models import get_db_session
from domain.schemas.qr_schemas import QrDeleteResponse, QrGenerateRequest, QrTokenResponse
from services.qr_service import QrService

router = APIRouter(prefix="/qr", tags=["QR"], dependencies=[Depends(require_admin)])
logger = logging.getLogger("mymixes.api.qr")


@router.post("/generate", response_model=QrTokenResponse, status_code=status.HTTP_201_CREATED)
def generate_token(payload: QrGenerateRequest, db: Session = Depends(get_db_session)):
    """Issue a token and the deep link to encode in the QR image"""
    qr_token = QrService.generate_token(db, payload.recipe_id)
    return QrMapper.to_response(
        qr_token, QrService.build_review_url(qr_token.recipe_id, qr_token.token)
    )


@router.get("", response_model=List[QrTokenResponse])
def list_tokens(
    recipe_id: Optional[int] = Query(default=None, alias="recipeId", gt=0),
    db: Session = Depends(get_db_session),
):
    """Unexpired tokens, newest first"""
    tokens = QrService.list_active(db, recipe_id=recipe_id)
    return [
        QrMapper.to_response(t, QrService.build_review_url(t.recipe_id, t.token))
        for t in tokens
    ]


@router.get("/counts", response_model=Dict[int, int])
def token_counts(db: Session = Depends(get_db_session)):
    return QrService.counts_by_recipe(db)


@router.delete("/{token_id}", response_model=QrDeleteResponse)
def delete_token(token_id: UUID, db: Session = Depends(get_db_session)):
    QrService.delete_token(db, token_id)
    return QrDeleteResponse()
