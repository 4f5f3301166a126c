"""
QR Token Repository - Data access layer for QR review tokens
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from domain.models import QrToken
from repositories.base import BaseRepository


class QrTokenRepository(BaseRepository[QrToken]):
    """Repository for QR token data access"""

    def __init__(self, db: Session):
        super().__init__(db, QrToken)

    def get_by_token(self, token: str) -> Optional[QrToken]:
        """Get a token row by its secret value, with its recipe loaded"""
        return (
            self.db.query(QrToken)
            .options(joinedload(QrToken.recipe))
            .filter(QrToken.token == token)
            .first()
        )

    def list_active(self, now: datetime, recipe_id: Optional[int] = None) -> List[QrToken]:
        """Get tokens that have not expired yet, newest first"""
        q = (
            self.db.query(QrToken)
            .options(joinedload(QrToken.recipe))
            .filter(QrToken.expires_at > now)
        )
        if recipe_id is not None:
            q = q.filter(QrToken.recipe_id == recipe_id)
        return q.order_by(QrToken.created_at.desc()).all()

    def counts_by_recipe(self, now: datetime) -> Dict[int, int]:
        """Number of active tokens per recipe id"""
        rows = (
            self.db.query(QrToken.recipe_id, func.count(QrToken.id))
            .filter(QrToken.expires_at > now)
            .group_by(QrToken.recipe_id)
            .all()
        )
        return {recipe_id: count for recipe_id, count in rows}
