"""
QR token service.

A QR token is a random hex secret bound to one recipe. Anyone holding an
unexpired token may post reviews for that recipe without logging in. The
``used`` flag is informational: posting a review stamps it but the token
stays valid until it expires or its recipe is deleted.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID
import logging
import secrets

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.exceptions import NotFoundError
from domain.models import QrToken, utcnow
from repositories import QrTokenRepository, RecipeRepository

logger = logging.getLogger("mymixes.qr")


@dataclass(frozen=True)
class QrValidation:
    """Outcome of a token check"""

    valid: bool
    recipe_id: Optional[int] = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def add_years(moment: datetime, years: int) -> datetime:
    """Same calendar date ``years`` later; Feb 29 falls back to Feb 28"""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


class QrService:
    """Issue, validate and manage QR review tokens"""

    @staticmethod
    def build_review_url(recipe_id: int, token: str) -> str:
        """Deep link into the frontend review page"""
        return f"{settings.frontend_url}/#/review/{recipe_id}?token={token}"

    @staticmethod
    def generate_token(db: Session, recipe_id: int, now: Optional[datetime] = None) -> QrToken:
        """Create a new token for an existing recipe"""
        recipe = RecipeRepository(db).get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found")

        now = now or utcnow()
        qr_token = QrToken(
            token=secrets.token_hex(settings.qr_token_bytes),
            recipe_id=recipe.id,
            expires_at=add_years(now, settings.qr_token_ttl_years),
            created_at=now,
        )
        try:
            db.add(qr_token)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(qr_token)
        logger.info(
            f"qr_token_generated token_id={qr_token.id} recipe_id={recipe.id} "
            f"expires_at={qr_token.expires_at.isoformat()}"
        )
        return qr_token

    @staticmethod
    def validate_token(
        db: Session, token: Optional[str], now: Optional[datetime] = None
    ) -> QrValidation:
        """
        Check a token presented by a guest.

        Valid only when the token exists, has not expired and its recipe
        still exists. Lookup failures are reported as invalid.
        """
        if not token:
            return QrValidation(valid=False)

        now = now or utcnow()
        try:
            qr_token = QrTokenRepository(db).get_by_token(token)
        except SQLAlchemyError as e:
            logger.error(f"qr_token_lookup_failed error={e}")
            return QrValidation(valid=False)

        if qr_token is None or qr_token.recipe is None:
            return QrValidation(valid=False)
        if now >= _as_utc(qr_token.expires_at):
            logger.info(f"qr_token_expired token_id={qr_token.id}")
            return QrValidation(valid=False)

        return QrValidation(valid=True, recipe_id=qr_token.recipe_id)

    @staticmethod
    def mark_used(db: Session, token: str) -> None:
        """Stamp the token after a successful review"""
        qr_token = QrTokenRepository(db).get_by_token(token)
        if qr_token is None:
            return
        qr_token.used = True
        qr_token.used_at = utcnow()
        db.commit()

    @staticmethod
    def list_active(
        db: Session, recipe_id: Optional[int] = None, now: Optional[datetime] = None
    ) -> List[QrToken]:
        return QrTokenRepository(db).list_active(now or utcnow(), recipe_id=recipe_id)

    @staticmethod
    def delete_token(db: Session, token_id: UUID) -> None:
        if not QrTokenRepository(db).delete(token_id):
            raise NotFoundError("QR token not found")
        logger.info(f"qr_token_deleted token_id={token_id}")

    @staticmethod
    def counts_by_recipe(db: Session, now: Optional[datetime] = None) -> Dict[int, int]:
        """Active token count keyed by recipe id"""
        return QrTokenRepository(db).counts_by_recipe(now or utcnow())
