"""Health check and utility routes"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.config import settings
from domain.models import get_db_session

router = APIRouter(tags=["Health"])
logger = logging.getLogger("mymixes.api.health")


@router.get("/")
def root():
    return {"message": "Server is running!"}


@router.get("/health")
def health_check(db: Session = Depends(get_db_session)):
    """Liveness plus a database round trip"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"health_check_db_failed error={e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "service": settings.app_name, "database": "unavailable"},
        )
    return {"status": "ok", "service": settings.app_name, "database": "ok"}
