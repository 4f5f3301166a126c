"""
QR token model - credential embedded in a printed QR code that lets a guest
review one recipe without logging in.
"""

import uuid

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    UUID as SQLUUID,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base, utcnow


class QrToken(Base):
    """
    Random hex token scoped to a single recipe.

    ``used``/``used_at`` record that a review was posted with the token; they
    do not restrict further use. Validity is decided by ``expires_at`` and the
    existence of the recipe.
    """

    __tablename__ = "qr_token"

    id = Column(SQLUUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token = Column(String(128), nullable=False, unique=True, index=True)
    recipe_id = Column(
        Integer, ForeignKey("recipe.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    recipe = relationship("Recipe", back_populates="qr_tokens")

    def __repr__(self):
        return f"<QrToken(id={self.id}, recipe_id={self.recipe_id})>"
