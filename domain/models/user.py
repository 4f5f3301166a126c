"""
User model.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship

from domain.models.database import Base, utcnow


class User(Base):
    """Reviewer identity referenced by non-anonymous reviews.

    There are no per-user logins; administration uses the shared admin
    credential.
    """

    __tablename__ = "app_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(Text)
    image_url = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    reviews = relationship("Review", back_populates="user")
