"""
Recipe model - the catalog entry that owns ingredients, reviews and QR tokens.
"""

from sqlalchemy import Column, Integer, String, Text, Float, DateTime
from sqlalchemy.orm import relationship

from domain.models.database import Base, utcnow


class Recipe(Base):
    """
    A cocktail recipe, addressed publicly by its unique slug.

    ``avg_rating`` is a denormalized cache of the mean review rating; the
    review rows remain the source of truth.
    """

    __tablename__ = "recipe"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    image_url = Column(Text)
    description = Column(Text)
    method = Column(Text, nullable=False)
    avg_rating = Column(Float)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    ingredients = relationship(
        "Ingredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Ingredient.id",
    )
    reviews = relationship(
        "Review",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    qr_tokens = relationship(
        "QrToken",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Recipe(id={self.id}, slug='{self.slug}')>"
