"""
Ingredient models - shared ingredient vocabulary and per-recipe ingredient lines.
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from domain.models.database import Base


class IngredientType(Base):
    """
    Normalized ingredient name shared across recipes.

    Names are stored lower-cased and trimmed so "Lime Juice" and "lime juice "
    resolve to the same row.
    """

    __tablename__ = "ingredient_type"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False, unique=True, index=True)

    ingredients = relationship("Ingredient", back_populates="type")

    __table_args__ = (UniqueConstraint("name", name="uq_ingredient_type_name"),)

    def __repr__(self):
        return f"<IngredientType(id={self.id}, name='{self.name}')>"


class Ingredient(Base):
    """One ingredient line of a recipe: a free-text amount of an ingredient type."""

    __tablename__ = "ingredient"

    id = Column(Integer, primary_key=True, autoincrement=True)
    amount = Column(Text, nullable=False)
    recipe_id = Column(
        Integer, ForeignKey("recipe.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type_id = Column(
        Integer, ForeignKey("ingredient_type.id"), nullable=False, index=True
    )

    recipe = relationship("Recipe", back_populates="ingredients")
    type = relationship("IngredientType", back_populates="ingredients", lazy="joined")

    __table_args__ = {"sqlite_autoincrement": True}

    @property
    def name(self) -> str:
        """Resolved ingredient type name"""
        return self.type.name if self.type else ""

    def __repr__(self):
        return f"<Ingredient(id={self.id}, amount='{self.amount}', type_id={self.type_id})>"
