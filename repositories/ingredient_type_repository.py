"""
Ingredient Type Repository - Data access layer for the shared ingredient vocabulary
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from domain.models import IngredientType
from repositories.base import BaseRepository


def normalize_name(name: str) -> str:
    return name.strip().lower()


class IngredientTypeRepository(BaseRepository[IngredientType]):
    """Repository for ingredient types"""

    def __init__(self, db: Session):
        super().__init__(db, IngredientType)

    def get_by_name(self, name: str) -> Optional[IngredientType]:
        """Get ingredient type by normalized name"""
        return (
            self.db.query(IngredientType)
            .filter(IngredientType.name == normalize_name(name))
            .first()
        )

    def get_or_create(self, name: str) -> IngredientType:
        """
        Get existing ingredient type by name, or stage a new one.

        The new row is flushed but not committed so it becomes part of the
        caller's transaction. A concurrent insert of the same name surfaces as
        an IntegrityError at flush time.

        Args:
            name: Ingredient name

        Returns:
            IngredientType instance (existing or newly created)
        """
        normalized_name = normalize_name(name)

        ingredient_type = self.get_by_name(normalized_name)
        if ingredient_type:
            return ingredient_type

        ingredient_type = IngredientType(name=normalized_name)
        self.db.add(ingredient_type)
        self.db.flush()
        return ingredient_type

    def get_all(self, skip: int = 0, limit: int = 100) -> List[IngredientType]:
        """Get all ingredient types ordered by name"""
        return (
            self.db.query(IngredientType)
            .order_by(IngredientType.name)
            .offset(skip)
            .limit(limit)
            .all()
        )
