"""
Recipe service - catalog CRUD.

Recipes are created together with their ingredient lines in one commit.
Updates replace the whole ingredient set instead of diffing it.
"""

from typing import List, Optional
import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from domain.models import Recipe, Ingredient, utcnow
from domain.mappers import RecipeMapper
from domain.schemas.recipe_schemas import (
    IngredientInput,
    RecipeCreate,
    RecipeDetail,
    RecipePage,
)
from repositories import RecipeRepository, IngredientTypeRepository, ReviewRepository
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError

logger = logging.getLogger("mymixes.recipes")

# Number of reviews embedded in a recipe detail
DETAIL_REVIEW_LIMIT = 25


class RecipeService:
    """Business logic for the recipe catalog"""

    @staticmethod
    def list_recipes(
        db: Session, query: Optional[str] = None, page: int = 1, size: int = 12
    ) -> RecipePage:
        """Page of recipe summaries, newest first, filtered on title substring"""
        if page < 1 or size < 1:
            raise ServiceValidationError("page and size must be positive integers")

        repo = RecipeRepository(db)
        query = (query or "").strip() or None
        rows = repo.search(query, skip=(page - 1) * size, limit=size)
        total = repo.count(query)

        return RecipePage(
            items=[RecipeMapper.to_summary(r, ing, rev) for r, ing, rev in rows],
            total=total,
            page=page,
            size=size,
        )

    @staticmethod
    def get_recipe(db: Session, recipe_id: int) -> Recipe:
        """Return the Recipe row or raise NotFoundError"""
        recipe = RecipeRepository(db).get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> RecipeDetail:
        """Full recipe with resolved ingredients and the most recent reviews"""
        recipe = RecipeRepository(db).get_by_slug(slug)
        if not recipe:
            logger.info(f"recipe_not_found slug={slug}")
            raise NotFoundError("Recipe not found")

        reviews = ReviewRepository(db).list_by_recipe(recipe.id, limit=DETAIL_REVIEW_LIMIT)
        return RecipeMapper.to_detail(recipe, reviews)

    @staticmethod
    def create_recipe(db: Session, data: RecipeCreate) -> RecipeDetail:
        """Insert a recipe and its ingredient lines in a single transaction"""
        repo = RecipeRepository(db)
        if repo.slug_exists(data.slug):
            raise ConflictError(f"Recipe with slug '{data.slug}' already exists")

        try:
            recipe = Recipe(
                title=data.title,
                slug=data.slug,
                image_url=str(data.image_url) if data.image_url else None,
                description=data.description,
                method=data.method,
            )
            recipe.ingredients = RecipeService._build_ingredients(db, data.ingredients)
            db.add(recipe)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"recipe_create_conflict slug={data.slug} error={e.orig}")
            raise ConflictError("Unique constraint failed")
        except Exception:
            db.rollback()
            raise

        db.refresh(recipe)
        logger.info(
            f"recipe_created recipe_id={recipe.id} slug={recipe.slug} "
            f"ingredients_count={len(recipe.ingredients)}"
        )
        return RecipeMapper.to_detail(recipe, [])

    @staticmethod
    def update_recipe(db: Session, recipe_id: int, data: RecipeCreate) -> RecipeDetail:
        """
        Replace a recipe's fields and its full ingredient set.

        Existing ingredient lines are deleted and recreated, so their ids
        change even when the submitted content is identical.
        """
        repo = RecipeRepository(db)
        recipe = RecipeService.get_recipe(db, recipe_id)
        if repo.slug_exists(data.slug, exclude_id=recipe_id):
            raise ConflictError(f"Recipe with slug '{data.slug}' already exists")

        try:
            recipe.title = data.title
            recipe.slug = data.slug
            recipe.image_url = str(data.image_url) if data.image_url else None
            recipe.description = data.description
            recipe.method = data.method
            recipe.updated_at = utcnow()
            repo.replace_ingredients(
                recipe, RecipeService._build_ingredients(db, data.ingredients)
            )
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"recipe_update_conflict recipe_id={recipe_id} error={e.orig}")
            raise ConflictError("Unique constraint failed")
        except Exception:
            db.rollback()
            raise

        db.refresh(recipe)
        logger.info(
            f"recipe_updated recipe_id={recipe.id} slug={recipe.slug} "
            f"ingredients_count={len(recipe.ingredients)}"
        )
        reviews = ReviewRepository(db).list_by_recipe(recipe.id, limit=DETAIL_REVIEW_LIMIT)
        return RecipeMapper.to_detail(recipe, reviews)

    @staticmethod
    def delete_recipe(db: Session, recipe_id: int) -> None:
        """Delete a recipe; ingredients, reviews and QR tokens go with it"""
        if not RecipeRepository(db).delete(recipe_id):
            raise NotFoundError("Recipe not found")
        logger.info(f"recipe_deleted recipe_id={recipe_id}")

    @staticmethod
    def _build_ingredients(db: Session, items: List[IngredientInput]) -> List[Ingredient]:
        """Resolve each submitted line to an ingredient type.

        A ``type_id`` must reference an existing type; otherwise the type is
        found or created by normalized name.
        """
        type_repo = IngredientTypeRepository(db)
        ingredients = []
        for item in items:
            if item.type_id is not None:
                ingredient_type = type_repo.get_by_id(item.type_id)
                if ingredient_type is None:
                    raise ServiceValidationError(
                        "Invalid relation reference",
                        details={"typeId": item.type_id},
                        code="INVALID_INGREDIENT_TYPE",
                    )
            else:
                ingredient_type = type_repo.get_or_create(item.name)
            ingredients.append(Ingredient(amount=item.amount, type_id=ingredient_type.id))
        return ingredients
