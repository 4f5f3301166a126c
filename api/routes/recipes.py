"""Recipe catalog routes"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
import logging
from typing import Optional

from api.dependencies import require_admin
from domain.models import get_db_session
from domain.schemas.auth_schemas import TokenClaims
from domain.schemas.recipe_schemas import RecipeCreate, RecipeDetail, RecipePage
from services.recipe_service import RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"])
logger = logging.getLogger("mymixes.api.recipes")


@router.get("", response_model=RecipePage)
def list_recipes(
    query: Optional[str] = Query(default=None, description="Title substring"),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=12, ge=1, le=100),
    db: Session = Depends(get_db_session),
):
    """Paginated recipe grid, newest first"""
    return RecipeService.list_recipes(db, query=query, page=page, size=size)


@router.get("/{slug}", response_model=RecipeDetail)
def get_recipe(slug: str, db: Session = Depends(get_db_session)):
    """Recipe with ingredients and its 25 most recent reviews"""
    return RecipeService.get_by_slug(db, slug)


@router.post("", response_model=RecipeDetail, status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: RecipeCreate,
    db: Session = Depends(get_db_session),
    _admin: TokenClaims = Depends(require_admin),
):
    return RecipeService.create_recipe(db, payload)


@router.put("/{recipe_id}", response_model=RecipeDetail)
def update_recipe(
    recipe_id: int,
    payload: RecipeCreate,
    db: Session = Depends(get_db_session),
    _admin: TokenClaims = Depends(require_admin),
):
    """Replace all fields and the full ingredient list of a recipe"""
    return RecipeService.update_recipe(db, recipe_id, payload)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: int,
    db: Session = Depends(get_db_session),
    _admin: TokenClaims = Depends(require_admin),
):
    RecipeService.delete_recipe(db, recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
