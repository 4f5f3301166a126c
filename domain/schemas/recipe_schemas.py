"""Pydantic schemas for recipes and their ingredients."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, HttpUrl, field_validator, model_validator

from domain.schemas.common import CamelModel
from domain.schemas.review_schemas import ReviewResponse


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class IngredientInput(CamelModel):
    """
    One submitted ingredient line.

    The ingredient type is referenced either by ``typeId`` or by ``name``;
    names are normalized to lower case without surrounding whitespace.
    """

    type_id: Optional[int] = Field(default=None, gt=0)
    name: Optional[str] = Field(default=None, max_length=120)
    amount: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().lower()
        if not v:
            raise ValueError("Ingredient name must not be empty")
        return v

    @model_validator(mode="after")
    def require_type_or_name(self):
        if self.type_id is None and self.name is None:
            raise ValueError("Provide either typeId or name")
        return self


class RecipeCreate(CamelModel):
    """Body of POST /recipes and PUT /recipes/{id}"""

    title: str = Field(..., min_length=2, max_length=200)
    slug: str = Field(..., min_length=2, max_length=200, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    image_url: Optional[HttpUrl] = None
    description: Optional[str] = None
    method: str = Field(..., min_length=5)
    ingredients: List[IngredientInput] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class IngredientTypeResponse(CamelModel):
    id: int
    name: str


class IngredientResponse(CamelModel):
    id: int
    amount: str
    recipe_id: int
    type_id: int
    name: str
    type: IngredientTypeResponse


class RecipeCounts(CamelModel):
    ingredients: int = 0
    reviews: int = 0


class RecipeBase(CamelModel):
    id: int
    title: str
    slug: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    method: str
    avg_rating: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class RecipeSummary(RecipeBase):
    """Grid entry: recipe fields plus child counts instead of child rows"""

    counts: RecipeCounts = Field(default_factory=RecipeCounts, alias="_count")


class RecipeDetail(RecipeBase):
    ingredients: List[IngredientResponse] = []
    reviews: List[ReviewResponse] = []


class RecipePage(CamelModel):
    items: List[RecipeSummary]
    total: int
    page: int
    size: int
