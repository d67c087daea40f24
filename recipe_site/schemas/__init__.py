"""Pydantic schemas for API responses."""

from recipe_site.schemas.category import CategoryResponse, CategorySummary, CategoryWithCount
from recipe_site.schemas.recipe import (
    CategoryPageResponse,
    RecipeDetail,
    RecipeDetailResponse,
    RecipeListResponse,
    RecipeSummary,
)

__all__ = [
    "CategorySummary",
    "CategoryResponse",
    "CategoryWithCount",
    "RecipeSummary",
    "RecipeDetail",
    "RecipeDetailResponse",
    "RecipeListResponse",
    "CategoryPageResponse",
]
