"""Category API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from recipe_site.api.dependencies import get_recipe_service
from recipe_site.config import get_settings
from recipe_site.schemas.category import CategoryResponse, CategoryWithCount
from recipe_site.schemas.recipe import CategoryPageResponse, RecipeSummary
from recipe_site.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryWithCount])
def list_categories(
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """All categories with their published recipe counts."""
    try:
        rows = service.list_categories()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        return []

    return [
        CategoryWithCount(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            color=category.color,
            recipe_count=count,
        )
        for category, count in rows
    ]


@router.get("/{slug}", response_model=CategoryPageResponse)
def get_category(
    slug: str,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    page: int = Query(default=1, ge=1),
):
    """One page of a category's recipes."""
    try:
        category = service.get_category(slug)
        result = (
            service.category_page(category, page, get_settings().recipes_per_page)
            if category
            else None
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching category {slug}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch category"},
        )

    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    return CategoryPageResponse(
        category=CategoryResponse.model_validate(category),
        recipes=[RecipeSummary.model_validate(r) for r in result["recipes"]],
        total_recipes=result["total_recipes"],
        total_pages=result["total_pages"],
        current_page=result["current_page"],
    )
