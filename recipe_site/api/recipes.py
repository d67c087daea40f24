"""Recipe API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from recipe_site.api.dependencies import get_recipe_service
from recipe_site.config import get_settings
from recipe_site.schemas.recipe import (
    RecipeDetail,
    RecipeDetailResponse,
    RecipeListResponse,
    RecipeSummary,
)
from recipe_site.services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("", response_model=RecipeListResponse)
def list_recipes(
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=100),
    category: str | None = Query(default=None, description="Category slug"),
    search: str | None = Query(default=None, description="Title search"),
):
    """Paginated listing of published recipes, most recently updated first."""
    settings = get_settings()
    limit = min(limit or settings.listing_default_limit, settings.listing_max_limit)

    try:
        recipes, total = service.list_recipes(
            offset=offset, limit=limit, category_slug=category, search=search
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching recipes: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch recipes", "recipes": [], "hasMore": False, "total": 0},
        )

    return RecipeListResponse(
        recipes=[RecipeSummary.model_validate(r) for r in recipes],
        has_more=offset + len(recipes) < total,
        total=total,
    )


@router.get("/{slug}", response_model=RecipeDetailResponse)
def get_recipe(
    slug: str,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
):
    """Get a published recipe with similar recipes."""
    try:
        recipe = service.get_recipe(slug)
        similar = service.similar_recipes(recipe) if recipe else []
    except SQLAlchemyError as e:
        logger.error(f"Error fetching recipe {slug}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch recipe"},
        )

    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")

    return RecipeDetailResponse(
        recipe=RecipeDetail.model_validate(recipe),
        similar_recipes=[RecipeSummary.model_validate(r) for r in similar],
    )
