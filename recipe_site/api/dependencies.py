"""FastAPI dependencies for services and settings."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from recipe_site.database import get_db
from recipe_site.services.recipe_service import RecipeService


def get_recipe_service(
    db: Annotated[Session, Depends(get_db)],
) -> RecipeService:
    """Get recipe service with dependencies."""
    return RecipeService(db)
