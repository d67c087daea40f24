"""SQLAlchemy models."""

from recipe_site.models.category import Category, RecipeCategory
from recipe_site.models.enums import Difficulty
from recipe_site.models.recipe import Recipe

__all__ = [
    "Category",
    "Difficulty",
    "Recipe",
    "RecipeCategory",
]
