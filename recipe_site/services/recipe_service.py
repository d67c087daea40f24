"""Read-side queries behind the site's pages and the listing endpoint."""

import logging
import math

from sqlalchemy import and_, func
from sqlalchemy.orm import Query, Session

from recipe_site.models.category import Category, RecipeCategory
from recipe_site.models.recipe import Recipe

logger = logging.getLogger(__name__)

SIMILAR_RECIPES_LIMIT = 3


class RecipeService:
    """Service for published recipe and category lookups."""

    def __init__(self, db: Session):
        self.db = db

    def _published(self) -> Query:
        return self.db.query(Recipe).filter(Recipe.published.is_(True))

    def list_recipes(
        self,
        offset: int = 0,
        limit: int = 50,
        category_slug: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Recipe], int]:
        """One page of published recipes, newest first, plus the total count."""
        query = self._published()

        if category_slug:
            query = (
                query.join(RecipeCategory, RecipeCategory.recipe_id == Recipe.id)
                .join(Category, Category.id == RecipeCategory.category_id)
                .filter(Category.slug == category_slug)
            )
        if search:
            query = query.filter(Recipe.title.ilike(f"%{search.strip()}%"))

        total = query.count()
        recipes = (
            query.order_by(Recipe.updated_at.desc(), Recipe.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return recipes, total

    def list_categories(self) -> list[tuple[Category, int]]:
        """All categories with their published recipe counts, most recipes first."""
        recipe_count = func.count(Recipe.id)
        return (
            self.db.query(Category, recipe_count)
            .outerjoin(RecipeCategory, RecipeCategory.category_id == Category.id)
            .outerjoin(
                Recipe,
                and_(Recipe.id == RecipeCategory.recipe_id, Recipe.published.is_(True)),
            )
            .group_by(Category.id)
            .order_by(recipe_count.desc(), Category.name)
            .all()
        )

    def get_category(self, slug: str) -> Category | None:
        return self.db.query(Category).filter(Category.slug == slug).first()

    def category_page(self, category: Category, page: int, per_page: int) -> dict:
        """Recipes of a category for one page, oldest first."""
        page = max(page, 1)
        query = (
            self._published()
            .join(RecipeCategory, RecipeCategory.recipe_id == Recipe.id)
            .filter(RecipeCategory.category_id == category.id)
        )
        total = query.count()
        recipes = (
            query.order_by(Recipe.created_at, Recipe.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return {
            "recipes": recipes,
            "total_recipes": total,
            "total_pages": math.ceil(total / per_page) if per_page else 0,
            "current_page": page,
        }

    def get_recipe(self, slug: str) -> Recipe | None:
        """A published recipe by slug."""
        return self._published().filter(Recipe.slug == slug).first()

    def similar_recipes(self, recipe: Recipe, limit: int = SIMILAR_RECIPES_LIMIT) -> list[Recipe]:
        """Other published recipes, same category first."""
        similar: list[Recipe] = []
        category = recipe.primary_category

        if category is not None:
            similar = (
                self._published()
                .join(RecipeCategory, RecipeCategory.recipe_id == Recipe.id)
                .filter(RecipeCategory.category_id == category.id, Recipe.id != recipe.id)
                .order_by(Recipe.updated_at.desc(), Recipe.id.desc())
                .limit(limit)
                .all()
            )

        if len(similar) < limit:
            exclude = [recipe.id] + [r.id for r in similar]
            similar += (
                self._published()
                .filter(Recipe.id.notin_(exclude))
                .order_by(Recipe.updated_at.desc(), Recipe.id.desc())
                .limit(limit - len(similar))
                .all()
            )

        return similar
