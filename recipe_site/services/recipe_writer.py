"""Persisting imported categories and recipes."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recipe_site.models.category import Category
from recipe_site.models.enums import Difficulty
from recipe_site.models.recipe import Recipe
from recipe_site.services.category_resolver import (
    TARGET_CATEGORIES,
    CategoryDefinition,
    assign_category,
)

logger = logging.getLogger(__name__)


@dataclass
class RecipeDraft:
    """A parsed and matched recipe, ready to be written."""

    title: str
    slug: str
    ingredients: list[str]
    instructions: list[str]
    category_slug: str | None = None
    nutrition: dict | None = None
    servings: int = 4
    cook_time: int | None = None
    featured_image: str | None = None
    images: list[str] = field(default_factory=list)
    difficulty: str = Difficulty.MEDIUM.value
    wp_post_id: int | None = None
    wp_url: str | None = None
    published_at: datetime | None = None


@dataclass
class WriteReport:
    created: int = 0
    skipped_existing: int = 0
    failed: int = 0
    failed_slugs: list[str] = field(default_factory=list)


class RecipeWriter:
    """Insert-or-skip writer; every recipe is committed on its own."""

    def __init__(self, db: Session):
        self.db = db

    def upsert_categories(
        self, definitions: tuple[CategoryDefinition, ...] = TARGET_CATEGORIES
    ) -> dict[str, Category]:
        """Create missing categories by slug and return all of them by slug."""
        categories: dict[str, Category] = {}
        for definition in definitions:
            try:
                category = self.db.query(Category).filter(Category.slug == definition.slug).first()
                if category is None:
                    category = Category(
                        name=definition.name,
                        slug=definition.slug,
                        description=definition.description,
                        color=definition.color,
                    )
                    self.db.add(category)
                    self.db.commit()
                    logger.info(f"Created category {definition.name}")
                categories[definition.slug] = category
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating category {definition.slug}: {e}")
        return categories

    def upsert_recipe(self, draft: RecipeDraft) -> tuple[Recipe, bool]:
        """Return the recipe with the draft's slug, creating it if needed."""
        existing = self.db.query(Recipe).filter(Recipe.slug == draft.slug).first()
        if existing:
            return existing, False

        recipe = Recipe(
            title=draft.title,
            slug=draft.slug,
            ingredients=draft.ingredients,
            instructions=draft.instructions,
            nutrition=draft.nutrition or None,
            servings=draft.servings,
            cook_time=draft.cook_time,
            difficulty=draft.difficulty,
            featured_image=draft.featured_image,
            images=draft.images,
            wp_post_id=draft.wp_post_id,
            wp_url=draft.wp_url,
        )
        recipe.publish(draft.published_at)
        self.db.add(recipe)
        self.db.flush()
        return recipe, True

    def write_recipe(self, draft: RecipeDraft, categories: dict[str, Category]) -> bool | None:
        """Write one recipe and its category.

        Returns True when created, False when it already existed and None
        when the database rejected it.
        """
        try:
            recipe, created = self.upsert_recipe(draft)

            category = categories.get(draft.category_slug) if draft.category_slug else None
            if category is not None:
                assign_category(self.db, recipe.id, category.id)
            elif draft.category_slug:
                logger.warning(f"Unknown category '{draft.category_slug}' for {draft.slug}")

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving recipe {draft.slug}: {e}")
            return None

        if created:
            logger.info(f"Saved recipe {draft.title}")
        else:
            logger.info(f"Recipe {draft.slug} already exists, category refreshed")
        return created

    def write(self, drafts: list[RecipeDraft], categories: dict[str, Category] | None = None) -> WriteReport:
        """Write all drafts; failures are counted and do not stop the batch."""
        if categories is None:
            categories = self.upsert_categories()

        report = WriteReport()
        for draft in drafts:
            outcome = self.write_recipe(draft, categories)
            if outcome is None:
                report.failed += 1
                report.failed_slugs.append(draft.slug)
            elif outcome:
                report.created += 1
            else:
                report.skipped_existing += 1

        logger.info(
            f"Write complete: {report.created} created, "
            f"{report.skipped_existing} existing, {report.failed} failed"
        )
        return report
