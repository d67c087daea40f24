"""Tests for writing imported recipes."""

from datetime import datetime
from unittest.mock import patch

from sqlalchemy.exc import IntegrityError

from recipe_site.models.category import Category, RecipeCategory
from recipe_site.models.recipe import Recipe
from recipe_site.services.recipe_writer import RecipeDraft, RecipeWriter


def _draft(slug: str, title: str | None = None, category_slug: str | None = "desserts") -> RecipeDraft:
    return RecipeDraft(
        title=title or slug.replace("-", " ").title(),
        slug=slug,
        ingredients=["250 g Magerquark", "3 Eier Größe M"],
        instructions=["Alles gut miteinander verrühren.", "Bei 180 Grad 50 Minuten backen."],
        category_slug=category_slug,
    )


def test_upsert_categories_creates_target_set(db):
    """Test all target categories exist after upsert, once each."""
    writer = RecipeWriter(db)

    first = writer.upsert_categories()
    second = writer.upsert_categories()

    assert len(first) == 7
    assert first.keys() == second.keys()
    assert db.query(Category).count() == 7
    assert first["desserts"].name == "Desserts"


def test_write_creates_published_recipes_with_category(db):
    """Test drafts are stored as published recipes with one category."""
    report = RecipeWriter(db).write([_draft("kaesekuchen", "Käsekuchen")])

    assert report.created == 1
    recipe = db.query(Recipe).filter(Recipe.slug == "kaesekuchen").one()
    assert recipe.published is True
    assert recipe.published_at is not None
    assert recipe.ingredients == ["250 g Magerquark", "3 Eier Größe M"]
    assert recipe.primary_category.slug == "desserts"


def test_existing_slug_is_skipped(db):
    """Test re-importing keeps the stored recipe and a single category row."""
    writer = RecipeWriter(db)
    writer.write([_draft("kaesekuchen", "Käsekuchen")])

    report = writer.write([_draft("kaesekuchen", "Anderer Titel")])

    assert report.created == 0
    assert report.skipped_existing == 1
    assert db.query(Recipe).count() == 1
    assert db.query(Recipe).one().title == "Käsekuchen"
    assert db.query(RecipeCategory).count() == 1


def test_unknown_category_slug_leaves_recipe_uncategorized(db):
    """Test an unknown category does not block the recipe."""
    report = RecipeWriter(db).write([_draft("sonderling", category_slug="reisen")])

    assert report.created == 1
    assert db.query(RecipeCategory).count() == 0


def test_failing_row_does_not_stop_batch(db):
    """Test a database error on one recipe is counted and the rest is written."""
    writer = RecipeWriter(db)
    categories = writer.upsert_categories()
    original = writer.upsert_recipe

    def flaky_upsert(draft):
        if draft.slug == "kaputt":
            raise IntegrityError("INSERT INTO recipes", {}, Exception("boom"))
        return original(draft)

    with patch.object(writer, "upsert_recipe", side_effect=flaky_upsert):
        report = writer.write(
            [_draft("erstes-rezept"), _draft("kaputt"), _draft("drittes-rezept")], categories
        )

    assert report.created == 2
    assert report.failed == 1
    assert report.failed_slugs == ["kaputt"]
    slugs = {slug for (slug,) in db.query(Recipe.slug).all()}
    assert slugs == {"erstes-rezept", "drittes-rezept"}


def test_publish_keeps_first_publication_date():
    """Test republishing keeps the original publication date."""
    recipe = Recipe(title="Hefezopf", slug="hefezopf", ingredients=[], instructions=[], images=[])

    recipe.publish(datetime(2019, 4, 20, 8, 0))
    recipe.publish()
    assert recipe.published is True
    assert recipe.published_at == datetime(2019, 4, 20, 8, 0)
