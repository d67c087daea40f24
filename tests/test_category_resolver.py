"""Tests for category resolution and assignment."""

import pytest

from recipe_site.models.category import Category, RecipeCategory
from recipe_site.models.recipe import Recipe
from recipe_site.services.category_resolver import (
    TARGET_CATEGORIES,
    CategoryResolver,
    assign_category,
    lookup_legacy_slug,
    match_title_keywords,
)


@pytest.fixture
def recipe_with_categories(db):
    """Create a recipe and two categories."""
    recipe = Recipe(title="Käsekuchen", slug="kaesekuchen", ingredients=[], instructions=[], images=[])
    desserts = Category(name="Desserts", slug="desserts")
    basics = Category(name="Küchen-Basics", slug="basics")
    db.add_all([recipe, desserts, basics])
    db.commit()
    return {"recipe": recipe, "desserts": desserts, "basics": basics}


def test_seven_target_categories():
    """Test the fixed category table."""
    slugs = [definition.slug for definition in TARGET_CATEGORIES]

    assert len(slugs) == 7
    assert len(set(slugs)) == 7
    assert "desserts" in slugs and "hauptgerichte" in slugs


def test_keyword_fallback_for_kaesekuchen():
    """Test a post without taxonomy lands in desserts via the title keyword."""
    resolution = CategoryResolver().resolve("Käsekuchen", category_terms=[], source_url=None)

    assert resolution.slug == "desserts"
    assert resolution.strategy == "keyword"


def test_taxonomy_wins_over_keyword():
    """Test the old category term is used before title keywords."""
    resolution = CategoryResolver().resolve("Schokoladenkuchen", ["ohne-brot-nix-los"])

    assert resolution.slug == "brot-backwaren"
    assert resolution.strategy == "taxonomy"


def test_url_segment_strategy():
    """Test the category is read from the old permalink."""
    resolution = CategoryResolver().resolve(
        "Mini-Donuts",
        [],
        "https://danie.de/meine-kueche/kuechengeschenke/mini-donuts/",
    )

    assert resolution.slug == "geschenke"
    assert resolution.strategy == "url"


def test_default_category():
    """Test unmatched posts fall back to the default slug."""
    resolution = CategoryResolver(default_slug="hauptgerichte").resolve("Unbekanntes", [])

    assert resolution.slug == "hauptgerichte"
    assert resolution.strategy == "default"


def test_without_default_strategy_nothing_is_resolved():
    """Test resolution can come back empty when no strategy applies."""
    resolver = CategoryResolver(strategies=("taxonomy", "keyword"))

    assert resolver.resolve("Unbekanntes", []) is None


def test_unknown_strategy_rejected():
    """Test unknown strategy names fail early."""
    with pytest.raises(ValueError):
        CategoryResolver(strategies=("taxonomy", "magic"))


def test_lookup_legacy_slug_accepts_display_names():
    """Test old category names are slugified before lookup."""
    assert lookup_legacy_slug("Küchengeschenke") == "geschenke"
    assert lookup_legacy_slug("Kuchen & Süßes") == "desserts"
    assert lookup_legacy_slug("desserts") == "desserts"
    assert lookup_legacy_slug("Reisen") is None
    assert lookup_legacy_slug(None) is None


def test_keyword_order_breaks_ties():
    """Test the first category in keyword order wins."""
    assert match_title_keywords("Brotkuchen") == "desserts"
    assert match_title_keywords("Dinkelbrötchen") == "brot-backwaren"
    assert match_title_keywords("") is None


def test_assign_category_twice_keeps_one_row(db, recipe_with_categories):
    """Test repeated assignment leaves exactly one association."""
    recipe = recipe_with_categories["recipe"]
    desserts = recipe_with_categories["desserts"]

    assign_category(db, recipe.id, desserts.id)
    db.commit()
    assign_category(db, recipe.id, desserts.id)
    db.commit()

    links = db.query(RecipeCategory).filter(RecipeCategory.recipe_id == recipe.id).all()
    assert len(links) == 1
    assert links[0].category_id == desserts.id


def test_assign_category_replaces_previous(db, recipe_with_categories):
    """Test assigning a new category removes the old one."""
    recipe = recipe_with_categories["recipe"]

    assign_category(db, recipe.id, recipe_with_categories["desserts"].id)
    db.commit()
    assign_category(db, recipe.id, recipe_with_categories["basics"].id)
    db.commit()

    links = db.query(RecipeCategory).filter(RecipeCategory.recipe_id == recipe.id).all()
    assert [link.category_id for link in links] == [recipe_with_categories["basics"].id]
