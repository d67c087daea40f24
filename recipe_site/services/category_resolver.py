"""Mapping of WordPress posts onto the site's fixed category set."""

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from recipe_site.models.category import RecipeCategory
from recipe_site.services.slugs import make_slug

logger = logging.getLogger(__name__)

CATEGORY_STRATEGIES = ("taxonomy", "url", "keyword", "default")


@dataclass(frozen=True)
class CategoryDefinition:
    """One entry of the target category table."""

    slug: str
    name: str
    description: str
    color: str


TARGET_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition("desserts", "Desserts", "Kuchen, Torten und süße Leckereien", "#ec4899"),
    CategoryDefinition("brot-backwaren", "Brot & Backwaren", "Brot, Brötchen und Gebäck", "#f59e0b"),
    CategoryDefinition("hauptgerichte", "Hauptgerichte", "Praktische Rezepte für jeden Tag", "#ef4444"),
    CategoryDefinition("fruehstueck", "Frühstück", "Perfekter Start in den Tag", "#f97316"),
    CategoryDefinition("basics", "Küchen-Basics", "Grundlagen und Basisrezepte", "#10b981"),
    CategoryDefinition("geschenke", "Küchengeschenke", "Selbstgemachte Geschenke aus der Küche", "#8b5cf6"),
    CategoryDefinition(
        "besondere-anlaesse", "Besondere Anlässe", "Rezepte für Feiertage und Events", "#06b6d4"
    ),
)

# Old WordPress category slugs (taxonomy terms and URL segments) -> target slug
LEGACY_CATEGORY_MAP: dict[str, str] = {
    "ohne-brot-nix-los": "brot-backwaren",
    "brot": "brot-backwaren",
    "broetchen": "brot-backwaren",
    "backen": "brot-backwaren",
    "kuchen-suesses": "desserts",
    "kuchen": "desserts",
    "torten": "desserts",
    "alltagskueche": "hauptgerichte",
    "alltag": "hauptgerichte",
    "hauptgericht": "hauptgerichte",
    "fruehstueck": "fruehstueck",
    "kuechen-basics": "basics",
    "kuechengeschenke": "geschenke",
    "rezepte-fuer-besondere-anlaesse": "besondere-anlaesse",
    "besondereanlaesse": "besondere-anlaesse",
}
LEGACY_CATEGORY_MAP.update({definition.slug: definition.slug for definition in TARGET_CATEGORIES})

# Title keywords per target slug; declaration order breaks ties
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "desserts": (
        "kuchen", "torte", "tiramisu", "cheesecake", "gugelhupf", "muffin", "brownie",
        "kekse", "cookies", "plätzchen", "kipferl", "amarettini", "engelsaugen",
        "husarenkrapfen", "spitzbuben", "linzer", "parfait", "dessert", "creme", "pudding",
        "posset", "donut", "schnecken",
    ),
    "brot-backwaren": (
        "brot", "brötchen", "croissant", "striezel", "zopf", "baguette", "knoten",
        "foccacia", "focaccia", "ciabatta", "buns", "bagel",
    ),
    "hauptgerichte": (
        "schweinerücken", "filet", "schnitzel", "gulasch", "lasagne", "nudel", "spaghetti",
        "pasta", "risotto", "gnocchi", "quiche", "pizza", "braten", "hähnchen", "lachs",
        "kabeljau", "suppe", "eintopf", "auflauf", "pfanne", "ratatouille",
    ),
    "fruehstueck": (
        "porridge", "oatmeal", "müsli", "granola", "oats", "pancakes", "waffeln",
        "kaiserschmarrn", "frühstück", "bircher",
    ),
    "basics": ("grundrezept", "brühe", "fond", "sauce", "soße", "dressing", "dip", "teig"),
    "geschenke": ("marmelade", "konfitüre", "chutney", "gelee", "likör", "sirup", "essig", "geschenk"),
    "besondere-anlaesse": ("weihnacht", "ostern", "silvester", "geburtstag", "stollen", "festtag"),
}


@dataclass
class CategoryResolution:
    """Target category chosen for a post and the strategy that chose it."""

    slug: str
    strategy: str


def lookup_legacy_slug(term: str | None) -> str | None:
    """Target slug for an old category slug or name, if known."""
    if not term:
        return None
    key = term.strip().lower()
    return LEGACY_CATEGORY_MAP.get(key) or LEGACY_CATEGORY_MAP.get(make_slug(term))


def url_path_segments(url: str | None) -> list[str]:
    if not url:
        return []
    path = urlparse(url).path if "://" in url else url
    return [segment.lower() for segment in path.split("/") if segment]


def match_title_keywords(title: str | None) -> str | None:
    """First category whose keyword list hits the title."""
    if not title:
        return None
    lowered = title.lower()
    for slug, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return slug
    return None


class CategoryResolver:
    """Resolve a target category with an ordered list of strategies."""

    def __init__(
        self,
        strategies: tuple[str, ...] | list[str] = CATEGORY_STRATEGIES,
        default_slug: str = "hauptgerichte",
    ):
        unknown = [name for name in strategies if name not in CATEGORY_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown category strategies: {', '.join(unknown)}")
        self.strategies = tuple(strategies)
        self.default_slug = default_slug

    def resolve(
        self,
        title: str | None,
        category_terms: list[str] | None = None,
        source_url: str | None = None,
    ) -> CategoryResolution | None:
        """Return the first strategy's answer, or None if none applies."""
        for strategy in self.strategies:
            slug = None
            if strategy == "taxonomy":
                slug = self._from_terms(category_terms or [])
            elif strategy == "url":
                slug = self._from_terms(url_path_segments(source_url))
            elif strategy == "keyword":
                slug = match_title_keywords(title)
            elif strategy == "default":
                slug = self.default_slug

            if slug:
                return CategoryResolution(slug=slug, strategy=strategy)

        return None

    @staticmethod
    def _from_terms(terms: list[str]) -> str | None:
        for term in terms:
            slug = lookup_legacy_slug(term)
            if slug:
                return slug
        return None


def assign_category(db: Session, recipe_id: int, category_id: int) -> RecipeCategory:
    """Make ``category_id`` the only category of a recipe.

    Existing associations are deleted before the new row is inserted, so
    repeating the call leaves exactly one row. The caller commits.
    """
    db.query(RecipeCategory).filter(RecipeCategory.recipe_id == recipe_id).delete(
        synchronize_session=False
    )
    link = RecipeCategory(recipe_id=recipe_id, category_id=category_id)
    db.add(link)
    db.flush()
    logger.debug(f"Assigned category {category_id} to recipe {recipe_id}")
    return link
