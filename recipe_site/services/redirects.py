"""Mapping of old WordPress URLs onto the new site's routes."""

from urllib.parse import urlparse

from recipe_site.services.category_resolver import lookup_legacy_slug

LEGACY_PREFIX = "meine-kueche"


def migrate_wordpress_url(wp_url: str) -> str:
    """New path for a WordPress URL.

    ``/meine-kueche/kuchen-suesses/mini-donuts/`` -> ``/rezepte/mini-donuts``
    ``/meine-kueche/kuchen-suesses/``             -> ``/kategorien/desserts``
    """
    path = urlparse(wp_url).path if "://" in wp_url else wp_url
    segments = [segment for segment in path.split("/") if segment]
    if segments and segments[0] == LEGACY_PREFIX:
        segments = segments[1:]

    if not segments:
        return "/rezepte"

    category_slug = lookup_legacy_slug(segments[0])
    if category_slug and len(segments) == 1:
        return f"/kategorien/{category_slug}"

    return f"/rezepte/{segments[-1]}"


def generate_redirects(wp_urls: list[str]) -> list[dict]:
    """Permanent redirect rules for a list of known WordPress URLs."""
    return [
        {"source": url, "destination": migrate_wordpress_url(url), "permanent": True}
        for url in wp_urls
    ]
