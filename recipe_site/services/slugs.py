"""Slug and token helpers for German titles."""

import re

from slugify import slugify

GERMAN_REPLACEMENTS = [["ä", "ae"], ["ö", "oe"], ["ü", "ue"], ["Ä", "Ae"], ["Ö", "Oe"], ["Ü", "Ue"], ["ß", "ss"]]


def transliterate(text: str) -> str:
    """Spell out umlauts and ß the way the old site's URLs do."""
    for source, target in GERMAN_REPLACEMENTS:
        text = text.replace(source, target)
    return text


def make_slug(text: str) -> str:
    """URL slug for a title: "Käsekuchen vom Blech" -> "kaesekuchen-vom-blech"."""
    return slugify(text, replacements=GERMAN_REPLACEMENTS, max_length=255)


def title_tokens(title: str, min_length: int = 4) -> list[str]:
    """Lower-cased words of a title that are long enough to be meaningful."""
    words = re.split(r"[^a-z0-9]+", transliterate(title.lower()))
    return [word for word in words if len(word) >= min_length]
