"""Parsing of recipe post content exported from the page builder.

Posts store their recipe as builder HTML: shortcodes such as ``[et_pb_text]``
wrapped around ordinary headings, lists and paragraphs. The parser removes
the shortcodes, finds the ingredient and instruction sections by their
headings and collects the photos embedded in the post.
"""

import html
import logging
import re
from dataclasses import asdict, dataclass, field

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_MARKER = "wp-content/uploads"

INGREDIENT_HEADINGS = ("zutaten", "ingredients")
INSTRUCTION_HEADINGS = ("zubereitung", "anleitung", "preparation", "instructions")

# Labels that show up as list entries on their own
STOPLIST_LABELS = {"tipp:", "tipp", "hinweis:", "hinweis", "info:", "info", "anmerkung:",
                   "anmerkung", "tip:", "tip", "note:", "note"}
MIN_ENTRY_LENGTH = 10

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
EXCLUDED_IMAGE_NAMES = ("logo", "icon", "schriftzug")

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
SECTION_BREAK_TAGS = ("h1", "h2", "h3")

_SHORTCODE_RE = re.compile(r"\[[^\]]*\]")
_HTML_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_WP_IMAGE_ID_RE = re.compile(r"wp-image-(\d+)")

_NUTRITION_MARKERS = ("nährwerte", "naehrwerte", "nutrition", "pro portion", "pro stück")
_NUMBER = r"(\d+(?:[.,]\d+)?)"
_CALORIES_RES = (
    re.compile(rf"{_NUMBER}\s*kcal", re.I),
    re.compile(rf"(?:kalorien|calories|energie)\s*:?\s*{_NUMBER}", re.I),
)
_PROTEIN_RE = re.compile(rf"(?:eiweiß|eiweiss|protein)\s*:?\s*{_NUMBER}\s*g", re.I)
_CARBS_RE = re.compile(rf"(?:kohlenhydrate|carbs|carbohydrates)\s*:?\s*{_NUMBER}\s*g", re.I)
_FAT_RE = re.compile(rf"(?:fett|fat)\s*:?\s*{_NUMBER}\s*g", re.I)

_SERVINGS_RES = (
    re.compile(r"(?:für|ergibt|reicht für|portionen?:?)\s*(\d+)(?:\s*(?:personen?|portionen?|stücke?))?", re.I),
    re.compile(r"(\d+)\s*(?:–|-)\s*\d+\s*(?:personen|portionen?)", re.I),
    re.compile(r"(\d+)\s*(?:personen|portionen?|stücke?)", re.I),
    re.compile(r"(\d+)er\s*form", re.I),
)
_COOKING_TIME_RE = re.compile(r"(\d+)\s*(minuten|min|stunden|std)\b", re.I)


@dataclass
class NutritionFacts:
    """Nutrition values found in a recipe's text, per serving or piece."""

    calories: int | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    serving_note: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class ParsedContent:
    """Structured recipe data from one post."""

    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    nutrition: NutritionFacts = field(default_factory=NutritionFacts)

    @property
    def is_valid(self) -> bool:
        """A recipe needs both ingredients and instructions."""
        return bool(self.ingredients) and bool(self.instructions)


def remove_shortcodes(text: str) -> str:
    """Drop bracket-delimited builder tags, keeping the HTML between them."""
    return _SHORTCODE_RE.sub("", text)


def strip_shortcodes(text: str | None) -> str:
    """Reduce builder content to plain text.

    Shortcodes go first, then HTML tags, then entities are decoded and
    whitespace collapsed. Decoding can surface new tags or brackets
    (``&lt;b&gt;``, ``&#91;x&#93;``), so the steps repeat until stable.
    """
    if not text:
        return ""

    cleaned = text
    while True:
        previous = cleaned
        cleaned = _SHORTCODE_RE.sub("", cleaned)
        cleaned = _HTML_TAG_RE.sub("", cleaned)
        cleaned = html.unescape(cleaned)
        if cleaned == previous:
            break

    cleaned = cleaned.replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def clean_entries(entries: list[str]) -> list[str]:
    """Clean list entries and drop fragments that are parsing noise."""
    result = []
    for entry in entries:
        cleaned = strip_shortcodes(entry)
        if len(cleaned) <= MIN_ENTRY_LENGTH:
            continue
        if cleaned.lower() in STOPLIST_LABELS:
            continue
        result.append(cleaned)
    return result


def extract_nutrition_facts(instructions: list[str]) -> tuple[list[str], NutritionFacts]:
    """Split nutrition lines off the instruction list.

    Returns the remaining cooking steps and the nutrition values found.
    """
    steps = []
    nutrition = NutritionFacts()

    for instruction in instructions:
        lowered = instruction.lower()
        is_nutrition = False

        if any(marker in lowered for marker in _NUTRITION_MARKERS):
            is_nutrition = True
            if "pro portion" in lowered:
                nutrition.serving_note = "pro Portion"
            elif "pro stück" in lowered:
                nutrition.serving_note = "pro Stück"

        for calories_re in _CALORIES_RES:
            match = calories_re.search(instruction)
            if match:
                nutrition.calories = int(float(match.group(1).replace(",", ".")))
                is_nutrition = True
                break

        for attribute, value_re in (
            ("protein", _PROTEIN_RE),
            ("carbs", _CARBS_RE),
            ("fat", _FAT_RE),
        ):
            match = value_re.search(instruction)
            if match:
                setattr(nutrition, attribute, float(match.group(1).replace(",", ".")))
                is_nutrition = True

        if not is_nutrition:
            steps.append(instruction)

    return steps, nutrition


def _section_for_heading(text: str) -> str | None:
    lowered = text.lower()
    if any(keyword in lowered for keyword in INGREDIENT_HEADINGS):
        return "ingredients"
    if any(keyword in lowered for keyword in INSTRUCTION_HEADINGS):
        return "instructions"
    return None


def _is_bold_paragraph(element: Tag) -> bool:
    if element.name != "p":
        return False
    text = element.get_text(strip=True)
    bold = element.find(["strong", "b"])
    return bool(text) and bold is not None and bold.get_text(strip=True) == text and len(text) < 40


def extract_sections(content: str) -> tuple[list[str], list[str]]:
    """Collect raw ingredient and instruction entries by heading.

    Ingredient headings collect the list items that follow; instruction
    headings collect paragraphs and list items. Only a section keyword
    switches sections. Other ``h1``-``h3`` headings end the current
    section, smaller headings are sub-headings ("Für den Teig") and keep
    it. A bold-only paragraph counts as a heading only when it names a
    section; otherwise it is ordinary text.
    """
    soup = BeautifulSoup(remove_shortcodes(content), "html.parser")
    ingredients: list[str] = []
    instructions: list[str] = []
    section = None

    for element in soup.find_all(True):
        if element.name in HEADING_TAGS or _is_bold_paragraph(element):
            heading = _section_for_heading(element.get_text(" ", strip=True))
            if heading:
                section = heading
                continue
            if element.name in SECTION_BREAK_TAGS:
                section = None
            if element.name in HEADING_TAGS:
                continue

        if section == "ingredients" and element.name == "li":
            ingredients.append(element.get_text(" ", strip=True))
        elif section == "instructions":
            if element.name == "li":
                instructions.append(element.get_text(" ", strip=True))
            elif element.name == "p" and element.find_parent("li") is None:
                instructions.append(element.get_text(" ", strip=True))

    return ingredients, instructions


def extract_image_urls(content: str, upload_marker: str = DEFAULT_UPLOAD_MARKER) -> list[str]:
    """Upload URLs of photos in the content, without brand assets."""
    pattern = re.compile(
        rf"https?://[^\s<>\"'\[\]]*{re.escape(upload_marker)}/[^\s<>\"'\[\]]*",
        re.I,
    )
    images = []
    for match in pattern.finditer(content or ""):
        url = match.group(0).rstrip(").,;")
        filename = url.rsplit("/", 1)[-1].lower()
        if not filename.endswith(IMAGE_EXTENSIONS):
            continue
        if any(name in filename for name in EXCLUDED_IMAGE_NAMES):
            continue
        if url not in images:
            images.append(url)
    return images


def wp_image_ids(content: str) -> list[int]:
    """Attachment ids referenced through ``wp-image-<id>`` classes."""
    ids = []
    for value in _WP_IMAGE_ID_RE.findall(content or ""):
        attachment_id = int(value)
        if attachment_id not in ids:
            ids.append(attachment_id)
    return ids


def extract_servings(text: str | None) -> int | None:
    """Servings mentioned in German recipe text ("für 4 Personen")."""
    if not text:
        return None
    for pattern in _SERVINGS_RES:
        match = pattern.search(text)
        if match:
            servings = int(match.group(1))
            if 0 < servings <= 50:
                return servings
    return None


def extract_cooking_time(text: str | None) -> int | None:
    """First duration in the text, in minutes."""
    if not text:
        return None
    match = _COOKING_TIME_RE.search(text)
    if not match:
        return None
    value = int(match.group(1))
    unit = match.group(2).lower()
    if unit in ("stunden", "std"):
        return value * 60
    return value


def parse_content(content: str, upload_marker: str = DEFAULT_UPLOAD_MARKER) -> ParsedContent:
    """Parse one post's content into ingredients, instructions and images."""
    raw_ingredients, raw_instructions = extract_sections(content or "")

    ingredients = clean_entries(raw_ingredients)
    steps, nutrition = extract_nutrition_facts(clean_entries(raw_instructions))

    return ParsedContent(
        ingredients=ingredients,
        instructions=steps,
        images=extract_image_urls(content, upload_marker),
        nutrition=nutrition,
    )
