"""Regex-based extraction of posts and attachments from WXR export text.

The export is scanned record by record (``<item>`` blocks) instead of being
parsed as a whole document, so a single malformed record only costs that
record. Field values are unwrapped from CDATA but otherwise passed through
as-is; cleaning happens in the content parser.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

CONTENT_POST_TYPES = ("post", "page")
ATTACHMENT_POST_TYPE = "attachment"

_ITEM_RE = re.compile(r"<item\b[^>]*>(.*?)</item>", re.S)
_CATEGORY_RE = re.compile(r"<category\b([^>]*)>(.*?)</category>", re.S)
_ATTR_RE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')
_CDATA_RE = re.compile(r"^\s*<!\[CDATA\[(.*?)(?:\]\]>)?\s*$", re.S)


@dataclass
class WordPressPost:
    """A post or page record from the export."""

    post_id: int
    title: str
    slug: str
    status: str
    post_type: str
    content: str
    category_terms: list[str] = field(default_factory=list)
    parent_id: int | None = None
    link: str | None = None
    post_date: datetime | None = None
    modified_date: datetime | None = None

    @property
    def is_published(self) -> bool:
        return self.status == "publish"


@dataclass
class WordPressAttachment:
    """A media attachment record from the export."""

    attachment_id: int
    url: str
    parent_post_id: int | None = None
    title: str = ""


@dataclass
class ExtractionResult:
    """Everything pulled out of one export, in source order."""

    posts: list[WordPressPost] = field(default_factory=list)
    attachments: list[WordPressAttachment] = field(default_factory=list)
    skipped: int = 0


def _unwrap(value: str) -> str:
    match = _CDATA_RE.match(value)
    if match:
        return match.group(1)
    return value.strip()


def _field(record: str, tag: str) -> str | None:
    """Return the raw text of ``<tag>`` inside a record, or None if absent."""
    tag_re = re.escape(tag)
    match = re.search(rf"<{tag_re}>(.*?)</{tag_re}>", record, re.S)
    if not match:
        return None
    return _unwrap(match.group(1))


def _int_field(record: str, tag: str) -> int | None:
    value = _field(record, tag)
    if value is None:
        return None
    digits = re.search(r"\d+", value)
    return int(digits.group(0)) if digits else None


def _date_field(record: str, tag: str) -> datetime | None:
    value = _field(record, tag)
    if not value or value.startswith("0000"):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None


def _category_terms(record: str) -> list[str]:
    """Category slugs of a record; the display name is used when nicename is absent."""
    terms = []
    for attrs, text in _CATEGORY_RE.findall(record):
        attributes = dict(_ATTR_RE.findall(attrs))
        if attributes.get("domain", "category") != "category":
            continue
        term = attributes.get("nicename") or _unwrap(text)
        if term and term not in terms:
            terms.append(term)
    return terms


def _parse_post(record: str, post_type: str) -> WordPressPost | None:
    post_id = _int_field(record, "wp:post_id")
    title = _field(record, "title")
    status = _field(record, "wp:status")
    content = _field(record, "content:encoded")

    if post_id is None or not title or not status or content is None:
        return None

    parent_id = _int_field(record, "wp:post_parent")
    return WordPressPost(
        post_id=post_id,
        title=title,
        slug=_field(record, "wp:post_name") or "",
        status=status,
        post_type=post_type,
        content=content,
        category_terms=_category_terms(record),
        parent_id=parent_id or None,
        link=_field(record, "link"),
        post_date=_date_field(record, "wp:post_date"),
        modified_date=_date_field(record, "wp:post_modified"),
    )


def _parse_attachment(record: str) -> WordPressAttachment | None:
    attachment_id = _int_field(record, "wp:post_id")
    url = _field(record, "wp:attachment_url")

    if attachment_id is None or not url:
        return None

    parent_id = _int_field(record, "wp:post_parent")
    return WordPressAttachment(
        attachment_id=attachment_id,
        url=url,
        parent_post_id=parent_id or None,
        title=_field(record, "title") or "",
    )


def extract_items(text: str) -> ExtractionResult:
    """Extract post and attachment records from raw export text.

    Records missing a required field are skipped and counted; other item
    types (menus, revisions, custom types) are ignored.
    """
    result = ExtractionResult()

    for index, match in enumerate(_ITEM_RE.finditer(text)):
        record = match.group(1)
        post_type = _field(record, "wp:post_type")

        if post_type is None:
            logger.warning(f"Skipping item #{index}: no post type")
            result.skipped += 1
            continue

        if post_type == ATTACHMENT_POST_TYPE:
            attachment = _parse_attachment(record)
            if attachment is None:
                logger.warning(f"Skipping attachment item #{index}: missing id or URL")
                result.skipped += 1
                continue
            result.attachments.append(attachment)
        elif post_type in CONTENT_POST_TYPES:
            post = _parse_post(record, post_type)
            if post is None:
                logger.warning(f"Skipping {post_type} item #{index}: missing required field")
                result.skipped += 1
                continue
            result.posts.append(post)

    logger.info(
        f"Extracted {len(result.posts)} posts and {len(result.attachments)} attachments "
        f"({result.skipped} records skipped)"
    )
    return result


def published_posts(result: ExtractionResult, *post_types: str) -> list[WordPressPost]:
    """Published posts, optionally restricted to the given post types."""
    types = post_types or CONTENT_POST_TYPES
    return [p for p in result.posts if p.is_published and p.post_type in types]
