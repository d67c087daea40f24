"""Selecting and validating photos for imported recipes."""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from recipe_site.services.content_parser import (
    DEFAULT_UPLOAD_MARKER,
    EXCLUDED_IMAGE_NAMES,
    IMAGE_EXTENSIONS,
    extract_image_urls,
    wp_image_ids,
)
from recipe_site.services.slugs import title_tokens, transliterate
from recipe_site.services.wxr_extractor import ExtractionResult

logger = logging.getLogger(__name__)

IMAGE_STRATEGIES = ("exact", "slug", "fuzzy", "random")
MAX_IMAGES_PER_RECIPE = 3  # 1 featured + 2 gallery


class ImageValidator(Protocol):
    """Decides whether an image URL can be used."""

    def exists(self, url: str) -> bool: ...


class HttpImageValidator:
    """Probe image URLs with HEAD requests.

    Probes run one at a time and pause after every ``batch_size`` requests
    so the old host is not flooded. A timeout or non-2xx answer means the
    image is unusable; there are no retries.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        batch_size: int = 10,
        batch_delay: float = 1.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.timeout = timeout
        self.batch_size = max(batch_size, 1)
        self.batch_delay = batch_delay
        self._client = client
        self._sleep = sleep
        self._cache: dict[str, bool] = {}
        self.probe_count = 0

    def exists(self, url: str) -> bool:
        if url in self._cache:
            return self._cache[url]

        if self.probe_count and self.probe_count % self.batch_size == 0:
            self._sleep(self.batch_delay)
        self.probe_count += 1

        try:
            response = self._get_client().head(url)
            ok = response.is_success
            if not ok:
                logger.info(f"Image probe failed for {url}: HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.info(f"Image probe failed for {url}: {e}")
            ok = False

        self._cache[url] = ok
        return ok

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class StaticImageValidator:
    """Validator with a fixed answer set, for offline runs and tests."""

    def __init__(self, valid_urls: set[str] | None = None, accept_all: bool = False) -> None:
        self.valid_urls = set(valid_urls or ())
        self.accept_all = accept_all
        self.checked: list[str] = []

    def exists(self, url: str) -> bool:
        self.checked.append(url)
        return self.accept_all or url in self.valid_urls


@dataclass
class PostImages:
    """Candidate photos of one exported post."""

    post_id: int
    slug: str
    title: str
    images: list[str] = field(default_factory=list)


@dataclass
class RecipeRef:
    """What the matcher knows about a recipe."""

    title: str
    slug: str
    wp_post_id: int | None = None


@dataclass
class ImageSelection:
    """Validated photos picked for a recipe."""

    featured: str | None = None
    gallery: list[str] = field(default_factory=list)
    strategy: str | None = None

    @property
    def urls(self) -> list[str]:
        return ([self.featured] if self.featured else []) + self.gallery

    @property
    def is_empty(self) -> bool:
        return self.featured is None


def is_recipe_photo(url: str) -> bool:
    filename = url.rsplit("/", 1)[-1].lower()
    return filename.endswith(IMAGE_EXTENSIONS) and not any(
        name in filename for name in EXCLUDED_IMAGE_NAMES
    )


def build_image_pool(
    extraction: ExtractionResult, upload_marker: str = DEFAULT_UPLOAD_MARKER
) -> list[PostImages]:
    """Collect candidate photos per post.

    Attached media comes first, then attachments referenced through
    ``wp-image-<id>`` classes, then upload URLs embedded in the content.
    """
    attachments_by_id = {a.attachment_id: a for a in extraction.attachments}
    attachments_by_parent: dict[int, list[str]] = {}
    for attachment in extraction.attachments:
        if attachment.parent_post_id and is_recipe_photo(attachment.url):
            attachments_by_parent.setdefault(attachment.parent_post_id, []).append(attachment.url)

    pool = []
    for post in extraction.posts:
        images = list(attachments_by_parent.get(post.post_id, []))

        for attachment_id in wp_image_ids(post.content):
            attachment = attachments_by_id.get(attachment_id)
            if attachment and is_recipe_photo(attachment.url) and attachment.url not in images:
                images.append(attachment.url)

        for url in extract_image_urls(post.content, upload_marker):
            if url not in images:
                images.append(url)

        if images:
            pool.append(PostImages(post.post_id, post.slug, post.title, images))

    logger.info(f"Built image pool for {len(pool)} posts")
    return pool


def title_overlap(recipe_title: str, candidate_title: str) -> float:
    """Share of the recipe's title words that occur in the candidate title."""
    words = title_tokens(recipe_title)
    if not words:
        return 0.0
    haystack = transliterate(candidate_title.lower())
    matched = [word for word in words if word in haystack]
    return len(matched) / len(words)


class ImageMatcher:
    """Pick up to three validated photos for a recipe.

    Strategies run in the configured order and the first one that yields a
    usable image wins: ``exact`` (source post id), ``slug``, ``fuzzy``
    (title word overlap above ``fuzzy_threshold``) and ``random`` (any photo
    from the pool).
    """

    def __init__(
        self,
        validator: ImageValidator,
        strategies: tuple[str, ...] | list[str] = ("exact", "slug", "fuzzy"),
        fuzzy_threshold: float = 0.4,
        max_images: int = MAX_IMAGES_PER_RECIPE,
        rng: random.Random | None = None,
    ) -> None:
        unknown = [name for name in strategies if name not in IMAGE_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown image strategies: {', '.join(unknown)}")
        self.validator = validator
        self.strategies = tuple(strategies)
        self.fuzzy_threshold = fuzzy_threshold
        self.max_images = min(max_images, MAX_IMAGES_PER_RECIPE)
        self.rng = rng or random.Random()

    def select(self, recipe: RecipeRef, pool: list[PostImages]) -> ImageSelection:
        for strategy in self.strategies:
            for candidate in self._candidates(strategy, recipe, pool):
                urls = self._validated(candidate)
                if urls:
                    logger.info(f"{recipe.title}: {len(urls)} images via {strategy} match")
                    return ImageSelection(featured=urls[0], gallery=urls[1:], strategy=strategy)

        logger.info(f"{recipe.title}: no usable images found")
        return ImageSelection()

    def _candidates(self, strategy: str, recipe: RecipeRef, pool: list[PostImages]) -> list[list[str]]:
        """Ranked candidate image lists for one strategy."""
        if strategy == "exact":
            if recipe.wp_post_id is None:
                return []
            return [p.images for p in pool if p.post_id == recipe.wp_post_id]

        if strategy == "slug":
            return [p.images for p in pool if p.slug and p.slug == recipe.slug]

        if strategy == "fuzzy":
            scored = []
            for post in pool:
                score = title_overlap(recipe.title, post.title)
                if score > self.fuzzy_threshold:
                    scored.append((score, post))
            scored.sort(key=lambda item: item[0], reverse=True)
            return [post.images for _, post in scored]

        if strategy == "random":
            everything = [url for post in pool for url in post.images]
            self.rng.shuffle(everything)
            return [everything]

        return []

    def _validated(self, urls: list[str]) -> list[str]:
        kept: list[str] = []
        for url in urls:
            if len(kept) >= self.max_images:
                break
            if url in kept:
                continue
            if self.validator.exists(url):
                kept.append(url)
            else:
                logger.debug(f"Rejected image {url}")
        return kept
