"""WordPress export import: extract, parse, categorize, match images, write."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from recipe_site.config import Settings
from recipe_site.services.category_resolver import CATEGORY_STRATEGIES, CategoryResolver
from recipe_site.services.content_parser import (
    extract_cooking_time,
    extract_servings,
    parse_content,
    strip_shortcodes,
)
from recipe_site.services.image_matcher import (
    ImageMatcher,
    ImageValidator,
    PostImages,
    RecipeRef,
    build_image_pool,
)
from recipe_site.services.recipe_writer import RecipeDraft, RecipeWriter
from recipe_site.services.slugs import make_slug
from recipe_site.services.wxr_extractor import WordPressPost, extract_items, published_posts

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Which strategies the import uses and whether it writes."""

    image_strategies: tuple[str, ...] = ("exact", "slug", "fuzzy")
    image_fallback: str = "clear"
    fuzzy_threshold: float = 0.4
    category_strategies: tuple[str, ...] = CATEGORY_STRATEGIES
    default_category_slug: str = "hauptgerichte"
    match_images: bool = True
    dry_run: bool = False
    limit: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "PipelineConfig":
        values = {
            "image_fallback": settings.image_fallback,
            "fuzzy_threshold": settings.image_fuzzy_threshold,
            "default_category_slug": settings.default_category_slug,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    @property
    def effective_image_strategies(self) -> tuple[str, ...]:
        strategies = tuple(s for s in self.image_strategies if s != "random")
        if self.image_fallback == "random" or "random" in self.image_strategies:
            strategies += ("random",)
        return strategies


@dataclass
class ImportReport:
    extracted_posts: int = 0
    attachments: int = 0
    skipped_records: int = 0
    candidate_posts: int = 0
    invalid_posts: int = 0
    created: int = 0
    skipped_existing: int = 0
    failed: int = 0
    failed_slugs: list[str] = field(default_factory=list)
    image_strategies: Counter = field(default_factory=Counter)
    category_strategies: Counter = field(default_factory=Counter)
    drafts: list[RecipeDraft] = field(default_factory=list)


class ImportPipeline:
    """One configurable pass over a WordPress export."""

    def __init__(
        self,
        db: Session | None,
        settings: Settings,
        validator: ImageValidator,
        config: PipelineConfig | None = None,
    ):
        self.db = db
        self.settings = settings
        self.config = config or PipelineConfig.from_settings(settings)
        self.resolver = CategoryResolver(
            self.config.category_strategies, self.config.default_category_slug
        )
        self.matcher = ImageMatcher(
            validator,
            strategies=self.config.effective_image_strategies,
            fuzzy_threshold=self.config.fuzzy_threshold,
        )

    def run(self, export_text: str) -> ImportReport:
        """Import every valid recipe post from the export text."""
        report = ImportReport()

        extraction = extract_items(export_text)
        report.extracted_posts = len(extraction.posts)
        report.attachments = len(extraction.attachments)
        report.skipped_records = extraction.skipped

        pool = build_image_pool(extraction, self.settings.upload_path_marker)
        candidates = published_posts(extraction)
        if self.config.limit is not None:
            candidates = candidates[: self.config.limit]
        report.candidate_posts = len(candidates)

        seen_slugs: set[str] = set()
        for post in candidates:
            draft = self.build_draft(post, pool, report)
            if draft is None:
                continue
            if draft.slug in seen_slugs:
                logger.warning(f"Duplicate slug {draft.slug} in export, keeping the first post")
                continue
            seen_slugs.add(draft.slug)
            report.drafts.append(draft)

        logger.info(
            f"Parsed {len(report.drafts)} valid recipes, {report.invalid_posts} posts without "
            "ingredients or instructions"
        )

        if self.config.dry_run or self.db is None:
            logger.info("Dry run, nothing written")
            return report

        write_report = RecipeWriter(self.db).write(report.drafts)
        report.created = write_report.created
        report.skipped_existing = write_report.skipped_existing
        report.failed = write_report.failed
        report.failed_slugs = list(write_report.failed_slugs)
        return report

    def build_draft(
        self, post: WordPressPost, pool: list[PostImages], report: ImportReport
    ) -> RecipeDraft | None:
        """Turn one post into a draft, or None if it is not a usable recipe."""
        title = strip_shortcodes(post.title)
        parsed = parse_content(post.content, self.settings.upload_path_marker)
        if not parsed.is_valid:
            logger.warning(f"Skipping '{title}': missing ingredients or instructions")
            report.invalid_posts += 1
            return None

        slug = make_slug(post.slug or title)
        if not slug:
            logger.warning(f"Skipping post {post.post_id}: no usable slug")
            report.invalid_posts += 1
            return None

        category = self.resolver.resolve(title, post.category_terms, post.link)
        if category is not None:
            report.category_strategies[category.strategy] += 1

        featured_image = None
        images: list[str] = []
        if self.config.match_images:
            selection = self.matcher.select(
                RecipeRef(title=title, slug=slug, wp_post_id=post.post_id), pool
            )
            featured_image = selection.featured
            images = selection.gallery
            report.image_strategies[selection.strategy or "none"] += 1

        plain_text = strip_shortcodes(post.content)
        return RecipeDraft(
            title=title,
            slug=slug,
            ingredients=parsed.ingredients,
            instructions=parsed.instructions,
            category_slug=category.slug if category else None,
            nutrition=parsed.nutrition.as_dict() or None,
            servings=extract_servings(title) or extract_servings(plain_text) or 4,
            cook_time=extract_cooking_time(plain_text),
            featured_image=featured_image,
            images=images,
            wp_post_id=post.post_id,
            wp_url=post.link,
            published_at=post.post_date,
        )
