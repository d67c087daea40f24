"""Tests for image pool building, matching and validation."""

import random
from unittest.mock import MagicMock

import httpx
from conftest import build_wxr, wxr_attachment, wxr_post

from recipe_site.services.image_matcher import (
    HttpImageValidator,
    ImageMatcher,
    PostImages,
    RecipeRef,
    StaticImageValidator,
    build_image_pool,
    title_overlap,
)
from recipe_site.services.wxr_extractor import extract_items

UPLOADS = "https://danie.de/wp-content/uploads/2021/04"


def _urls(prefix: str, count: int) -> list[str]:
    return [f"{UPLOADS}/{prefix}-{i}.jpg" for i in range(count)]


def test_exact_match_preferred_over_fuzzy():
    """Test the source post's images win even when another title matches well."""
    pool = [
        PostImages(1, "schoko-zimt-schnecken-2", "Schoko-Zimt-Schnecken", _urls("fuzzy", 2)),
        PostImages(2, "schnecken", "Unsere Schnecken", _urls("exact", 2)),
    ]
    matcher = ImageMatcher(StaticImageValidator(accept_all=True))

    selection = matcher.select(
        RecipeRef(title="Schoko-Zimt-Schnecken", slug="schoko-zimt-schnecken", wp_post_id=2), pool
    )

    assert selection.strategy == "exact"
    assert selection.featured == f"{UPLOADS}/exact-0.jpg"


def test_at_most_three_images():
    """Test one featured and at most two gallery images are kept."""
    pool = [PostImages(5, "brot", "Brot", _urls("brot", 7))]
    matcher = ImageMatcher(StaticImageValidator(accept_all=True))

    selection = matcher.select(RecipeRef(title="Brot", slug="brot", wp_post_id=5), pool)

    assert len(selection.urls) == 3
    assert selection.featured == f"{UPLOADS}/brot-0.jpg"
    assert selection.gallery == [f"{UPLOADS}/brot-1.jpg", f"{UPLOADS}/brot-2.jpg"]


def test_rejected_images_fall_through_to_next_strategy():
    """Test failing probes skip the candidate and the next strategy is tried."""
    exact = _urls("exact", 2)
    slug = _urls("slug", 1)
    pool = [
        PostImages(7, "alt", "Alter Beitrag", exact),
        PostImages(8, "focaccia", "Focaccia", slug),
    ]
    validator = StaticImageValidator(valid_urls=set(slug))

    selection = ImageMatcher(validator).select(
        RecipeRef(title="Focaccia", slug="focaccia", wp_post_id=7), pool
    )

    assert selection.strategy == "slug"
    assert selection.featured == slug[0]
    assert validator.checked[:2] == exact


def test_no_usable_image_clears_selection():
    """Test the selection is empty when nothing validates."""
    pool = [PostImages(1, "brot", "Brot", _urls("brot", 2))]

    selection = ImageMatcher(StaticImageValidator()).select(
        RecipeRef(title="Brot", slug="brot", wp_post_id=1), pool
    )

    assert selection.is_empty
    assert selection.urls == []
    assert selection.strategy is None


def test_fuzzy_requires_score_above_threshold():
    """Test weak title overlap is not enough for a fuzzy match."""
    pool = [PostImages(3, "x", "Schnelle Zimtschnecken vom Blech", _urls("z", 1))]
    matcher = ImageMatcher(StaticImageValidator(accept_all=True), strategies=("fuzzy",))

    weak = matcher.select(RecipeRef(title="Apfelkuchen mit Zimtschnecken Streuseln Vanille", slug="a"), pool)
    strong = matcher.select(RecipeRef(title="Zimtschnecken Blech", slug="b"), pool)

    assert weak.is_empty
    assert strong.strategy == "fuzzy"


def test_random_fallback_uses_any_pool_image():
    """Test the random strategy picks from the whole pool."""
    pool = [PostImages(1, "a", "Alpha", _urls("a", 2)), PostImages(2, "b", "Beta", _urls("b", 2))]
    matcher = ImageMatcher(
        StaticImageValidator(accept_all=True),
        strategies=("exact", "random"),
        rng=random.Random(3),
    )

    selection = matcher.select(RecipeRef(title="Gamma", slug="gamma"), pool)

    assert selection.strategy == "random"
    assert len(selection.urls) == 3
    assert set(selection.urls) <= set(_urls("a", 2) + _urls("b", 2))


def test_title_overlap():
    """Test overlap counts words of four or more letters."""
    assert title_overlap("Käsekuchen vom Blech", "Saftiger Käsekuchen") == 0.5
    assert title_overlap("Ei", "Ei") == 0.0


def test_build_image_pool_orders_sources():
    """Test attachments come first, then wp-image references, then embedded URLs."""
    content = (
        '<img class="wp-image-31" src="x.jpg">'
        f'<img src="{UPLOADS}/eingebettet.jpg">'
        f'<img src="{UPLOADS}/logo.png">'
    )
    text = build_wxr(
        wxr_post(30, "Brot", content, slug="brot"),
        wxr_attachment(31, f"{UPLOADS}/referenziert.jpg", 0),
        wxr_attachment(32, f"{UPLOADS}/angehaengt.jpg", 30),
        wxr_attachment(33, f"{UPLOADS}/icon-facebook.png", 30),
    )

    pool = build_image_pool(extract_items(text))

    assert len(pool) == 1
    assert pool[0].images == [
        f"{UPLOADS}/angehaengt.jpg",
        f"{UPLOADS}/referenziert.jpg",
        f"{UPLOADS}/eingebettet.jpg",
    ]


def test_http_validator_probes_with_head_and_caches():
    """Test HEAD probes decide usability and results are cached."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        if request.url.path.endswith("ok.jpg"):
            return httpx.Response(200)
        return httpx.Response(404)

    validator = HttpImageValidator(client=httpx.Client(transport=httpx.MockTransport(handler)))

    assert validator.exists(f"{UPLOADS}/ok.jpg") is True
    assert validator.exists(f"{UPLOADS}/missing.jpg") is False
    assert validator.exists(f"{UPLOADS}/ok.jpg") is True
    assert seen == [("HEAD", f"{UPLOADS}/ok.jpg"), ("HEAD", f"{UPLOADS}/missing.jpg")]
    assert validator.probe_count == 2


def test_http_validator_timeout_is_unusable():
    """Test a timeout rejects the image without retrying."""
    client = MagicMock()
    client.head.side_effect = httpx.ConnectTimeout("timed out")
    validator = HttpImageValidator(client=client)

    assert validator.exists(f"{UPLOADS}/slow.jpg") is False
    assert client.head.call_count == 1


def test_http_validator_pauses_between_batches():
    """Test the validator sleeps after each full batch of probes."""
    client = MagicMock()
    client.head.return_value = MagicMock(is_success=True, status_code=200)
    sleep = MagicMock()
    validator = HttpImageValidator(batch_size=2, batch_delay=0.5, client=client, sleep=sleep)

    for url in _urls("batch", 5):
        validator.exists(url)

    assert client.head.call_count == 5
    assert sleep.call_count == 2
    sleep.assert_called_with(0.5)
