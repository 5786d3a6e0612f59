"""Tests for hero photo scoring, classification and the scraped-hero search."""

from portal_brand.images.analysis import HeroStats, HeroTypeSignals
from portal_brand.images.hero_scorer import (
    classify_signals,
    evaluate_og_image,
    evaluate_scraped_heroes,
    orientation_of,
    score_hero_stats,
    scraped_hero_candidates,
)
from portal_brand.io.models import ScrapedImage

from conftest import mosaic_image, solid_image


class TestScoreHeroStats:
    def test_rich_landscape_photo_passes(self):
        result = score_hero_stats(HeroStats(1600, 900, 40, 30.0, 0.9))
        assert result.passed
        assert result.total == 97
        assert result.reasons[0].startswith("PASS: total=97, 1600×900")

    def test_logo_on_solid_fails_with_reasons(self):
        result = score_hero_stats(HeroStats(300, 150, 4, 2.0, 0.1))
        assert not result.passed
        assert "short side 150px < 300px (likely logo)" in result.reasons
        assert "only 4 unique colors (min 8)" in result.reasons
        assert "edge density 2.0 < 8 (flat/logo-on-solid)" in result.reasons
        assert "spread 10% < 40% (concentrated content)" in result.reasons

    def test_portrait_fails(self):
        result = score_hero_stats(HeroStats(800, 1200, 40, 30.0, 0.9))
        assert not result.passed
        assert "portrait 800×1200 (h > w × 1.2)" in result.reasons
        assert result.scores.aspect_ratio == 0

    def test_low_total_reports_threshold(self):
        result = score_hero_stats(HeroStats(500, 300, 8, 8.0, 0.4))
        assert not result.passed
        assert result.total == 47
        assert result.reasons == ["FAIL: total=47 < 70 threshold"]


class TestClassifySignals:
    def test_wide_banner_exits_early_as_text(self):
        result = classify_signals(HeroTypeSignals(2000, 1000))
        assert result.type == "text_heavy"
        assert result.confidence == 0.85
        assert result.text_likelihood == 80
        assert result.signals["early_exit"] == 1

    def test_tall_image_exits_early_as_photo(self):
        result = classify_signals(HeroTypeSignals(500, 1000))
        assert result.type == "photo"
        assert result.text_likelihood == 10

    def test_all_text_cues(self):
        signals = HeroTypeSignals(
            1000, 800,
            high_contrast_ratio=0.5, bg_uniformity=0.5, hv_bias=0.5,
            unique_colors=10, sat_std=0.05, spread=0.3, border_ratio=0.1,
        )
        result = classify_signals(signals)
        assert result.type == "text_heavy"
        assert result.text_likelihood == 100
        assert result.confidence == 1.0

    def test_busy_photo(self):
        signals = HeroTypeSignals(1000, 800, unique_colors=200, sat_std=0.3, spread=0.9, border_ratio=1.0)
        result = classify_signals(signals)
        assert result.type == "photo"
        assert result.text_likelihood == 0
        assert set(result.signals) >= {"high_contrast_ratio", "bg_uniformity", "border_ratio"}


def test_orientation_of():
    assert orientation_of(1600, 900) == "landscape"
    assert orientation_of(900, 1600) == "portrait"
    assert orientation_of(100, 100) == "square"


def test_candidate_prefilter_and_order():
    images = [
        ScrapedImage("https://a/a.jpg", 1200, 800),
        ScrapedImage("https://a/b.jpg", 2000, 1000),
        ScrapedImage("https://a/logo.png", 1200, 800, type="logo"),
        ScrapedImage("data:image/png;base64,AAAA", 1200, 800),
        ScrapedImage("https://a/og.jpg", 1600, 900),
        ScrapedImage("https://a/small.jpg", 300, 150),
        ScrapedImage("https://a/tall.jpg", 800, 1200),
        ScrapedImage("https://a/unsized.jpg"),
        ScrapedImage("https://a/a.jpg", 1200, 800),
    ]
    kept = scraped_hero_candidates(images, og_image="https://a/og.jpg")
    assert [image.url for image in kept] == ["https://a/b.jpg", "https://a/a.jpg"]


class TestScrapedHeroSearch:
    def test_busy_image_is_accepted(self, make_loader):
        loader = make_loader({"https://a/hero.png": mosaic_image()})
        result = evaluate_scraped_heroes([ScrapedImage("https://a/hero.png", 1200, 800)], None, loader)
        assert result.passed
        assert result.image_url == "https://a/hero.png"
        assert result.prepared.orientation == "landscape"
        assert result.candidates_considered == 1

    def test_flat_image_fails_but_is_reported(self, make_loader):
        loader = make_loader({"https://a/flat.png": solid_image((200, 30, 30), (1200, 800))})
        result = evaluate_scraped_heroes([ScrapedImage("https://a/flat.png", 1200, 800)], None, loader)
        assert not result.passed
        assert result.image_url == "https://a/flat.png"
        assert result.candidates_tried == 1
        assert result.prepared is None

    def test_falls_through_to_next_candidate(self, make_loader):
        loader = make_loader(
            {
                "https://a/flat.png": solid_image((200, 30, 30), (1200, 800)),
                "https://a/hero.png": mosaic_image(),
            }
        )
        images = [ScrapedImage("https://a/hero.png", 1200, 800), ScrapedImage("https://a/flat.png", 2000, 1000)]
        result = evaluate_scraped_heroes(images, None, loader)
        assert result.passed
        assert result.image_url == "https://a/hero.png"
        assert result.candidates_tried == 2

    def test_no_candidates(self, make_loader):
        result = evaluate_scraped_heroes([], None, make_loader())
        assert not result.passed
        assert result.candidates_considered == 0


class TestOgImage:
    def test_missing(self, make_loader):
        result = evaluate_og_image(None, make_loader())
        assert result.og_image_url is None
        assert not result.passed

    def test_fetch_failure(self, make_loader):
        result = evaluate_og_image("https://a/og.jpg", make_loader())
        assert not result.passed
        assert result.score.reasons == ["error: fetch failed"]

    def test_good_og_image(self, make_loader):
        loader = make_loader({"https://a/og.png": mosaic_image()})
        result = evaluate_og_image("https://a/og.png", loader)
        assert result.passed
        assert result.prepared.edge_color.startswith("#")
        assert result.prepared.image_type in ("photo", "text_heavy")
