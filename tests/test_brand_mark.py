"""Tests for brand mark scoring and selection."""

import pytest

from portal_brand.images.analysis import MarkStats
from portal_brand.images.brand_mark import (
    gather_candidates,
    monogram_likelihood,
    photo_penalty,
    score_aspect,
    score_candidate,
    score_complexity,
    score_resolution,
    select_best_brand_mark,
    select_brand_mark,
)
from portal_brand.io.models import BrandMarkCandidate

from conftest import glyph_image, multicolor_icon


def stats(width=192, height=192, unique=12, low_grad=0.8, fg=0.5, bbox=0.9):
    return MarkStats(width, height, unique, low_grad, fg, bbox)


class TestSubScores:
    @pytest.mark.parametrize("size,expected", [(192, 100), (128, 80), (64, 50), (32, 25), (16, 0), (8, 0)])
    def test_resolution(self, size, expected):
        assert score_resolution(size) == pytest.approx(expected)

    def test_aspect(self):
        assert score_aspect(100, 100) == 100
        assert score_aspect(100, 300) == pytest.approx(score_aspect(300, 100))
        assert score_aspect(300, 100) == pytest.approx(40 - 25 / 1.5)
        assert score_aspect(1000, 100) == 0

    def test_complexity(self):
        assert score_complexity(1) == 0
        assert score_complexity(3) == 30
        assert score_complexity(10) == pytest.approx(100)
        assert score_complexity(50) == 100

    def test_monogram(self):
        likely, conf = monogram_likelihood(0.10, 0.20)
        assert likely is True
        assert conf > 0.9
        assert monogram_likelihood(0.5, 0.9) == (False, 0.0)
        assert monogram_likelihood(0.0, 0.0) == (False, 0.0)

    def test_photo_penalty(self):
        assert photo_penalty(300, 0.05) == (1.0, 0.35)
        assert photo_penalty(10, 0.9)[1] == 1.0


class TestScoreCandidate:
    def test_clean_square_icon_scores_high(self):
        candidate = score_candidate("https://a/icon.png", "favicon", stats())
        assert not candidate.disqualified
        assert candidate.total_score >= 90
        assert candidate.scores.source == 70

    def test_too_small_is_disqualified(self):
        candidate = score_candidate("https://a/icon.png", "favicon", stats(12, 12))
        assert candidate.disqualified
        assert candidate.disqualify_reason == "Too small: 12×12 (min 16px)"

    def test_likely_monogram_is_penalised(self):
        plain = score_candidate("u", "logo", stats())
        glyph = score_candidate("u", "logo", stats(fg=0.1, bbox=0.2))
        assert glyph.is_likely_monogram
        assert glyph.total_score < plain.total_score


def cand(source, score, disqualified=False):
    return BrandMarkCandidate(
        url=f"https://a/{source}.png",
        source=source,
        total_score=score,
        disqualified=disqualified,
        disqualify_reason="Too small" if disqualified else None,
    )


class TestSelection:
    def test_no_candidates(self):
        result = select_brand_mark([])
        assert result.fallback_to_initials
        assert result.selected_source == "initials"
        assert result.log == ["No candidates available"]

    def test_favicon_kept_within_buffer(self):
        result = select_brand_mark([cand("favicon", 60), cand("logo", 70)])
        assert result.selected.source == "favicon"
        assert any(line.startswith("Favicon preference") for line in result.log)

    def test_clear_winner_beats_favicon(self):
        result = select_brand_mark([cand("favicon", 50), cand("manifest", 80)])
        assert result.selected.source == "manifest"
        assert "manifest (80) beats favicon (50) by 30pts" in result.log

    def test_weak_best_falls_back_to_initials(self):
        result = select_brand_mark([cand("favicon", 20), cand("logo", 30)])
        assert result.selected is None
        assert result.fallback_to_initials
        assert len(result.candidates) == 2

    def test_all_disqualified(self):
        result = select_brand_mark([cand("favicon", 0, True)])
        assert result.fallback_to_initials
        assert "All candidates disqualified → initials" in result.log

    def test_selection_is_idempotent(self):
        candidates = [cand("favicon", 55), cand("manifest", 90), cand("logo", 40)]
        assert select_brand_mark(candidates) == select_brand_mark(candidates)


def test_gather_candidates_dedupes_and_limits_manifest():
    pairs = gather_candidates("f.png", "f.png", ["m1.png", "m2.png", "m3.png"])
    assert pairs == [("f.png", "favicon"), ("m1.png", "manifest"), ("m2.png", "manifest")]


class TestEvaluation:
    def test_platform_default_favicon_is_not_fetched(self, make_loader):
        loader = make_loader()
        url = "https://static.wixstatic.com/media/abc/favicon.ico"
        result = select_best_brand_mark(url, None, [], loader)
        assert result.fallback_to_initials
        assert result.candidates[0].disqualify_reason.startswith("Platform default favicon")
        assert loader.fetcher.calls == {}

    def test_unreadable_and_missing_images(self, make_loader):
        loader = make_loader({"https://a/logo.png": b"not an image"})
        result = select_best_brand_mark("https://a/missing.ico", "https://a/logo.png", [], loader)
        reasons = {c.source: c.disqualify_reason for c in result.candidates}
        assert reasons["favicon"] == "Image could not be fetched"
        assert reasons["logo"] == "Unreadable or corrupt image data"

    def test_real_icon_is_selected(self, make_loader):
        loader = make_loader(
            {"https://a/icon.png": multicolor_icon(192), "https://a/logo.png": glyph_image(64)}
        )
        result = select_best_brand_mark("https://a/icon.png", "https://a/logo.png", [], loader)
        assert result.selected is not None
        assert result.selected.url == "https://a/icon.png"
        assert not result.fallback_to_initials
