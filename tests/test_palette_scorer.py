"""Tests for palette diversity scoring."""

import pytest

from portal_brand.images.palette_scorer import DIVERSITY_THRESHOLD, score_palette_diversity


def test_single_navy_wash_is_not_gradient_worthy():
    result = score_palette_diversity(["#1a1a2e", "#1a1a2e"])
    assert result.use_gradient is False
    assert result.score < DIVERSITY_THRESHOLD
    assert "hue=0.00 lum=0.00" in result.reason
    assert "count=0.33" in result.reason
    assert result.reason.endswith("→ library")


def test_vivid_multi_hue_palette_uses_gradient():
    result = score_palette_diversity(["#ff0055", "#00ffaa", "#2233ff"])
    assert result.use_gradient is True
    assert result.score >= 0.9
    assert result.reason.endswith("→ gradient")


def test_preset_penalty():
    stops = ["#ff0055", "#00ffaa", "#2233ff"]
    plain = score_palette_diversity(stops)
    preset = score_palette_diversity(stops, used_preset=True)
    assert preset.score == pytest.approx(plain.score - 0.15, abs=0.011)
    assert "preset=-0.15" in preset.reason


def test_no_valid_stops():
    result = score_palette_diversity(["red", "#abc", "not-a-color"])
    assert result.score == 0.0
    assert result.use_gradient is False
    assert result.reason == "no valid color stops"


def test_grays_have_no_hue_spread():
    result = score_palette_diversity(["#808080", "#c0c0c0"])
    assert "hue=0.00" in result.reason


def test_score_never_negative():
    result = score_palette_diversity(["#777777"], used_preset=True)
    assert result.score == 0.0


def test_deterministic():
    stops = ["#0ea5e9", "#14b8a6", "#22c55e"]
    assert score_palette_diversity(stops) == score_palette_diversity(stops)


def test_long_palettes_stay_within_unit_range():
    result = score_palette_diversity(["#ff0000", "#ffff00", "#00ff00", "#00ffff", "#0000ff", "#ff00ff"])
    assert 0.0 <= result.score <= 1.0
    assert "count=1.00" in result.reason
    assert result.use_gradient is True
