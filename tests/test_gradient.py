"""Tests for gradient specs and rendering."""

from portal_brand.hashing import stable_hash
from portal_brand.images.gradient import (
    PRESETS,
    GradientImageWriter,
    compute_gradient,
    gradient_colors_from_palettes,
    render_gradient,
)
from portal_brand.io.models import ExtractedColor, GradientSpec


class TestComputeGradient:
    def test_extracted_colors(self):
        spec = compute_gradient(["#ff0055", "#00ffaa"], "acme.com")
        assert spec.mode == "extracted"
        assert spec.stops == ["#ff0055", "#00ffaa"]
        assert 120 <= spec.angle < 210
        assert spec.preset_name is None

    def test_falls_back_to_preset_by_domain_hash(self):
        spec = compute_gradient(["#ffffff", "#000000"], "https://www.acme.com")
        name, stops = PRESETS[stable_hash("acme.com") % len(PRESETS)]
        assert spec.mode == "preset"
        assert spec.preset_name == name
        assert spec.stops == list(stops)
        assert f"preset '{name}'" in spec.reason

    def test_drops_near_duplicates_and_caps_stops(self):
        spec = compute_gradient(
            ["#ff0055", "#ff0056", "#00ffaa", "#2233ff", "#f59e0b", "#8b5cf6"], "acme.com"
        )
        assert spec.stops == ["#ff0055", "#00ffaa", "#2233ff", "#f59e0b"]

    def test_same_domain_same_angle(self):
        a = compute_gradient(["#ff0055", "#00ffaa"], "acme.com")
        b = compute_gradient(["#2233ff", "#00ffaa"], "www.acme.com")
        assert a.angle == b.angle


def test_gradient_colors_from_palettes_weights_by_rank():
    def c(color):
        return ExtractedColor(color=color, pixel_count=10, saturation=0.8, is_high_confidence=True)

    palettes = [
        [c("#ff0000"), c("#00ff00"), c("#0000ff")],
        [c("#00ff00"), c("#ff0000")],
    ]
    # red 3+2, green 2+3, blue 1; ties keep first-seen order
    assert gradient_colors_from_palettes(palettes) == ["#ff0000", "#00ff00", "#0000ff"]
    assert gradient_colors_from_palettes([]) == []


def test_render_gradient_runs_left_to_right_at_90_degrees():
    spec = GradientSpec(stops=["#ff0000", "#0000ff"], angle=90, mode="extracted", reason="")
    img = render_gradient(spec, size=16)
    assert img.size == (16, 16)
    assert img.mode == "RGB"
    assert img.getpixel((0, 8)) == (255, 0, 0)
    assert img.getpixel((15, 8)) == (0, 0, 255)


def test_writer_saves_png(tmp_path):
    spec = GradientSpec(stops=["#ff0055", "#00ffaa"], angle=135, mode="extracted", reason="")
    writer = GradientImageWriter(tmp_path, size=32)
    path = writer(spec, "https://www.acme.com")
    assert path.endswith("acme.com.gradient.png")
    assert (tmp_path / "acme.com.gradient.png").is_file()
