"""Tests for accent selection, sidebar colors and the quality gate."""

import random

import pytest

from portal_brand.colors.contrast import contrast_ratio
from portal_brand.colors.convert import analyze
from portal_brand.colors.generator import (
    DEFAULT_ACCENT,
    DEFAULT_SIDEBAR_BACKGROUND,
    generate_color_scheme,
    generate_validated_color_scheme,
    select_accent_color,
    select_sidebar_colors,
)
from portal_brand.colors.quality_gate import (
    CHECKS,
    MAX_ITERATIONS,
    GateContext,
    check_accent_sidebar_distinct,
    enforce_distinct_accent,
    is_monochrome_brand,
    validate_and_fix,
)
from portal_brand.io.models import ColorCandidate, ExtractedColor, PortalColors


def extracted(color, saturation, high=True, count=100):
    return ExtractedColor(color=color, pixel_count=count, saturation=saturation, is_high_confidence=high)


class TestAccentSelection:
    def test_square_icon_wins(self):
        sel = select_accent_color([extracted("#e11d48", 0.77)], [extracted("#2563eb", 0.83)])
        assert sel.result == ColorCandidate("#e11d48", "squareIcon", "high")
        assert sel.favicon_saturation == pytest.approx(0.77)
        assert sel.logo_saturation == pytest.approx(0.83)

    def test_desaturated_icon_falls_through_to_logo(self):
        sel = select_accent_color([extracted("#7a7f86", 0.05, high=False)], [extracted("#2563eb", 0.83)])
        assert sel.result.source == "logo"
        assert sel.result.color == "#2563eb"

    def test_logo_with_weak_evidence_is_low_confidence(self):
        sel = select_accent_color([], [extracted("#6b8e9f", 0.2, high=False)])
        assert sel.result.source == "logo"
        assert sel.result.confidence == "low"

    def test_link_button_colors_are_low_confidence(self):
        sel = select_accent_color([], [], ["#ffffff", "#f4f4f5", "#e11d48"])
        assert sel.result == ColorCandidate("#e11d48", "linkButton", "low")

    def test_nothing_available(self):
        sel = select_accent_color([], [], ["#ffffff"])
        assert sel.result.color is None
        assert sel.result.source == "none"

    def test_brand_hue_comes_from_more_saturated_mark(self):
        sel = select_accent_color([extracted("#6b8e9f", 0.2)], [extracted("#ff0000", 1.0)])
        assert sel.brand_hue == pytest.approx(0.0)


class TestSidebar:
    def test_dark_nav_is_reused(self):
        sidebar = select_sidebar_colors("#0f172a", "#e11d48")
        assert sidebar.source == "navHeader"
        assert sidebar.sidebar_background == "#0f172a"
        assert sidebar.sidebar_text == "#ffffff"

    def test_light_neutral_nav_defers_to_accent(self):
        sidebar = select_sidebar_colors("#f8f8f8", "#e11d48")
        assert sidebar.source == "accent"
        assert sidebar.sidebar_background == "#e11d48"

    def test_light_colored_nav_is_kept_with_dark_text(self):
        sidebar = select_sidebar_colors("#fde68a", None)
        assert sidebar.source == "navHeader"
        assert sidebar.sidebar_text == "#1a1a1a"

    def test_default(self):
        sidebar = select_sidebar_colors(None, None)
        assert sidebar.source == "default"
        assert sidebar.sidebar_background == DEFAULT_SIDEBAR_BACKGROUND

    def test_naive_scheme_defaults_accent(self):
        assert generate_color_scheme(None, None).accent == DEFAULT_ACCENT


def test_link_button_accent_without_nav_derives_sidebar_from_accent():
    selection = select_accent_color([], [], ["#e11d48"])
    scheme = generate_validated_color_scheme(None, selection, ["#e11d48"])
    assert scheme.accent.source == "linkButton"
    assert scheme.accent.confidence == "low"
    assert scheme.sidebar_source == "accent"
    final = scheme.colors
    assert contrast_ratio(final.sidebar_text, final.sidebar_background) >= 4.5


class TestQualityGate:
    def test_reports_every_named_check(self):
        colors = PortalColors("#1e3a8a", "#ffffff", "#3b82f6")
        ctx = GateContext(accent=ColorCandidate("#3b82f6", "squareIcon", "high"), favicon_saturation=0.9)
        result = validate_and_fix(colors, ctx)
        assert set(result.checks) == set(CHECKS)

    def test_keeps_original_colors_for_audit(self):
        colors = PortalColors("#ffffff", "#ffffff", "#3b82f6")
        ctx = GateContext(accent=ColorCandidate("#3b82f6", "squareIcon", "high"), favicon_saturation=0.9)
        result = validate_and_fix(colors, ctx)
        assert result.original_colors == PortalColors("#ffffff", "#ffffff", "#3b82f6")
        assert result.adjustments
        assert result.adjustments[0].startswith("Iteration 1: fixing")
        final = result.final_colors
        assert contrast_ratio(final.sidebar_text, final.sidebar_background) >= 4.5

    def test_monochrome_brand_keeps_neutral_palette(self):
        ctx = GateContext(
            accent=ColorCandidate(None, "none", "low"),
            favicon_saturation=0.0,
            logo_saturation=0.02,
            all_extracted_colors=["#111111", "#eeeeee"],
        )
        assert is_monochrome_brand(ctx)
        result = validate_and_fix(PortalColors("#1e293b", "#ffffff", "#3b82f6"), ctx)
        assert result.iterations == 0
        assert result.adjustments[0].startswith("Monochrome")
        assert result.final_colors.accent in ("#a3a3a3", "#525252")

    def test_always_terminates_with_readable_sidebar(self):
        rng = random.Random(20240501)
        sources = ["squareIcon", "logo", "linkButton", "none"]

        def rand_hex():
            return "#%02x%02x%02x" % (rng.randrange(256), rng.randrange(256), rng.randrange(256))

        for _ in range(200):
            accent = rand_hex()
            source = rng.choice(sources)
            ctx = GateContext(
                accent=ColorCandidate(
                    accent if source != "none" else None, source, rng.choice(["high", "low"])
                ),
                favicon_saturation=rng.random(),
                logo_saturation=rng.random(),
                brand_hue=rng.random() * 360,
                link_button_colors=[rand_hex()],
                all_extracted_colors=[rand_hex() for _ in range(3)],
            )
            result = validate_and_fix(PortalColors(rand_hex(), rand_hex(), accent), ctx)
            assert result.iterations <= MAX_ITERATIONS
            final = result.final_colors
            assert contrast_ratio(final.sidebar_text, final.sidebar_background) >= 4.5

    def test_accent_is_distinct_from_sidebar_on_exit(self):
        rng = random.Random(20240501)
        sources = ["squareIcon", "logo", "linkButton", "none"]

        def rand_hex():
            return "#%02x%02x%02x" % (rng.randrange(256), rng.randrange(256), rng.randrange(256))

        for _ in range(200):
            accent = rand_hex()
            source = rng.choice(sources)
            ctx = GateContext(
                accent=ColorCandidate(
                    accent if source != "none" else None, source, rng.choice(["high", "low"])
                ),
                favicon_saturation=rng.random(),
                logo_saturation=rng.random(),
                brand_hue=rng.random() * 360,
                link_button_colors=[rand_hex()],
                all_extracted_colors=[rand_hex() for _ in range(3)],
            )
            result = validate_and_fix(PortalColors(rand_hex(), rand_hex(), accent), ctx)
            final = result.final_colors
            assert final.accent != final.sidebar_background
            assert result.checks["accent_sidebar_distinct"].passed

    def test_identical_accent_is_moved_off_the_sidebar(self):
        ctx = GateContext(
            accent=ColorCandidate("#336699", "linkButton", "low"), link_button_colors=["#336699"]
        )
        result = validate_and_fix(PortalColors("#336699", "#ffffff", "#336699"), ctx)
        final = result.final_colors
        assert final.accent != final.sidebar_background
        assert result.checks["accent_sidebar_distinct"].passed
        assert contrast_ratio(final.sidebar_text, final.sidebar_background) >= 4.5

    def test_monochrome_gray_accent_is_separated_from_mid_gray_sidebar(self):
        ctx = GateContext(
            accent=ColorCandidate(None, "none", "low"),
            favicon_saturation=0.0,
            logo_saturation=0.0,
            all_extracted_colors=["#474747"],
        )
        result = validate_and_fix(PortalColors("#1e293b", "#ffffff", "#3b82f6"), ctx)
        assert result.monochrome
        final = result.final_colors
        assert final.sidebar_background == "#474747"
        assert final.accent != final.sidebar_background
        assert result.checks["accent_sidebar_distinct"].passed
        assert analyze(final.accent).lightness > analyze(final.sidebar_background).lightness


class TestDistinctAccent:
    def test_already_distinct_is_untouched(self):
        colors = PortalColors("#0f172a", "#ffffff", "#fbbf24")
        assert enforce_distinct_accent(colors) is False
        assert colors.accent == "#fbbf24"

    @pytest.mark.parametrize("sidebar", ["#1e293b", "#808080", "#e2e8f0", "#000000", "#ffffff"])
    def test_equal_colors_end_distinct(self, sidebar):
        colors = PortalColors(sidebar, "#ffffff", sidebar)
        assert enforce_distinct_accent(colors) is True
        assert colors.accent != sidebar
        assert check_accent_sidebar_distinct(colors).passed

    def test_dark_sidebar_gets_lighter_accent(self):
        colors = PortalColors("#1e293b", "#ffffff", "#1e293b")
        enforce_distinct_accent(colors)
        assert analyze(colors.accent).lightness > analyze("#1e293b").lightness


def test_validated_schemes_never_reuse_the_sidebar_as_accent():
    rng = random.Random(7)

    def rand_hex():
        return "#%02x%02x%02x" % (rng.randrange(256), rng.randrange(256), rng.randrange(256))

    def rand_marks():
        return [
            extracted(rand_hex(), rng.random(), high=rng.random() > 0.5)
            for _ in range(rng.randrange(3))
        ]

    for _ in range(300):
        links = [rand_hex() for _ in range(rng.randrange(3))]
        selection = select_accent_color(rand_marks(), rand_marks(), links)
        nav = rand_hex() if rng.random() > 0.2 else None
        scheme = generate_validated_color_scheme(nav, selection, links, [rand_hex() for _ in range(4)])
        final = scheme.colors
        assert final.accent != final.sidebar_background
        assert scheme.quality_gate.checks["accent_sidebar_distinct"].passed
        assert contrast_ratio(final.sidebar_text, final.sidebar_background) >= 4.5


def test_monochrome_scheme_reports_neutral_sidebar_source():
    selection = select_accent_color([], [], [])
    scheme = generate_validated_color_scheme("#0f172a", selection)
    assert scheme.quality_gate.monochrome
    assert scheme.sidebar_source == "monochrome-neutral"
    assert analyze(scheme.colors.sidebar_background).saturation == 0


def test_colored_nav_keeps_nav_header_source():
    selection = select_accent_color([extracted("#e11d48", 0.77)], [])
    scheme = generate_validated_color_scheme("#0f172a", selection)
    assert not scheme.quality_gate.monochrome
    assert scheme.sidebar_source == "navHeader"
