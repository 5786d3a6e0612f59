"""Quality gate for generated portal colors.

Ten named checks are evaluated against the candidate scheme. Failing checks
trigger targeted fixes and the scheme is re-checked, for at most
``MAX_ITERATIONS`` rounds. The brand hue is kept (within 35 degrees) while
saturation and lightness may move. The gate never raises and always returns
usable colors; sidebar text contrast and an accent distinct from the sidebar
are guaranteed on exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Sequence

from ..io.models import ColorCandidate, PortalColors, QualityCheck, QualityGateResult
from .contrast import BLACK, WHITE, accessible_text_color, contrast_ratio
from .convert import analyze, brighten, darken, hsl_to_hex, hue_distance, saturate

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 3
MIN_TEXT_CONTRAST = 4.5
MIN_ACCENT_ON_WHITE = 3.0
BRAND_SATURATION = 0.25
HUE_FAMILY = 35.0


@dataclass(slots=True)
class GateContext:
    """Evidence about the brand that the checks compare the scheme against."""

    accent: ColorCandidate
    accent_saturation: float = 0.0
    nav_header_background: str | None = None
    favicon_saturation: float | None = None
    logo_saturation: float | None = None
    brand_hue: float | None = None
    link_button_colors: List[str] = field(default_factory=list)
    all_extracted_colors: List[str] = field(default_factory=list)

    @property
    def accent_from_brand(self) -> bool:
        return self.accent.source in ("squareIcon", "logo")


# Helpers ---------------------------------------------------------------------


def is_neutral_strict(color: str) -> bool:
    a = analyze(color)
    if a.lightness > 0.95 or a.lightness < 0.05:
        return True
    return a.saturation < 0.08


def delta_lightness(a: str, b: str) -> float:
    return abs(analyze(a).lightness - analyze(b).lightness) * 100


def boost_saturation(color: str, min_saturation: float) -> str:
    a = analyze(color)
    if a.saturation >= min_saturation:
        return color
    hue = a.hue if a.saturation > 0 else 220.0
    return hsl_to_hex(hue, min_saturation, a.lightness)


def shift_hue_toward(color: str, target_hue: float, max_shift: float) -> str:
    a = analyze(color)
    diff = ((target_hue - a.hue + 540) % 360) - 180
    step = max(-max_shift, min(max_shift, diff))
    return hsl_to_hex((a.hue + step) % 360, a.saturation, a.lightness)


def derive_sidebar_from_brand(color: str) -> str:
    """Dark, saturated surface in the brand's hue."""
    a = analyze(color)
    hue = a.hue if a.saturation > 0 else 220.0
    return hsl_to_hex(hue, max(a.saturation, 0.3), 0.2)


def desaturate_to_neutral(color: str) -> str:
    return hsl_to_hex(0, 0, analyze(color).lightness)


# Checks ----------------------------------------------------------------------


def check_sidebar_strength(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    a = analyze(colors.sidebar_background)
    if is_neutral_strict(colors.sidebar_background):
        if ctx.accent.color is not None or ctx.all_extracted_colors:
            return QualityCheck(False, f"Sidebar is neutral (sat={a.saturation:.2f}) but alternatives exist")
        return QualityCheck(True, "Sidebar is neutral but no alternatives available")
    if a.saturation < 0.12 and not ctx.accent_from_brand:
        return QualityCheck(False, f"Sidebar sat={a.saturation:.2f} < 0.12 and not brand-derived")
    return QualityCheck(True, f"Sidebar sat={a.saturation:.2f}, OK")


def check_accent_visible(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    sat = analyze(colors.accent).saturation
    if sat < 0.12:
        return QualityCheck(False, f"Accent sat={sat:.2f} < 0.12")
    return QualityCheck(True, f"Accent sat={sat:.2f}")


def check_brand_preserved(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    brand_sat = max(ctx.favicon_saturation or 0.0, ctx.logo_saturation or 0.0)
    if brand_sat < BRAND_SATURATION:
        return QualityCheck(True, f"No strong brand color (sat {brand_sat:.2f} < {BRAND_SATURATION})")
    if ctx.accent_from_brand:
        return QualityCheck(True, f"Brand color used as accent (source: {ctx.accent.source})")
    if ctx.brand_hue is not None:
        for label, color in (("Accent", colors.accent), ("Sidebar", colors.sidebar_background)):
            a = analyze(color)
            if a.saturation >= 0.1 and hue_distance(a.hue, ctx.brand_hue) <= HUE_FAMILY:
                return QualityCheck(True, f"{label} hue within brand family (±{HUE_FAMILY:.0f}°)")
    return QualityCheck(False, f"Brand sat={brand_sat:.2f} but not reflected in output")


def check_contrast(colors: PortalColors, ctx: GateContext | None = None) -> QualityCheck:
    ratio = contrast_ratio(colors.sidebar_text, colors.sidebar_background)
    if ratio < MIN_TEXT_CONTRAST:
        return QualityCheck(False, f"Contrast ratio={ratio:.2f} < {MIN_TEXT_CONTRAST}")
    return QualityCheck(True, f"Contrast ratio={ratio:.2f}")


def check_no_gray_on_gray(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    if analyze(colors.sidebar_background).saturation < 0.08 and analyze(colors.accent).saturation < 0.08:
        return QualityCheck(False, "Both sidebar and accent are gray/neutral")
    return QualityCheck(True, "Colors are not both gray")


def check_harmony(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    sidebar = analyze(colors.sidebar_background)
    accent = analyze(colors.accent)
    diff = hue_distance(sidebar.hue, accent.hue)
    if ctx.accent_from_brand:
        return QualityCheck(True, f"Hue diff={diff:.0f}deg (exempt: accent from brand)")
    if sidebar.saturation < 0.1 or accent.saturation < 0.1:
        return QualityCheck(True, f"Hue diff={diff:.0f}deg (exempt: low saturation)")
    if diff > HUE_FAMILY:
        return QualityCheck(
            False,
            f"Hue diff={diff:.0f}deg > {HUE_FAMILY:.0f} (sidebar {sidebar.hue:.0f}, accent {accent.hue:.0f})",
        )
    return QualityCheck(True, f"Hue diff={diff:.0f}deg, within soft limit")


def check_accent_sidebar_distinct(colors: PortalColors, ctx: GateContext | None = None) -> QualityCheck:
    sidebar = analyze(colors.sidebar_background)
    accent = analyze(colors.accent)
    lum_diff = delta_lightness(colors.sidebar_background, colors.accent)
    hue_diff = hue_distance(sidebar.hue, accent.hue)
    if lum_diff >= 35:
        return QualityCheck(True, f"Luminance diff={lum_diff:.0f} >= 35")
    if hue_diff > 30 and sidebar.saturation > 0.1 and accent.saturation > 0.1:
        return QualityCheck(True, f"Hue diff={hue_diff:.0f}deg, colors are distinct")
    return QualityCheck(
        False, f"Accent too similar to sidebar (lumDiff={lum_diff:.0f}, hueDiff={hue_diff:.0f}deg)"
    )


def check_anti_template(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    sidebar_sat = analyze(colors.sidebar_background).saturation
    accent_sat = analyze(colors.accent).saturation
    extracted = ctx.all_extracted_colors
    neutral_ratio = (
        sum(1 for c in extracted if is_neutral_strict(c)) / len(extracted) if extracted else 0.0
    )
    if sidebar_sat < 0.10 and accent_sat < 0.15 and neutral_ratio > 0.7:
        return QualityCheck(
            False,
            f"Template look: sidebarSat={sidebar_sat:.2f}, accentSat={accent_sat:.2f}, "
            f"neutralRatio={neutral_ratio:.2f}",
        )
    return QualityCheck(True, "Not a template look")


def check_brand_visibility(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    logo_sat = ctx.logo_saturation or 0.0
    if logo_sat >= BRAND_SATURATION and not ctx.accent.is_high_confidence:
        return QualityCheck(False, f"Logo sat={logo_sat:.2f} >= {BRAND_SATURATION} but accent confidence is low")
    return QualityCheck(True, "Brand visibility OK")


def check_accent_usability(colors: PortalColors, ctx: GateContext) -> QualityCheck:
    if not ctx.accent.is_high_confidence:
        return QualityCheck(True, "Low confidence accent, usability check skipped")
    ratio = contrast_ratio(colors.accent, WHITE)
    if ratio < MIN_ACCENT_ON_WHITE:
        return QualityCheck(False, f"Accent on white contrast={ratio:.2f} < {MIN_ACCENT_ON_WHITE}")
    return QualityCheck(True, f"Accent on white contrast={ratio:.2f}")


CHECKS: Dict[str, Callable[[PortalColors, GateContext], QualityCheck]] = {
    "sidebar_not_neutral": check_sidebar_strength,
    "accent_visible": check_accent_visible,
    "brand_preserved": check_brand_preserved,
    "contrast_passes": check_contrast,
    "no_gray_on_gray": check_no_gray_on_gray,
    "harmony_check": check_harmony,
    "accent_sidebar_distinct": check_accent_sidebar_distinct,
    "anti_template": check_anti_template,
    "brand_visibility": check_brand_visibility,
    "accent_usability": check_accent_usability,
}


def run_checks(colors: PortalColors, ctx: GateContext) -> Dict[str, QualityCheck]:
    return {name: check(colors, ctx) for name, check in CHECKS.items()}


# Fixes -----------------------------------------------------------------------


def fix_colors(colors: PortalColors, ctx: GateContext, failed: Sequence[str]) -> PortalColors:
    """Apply one round of fixes, in priority order, for the failed checks."""

    fixed = replace(colors)

    if "contrast_passes" in failed:
        fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)
        if contrast_ratio(fixed.sidebar_text, fixed.sidebar_background) < MIN_TEXT_CONTRAST:
            amount = 0.8 if analyze(fixed.sidebar_background).lightness > 0.5 else 0.4
            fixed.sidebar_background = darken(fixed.sidebar_background, amount)
            fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)

    if "sidebar_not_neutral" in failed:
        if ctx.accent.color:
            fixed.sidebar_background = derive_sidebar_from_brand(ctx.accent.color)
        elif ctx.all_extracted_colors:
            richest = sorted(ctx.all_extracted_colors, key=lambda c: analyze(c).saturation, reverse=True)[0]
            fixed.sidebar_background = derive_sidebar_from_brand(richest)
        else:
            fixed.sidebar_background = boost_saturation(fixed.sidebar_background, 0.15)
        fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)

    if "accent_sidebar_distinct" in failed:
        sidebar = analyze(fixed.sidebar_background)
        accent = analyze(fixed.accent)
        if ctx.accent_from_brand:
            # The brand accent stays; the surface moves away from it.
            if accent.lightness > 0.5:
                fixed.sidebar_background = darken(fixed.sidebar_background, 2)
            else:
                fixed.sidebar_background = derive_sidebar_from_brand(fixed.accent)
            fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)
        elif sidebar.lightness < 0.4:
            fixed.accent = saturate(brighten(fixed.accent, 0.8), 0.3)
        else:
            fixed.accent = saturate(darken(fixed.accent, 0.8), 0.5)

    if "brand_preserved" in failed and ctx.accent.color:
        fixed.sidebar_background = derive_sidebar_from_brand(ctx.accent.color)
        fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)

    if "brand_visibility" in failed and ctx.accent.color:
        fixed.accent = boost_saturation(ctx.accent.color, 0.3)

    if "accent_usability" in failed:
        adjusted = fixed.accent
        for _ in range(8):
            if contrast_ratio(adjusted, WHITE) >= MIN_ACCENT_ON_WHITE:
                break
            adjusted = darken(adjusted, 0.3)
        fixed.accent = adjusted

    if "harmony_check" in failed:
        fixed.sidebar_background = shift_hue_toward(fixed.sidebar_background, analyze(fixed.accent).hue, 20)
        fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)

    if "anti_template" in failed or "no_gray_on_gray" in failed:
        fixed.sidebar_background = boost_saturation(fixed.sidebar_background, 0.15)
        fixed.accent = boost_saturation(fixed.accent, 0.20)
        fixed.sidebar_text = accessible_text_color(fixed.sidebar_background)

    if "accent_visible" in failed:
        fixed.accent = boost_saturation(fixed.accent, 0.15)

    return fixed


def enforce_distinct_accent(colors: PortalColors, steps: int = 12) -> bool:
    """Move the accent's Lab lightness away from the sidebar until the two are distinct.

    Returns ``True`` when the accent was changed. Falls back to white or black,
    whichever sits farther from the sidebar, so the check always passes on exit.
    """

    if check_accent_sidebar_distinct(colors).passed:
        return False
    sidebar_lightness = analyze(colors.sidebar_background).lightness
    step = brighten if sidebar_lightness < 0.5 else darken
    accent = colors.accent
    for _ in range(steps):
        accent = step(accent, 0.5)
        candidate = replace(colors, accent=accent)
        if check_accent_sidebar_distinct(candidate).passed:
            colors.accent = accent
            return True
    colors.accent = WHITE if sidebar_lightness < 0.5 else BLACK
    return True


# Monochrome brands -----------------------------------------------------------


def is_monochrome_brand(ctx: GateContext) -> bool:
    """Both marks are colorless and the page offers no real color either."""

    if (ctx.favicon_saturation or 0.0) >= 0.08 or (ctx.logo_saturation or 0.0) >= 0.08:
        return False
    colored_links = [c for c in ctx.link_button_colors if not is_neutral_strict(c)]
    if colored_links and max(analyze(c).saturation for c in colored_links) >= 0.15:
        return False
    return True


def monochrome_palette(ctx: GateContext) -> PortalColors:
    sidebar: str | None = None
    dark_neutrals = sorted(
        (
            a
            for a in (analyze(c) for c in ctx.all_extracted_colors)
            if a.saturation < 0.15 and 0.03 < a.lightness < 0.3
        ),
        key=lambda a: a.lightness,
    )
    if dark_neutrals:
        sidebar = desaturate_to_neutral(dark_neutrals[0].hex)
    if sidebar is None and ctx.nav_header_background:
        if analyze(ctx.nav_header_background).lightness < 0.3:
            sidebar = desaturate_to_neutral(ctx.nav_header_background)
    if sidebar is None:
        sidebar = "#141414"
    if analyze(sidebar).saturation > 0.05:
        sidebar = desaturate_to_neutral(sidebar)
    accent = "#a3a3a3" if analyze(sidebar).lightness < 0.20 else "#525252"
    return PortalColors(sidebar_background=sidebar, sidebar_text=accessible_text_color(sidebar), accent=accent)


def _validate_monochrome(original: PortalColors, ctx: GateContext) -> QualityGateResult:
    current = monochrome_palette(ctx)
    adjustments = ["Monochrome brand detected, using neutral palette"]
    if not check_contrast(current).passed:
        current.sidebar_text = accessible_text_color(current.sidebar_background)
        adjustments.append("Fixed text contrast for monochrome palette")
    if not check_accent_sidebar_distinct(current).passed:
        current.accent = "#a3a3a3" if analyze(current.sidebar_background).lightness < 0.25 else "#525252"
        adjustments.append("Adjusted accent gray for better distinction from sidebar")
    if enforce_distinct_accent(current):
        adjustments.append("Final: moved accent lightness away from sidebar")

    checks = {
        "sidebar_not_neutral": QualityCheck(True, "Monochrome brand, neutral sidebar is intentional"),
        "accent_visible": QualityCheck(True, "Monochrome brand, neutral accent is intentional"),
        "brand_preserved": QualityCheck(True, "Monochrome brand preserved"),
        "contrast_passes": check_contrast(current),
        "no_gray_on_gray": QualityCheck(True, "Monochrome brand, gray-on-gray is intentional"),
        "harmony_check": QualityCheck(True, "Monochrome brand, harmony not applicable"),
        "accent_sidebar_distinct": check_accent_sidebar_distinct(current),
        "anti_template": QualityCheck(True, "Monochrome brand, neutral template is intentional"),
        "brand_visibility": QualityCheck(True, "Monochrome brand, neutral colors are the brand"),
        "accent_usability": check_accent_usability(current, ctx),
    }
    return QualityGateResult(
        passed=all(c.passed for c in checks.values()),
        checks=checks,
        adjustments=adjustments,
        original_colors=original,
        final_colors=current,
        iterations=0,
        monochrome=True,
        accent_promotion=False,
    )


# Entry point -----------------------------------------------------------------


def validate_and_fix(colors: PortalColors, ctx: GateContext) -> QualityGateResult:
    """Check *colors*, repair failures for up to ``MAX_ITERATIONS`` rounds and report."""

    original = replace(colors)
    if is_monochrome_brand(ctx):
        logger.debug("Monochrome brand detected; preserving neutral palette")
        return _validate_monochrome(original, ctx)

    current = replace(colors)
    adjustments: List[str] = []
    iteration = 0
    while iteration < MAX_ITERATIONS:
        checks = run_checks(current, ctx)
        failed = [name for name, check in checks.items() if not check.passed]
        if not failed:
            return QualityGateResult(
                passed=True,
                checks=checks,
                adjustments=adjustments,
                original_colors=original,
                final_colors=current,
                iterations=iteration,
                accent_promotion=ctx.accent.is_high_confidence,
            )
        adjustments.append(f"Iteration {iteration + 1}: fixing {', '.join(failed)}")
        logger.debug("Quality gate %s", adjustments[-1])
        current = fix_colors(current, ctx, failed)
        iteration += 1

    if enforce_distinct_accent(current):
        adjustments.append("Final: moved accent lightness away from sidebar")
    if not check_contrast(current).passed:
        current.sidebar_text = accessible_text_color(current.sidebar_background)
        adjustments.append("Final: enforced accessible sidebar text")

    checks = run_checks(current, ctx)
    return QualityGateResult(
        passed=all(c.passed for c in checks.values()),
        checks=checks,
        adjustments=adjustments,
        original_colors=original,
        final_colors=current,
        iterations=iteration,
        accent_promotion=ctx.accent.is_high_confidence,
    )
