"""Accent and sidebar color selection for the portal theme."""

from __future__ import annotations

import logging
from typing import List, Sequence

from ..io.models import (
    AccentSelection,
    ColorCandidate,
    ColorScheme,
    ExtractedColor,
    PortalColors,
    SidebarColors,
)
from .convert import analyze, normalize_hex, parse_color, perceived_brightness
from .extractor import is_neutral
from .quality_gate import GateContext, validate_and_fix

logger = logging.getLogger(__name__)

DEFAULT_SIDEBAR_BACKGROUND = "#1e293b"
DEFAULT_SIDEBAR_TEXT = "#ffffff"
DEFAULT_ACCENT = "#3b82f6"

MIN_ACCENT_SATURATION = 0.12
LIGHT_SURFACE_BRIGHTNESS = 186


def _brightness(color: str) -> float:
    rgb = parse_color(color)
    return perceived_brightness(rgb) if rgb else 255.0


def _mark_candidate(colors: Sequence[ExtractedColor], source: str) -> ColorCandidate | None:
    if not colors:
        return None
    top = colors[0]
    if top.saturation < MIN_ACCENT_SATURATION:
        logger.debug("%s color %s too desaturated (%.2f)", source, top.color, top.saturation)
        return None
    return ColorCandidate(
        color=top.color,
        source=source,
        confidence="high" if top.is_high_confidence else "low",
    )


def select_accent_color(
    icon_colors: Sequence[ExtractedColor],
    logo_colors: Sequence[ExtractedColor],
    link_button_colors: Sequence[str] = (),
) -> AccentSelection:
    """Walk the priority chain square icon -> logo -> link/button -> none.

    Both mark saturations are always recorded because the quality gate needs
    them even when the icon wins.
    """

    favicon_sat = icon_colors[0].saturation if icon_colors else None
    logo_sat = logo_colors[0].saturation if logo_colors else None

    brand_hue = None
    strongest = max(
        (c[0] for c in (icon_colors, logo_colors) if c),
        key=lambda c: c.saturation,
        default=None,
    )
    if strongest is not None:
        brand_hue = analyze(strongest.color).hue

    candidate = _mark_candidate(icon_colors, "squareIcon") or _mark_candidate(logo_colors, "logo")

    if candidate is None:
        for raw in link_button_colors:
            color = normalize_hex(raw)
            if color and not is_neutral(color):
                candidate = ColorCandidate(color=color, source="linkButton", confidence="low")
                break

    if candidate is None:
        candidate = ColorCandidate(color=None, source="none", confidence="low")

    saturation = analyze(candidate.color).saturation if candidate.color else 0.0
    logger.info("Accent %s from %s (%s confidence)", candidate.color, candidate.source, candidate.confidence)
    return AccentSelection(
        result=candidate,
        saturation=saturation,
        favicon_saturation=favicon_sat,
        logo_saturation=logo_sat,
        brand_hue=brand_hue,
    )


def select_sidebar_colors(nav_header_background: str | None, accent_color: str | None) -> SidebarColors:
    """Dark or colored navs are reused; light neutral navs defer to the accent."""

    nav = normalize_hex(nav_header_background)
    accent = normalize_hex(accent_color)

    if nav and (_brightness(nav) <= LIGHT_SURFACE_BRIGHTNESS or analyze(nav).saturation >= MIN_ACCENT_SATURATION):
        background, source = nav, "navHeader"
    elif accent:
        background, source = accent, "accent"
    else:
        background, source = DEFAULT_SIDEBAR_BACKGROUND, "default"

    text = "#1a1a1a" if _brightness(background) > LIGHT_SURFACE_BRIGHTNESS else DEFAULT_SIDEBAR_TEXT
    return SidebarColors(sidebar_background=background, sidebar_text=text, source=source)


def generate_color_scheme(nav_header_background: str | None, accent_color: str | None) -> PortalColors:
    sidebar = select_sidebar_colors(nav_header_background, accent_color)
    return PortalColors(
        sidebar_background=sidebar.sidebar_background,
        sidebar_text=sidebar.sidebar_text,
        accent=normalize_hex(accent_color) or DEFAULT_ACCENT,
    )


def generate_validated_color_scheme(
    nav_header_background: str | None,
    selection: AccentSelection,
    link_button_colors: Sequence[str] = (),
    all_extracted_colors: Sequence[str] = (),
) -> ColorScheme:
    accent = selection.result
    sidebar = select_sidebar_colors(nav_header_background, accent.color)
    naive = PortalColors(
        sidebar_background=sidebar.sidebar_background,
        sidebar_text=sidebar.sidebar_text,
        accent=accent.color or DEFAULT_ACCENT,
    )
    extracted: List[str] = [c for c in (normalize_hex(x) for x in all_extracted_colors) if c]
    links: List[str] = [c for c in (normalize_hex(x) for x in link_button_colors) if c]
    ctx = GateContext(
        accent=accent,
        accent_saturation=selection.saturation,
        nav_header_background=normalize_hex(nav_header_background),
        favicon_saturation=selection.favicon_saturation,
        logo_saturation=selection.logo_saturation,
        brand_hue=selection.brand_hue,
        link_button_colors=links,
        all_extracted_colors=extracted,
    )
    gate = validate_and_fix(naive, ctx)
    if gate.adjustments:
        logger.info("Quality gate adjusted colors: %s", "; ".join(gate.adjustments))
    return ColorScheme(
        colors=gate.final_colors,
        accent=accent,
        sidebar_source="monochrome-neutral" if gate.monochrome else sidebar.source,
        quality_gate=gate,
    )
