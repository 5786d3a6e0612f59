"""WCAG contrast helpers."""

from __future__ import annotations

from .convert import brighten, darken, normalize_hex, parse_color, relative_luminance

WHITE = "#ffffff"
BLACK = "#000000"


def contrast_ratio(foreground: str, background: str) -> float:
    """Return the WCAG contrast ratio; unparseable colors count as 1:1."""

    fg = parse_color(foreground)
    bg = parse_color(background)
    if fg is None or bg is None:
        return 1.0
    lighter, darker = sorted((relative_luminance(fg), relative_luminance(bg)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def meets_contrast(foreground: str, background: str, min_ratio: float = 4.5) -> bool:
    return contrast_ratio(foreground, background) >= min_ratio


def accessible_text_color(background: str) -> str:
    """Pick white, then black, whichever reaches 4.5:1 against ``background``."""

    bg = parse_color(background)
    if bg is None:
        return BLACK
    if meets_contrast(WHITE, background):
        return WHITE
    if meets_contrast(BLACK, background):
        return BLACK
    return "#1a1a1a" if relative_luminance(bg) > 0.5 else "#f5f5f5"


def adjust_for_contrast(color: str, background: str, min_ratio: float = 3.0) -> str:
    """Step ``color`` darker (light backgrounds) or brighter until it clears ``min_ratio``.

    The direction never flips, so the ratio grows monotonically; after ten
    steps the color snaps to black or white.
    """

    current = normalize_hex(color)
    bg = parse_color(background)
    if current is None or bg is None:
        return color
    should_darken = relative_luminance(bg) > 0.5
    for _ in range(10):
        if meets_contrast(current, background, min_ratio):
            return current
        current = darken(current, 0.3) if should_darken else brighten(current, 0.3)
    return BLACK if should_darken else WHITE
