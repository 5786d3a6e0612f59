"""Brand color extraction from icons, logos and inline SVG markup."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Iterable, List, Sequence

from PIL import Image

from ..images.analysis import color_counts, rgb_pixels
from ..images.loader import LoadedAsset
from ..io.models import ExtractedColor
from .convert import parse_color, rgb_to_hex, rgb_to_hsl

logger = logging.getLogger(__name__)

_SVG_HEX_RE = re.compile(r"#[0-9a-fA-F]{3,6}(?![0-9a-fA-F])")
_SVG_RGB_RE = re.compile(r"rgb\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*\)")
_SVG_NAMED_RE = re.compile(r"(?:fill|stroke|color)\s*[=:]\s*[\"']?([a-zA-Z]+)[\"']?", re.IGNORECASE)
_SVG_IGNORED = {"none", "transparent", "inherit", "currentcolor", "initial"}
_HIGH_CONFIDENCE_SATURATION = 0.30


def is_neutral(color: str) -> bool:
    """White, black and grays; unparseable input counts as neutral."""
    rgb = parse_color(color)
    if rgb is None:
        return True
    _, sat, light = rgb_to_hsl(rgb)
    return light > 0.95 or light < 0.05 or sat < 0.10


def saturation_of(color: str | None) -> float | None:
    rgb = parse_color(color)
    return rgb_to_hsl(rgb)[1] if rgb else None


def _rank(counts: Iterable[tuple[str, int]]) -> List[ExtractedColor]:
    ranked: List[ExtractedColor] = []
    for color, count in counts:
        if is_neutral(color):
            continue
        sat = saturation_of(color) or 0.0
        ranked.append(
            ExtractedColor(
                color=color,
                pixel_count=int(count),
                saturation=sat,
                is_high_confidence=sat > _HIGH_CONFIDENCE_SATURATION,
            )
        )
    # Vibrant colors that also cover real area win.
    ranked.sort(key=lambda c: c.saturation * math.sqrt(c.pixel_count), reverse=True)
    return ranked


def extract_colors_with_details(img: Image.Image) -> List[ExtractedColor]:
    pixels = rgb_pixels(img, 100, "cover")
    colors, counts = color_counts(pixels, 16)
    pairs = [(rgb_to_hex(tuple(c)), n) for c, n in zip(colors.tolist(), counts.tolist())]
    merged: Counter[str] = Counter()
    for color, count in pairs:
        merged[color] += count
    ranked = _rank(merged.items())
    if ranked:
        top = ranked[0]
        logger.debug(
            "Found %d non-neutral colors; top %s (sat %.2f, %d px)",
            len(ranked), top.color, top.saturation, top.pixel_count,
        )
    return ranked


def extract_colors_from_svg(svg_text: str) -> List[ExtractedColor]:
    """Count fill/stroke colors declared in SVG markup."""
    counts: Counter[str] = Counter()
    for match in _SVG_NAMED_RE.finditer(svg_text):
        name = match.group(1).lower()
        if name in _SVG_IGNORED:
            continue
        rgb = parse_color(name)
        if rgb is not None:
            counts[rgb_to_hex(rgb)] += 1
    for token in _SVG_HEX_RE.findall(svg_text) + _SVG_RGB_RE.findall(svg_text):
        rgb = parse_color(token)
        if rgb is not None:
            counts[rgb_to_hex(rgb)] += 1
    return _rank(counts.items())


def extract_palette(img: Image.Image, limit: int = 6) -> List[str]:
    """Most frequent colors of a coarse 50x50 thumbnail, neutrals included."""
    pixels = rgb_pixels(img, 50, "cover")
    colors, counts = color_counts(pixels, 32)
    order = sorted(range(len(counts)), key=lambda i: int(counts[i]), reverse=True)
    palette: List[str] = []
    for i in order:
        color = rgb_to_hex(tuple(colors[i].tolist()))
        if color not in palette:
            palette.append(color)
        if len(palette) == limit:
            break
    return palette


def extract_accent(asset: LoadedAsset | None) -> List[ExtractedColor]:
    """Ranked brand colors of a loaded icon or logo; empty when nothing usable."""
    if asset is None:
        return []
    if asset.svg_text is not None:
        colors = extract_colors_from_svg(asset.svg_text)
        if colors or asset.image is None:
            return colors
    if asset.image is None:
        return []
    return extract_colors_with_details(asset.image)


def filter_brand_colors(colors: Sequence[str]) -> List[str]:
    kept: List[str] = []
    for color in colors:
        rgb = parse_color(color)
        if rgb is None:
            continue
        _, sat, light = rgb_to_hsl(rgb)
        if sat > 0.15 and 0.1 < light < 0.9:
            kept.append(color)
    return kept


def sort_by_vibrancy(colors: Sequence[str]) -> List[str]:
    return sorted(colors, key=lambda c: saturation_of(c) or 0.0, reverse=True)
