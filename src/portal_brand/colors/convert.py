"""Color parsing and color-space conversions used by the color modules."""

from __future__ import annotations

import colorsys
import math
import re
from dataclasses import dataclass
from typing import Tuple

from PIL import ImageColor

RGB = Tuple[int, int, int]

_STRICT_HEX_RE = re.compile(r"^#([0-9a-f]{6})$", re.IGNORECASE)

# D65 reference white and CIE constants.
_XN, _YN, _ZN = 0.950470, 1.0, 1.088830
_T0, _T1, _T2, _T3 = 4 / 29, 6 / 29, 3 * (6 / 29) ** 2, (6 / 29) ** 3
_LAB_STEP = 18.0


@dataclass(frozen=True, slots=True)
class ColorAnalysis:
    hex: str
    hue: float
    saturation: float
    lightness: float
    luminance: float


def parse_strict_hex(value: str | None) -> RGB | None:
    """Parse exactly ``#rrggbb``; anything else is rejected."""

    if not isinstance(value, str):
        return None
    match = _STRICT_HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def parse_color(value: str | None) -> RGB | None:
    """Parse any CSS color Pillow understands (hex, rgb(), hsl(), names)."""

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        rgb = ImageColor.getrgb(value.strip())
    except ValueError:
        return None
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def normalize_hex(value: str | None) -> str | None:
    rgb = parse_color(value)
    return rgb_to_hex(rgb) if rgb else None


def rgb_to_hsl(rgb: RGB) -> Tuple[float, float, float]:
    """Return hue in degrees and saturation/lightness in [0, 1]."""

    h, l, s = colorsys.rgb_to_hls(rgb[0] / 255, rgb[1] / 255, rgb[2] / 255)
    return h * 360.0, s, l


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness, saturation)
    return rgb_to_hex((r * 255, g * 255, b * 255))


def relative_luminance(rgb: RGB) -> float:
    """WCAG relative luminance."""

    def channel(c: int) -> float:
        v = c / 255
        return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def perceived_brightness(rgb: RGB) -> float:
    """YIQ-style brightness in 0..255."""

    return 0.299 * rgb[0] + 0.587 * rgb[1] + 0.114 * rgb[2]


def analyze(value: str) -> ColorAnalysis:
    rgb = parse_color(value)
    if rgb is None:
        return ColorAnalysis(hex=value, hue=0.0, saturation=0.0, lightness=0.5, luminance=0.5)
    hue, sat, light = rgb_to_hsl(rgb)
    return ColorAnalysis(
        hex=value,
        hue=hue,
        saturation=sat,
        lightness=light,
        luminance=relative_luminance(rgb),
    )


def hue_distance(a: float, b: float) -> float:
    d = abs(a - b) % 360
    return 360 - d if d > 180 else d


# Lab / LCh ------------------------------------------------------------------


def _to_linear(c: float) -> float:
    c /= 255
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def _from_linear(c: float) -> float:
    return 255 * (12.92 * c if c <= 0.00304 else 1.055 * c ** (1 / 2.4) - 0.055)


def _xyz_to_lab_f(t: float) -> float:
    return t ** (1 / 3) if t > _T3 else t / _T2 + _T0


def _lab_to_xyz_f(t: float) -> float:
    return t ** 3 if t > _T1 else _T2 * (t - _T0)


def rgb_to_lab(rgb: RGB) -> Tuple[float, float, float]:
    r, g, b = (_to_linear(c) for c in rgb)
    x = _xyz_to_lab_f((0.4124564 * r + 0.3575761 * g + 0.1804375 * b) / _XN)
    y = _xyz_to_lab_f((0.2126729 * r + 0.7151522 * g + 0.0721750 * b) / _YN)
    z = _xyz_to_lab_f((0.0193339 * r + 0.1191920 * g + 0.9503041 * b) / _ZN)
    lightness = 116 * y - 16
    return (lightness if lightness > 0 else 0.0), 500 * (x - y), 200 * (y - z)


def lab_to_rgb(lab: Tuple[float, float, float]) -> RGB:
    lightness, a, b = lab
    y = (lightness + 16) / 116
    x = y + a / 500
    z = y - b / 200
    x = _XN * _lab_to_xyz_f(x)
    y = _YN * _lab_to_xyz_f(y)
    z = _ZN * _lab_to_xyz_f(z)
    r = _from_linear(3.2404542 * x - 1.5371385 * y - 0.4985314 * z)
    g = _from_linear(-0.9692660 * x + 1.8760108 * y + 0.0415560 * z)
    bl = _from_linear(0.0556434 * x - 0.2040259 * y + 1.0572252 * z)
    return (
        int(round(max(0.0, min(255.0, r)))),
        int(round(max(0.0, min(255.0, g)))),
        int(round(max(0.0, min(255.0, bl)))),
    )


def darken(value: str, amount: float = 1.0) -> str:
    """Lower Lab lightness by ``18 * amount``; unparseable input is returned as-is."""

    rgb = parse_color(value)
    if rgb is None:
        return value
    lightness, a, b = rgb_to_lab(rgb)
    return rgb_to_hex(lab_to_rgb((lightness - _LAB_STEP * amount, a, b)))


def brighten(value: str, amount: float = 1.0) -> str:
    return darken(value, -amount)


def saturate(value: str, amount: float = 1.0) -> str:
    """Raise LCh chroma by ``18 * amount`` keeping lightness and hue."""

    rgb = parse_color(value)
    if rgb is None:
        return value
    lightness, a, b = rgb_to_lab(rgb)
    chroma = math.hypot(a, b)
    hue = math.atan2(b, a)
    chroma = max(0.0, chroma + _LAB_STEP * amount)
    return rgb_to_hex(lab_to_rgb((lightness, chroma * math.cos(hue), chroma * math.sin(hue))))
