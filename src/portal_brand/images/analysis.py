"""Pixel statistics for logos and hero photos.

Every function here takes an already decoded Pillow image and returns plain
numbers; the scoring modules turn those numbers into decisions.
"""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image, ImageOps

_RESAMPLE = Image.Resampling.LANCZOS


@dataclass(frozen=True, slots=True)
class MarkStats:
    """Measurements of a logo/icon candidate."""

    width: int
    height: int
    unique_colors: int
    low_gradient_ratio: float
    foreground_ratio: float
    bbox_fill: float


@dataclass(frozen=True, slots=True)
class HeroStats:
    width: int
    height: int
    unique_colors: int
    edge_density: float
    spread_ratio: float


@dataclass(frozen=True, slots=True)
class HeroTypeSignals:
    """Cues separating text-heavy banners from photographs."""

    width: int
    height: int
    high_contrast_ratio: float = 0.0
    bg_uniformity: float = 0.0
    hv_bias: float = 0.0
    unique_colors: int = 0
    sat_std: float = 0.0
    spread: float = 0.0
    border_ratio: float = 1.0


def rgb_pixels(img: Image.Image, size: int, fit: str = "cover") -> np.ndarray:
    """Return an ``(size, size, 3)`` int array of *img* without its alpha channel."""

    rgb = img.convert("RGB") if img.mode != "RGB" else img
    if fit == "cover":
        thumb = ImageOps.fit(rgb, (size, size), method=_RESAMPLE)
    else:
        thumb = rgb.resize((size, size), _RESAMPLE)
    return np.asarray(thumb, dtype=np.int32)


def quantize(pixels: np.ndarray, step: int) -> np.ndarray:
    # Bucket edges round half-up.
    return (np.floor(pixels / step + 0.5) * step).astype(np.int32)


def color_counts(pixels: np.ndarray, step: int) -> tuple[np.ndarray, np.ndarray]:
    """Unique quantised colors of *pixels* and how often each occurs."""

    flat = quantize(pixels, step).reshape(-1, 3)
    if flat.size == 0:
        return np.empty((0, 3), dtype=np.int32), np.empty(0, dtype=np.int64)
    colors, counts = np.unique(flat, axis=0, return_counts=True)
    return colors, counts


def unique_color_count(pixels: np.ndarray, step: int) -> int:
    colors, _ = color_counts(pixels, step)
    return int(len(colors))


def _neighbour_diffs(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Summed absolute RGB difference to the right and bottom neighbours."""

    horizontal = np.abs(pixels[:, 1:, :] - pixels[:, :-1, :]).sum(axis=2)
    vertical = np.abs(pixels[1:, :, :] - pixels[:-1, :, :]).sum(axis=2)
    return horizontal, vertical


def low_gradient_ratio(pixels: np.ndarray, threshold: int = 10) -> float:
    """Fraction of neighbouring pixel pairs that are nearly identical."""

    horizontal, vertical = _neighbour_diffs(pixels)
    total = horizontal.size + vertical.size
    if total == 0:
        return 1.0
    flat = int((horizontal < threshold).sum() + (vertical < threshold).sum())
    return flat / total


def edge_density(pixels: np.ndarray) -> float:
    """Mean per-channel neighbour difference on a 0-255 scale."""

    h, w = pixels.shape[:2]
    horizontal, vertical = _neighbour_diffs(pixels)
    edge = np.zeros((h, w), dtype=np.float64)
    samples = np.zeros((h, w), dtype=np.float64)
    edge[:, :-1] += horizontal
    samples[:, :-1] += 3
    edge[:-1, :] += vertical
    samples[:-1, :] += 3
    valid = samples > 0
    if not np.any(valid):
        return 0.0
    return float((edge[valid] / samples[valid]).mean())


def spatial_spread(pixels: np.ndarray, grid: int = 5, threshold: float = 10.0) -> float:
    """Share of grid cells whose mean color deviation exceeds *threshold*."""

    h, w = pixels.shape[:2]
    cell_w, cell_h = w // grid, h // grid
    if cell_w == 0 or cell_h == 0:
        return 0.0
    active = 0
    for gy in range(grid):
        for gx in range(grid):
            cell = pixels[gy * cell_h:(gy + 1) * cell_h, gx * cell_w:(gx + 1) * cell_w, :]
            mean = cell.reshape(-1, 3).mean(axis=0)
            deviation = np.abs(cell - mean).mean()
            if deviation > threshold:
                active += 1
    return active / (grid * grid)


def mark_stats(img: Image.Image) -> MarkStats:
    width, height = img.size
    thumb = rgb_pixels(img, 50, "cover")

    size = 64
    rgba = img.convert("RGBA")
    contained = ImageOps.contain(rgba, (size, size), method=_RESAMPLE)
    canvas = Image.new("RGBA", (size, size), (255, 255, 255, 255))
    offset = ((size - contained.width) // 2, (size - contained.height) // 2)
    canvas.alpha_composite(contained, offset)
    gray = np.asarray(canvas.convert("L"))
    foreground = gray < 128
    fg_count = int(foreground.sum())
    if fg_count:
        rows = np.where(foreground.any(axis=1))[0]
        cols = np.where(foreground.any(axis=0))[0]
        bbox_area = (rows[-1] - rows[0] + 1) * (cols[-1] - cols[0] + 1)
        bbox_fill = float(bbox_area) / (size * size)
    else:
        bbox_fill = 0.0

    return MarkStats(
        width=width,
        height=height,
        unique_colors=unique_color_count(thumb, 16),
        low_gradient_ratio=low_gradient_ratio(thumb),
        foreground_ratio=fg_count / (size * size),
        bbox_fill=bbox_fill,
    )


def hero_stats(img: Image.Image) -> HeroStats:
    width, height = img.size
    thumb = rgb_pixels(img, 50, "cover")
    return HeroStats(
        width=width,
        height=height,
        unique_colors=unique_color_count(thumb, 16),
        edge_density=edge_density(thumb),
        spread_ratio=spatial_spread(thumb),
    )


def _background_uniformity(pixels: np.ndarray, tolerance: int = 20) -> float:
    """Share of pixels flood-filled from the four corners."""

    h, w = pixels.shape[:2]
    image = np.ascontiguousarray(pixels.astype(np.uint8))
    mask = np.zeros((h + 2, w + 2), dtype=np.uint8)
    flags = 4 | cv2.FLOODFILL_FIXED_RANGE | cv2.FLOODFILL_MASK_ONLY | (1 << 8)
    diff = (tolerance, tolerance, tolerance)
    for seed in ((0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1)):
        if mask[seed[1] + 1, seed[0] + 1]:
            continue
        cv2.floodFill(image, mask, seed, (0, 0, 0), diff, diff, flags)
    return float(np.count_nonzero(mask[1:-1, 1:-1])) / (h * w)


def _saturation(pixels: np.ndarray) -> np.ndarray:
    rgb = pixels.reshape(-1, 3) / 255.0
    high = rgb.max(axis=1)
    low = rgb.min(axis=1)
    lightness = (high + low) / 2
    delta = high - low
    denom = np.where(lightness > 0.5, 2 - high - low, high + low)
    with np.errstate(divide="ignore", invalid="ignore"):
        sat = np.where(delta == 0, 0.0, delta / denom)
    return np.nan_to_num(sat)


def hero_type_signals(img: Image.Image) -> HeroTypeSignals:
    width, height = img.size
    pixels = rgb_pixels(img, 100, "fill")
    h, w = pixels.shape[:2]

    right = np.abs(pixels[:-1, 1:, :] - pixels[:-1, :-1, :]).sum(axis=2) / 3
    below = np.abs(pixels[1:, :-1, :] - pixels[:-1, :-1, :]).sum(axis=2) / 3
    grad = np.maximum(right, below)
    high_contrast = float((grad > 40).mean()) if grad.size else 0.0

    h_sum, v_sum = float(right.sum()), float(below.sum())
    hv_bias = abs(h_sum - v_sum) / (h_sum + v_sum) if h_sum + v_sum > 0 else 0.0

    thumb = rgb_pixels(img, 50, "cover")
    sat = _saturation(thumb)

    border = int(round(w * 0.10))
    gray = pixels.mean(axis=2, keepdims=True)
    deviation = np.abs(pixels - gray).mean(axis=2)
    is_border = np.zeros((h, w), dtype=bool)
    if border > 0:
        is_border[:border, :] = True
        is_border[-border:, :] = True
        is_border[:, :border] = True
        is_border[:, -border:] = True
    border_ratio = 1.0
    if is_border.any() and (~is_border).any():
        centre = deviation[~is_border].mean()
        if centre > 0:
            border_ratio = float(deviation[is_border].mean() / centre)

    return HeroTypeSignals(
        width=width,
        height=height,
        high_contrast_ratio=high_contrast,
        bg_uniformity=_background_uniformity(pixels),
        hv_bias=hv_bias,
        unique_colors=unique_color_count(thumb, 24),
        sat_std=float(sat.std()),
        spread=spatial_spread(pixels),
        border_ratio=border_ratio,
    )


def sample_edge_color(img: Image.Image, strip_fraction: float = 0.05) -> str:
    """Average color of a thin frame around the image, as hex."""

    pixels = rgb_pixels(img, 100, "fill")
    h, w = pixels.shape[:2]
    strip = max(1, int(round(w * strip_fraction)))
    frame = np.zeros((h, w), dtype=bool)
    frame[:strip, :] = True
    frame[-strip:, :] = True
    frame[:, :strip] = True
    frame[:, -strip:] = True
    r, g, b = (int(round(v)) for v in pixels[frame].mean(axis=0))
    return f"#{r:02x}{g:02x}{b:02x}"


def corner_background(img: Image.Image, tolerance: int = 30) -> str | None:
    """Shared color of the four corners, or ``None`` if transparent or mixed."""

    rgba = np.asarray(img.convert("RGBA").resize((32, 32), _RESAMPLE), dtype=np.int32)
    corners = np.array([rgba[0, 0], rgba[0, -1], rgba[-1, 0], rgba[-1, -1]])
    if (corners[:, 3] < 128).any():
        return None
    rgb = corners[:, :3]
    if (np.abs(rgb - rgb[0]).sum(axis=1) > tolerance).any():
        return None
    r, g, b = (int(round(v)) for v in rgb.mean(axis=0))
    return f"#{r:02x}{g:02x}{b:02x}"


def foreground_tone(img: Image.Image, background: str | None = None) -> str | None:
    """Classify the opaque artwork as ``"dark"`` or ``"light"``."""

    rgba = np.asarray(img.convert("RGBA").resize((64, 64), _RESAMPLE), dtype=np.int32)
    pixels = rgba.reshape(-1, 4)
    keep = pixels[:, 3] >= 128
    if background:
        bg = np.array([int(background[i:i + 2], 16) for i in (1, 3, 5)])
        keep &= np.abs(pixels[:, :3] - bg).sum(axis=1) > 60
    if not keep.any():
        return None
    rgb = pixels[keep, :3]
    brightness = (0.299 * rgb[:, 0] + 0.587 * rgb[:, 1] + 0.114 * rgb[:, 2]).mean()
    return "dark" if brightness < 128 else "light"
