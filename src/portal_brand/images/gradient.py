"""Gradient specification and rendering for generated hero backgrounds."""

from __future__ import annotations

import logging
import math
from collections import Counter
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image

from ..colors.convert import normalize_hex, parse_color, rgb_to_hsl
from ..hashing import normalize_domain, stable_hash
from ..io.models import ExtractedColor, GradientSpec

logger = logging.getLogger(__name__)

MAX_STOPS = 4
MIN_STOPS = 2
GRADIENT_SIZE = 1160
_MIN_STOP_DISTANCE = 24

PRESETS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("aurora", ("#6366f1", "#8b5cf6", "#ec4899")),
    ("lagoon", ("#0ea5e9", "#14b8a6", "#22c55e")),
    ("ember", ("#f97316", "#ef4444", "#db2777")),
    ("dusk", ("#1e3a8a", "#7c3aed", "#f472b6")),
    ("meadow", ("#84cc16", "#10b981", "#0891b2")),
    ("harbor", ("#0f172a", "#1d4ed8", "#38bdf8")),
)


def _usable_stops(colors: Sequence[str]) -> List[str]:
    """Valid, non-extreme, visually distinct colors, capped at ``MAX_STOPS``."""
    stops: List[str] = []
    seen: List[Tuple[int, int, int]] = []
    for raw in colors:
        rgb = parse_color(raw)
        if rgb is None:
            continue
        _, _, lightness = rgb_to_hsl(rgb)
        if lightness > 0.95 or lightness < 0.05:
            continue
        if any(sum(abs(a - b) for a, b in zip(rgb, other)) < _MIN_STOP_DISTANCE for other in seen):
            continue
        seen.append(rgb)
        stops.append(normalize_hex(raw) or raw)
        if len(stops) == MAX_STOPS:
            break
    return stops


def compute_gradient(colors: Sequence[str], domain: str) -> GradientSpec:
    """Build the gradient for *domain* from extracted *colors*.

    Fewer than two usable colors falls back to a preset picked by domain
    hash. The angle is also hash-derived, so a domain always gets the same
    gradient.
    """

    key = normalize_domain(domain) or domain
    h = stable_hash(key)
    angle = 120 + (h >> 8) % 90
    stops = _usable_stops(colors)

    if len(stops) >= MIN_STOPS:
        return GradientSpec(
            stops=stops,
            angle=angle,
            mode="extracted",
            reason=f"{len(stops)} usable stops from {len(colors)} input colors",
            input_colors=list(colors),
        )

    name, preset = PRESETS[h % len(PRESETS)]
    return GradientSpec(
        stops=list(preset),
        angle=angle,
        mode="preset",
        reason=f"only {len(stops)} usable color(s) after guardrails → preset '{name}'",
        preset_name=name,
        input_colors=list(colors),
    )


def gradient_colors_from_palettes(palettes: Sequence[Sequence[ExtractedColor]], limit: int = 5) -> List[str]:
    """Weight the top three colors of each of the first five images 3/2/1."""
    weights: Counter[str] = Counter()
    for palette in palettes[:5]:
        for idx, color in enumerate(palette[:3]):
            weights[color.color] += 3 - idx
    ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
    return [color for color, _ in ranked[:limit]]


def render_gradient(spec: GradientSpec, size: int = GRADIENT_SIZE) -> Image.Image:
    """Rasterise *spec* as a CSS-style linear gradient (0deg points up)."""
    stops = [parse_color(s) or (128, 128, 128) for s in spec.stops] or [(128, 128, 128)]
    if len(stops) == 1:
        stops = stops * 2
    colors = np.array(stops, dtype=np.float64)

    radians = math.radians(spec.angle)
    dx, dy = math.sin(radians), -math.cos(radians)
    ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
    centred_x = xs / (size - 1) - 0.5
    centred_y = ys / (size - 1) - 0.5
    projection = centred_x * dx + centred_y * dy
    half_span = (abs(dx) + abs(dy)) / 2
    t = np.clip((projection + half_span) / (2 * half_span), 0.0, 1.0)

    segments = len(colors) - 1
    position = t * segments
    index = np.minimum(position.astype(int), segments - 1)
    local = (position - index)[..., None]
    pixels = colors[index] * (1 - local) + colors[index + 1] * local
    return Image.fromarray(np.round(pixels).astype(np.uint8))


class GradientImageWriter:
    """Gradient generator that renders PNG files into a directory."""

    def __init__(self, out_dir: Path, size: int = GRADIENT_SIZE) -> None:
        self.out_dir = Path(out_dir)
        self.size = size

    def __call__(self, spec: GradientSpec, domain: str) -> str:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        name = (normalize_domain(domain) or "portal").replace(":", "_")
        path = self.out_dir / f"{name}.gradient.png"
        render_gradient(spec, self.size).save(path, format="PNG")
        logger.debug("Rendered %s gradient to %s", spec.mode, path)
        return str(path)
