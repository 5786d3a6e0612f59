"""Palette diversity scoring.

Decides whether a set of gradient stops is rich enough to look good as a
generated gradient (multi-hue, Stripe-like) or whether a curated photo is
the better choice (a single navy wash).
"""

from __future__ import annotations

import math
from typing import Sequence

from ..colors.convert import hue_distance, parse_strict_hex, relative_luminance, rgb_to_hsl
from ..io.models import DiversityScore

DIVERSITY_THRESHOLD = 0.45
PRESET_PENALTY = 0.15
_GRAY_SATURATION = 0.10


def score_palette_diversity(stops: Sequence[str], used_preset: bool = False) -> DiversityScore:
    """Score *stops* in [0, 1]; ``use_gradient`` is set at 0.45 and above.

    Only strict ``#rrggbb`` stops are considered.
    """

    parsed = []
    for stop in stops:
        rgb = parse_strict_hex(stop)
        if rgb is None:
            continue
        hue, sat, _ = rgb_to_hsl(rgb)
        parsed.append((hue, sat, relative_luminance(rgb)))

    if not parsed:
        return DiversityScore(score=0.0, use_gradient=False, reason="no valid color stops")

    hue_score = 0.0
    if len(parsed) >= 2 and any(sat >= _GRAY_SATURATION for _, sat, _ in parsed):
        widest = 0.0
        for i, (hue_a, sat_a, _) in enumerate(parsed):
            for hue_b, sat_b, _ in parsed[i + 1:]:
                if sat_a < _GRAY_SATURATION or sat_b < _GRAY_SATURATION:
                    continue
                widest = max(widest, hue_distance(hue_a, hue_b))
        hue_score = min(widest / 120, 1.0)

    lums = [lum for _, _, lum in parsed]
    lum_score = min((max(lums) - min(lums)) / 0.45, 1.0)

    mean_sat = sum(sat for _, sat, _ in parsed) / len(parsed)
    sat_score = min(mean_sat / 0.40, 1.0)

    count_score = min((len(parsed) - 1) / 3, 1.0)

    raw = 0.30 * hue_score + 0.30 * lum_score + 0.20 * sat_score + 0.20 * count_score
    penalty = PRESET_PENALTY if used_preset else 0.0
    score = max(0.0, math.floor((raw - penalty) * 100 + 0.5) / 100)
    use_gradient = score >= DIVERSITY_THRESHOLD

    reason = (
        f"score={score:.2f} (hue={hue_score:.2f} lum={lum_score:.2f} "
        f"sat={sat_score:.2f} count={count_score:.2f}"
        f"{' preset=-0.15' if used_preset else ''}) → {'gradient' if use_gradient else 'library'}"
    )
    return DiversityScore(score=score, use_gradient=use_gradient, reason=reason)
