"""Pick the best square brand mark among favicon, manifest icons and logo.

Each candidate is measured (see ``analysis.mark_stats``), scored on five
axes and the best qualified one wins. Weak winners fall back to a generated
initials avatar, and the favicon keeps its slot unless another mark clearly
beats it.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Tuple

from ..io.models import BrandMarkCandidate, BrandMarkScores, BrandMarkSelection
from .analysis import MarkStats, mark_stats
from .loader import ImageLoader

logger = logging.getLogger(__name__)

MIN_ICON_SIZE = 16
MINIMUM_VIABLE_SCORE = 35
FAVICON_PREFERENCE_BUFFER = 15
MAX_MANIFEST_ICONS = 2

WEIGHTS = {"aspect": 0.25, "resolution": 0.20, "complexity": 0.20, "source": 0.15, "monogram": 0.20}
SOURCE_SCORES = {"manifest": 90, "favicon": 70, "logo": 50}

PLATFORM_DEFAULT_FAVICONS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"/img/webclip\.png$",
        r"wp-includes/images/w-logo",
        r"wp-content/themes/flavor/favicon",
        r"fav-icon\.ico$",
        r"wixstatic\.com/.*/favicon\.ico$",
        r"static1\.squarespace\.com/static/.*/favicon\.ico$",
        r"cdn\.shopify\.com/s/files/.*/favicon",
        r"img\.websitebuilder\.com/.*favicon",
        r"weebly\.com/.*/favicon",
        r"sites\.google\.com/.*/favicon",
    )
)


def gather_candidates(
    favicon: str | None, logo: str | None, manifest_icons: Sequence[str] = ()
) -> List[Tuple[str, str]]:
    """Ordered ``(url, source)`` pairs: favicon, up to two manifest icons, logo."""
    seen: set[str] = set()
    out: List[Tuple[str, str]] = []

    def add(url: str | None, source: str) -> None:
        if url and url not in seen:
            seen.add(url)
            out.append((url, source))

    add(favicon, "favicon")
    for icon in list(manifest_icons)[:MAX_MANIFEST_ICONS]:
        add(icon, "manifest")
    add(logo, "logo")
    return out


def platform_default_pattern(url: str) -> str | None:
    for pattern in PLATFORM_DEFAULT_FAVICONS:
        if pattern.search(url):
            return pattern.pattern
    return None


def score_resolution(max_dim: int) -> float:
    if max_dim >= 192:
        return 100.0
    if max_dim >= 128:
        return 80 + (max_dim - 128) / 64 * 20
    if max_dim >= 64:
        return 50 + (max_dim - 64) / 64 * 30
    if max_dim >= 32:
        return 25 + (max_dim - 32) / 32 * 25
    if max_dim >= 16:
        return (max_dim - 16) / 16 * 25
    return 0.0


def score_aspect(width: int, height: int) -> float:
    ratio = width / height
    r = ratio if ratio >= 1 else 1 / ratio
    if r <= 1.05:
        return 100.0
    if r <= 1.2:
        return 100 - (r - 1.05) / 0.15 * 30
    if r <= 2.0:
        return 70 - (r - 1.2) / 0.8 * 30
    if r <= 3.5:
        return 40 - (r - 2.0) / 1.5 * 25
    return max(0.0, 15 - (r - 3.5) * 4)


def score_complexity(unique_colors: int) -> float:
    """Solid fills score 0, rich icons 100."""
    if unique_colors <= 1:
        return 0.0
    if unique_colors <= 3:
        return 30.0
    if unique_colors <= 10:
        return 60 + (unique_colors - 3) / 7 * 40
    return 100.0


def monogram_likelihood(foreground_ratio: float, bbox_fill: float) -> Tuple[bool, float]:
    """Single glyphs sit small and centred with lots of padding around them."""
    if foreground_ratio <= 0:
        return False, 0.0
    fg_signal = (0.35 - foreground_ratio) / 0.35 if foreground_ratio < 0.35 else 0.0
    bbox_signal = (0.50 - bbox_fill) / 0.50 if bbox_fill < 0.50 else 0.0
    confidence = min(1.0, (fg_signal + bbox_signal) / 1.4)
    return confidence > 0.45, confidence


def photo_penalty(unique_colors: int, low_gradient_ratio: float) -> Tuple[float, float]:
    """Return ``(smooth_ratio, penalty_factor)``; photographs make poor marks."""
    color_signal = min(1.0, max(0.0, (unique_colors - 80) / 120))
    grad_signal = min(1.0, max(0.0, (0.40 - low_gradient_ratio) / 0.30))
    smooth = (color_signal + grad_signal) / 2
    if smooth < 0.45:
        factor = 1.0
    elif smooth <= 0.65:
        factor = 0.7
    else:
        factor = 0.35
    return round(smooth, 3), factor


def disqualified(url: str, source: str, reason: str, width: int = 0, height: int = 0) -> BrandMarkCandidate:
    return BrandMarkCandidate(
        url=url,
        source=source,
        width=width,
        height=height,
        aspect_ratio=round(width / height, 2) if height else 0.0,
        resolution=max(width, height),
        disqualified=True,
        disqualify_reason=reason,
    )


def score_candidate(url: str, source: str, stats: MarkStats) -> BrandMarkCandidate:
    """Score one measured candidate; pure over its statistics."""
    width, height = stats.width, stats.height
    max_dim = max(width, height)
    if max_dim < MIN_ICON_SIZE:
        return disqualified(url, source, f"Too small: {width}×{height} (min {MIN_ICON_SIZE}px)", width, height)

    is_monogram, mono_conf = monogram_likelihood(stats.foreground_ratio, stats.bbox_fill)
    smooth, penalty = photo_penalty(stats.unique_colors, stats.low_gradient_ratio)
    # Likely single glyphs lose monogram points in proportion to confidence.
    monogram = (1 - mono_conf) * 100 if is_monogram else 100.0

    scores = BrandMarkScores(
        aspect=round(score_aspect(width, height)),
        resolution=round(score_resolution(max_dim)),
        complexity=round(score_complexity(stats.unique_colors)),
        source=SOURCE_SCORES.get(source, 30),
        monogram=round(monogram),
    )
    base = sum(getattr(scores, axis) * weight for axis, weight in WEIGHTS.items())
    return BrandMarkCandidate(
        url=url,
        source=source,
        width=width,
        height=height,
        aspect_ratio=round(width / height, 2) if height else 0.0,
        resolution=max_dim,
        unique_color_count=stats.unique_colors,
        is_likely_monogram=is_monogram,
        monogram_confidence=round(mono_conf, 2),
        smooth_ratio=smooth,
        photo_penalty=penalty,
        scores=scores,
        total_score=round(base * penalty),
    )


def select_brand_mark(candidates: Sequence[BrandMarkCandidate]) -> BrandMarkSelection:
    """Rank already-scored candidates. Calling it twice gives the same answer."""
    log: List[str] = []
    evaluated = list(candidates)
    if not evaluated:
        log.append("No candidates available")
        return BrandMarkSelection(selected=None, candidates=[], fallback_to_initials=True, log=log)

    log.append(f"{len(evaluated)} candidates: {', '.join(c.source for c in evaluated)}")
    qualified = [c for c in evaluated if not c.disqualified]
    rejected = [c for c in evaluated if c.disqualified]
    if rejected:
        reasons = "; ".join(f"{c.source}: {c.disqualify_reason}" for c in rejected)
        log.append(f"Disqualified {len(rejected)}: {reasons}")
    if not qualified:
        log.append("All candidates disqualified → initials")
        return BrandMarkSelection(selected=None, candidates=evaluated, fallback_to_initials=True, log=log)

    ranked = sorted(qualified, key=lambda c: c.total_score, reverse=True)
    best = ranked[0]
    if best.total_score < MINIMUM_VIABLE_SCORE:
        log.append(
            f"Best score {best.total_score:g} ({best.source}) below threshold {MINIMUM_VIABLE_SCORE} → initials"
        )
        return BrandMarkSelection(selected=None, candidates=evaluated, fallback_to_initials=True, log=log)

    if best.source != "favicon":
        favicon = next((c for c in qualified if c.source == "favicon"), None)
        if favicon is not None:
            diff = best.total_score - favicon.total_score
            if diff < FAVICON_PREFERENCE_BUFFER:
                log.append(
                    f"Favicon preference: keeping favicon ({favicon.total_score:g}) over "
                    f"{best.source} ({best.total_score:g}), diff {diff:g} < {FAVICON_PREFERENCE_BUFFER}"
                )
                return BrandMarkSelection(selected=favicon, candidates=evaluated, fallback_to_initials=False, log=log)
            log.append(f"{best.source} ({best.total_score:g}) beats favicon ({favicon.total_score:g}) by {diff:g}pts")
    else:
        log.append(f"Favicon wins with score {best.total_score:g}")
    return BrandMarkSelection(selected=best, candidates=evaluated, fallback_to_initials=False, log=log)


def evaluate_candidates(pairs: Iterable[Tuple[str, str]], loader: ImageLoader) -> List[BrandMarkCandidate]:
    results: List[BrandMarkCandidate] = []
    for url, source in pairs:
        if source == "favicon":
            pattern = platform_default_pattern(url)
            if pattern:
                results.append(disqualified(url, source, f"Platform default favicon (matched: {pattern})"))
                continue
        asset = loader.load(url)
        if asset is None:
            results.append(disqualified(url, source, "Image could not be fetched"))
            continue
        if asset.image is None:
            reason = "SVG could not be rasterised" if asset.is_svg else "Unreadable or corrupt image data"
            results.append(disqualified(url, source, reason))
            continue
        results.append(score_candidate(url, source, mark_stats(asset.image)))
    return results


def select_best_brand_mark(
    favicon: str | None,
    logo: str | None,
    manifest_icons: Sequence[str],
    loader: ImageLoader,
) -> BrandMarkSelection:
    selection = select_brand_mark(evaluate_candidates(gather_candidates(favicon, logo, manifest_icons), loader))
    for line in selection.log:
        logger.debug("brand-mark: %s", line)
    return selection
