"""Scoring, classification and preparation of scraped hero photos.

A hero image has to look like a photograph or illustration that fills the
login panel. Logos on solid backgrounds, text banners, thin strips and
portrait crops are rejected before they reach the portal.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..io.models import (
    HeroClassification,
    HeroImageScore,
    HeroImageScores,
    OgHeroEvaluation,
    PreparedHero,
    ScrapedHeroEvaluation,
    ScrapedImage,
)
from .analysis import HeroStats, HeroTypeSignals, hero_stats, hero_type_signals, sample_edge_color
from .loader import ImageLoader

logger = logging.getLogger(__name__)

MIN_LONG_SIDE = 400
MIN_SHORT_SIDE = 300
MAX_PORTRAIT_RATIO = 1.2
MIN_UNIQUE_COLORS = 8
MIN_AREA = 150_000
PASS_THRESHOLD = 70
MIN_EDGE_DENSITY = 8
MIN_SPATIAL_SPREAD = 0.40

WEIGHTS = {
    "resolution": 0.20,
    "aspect_ratio": 0.15,
    "complexity": 0.15,
    "area": 0.10,
    "edge_density": 0.20,
    "spatial_spread": 0.20,
}

TEXT_HEAVY_THRESHOLD = 45
PHOTO_TEXT_LIKELIHOOD = 30

# Scraped candidates are prefiltered on their declared size before any fetch.
PREFILTER_MIN_SHORT_SIDE = 200
MAX_SCRAPED_HERO_TRIES = 3


def score_hero_stats(stats: HeroStats) -> HeroImageScore:
    """Score measured statistics; every hard gate must hold for a pass."""
    width, height = stats.width, stats.height
    long_side, short_side = max(width, height), min(width, height)
    reasons: List[str] = []
    gates_ok = True

    if long_side >= 1200:
        resolution = 100.0
    elif long_side >= MIN_LONG_SIDE:
        resolution = 50 + (long_side - MIN_LONG_SIDE) / 800 * 50
    else:
        resolution = long_side / MIN_LONG_SIDE * 50
        reasons.append(f"long side {long_side}px < {MIN_LONG_SIDE}px min")
        gates_ok = False
    if short_side < MIN_SHORT_SIDE:
        reasons.append(f"short side {short_side}px < {MIN_SHORT_SIDE}px (likely logo)")
        resolution = min(resolution, 20.0)
        gates_ok = False

    ratio = width / height if height else 0.0
    if height > width * MAX_PORTRAIT_RATIO:
        aspect = 0.0
        reasons.append(f"portrait {width}×{height} (h > w × {MAX_PORTRAIT_RATIO})")
        gates_ok = False
    elif ratio <= 1.5:
        aspect = 100.0
    elif ratio <= 2.0:
        aspect = 60 + (2.0 - ratio) / 0.5 * 40
    elif ratio <= 2.5:
        aspect = 30 + (2.5 - ratio) / 0.5 * 30
        reasons.append(f"wide {ratio:.1f}:1")
    else:
        aspect = 0.0
        reasons.append(f"ultra-wide {ratio:.1f}:1")
        gates_ok = False

    unique = stats.unique_colors
    if unique >= 30:
        complexity = 100.0
    elif unique >= MIN_UNIQUE_COLORS:
        complexity = 50 + (unique - MIN_UNIQUE_COLORS) / 22 * 50
    else:
        complexity = unique / MIN_UNIQUE_COLORS * 50
        reasons.append(f"only {unique} unique colors (min {MIN_UNIQUE_COLORS})")
        gates_ok = False

    edge = stats.edge_density
    if edge >= 25:
        edge_score = 100.0
    elif edge >= 5:
        edge_score = (edge - 5) / 20 * 100
    else:
        edge_score = 0.0
    if edge < MIN_EDGE_DENSITY:
        reasons.append(f"edge density {edge:.1f} < {MIN_EDGE_DENSITY} (flat/logo-on-solid)")
        gates_ok = False

    spread = stats.spread_ratio
    if spread >= 0.72:
        spread_score = 100.0
    elif spread >= 0.2:
        spread_score = (spread - 0.2) / 0.52 * 100
    else:
        spread_score = 0.0
    if spread < MIN_SPATIAL_SPREAD:
        reasons.append(f"spread {round(spread * 100)}% < {round(MIN_SPATIAL_SPREAD * 100)}% (concentrated content)")
        gates_ok = False

    area = width * height
    if area >= 1_000_000:
        area_score = 100.0
    elif area >= MIN_AREA:
        area_score = 50 + (area - MIN_AREA) / 850_000 * 50
    else:
        area_score = area / MIN_AREA * 50
        reasons.append(f"area {area}px² < {MIN_AREA}px² min")
        gates_ok = False

    scores = HeroImageScores(
        resolution=round(resolution),
        aspect_ratio=round(aspect),
        complexity=round(complexity),
        area=round(area_score),
        edge_density=round(edge_score),
        spatial_spread=round(spread_score),
    )
    total = round(sum(getattr(scores, key) * weight for key, weight in WEIGHTS.items()))
    passed = gates_ok and total >= PASS_THRESHOLD

    if passed:
        reasons.insert(
            0,
            f"PASS: total={total}, {width}×{height}, {unique} colors, "
            f"edge={edge:.1f}, spread={round(spread * 100)}%",
        )
    elif not reasons:
        reasons.append(f"FAIL: total={total} < {PASS_THRESHOLD} threshold")
    return HeroImageScore(scores=scores, total=total, passed=passed, reasons=reasons)


def failed_score(reason: str) -> HeroImageScore:
    return HeroImageScore(scores=HeroImageScores(), total=0, passed=False, reasons=[f"error: {reason}"])


def classify_signals(signals: HeroTypeSignals) -> HeroClassification:
    """Decide between ``photo`` and ``text_heavy`` from layout cues."""

    aspect = signals.width / signals.height if signals.height else 1.0
    if aspect > 1.85:
        return HeroClassification("text_heavy", 0.85, 80, {"early_exit": 1, "aspect": round(aspect, 2)})
    if aspect < 0.67:
        return HeroClassification("photo", 0.80, 10, {"early_exit": 2, "aspect": round(aspect, 2)})

    score = 0
    if signals.high_contrast_ratio > 0.40:
        score += 20
    elif signals.high_contrast_ratio > 0.25:
        score += 10
    if signals.bg_uniformity > 0.35:
        score += 20
    elif signals.bg_uniformity > 0.20:
        score += 10
    if signals.hv_bias > 0.40:
        score += 15
    elif signals.hv_bias > 0.25:
        score += 8
    if signals.unique_colors < 30:
        score += 15
    elif signals.unique_colors < 50:
        score += 8
    if signals.sat_std < 0.10:
        score += 10
    elif signals.sat_std < 0.18:
        score += 5
    if signals.spread < 0.50:
        score += 10
    elif signals.spread < 0.65:
        score += 5
    if signals.border_ratio < 0.25:
        score += 10
    elif signals.border_ratio < 0.40:
        score += 5

    kind = "text_heavy" if score >= TEXT_HEAVY_THRESHOLD else "photo"
    confidence = min(abs(score - TEXT_HEAVY_THRESHOLD) / 30, 1.0)
    cues: Dict[str, float] = {
        "aspect": round(aspect, 2),
        "high_contrast_ratio": round(signals.high_contrast_ratio, 3),
        "bg_uniformity": round(signals.bg_uniformity, 3),
        "hv_bias": round(signals.hv_bias, 3),
        "unique_colors": signals.unique_colors,
        "sat_std": round(signals.sat_std, 3),
        "spread": round(signals.spread, 3),
        "border_ratio": round(signals.border_ratio, 3),
    }
    return HeroClassification(kind, round(confidence, 2), score, cues)


def orientation_of(width: int, height: int) -> str:
    ratio = width / height if height else 1.0
    if ratio > 1.15:
        return "landscape"
    if ratio < 0.87:
        return "portrait"
    return "square"


def _prepare(url: str, loader: ImageLoader) -> tuple[HeroImageScore, PreparedHero | None]:
    asset = loader.load(url)
    if asset is None:
        return failed_score("fetch failed"), None
    if asset.image is None:
        return failed_score("unreadable image data"), None

    img = asset.image
    score = score_hero_stats(hero_stats(img))
    if not score.passed:
        return score, None
    kind = classify_signals(hero_type_signals(img))
    prepared = PreparedHero(
        image_url=url,
        orientation=orientation_of(*img.size),
        image_type=kind.type,
        confidence=kind.confidence,
        text_likelihood=kind.text_likelihood,
        edge_color=sample_edge_color(img),
    )
    return score, prepared


def evaluate_og_image(og_image: str | None, loader: ImageLoader) -> OgHeroEvaluation:
    """Run the OG image through the hero quality bar."""
    if not og_image:
        return OgHeroEvaluation(og_image_url=None, passed=False)
    score, prepared = _prepare(og_image, loader)
    logger.debug("OG hero %s: %s", og_image, "; ".join(score.reasons))
    return OgHeroEvaluation(og_image_url=og_image, passed=prepared is not None, score=score, prepared=prepared)


def scraped_hero_candidates(images: Sequence[ScrapedImage], og_image: str | None = None) -> List[ScrapedImage]:
    """Hero-typed images large enough to bother fetching, biggest first."""

    seen: set[str] = set()
    kept: List[ScrapedImage] = []
    for image in images:
        if image.type != "hero" or image.url.startswith("data:"):
            continue
        if image.url == og_image or image.url in seen:
            continue
        seen.add(image.url)
        w, h = image.width or 0, image.height or 0
        if w <= 0 or h <= 0:
            continue
        if max(w, h) < MIN_LONG_SIDE or min(w, h) < PREFILTER_MIN_SHORT_SIDE:
            continue
        if h > w * MAX_PORTRAIT_RATIO:
            continue
        kept.append(image)
    kept.sort(key=lambda item: (item.width or 0) * (item.height or 0), reverse=True)
    return kept


def evaluate_scraped_heroes(
    images: Sequence[ScrapedImage],
    og_image: str | None,
    loader: ImageLoader,
    max_tries: int = MAX_SCRAPED_HERO_TRIES,
) -> ScrapedHeroEvaluation:
    """Try the largest scraped heroes; a clean photo wins outright.

    A text-heavy passer is kept as a fallback in case no photo turns up.
    """

    candidates = scraped_hero_candidates(images, og_image)
    if not candidates:
        return ScrapedHeroEvaluation(image_url=None, passed=False)

    to_try = candidates[:max_tries]
    fallback: tuple[int, str, HeroImageScore, PreparedHero] | None = None
    best_fail: tuple[str, HeroImageScore] | None = None

    for index, candidate in enumerate(to_try):
        score, prepared = _prepare(candidate.url, loader)
        logger.debug("Scraped hero %s: %s", candidate.url, "; ".join(score.reasons))
        if prepared is None:
            if best_fail is None or score.total > best_fail[1].total:
                best_fail = (candidate.url, score)
            continue
        if prepared.text_likelihood < PHOTO_TEXT_LIKELIHOOD:
            return ScrapedHeroEvaluation(
                image_url=candidate.url,
                passed=True,
                score=score,
                prepared=prepared,
                candidates_considered=len(candidates),
                candidates_tried=index + 1,
            )
        if fallback is None:
            fallback = (index, candidate.url, score, prepared)

    if fallback is not None:
        index, url, score, prepared = fallback
        return ScrapedHeroEvaluation(
            image_url=url,
            passed=True,
            score=score,
            prepared=prepared,
            candidates_considered=len(candidates),
            candidates_tried=len(to_try),
        )

    url, score = best_fail if best_fail else (None, None)
    return ScrapedHeroEvaluation(
        image_url=url,
        passed=False,
        score=score,
        candidates_considered=len(candidates),
        candidates_tried=len(to_try),
    )
