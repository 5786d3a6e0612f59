"""Derive a complete portal identity from one site's scraped signals.

``build_portal`` is the single entry point. It runs every component in
dependency order and records each decision in ``RawOutputs`` so operators can
explain why a site received a given color or image. Failures of external
collaborators (image fetches, the gradient generator) degrade one slot and
never abort the request.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from .colors.extractor import extract_accent, extract_colors_with_details
from .colors.generator import generate_validated_color_scheme, select_accent_color
from .config import PipelineConfig
from .discipline.detector import detect_discipline
from .discipline.hero_selector import AssetInventory, DirectoryInventory, pick_generic_image, select_hero_image
from .hashing import normalize_domain
from .images.analysis import corner_background, foreground_tone
from .images.brand_mark import select_best_brand_mark
from .images.gradient import compute_gradient, gradient_colors_from_palettes
from .images.hero_scorer import evaluate_og_image, evaluate_scraped_heroes
from .images.loader import ImageLoader
from .images.palette_scorer import score_palette_diversity
from .io.models import (
    BrandMarkSelection,
    BrandSignals,
    DisciplineDetection,
    DiversityScore,
    ExtractedColor,
    GradientSpec,
    HeroSelection,
    OgHeroEvaluation,
    PortalColors,
    PortalData,
    PortalImages,
    PortalResult,
    RawOutputs,
    ScrapedHeroEvaluation,
    SlotDecision,
)
from .naming.company_name import company_name_from_signals
from .welcome import generate_welcome_message

logger = logging.getLogger(__name__)

GradientGenerator = Callable[[GradientSpec, str], str]

MAX_GRADIENT_SOURCE_IMAGES = 5


class _GradientSlot:
    """Calls the gradient generator at most once and remembers the outcome."""

    def __init__(self, generator: GradientGenerator | None, spec: GradientSpec, domain: str, enabled: bool) -> None:
        self._generator = generator
        self._spec = spec
        self._domain = domain
        self._enabled = enabled
        self._attempted = False
        self.url: str | None = None
        self.note = "not requested"

    def get(self) -> str | None:
        if self._attempted:
            return self.url
        self._attempted = True
        if not self._enabled:
            self.note = "disabled by configuration"
        elif self._generator is None:
            self.note = "no gradient generator configured"
        else:
            try:
                self.url = self._generator(self._spec, self._domain) or None
                self.note = f"rendered {self._spec.mode} gradient" if self.url else "generator returned nothing"
            except Exception as exc:  # noqa: BLE001 - external failure means "gradient unavailable"
                logger.warning("Gradient generation failed for %s: %s", self._domain, exc, exc_info=True)
                self.note = f"generator failed ({exc})"
        return self.url


def _scraped_palettes(signals: BrandSignals, loader: ImageLoader) -> List[List[ExtractedColor]]:
    palettes: List[List[ExtractedColor]] = []
    for image in signals.images:
        if len(palettes) == MAX_GRADIENT_SOURCE_IMAGES:
            break
        if image.url.startswith("data:"):
            continue
        asset = loader.load(image.url)
        if asset is None or asset.image is None:
            continue
        palette = extract_colors_with_details(asset.image)
        if palette:
            palettes.append(palette)
    return palettes


def _gradient_inputs(signals: BrandSignals, loader: ImageLoader, colors: PortalColors) -> List[str]:
    picked = gradient_colors_from_palettes(_scraped_palettes(signals, loader))
    return picked or [colors.accent, colors.sidebar_background]


def _login_slot(
    og: OgHeroEvaluation,
    scraped: ScrapedHeroEvaluation | None,
    hero: HeroSelection,
    gradient: _GradientSlot,
    static_image: str,
) -> tuple[SlotDecision, PortalImages]:
    trail: List[str] = []
    images = PortalImages()

    if og.og_image_url is None:
        trail.append("og: no og:image on page")
    elif og.passed and og.prepared is not None:
        trail.append(f"og: passed with total {og.score.total if og.score else 0}")
        prepared = og.prepared
        images.login_image = prepared.image_url
        images.login_image_orientation = prepared.orientation
        images.login_image_type = prepared.image_type
        images.login_image_edge_color = prepared.edge_color
        return SlotDecision("login", "og", prepared.image_url, trail), images
    else:
        reasons = "; ".join(og.score.reasons) if og.score else "not evaluated"
        trail.append(f"og: rejected ({reasons})")

    if scraped is None or scraped.candidates_considered == 0:
        trail.append("scraped: no usable hero candidates")
    elif scraped.passed and scraped.prepared is not None:
        prepared = scraped.prepared
        trail.append(
            f"scraped: {prepared.image_type} accepted after {scraped.candidates_tried} "
            f"of {scraped.candidates_considered} candidates"
        )
        images.login_image = prepared.image_url
        images.login_image_orientation = prepared.orientation
        images.login_image_type = prepared.image_type
        images.login_image_edge_color = prepared.edge_color
        return SlotDecision("login", "scraped", prepared.image_url, trail), images
    else:
        trail.append(f"scraped: none of {scraped.candidates_tried} tried candidates passed")

    trail.append(f"library: {hero.reason}")
    if hero.selected and hero.image_url:
        images.login_image = hero.image_url
        images.login_image_type = "photo"
        return SlotDecision("login", "library", hero.image_url, trail), images

    # Unconditional fallback; palette diversity only steers the dashboard slot.
    url = gradient.get()
    trail.append(f"gradient: {gradient.note}")
    if url:
        images.login_image = url
        images.login_image_orientation = "square"
        images.login_image_type = "gradient"
        return SlotDecision("login", "gradient", url, trail), images

    trail.append(f"static: {static_image}")
    images.login_image = static_image
    return SlotDecision("login", "static", static_image, trail), images


def _dashboard_slot(
    diversity: DiversityScore,
    gradient: _GradientSlot,
    generic_image: str | None,
    login_image: str | None,
    static_image: str,
) -> SlotDecision:
    trail: List[str] = [f"diversity: {diversity.reason}"]

    if diversity.use_gradient:
        url = gradient.get()
        trail.append(f"gradient: {gradient.note}")
        if url:
            return SlotDecision("dashboard", "gradient", url, trail)
    else:
        trail.append("gradient: palette not diverse enough, trying generic library")

    if generic_image:
        source = "generic_same_as_login" if generic_image == login_image else "generic"
        trail.append(f"{source}: {generic_image}")
        return SlotDecision("dashboard", source, generic_image, trail)
    trail.append("generic: no images in generic/ folder")

    if not diversity.use_gradient:
        url = gradient.get()
        trail.append(f"gradient: {gradient.note}")
        if url:
            return SlotDecision("dashboard", "gradient", url, trail)

    trail.append(f"static: {static_image}")
    return SlotDecision("dashboard", "static", static_image, trail)


def _square_icon_metadata(selection: BrandMarkSelection, loader: ImageLoader) -> tuple[str | None, str | None]:
    if selection.selected is None:
        return None, None
    asset = loader.load(selection.selected.url)
    if asset is None or asset.image is None:
        return None, None
    background = corner_background(asset.image)
    return background, foreground_tone(asset.image, background)


def build_portal(
    signals: BrandSignals,
    config: PipelineConfig | None = None,
    loader: ImageLoader | None = None,
    inventory: AssetInventory | None = None,
    gradient_generator: GradientGenerator | None = None,
) -> PortalResult:
    """Run the whole identity derivation for one site."""

    config = config or PipelineConfig()
    loader = loader or ImageLoader(timeout=config.fetch_timeout)
    inventory = inventory or DirectoryInventory(config.hero_assets_dir)
    domain = normalize_domain(signals.url)
    logger.info("Building portal identity for %s", domain)

    icon_colors = extract_accent(loader.load(signals.favicon))
    logo_colors = extract_accent(loader.load(signals.logo))
    accent = select_accent_color(icon_colors, logo_colors, signals.link_button_colors)
    all_colors: Sequence[str] = list(signals.colors) + [usage.color for usage in signals.colors_with_usage]
    scheme = generate_validated_color_scheme(
        signals.nav_header_background, accent, signals.link_button_colors, all_colors
    )
    colors = scheme.colors

    company = company_name_from_signals(signals)
    discipline = detect_discipline(signals)
    hero = select_hero_image(
        discipline,
        domain,
        inventory,
        allow_generic=config.allow_generic_library,
        url_prefix=config.hero_url_prefix,
    )
    welcome = generate_welcome_message(company.selected_name, discipline.discipline, discipline.confidence, domain)

    brand_mark = select_best_brand_mark(signals.favicon, signals.logo, signals.manifest_icons, loader)
    icon_bg, icon_fg = _square_icon_metadata(brand_mark, loader)

    gradient_spec = compute_gradient(_gradient_inputs(signals, loader, colors), domain)
    diversity = score_palette_diversity(gradient_spec.stops, used_preset=gradient_spec.mode == "preset")
    gradient = _GradientSlot(gradient_generator, gradient_spec, domain, config.gradient_enabled)

    og = evaluate_og_image(signals.og_image, loader)
    scraped = None
    if not og.passed:
        scraped = evaluate_scraped_heroes(signals.images, signals.og_image, loader, config.max_scraped_hero_tries)

    login, images = _login_slot(og, scraped, hero, gradient, config.static_fallback_image)
    generic_image = pick_generic_image(domain, inventory, config.hero_url_prefix)
    dashboard = _dashboard_slot(diversity, gradient, generic_image, images.login_image, config.static_fallback_image)
    for decision in (login, dashboard):
        logger.info("%s image for %s: %s (%s)", decision.slot, domain, decision.source, decision.image_url)

    images.square_icon = brand_mark.selected.url if brand_mark.selected else None
    images.square_icon_bg = icon_bg
    images.square_icon_fg = icon_fg
    images.logo_dominant_color = logo_colors[0].color if logo_colors else None
    images.full_logo = signals.logo
    images.dashboard_image = dashboard.image_url
    images.social_image = signals.og_image or gradient.get()
    images.raw_favicon_url = signals.favicon
    images.raw_logo_url = signals.logo

    detection = DisciplineDetection(
        discipline=discipline.discipline,
        confidence=discipline.confidence,
        signals=list(discipline.signals),
        hero_selection=hero,
        login_image_source=login.source,
        dashboard_image_source=dashboard.source,
    )
    raw = RawOutputs(
        scraped_colors=list(signals.colors),
        scraped_images=list(signals.images),
        extracted_meta=dict(signals.meta),
        accent_color_source=scheme.accent.source,
        accent_color_confidence=scheme.accent.confidence,
        nav_header_background=signals.nav_header_background,
        sidebar_color_source=scheme.sidebar_source,
        quality_gate=scheme.quality_gate,
        discipline_detection=detection,
        gradient=gradient_spec,
        diversity_score=diversity,
        company_name=company,
        brand_mark=brand_mark,
        og_hero=og,
        scraped_hero=scraped,
        welcome_message_source=welcome.source,
        login_slot=login,
        dashboard_slot=dashboard,
    )
    data = PortalData(
        company_name=company.selected_name,
        colors=colors,
        images=images,
        welcome_message=welcome.text,
    )
    return PortalResult(data=data, raw_outputs=raw)
