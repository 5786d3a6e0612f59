"""Data models shared across the portal branding pipeline."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _strings(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


@dataclass(frozen=True, slots=True)
class ScrapedImage:
    """An image reference found on the scraped page."""

    url: str
    width: int | None = None
    height: int | None = None
    type: str = "hero"


@dataclass(frozen=True, slots=True)
class ColorUsage:
    color: str
    count: int = 0
    sources: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BrandSignals:
    """Raw signals handed over by the scraper for a single website."""

    url: str
    title: str | None = None
    description: str | None = None
    favicon: str | None = None
    logo: str | None = None
    og_image: str | None = None
    nav_header_background: str | None = None
    link_button_colors: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    colors_with_usage: List[ColorUsage] = field(default_factory=list)
    images: List[ScrapedImage] = field(default_factory=list)
    meta: Dict[str, str] = field(default_factory=dict)
    manifest_icons: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "BrandSignals":
        """Build signals from scraper JSON, accepting camelCase or snake_case keys."""

        data = {_snake(str(key)): value for key, value in payload.items()}
        url = _text(data.get("url"))
        if url is None:
            raise ValueError("brand signals require a 'url'")

        images: List[ScrapedImage] = []
        for item in data.get("images") or []:
            if not isinstance(item, Mapping) or not _text(item.get("url")):
                continue
            images.append(
                ScrapedImage(
                    url=item["url"].strip(),
                    width=_int(item.get("width")),
                    height=_int(item.get("height")),
                    type=_text(item.get("type")) or "hero",
                )
            )

        usage: List[ColorUsage] = []
        for item in data.get("colors_with_usage") or []:
            if not isinstance(item, Mapping) or not _text(item.get("color")):
                continue
            usage.append(
                ColorUsage(
                    color=item["color"].strip(),
                    count=_int(item.get("count")) or 0,
                    sources=_strings(item.get("sources")),
                )
            )

        meta_raw = data.get("meta") or {}
        meta = {
            str(key): value.strip()
            for key, value in meta_raw.items()
            if isinstance(value, str) and value.strip()
        } if isinstance(meta_raw, Mapping) else {}

        return cls(
            url=url,
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            favicon=_text(data.get("favicon")),
            logo=_text(data.get("logo")),
            og_image=_text(data.get("og_image")),
            nav_header_background=_text(data.get("nav_header_background")),
            link_button_colors=_strings(data.get("link_button_colors")),
            colors=_strings(data.get("colors")),
            colors_with_usage=usage,
            images=images,
            meta=meta,
            manifest_icons=_strings(data.get("manifest_icons")),
        )


@dataclass(frozen=True, slots=True)
class DisciplineResult:
    discipline: str
    confidence: float
    signals: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ExtractedColor:
    """A quantised color found in an icon or logo, ranked by vibrancy."""

    color: str
    pixel_count: int
    saturation: float
    is_high_confidence: bool


@dataclass(frozen=True, slots=True)
class ColorCandidate:
    color: str | None
    source: str = "none"
    confidence: str = "low"

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence == "high"


@dataclass(frozen=True, slots=True)
class AccentSelection:
    """Winning accent plus the saturation evidence the quality gate needs."""

    result: ColorCandidate
    saturation: float = 0.0
    favicon_saturation: float | None = None
    logo_saturation: float | None = None
    brand_hue: float | None = None


@dataclass(slots=True)
class PortalColors:
    sidebar_background: str
    sidebar_text: str
    accent: str


@dataclass(frozen=True, slots=True)
class SidebarColors:
    sidebar_background: str
    sidebar_text: str
    source: str


@dataclass(slots=True)
class QualityCheck:
    passed: bool
    detail: str


@dataclass(slots=True)
class QualityGateResult:
    passed: bool
    checks: Dict[str, QualityCheck]
    adjustments: List[str]
    original_colors: PortalColors
    final_colors: PortalColors
    iterations: int
    accent_promotion: bool = False
    monochrome: bool = False


@dataclass(slots=True)
class ColorScheme:
    """Validated colors together with the decisions that produced them."""

    colors: PortalColors
    accent: ColorCandidate
    sidebar_source: str
    quality_gate: QualityGateResult


@dataclass(slots=True)
class GradientSpec:
    stops: List[str]
    angle: int
    mode: str
    reason: str
    preset_name: str | None = None
    input_colors: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DiversityScore:
    score: float
    use_gradient: bool
    reason: str


@dataclass(frozen=True, slots=True)
class HeroSelection:
    selected: bool
    image_url: str | None
    discipline: str
    confidence: float
    reason: str
    available_count: int = 0
    chosen_index: int = -1


@dataclass(slots=True)
class BrandMarkScores:
    aspect: float = 0.0
    resolution: float = 0.0
    complexity: float = 0.0
    source: float = 0.0
    monogram: float = 0.0


@dataclass(slots=True)
class BrandMarkCandidate:
    url: str
    source: str
    width: int = 0
    height: int = 0
    aspect_ratio: float = 0.0
    resolution: int = 0
    unique_color_count: int = 0
    is_likely_monogram: bool = False
    monogram_confidence: float = 0.0
    smooth_ratio: float = 0.0
    photo_penalty: float = 1.0
    scores: BrandMarkScores = field(default_factory=BrandMarkScores)
    total_score: float = 0.0
    disqualified: bool = False
    disqualify_reason: str | None = None


@dataclass(slots=True)
class BrandMarkSelection:
    selected: BrandMarkCandidate | None
    candidates: List[BrandMarkCandidate]
    fallback_to_initials: bool
    log: List[str] = field(default_factory=list)

    @property
    def selected_source(self) -> str:
        return self.selected.source if self.selected else "initials"


@dataclass(slots=True)
class CompanyNameCandidate:
    value: str
    source: str
    parent_source: str | None = None
    score: float = 0.0
    reasons: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CompanyNameResult:
    selected_name: str
    candidates: List[CompanyNameCandidate]


@dataclass(slots=True)
class HeroImageScores:
    resolution: float = 0.0
    aspect_ratio: float = 0.0
    complexity: float = 0.0
    area: float = 0.0
    edge_density: float = 0.0
    spatial_spread: float = 0.0


@dataclass(slots=True)
class HeroImageScore:
    scores: HeroImageScores
    total: float
    passed: bool
    reasons: List[str] = field(default_factory=list)


@dataclass(slots=True)
class HeroClassification:
    type: str
    confidence: float
    text_likelihood: float
    signals: Dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class PreparedHero:
    """A scraped photo accepted for the login slot, with layout hints."""

    image_url: str
    orientation: str
    image_type: str
    confidence: float
    text_likelihood: float
    edge_color: str | None = None


@dataclass(slots=True)
class OgHeroEvaluation:
    og_image_url: str | None
    passed: bool
    score: HeroImageScore | None = None
    prepared: PreparedHero | None = None


@dataclass(slots=True)
class ScrapedHeroEvaluation:
    image_url: str | None
    passed: bool
    score: HeroImageScore | None = None
    prepared: PreparedHero | None = None
    candidates_considered: int = 0
    candidates_tried: int = 0


@dataclass(slots=True)
class SlotDecision:
    """Audit trail for one image slot walking through the cascade."""

    slot: str
    source: str
    image_url: str | None
    trail: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class WelcomeMessage:
    text: str
    source: str


@dataclass(slots=True)
class DisciplineDetection:
    discipline: str
    confidence: float
    signals: List[str]
    hero_selection: HeroSelection
    login_image_source: str
    dashboard_image_source: str


@dataclass(slots=True)
class PortalImages:
    square_icon: str | None = None
    square_icon_bg: str | None = None
    square_icon_fg: str | None = None
    logo_dominant_color: str | None = None
    full_logo: str | None = None
    login_image: str | None = None
    login_image_orientation: str | None = None
    login_image_type: str | None = None
    login_image_edge_color: str | None = None
    dashboard_image: str | None = None
    social_image: str | None = None
    raw_favicon_url: str | None = None
    raw_logo_url: str | None = None


@dataclass(slots=True)
class PortalData:
    company_name: str
    colors: PortalColors
    images: PortalImages
    welcome_message: str


@dataclass(slots=True)
class RawOutputs:
    """Full decision trace kept for operators; not needed for rendering."""

    scraped_colors: List[str]
    scraped_images: List[ScrapedImage]
    extracted_meta: Dict[str, str]
    accent_color_source: str
    accent_color_confidence: str
    nav_header_background: str | None
    sidebar_color_source: str
    quality_gate: QualityGateResult
    discipline_detection: DisciplineDetection
    gradient: GradientSpec
    diversity_score: DiversityScore
    company_name: CompanyNameResult
    brand_mark: BrandMarkSelection
    og_hero: OgHeroEvaluation
    scraped_hero: ScrapedHeroEvaluation | None
    welcome_message_source: str
    login_slot: SlotDecision
    dashboard_slot: SlotDecision


@dataclass(slots=True)
class PortalResult:
    data: PortalData
    raw_outputs: RawOutputs

    def to_dict(self) -> Dict[str, Any]:
        return {"data": asdict(self.data), "raw_outputs": asdict(self.raw_outputs)}
