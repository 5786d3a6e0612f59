"""Curated login-hero library and the confidence gate in front of it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..hashing import normalize_domain, stable_hash
from ..io.models import DisciplineResult, HeroSelection
from .detector import GENERIC

logger = logging.getLogger(__name__)

DISCIPLINE_CONFIDENCE_THRESHOLD = 0.55
GENERIC_CONFIDENCE_THRESHOLD = 0.85
IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}
DEFAULT_URL_PREFIX = "/assets/login-hero"


class AssetInventory:
    """Read-only lookup from discipline label to sorted image identifiers."""

    def list_images(self, discipline: str) -> List[str]:
        raise NotImplementedError


class DirectoryInventory(AssetInventory):
    """Inventory backed by ``<root>/<discipline>/`` folders on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def list_images(self, discipline: str) -> List[str]:
        folder = self.root / discipline
        if not folder.is_dir():
            return []
        return sorted(
            p.name for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES
        )


class StaticInventory(AssetInventory):
    """In-memory inventory, mostly for tests and fixtures."""

    def __init__(self, mapping: Mapping[str, Sequence[str]] | None = None) -> None:
        self._mapping: Dict[str, List[str]] = {k: sorted(v) for k, v in (mapping or {}).items()}

    def list_images(self, discipline: str) -> List[str]:
        return list(self._mapping.get(discipline, []))


def _rejected(detection: DisciplineResult, reason: str) -> HeroSelection:
    return HeroSelection(
        selected=False,
        image_url=None,
        discipline=detection.discipline,
        confidence=detection.confidence,
        reason=reason,
    )


def select_hero_image(
    detection: DisciplineResult,
    domain_or_url: str,
    inventory: AssetInventory,
    allow_generic: bool = False,
    url_prefix: str = DEFAULT_URL_PREFIX,
) -> HeroSelection:
    """Pick a curated image for the detected discipline, or explain why not.

    The chosen file is ``stable_hash(domain) % count`` over the sorted
    folder listing, so the same site always lands on the same photo.
    """

    discipline, confidence = detection.discipline, detection.confidence
    if discipline == GENERIC:
        if confidence < GENERIC_CONFIDENCE_THRESHOLD and not allow_generic:
            return _rejected(
                detection,
                f"generic requires confidence >= {GENERIC_CONFIDENCE_THRESHOLD} "
                f"or ALLOW_GENERIC_LIBRARY flag (got {confidence})",
            )
    elif confidence < DISCIPLINE_CONFIDENCE_THRESHOLD:
        return _rejected(detection, f"confidence {confidence} below threshold {DISCIPLINE_CONFIDENCE_THRESHOLD}")

    images = inventory.list_images(discipline)
    if not images:
        return _rejected(detection, f"no images in {discipline}/ folder")

    domain = normalize_domain(domain_or_url)
    h = stable_hash(domain)
    index = h % len(images)
    url = f"{url_prefix.rstrip('/')}/{discipline}/{images[index]}"
    logger.debug("Hero library pick for %s: %s", domain, url)
    return HeroSelection(
        selected=True,
        image_url=url,
        discipline=discipline,
        confidence=confidence,
        reason=f'matched {discipline} with confidence {confidence}, hash("{domain}")={h} → index {index}/{len(images)}',
        available_count=len(images),
        chosen_index=index,
    )


def pick_generic_image(
    domain_or_url: str, inventory: AssetInventory, url_prefix: str = DEFAULT_URL_PREFIX
) -> str | None:
    """Unconditional pick from the generic library, used for the dashboard."""
    images = inventory.list_images(GENERIC)
    if not images:
        return None
    index = stable_hash(normalize_domain(domain_or_url)) % len(images)
    return f"{url_prefix.rstrip('/')}/{GENERIC}/{images[index]}"
