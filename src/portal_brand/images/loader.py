"""Decode fetched bytes into Pillow images, caching per reference."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Callable, Dict

from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from .fetch import DEFAULT_TIMEOUT, load_bytes

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, float], "bytes | None"]


@dataclass(slots=True)
class LoadedAsset:
    """An image reference resolved to bytes and, when decodable, pixels."""

    url: str
    data: bytes
    image: Image.Image | None
    svg_text: str | None = None

    @property
    def is_svg(self) -> bool:
        return self.svg_text is not None


def looks_like_svg(data: bytes) -> bool:
    head = data.lstrip()[:512].lower()
    return head.startswith(b"<") and (b"<svg" in head or head.startswith(b"<?xml"))


def decode_image(data: bytes) -> Image.Image | None:
    """Open raster bytes (ICO files resolve to their largest frame)."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, DecompressionBombError, OSError, ValueError):
        logger.debug("Unable to decode image payload", exc_info=True)
    return None


def rasterize_svg(svg_text: str) -> Image.Image | None:
    if cairosvg is None:
        return None
    try:
        png = cairosvg.svg2png(bytestring=svg_text.encode("utf-8"))  # type: ignore[attr-defined]
    except Exception:  # noqa: BLE001 - malformed SVG is a missing signal
        logger.debug("SVG rasterisation failed", exc_info=True)
        return None
    return decode_image(png)


class ImageLoader:
    """Fetch-and-decode front end shared by every image consumer of one request."""

    def __init__(self, fetch: Fetcher | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._fetch = fetch or (lambda ref, t: load_bytes(ref, timeout=t))
        self._timeout = timeout
        self._cache: Dict[str, LoadedAsset | None] = {}

    def load(self, ref: str | None) -> LoadedAsset | None:
        if not ref:
            return None
        if ref not in self._cache:
            self._cache[ref] = self._load(ref)
        return self._cache[ref]

    def _load(self, ref: str) -> LoadedAsset | None:
        data = self._fetch(ref, self._timeout)
        if not data:
            logger.debug("No bytes for %s", ref[:120])
            return None
        if looks_like_svg(data):
            svg_text = data.decode("utf-8", errors="ignore")
            return LoadedAsset(url=ref, data=data, image=rasterize_svg(svg_text), svg_text=svg_text)
        image = decode_image(data)
        if image is None:
            logger.info("Unreadable image data for %s", ref[:120])
        return LoadedAsset(url=ref, data=data, image=image)
