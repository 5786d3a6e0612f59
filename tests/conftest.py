"""
Pytest configuration for portal_brand tests

Provides in-memory image factories and a loader that never touches the network.
"""

import io
from typing import Dict, Optional

import numpy as np
import pytest
from PIL import Image, ImageDraw

from portal_brand.images.loader import ImageLoader


def png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def solid_image(color, size=(64, 64), mode="RGB") -> Image.Image:
    return Image.new(mode, size, color)


def glyph_image(size=64, background=(255, 255, 255), ink=(20, 20, 20), box=0.2) -> Image.Image:
    """Small dark square centred on a light background, like a monogram."""
    img = Image.new("RGB", (size, size), background)
    draw = ImageDraw.Draw(img)
    half = int(size * box / 2)
    centre = size // 2
    draw.rectangle([centre - half, centre - half, centre + half, centre + half], fill=ink)
    return img


def mosaic_image(width=1200, height=800, blocks=(32, 24), seed=7) -> Image.Image:
    """Random colored blocks scaled up; busy enough to pass as a photo."""
    rng = np.random.default_rng(seed)
    tiles = rng.integers(0, 256, size=(blocks[1], blocks[0], 3), dtype=np.uint8)
    return Image.fromarray(tiles).resize((width, height), Image.Resampling.NEAREST)


def multicolor_icon(size=192) -> Image.Image:
    img = Image.new("RGB", (size, size), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    colors = [(225, 29, 72), (37, 99, 235), (22, 163, 74), (234, 179, 8)]
    step = size // 4
    for i, color in enumerate(colors):
        draw.rectangle([i * step, 0, (i + 1) * step - 1, size - 1], fill=color)
    draw.ellipse([size // 4, size // 4, 3 * size // 4, 3 * size // 4], fill=(15, 23, 42))
    return img


class FakeFetcher:
    """Maps references to canned bytes and counts calls per reference."""

    def __init__(self, payloads: Optional[Dict[str, bytes]] = None):
        self.payloads = dict(payloads or {})
        self.calls: Dict[str, int] = {}

    def __call__(self, ref: str, timeout: float) -> Optional[bytes]:
        self.calls[ref] = self.calls.get(ref, 0) + 1
        return self.payloads.get(ref)


@pytest.fixture
def make_loader():
    """Build an ImageLoader from a ``{ref: Image | bytes}`` mapping."""

    def _make(assets: Optional[Dict[str, object]] = None):
        payloads: Dict[str, bytes] = {}
        for ref, value in (assets or {}).items():
            payloads[ref] = png_bytes(value) if isinstance(value, Image.Image) else value
        fetcher = FakeFetcher(payloads)
        loader = ImageLoader(fetch=fetcher)
        loader.fetcher = fetcher
        return loader

    return _make
