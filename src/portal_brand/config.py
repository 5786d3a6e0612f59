"""Runtime configuration for the portal branding pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@dataclass(slots=True)
class PipelineConfig:
    """Explicit switches threaded through the pipeline instead of module globals."""

    allow_generic_library: bool = False
    hero_assets_dir: Path = Path("assets/login-hero")
    hero_url_prefix: str = "/assets/login-hero"
    static_fallback_image: str = "/assets/login-hero/fallback.jpg"
    gradient_enabled: bool = True
    fetch_timeout: float = 10.0
    max_scraped_hero_tries: int = 3

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PipelineConfig":
        env = os.environ if environ is None else environ
        config = cls()
        if "PORTAL_ALLOW_GENERIC_LIBRARY" in env:
            config.allow_generic_library = _flag(env["PORTAL_ALLOW_GENERIC_LIBRARY"])
        elif "ALLOW_GENERIC_LIBRARY" in env:
            config.allow_generic_library = _flag(env["ALLOW_GENERIC_LIBRARY"])
        if env.get("PORTAL_HERO_ASSETS_DIR"):
            config.hero_assets_dir = Path(env["PORTAL_HERO_ASSETS_DIR"])
        if env.get("PORTAL_HERO_URL_PREFIX"):
            config.hero_url_prefix = env["PORTAL_HERO_URL_PREFIX"].rstrip("/")
        if env.get("PORTAL_STATIC_FALLBACK"):
            config.static_fallback_image = env["PORTAL_STATIC_FALLBACK"]
        if "PORTAL_GRADIENT_ENABLED" in env:
            config.gradient_enabled = _flag(env["PORTAL_GRADIENT_ENABLED"])
        if env.get("PORTAL_FETCH_TIMEOUT"):
            config.fetch_timeout = float(env["PORTAL_FETCH_TIMEOUT"])
        if env.get("PORTAL_MAX_HERO_TRIES"):
            config.max_scraped_hero_tries = int(env["PORTAL_MAX_HERO_TRIES"])
        return config
