"""Stable string hashing used for every deterministic "pick one of N" decision."""

from __future__ import annotations

from urllib.parse import urlparse

_SEED = 5381
_MASK = 0xFFFFFFFF


def stable_hash(value: str) -> int:
    """Return the djb2 hash of ``value`` as an unsigned 32-bit integer.

    The result is identical across interpreters and platforms, unlike the
    builtin ``hash`` which is salted per process.
    """

    h = _SEED
    for char in value:
        h = (h * 33 + ord(char)) & _MASK
    return h


def normalize_domain(value: str) -> str:
    """Reduce a URL or bare domain to its lower-cased hostname without ``www.``."""

    candidate = (value or "").strip()
    if not candidate:
        return ""
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        hostname = urlparse(candidate).hostname
    except ValueError:
        hostname = None
    if not hostname:
        return value.strip().lower()
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def pick_index(key: str, count: int) -> int:
    if count <= 0:
        return -1
    return stable_hash(key) % count
