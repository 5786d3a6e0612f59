"""Parse the user-supplied site reference (URL, email address or bare domain)."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from ..hashing import normalize_domain

_EMAIL_RE = re.compile(r"^[^@\s]+@([^@\s]+\.[^@\s]+)$")


def parse_input(value: str) -> str | None:
    """Return an ``https://`` URL for *value*, or ``None`` if there is no host.

    Email addresses resolve to their domain, so ``jane@acme.com`` becomes
    ``https://acme.com``.
    """

    text = (value or "").strip()
    if not text:
        return None
    match = _EMAIL_RE.match(text)
    if match:
        text = match.group(1)
    if "://" not in text:
        text = f"https://{text.lstrip('/')}"
    try:
        parsed = urlparse(text)
    except ValueError:
        return None
    if not parsed.hostname or "." not in parsed.hostname:
        return None
    return text


def extract_domain(value: str) -> str:
    return normalize_domain(value)


def domain_stem(value: str) -> str:
    """First label of the hostname: ``www.jungle-luxe.co.uk`` → ``jungle-luxe``."""
    host = normalize_domain(value)
    return host.split(".")[0] if host else ""
