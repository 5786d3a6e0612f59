"""Resolve the canonical company name from competing page signals."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Sequence

from ..io.models import BrandSignals, CompanyNameCandidate, CompanyNameResult
from .domain_splitter import name_from_domain
from .url import domain_stem

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = "Company"
FALLBACK_NAME = "Workspace"

_LEGAL_SUFFIX_RE = re.compile(
    r",?\s*\b(inc\.?|llc\.?|ltd\.?|corp\.?|corporation|company|co\.?|limited|incorporated|plc\.?)$",
    re.IGNORECASE,
)
_TAGLINE_RES = (
    re.compile(r"\s+-\s+.+$"),
    re.compile(r"\s*\|.+$"),
    re.compile(r"\s*–.+$"),
    re.compile(r"\s*—.+$"),
    re.compile(r"\s*:.+$"),
)
_SEPARATOR_RE = re.compile(r"\s-\s|[|–—:]")

# (meta key or "title"/"domain", base score); order doubles as tie-break priority.
SOURCES = (
    ("og:site_name", 40),
    ("application-name", 35),
    ("og:title", 30),
    ("twitter:title", 25),
    ("title", 20),
    ("domain", 10),
)
SOURCE_PRIORITY = {name: index for index, (name, _) in enumerate(SOURCES)}
BASE_SCORES = dict(SOURCES)

GENERIC_TITLES = {"home", "welcome", "homepage", "home page", "index", "untitled", "main"}
MAX_NAME_LENGTH = 40
MAX_NAME_WORDS = 5


def clean_company_name(raw: str | None) -> str:
    """Strip taglines and legal suffixes; an empty result becomes ``"Company"``."""
    if not raw:
        return DEFAULT_COMPANY
    cleaned = raw.strip()
    for pattern in _TAGLINE_RES:
        cleaned = pattern.sub("", cleaned)
    cleaned = _LEGAL_SUFFIX_RE.sub("", cleaned.strip()).strip(" ,.&")
    return cleaned or DEFAULT_COMPANY


def _compact(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def collect_name_candidates(
    title: str | None, meta: Mapping[str, str], url: str
) -> List[CompanyNameCandidate]:
    """One candidate per source that carries a value, in source order."""
    lowered = {k.lower(): v for k, v in meta.items()}
    raw_values = {
        "og:site_name": lowered.get("og:site_name"),
        "application-name": lowered.get("application-name"),
        "og:title": lowered.get("og:title"),
        "twitter:title": lowered.get("twitter:title"),
        "title": title,
    }
    candidates: List[CompanyNameCandidate] = []
    for source, _ in SOURCES:
        if source == "domain":
            guess = name_from_domain(url)
            if guess:
                candidates.append(CompanyNameCandidate(value=guess, source="domain", parent_source="url"))
            continue
        value = raw_values.get(source)
        if value and value.strip():
            candidates.append(CompanyNameCandidate(value=value.strip(), source=source))
    return candidates


def score_candidate(candidate: CompanyNameCandidate, stem: str) -> CompanyNameCandidate:
    """Score the raw value and return a new candidate holding the cleaned name."""
    raw = candidate.value
    base = BASE_SCORES.get(candidate.source, 0)
    score = float(base)
    reasons = [f"base {candidate.source} +{base}"]

    if candidate.source != "domain" and _SEPARATOR_RE.search(raw):
        score -= 10
        reasons.append("tagline separator -10")

    cleaned = clean_company_name(raw)
    letters = [c for c in cleaned if c.isalpha()]
    if letters and cleaned == cleaned.lower():
        score -= 8
        reasons.append("all lowercase -8")
    elif len(letters) > 4 and cleaned == cleaned.upper():
        score -= 5
        reasons.append("all uppercase -5")

    if len(cleaned) > MAX_NAME_LENGTH:
        score -= 10
        reasons.append(f"longer than {MAX_NAME_LENGTH} chars -10")
    elif len(cleaned.split()) > MAX_NAME_WORDS:
        score -= 5
        reasons.append(f"more than {MAX_NAME_WORDS} words -5")

    if cleaned.lower() in GENERIC_TITLES or raw.strip().lower() in GENERIC_TITLES:
        score -= 30
        reasons.append("generic page title -30")

    if stem and candidate.source != "domain" and _compact(cleaned) == _compact(stem):
        score += 15
        reasons.append("matches domain +15")

    return CompanyNameCandidate(
        value=cleaned,
        source=candidate.source,
        parent_source=candidate.parent_source,
        score=score,
        reasons=reasons,
    )


def rank_candidates(candidates: Iterable[CompanyNameCandidate]) -> List[CompanyNameCandidate]:
    return sorted(
        candidates,
        key=lambda c: (-c.score, SOURCE_PRIORITY.get(c.source, len(SOURCE_PRIORITY))),
    )


def resolve_company_name(candidates: Sequence[CompanyNameCandidate], url: str) -> CompanyNameResult:
    """Score every candidate and pick the best; re-running gives the same ranking."""
    stem = domain_stem(url)
    scored = rank_candidates(score_candidate(c, stem) for c in candidates)
    if scored:
        return CompanyNameResult(selected_name=scored[0].value, candidates=scored)
    return CompanyNameResult(selected_name=name_from_domain(url) or FALLBACK_NAME, candidates=[])


def company_name_from_signals(signals: BrandSignals) -> CompanyNameResult:
    candidates = collect_name_candidates(signals.title, signals.meta, signals.url)
    result = resolve_company_name(candidates, signals.url)
    logger.info("Company name %r from %d candidates", result.selected_name, len(result.candidates))
    return result
