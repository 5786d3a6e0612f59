"""Keyword-based industry classifier.

Phrases are matched as substrings of a lower-cased corpus built from the page
title, description, meta values and hostname. Each label sums the weights of
its matched phrases; the leader wins and its confidence shrinks when the
runner-up is close behind.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Tuple

from ..hashing import normalize_domain
from ..io.models import BrandSignals, DisciplineResult

logger = logging.getLogger(__name__)

GENERIC = "generic"

KEYWORDS: Dict[str, Tuple[Tuple[str, float], ...]] = {
    "accounting": (
        ("accounting", 0.30), ("bookkeeping", 0.30), ("cpa", 0.25), ("tax preparation", 0.25),
        ("tax advisory", 0.25), ("tax filing", 0.20), ("audit", 0.15), ("payroll", 0.15),
        ("financial statement", 0.15), ("gaap", 0.20), ("enrolled agent", 0.20), ("quickbooks", 0.10),
        ("xero", 0.10), ("accounts receivable", 0.15), ("accounts payable", 0.15),
    ),
    "legal": (
        ("law firm", 0.30), ("attorney", 0.30), ("lawyer", 0.30), ("legal services", 0.30),
        ("litigation", 0.25), ("legal counsel", 0.25), ("paralegal", 0.20), ("family law", 0.25),
        ("corporate law", 0.25), ("intellectual property", 0.20), ("immigration law", 0.25),
        ("estate planning", 0.20), ("personal injury", 0.20), ("notary", 0.15), ("legal practice", 0.25),
    ),
    "marketing": (
        ("marketing agency", 0.30), ("digital marketing", 0.30), ("creative agency", 0.30),
        ("advertising agency", 0.25), ("branding agency", 0.25), ("social media marketing", 0.25),
        ("seo agency", 0.25), ("content marketing", 0.20), ("graphic design", 0.20),
        ("web design agency", 0.20), ("pr agency", 0.20), ("public relations", 0.20),
        ("brand strategy", 0.20), ("media buying", 0.15), ("copywriting", 0.15),
    ),
    "consulting": (
        ("consulting firm", 0.30), ("management consulting", 0.30), ("strategy consulting", 0.30),
        ("business consulting", 0.30), ("fractional", 0.25), ("advisory firm", 0.25),
        ("consultancy", 0.25), ("business strategy", 0.20), ("transformation", 0.10),
        ("change management", 0.15), ("operational excellence", 0.15), ("management advisory", 0.20),
        ("strategic advisor", 0.20), ("consulting services", 0.25), ("executive coaching", 0.15),
    ),
    "realestate": (
        ("real estate", 0.30), ("property management", 0.30), ("realty", 0.30), ("realtor", 0.30),
        ("rental management", 0.25), ("brokerage", 0.20), ("commercial property", 0.25),
        ("residential property", 0.25), ("property listing", 0.20), ("leasing", 0.15),
        ("mortgage", 0.15), ("home buying", 0.20), ("real estate agent", 0.30),
        ("property investment", 0.20), ("mls", 0.15),
    ),
    "technology": (
        ("saas", 0.25), ("software company", 0.25), ("developer tools", 0.25), ("api platform", 0.25),
        ("cloud platform", 0.20), ("devops", 0.20), ("open source", 0.15),
        ("software development", 0.20), ("tech startup", 0.25), ("infrastructure", 0.10),
        ("platform", 0.08), ("developer", 0.10), ("sdk", 0.20), ("deploy", 0.10), ("engineering", 0.08),
    ),
    "finance": (
        ("financial planning", 0.30), ("wealth management", 0.30), ("financial advisor", 0.30),
        ("investment management", 0.25), ("insurance broker", 0.25), ("insurance agency", 0.25),
        ("fintech", 0.25), ("financial services", 0.25), ("asset management", 0.20),
        ("portfolio management", 0.20), ("retirement planning", 0.20), ("fiduciary", 0.20),
        ("registered investment", 0.25), ("financial institution", 0.20), ("banking", 0.15),
    ),
    "healthcare": (
        ("healthcare", 0.30), ("medical practice", 0.30), ("clinic", 0.20), ("telehealth", 0.25),
        ("health provider", 0.25), ("dental", 0.25), ("therapy", 0.15), ("therapist", 0.20),
        ("wellness", 0.15), ("patient portal", 0.30), ("hipaa", 0.25), ("mental health", 0.20),
        ("physician", 0.25), ("chiropractic", 0.25), ("optometry", 0.25),
    ),
    "education": (
        ("edtech", 0.25), ("online learning", 0.25), ("education platform", 0.25), ("e-learning", 0.25),
        ("tutoring", 0.25), ("coaching", 0.15), ("training provider", 0.20), ("course", 0.10),
        ("curriculum", 0.20), ("lms", 0.20), ("learning management", 0.25), ("academy", 0.15),
        ("certification", 0.10), ("corporate training", 0.20), ("instructor", 0.10),
    ),
    "operations": (
        ("operations management", 0.25), ("helpdesk", 0.20), ("it service", 0.20),
        ("managed service", 0.25), ("hr platform", 0.20), ("human resources", 0.20),
        ("procurement", 0.15), ("workforce management", 0.20), ("it management", 0.20),
        ("service desk", 0.20), ("facility management", 0.20), ("back office", 0.15),
        ("business process", 0.15), ("msp", 0.20), ("itsm", 0.20),
    ),
}

DISCIPLINES: Tuple[str, ...] = tuple(KEYWORDS) + (GENERIC,)

# Summed weight at which confidence saturates.
SATURATION_SCORE = 0.60
CLOSE_RACE_MARGIN = 0.30
CLOSE_RACE_FACTOR = 0.7


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def build_corpus(
    title: str | None = None,
    description: str | None = None,
    meta: Mapping[str, str] | None = None,
    url: str | None = None,
) -> str:
    parts: List[str] = [p for p in (title, description) if p]
    parts.extend(v for v in (meta or {}).values() if isinstance(v, str) and v)
    host = normalize_domain(url or "")
    if host:
        parts.append(host)
    return " ".join(parts).lower().strip()


def score_corpus(corpus: str) -> Dict[str, Tuple[float, List[str]]]:
    """Summed weight and matched phrases per label, in label order."""
    results: Dict[str, Tuple[float, List[str]]] = {}
    for label, bank in KEYWORDS.items():
        total = 0.0
        matched: List[str] = []
        for phrase, weight in bank:
            if phrase in corpus:
                total += weight
                matched.append(phrase)
        results[label] = (total, matched)
    return results


def classify_text(corpus: str) -> DisciplineResult:
    if not corpus.strip():
        return DisciplineResult(GENERIC, 0.0, ["no-text-available"])

    scored = score_corpus(corpus.lower())
    # sorted() is stable, so equal scores keep label order.
    ranked = sorted(scored.items(), key=lambda item: item[1][0], reverse=True)
    best_label, (best, matched) = ranked[0]
    if best <= 0:
        return DisciplineResult(GENERIC, 0.0, ["no-keyword-matches"])

    runner_up = ranked[1][1][0] if len(ranked) > 1 else 0.0
    confidence = min(best / SATURATION_SCORE, 1.0)
    if (best - runner_up) / best < CLOSE_RACE_MARGIN:
        confidence *= CLOSE_RACE_FACTOR
    return DisciplineResult(best_label, _round2(confidence), matched)


def detect_discipline(signals: BrandSignals) -> DisciplineResult:
    """Classify a site from its scraped text signals."""
    corpus = build_corpus(signals.title, signals.description, signals.meta, signals.url)
    result = classify_text(corpus)
    logger.info(
        "Discipline %s (confidence %.2f) from %s",
        result.discipline,
        result.confidence,
        ", ".join(result.signals) or "-",
    )
    return result
