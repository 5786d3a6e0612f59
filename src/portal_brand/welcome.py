"""Welcome message shown in the portal's Messages view."""

from __future__ import annotations

from typing import Dict, Tuple

from .discipline.detector import GENERIC
from .hashing import normalize_domain, stable_hash
from .io.models import WelcomeMessage

# Stricter than the hero library gate (0.55).
MIN_CONFIDENCE = 0.65

DEFAULT_TEMPLATE = (
    "Welcome to {company_name}! We're excited to work together. Through our client portal, "
    "you can send messages, upload files, review contracts, complete forms, and manage billing, "
    "all in one place."
)

TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "accounting": (
        "Welcome to {company_name}! We're here to keep your books and filings on track. "
        "Use this portal to message our team, upload documents, review engagement letters, "
        "complete forms, and manage billing in one organized place.",
        "Welcome to {company_name}! We look forward to handling your accounting with care. "
        "In this portal you can send messages, share files, sign contracts, pay invoices, "
        "and follow open tasks without chasing email threads.",
    ),
    "legal": (
        "Welcome to {company_name}! We want your legal matters to feel straightforward. "
        "Through this portal you can message your attorney, share documents, review agreements, "
        "complete intake forms, and follow the progress of your matter securely.",
        "Welcome to {company_name}! We're with you at every step of the legal process. "
        "Here you can send messages, upload files, review contracts, manage billing, "
        "and stay current on your case.",
    ),
    "marketing": (
        "Welcome to {company_name}! We're excited to grow your brand together. "
        "In this portal you can send messages, share creative assets, approve contracts, "
        "complete briefs, and track campaign milestones as work moves forward.",
        "Welcome to {company_name}! We can't wait to get your next campaign live. "
        "Use the portal to message the team, upload files, review contracts, manage billing, "
        "and keep an eye on project progress.",
    ),
    "consulting": (
        "Welcome to {company_name}! We're looking forward to working on your strategic priorities. "
        "Through this portal you can send messages, upload files, review contracts, complete forms, "
        "and manage billing in one place.",
        "Welcome to {company_name}! We're ready to help you reach your business goals. "
        "Here you can message our consultants, share documents, review agreements, and track "
        "deliverables as the engagement progresses.",
    ),
    "realestate": (
        "Welcome to {company_name}! We're here to make your property journey as smooth as possible. "
        "Use this portal to send messages, upload documents, review contracts, manage billing, "
        "and follow each step of your transaction.",
        "Welcome to {company_name}! We'll guide you from first showing to closing. "
        "In the portal you can message our agents, share paperwork, sign contracts, complete forms, "
        "and handle payments with ease.",
    ),
    "technology": (
        "Welcome to {company_name}! We're excited to build with you. "
        "Through this portal you can send messages, share files, review contracts, complete forms, "
        "and follow project progress in one place.",
        "Welcome to {company_name}! We're here to support your technical roadmap. "
        "Use the portal to message the team, exchange files, review agreements, manage billing, "
        "and stay on top of milestones.",
    ),
    "finance": (
        "Welcome to {company_name}! We're committed to helping you plan with confidence. "
        "In this portal you can send messages, upload statements, review agreements, manage billing, "
        "and keep track of your financial progress.",
        "Welcome to {company_name}! We're here to support your financial goals. "
        "Through the portal you can message your advisor, upload files, review contracts, "
        "complete forms, and keep everything organized.",
    ),
    "healthcare": (
        "Welcome to {company_name}! Your health and well-being come first. "
        "Through this portal you can message our staff, upload records, complete intake forms, "
        "review documents, and manage billing securely.",
        "Welcome to {company_name}! We want every visit to feel easy. "
        "Here you can send messages, share files, complete forms, pay bills, "
        "and stay connected with your care team.",
    ),
    "education": (
        "Welcome to {company_name}! We're excited to be part of your learning journey. "
        "Use this portal to send messages, upload assignments, complete forms, review materials, "
        "and track your progress.",
        "Welcome to {company_name}! We're here to help you get the most from every session. "
        "In the portal you can message instructors, share files, complete enrollment forms, "
        "manage billing, and find course resources.",
    ),
    "operations": (
        "Welcome to {company_name}! We're here to keep your operations running smoothly. "
        "Through this portal you can send messages, upload files, review contracts, complete forms, "
        "and manage billing in one place.",
        "Welcome to {company_name}! We're committed to keeping your requests on schedule. "
        "Use the portal to message our team, share documents, review agreements, manage billing, "
        "and follow open tasks.",
    ),
}


def _render(template: str, company_name: str) -> str:
    return template.replace("{company_name}", company_name)


def generate_welcome_message(
    company_name: str, discipline: str, confidence: float, domain: str
) -> WelcomeMessage:
    """Tailor the greeting to the discipline when the classifier is confident."""
    variants = TEMPLATES.get(discipline)
    if discipline == GENERIC or confidence < MIN_CONFIDENCE or not variants:
        return WelcomeMessage(text=_render(DEFAULT_TEMPLATE, company_name), source="default")
    key = normalize_domain(domain) or domain
    template = variants[stable_hash(key) % len(variants)]
    return WelcomeMessage(text=_render(template, company_name), source="discipline")
