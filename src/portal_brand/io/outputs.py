"""Output helpers for persisting portal results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

import pandas as pd

from .models import PortalResult

SUMMARY_COLUMNS = (
    "domain",
    "company_name",
    "discipline",
    "confidence",
    "accent",
    "sidebar_background",
    "sidebar_text",
    "login_source",
    "dashboard_source",
    "quality_gate_passed",
    "welcome_source",
)


def safe_label(domain: str) -> str:
    sanitized = "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in domain)
    return sanitized.strip("._-") or "site"


def write_portal_json(out_dir: Path, domain: str, result: PortalResult) -> Path:
    """Write the full result for *domain* as ``<domain>.portal.json`` and return the path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{safe_label(domain)}.portal.json"
    path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def summary_row(domain: str, result: PortalResult) -> Dict[str, Any]:
    data, raw = result.data, result.raw_outputs
    return {
        "domain": domain,
        "company_name": data.company_name,
        "discipline": raw.discipline_detection.discipline,
        "confidence": raw.discipline_detection.confidence,
        "accent": data.colors.accent,
        "sidebar_background": data.colors.sidebar_background,
        "sidebar_text": data.colors.sidebar_text,
        "login_source": raw.login_slot.source,
        "dashboard_source": raw.dashboard_slot.source,
        "quality_gate_passed": raw.quality_gate.passed,
        "welcome_source": raw.welcome_message_source,
    }


def write_summary_table(path: Path, rows: Sequence[Dict[str, Any]]) -> Path:
    """Write one row per site to a parquet table and return the path."""
    df = pd.DataFrame(list(rows), columns=list(SUMMARY_COLUMNS))
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False, engine="pyarrow")
    return path
